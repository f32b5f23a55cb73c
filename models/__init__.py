"""Public re-exports of all model types."""

from models.detection import (
    DetectionContext,
    DetectionOptions,
    DetectionResult,
    LabelMetadata,
    LabelSource,
    LabelSourceType,
)
from models.registry import RegistryEvent, RegistryEventType, RegistryStats
from models.request import LabelRequest
from models.resolution import (
    LabelCandidate,
    ResolutionStrategy,
    ResolvedLabel,
    ResolverConfig,
)
from models.response import ElementLabel, LabelResponse

__all__ = [
    # Detection
    "DetectionContext",
    "DetectionOptions",
    "DetectionResult",
    "LabelMetadata",
    "LabelSource",
    "LabelSourceType",
    # Resolution
    "LabelCandidate",
    "ResolutionStrategy",
    "ResolvedLabel",
    "ResolverConfig",
    # Catalog
    "RegistryEvent",
    "RegistryEventType",
    "RegistryStats",
    # Request/Response
    "LabelRequest",
    "LabelResponse",
    "ElementLabel",
]
