"""Resolver configuration, candidates and outcomes."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models.detection import DetectionResult


class ResolutionStrategy(str, Enum):
    """How the resolver picks a winner among candidates."""

    FIRST_MATCH = "first-match"
    BEST_CONFIDENCE = "best-confidence"
    PRIORITY_WEIGHTED = "priority-weighted"


class LabelCandidate(BaseModel):
    """A detector result annotated with its effective priority and score."""

    label: str
    confidence: float
    detector_name: str
    detector_priority: float
    result: DetectionResult
    weighted_score: Optional[float] = None


class ResolvedLabel(BaseModel):
    """Outcome of one resolution call.

    ``candidates`` always holds the unfiltered candidate list, including
    on unsuccessful resolutions, so callers can see what was rejected.
    """

    label: str
    confidence: float
    detector_name: str
    strategy: ResolutionStrategy
    success: bool
    candidates: list[LabelCandidate] = Field(default_factory=list)
    detectors_run: int = 0
    detectors_succeeded: int = 0
    duration_ms: float = 0.0
    result: Optional[DetectionResult] = None


class ResolverConfig(BaseModel):
    """Resolver tunables. Every field is optional with a documented default.

    ``detection_options`` is a partial mapping of ``DetectionOptions``
    fields, merged over the defaults on every call.
    """

    model_config = ConfigDict(extra="forbid")

    strategy: ResolutionStrategy = ResolutionStrategy.BEST_CONFIDENCE
    min_confidence: float = Field(default=0.30, ge=0.0, le=1.0)
    max_detectors: Optional[int] = Field(default=None, ge=0)
    stop_on_first_match: bool = False
    detection_options: dict[str, Any] = Field(default_factory=dict)
    priority_weight: float = Field(default=0.1, ge=0.0)
    fallback_label: str = "Unlabeled"

    def merged(
        self, overrides: Union["ResolverConfig", Mapping[str, Any], None]
    ) -> "ResolverConfig":
        """Return a copy with *overrides* applied field by field.

        Only fields explicitly present in *overrides* replace the current
        values; ``detection_options`` is merged key by key.
        """
        if overrides is None:
            return self.model_copy(deep=True)
        if isinstance(overrides, ResolverConfig):
            patch = {
                name: getattr(overrides, name)
                for name in overrides.model_fields_set
            }
        else:
            patch = dict(overrides)

        data = {name: getattr(self, name) for name in type(self).model_fields}
        data["detection_options"] = dict(self.detection_options)
        for name, value in patch.items():
            if name == "detection_options" and value is not None:
                data["detection_options"].update(value)
            else:
                data[name] = value
        return ResolverConfig.model_validate(data)

    @property
    def effective_strategy(self) -> ResolutionStrategy:
        """Strategy actually executed; ``stop_on_first_match`` implies first-match."""
        if self.stop_on_first_match:
            return ResolutionStrategy.FIRST_MATCH
        return self.strategy
