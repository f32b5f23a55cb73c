"""Built-in label detectors and their factories."""

from __future__ import annotations

from typing import Callable, Optional

from detectors.aria import AriaLabelDetector
from detectors.associated import AssociatedLabelDetector
from detectors.bootstrap import BootstrapDetector
from detectors.google_forms import GoogleFormsDetector
from detectors.material_ui import MaterialUIDetector
from detectors.placeholder import PlaceholderDetector
from detectors.sibling import SiblingDetector
from detectors.text_content import TextContentDetector
from labels.contract import LabelDetector

# Registration order of the default catalog.
_BUILTIN: dict[str, Callable[[], LabelDetector]] = {
    "google-forms": GoogleFormsDetector,
    "aria-label": AriaLabelDetector,
    "associated-label": AssociatedLabelDetector,
    "placeholder": PlaceholderDetector,
    "bootstrap": BootstrapDetector,
    "material-ui": MaterialUIDetector,
    "sibling": SiblingDetector,
    "text-content": TextContentDetector,
}

DEFAULT_DETECTOR_NAMES: tuple[str, ...] = tuple(_BUILTIN)


def create_default_detectors() -> list[LabelDetector]:
    """Fresh instances of every built-in detector."""
    return [factory() for factory in _BUILTIN.values()]


def create_detector_by_name(name: str) -> Optional[LabelDetector]:
    """Fresh built-in detector called *name*, or None when there is none."""
    factory = _BUILTIN.get(name)
    return factory() if factory is not None else None


__all__ = [
    "AriaLabelDetector",
    "AssociatedLabelDetector",
    "BootstrapDetector",
    "GoogleFormsDetector",
    "MaterialUIDetector",
    "PlaceholderDetector",
    "SiblingDetector",
    "TextContentDetector",
    "DEFAULT_DETECTOR_NAMES",
    "create_default_detectors",
    "create_detector_by_name",
]
