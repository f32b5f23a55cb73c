"""Detector capability contract and the behavior shared by all detectors.

A detector is any object exposing ``name``, ``priority``,
``base_confidence``, ``can_detect(context)`` and
``detect(context, options)``. Concrete detectors keep their own lookup
logic in a plain ``find(context, options)`` callable and route it through
``run_detector``, which applies the tag allow-list, the confidence floor
and label normalization uniformly so results from different detectors
stay comparable.

Priority bands (lower runs first):
    0-19 framework-specific, 20-39 ARIA / explicit association,
    40-59 common attributes and CSS frameworks, 60-79 proximity,
    80-99 text-content fallbacks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Union

from labels.errors import InvalidDetectorError
from models.detection import (
    DetectionContext,
    DetectionOptions,
    DetectionResult,
    LabelMetadata,
    LabelSource,
    LabelSourceType,
)

FindFn = Callable[[DetectionContext, DetectionOptions], Optional[DetectionResult]]

DEFAULT_DETECTION_OPTIONS = DetectionOptions()

CONFIDENCE_SCORES: dict[str, float] = {
    "google_forms": 0.95,
    "aria_label": 0.90,
    "aria_labelledby": 0.90,
    "label_for": 0.85,
    "ancestor_label": 0.80,
    "bootstrap": 0.75,
    "placeholder": 0.70,
    "material_ui": 0.70,
    "name_attribute": 0.65,
    "sibling": 0.60,
    "previous_text": 0.50,
    "parent_text": 0.40,
    "fallback": 0.20,
}

DETECTOR_PRIORITIES: dict[str, int] = {
    "framework": 10,
    "aria": 20,
    "label_association": 25,
    "attributes": 40,
    "css_framework": 50,
    "proximity": 60,
    "text_content": 80,
    "fallback": 90,
}

# Uninformative labels, matched against the trimmed lowercase text.
_GENERIC_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^(input|field|text|value|enter|type|select|choose|click)$"),
    re.compile(r"^(button|submit|form|required)$"),
    re.compile(r"^\*$"),
    re.compile(r"^\.{3,}$"),
]


class LabelDetector(Protocol):
    """Structural type every registered detector satisfies."""

    name: str
    priority: float
    base_confidence: float

    def can_detect(self, context: DetectionContext) -> bool: ...

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]: ...


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def _prepare_text(label: str, options: DetectionOptions) -> str:
    """Apply transform, whitespace collapse and trim, without truncating."""
    text = label
    if options.transform is not None:
        text = options.transform(text)
    if options.normalize_whitespace:
        text = re.sub(r"\s+", " ", text)
    if options.trim:
        text = text.strip()
    return text


def normalize_label(label: str, options: DetectionOptions) -> str:
    """Normalize *label* for comparison across detectors.

    Order: custom transform, whitespace collapse, trim, then truncation to
    ``options.max_length`` with a trailing ``"..."``.
    """
    if not label:
        return ""
    text = _prepare_text(label, options)
    if len(text) > options.max_length:
        text = text[: options.max_length - 3] + "..."
    return text


def is_generic_label(label: str) -> bool:
    """Return True for uninformative labels such as "Input" or "*"."""
    normalized = label.strip().lower()
    return any(p.match(normalized) for p in _GENERIC_PATTERNS)


def clean_label_text(text: str) -> str:
    """Strip the usual noise around label text.

    Removes "(required)" / "(optional)" markers, a trailing colon,
    leading and trailing asterisks, and collapses whitespace.
    """
    cleaned = re.sub(r"\s*\(required\)\s*", "", text, flags=re.IGNORECASE)
    cleaned = re.sub(r"\s*\(optional\)\s*", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r":\s*$", "", cleaned)
    cleaned = re.sub(r"\s*\*\s*$", "", cleaned)
    cleaned = re.sub(r"^\s*\*\s*", "", cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


def adjust_confidence(
    base_confidence: float,
    label: str,
    *,
    length_bonus: bool = False,
    short_penalty: bool = False,
    generic_penalty: bool = False,
    exact_match_bonus: bool = False,
) -> float:
    """Adjust a base confidence by label quality.

    Factors compose and are applied in a fixed order: length bonus
    (+0.05 for 3-50 chars), short penalty (-0.10 under 3 chars), generic
    penalty (-0.15), exact-match bonus (+0.10). The result stays in [0, 1].
    """
    confidence = base_confidence
    length = len(label)

    if length_bonus and 3 <= length <= 50:
        confidence = min(1.0, confidence + 0.05)

    if short_penalty and length < 3:
        confidence = max(0.0, confidence - 0.1)

    if generic_penalty and is_generic_label(label):
        confidence = max(0.0, confidence - 0.15)

    if exact_match_bonus:
        confidence = min(1.0, confidence + 0.1)

    return confidence


def merge_detection_options(
    options: Union[DetectionOptions, Mapping[str, Any], None] = None,
) -> DetectionOptions:
    """Merge a partial options mapping over ``DEFAULT_DETECTION_OPTIONS``."""
    if options is None:
        return DEFAULT_DETECTION_OPTIONS
    if isinstance(options, DetectionOptions):
        return options
    return DetectionOptions.model_validate(
        {**DEFAULT_DETECTION_OPTIONS.model_dump(), **dict(options)}
    )


def element_tag(element: Any) -> str:
    """Lowercase tag name of an opaque element handle, or ``""``."""
    name = getattr(element, "name", None) or getattr(element, "tag_name", None)
    return name.lower() if isinstance(name, str) else ""


# ---------------------------------------------------------------------------
# Result construction and the shared detect wrapper
# ---------------------------------------------------------------------------


def make_result(
    strategy: str,
    label: str,
    source_type: LabelSourceType,
    confidence: float,
    options: DetectionOptions = DEFAULT_DETECTION_OPTIONS,
    *,
    element: Any = None,
    attribute: Optional[str] = None,
    selector: Optional[str] = None,
    framework: Optional[str] = None,
    xpath: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> DetectionResult:
    """Build a ``DetectionResult`` with provenance metadata filled in."""
    prepared = _prepare_text(label, options)
    return DetectionResult(
        label=normalize_label(label, options),
        confidence=confidence,
        strategy=strategy,
        source=LabelSource(
            element=element,
            type=source_type,
            xpath=xpath,
            attribute=attribute,
        ),
        metadata=LabelMetadata(
            raw_text=label,
            truncated=len(prepared) > options.max_length,
            original_length=len(label),
            selector=selector,
            framework=framework,
            extra=extra or {},
        ),
    )


def run_detector(
    find: FindFn,
    context: DetectionContext,
    options: DetectionOptions,
    *,
    supported_elements: Iterable[str] = (),
) -> Optional[DetectionResult]:
    """Run detector-specific *find* logic under the shared validation rules.

    1. Short-circuit when the target tag is outside *supported_elements*.
    2. Drop results below ``options.min_confidence``.
    3. Re-normalize the label and drop it when empty.
    """
    allowed = {tag.lower() for tag in supported_elements}
    if allowed and element_tag(context.element) not in allowed:
        return None

    result = find(context, options)
    if result is None:
        return None

    if result.confidence < options.min_confidence:
        return None

    label = normalize_label(result.label, options)
    if not label.strip():
        return None

    return result.model_copy(update={"label": label})


def _always(context: DetectionContext) -> bool:  # noqa: ARG001
    return True


@dataclass
class FunctionDetector:
    """Detector composed from plain functions instead of a class.

    ``find`` holds the lookup logic and is wrapped by ``run_detector``;
    ``applies`` is the cheap pre-check behind ``can_detect``.
    """

    name: str
    priority: float
    base_confidence: float
    find: FindFn
    applies: Callable[[DetectionContext], bool] = _always
    description: Optional[str] = None
    supported_elements: tuple[str, ...] = field(default_factory=tuple)

    def can_detect(self, context: DetectionContext) -> bool:
        return self.applies(context)

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(
            self.find,
            context,
            options,
            supported_elements=self.supported_elements,
        )


# ---------------------------------------------------------------------------
# Structural checks (registration boundary only)
# ---------------------------------------------------------------------------


def validate_detector(obj: Any) -> LabelDetector:
    """Check that *obj* satisfies the detector contract.

    Returns *obj* unchanged.

    Raises:
        InvalidDetectorError: Listing every missing or mistyped member.
    """
    problems: list[str] = []

    name = getattr(obj, "name", None)
    if not isinstance(name, str) or not name:
        problems.append("name must be a non-empty string")

    for attr in ("priority", "base_confidence"):
        value = getattr(obj, attr, None)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            problems.append(f"{attr} must be a number")

    confidence = getattr(obj, "base_confidence", None)
    if isinstance(confidence, (int, float)) and not 0.0 <= confidence <= 1.0:
        problems.append("base_confidence must be within [0, 1]")

    for method in ("can_detect", "detect"):
        if not callable(getattr(obj, method, None)):
            problems.append(f"{method}() must be callable")

    if problems:
        raise InvalidDetectorError(
            f"{obj!r} is not a label detector: {'; '.join(problems)}"
        )
    return obj


def is_detection_result(value: Any) -> bool:
    """Return True if *value* is a well-formed ``DetectionResult``."""
    return (
        isinstance(value, DetectionResult)
        and isinstance(value.label, str)
        and 0.0 <= value.confidence <= 1.0
        and bool(value.strategy)
    )
