"""Placeholder, data-placeholder and title attribute detector."""

from __future__ import annotations

import re
from typing import Optional

from bs4 import Tag

from labels.contract import (
    CONFIDENCE_SCORES,
    DETECTOR_PRIORITIES,
    clean_label_text,
    is_generic_label,
    make_result,
    run_detector,
)
from models.detection import DetectionContext, DetectionOptions, DetectionResult
from parsing.labels import attr_str

PLACEHOLDER_CONFIDENCE = {
    "placeholder": 0.70,
    "data_placeholder": 0.65,
    "title": 0.60,
    "minimum": 0.30,
}

NON_PLACEHOLDER_INPUT_TYPES = {
    "hidden", "checkbox", "radio", "file", "submit", "reset", "button", "image",
    "color", "date", "datetime-local", "month", "week", "time", "range",
}

DATA_PLACEHOLDER_ATTRIBUTES = ("data-placeholder", "data-original-placeholder", "data-label")

INSTRUCTIONAL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^enter\s", r"^type\s", r"^input\s", r"^write\s", r"^fill\s", r"^add\s",
        r"^search\s", r"^find\s", r"here$", r"\.{2,}$", r"^select\s", r"^choose\s",
        r"^click\s",
    )
]

GENERIC_PLACEHOLDERS = {
    "enter text", "type here", "enter value", "enter", "type", "search", "find",
    "...", "text", "value", "input",
}

EXAMPLE_PATTERNS = [
    re.compile(r"^e\.?g\.?\s", re.IGNORECASE),
    re.compile(r"^ex\.?\s", re.IGNORECASE),
    re.compile(r"^example:", re.IGNORECASE),
    re.compile(r"^for example", re.IGNORECASE),
    re.compile(r"@.*\.[a-z]{2,}", re.IGNORECASE),
    re.compile(r"^\d{3}[-.\s]?\d{3}"),
    re.compile(r"^https?://", re.IGNORECASE),
]

# Applied in order; each strips one instruction prefix or suffix.
_INSTRUCTION_STRIPS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^enter\s+(your\s+)?",
        r"^type\s+(your\s+)?",
        r"^input\s+(your\s+)?",
        r"^write\s+(your\s+)?",
        r"^fill\s+(in\s+)?(your\s+)?",
        r"^add\s+(your\s+)?",
        r"^search\s+(for\s+)?",
        r"^find\s+",
        r"^select\s+(a\s+|your\s+)?",
        r"^choose\s+(a\s+|your\s+)?",
        r"\s+here$",
        r"\s*\.{2,}$",
        r"\s*\.$",
    )
]

_EXAMPLE_PREFIXES = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^e\.?g\.?\s*:?\s*",
        r"^ex\.?\s*:?\s*",
        r"^example\s*:?\s*",
        r"^for example\s*:?\s*",
    )
]


def is_instructional(text: str) -> bool:
    return any(p.search(text) for p in INSTRUCTIONAL_PATTERNS)


def is_example(text: str) -> bool:
    return any(p.search(text) for p in EXAMPLE_PATTERNS)


def is_generic_placeholder(text: str) -> bool:
    normalized = text.lower().strip()
    return normalized in GENERIC_PLACEHOLDERS or bool(re.fullmatch(r"[.\-_\s]+", normalized))


def extract_label_from_instruction(text: str) -> str:
    """``"Enter your email here"`` -> ``"email"``."""
    label = text
    for pattern in _INSTRUCTION_STRIPS:
        label = pattern.sub("", label, count=1)
    return label.strip()


def clean_placeholder_text(text: str) -> str:
    cleaned = clean_label_text(text)
    for pattern in _EXAMPLE_PREFIXES:
        cleaned = pattern.sub("", cleaned, count=1)
    if is_instructional(cleaned):
        extracted = extract_label_from_instruction(cleaned)
        if extracted:
            cleaned = extracted
    return cleaned.strip()


def placeholder_confidence(text: str, base: float) -> float:
    """Score a cleaned placeholder; never below ``PLACEHOLDER_CONFIDENCE["minimum"]``."""
    confidence = base
    if is_generic_placeholder(text):
        confidence -= 0.15
    if is_instructional(text):
        extracted = extract_label_from_instruction(text)
        confidence -= 0.05 if extracted and extracted != text else 0.10
    if is_example(text):
        confidence += 0.05
    if 3 <= len(text) <= 30:
        confidence += 0.02
    if len(text) < 3:
        confidence -= 0.10
    if len(text) > 50:
        confidence -= 0.10
    if is_generic_label(text):
        confidence -= 0.10
    return max(PLACEHOLDER_CONFIDENCE["minimum"], min(1.0, confidence))


class PlaceholderDetector:
    """Labels from placeholder-like attributes of text inputs and textareas."""

    name = "placeholder"
    priority = DETECTOR_PRIORITIES["attributes"]
    base_confidence = CONFIDENCE_SCORES["placeholder"]
    description = "Detects labels from placeholder attributes on form inputs"
    supported_elements = ("input", "textarea")

    def can_detect(self, context: DetectionContext) -> bool:
        el = context.element
        if not isinstance(el, Tag):
            return False
        if el.name not in self.supported_elements and not (
            el.has_attr("placeholder") or el.has_attr("data-placeholder")
        ):
            return False
        if el.name == "input":
            input_type = attr_str(el, "type").lower() or "text"
            if input_type in NON_PLACEHOLDER_INPUT_TYPES:
                return False
        return any(el.has_attr(a) for a in ("placeholder", "data-placeholder", "title"))

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(
            self._find, context, options, supported_elements=self.supported_elements
        )

    def _find(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el = context.element

        raw = attr_str(el, "placeholder")
        label = clean_placeholder_text(raw) if raw else ""
        if label:
            return make_result(
                self.name,
                label,
                "attribute",
                placeholder_confidence(label, PLACEHOLDER_CONFIDENCE["placeholder"]),
                options,
                element=el,
                attribute="placeholder",
                extra={
                    "is_instructional": is_instructional(raw),
                    "is_example": is_example(raw),
                },
            )

        for attribute in DATA_PLACEHOLDER_ATTRIBUTES:
            value = attr_str(el, attribute)
            label = clean_placeholder_text(value) if value else ""
            if label:
                return make_result(
                    self.name,
                    label,
                    "attribute",
                    placeholder_confidence(label, PLACEHOLDER_CONFIDENCE["data_placeholder"]),
                    options,
                    element=el,
                    attribute=attribute,
                )

        title = attr_str(el, "title")
        label = clean_placeholder_text(title) if title else ""
        if label:
            return make_result(
                self.name,
                label,
                "attribute",
                placeholder_confidence(label, PLACEHOLDER_CONFIDENCE["title"]),
                options,
                element=el,
                attribute="title",
                extra={"is_tooltip": True},
            )
        return None
