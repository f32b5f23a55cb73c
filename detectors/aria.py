"""ARIA attribute detector (aria-labelledby, aria-label and friends)."""

from __future__ import annotations

import re
from typing import Any, Optional

from bs4 import Tag

from labels.contract import (
    CONFIDENCE_SCORES,
    DETECTOR_PRIORITIES,
    adjust_confidence,
    clean_label_text,
    make_result,
    run_detector,
)
from models.detection import DetectionContext, DetectionOptions, DetectionResult
from parsing.filtering import visible_text
from parsing.labels import attr_str
from parsing.selectors import element_xpath

ARIA_CONFIDENCE = {
    "labelledby": 0.90,
    "label": 0.90,
    "describedby": 0.75,
    "placeholder": 0.70,
    "role_inferred": 0.65,
}

ARIA_ATTRIBUTES = ("aria-labelledby", "aria-label", "aria-describedby", "aria-placeholder")

ROLES_WITH_TEXT_LABELS = {
    "button", "link", "menuitem", "tab", "option", "treeitem", "listitem", "heading",
}

_IMPLICIT_ROLES = {
    "button": "button",
    "a": "link",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "li": "listitem",
    "option": "option",
}

_INPUT_BUTTON_TYPES = {"button", "submit", "reset"}

_QUALITY = {"length_bonus": True, "short_penalty": True, "generic_penalty": True}


def find_by_id(context: DetectionContext, el_id: str) -> Optional[Tag]:
    """Look *el_id* up in the element's shadow root first, then the document."""
    for root in (context.shadow_root, context.document):
        if isinstance(root, Tag):
            found = root.find(id=el_id)
            if found is not None:
                return found
    return None


def referenced_text(el: Tag) -> str:
    """Text a referenced element contributes to an accessible name."""
    if el.name == "input":
        return attr_str(el, "value") or attr_str(el, "placeholder")
    if el.name == "img":
        return attr_str(el, "alt")
    return visible_text(el)


def first_phrase(text: str) -> str:
    """First sentence or clause of a description, at most about 50 chars."""
    sentence = re.search(r"[.!?]\s", text)
    if sentence and 0 < sentence.start() < 100:
        return text[: sentence.start() + 1]
    clause = re.search(r"[,;:]\s", text)
    if clause and 0 < clause.start() < 50:
        return text[: clause.start()]
    if len(text) > 50:
        word_break = text.rfind(" ", 0, 51)
        if word_break > 20:
            return text[:word_break]
        return text[:50]
    return text


def implicit_role(el: Tag) -> Optional[str]:
    if el.name == "input":
        input_type = attr_str(el, "type").lower() or "text"
        return "button" if input_type in _INPUT_BUTTON_TYPES else None
    return _IMPLICIT_ROLES.get(el.name or "")


class AriaLabelDetector:
    """Labels from ARIA attributes, then from text of roles named by content."""

    name = "aria-label"
    priority = DETECTOR_PRIORITIES["aria"]
    base_confidence = CONFIDENCE_SCORES["aria_label"]
    description = "Detects labels from ARIA accessibility attributes"
    supported_elements: tuple[str, ...] = ()

    def can_detect(self, context: DetectionContext) -> bool:
        el = context.element
        if not isinstance(el, Tag):
            return False
        if any(el.has_attr(attr) for attr in ARIA_ATTRIBUTES):
            return True
        return attr_str(el, "role") in ROLES_WITH_TEXT_LABELS

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(self._find, context, options)

    def _find(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el = context.element
        return (
            self._references(context, el, "aria-labelledby", options)
            or self._attribute(el, "aria-label", ARIA_CONFIDENCE["label"], options)
            or self._references(context, el, "aria-describedby", options)
            or self._attribute(el, "aria-placeholder", ARIA_CONFIDENCE["placeholder"], options)
            or self._role_text(el, options)
        )

    def _references(
        self,
        context: DetectionContext,
        el: Tag,
        attribute: str,
        options: DetectionOptions,
    ) -> Optional[DetectionResult]:
        ids = attr_str(el, attribute).split()
        if not ids:
            return None

        parts: list[str] = []
        sources: list[Tag] = []
        for ref_id in ids:
            ref = find_by_id(context, ref_id)
            if ref is None:
                continue
            text = referenced_text(ref)
            if text:
                parts.append(text)
                sources.append(ref)
        if not parts:
            return None

        describing = attribute == "aria-describedby"
        text = " ".join(parts)
        label = clean_label_text(first_phrase(text) if describing else text)
        if not label:
            return None

        base = ARIA_CONFIDENCE["describedby" if describing else "labelledby"]
        ratio = len(sources) / len(ids)
        confidence = adjust_confidence(base, label, **_QUALITY) * ratio
        extra: dict[str, Any] = {
            "referenced_ids": ids,
            "resolved_count": len(sources),
            "total_count": len(ids),
        }
        if describing:
            extra["is_description"] = True
        return make_result(
            self.name,
            label,
            "associated",
            confidence,
            options,
            element=sources[0],
            attribute=attribute,
            selector=", ".join(f"#{i}" for i in ids),
            xpath=element_xpath(sources[0]),
            extra=extra,
        )

    def _attribute(
        self, el: Tag, attribute: str, base: float, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        label = clean_label_text(attr_str(el, attribute))
        if not label:
            return None
        return make_result(
            self.name,
            label,
            "attribute",
            adjust_confidence(base, label, **_QUALITY),
            options,
            element=el,
            attribute=attribute,
        )

    def _role_text(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        role = attr_str(el, "role") or implicit_role(el)
        if role not in ROLES_WITH_TEXT_LABELS:
            return None

        text = visible_text(el) or (attr_str(el, "value") if el.name == "input" else "")
        label = clean_label_text(text)
        if not label:
            return None

        confidence = adjust_confidence(
            ARIA_CONFIDENCE["role_inferred"],
            label,
            exact_match_bonus=len(label) <= 30,
            **_QUALITY,
        )
        return make_result(
            self.name,
            label,
            "text-content",
            confidence,
            options,
            element=el,
            extra={"role": role, "inferred_from_role": True},
        )
