"""Fallback detector deriving labels from names, values and nearby text."""

from __future__ import annotations

import re
from typing import Optional

from bs4 import Comment, NavigableString, Tag

from labels.contract import (
    DETECTOR_PRIORITIES,
    adjust_confidence,
    clean_label_text,
    is_generic_label,
    make_result,
    run_detector,
)
from models.detection import DetectionContext, DetectionOptions, DetectionResult
from parsing.filtering import visible_text
from parsing.labels import attr_str, norm_ws
from parsing.selectors import element_xpath

TEXT_CONTENT_CONFIDENCE = {
    "name_attribute": 0.65,
    "value_attribute": 0.55,
    "title_attribute": 0.50,
    "previous_text": 0.50,
    "self_text": 0.40,
    "parent_text": 0.35,
}

MAX_LABEL_LENGTH = 100
MIN_LABEL_LENGTH = 2

EXCLUDED_TAGS = {
    "script", "style", "noscript", "template", "svg", "canvas", "video", "audio",
    "iframe", "object", "embed",
}

INTERACTIVE_TAGS = {"input", "select", "textarea", "button", "a"}

NON_LABEL_PATTERNS = [
    re.compile(r"^\d+$"),
    re.compile(r"^[.\-_\s]+$"),
    re.compile(r"^https?://", re.IGNORECASE),
    re.compile(r"^[a-f0-9-]{32,}$", re.IGNORECASE),
    re.compile(r"^\s*$"),
    re.compile(r"^(true|false|null|undefined|none)$", re.IGNORECASE),
    re.compile(r"^[\[\]{}()<>]+$"),
]

NON_LABEL_WORDS = {
    "loading", "please wait", "error", "success", "warning", "info", "close",
    "dismiss", "ok", "cancel", "yes", "no", "more", "less", "show", "hide",
    "expand", "collapse",
}

_INLINE_TEXT_TAGS = {"span", "div", "p", "strong", "b", "em", "i", "small"}
_PAGE_CONTAINERS = {"body", "html", "main", "article", "section", "form", "[document]"}

_QUALITY = {"length_bonus": True, "short_penalty": True, "generic_penalty": True}


def is_valid_label(text: str) -> bool:
    """Reject text too short, too long or obviously not a label."""
    if not MIN_LABEL_LENGTH <= len(text) <= MAX_LABEL_LENGTH:
        return False
    if any(p.search(text) for p in NON_LABEL_PATTERNS):
        return False
    if text.lower().strip() in NON_LABEL_WORDS:
        return False
    return not is_generic_label(text)


def name_to_label(name: str) -> str:
    """``"firstName"`` / ``"first_name"`` -> ``"First Name"``."""
    if re.fullmatch(r"[a-z0-9]{20,}", name, re.IGNORECASE):
        return ""
    if re.fullmatch(r"[\d_\-\[\]]+", name):
        return ""
    text = re.sub(r"([a-z])([A-Z])", r"\1 \2", name)
    text = re.sub(r"[_\-.]+", " ", text)
    text = re.sub(r"\[\d+\]", "", text)
    return " ".join(w[:1].upper() + w[1:].lower() for w in text.split())


class TextContentDetector:
    """Last-resort labels from attributes and surrounding text."""

    name = "text-content"
    priority = DETECTOR_PRIORITIES["text_content"]
    base_confidence = TEXT_CONTENT_CONFIDENCE["self_text"]
    description = "Fallback detector that extracts labels from text content"
    supported_elements: tuple[str, ...] = ()

    def can_detect(self, context: DetectionContext) -> bool:
        el = context.element
        if not isinstance(el, Tag) or el.name in EXCLUDED_TAGS:
            return False
        return not (el.name == "input" and attr_str(el, "type").lower() == "hidden")

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(self._find, context, options)

    def _find(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el = context.element
        return (
            self._name_attribute(el, options)
            or self._value_attribute(el, options)
            or self._title_attribute(el, options)
            or self._previous_text(el, options)
            or self._self_text(el, options)
            or self._parent_text(el, options)
        )

    def _name_attribute(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        raw = attr_str(el, "name")
        label = name_to_label(raw) if raw else ""
        if not label or not is_valid_label(label):
            return None
        return make_result(
            self.name,
            label,
            "attribute",
            adjust_confidence(TEXT_CONTENT_CONFIDENCE["name_attribute"], label, **_QUALITY),
            options,
            element=el,
            attribute="name",
            extra={"original_name": raw, "transformed": label != raw},
        )

    def _value_attribute(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        input_type = attr_str(el, "type").lower()
        if el.name != "input" or input_type not in {"submit", "reset", "button"}:
            return None
        value = attr_str(el, "value")
        if not value or not is_valid_label(value):
            return None
        label = clean_label_text(value)
        if not label:
            return None
        return make_result(
            self.name,
            label,
            "attribute",
            adjust_confidence(
                TEXT_CONTENT_CONFIDENCE["value_attribute"],
                label,
                length_bonus=True,
                generic_penalty=True,
            ),
            options,
            element=el,
            attribute="value",
            extra={"input_type": input_type},
        )

    def _title_attribute(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        label = clean_label_text(attr_str(el, "title"))
        if not label or not is_valid_label(label):
            return None
        return make_result(
            self.name,
            label,
            "attribute",
            adjust_confidence(
                TEXT_CONTENT_CONFIDENCE["title_attribute"],
                label,
                length_bonus=True,
                generic_penalty=True,
            ),
            options,
            element=el,
            attribute="title",
            extra={"is_tooltip": True},
        )

    def _previous_text(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        sibling = el.previous_sibling
        while sibling is not None:
            if isinstance(sibling, NavigableString) and not isinstance(sibling, Comment):
                text = sibling.strip()
                label = clean_label_text(text) if text and is_valid_label(text) else ""
                if label:
                    return make_result(
                        self.name,
                        label,
                        "sibling",
                        adjust_confidence(
                            TEXT_CONTENT_CONFIDENCE["previous_text"], label, **_QUALITY
                        ),
                        options,
                        extra={"source_type": "text-node", "position": "previous"},
                    )
            elif isinstance(sibling, Tag):
                if sibling.name in _INLINE_TEXT_TAGS:
                    text = visible_text(sibling)
                    if text and len(text) <= 50 and is_valid_label(text):
                        label = clean_label_text(text)
                        if label:
                            return make_result(
                                self.name,
                                label,
                                "sibling",
                                adjust_confidence(
                                    TEXT_CONTENT_CONFIDENCE["previous_text"] - 0.05,
                                    label,
                                    length_bonus=True,
                                    generic_penalty=True,
                                ),
                                options,
                                element=sibling,
                                xpath=element_xpath(sibling),
                                extra={"source_type": "element", "source_tag": sibling.name},
                            )
                break
            sibling = sibling.previous_sibling
        return None

    def _self_text(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        if el.name in {"input", "select", "textarea"}:
            return None
        text = visible_text(el, skip_tags=INTERACTIVE_TAGS | EXCLUDED_TAGS)
        if not text or not is_valid_label(text):
            return None
        label = clean_label_text(text)
        if not label:
            return None

        base = TEXT_CONTENT_CONFIDENCE["self_text"]
        if el.name in {"button", "a"}:
            base += 0.10
        if re.fullmatch(r"h[1-6]", el.name or ""):
            base += 0.05
        return make_result(
            self.name,
            label,
            "text-content",
            adjust_confidence(base, label, **_QUALITY),
            options,
            element=el,
            extra={"element_tag": el.name},
        )

    def _parent_text(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        parent = el.parent
        if not isinstance(parent, Tag) or parent.name in _PAGE_CONTAINERS:
            return None

        parts: list[str] = []
        for child in parent.children:
            if child is el or isinstance(child, Comment):
                continue
            if isinstance(child, Tag):
                if child.name in INTERACTIVE_TAGS or child.name in EXCLUDED_TAGS:
                    continue
                if any(d is el for d in child.descendants):
                    continue
                text = norm_ws(child.get_text(" "))
            else:
                text = norm_ws(str(child))
            if text and len(text) <= 50:
                parts.append(text)

        text = " ".join(parts).strip()
        if not text or not is_valid_label(text):
            return None
        label = clean_label_text(text)
        if not label:
            return None
        return make_result(
            self.name,
            label,
            "ancestor",
            adjust_confidence(TEXT_CONTENT_CONFIDENCE["parent_text"], label, **_QUALITY),
            options,
            element=parent,
            xpath=element_xpath(parent),
            extra={"parent_tag": parent.name},
        )
