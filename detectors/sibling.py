"""Proximity detector: label-like siblings, text nodes and table cells."""

from __future__ import annotations

from typing import Optional

from bs4 import NavigableString, Tag

from labels.contract import (
    CONFIDENCE_SCORES,
    DETECTOR_PRIORITIES,
    adjust_confidence,
    clean_label_text,
    make_result,
    run_detector,
)
from models.detection import DetectionContext, DetectionOptions, DetectionResult
from parsing.filtering import is_hidden, visible_text
from parsing.labels import next_element, previous_element
from parsing.selectors import css_descriptor, element_xpath

SIBLING_CONFIDENCE = {
    "previous_label": 0.60,
    "previous_text_element": 0.60,
    "next_label": 0.55,
    "previous_text_node": 0.50,
    "wrapper_sibling": 0.55,
    "table_cell": 0.60,
    "minimum": 0.25,
}

LABEL_ELEMENTS = {
    "label", "span", "div", "p", "strong", "b", "em", "i", "small", "legend", "th", "dt",
}

INTERACTIVE_ELEMENTS = {
    "input", "select", "textarea", "button", "a", "video", "audio", "iframe", "object", "embed",
}

WRAPPER_ELEMENTS = {"div", "span", "p", "td", "li", "dd"}

MAX_LABEL_LENGTH = 100
MAX_SIBLINGS_TO_CHECK = 5
MAX_WRAPPER_LEVELS = 3


def _position(items: list, target: Tag) -> int:
    for i, item in enumerate(items):
        if item is target:
            return i
    return -1


def _has_interactive_child(el: Tag) -> bool:
    return el.find(sorted(INTERACTIVE_ELEMENTS)) is not None


def _distance_confidence(base: float, distance: int, label: str) -> float:
    """Decay *base* by 0.05 per step beyond the nearest sibling."""
    confidence = base - (distance - 1) * 0.05
    confidence = adjust_confidence(confidence, label, length_bonus=True, generic_penalty=True)
    return max(confidence, SIBLING_CONFIDENCE["minimum"])


class SiblingDetector:
    """Labels from elements and text positioned next to the control."""

    name = "sibling"
    priority = DETECTOR_PRIORITIES["proximity"]
    base_confidence = CONFIDENCE_SCORES["sibling"]
    description = "Detects labels from sibling elements using DOM proximity"
    supported_elements: tuple[str, ...] = ()

    def can_detect(self, context: DetectionContext) -> bool:
        el = context.element
        if not isinstance(el, Tag) or el.parent is None:
            return False
        return len(el.parent.contents) > 1

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(self._find, context, options)

    def _find(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el = context.element
        return (
            self._previous_sibling(el, options)
            or self._previous_text_node(el, options)
            or self._table_cell(el, options)
            or self._next_sibling(el, options)
            or self._wrapper_sibling(el, options)
        )

    def _from_element(
        self,
        el: Tag,
        distance: int,
        direction: str,
        options: DetectionOptions,
    ) -> Optional[DetectionResult]:
        text = visible_text(el)
        if not text or len(text) > MAX_LABEL_LENGTH:
            return None
        label = clean_label_text(text)
        if not label:
            return None
        base = SIBLING_CONFIDENCE[
            "previous_label" if el.name == "label" else "previous_text_element"
        ]
        return make_result(
            self.name,
            label,
            "proximity",
            _distance_confidence(base, distance, label),
            options,
            element=el,
            selector=css_descriptor(el),
            xpath=element_xpath(el),
            extra={"sibling_type": el.name, "direction": direction, "distance": distance},
        )

    def _label_child(self, el: Tag) -> Optional[Tag]:
        if len(el.find_all(True, recursive=False)) > 5:
            return None
        for tag in ("label", "span", "strong", "b"):
            child = el.find(tag)
            if child is not None and not _has_interactive_child(child):
                text = visible_text(child)
                if text and len(text) <= MAX_LABEL_LENGTH:
                    return child
        return None

    def _previous_sibling(
        self, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        sibling = previous_element(el)
        distance = 0
        while sibling is not None and distance < MAX_SIBLINGS_TO_CHECK:
            distance += 1
            if sibling.name not in INTERACTIVE_ELEMENTS and not is_hidden(sibling):
                if sibling.name in LABEL_ELEMENTS:
                    result = self._from_element(sibling, distance, "previous", options)
                    if result:
                        return result
                child = self._label_child(sibling)
                if child is not None:
                    result = self._from_element(child, distance, "previous-nested", options)
                    if result:
                        return result
            sibling = previous_element(sibling)
        return None

    def _previous_text_node(
        self, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        if el.parent is None:
            return None
        children = list(el.parent.contents)
        index = _position(children, el)
        if index <= 0:
            return None

        for i in range(index - 1, max(-1, index - 1 - MAX_SIBLINGS_TO_CHECK), -1):
            node = children[i]
            if isinstance(node, NavigableString):
                text = node.strip()
                if text and len(text) <= MAX_LABEL_LENGTH:
                    stripped = text.rstrip(":*").strip()
                    label = clean_label_text(stripped) if len(stripped) >= 2 else ""
                    if label:
                        distance = index - i
                        return make_result(
                            self.name,
                            label,
                            "proximity",
                            _distance_confidence(
                                SIBLING_CONFIDENCE["previous_text_node"], distance, label
                            ),
                            options,
                            element=el,
                            extra={
                                "sibling_type": "text-node",
                                "direction": "previous",
                                "distance": distance,
                            },
                        )
            elif isinstance(node, Tag) and node.name in INTERACTIVE_ELEMENTS:
                break
        return None

    def _next_sibling(
        self, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        sibling = next_element(el)
        distance = 0
        while sibling is not None and distance < MAX_SIBLINGS_TO_CHECK:
            distance += 1
            if (
                sibling.name not in INTERACTIVE_ELEMENTS
                and not is_hidden(sibling)
                and sibling.name in {"label", "span"}
            ):
                result = self._from_element(sibling, distance, "next", options)
                if result:
                    confidence = max(
                        result.confidence - 0.05, SIBLING_CONFIDENCE["minimum"]
                    )
                    return result.model_copy(update={"confidence": confidence})
            sibling = next_element(sibling)
        return None

    def _cell_result(
        self,
        cell: Tag,
        base: float,
        sibling_type: str,
        direction: str,
        cell_index: int,
        options: DetectionOptions,
    ) -> Optional[DetectionResult]:
        text = visible_text(cell)
        if not text or len(text) > MAX_LABEL_LENGTH:
            return None
        label = clean_label_text(text)
        if not label:
            return None
        return make_result(
            self.name,
            label,
            "proximity",
            adjust_confidence(base, label, length_bonus=True, generic_penalty=True),
            options,
            element=cell,
            xpath=element_xpath(cell),
            extra={"sibling_type": sibling_type, "direction": direction, "cell_index": cell_index},
        )

    def _table_cell(
        self, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        cell = el.find_parent(["td", "th"])
        if cell is None:
            return None
        row = cell.find_parent("tr")
        if row is None:
            return None

        cells = row.find_all(["td", "th"])
        index = _position(cells, cell)
        if index > 0 and not _has_interactive_child(cells[index - 1]):
            result = self._cell_result(
                cells[index - 1],
                SIBLING_CONFIDENCE["table_cell"],
                "table-cell",
                "previous",
                index,
                options,
            )
            if result:
                return result

        table = row.find_parent("table")
        if table is None or index < 0:
            return None
        header_row = table.select_one("thead tr, tr:first-child")
        if header_row is None or header_row is row:
            return None
        headers = header_row.find_all(["th", "td"])
        if index >= len(headers):
            return None
        return self._cell_result(
            headers[index],
            SIBLING_CONFIDENCE["table_cell"] - 0.05,
            "table-header",
            "column",
            index,
            options,
        )

    def _wrapper_sibling(
        self, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        current = el
        for level in range(MAX_WRAPPER_LEVELS):
            parent = current.parent
            if not isinstance(parent, Tag) or parent.name == "[document]":
                break
            if parent.name in WRAPPER_ELEMENTS:
                sibling = previous_element(current)
                distance = 0
                while sibling is not None and distance < 3:
                    distance += 1
                    if sibling.name not in INTERACTIVE_ELEMENTS and sibling.name in LABEL_ELEMENTS:
                        text = visible_text(sibling)
                        label = clean_label_text(text) if text and len(text) <= MAX_LABEL_LENGTH else ""
                        if label:
                            return make_result(
                                self.name,
                                label,
                                "proximity",
                                _distance_confidence(
                                    SIBLING_CONFIDENCE["wrapper_sibling"], distance + level, label
                                ),
                                options,
                                element=sibling,
                                xpath=element_xpath(sibling),
                                extra={
                                    "sibling_type": "wrapper-sibling",
                                    "direction": "previous",
                                    "wrapper_level": level,
                                    "distance": distance,
                                },
                            )
                    sibling = previous_element(sibling)
            current = parent
        return None
