"""Bootstrap form conventions (v4 and v5)."""

from __future__ import annotations

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
from parsing.labels import attr_str, class_list, closest_with_class, has_class, precedes
from parsing.selectors import element_xpath

BOOTSTRAP_CONFIDENCE = {
    "form_label": 0.75,
    "floating_label": 0.75,
    "form_check_label": 0.75,
    "col_form_label": 0.75,
    "input_group_text": 0.70,
    "control_label": 0.70,
    "form_text": 0.55,
}

FORM_CONTAINER_CLASSES = (
    "mb-3", "mb-2", "mb-4", "form-floating", "input-group", "form-check",
    "form-group", "form-row", "row",
)

FORM_CONTROL_CLASSES = ("form-control", "form-select", "form-check-input", "form-range")

VERSION_INDICATORS = {
    "bs5": (
        "form-label", "form-floating", "form-select", "form-check", "form-switch",
        "form-range", "visually-hidden",
    ),
    "bs4": (
        "form-group", "control-label", "custom-control", "custom-select",
        "custom-checkbox", "custom-radio", "sr-only",
    ),
}

_PAGE_INDICATORS = ("form-control", "form-group", "form-label", "mb-3")


def _document(context: DetectionContext) -> Optional[Tag]:
    if isinstance(context.document, Tag):
        return context.document
    el = context.element
    root = el
    while root.parent is not None:
        root = root.parent
    return root


def is_bootstrap_page(doc: Tag) -> bool:
    """Bootstrap stylesheet linked, or at least two telltale classes in use."""
    for link in doc.find_all("link"):
        rel = attr_str(link, "rel").lower()
        href = attr_str(link, "href").lower()
        if "stylesheet" in rel and any(k in href for k in ("bootstrap", "bs5", "bs4")):
            return True
    found = sum(1 for cls in _PAGE_INDICATORS if doc.find(class_=cls) is not None)
    return found >= 2


def bootstrap_version(doc: Tag) -> str:
    for version in ("bs5", "bs4"):
        if any(doc.find(class_=cls) is not None for cls in VERSION_INDICATORS[version]):
            return version
    return "unknown"


def find_form_container(el: Tag) -> Optional[Tag]:
    """Nearest container, trying the container classes in preference order."""
    for cls in FORM_CONTAINER_CLASSES:
        container = closest_with_class(el, cls)
        if container is not None:
            return container
    return None


class BootstrapDetector:
    """Labels from Bootstrap form markup patterns."""

    name = "bootstrap"
    priority = DETECTOR_PRIORITIES["css_framework"]
    base_confidence = CONFIDENCE_SCORES["bootstrap"]
    description = "Detects labels from Bootstrap CSS framework form patterns"
    supported_elements: tuple[str, ...] = ()

    def can_detect(self, context: DetectionContext) -> bool:
        el = context.element
        if not isinstance(el, Tag):
            return False
        doc = _document(context)
        if doc is None or not is_bootstrap_page(doc):
            return False
        if any(cls in FORM_CONTROL_CLASSES for cls in class_list(el)):
            return True
        return find_form_container(el) is not None

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(self._find, context, options)

    def _find(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el = context.element
        result = (
            self._floating_label(el, options)
            or self._form_check_label(el, options)
            or self._form_label(el, options)
            or self._col_form_label(el, options)
            or self._input_group_text(el, options)
            or self._control_label(el, options)
            or self._form_text(el, options)
        )
        if result is None:
            return None
        doc = _document(context)
        extra = {**result.metadata.extra, "bootstrap_version": bootstrap_version(doc)}
        metadata = result.metadata.model_copy(update={"extra": extra})
        return result.model_copy(update={"metadata": metadata})

    def _label_result(
        self,
        label_el: Tag,
        base: float,
        selector: str,
        pattern_type: str,
        options: DetectionOptions,
        **extra: Any,
    ) -> Optional[DetectionResult]:
        label = clean_label_text(visible_text(label_el))
        if not label:
            return None
        return make_result(
            self.name,
            label,
            "framework",
            adjust_confidence(base, label, length_bonus=True, generic_penalty=True),
            options,
            element=label_el,
            selector=selector,
            framework="bootstrap",
            xpath=element_xpath(label_el),
            extra={"pattern_type": pattern_type, **extra},
        )

    def _floating_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        container = closest_with_class(el, "form-floating")
        label = container.find("label") if container is not None else None
        if label is None:
            return None
        return self._label_result(
            label,
            BOOTSTRAP_CONFIDENCE["floating_label"],
            ".form-floating > label",
            "floating-label",
            options,
        )

    def _form_check_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        if el.name != "input" or attr_str(el, "type").lower() not in {"checkbox", "radio"}:
            return None
        base = BOOTSTRAP_CONFIDENCE["form_check_label"]

        form_check = closest_with_class(el, "form-check")
        if form_check is None:
            custom = closest_with_class(el, "custom-control")
            label = custom.find(class_="custom-control-label") if custom is not None else None
            if label is None:
                return None
            return self._label_result(label, base, ".custom-control-label", "form-check", options)

        label = form_check.find(class_="form-check-label")
        if label is not None:
            return self._label_result(label, base, ".form-check-label", "form-check", options)
        label = form_check.find("label")
        if label is not None:
            return self._label_result(label, base - 0.05, "label", "form-check", options)
        return None

    def _form_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        container = find_form_container(el)
        if container is None:
            return None

        form_label = container.find(class_="form-label")
        if form_label is not None:
            return self._label_result(
                form_label, BOOTSTRAP_CONFIDENCE["form_label"], ".form-label", "standard", options
            )

        if has_class(container, "form-floating"):
            return None
        for label in container.find_all("label"):
            if has_class(label, "form-check-label"):
                continue
            # Without layout, a label written before the control reads as its label.
            if precedes(label, el):
                return self._label_result(
                    label,
                    BOOTSTRAP_CONFIDENCE["form_label"] - 0.05,
                    "label",
                    "standard",
                    options,
                )
        return None

    def _col_form_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        row = closest_with_class(el, "row")
        label = row.find(class_="col-form-label") if row is not None else None
        if label is None:
            return None
        return self._label_result(
            label, BOOTSTRAP_CONFIDENCE["col_form_label"], ".col-form-label", "horizontal", options
        )

    def _input_group_text(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        group = closest_with_class(el, "input-group")
        if group is None:
            return None
        addons = group.find_all(class_="input-group-text")
        if not addons:
            return None

        prepend: Optional[Tag] = None
        append: Optional[Tag] = None
        for addon in addons:
            if precedes(addon, el):
                prepend = addon
            elif append is None and not any(a is addon for a in el.parents):
                append = addon
        addon = prepend or append
        if addon is None:
            return None

        text = visible_text(addon)
        if not text or len(text) > 50:
            return None
        label = clean_label_text(text)
        if not label:
            return None

        confidence = BOOTSTRAP_CONFIDENCE["input_group_text"]
        if len(label) <= 2:
            confidence -= 0.10
        return make_result(
            self.name,
            label,
            "framework",
            adjust_confidence(confidence, label, length_bonus=True, generic_penalty=True),
            options,
            element=addon,
            selector=".input-group-text",
            framework="bootstrap",
            xpath=element_xpath(addon),
            extra={
                "pattern_type": "input-group",
                "position": "prepend" if prepend is not None else "append",
            },
        )

    def _control_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        group = closest_with_class(el, "form-group")
        label = group.find(class_="control-label") if group is not None else None
        if label is None:
            return None
        return self._label_result(
            label, BOOTSTRAP_CONFIDENCE["control_label"], ".control-label", "bs4-standard", options
        )

    def _form_text(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        container = find_form_container(el)
        if container is None:
            return None
        help_text = container.find(class_=["form-text", "help-block"])
        if help_text is None:
            return None
        text = visible_text(help_text)
        if not text or len(text) > 100:
            return None
        return self._label_result(
            help_text,
            BOOTSTRAP_CONFIDENCE["form_text"],
            ".form-text",
            "help-text",
            options,
            is_help_text=True,
        )
