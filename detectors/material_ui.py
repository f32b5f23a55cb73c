"""Material-UI (MUI v4 and v5) component patterns."""

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
from parsing.labels import (
    attr_str,
    class_contains,
    closest_class_containing,
    find_class_containing,
    has_class,
)
from parsing.selectors import element_xpath

MUI_CONFIDENCE = {
    "form_control_label": 0.75,
    "input_label": 0.70,
    "form_label": 0.70,
    "autocomplete": 0.70,
    "placeholder": 0.65,
    "helper_text": 0.55,
}

MUI_CLASS_PREFIXES = ("Mui", "css-", "jss")

FORM_CONTROL_FRAGMENTS = ("MuiFormControl", "MuiTextField")

LABEL_TYPOGRAPHY_CLASSES = ("MuiFormControlLabel-label", "MuiTypography-root")

VARIANT_INDICATORS = {
    "outlined": ("MuiOutlinedInput", "Mui-outlined"),
    "filled": ("MuiFilledInput", "Mui-filled"),
}

_PAGE_ATTRIBUTES = ("data-jss", "data-emotion", "data-mui-test")


def _document(context: DetectionContext) -> Tag:
    if isinstance(context.document, Tag):
        return context.document
    root = context.element
    while root.parent is not None:
        root = root.parent
    return root


def is_mui_page(doc: Tag) -> bool:
    if find_class_containing(doc, "Mui") is not None:
        return True
    return any(doc.find(attrs={attr: True}) is not None for attr in _PAGE_ATTRIBUTES)


def mui_version(doc: Tag) -> str:
    """``v5`` for Emotion styling, ``v4`` for JSS, else ``unknown``."""
    if doc.find(attrs={"data-emotion": True}) is not None:
        return "v5"
    if doc.find(attrs={"data-jss": True}) is not None:
        return "v4"
    if find_class_containing(doc, "css-") is not None:
        return "v5"
    if find_class_containing(doc, "jss") is not None:
        return "v4"
    return "unknown"


def text_field_variant(form_control: Tag) -> str:
    for variant, indicators in VARIANT_INDICATORS.items():
        for indicator in indicators:
            if class_contains(form_control, indicator) or find_class_containing(
                form_control, indicator
            ):
                return variant
    return "standard"


def input_label_text(label: Tag) -> str:
    """Label text without the required-field asterisk MUI renders inside it."""
    asterisk = find_class_containing(label, "asterisk")
    return visible_text(label, exclude=asterisk)


class MaterialUIDetector:
    """Labels from MUI TextField, FormControlLabel and Autocomplete markup."""

    name = "material-ui"
    priority = DETECTOR_PRIORITIES["css_framework"]
    base_confidence = CONFIDENCE_SCORES["material_ui"]
    description = "Detects labels from Material-UI (MUI) component patterns"
    supported_elements: tuple[str, ...] = ()

    def can_detect(self, context: DetectionContext) -> bool:
        el = context.element
        if not isinstance(el, Tag) or not is_mui_page(_document(context)):
            return False
        if any(class_contains(el, prefix) for prefix in MUI_CLASS_PREFIXES):
            return True
        return closest_class_containing(el, *FORM_CONTROL_FRAGMENTS, "MuiFormControlLabel") is not None

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(self._find, context, options)

    def _find(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el = context.element
        result = (
            self._form_control_label(el, options)
            or self._autocomplete(el, options)
            or self._input_label(el, options)
            or self._form_label(el, options)
            or self._placeholder(el, options)
            or self._helper_text(el, options)
        )
        if result is None:
            return None
        extra = {**result.metadata.extra, "mui_version": mui_version(_document(context))}
        metadata = result.metadata.model_copy(update={"extra": extra})
        return result.model_copy(update={"metadata": metadata})

    def _result(
        self,
        text: str,
        source: Tag,
        base: float,
        selector: str,
        pattern_type: str,
        options: DetectionOptions,
        **extra: Any,
    ) -> Optional[DetectionResult]:
        label = clean_label_text(text)
        if not label:
            return None
        return make_result(
            self.name,
            label,
            "framework",
            adjust_confidence(base, label, length_bonus=True, generic_penalty=True),
            options,
            element=source,
            selector=selector,
            framework="material-ui",
            xpath=element_xpath(source),
            extra={"pattern_type": pattern_type, **extra},
        )

    def _toggle_type(self, el: Tag, container: Tag) -> str:
        for fragment, kind in (("MuiCheckbox", "checkbox"), ("MuiRadio", "radio"), ("MuiSwitch", "switch")):
            if find_class_containing(container, fragment) is not None:
                return kind
        source = el if el.name == "input" else el.find("input")
        if source is not None:
            return attr_str(source, "type") or "text"
        return "unknown"

    def _form_control_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        container = closest_class_containing(el, "MuiFormControlLabel")
        if container is None:
            return None
        candidates = [container.find(class_=cls) for cls in LABEL_TYPOGRAPHY_CLASSES]
        candidates.append(find_class_containing(container, "MuiFormControlLabel-label"))
        for label_el in candidates:
            if label_el is None:
                continue
            result = self._result(
                visible_text(label_el),
                label_el,
                MUI_CONFIDENCE["form_control_label"],
                ".MuiFormControlLabel-label",
                "form-control-label",
                options,
                component_type=self._toggle_type(el, container),
            )
            if result:
                return result
        return None

    def _autocomplete(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        autocomplete = closest_class_containing(el, "MuiAutocomplete")
        if autocomplete is None:
            return None
        form_control = find_class_containing(autocomplete, "MuiFormControl")
        label_el = find_class_containing(form_control, "MuiInputLabel") if form_control else None
        if label_el is None:
            return None
        return self._result(
            input_label_text(label_el),
            label_el,
            MUI_CONFIDENCE["autocomplete"],
            ".MuiInputLabel-root",
            "autocomplete",
            options,
        )

    def _input_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        form_control = closest_class_containing(el, *FORM_CONTROL_FRAGMENTS)
        if form_control is None:
            return None
        label_el = find_class_containing(form_control, "MuiInputLabel")
        if label_el is None:
            return None
        shrunk = attr_str(label_el, "data-shrink") == "true" or has_class(
            label_el, "MuiInputLabel-shrink"
        )
        return self._result(
            input_label_text(label_el),
            label_el,
            MUI_CONFIDENCE["input_label"],
            ".MuiInputLabel-root",
            "input-label",
            options,
            is_shrunk=shrunk,
            variant=text_field_variant(form_control),
        )

    def _form_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        form_control = closest_class_containing(el, *FORM_CONTROL_FRAGMENTS)
        if form_control is None:
            return None
        label_el = find_class_containing(form_control, "MuiFormLabel")
        if label_el is None or has_class(label_el, "MuiInputLabel-root"):
            return None
        return self._result(
            visible_text(label_el),
            label_el,
            MUI_CONFIDENCE["form_label"],
            ".MuiFormLabel-root",
            "form-label",
            options,
        )

    def _placeholder(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        placeholder = attr_str(el, "placeholder")
        if not placeholder:
            return None
        form_control = closest_class_containing(el, "MuiFormControl")
        if form_control is not None:
            input_label = find_class_containing(form_control, "MuiInputLabel")
            if input_label is not None and visible_text(input_label):
                return None
        label = clean_label_text(placeholder)
        if not label:
            return None
        return make_result(
            self.name,
            label,
            "attribute",
            adjust_confidence(
                MUI_CONFIDENCE["placeholder"], label, length_bonus=True, generic_penalty=True
            ),
            options,
            element=el,
            attribute="placeholder",
            framework="material-ui",
            extra={"pattern_type": "placeholder"},
        )

    def _helper_text(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        form_control = closest_class_containing(el, *FORM_CONTROL_FRAGMENTS)
        if form_control is None:
            return None
        helper = find_class_containing(form_control, "MuiFormHelperText")
        if helper is None:
            return None
        text = visible_text(helper)
        if not text or len(text) > 100:
            return None
        return self._result(
            text,
            helper,
            MUI_CONFIDENCE["helper_text"],
            ".MuiFormHelperText-root",
            "helper-text",
            options,
            is_helper_text=True,
        )
