"""Native HTML label association: ``<label for>``, wrapping labels, legends."""

from __future__ import annotations

from typing import Optional

from bs4 import NavigableString, Tag

from labels.contract import (
    DETECTOR_PRIORITIES,
    adjust_confidence,
    clean_label_text,
    make_result,
    run_detector,
)
from models.detection import DetectionContext, DetectionOptions, DetectionResult
from parsing.filtering import is_visible, visible_text
from parsing.labels import CONTROL_TAGS, attr_str, next_element, previous_element, text_of
from parsing.selectors import element_xpath

ASSOCIATION_CONFIDENCE = {
    "label_for": 0.85,
    "ancestor_label": 0.80,
    "sibling_label": 0.75,
    "fieldset_legend": 0.70,
}

LABELABLE_ELEMENTS = {"input", "select", "textarea", "button", "meter", "output", "progress"}

GROUPED_INPUT_TYPES = {"radio", "checkbox"}

_QUALITY = {"length_bonus": True, "short_penalty": True, "generic_penalty": True}


def label_text(label: Tag, exclude: Optional[Tag] = None) -> str:
    """Visible text of *label* without the text of controls nested in it."""
    text = visible_text(label, skip_tags=CONTROL_TAGS)
    if not text and exclude is not None:
        text = visible_text(label, exclude=exclude)
    return text


class AssociatedLabelDetector:
    """Labels tied to a control by HTML semantics."""

    name = "associated-label"
    priority = DETECTOR_PRIORITIES["label_association"]
    base_confidence = ASSOCIATION_CONFIDENCE["label_for"]
    description = "Detects labels from label[for], ancestor labels and fieldset legends"
    supported_elements: tuple[str, ...] = ()

    def can_detect(self, context: DetectionContext) -> bool:
        el = context.element
        if not isinstance(el, Tag):
            return False
        if el.name in LABELABLE_ELEMENTS or el.has_attr("contenteditable"):
            return True
        return attr_str(el, "role") in {"textbox", "combobox", "listbox"}

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(self._find, context, options)

    def _find(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el = context.element
        return (
            self._label_for(context, el, options)
            or self._ancestor_label(el, options)
            or self._fieldset_legend(context, el, options)
            or self._sibling_label(el, options)
        )

    def _usable(self, label: Tag, options: DetectionOptions) -> bool:
        return not options.check_visibility or is_visible(label)

    def _label_for(
        self, context: DetectionContext, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el_id = attr_str(el, "id")
        if not el_id:
            return None

        label = None
        for root in (context.shadow_root, context.document):
            if isinstance(root, Tag):
                label = root.find("label", attrs={"for": el_id})
                if label is not None:
                    break
        if label is None or not self._usable(label, options):
            return None

        text = clean_label_text(label_text(label))
        if not text:
            return None
        return make_result(
            self.name,
            text,
            "associated",
            adjust_confidence(ASSOCIATION_CONFIDENCE["label_for"], text, **_QUALITY),
            options,
            element=label,
            attribute="for",
            selector=f'label[for="{el_id}"]',
            xpath=element_xpath(label),
            extra={"association_type": "explicit", "target_id": el_id},
        )

    def _ancestor_label(
        self, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        for depth, ancestor in enumerate(el.parents):
            if ancestor.name != "label" or not self._usable(ancestor, options):
                continue
            text = clean_label_text(label_text(ancestor, exclude=el))
            if not text:
                continue
            return make_result(
                self.name,
                text,
                "ancestor",
                adjust_confidence(ASSOCIATION_CONFIDENCE["ancestor_label"], text, **_QUALITY),
                options,
                element=ancestor,
                selector="label",
                xpath=element_xpath(ancestor),
                extra={"association_type": "implicit", "nesting_depth": depth},
            )
        return None

    def _fieldset_legend(
        self, context: DetectionContext, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        if el.name == "input" and attr_str(el, "type").lower() not in GROUPED_INPUT_TYPES:
            return None

        fieldset = el.find_parent("fieldset")
        if fieldset is None:
            return None
        legend = fieldset.find("legend", recursive=False)
        if legend is None:
            return None

        legend_text = clean_label_text(visible_text(legend))
        if not legend_text:
            return None

        specific = self._specific_label(context, el)
        label = legend_text
        confidence = ASSOCIATION_CONFIDENCE["fieldset_legend"]
        if specific:
            label = f"{legend_text}: {specific}"
            confidence = min(confidence + 0.05, 0.85)

        return make_result(
            self.name,
            label,
            "ancestor",
            adjust_confidence(confidence, label, length_bonus=True, generic_penalty=True),
            options,
            element=legend,
            selector="fieldset > legend",
            xpath=element_xpath(legend),
            extra={
                "association_type": "fieldset-legend",
                "has_specific_label": bool(specific),
                "specific_label": specific,
            },
        )

    def _specific_label(self, context: DetectionContext, el: Tag) -> Optional[str]:
        """Per-option label of a radio or checkbox inside a fieldset."""
        el_id = attr_str(el, "id")
        if el_id and isinstance(context.document, Tag):
            label = context.document.find("label", attrs={"for": el_id})
            if label is not None:
                return clean_label_text(label_text(label)) or None

        following = el.next_sibling
        if isinstance(following, NavigableString) and following.strip():
            return clean_label_text(str(following)) or None

        nxt = next_element(el)
        if nxt is not None:
            if nxt.name == "label":
                return clean_label_text(label_text(nxt)) or None
            if nxt.name in {"span", "div", "p"}:
                text = text_of(nxt)
                if text and len(text) < 50:
                    return clean_label_text(text) or None
        return None

    def _sibling_label(
        self, el: Tag, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        sibling = previous_element(el)
        while sibling is not None and not text_of(sibling):
            if sibling.name in CONTROL_TAGS:
                return None
            sibling = previous_element(sibling)
        if sibling is None:
            return None

        if sibling.name == "label" and self._usable(sibling, options):
            text = clean_label_text(label_text(sibling))
            if text:
                return make_result(
                    self.name,
                    text,
                    "sibling",
                    adjust_confidence(ASSOCIATION_CONFIDENCE["sibling_label"], text, **_QUALITY),
                    options,
                    element=sibling,
                    xpath=element_xpath(sibling),
                    extra={"association_type": "sibling", "position": "previous"},
                )

        nested = sibling.find("label")
        if nested is not None and self._usable(nested, options):
            text = clean_label_text(label_text(nested))
            if text:
                return make_result(
                    self.name,
                    text,
                    "sibling",
                    adjust_confidence(
                        ASSOCIATION_CONFIDENCE["sibling_label"] - 0.05,
                        text,
                        length_bonus=True,
                        generic_penalty=True,
                    ),
                    options,
                    element=nested,
                    xpath=element_xpath(nested),
                    extra={"association_type": "nested-sibling"},
                )
        return None
