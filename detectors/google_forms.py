"""Google Forms question markup.

Google Forms renders every question inside a container with distinctive
``freebird*`` class names, which makes its titles the most reliable label
source on those pages.
"""

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
from parsing.labels import attr_str, class_contains, closest_matching, has_class
from parsing.selectors import element_xpath

GOOGLE_FORMS_CONFIDENCE = {
    "question_title": 0.95,
    "option_label": 0.90,
    "section_header": 0.85,
    "description": 0.80,
    "scale_label": 0.85,
}

QUESTION_TITLE_SELECTORS = (
    ".freebirdFormviewerComponentsQuestionBaseTitle",
    ".freebirdFormviewerComponentsQuestionBaseHeader",
    ".freebirdFormviewerViewItemsItemItemTitle",
    ".freebirdFormviewerViewItemsItemItemTitleContainer",
    '[data-params*="title"]',
    ".exportItemTitle",
    ".freebirdFormviewerComponentsQuestionBaseTitleContainer",
)

QUESTION_CONTAINER_SELECTORS = (
    ".freebirdFormviewerViewItemsItemItem",
    ".freebirdFormviewerViewNumberedItemContainer",
    ".freebirdFormviewerComponentsQuestionBaseRoot",
    "[data-item-id]",
    ".freebirdFormviewerViewItemsItemItemHeader",
)

# Checked in order; the first group with a match names the question type.
INPUT_SELECTORS = {
    "short-answer": (
        ".freebirdFormviewerComponentsQuestionTextShort input",
        '.freebirdFormviewerComponentsQuestionTextRoot input[type="text"]',
        ".quantumWizTextinputPaperinputInput",
    ),
    "paragraph": (
        ".freebirdFormviewerComponentsQuestionTextLong textarea",
        ".freebirdFormviewerComponentsQuestionTextRoot textarea",
        ".quantumWizTextinputPapertextareaInput",
    ),
    "multiple-choice": (
        ".freebirdFormviewerComponentsQuestionRadioChoice",
        '.freebirdFormviewerComponentsQuestionRadioRoot input[type="radio"]',
        ".docssharedWizToggleLabeledContainer",
    ),
    "checkboxes": (
        ".freebirdFormviewerComponentsQuestionCheckboxChoice",
        '.freebirdFormviewerComponentsQuestionCheckboxRoot input[type="checkbox"]',
    ),
    "dropdown": (
        ".freebirdFormviewerComponentsQuestionSelectRoot",
        ".quantumWizMenuPaperselectEl",
        ".freebirdFormviewerComponentsQuestionSelectSelect",
    ),
    "date": (
        ".freebirdFormviewerComponentsQuestionDateRoot",
        ".freebirdFormviewerComponentsQuestionDateInputsContainer input",
    ),
    "time": (
        ".freebirdFormviewerComponentsQuestionTimeRoot",
        ".freebirdFormviewerComponentsQuestionTimeInputsContainer input",
    ),
    "linear-scale": (
        ".freebirdFormviewerComponentsQuestionScaleRoot",
        ".freebirdFormviewerComponentsQuestionScaleChoice",
    ),
    "file-upload": (
        ".freebirdFormviewerComponentsQuestionFileuploadRoot",
        ".freebirdFormviewerComponentsQuestionFileuploadUploadButton",
    ),
}

SECTION_SELECTORS = (
    ".freebirdFormviewerViewItemsSectionheaderHeader",
    ".freebirdFormviewerViewItemsSectionheaderTitle",
    ".freebirdFormviewerViewItemsPagebreakItemHeader",
)

DESCRIPTION_SELECTORS = (
    ".freebirdFormviewerComponentsQuestionBaseDescription",
    ".freebirdFormviewerViewItemsItemItemHelpText",
    ".freebirdFormviewerViewItemsSectionheaderDescriptionText",
)

OPTION_LABEL_SELECTORS = (
    ".docssharedWizToggleLabeledLabelText",
    ".freebirdFormviewerComponentsQuestionRadioLabel",
    ".freebirdFormviewerComponentsQuestionCheckboxLabel",
    ".exportLabel",
)

OPTION_CONTAINER_SELECTORS = (
    ".docssharedWizToggleLabeledContainer",
    ".freebirdFormviewerComponentsQuestionRadioChoice",
    ".freebirdFormviewerComponentsQuestionCheckboxChoice",
)

_TITLE_NOISE_CLASSES = (
    "freebirdFormviewerComponentsQuestionBaseRequiredAsterisk",
    "freebirdFormviewerComponentsQuestionBaseNumber",
)

_FORMS_URL_MARKERS = ("docs.google.com/forms", "forms.gle", "forms.google.com")


def _document(context: DetectionContext) -> Tag:
    if isinstance(context.document, Tag):
        return context.document
    root = context.element
    while root.parent is not None:
        root = root.parent
    return root


def is_google_forms_url(url: str) -> bool:
    return any(marker in (url or "") for marker in _FORMS_URL_MARKERS)


def is_google_forms_page(doc: Tag, page_url: str = "") -> bool:
    """URL, form card, forms script, or at least two question container patterns."""
    if is_google_forms_url(page_url):
        return True
    if doc.select_one(".freebirdFormviewerViewFormCard") is not None:
        return True
    if doc.select_one('script[src*="forms.google.com"]') is not None:
        return True
    found = sum(1 for sel in QUESTION_CONTAINER_SELECTORS if doc.select_one(sel) is not None)
    return found >= 2


def find_question_container(el: Tag) -> Optional[Tag]:
    for selector in QUESTION_CONTAINER_SELECTORS:
        container = closest_matching(el, selector)
        if container is not None:
            return container
    return None


def is_within_question(el: Tag) -> bool:
    if find_question_container(el) is not None:
        return True
    return class_contains(el, "freebird") or class_contains(el, "quantumWiz")


def _is_title_noise(el: Tag) -> bool:
    return has_class(el, *_TITLE_NOISE_CLASSES) or attr_str(el, "aria-label") == "Required question"


def title_text(title: Tag) -> str:
    """Title text without the required asterisk or the question number."""
    return visible_text(title, skip=_is_title_noise)


def question_type(container: Tag) -> str:
    for kind, selectors in INPUT_SELECTORS.items():
        if container.select_one(", ".join(selectors)) is not None:
            return kind
    return "unknown"


def question_title(el: Tag) -> Optional[str]:
    """Cleaned title of the question *el* belongs to, if any."""
    container = find_question_container(el)
    if container is None:
        return None
    for selector in QUESTION_TITLE_SELECTORS:
        title = container.select_one(selector)
        if title is None:
            continue
        text = title_text(title)
        if text:
            return clean_label_text(text) or None
    return None


class GoogleFormsDetector:
    """Labels from Google Forms question titles, options and sections."""

    name = "google-forms"
    priority = DETECTOR_PRIORITIES["framework"]
    base_confidence = CONFIDENCE_SCORES["google_forms"]
    description = "Detects labels from Google Forms-specific DOM patterns"
    supported_elements: tuple[str, ...] = ()

    def can_detect(self, context: DetectionContext) -> bool:
        el = context.element
        if not isinstance(el, Tag):
            return False
        if not is_google_forms_page(_document(context), context.page_url):
            return False
        return is_within_question(el)

    def detect(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        return run_detector(self._find, context, options)

    def _find(
        self, context: DetectionContext, options: DetectionOptions
    ) -> Optional[DetectionResult]:
        el = context.element
        return (
            self._question_title(el, options)
            or self._option_label(el, options)
            or self._section_header(el, options)
            or self._description(el, options)
            or self._scale_label(el, options)
        )

    def _result(
        self,
        label: str,
        source: Tag,
        confidence: float,
        selector: Optional[str],
        pattern_type: str,
        options: DetectionOptions,
        **extra: Any,
    ) -> DetectionResult:
        return make_result(
            self.name,
            label,
            "framework",
            confidence,
            options,
            element=source,
            selector=selector,
            framework="google-forms",
            xpath=element_xpath(source),
            extra={"pattern_type": pattern_type, **extra},
        )

    def _question_title(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        container = find_question_container(el)
        if container is None:
            return None
        for selector in QUESTION_TITLE_SELECTORS:
            title = container.select_one(selector)
            if title is None:
                continue
            label = clean_label_text(title_text(title))
            if not label:
                continue
            return self._result(
                label,
                title,
                adjust_confidence(
                    GOOGLE_FORMS_CONFIDENCE["question_title"],
                    label,
                    length_bonus=True,
                    generic_penalty=True,
                ),
                selector,
                "question-title",
                options,
                question_type=question_type(container),
            )
        return None

    def _option_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        input_type = attr_str(el, "type").lower() if el.name == "input" else ""
        is_radio = input_type == "radio" or closest_matching(
            el, ".freebirdFormviewerComponentsQuestionRadioChoice"
        ) is not None
        is_checkbox = input_type == "checkbox" or closest_matching(
            el, ".freebirdFormviewerComponentsQuestionCheckboxChoice"
        ) is not None
        if not is_radio and not is_checkbox:
            return None

        option = None
        for selector in OPTION_CONTAINER_SELECTORS:
            option = closest_matching(el, selector)
            if option is not None:
                break
        if option is None:
            return None

        for selector in OPTION_LABEL_SELECTORS:
            label_el = option.select_one(selector)
            if label_el is None:
                continue
            option_text = clean_label_text(visible_text(label_el))
            if not option_text:
                continue
            title = question_title(el)
            return self._result(
                f"{title}: {option_text}" if title else option_text,
                label_el,
                adjust_confidence(
                    GOOGLE_FORMS_CONFIDENCE["option_label"],
                    option_text,
                    length_bonus=True,
                    generic_penalty=True,
                ),
                selector,
                "radio-option" if is_radio else "checkbox-option",
                options,
                option_text=option_text,
                question_title=title,
            )
        return None

    def _section_header(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        for selector in SECTION_SELECTORS:
            section = closest_matching(el, selector)
            if section is None:
                continue
            label = clean_label_text(visible_text(section))
            if not label:
                continue
            return self._result(
                label,
                section,
                adjust_confidence(
                    GOOGLE_FORMS_CONFIDENCE["section_header"], label, length_bonus=True
                ),
                selector,
                "section-header",
                options,
            )
        return None

    def _description(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        container = find_question_container(el)
        if container is None:
            return None
        for selector in DESCRIPTION_SELECTORS:
            desc = container.select_one(selector)
            if desc is None:
                continue
            text = visible_text(desc)
            if not text or len(text) > 100:
                continue
            label = clean_label_text(text)
            if not label:
                continue
            return self._result(
                label,
                desc,
                adjust_confidence(
                    GOOGLE_FORMS_CONFIDENCE["description"],
                    label,
                    length_bonus=True,
                    generic_penalty=True,
                ),
                selector,
                "description",
                options,
            )
        return None

    def _scale_label(self, el: Tag, options: DetectionOptions) -> Optional[DetectionResult]:
        scale = closest_matching(el, ".freebirdFormviewerComponentsQuestionScaleRoot")
        if scale is None:
            return None
        choice = closest_matching(el, ".freebirdFormviewerComponentsQuestionScaleChoice")
        if choice is None:
            return None

        value = attr_str(choice, "data-value")
        if not value:
            choice_input = choice.find("input")
            value = attr_str(choice_input, "value") if choice_input is not None else ""
        label = question_title(el) or "Scale"
        if value:
            label = f"{label}: {value}"

        low = scale.select_one(".freebirdFormviewerComponentsQuestionScaleLowLabel")
        high = scale.select_one(".freebirdFormviewerComponentsQuestionScaleHighLabel")
        return self._result(
            label,
            choice,
            adjust_confidence(GOOGLE_FORMS_CONFIDENCE["scale_label"], label, length_bonus=True),
            None,
            "scale-option",
            options,
            scale_value=value or None,
            low_label=visible_text(low) if low is not None else "",
            high_label=visible_text(high) if high is not None else "",
        )
