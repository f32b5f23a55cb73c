"""Form-control discovery in parsed HTML snapshots.

Finds the elements worth labeling (inputs, textareas, selects, buttons and
their ARIA equivalents) in document order.
"""

from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup, Tag

from parsing.filtering import is_disabled, is_visible

FORM_CONTROL_SELECTORS = [
    "input",
    "textarea",
    "select",
    "button",
    "[contenteditable='true']",
    "[role='textbox']",
    "[role='combobox']",
    "[role='listbox']",
    "[role='checkbox']",
    "[role='radio']",
    "[role='switch']",
    "[role='slider']",
]


def find_form_controls(
    soup: BeautifulSoup, selector: Optional[str] = None
) -> list[Tag]:
    """Return elements to label, in document order.

    With *selector*, every element it matches is returned unfiltered.
    Without it, visible and enabled form controls are returned, excluding
    ``input[type=hidden]``.
    """
    if selector:
        return list(soup.select(selector))

    matched = {id(el) for el in soup.select(", ".join(FORM_CONTROL_SELECTORS))}
    controls: list[Tag] = []
    for el in soup.find_all(True):
        if id(el) not in matched:
            continue
        if not is_visible(el) or is_disabled(el):
            continue
        controls.append(el)
    return controls
