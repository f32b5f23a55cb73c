"""Text and attribute helpers shared by the markup-based detectors."""

from __future__ import annotations

import re

import soupsieve
from bs4 import Tag

# Controls whose own text must not leak into a wrapping label's text.
CONTROL_TAGS = frozenset({"input", "select", "textarea", "button"})


def norm_ws(s: str) -> str:
    """Collapse whitespace runs into a single space and strip."""
    return re.sub(r"\s+", " ", (s or "")).strip()


def text_of(el: Tag) -> str:
    """Whitespace-normalized text content of *el*."""
    return norm_ws(el.get_text(" ", strip=True))


def attr_str(el: Tag, name: str) -> str:
    """Attribute value as a stripped string (list values joined)."""
    value = el.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    return str(value).strip()


def class_list(el: Tag) -> list[str]:
    value = el.get("class") or []
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


def has_class(el: Tag, *names: str) -> bool:
    """True when *el* carries any of the class *names*."""
    classes = set(class_list(el))
    return any(name in classes for name in names)


def previous_element(el: Tag) -> Tag | None:
    """Previous sibling that is an element, skipping text nodes."""
    sibling = el.previous_sibling
    while sibling is not None and not isinstance(sibling, Tag):
        sibling = sibling.previous_sibling
    return sibling


def next_element(el: Tag) -> Tag | None:
    """Next sibling that is an element, skipping text nodes."""
    sibling = el.next_sibling
    while sibling is not None and not isinstance(sibling, Tag):
        sibling = sibling.next_sibling
    return sibling


def closest_with_class(el: Tag, *names: str) -> Tag | None:
    """*el* or its nearest ancestor carrying any of the class *names*."""
    node = el
    while isinstance(node, Tag) and node.name != "[document]":
        if has_class(node, *names):
            return node
        node = node.parent
    return None


def precedes(first: Tag, second: Tag) -> bool:
    """True when *first* starts before *second* in document order."""
    return any(node is second for node in first.next_elements)


def class_contains(el: Tag, fragment: str) -> bool:
    """CSS ``[class*=fragment]``: substring match on the class attribute."""
    return fragment in " ".join(class_list(el))


def closest_class_containing(el: Tag, *fragments: str) -> Tag | None:
    """*el* or its nearest ancestor whose class attribute contains a fragment."""
    node = el
    while isinstance(node, Tag) and node.name != "[document]":
        if any(class_contains(node, f) for f in fragments):
            return node
        node = node.parent
    return None


def find_class_containing(root: Tag, fragment: str) -> Tag | None:
    """First descendant of *root* whose class attribute contains *fragment*."""
    return root.find(lambda t: class_contains(t, fragment))


def closest_matching(el: Tag, selector: str) -> Tag | None:
    """*el* or its nearest ancestor matching the CSS *selector*."""
    return soupsieve.closest(selector, el)
