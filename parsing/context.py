"""Build a ``DetectionContext`` for an element of a parsed document."""

from __future__ import annotations

from typing import Any, Optional

from bs4 import BeautifulSoup, Tag

from models.detection import DetectionContext
from parsing.labels import attr_str


def _root(el: Tag) -> Any:
    node = el
    while node.parent is not None:
        node = node.parent
    return node


def _shadow_root(el: Tag) -> Optional[Tag]:
    """Nearest declarative shadow root (``<template shadowrootmode>``) above *el*."""
    for parent in el.parents:
        if parent.name == "template" and (
            parent.has_attr("shadowrootmode") or parent.has_attr("shadowroot")
        ):
            return parent
    return None


def _base_href(document: Any) -> str:
    if not isinstance(document, BeautifulSoup):
        return ""
    base = document.find("base", href=True)
    return attr_str(base, "href") if base else ""


def build_context(
    element: Tag,
    *,
    page_url: str = "",
    event: Any = None,
    extra: Optional[dict[str, Any]] = None,
) -> DetectionContext:
    """Snapshot *element* and its surroundings for the detectors.

    The parse root is the document. A page parsed from an iframe's
    ``srcdoc`` is expected to be flagged through ``extra["in_iframe"]``;
    an ``<iframe>`` ancestor (fallback content) also sets the flag. The
    page URL falls back to the document's ``<base href>``.
    """
    document = _root(element)
    extra = dict(extra or {})
    shadow_root = _shadow_root(element)
    in_iframe = bool(extra.get("in_iframe")) or element.find_parent("iframe") is not None

    return DetectionContext(
        element=element,
        document=document,
        window=None,
        is_in_iframe=in_iframe,
        is_in_shadow_dom=shadow_root is not None,
        shadow_root=shadow_root,
        event=event,
        page_url=page_url or _base_href(document),
        extra=extra,
    )
