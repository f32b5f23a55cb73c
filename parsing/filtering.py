"""Hidden and disabled element detection on parsed markup."""

from __future__ import annotations

from typing import Callable, Collection, Optional

from bs4 import Comment, NavigableString, Tag

from parsing.labels import attr_str, class_list, norm_ws

_HIDDEN_CLASS_TOKENS = {"hidden", "sr-only", "visually-hidden", "invisible", "d-none"}


def is_hidden(el: Tag) -> bool:
    """Check if *el* itself is hidden.

    Checks the hiding methods visible in a static snapshot:
    1. ``hidden`` attribute present
    2. ``aria-hidden="true"``
    3. ``style`` containing ``display:none`` or ``visibility:hidden``
    4. ``class`` containing a hiding utility token (``hidden``, ``sr-only``,
       ``visually-hidden``, ``invisible``, ``d-none``)
    5. ``<input type="hidden">``
    """
    if el.has_attr("hidden"):
        return True
    if attr_str(el, "aria-hidden").lower() == "true":
        return True
    style = attr_str(el, "style").lower().replace(" ", "")
    if "display:none" in style or "visibility:hidden" in style:
        return True
    if any(token.lower() in _HIDDEN_CLASS_TOKENS for token in class_list(el)):
        return True
    return el.name == "input" and attr_str(el, "type").lower() == "hidden"


def is_visible(el: Tag) -> bool:
    """True when neither *el* nor any ancestor is hidden."""
    node = el
    while isinstance(node, Tag) and node.name != "[document]":
        if is_hidden(node):
            return False
        node = node.parent
    return True


def _style_hidden(el: Tag) -> bool:
    style = attr_str(el, "style").lower().replace(" ", "")
    return el.has_attr("hidden") or "display:none" in style or "visibility:hidden" in style


def visible_text(
    el: Tag,
    exclude: Optional[Tag] = None,
    skip_tags: Collection[str] = (),
    skip: Optional[Callable[[Tag], bool]] = None,
) -> str:
    """Rendered text of *el*, skipping strings under style-hidden elements.

    Screen-reader-only classes still count as text. Strings inside
    *exclude*, inside a tag named in *skip_tags*, or inside a descendant
    for which *skip* returns True are left out as well.
    """
    parts: list[str] = []
    for node in el.descendants:
        if not isinstance(node, NavigableString) or isinstance(node, Comment):
            continue
        hidden = False
        parent = node.parent
        while parent is not None:
            if parent is exclude or _style_hidden(parent):
                hidden = True
                break
            if parent is el:
                break
            if parent.name in skip_tags or (skip is not None and skip(parent)):
                hidden = True
                break
            parent = parent.parent
        if not hidden:
            parts.append(str(node))
    return norm_ws(" ".join(parts))


def is_disabled(el: Tag) -> bool:
    """Check ``disabled`` and ``aria-disabled="true"``, including a disabled fieldset."""
    if el.has_attr("disabled"):
        return True
    if attr_str(el, "aria-disabled").lower() == "true":
        return True
    fieldset = el.find_parent("fieldset")
    return fieldset is not None and fieldset.has_attr("disabled")
