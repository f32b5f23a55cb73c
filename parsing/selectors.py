"""XPath and CSS descriptors recorded as label provenance."""

from __future__ import annotations

from bs4 import Tag

from parsing.labels import attr_str, class_list


def element_xpath(el: Tag) -> str:
    """Absolute XPath for *el*.

    Short-circuits to ``//*[@id="..."]`` when the element has an id.
    Positional indexes are emitted only where same-tag siblings exist.
    """
    el_id = attr_str(el, "id")
    if el_id:
        return f'//*[@id="{el_id}"]'

    steps: list[str] = []
    node = el
    while isinstance(node, Tag) and node.name != "[document]":
        parent = node.parent
        step = node.name
        if isinstance(parent, Tag):
            same = parent.find_all(node.name, recursive=False)
            if len(same) > 1:
                # Tag equality is structural, so match by identity.
                position = next(i for i, s in enumerate(same) if s is node)
                step = f"{node.name}[{position + 1}]"
        steps.append(step)
        node = parent
    return "/" + "/".join(reversed(steps))


def css_descriptor(el: Tag) -> str:
    """Short ``tag#id.class`` description of *el*, for metadata only."""
    desc = el.name or ""
    el_id = attr_str(el, "id")
    if el_id:
        return f"{desc}#{el_id}"
    classes = class_list(el)[:2]
    if classes:
        desc += "." + ".".join(classes)
    return desc
