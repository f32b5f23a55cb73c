"""HTML parsing and pruning ahead of label detection.

Strips content that never carries a label (scripts, styles, comments)
while keeping every attribute, since detectors rely on class, style,
ARIA and data-* attributes.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Comment

STRIP_TAGS = {"script", "style", "noscript"}


def prune_html(raw_html: str) -> BeautifulSoup:
    """Parse *raw_html* with lxml and drop non-semantic subtrees and comments.

    ``<link>`` tags are kept: the Bootstrap detector inspects stylesheet
    hrefs to recognize the framework.

    Returns:
        A ``BeautifulSoup`` object with ``<script>``, ``<style>`` and
        ``<noscript>`` decomposed and comments removed.
    """
    soup = BeautifulSoup(raw_html, "lxml")

    for tag_name in STRIP_TAGS:
        for tag in soup.find_all(tag_name):
            tag.decompose()

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    return soup
