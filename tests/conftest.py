"""Pytest configuration and fixtures."""

import logging
from typing import Callable, Optional

import pytest
from bs4 import BeautifulSoup, Tag

from labels.catalog import DetectorCatalog
from labels.contract import FunctionDetector, make_result
from labels.defaults import reset_defaults
from models.detection import DetectionContext, DetectionOptions
from parsing.context import build_context


def stub_detector(
    name: str,
    priority: float,
    confidence: Optional[float],
    label: Optional[str] = None,
    *,
    applies: bool = True,
    raises: Optional[Exception] = None,
    calls: Optional[list] = None,
) -> FunctionDetector:
    """Detector answering a fixed label at a fixed confidence.

    ``confidence=None`` makes it answer nothing. ``calls`` collects the
    detector name each time ``detect`` runs.
    """

    def find(context: DetectionContext, options: DetectionOptions):
        if calls is not None:
            calls.append(name)
        if raises is not None:
            raise raises
        if confidence is None:
            return None
        return make_result(name, label or name.title(), "attribute", confidence, options)

    return FunctionDetector(
        name=name,
        priority=priority,
        base_confidence=0.5,
        find=find,
        applies=lambda context: applies,
    )


@pytest.fixture
def make_detector() -> Callable[..., FunctionDetector]:
    """Factory for fixed-answer detectors."""
    return stub_detector


@pytest.fixture
def empty_catalog() -> DetectorCatalog:
    return DetectorCatalog.create_empty()


@pytest.fixture
def parse() -> Callable[[str], BeautifulSoup]:
    """Parse an HTML fragment with lxml."""

    def _parse(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")

    return _parse


@pytest.fixture
def context_for(parse) -> Callable[..., DetectionContext]:
    """Build a detection context for the element matching *selector*."""

    def _context(html: str, selector: str = "#target", page_url: str = "") -> DetectionContext:
        soup = parse(html)
        element = soup.select_one(selector)
        assert isinstance(element, Tag), f"no element matches {selector!r}"
        return build_context(element, page_url=page_url)

    return _context


@pytest.fixture
def options() -> DetectionOptions:
    return DetectionOptions()


@pytest.fixture(autouse=True)
def _fresh_defaults():
    """Keep the module-scoped default resolver from leaking across tests."""
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture
def labeler_logs(caplog):
    """Capture records of the ``labeler`` logger even when it does not propagate."""
    logger = logging.getLogger("labeler")
    propagate = logger.propagate
    logger.propagate = False
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="labeler")
    yield caplog
    logger.removeHandler(caplog.handler)
    logger.propagate = propagate
