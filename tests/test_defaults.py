"""
Tests for the module-scoped defaults and environment configuration.
"""
import logging

import pytest

from labels import defaults
from labels.contract import make_result
from labels.resolver import LabelResolver
from labels.selection import (
    filter_by_confidence,
    find_candidate_by_detector,
    sort_by_confidence,
    sort_by_priority,
    sort_by_weighted_score,
    unique_labels,
)
from models.detection import DetectionContext
from models.resolution import LabelCandidate, ResolutionStrategy

ENV_KEYS = (
    "LABELER_STRATEGY",
    "LABELER_MIN_CONFIDENCE",
    "LABELER_MAX_DETECTORS",
    "LABELER_PRIORITY_WEIGHT",
    "LABELER_FALLBACK_LABEL",
    "LABELER_DISABLED_DETECTORS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfigFromEnv:
    """Tests for LABELER_* environment overrides."""

    def test_unset_keeps_defaults(self):
        config = defaults.config_from_env()
        assert config.strategy == ResolutionStrategy.BEST_CONFIDENCE
        assert config.min_confidence == 0.30

    def test_values_are_read(self, monkeypatch):
        monkeypatch.setenv("LABELER_STRATEGY", "priority-weighted")
        monkeypatch.setenv("LABELER_MIN_CONFIDENCE", "0.55")
        monkeypatch.setenv("LABELER_MAX_DETECTORS", "4")
        monkeypatch.setenv("LABELER_PRIORITY_WEIGHT", "0.3")
        monkeypatch.setenv("LABELER_FALLBACK_LABEL", "Unknown field")

        config = defaults.config_from_env()

        assert config.strategy == ResolutionStrategy.PRIORITY_WEIGHTED
        assert config.min_confidence == 0.55
        assert config.max_detectors == 4
        assert config.priority_weight == 0.3
        assert config.fallback_label == "Unknown field"

    def test_out_of_range_is_clamped(self, monkeypatch):
        monkeypatch.setenv("LABELER_MIN_CONFIDENCE", "3")
        assert defaults.config_from_env().min_confidence == 1.0

    def test_malformed_values_are_ignored(self, monkeypatch, labeler_logs):
        monkeypatch.setenv("LABELER_STRATEGY", "random")
        monkeypatch.setenv("LABELER_MAX_DETECTORS", "many")

        config = defaults.config_from_env()

        assert config.strategy == ResolutionStrategy.BEST_CONFIDENCE
        assert config.max_detectors is None
        warnings = [r for r in labeler_logs.records if r.levelno == logging.WARNING]
        assert len(warnings) == 2


class TestDefaultInstances:
    """Tests for the shared catalog and resolver."""

    def test_resolver_is_reused_until_reset(self):
        first = defaults.get_default_resolver()
        assert defaults.get_default_resolver() is first
        assert first.catalog is defaults.get_default_catalog()

        defaults.reset_defaults()

        assert defaults.get_default_resolver() is not first

    def test_env_disabled_detectors(self, monkeypatch):
        monkeypatch.setenv("LABELER_DISABLED_DETECTORS", "sibling, text-content")

        catalog = defaults.get_default_catalog()

        assert not catalog.is_enabled("sibling")
        assert not catalog.is_enabled("text-content")
        assert catalog.is_enabled("aria-label")

    def test_set_default_resolver(self, empty_catalog, make_detector):
        empty_catalog.register(make_detector("only", 10, 0.9, "Only Label"))
        defaults.set_default_resolver(LabelResolver(empty_catalog))
        context = DetectionContext(element=object())

        assert defaults.resolve_label(context) == "Only Label"
        assert defaults.get_label_for_element(context) == "Only Label"
        assert [c.detector_name for c in defaults.get_all_label_candidates(context)] == ["only"]
        assert defaults.element_has_label(context) is True
        assert defaults.element_has_label(context, threshold=0.95) is False

    def test_default_resolver_labels_markup(self, context_for):
        ctx = context_for('<label for="target">Username</label><input id="target">')
        assert defaults.resolve_label(ctx) == "Username"


def candidate(name, confidence, priority, score=None, label=None):
    return LabelCandidate(
        label=label or name,
        confidence=confidence,
        detector_name=name,
        detector_priority=priority,
        result=make_result(name, label or name, "attribute", confidence),
        weighted_score=score,
    )


class TestCandidateUtilities:
    """Tests for candidate list helpers."""

    @pytest.fixture
    def candidates(self):
        return [
            candidate("a", 0.5, 30, score=0.9, label="Email"),
            candidate("b", 0.8, 10, label="Email"),
            candidate("c", 0.6, 20, score=0.7, label="E-mail"),
        ]

    def test_sorting(self, candidates):
        assert [c.detector_name for c in sort_by_confidence(candidates)] == ["b", "c", "a"]
        assert [c.detector_name for c in sort_by_priority(candidates)] == ["b", "c", "a"]
        assert [c.detector_name for c in sort_by_weighted_score(candidates)] == ["a", "b", "c"]

    def test_filter_and_lookup(self, candidates):
        assert [c.detector_name for c in filter_by_confidence(candidates, 0.6)] == ["b", "c"]
        assert find_candidate_by_detector(candidates, "c").label == "E-mail"
        assert find_candidate_by_detector(candidates, "z") is None

    def test_unique_labels_keep_first_seen_order(self, candidates):
        assert unique_labels(candidates) == ["Email", "E-mail"]
