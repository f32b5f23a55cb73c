"""
Tests for the detector catalog.

Verifies that:
- Registration, replacement and removal keep entries consistent
- Ordered views follow effective priority with stable ties
- Enable flags and priority overrides behave per name
- Listeners see every change and cannot break the catalog
"""
import logging

import pytest

from detectors import DEFAULT_DETECTOR_NAMES
from labels.catalog import DetectorCatalog
from labels.errors import DuplicateNameError, InvalidDetectorError


class TestRegistration:
    """Tests for register / unregister."""

    def test_register_and_lookup(self, empty_catalog, make_detector):
        detector = make_detector("alpha", 30, 0.5)
        empty_catalog.register(detector)

        assert empty_catalog.get("alpha") is detector
        assert empty_catalog.has("alpha")
        assert "alpha" in empty_catalog
        assert empty_catalog.is_enabled("alpha")
        assert len(empty_catalog) == 1

    def test_duplicate_name_rejected(self, empty_catalog, make_detector):
        empty_catalog.register(make_detector("a", 30, 0.5))

        with pytest.raises(DuplicateNameError) as excinfo:
            empty_catalog.register(make_detector("a", 40, 0.6))

        assert excinfo.value.name == "a"
        assert "replace=True" in str(excinfo.value)
        assert len(empty_catalog) == 1
        assert empty_catalog.get_priority("a") == 30

    def test_replace_keeps_registration_slot(self, empty_catalog, make_detector):
        empty_catalog.register(make_detector("a", 30, 0.5))
        empty_catalog.register(make_detector("b", 30, 0.5))
        replacement = make_detector("a", 30, 0.9)

        empty_catalog.register(replacement, replace=True)

        assert empty_catalog.get("a") is replacement
        assert empty_catalog.names() == ["a", "b"]

    def test_register_disabled_with_override(self, empty_catalog, make_detector):
        empty_catalog.register(make_detector("a", 30, 0.5), enabled=False, priority_override=5)

        assert not empty_catalog.is_enabled("a")
        assert empty_catalog.get_priority("a") == 5
        assert empty_catalog.get_disabled()[0].name == "a"

    def test_invalid_detector_rejected(self, empty_catalog):
        with pytest.raises(InvalidDetectorError):
            empty_catalog.register(object())
        assert len(empty_catalog) == 0

    def test_unregister_drops_everything(self, empty_catalog, make_detector):
        empty_catalog.register(make_detector("a", 30, 0.5), priority_override=1)

        assert empty_catalog.unregister("a") is True
        assert empty_catalog.get("a") is None
        assert empty_catalog.get_priority("a") is None
        assert not empty_catalog.is_enabled("a")
        assert empty_catalog.names() == []
        assert empty_catalog.unregister("a") is False

    def test_clear(self, empty_catalog, make_detector):
        empty_catalog.register(make_detector("a", 30, 0.5))
        empty_catalog.clear()
        assert len(empty_catalog) == 0


class TestOrdering:
    """Tests for priority-ordered views."""

    @pytest.fixture
    def catalog(self, empty_catalog, make_detector):
        empty_catalog.register(make_detector("late", 80, 0.5))
        empty_catalog.register(make_detector("early", 10, 0.5))
        empty_catalog.register(make_detector("tie-1", 50, 0.5))
        empty_catalog.register(make_detector("tie-2", 50, 0.5))
        return empty_catalog

    def test_sorted_by_priority_with_stable_ties(self, catalog):
        assert catalog.names() == ["early", "tie-1", "tie-2", "late"]

    def test_iteration_matches_views(self, catalog):
        catalog.disable("tie-1")
        assert [d.name for d in catalog] == catalog.names()
        assert [d.name for d in catalog.iter_enabled()] == ["early", "tie-2", "late"]
        assert catalog.enabled_names() == ["early", "tie-2", "late"]

    def test_override_reorders(self, catalog):
        assert catalog.set_priority("late", 5) is True
        assert catalog.names()[0] == "late"
        assert catalog.get_priority("late") == 5

        assert catalog.reset_priority("late") is True
        assert catalog.names()[-1] == "late"
        assert catalog.get_priority("late") == 80

    def test_reset_all_priorities(self, catalog):
        catalog.set_priority("late", 1)
        catalog.set_priority("early", 99)
        catalog.reset_all_priorities()
        assert catalog.names() == ["early", "tie-1", "tie-2", "late"]

    def test_unknown_names(self, catalog):
        assert catalog.set_priority("missing", 1) is False
        assert catalog.reset_priority("missing") is False
        assert catalog.enable("missing") is False
        assert catalog.disable("missing") is False
        assert catalog.get_priority("missing") is None

    def test_stats(self, catalog):
        catalog.disable("late")
        stats = catalog.get_stats()
        assert stats.total == 4
        assert stats.enabled == 3
        assert stats.disabled == 1
        assert stats.by_priority == ["early", "tie-1", "tie-2", "late"]


class TestEnableFlags:
    """Tests for enable / disable helpers."""

    @pytest.fixture
    def catalog(self, empty_catalog, make_detector):
        for name, priority in (("a", 10), ("b", 20), ("c", 30)):
            empty_catalog.register(make_detector(name, priority, 0.5))
        return empty_catalog

    def test_disable_all_then_enable_all(self, catalog):
        catalog.disable_all()
        assert catalog.get_enabled() == []
        catalog.enable_all()
        assert catalog.enabled_names() == ["a", "b", "c"]

    def test_enable_only_ignores_unknown(self, catalog):
        catalog.enable_only(["c", "missing"])
        assert catalog.enabled_names() == ["c"]
        assert [d.name for d in catalog.get_disabled()] == ["a", "b"]


class TestEvents:
    """Tests for change notifications."""

    @pytest.fixture
    def events(self, empty_catalog):
        seen = []
        empty_catalog.add_event_listener(lambda e: seen.append((e.type, e.detector_name)))
        return seen

    def test_events_for_each_change(self, empty_catalog, make_detector, events):
        empty_catalog.register(make_detector("a", 30, 0.5))
        empty_catalog.disable("a")
        empty_catalog.enable("a")
        empty_catalog.set_priority("a", 1)
        empty_catalog.reset_priority("a")
        empty_catalog.unregister("a")
        empty_catalog.clear()

        assert events == [
            ("registered", "a"),
            ("disabled", "a"),
            ("enabled", "a"),
            ("priorityChanged", "a"),
            ("priorityChanged", "a"),
            ("unregistered", "a"),
            ("cleared", None),
        ]

    def test_no_event_without_state_change(self, empty_catalog, make_detector, events):
        empty_catalog.register(make_detector("a", 30, 0.5))
        events.clear()

        empty_catalog.enable("a")
        empty_catalog.reset_priority("a")
        empty_catalog.unregister("missing")

        assert events == []

    def test_raising_listener_is_isolated(
        self, empty_catalog, make_detector, events, labeler_logs
    ):
        def broken(event):
            raise RuntimeError("boom")

        empty_catalog.add_event_listener(broken)
        empty_catalog.register(make_detector("a", 30, 0.5))

        assert empty_catalog.has("a")
        assert events == [("registered", "a")]
        errors = [r for r in labeler_logs.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].exc_info is not None

    def test_removed_listener_not_called(self, empty_catalog, make_detector):
        seen = []

        def listener(event):
            seen.append(event)

        empty_catalog.add_event_listener(listener)
        empty_catalog.remove_event_listener(listener)
        empty_catalog.register(make_detector("a", 30, 0.5))
        assert seen == []


class TestConstruction:
    """Tests for the construction modes."""

    def test_default_catalog_loads_builtins(self):
        catalog = DetectorCatalog()
        assert set(catalog.names()) == set(DEFAULT_DETECTOR_NAMES)
        assert catalog.names()[0] == "google-forms"
        assert catalog.names()[-1] == "text-content"

    def test_create_default_with_exclude(self):
        catalog = DetectorCatalog.create_default(exclude=["bootstrap", "material-ui"])
        assert "bootstrap" not in catalog
        assert "material-ui" not in catalog
        assert len(catalog) == len(DEFAULT_DETECTOR_NAMES) - 2

    def test_create_with_subset(self):
        catalog = DetectorCatalog.create_with(["placeholder", "aria-label", "nope"])
        assert catalog.names() == ["aria-label", "placeholder"]

    def test_custom_detectors_registered(self, make_detector):
        catalog = DetectorCatalog(load_defaults=False, custom_detectors=[make_detector("x", 1, 0.5)])
        assert catalog.names() == ["x"]

    def test_reset_reloads_defaults(self, make_detector):
        catalog = DetectorCatalog()
        catalog.unregister("sibling")
        catalog.register(make_detector("x", 1, 0.5))

        catalog.reset()

        assert set(catalog.names()) == set(DEFAULT_DETECTOR_NAMES)

    def test_repr(self, empty_catalog, make_detector):
        empty_catalog.register(make_detector("a", 30, 0.5))
        assert repr(empty_catalog) == "DetectorCatalog(total=1, enabled=['a'])"
