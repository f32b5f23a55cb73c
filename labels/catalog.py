"""Detector catalog: named detector instances with enable flags and priorities.

Each name maps to exactly one entry holding the detector, its enabled flag
and an optional priority override, so removing a name drops all three at
once. Ordered views sort by effective priority (override, else the
detector's own ``priority``); equal priorities keep registration order.

Listeners are called synchronously after each change. A listener that
raises is logged and skipped; it never aborts the operation or the
remaining listeners.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional

from labels.contract import LabelDetector, validate_detector
from labels.errors import DuplicateNameError
from models.registry import RegistryEvent, RegistryEventType, RegistryStats

logger = logging.getLogger("labeler")

RegistryListener = Callable[[RegistryEvent], None]


@dataclass
class _Entry:
    detector: LabelDetector
    enabled: bool = True
    priority_override: Optional[float] = None

    @property
    def priority(self) -> float:
        if self.priority_override is not None:
            return self.priority_override
        return self.detector.priority


class DetectorCatalog:
    """Addressable, priority-ordered collection of label detectors.

    Args:
        load_defaults: Preload the built-in detectors.
        exclude: Built-in detector names to skip when loading defaults.
        custom_detectors: Extra detectors registered after the defaults.
    """

    def __init__(
        self,
        *,
        load_defaults: bool = True,
        exclude: Iterable[str] = (),
        custom_detectors: Iterable[LabelDetector] = (),
    ) -> None:
        self._entries: dict[str, _Entry] = {}
        self._listeners: list[RegistryListener] = []
        self._exclude = frozenset(exclude)

        if load_defaults:
            self._load_defaults()
        for detector in custom_detectors:
            self.register(detector)

    # -- construction -------------------------------------------------------

    @classmethod
    def create_default(cls, exclude: Iterable[str] = ()) -> "DetectorCatalog":
        """Catalog preloaded with every built-in detector not in *exclude*."""
        return cls(load_defaults=True, exclude=exclude)

    @classmethod
    def create_empty(cls) -> "DetectorCatalog":
        """Catalog with nothing registered."""
        return cls(load_defaults=False)

    @classmethod
    def create_with(cls, names: Iterable[str]) -> "DetectorCatalog":
        """Catalog holding only the named built-ins. Unknown names are ignored."""
        from detectors import create_detector_by_name

        catalog = cls(load_defaults=False)
        for name in names:
            detector = create_detector_by_name(name)
            if detector is not None and not catalog.has(name):
                catalog.register(detector)
        return catalog

    def _load_defaults(self) -> None:
        from detectors import create_default_detectors

        for detector in create_default_detectors():
            if detector.name in self._exclude:
                continue
            self.register(detector, replace=True)

    # -- registration -------------------------------------------------------

    def register(
        self,
        detector: LabelDetector,
        *,
        enabled: bool = True,
        priority_override: Optional[float] = None,
        replace: bool = False,
    ) -> None:
        """Add *detector* under its ``name``.

        Raises:
            InvalidDetectorError: *detector* does not satisfy the contract.
            DuplicateNameError: The name is taken and *replace* is False.
        """
        validate_detector(detector)
        name = detector.name
        if name in self._entries and not replace:
            raise DuplicateNameError(name)

        # Replacing keeps the original slot so ties stay in registration order.
        self._entries[name] = _Entry(
            detector=detector,
            enabled=enabled,
            priority_override=priority_override,
        )
        self._emit("registered", name)

    def unregister(self, name: str) -> bool:
        """Remove *name* with its override and enabled flag."""
        if self._entries.pop(name, None) is None:
            return False
        self._emit("unregistered", name)
        return True

    def clear(self) -> None:
        """Remove every detector."""
        self._entries.clear()
        self._emit("cleared")

    def reset(self) -> None:
        """Clear, then reload the built-in detectors."""
        self.clear()
        self._load_defaults()

    # -- lookup -------------------------------------------------------------

    def get(self, name: str) -> Optional[LabelDetector]:
        entry = self._entries.get(name)
        return entry.detector if entry else None

    def has(self, name: str) -> bool:
        return name in self._entries

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def _sorted(self, enabled: Optional[bool] = None) -> list[LabelDetector]:
        entries = [
            e for e in self._entries.values()
            if enabled is None or e.enabled == enabled
        ]
        return [e.detector for e in sorted(entries, key=lambda e: e.priority)]

    def get_all(self) -> list[LabelDetector]:
        """All detectors, ascending by effective priority."""
        return self._sorted()

    def get_enabled(self) -> list[LabelDetector]:
        """Enabled detectors, ascending by effective priority."""
        return self._sorted(enabled=True)

    def get_disabled(self) -> list[LabelDetector]:
        """Disabled detectors, ascending by effective priority."""
        return self._sorted(enabled=False)

    def names(self) -> list[str]:
        return [d.name for d in self.get_all()]

    def enabled_names(self) -> list[str]:
        return [d.name for d in self.get_enabled()]

    def get_priority(self, name: str) -> Optional[float]:
        """Effective priority of *name*, or None when not registered."""
        entry = self._entries.get(name)
        return entry.priority if entry else None

    def is_enabled(self, name: str) -> bool:
        entry = self._entries.get(name)
        return bool(entry and entry.enabled)

    # -- enable / disable ---------------------------------------------------

    def _set_enabled(self, name: str, enabled: bool) -> bool:
        entry = self._entries.get(name)
        if entry is None:
            return False
        if entry.enabled != enabled:
            entry.enabled = enabled
            self._emit("enabled" if enabled else "disabled", name)
        return True

    def enable(self, name: str) -> bool:
        return self._set_enabled(name, True)

    def disable(self, name: str) -> bool:
        return self._set_enabled(name, False)

    def enable_all(self) -> None:
        for name in list(self._entries):
            self._set_enabled(name, True)

    def disable_all(self) -> None:
        for name in list(self._entries):
            self._set_enabled(name, False)

    def enable_only(self, names: Iterable[str]) -> None:
        """Enable exactly the known names in *names*; disable the rest."""
        wanted = set(names)
        for name in list(self._entries):
            self._set_enabled(name, name in wanted)

    # -- priority overrides -------------------------------------------------

    def set_priority(self, name: str, priority: float) -> bool:
        entry = self._entries.get(name)
        if entry is None:
            return False
        entry.priority_override = priority
        self._emit("priorityChanged", name)
        return True

    def reset_priority(self, name: str) -> bool:
        """Drop the override for *name*, restoring its intrinsic priority."""
        entry = self._entries.get(name)
        if entry is None:
            return False
        if entry.priority_override is not None:
            entry.priority_override = None
            self._emit("priorityChanged", name)
        return True

    def reset_all_priorities(self) -> None:
        for name in list(self._entries):
            self.reset_priority(name)

    # -- iteration / introspection -----------------------------------------

    def __iter__(self) -> Iterator[LabelDetector]:
        return iter(self.get_all())

    def iter_enabled(self) -> Iterator[LabelDetector]:
        return iter(self.get_enabled())

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> RegistryStats:
        enabled = sum(1 for e in self._entries.values() if e.enabled)
        return RegistryStats(
            total=len(self._entries),
            enabled=enabled,
            disabled=len(self._entries) - enabled,
            by_priority=self.names(),
        )

    def __repr__(self) -> str:
        return (
            f"DetectorCatalog(total={len(self)}, "
            f"enabled={self.enabled_names()!r})"
        )

    # -- events -------------------------------------------------------------

    def add_event_listener(self, listener: RegistryListener) -> None:
        self._listeners.append(listener)

    def remove_event_listener(self, listener: RegistryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(
        self, event_type: RegistryEventType, name: Optional[str] = None
    ) -> None:
        if not self._listeners:
            return
        event = RegistryEvent(
            type=event_type, detector_name=name, timestamp=time.time()
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.error(
                    "Registry listener failed on %s event",
                    event_type,
                    exc_info=True,
                    extra={"detector": name},
                )
