"""Module-scoped default catalog and resolver, plus environment config.

The defaults are built lazily on first use and can be swapped or reset;
nothing is constructed at import time.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from labels.catalog import DetectorCatalog
from labels.resolver import LabelResolver
from models.resolution import LabelCandidate, ResolutionStrategy, ResolverConfig

logger = logging.getLogger("labeler")

_default_catalog: Optional[DetectorCatalog] = None
_default_resolver: Optional[LabelResolver] = None


def _env_number(key: str, cast: type) -> Any:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return None
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning("Ignoring malformed %s=%r", key, raw)
        return None


def config_from_env() -> ResolverConfig:
    """Build a ``ResolverConfig`` from ``LABELER_*`` environment variables.

    Unset variables keep their defaults. Malformed values are logged and
    ignored.
    """
    overrides: dict[str, Any] = {}

    strategy = os.getenv("LABELER_STRATEGY")
    if strategy:
        try:
            overrides["strategy"] = ResolutionStrategy(strategy.strip())
        except ValueError:
            logger.warning("Ignoring unknown LABELER_STRATEGY=%r", strategy)

    min_confidence = _env_number("LABELER_MIN_CONFIDENCE", float)
    if min_confidence is not None:
        overrides["min_confidence"] = max(0.0, min(1.0, min_confidence))

    max_detectors = _env_number("LABELER_MAX_DETECTORS", int)
    if max_detectors is not None:
        overrides["max_detectors"] = max(0, max_detectors)

    priority_weight = _env_number("LABELER_PRIORITY_WEIGHT", float)
    if priority_weight is not None:
        overrides["priority_weight"] = max(0.0, priority_weight)

    fallback = os.getenv("LABELER_FALLBACK_LABEL")
    if fallback:
        overrides["fallback_label"] = fallback

    return ResolverConfig().merged(overrides)


def disabled_detectors_from_env() -> list[str]:
    """Names listed in the comma-separated ``LABELER_DISABLED_DETECTORS``."""
    raw = os.getenv("LABELER_DISABLED_DETECTORS", "")
    return [name.strip() for name in raw.split(",") if name.strip()]


def get_default_catalog() -> DetectorCatalog:
    """Shared catalog, created with env-disabled detectors turned off."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = DetectorCatalog.create_default()
        for name in disabled_detectors_from_env():
            if not _default_catalog.disable(name):
                logger.warning("Unknown detector in LABELER_DISABLED_DETECTORS: %s", name)
    return _default_catalog


def get_default_resolver() -> LabelResolver:
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = LabelResolver(get_default_catalog(), config_from_env())
    return _default_resolver


def set_default_resolver(resolver: LabelResolver) -> None:
    global _default_resolver
    _default_resolver = resolver


def reset_defaults() -> None:
    """Drop the shared catalog and resolver; the next access rebuilds them."""
    global _default_catalog, _default_resolver
    _default_catalog = None
    _default_resolver = None


def resolve_label(element: Any) -> str:
    """Label string for *element* via the default resolver."""
    return get_default_resolver().resolve_label(element)


def get_label_for_element(element: Any) -> str:
    """Alias of ``resolve_label``."""
    return resolve_label(element)


def get_all_label_candidates(element: Any) -> list[LabelCandidate]:
    return get_default_resolver().resolve_all(element)


def element_has_label(element: Any, threshold: Optional[float] = None) -> bool:
    return get_default_resolver().has_label(element, threshold)
