"""Label resolver: runs the catalog's detectors and arbitrates their answers.

Strategies:
    first-match        First result meeting the floor wins; iteration stops.
    best-confidence    Every enabled detector runs; highest confidence wins.
    priority-weighted  Like best-confidence, but confidence is boosted by
                       ``priority_weight * (100 - priority) / 100``.

A detector that raises from ``can_detect`` or ``detect`` is logged and
counted as producing nothing; it never aborts the resolution.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Optional, Union

from labels.catalog import DetectorCatalog
from labels.contract import (
    LabelDetector,
    is_detection_result,
    merge_detection_options,
)
from labels.selection import select_candidate, weighted_score
from models.detection import DetectionContext, DetectionOptions, DetectionResult
from models.resolution import (
    LabelCandidate,
    ResolutionStrategy,
    ResolvedLabel,
    ResolverConfig,
)
from parsing.context import build_context

logger = logging.getLogger("labeler")

ConfigInput = Union[ResolverConfig, Mapping[str, Any], None]
ContextFactory = Callable[[Any], DetectionContext]


class LabelResolver:
    """Resolve the best label for an element from a ``DetectorCatalog``.

    Args:
        catalog: Detector source. A fresh default catalog when omitted.
        config: Partial ``ResolverConfig`` merged over the defaults.
        context_factory: Builds a ``DetectionContext`` from a raw element.
            Prebuilt contexts passed to ``resolve`` bypass it.
    """

    def __init__(
        self,
        catalog: Optional[DetectorCatalog] = None,
        config: ConfigInput = None,
        *,
        context_factory: Optional[ContextFactory] = None,
    ) -> None:
        self._catalog = catalog if catalog is not None else DetectorCatalog.create_default()
        self._config = ResolverConfig().merged(config)
        self._context_factory = context_factory or build_context

    # -- resolution ---------------------------------------------------------

    def resolve(self, target: Any, config: ConfigInput = None) -> ResolvedLabel:
        """Resolve *target* (an element or a ``DetectionContext``)."""
        effective = self._config.merged(config)
        return self._resolve(target, effective.effective_strategy, effective)

    def resolve_with_strategy(
        self,
        target: Any,
        strategy: Union[ResolutionStrategy, str],
        config: ConfigInput = None,
    ) -> ResolvedLabel:
        """Resolve *target* with *strategy* regardless of the configured one.

        A configured ``stop_on_first_match`` is cleared for this call.
        """
        effective = self._config.merged(config).merged(
            {"strategy": strategy, "stop_on_first_match": False}
        )
        return self._resolve(target, effective.effective_strategy, effective)

    def resolve_all(
        self,
        target: Any,
        options: Union[DetectionOptions, Mapping[str, Any], None] = None,
    ) -> list[LabelCandidate]:
        """Every candidate from a full collection pass, without selection."""
        context = self._to_context(target)
        if options is None:
            options = self._config.detection_options
        candidates, _ = self._collect(
            context,
            merge_detection_options(options),
            self._config,
            ResolutionStrategy.BEST_CONFIDENCE,
        )
        return candidates

    def resolve_label(self, target: Any) -> str:
        return self.resolve(target).label

    def has_label(self, target: Any, min_confidence: Optional[float] = None) -> bool:
        """True when resolution succeeds at or above *min_confidence*."""
        result = self.resolve(target)
        threshold = self._config.min_confidence if min_confidence is None else min_confidence
        return result.success and result.confidence >= threshold

    def _resolve(
        self,
        target: Any,
        strategy: ResolutionStrategy,
        config: ResolverConfig,
    ) -> ResolvedLabel:
        start = time.perf_counter()
        context = self._to_context(target)
        options = merge_detection_options(config.detection_options)

        candidates, detectors_run = self._collect(context, options, config, strategy)
        eligible = [c for c in candidates if c.confidence >= config.min_confidence]
        selected = select_candidate(eligible, strategy)
        duration_ms = (time.perf_counter() - start) * 1000

        if selected is None:
            logger.debug(
                "No label above %.2f from %d candidates",
                config.min_confidence,
                len(candidates),
                extra={"strategy": strategy.value},
            )
            return ResolvedLabel(
                label=config.fallback_label,
                confidence=0.0,
                detector_name="none",
                strategy=strategy,
                success=False,
                candidates=candidates,
                detectors_run=detectors_run,
                detectors_succeeded=len(candidates),
                duration_ms=duration_ms,
            )

        logger.debug(
            "Resolved %r (%.2f) from %d candidates",
            selected.label,
            selected.confidence,
            len(candidates),
            extra={"strategy": strategy.value, "detector": selected.detector_name},
        )
        return ResolvedLabel(
            label=selected.label,
            confidence=selected.confidence,
            detector_name=selected.detector_name,
            strategy=strategy,
            success=True,
            candidates=candidates,
            detectors_run=detectors_run,
            detectors_succeeded=len(candidates),
            duration_ms=duration_ms,
            result=selected.result,
        )

    # -- collection ---------------------------------------------------------

    def _to_context(self, target: Any) -> DetectionContext:
        if isinstance(target, DetectionContext):
            return target
        return self._context_factory(target)

    def _collect(
        self,
        context: DetectionContext,
        options: DetectionOptions,
        config: ResolverConfig,
        strategy: ResolutionStrategy,
    ) -> tuple[list[LabelCandidate], int]:
        """Run detectors in priority order; return candidates and run count.

        ``max_detectors`` caps the detectors considered, including those
        whose ``can_detect`` declines.
        """
        detectors = self._catalog.get_enabled()
        if config.max_detectors is not None:
            detectors = detectors[: config.max_detectors]

        candidates: list[LabelCandidate] = []
        detectors_run = 0
        for detector in detectors:
            try:
                if not detector.can_detect(context):
                    continue
                detectors_run += 1
                result = detector.detect(context, options)
            except Exception:
                logger.warning(
                    "Detector %r raised; treating as no result",
                    detector.name,
                    exc_info=True,
                    extra={"detector": detector.name},
                )
                continue

            if result is None:
                continue
            if not is_detection_result(result) or not result.label.strip():
                logger.warning(
                    "Detector %r returned a malformed result; ignoring it",
                    detector.name,
                    extra={"detector": detector.name},
                )
                continue

            if strategy == ResolutionStrategy.FIRST_MATCH:
                if result.confidence >= config.min_confidence:
                    candidates.append(self._candidate(detector, result))
                    break
                continue

            candidate = self._candidate(detector, result)
            candidate.weighted_score = weighted_score(
                candidate.confidence,
                candidate.detector_priority,
                config.priority_weight,
            )
            candidates.append(candidate)

        return candidates, detectors_run

    def _candidate(
        self, detector: LabelDetector, result: DetectionResult
    ) -> LabelCandidate:
        priority = self._catalog.get_priority(detector.name)
        return LabelCandidate(
            label=result.label,
            confidence=result.confidence,
            detector_name=detector.name,
            detector_priority=detector.priority if priority is None else priority,
            result=result,
        )

    # -- configuration ------------------------------------------------------

    @property
    def strategy(self) -> ResolutionStrategy:
        return self._config.strategy

    @strategy.setter
    def strategy(self, value: Union[ResolutionStrategy, str]) -> None:
        self._config = self._config.merged({"strategy": value})

    @property
    def min_confidence(self) -> float:
        return self._config.min_confidence

    @min_confidence.setter
    def min_confidence(self, value: float) -> None:
        self._config = self._config.merged(
            {"min_confidence": max(0.0, min(1.0, value))}
        )

    @property
    def catalog(self) -> DetectorCatalog:
        return self._catalog

    @catalog.setter
    def catalog(self, catalog: DetectorCatalog) -> None:
        self._catalog = catalog

    @property
    def config(self) -> ResolverConfig:
        """A copy of the current configuration."""
        return self._config.model_copy(deep=True)

    def set_config(self, config: ConfigInput) -> None:
        """Merge a partial configuration into the current one."""
        self._config = self._config.merged(config)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def create_label_resolver(config: ConfigInput = None) -> LabelResolver:
    """Resolver over a fresh default catalog."""
    return LabelResolver(config=config)


def create_resolver_with_catalog(
    catalog: DetectorCatalog, config: ConfigInput = None
) -> LabelResolver:
    return LabelResolver(catalog, config)


def create_fast_resolver() -> LabelResolver:
    """First-match resolver: stops at the first acceptable label."""
    return LabelResolver(config={"strategy": ResolutionStrategy.FIRST_MATCH})


def create_accurate_resolver() -> LabelResolver:
    """Best-confidence resolver with a lower 0.20 floor."""
    return LabelResolver(
        config={
            "strategy": ResolutionStrategy.BEST_CONFIDENCE,
            "min_confidence": 0.2,
        }
    )
