"""Candidate scoring, selection and list utilities used by the resolver."""

from __future__ import annotations

from typing import Iterable, Optional

from models.resolution import LabelCandidate, ResolutionStrategy


def weighted_score(
    confidence: float, priority: float, priority_weight: float
) -> float:
    """Confidence boosted by how early the detector runs.

    ``confidence * (1 + priority_weight * bonus)`` where
    ``bonus = (100 - priority) / 100`` clamped to [0, 1]. A priority of 100
    or more earns no bonus, so the score never drops below the confidence.
    """
    bonus = min(1.0, max(0.0, (100 - priority) / 100))
    return confidence * (1 + priority_weight * bonus)


def _score(candidate: LabelCandidate, strategy: ResolutionStrategy) -> float:
    if (
        strategy == ResolutionStrategy.PRIORITY_WEIGHTED
        and candidate.weighted_score is not None
    ):
        return candidate.weighted_score
    return candidate.confidence


def select_candidate(
    candidates: list[LabelCandidate], strategy: ResolutionStrategy
) -> Optional[LabelCandidate]:
    """Pick the winner from *candidates*, which arrive in priority order.

    First-match takes the head of the list. The other strategies take the
    strictly highest score, so ties go to the earlier candidate.
    """
    if not candidates:
        return None
    if strategy == ResolutionStrategy.FIRST_MATCH:
        return candidates[0]

    best = candidates[0]
    for candidate in candidates[1:]:
        if _score(candidate, strategy) > _score(best, strategy):
            best = candidate
    return best


def sort_by_confidence(candidates: Iterable[LabelCandidate]) -> list[LabelCandidate]:
    """Highest confidence first."""
    return sorted(candidates, key=lambda c: c.confidence, reverse=True)


def sort_by_priority(candidates: Iterable[LabelCandidate]) -> list[LabelCandidate]:
    """Lowest (earliest) priority first."""
    return sorted(candidates, key=lambda c: c.detector_priority)


def sort_by_weighted_score(
    candidates: Iterable[LabelCandidate],
) -> list[LabelCandidate]:
    """Highest weighted score first, using confidence when no score was set."""
    return sorted(
        candidates,
        key=lambda c: c.weighted_score if c.weighted_score is not None else c.confidence,
        reverse=True,
    )


def filter_by_confidence(
    candidates: Iterable[LabelCandidate], min_confidence: float
) -> list[LabelCandidate]:
    return [c for c in candidates if c.confidence >= min_confidence]


def unique_labels(candidates: Iterable[LabelCandidate]) -> list[str]:
    """Distinct labels in first-seen order."""
    seen: dict[str, None] = {}
    for candidate in candidates:
        seen.setdefault(candidate.label, None)
    return list(seen)


def find_candidate_by_detector(
    candidates: Iterable[LabelCandidate], detector_name: str
) -> Optional[LabelCandidate]:
    for candidate in candidates:
        if candidate.detector_name == detector_name:
            return candidate
    return None
