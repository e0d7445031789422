"""Match ranking and tier classification."""

from typing import Iterable, List

from recipe_finder.models.models import MatchTier, ScoredCandidate


def _sort_key(candidate: ScoredCandidate):
    created_at = candidate.recipe.created_at
    # Timestamped recipes first (newest first); the rest keep retrieval order
    recency = (0, -created_at.timestamp()) if created_at else (1, 0.0)
    return (-candidate.coverage, -candidate.matched_count, recency)


def rank(candidates: Iterable[ScoredCandidate]) -> List[ScoredCandidate]:
    """Order candidates by coverage, then matched count, then recency.

    The sort is stable, so equal candidates keep the order they were retrieved in.
    Nothing is dropped.
    """
    return sorted(candidates, key=_sort_key)


def classify(candidate: ScoredCandidate, high_match_threshold: float) -> MatchTier:
    if candidate.coverage >= 1.0:
        return MatchTier.USER_HAS_ALL
    if candidate.coverage >= high_match_threshold:
        return MatchTier.HIGH_MATCH
    return MatchTier.PARTIAL_MATCH
