"""Sufficiency policy: decide whether stored matches are enough or generation is needed."""

from typing import Sequence

from recipe_finder.models.models import MatchTier, RecipeQuery, ScoredCandidate, SupplementDecision
from recipe_finder.pipeline.ranker import classify
from recipe_finder.utils.config import Config

DB_SUFFICIENT = "db-sufficient"
DB_PLUS_LLM = "db-plus-llm"
LLM_ONLY = "llm-only"


class SufficiencyPolicy:
    """Counts usable (user-has-all or high-match) stored candidates against configured minimums.

    When either minimum is missed, asks for enough generated recipes to reach
    TARGET_RECIPES usable ones, capped at MAX_GENERATED_PER_REQUEST.
    """

    def __init__(self, config: Config) -> None:
        self.high_match_threshold = config.HIGH_MATCH_THRESHOLD
        self.min_usable = config.MIN_USABLE_RECIPES
        self.min_total = config.MIN_TOTAL_RECIPES
        self.target = config.TARGET_RECIPES
        self.max_generated = config.MAX_GENERATED_PER_REQUEST

    def decide(self, ranked: Sequence[ScoredCandidate], query: RecipeQuery) -> SupplementDecision:
        usable = sum(
            1
            for candidate in ranked
            if classify(candidate, self.high_match_threshold) != MatchTier.PARTIAL_MATCH
        )
        total = len(ranked)

        needed = 0
        if usable < self.min_usable or total < self.min_total:
            needed = max(0, min(self.target - usable, self.max_generated))

        if needed == 0:
            reason = DB_SUFFICIENT
        elif total == 0:
            reason = LLM_ONLY
        else:
            reason = DB_PLUS_LLM

        return SupplementDecision(needed=needed, reason=reason, usable_count=usable, total_count=total)
