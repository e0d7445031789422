"""Unit tests for the sufficiency policy."""

import pytest

from recipe_finder.models.models import ScoredCandidate
from recipe_finder.pipeline.sufficiency import DB_PLUS_LLM, DB_SUFFICIENT, LLM_ONLY, SufficiencyPolicy


@pytest.fixture
def ranked(make_recipe):
    """Build a ranked list with the given numbers of full, high and partial matches."""

    def _make(full=0, high=0, partial=0):
        coverages = [1.0] * full + [0.75] * high + [0.25] * partial
        return [
            ScoredCandidate(
                recipe=make_recipe(f"r{index}"),
                matched_count=int(coverage * 4),
                required_count=4,
                coverage=coverage,
            )
            for index, coverage in enumerate(coverages)
        ]

    return _make


class TestSufficiencyPolicy:
    """Test generation decisions with the default thresholds (usable 3, total 5, target 5, cap 3)."""

    def test_enough_stored_recipes_needs_no_generation(self, test_config, ranked, make_query):
        decision = SufficiencyPolicy(test_config).decide(ranked(full=2, high=1, partial=2), make_query("egg"))

        assert decision.needed == 0
        assert decision.reason == DB_SUFFICIENT
        assert decision.usable_count == 3
        assert decision.total_count == 5

    def test_nothing_stored_generates_up_to_cap(self, test_config, ranked, make_query):
        decision = SufficiencyPolicy(test_config).decide(ranked(), make_query("egg"))

        assert decision.needed == 3
        assert decision.reason == LLM_ONLY

    def test_too_few_usable_supplements_stored(self, test_config, ranked, make_query):
        decision = SufficiencyPolicy(test_config).decide(ranked(full=1, high=1, partial=4), make_query("egg"))

        assert decision.needed == 3
        assert decision.reason == DB_PLUS_LLM
        assert decision.usable_count == 2

    def test_needed_is_target_minus_usable(self, test_config, ranked, make_query):
        """Test that three usable but only three total asks for target - usable."""
        decision = SufficiencyPolicy(test_config).decide(ranked(full=3), make_query("egg"))

        assert decision.needed == 2
        assert decision.reason == DB_PLUS_LLM

    def test_partial_matches_do_not_count_as_usable(self, test_config, ranked, make_query):
        decision = SufficiencyPolicy(test_config).decide(ranked(partial=10), make_query("egg"))

        assert decision.usable_count == 0
        assert decision.needed == 3

    def test_needed_is_never_negative(self, test_config, ranked, make_query):
        test_config.TARGET_RECIPES = 2
        test_config.MIN_TOTAL_RECIPES = 10

        decision = SufficiencyPolicy(test_config).decide(ranked(full=4), make_query("egg"))

        assert decision.needed == 0
        assert decision.reason == DB_SUFFICIENT

    def test_zero_cap_disables_generation(self, test_config, ranked, make_query):
        test_config.MAX_GENERATED_PER_REQUEST = 0

        decision = SufficiencyPolicy(test_config).decide(ranked(), make_query("egg"))

        assert decision.needed == 0
