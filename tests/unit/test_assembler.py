"""Unit tests for the response assembler."""

import pytest

from recipe_finder.models.models import RecipeSource, ScoredCandidate, SupplementDecision
from recipe_finder.pipeline.assembler import assemble
from recipe_finder.pipeline.sufficiency import DB_PLUS_LLM, DB_SUFFICIENT, LLM_ONLY


@pytest.fixture
def scored(make_recipe):
    def _make(title, matched, required, **fields):
        return ScoredCandidate(
            recipe=make_recipe(title, **fields),
            matched_count=matched,
            required_count=required,
            coverage=matched / required,
        )

    return _make


def _decision(reason, needed=0):
    return SupplementDecision(needed=needed, reason=reason)


class TestAssemble:
    """Test merging, truncation and metadata."""

    def test_stored_first_then_generated(self, scored, make_recipe, make_query, test_config):
        ranked = [scored("Full", 2, 2, id="a"), scored("High", 3, 4, id="b"), scored("Partial", 1, 4, id="c")]
        generated = [make_recipe("Gen 1", source="LLM"), make_recipe("Gen 2", source="LLM")]

        response = assemble(ranked, generated, make_query("egg"), _decision(DB_PLUS_LLM, 2), test_config)

        assert [r.title for r in response.recipes] == ["Full", "High", "Partial", "Gen 1", "Gen 2"]
        metadata = response.metadata
        assert metadata.total_recipes == 5
        assert metadata.user_has_all_count == 1
        assert metadata.high_match_count == 1
        assert metadata.llm_generated_count == 2
        assert metadata.fallback_count == 0
        assert metadata.user_has_all_recipe_ids == ["a"]
        assert metadata.has_user_has_all_recipes is True
        assert metadata.strategy == DB_PLUS_LLM

    def test_duplicate_stored_ids_are_removed(self, scored, make_query, test_config):
        ranked = [scored("Once", 1, 1, id="same"), scored("Twice", 1, 1, id="same")]

        response = assemble(ranked, [], make_query("egg"), _decision(DB_SUFFICIENT), test_config)

        assert [r.title for r in response.recipes] == ["Once"]
        assert response.metadata.user_has_all_recipe_ids == ["same"]

    def test_generated_recipes_are_not_content_deduplicated(self, make_recipe, make_query, test_config):
        generated = [make_recipe("Same", source="LLM"), make_recipe("Same", source="LLM")]

        response = assemble([], generated, make_query("egg"), _decision(LLM_ONLY, 2), test_config)

        assert len(response.recipes) == 2

    def test_page_size_keeps_stored_slots(self, scored, make_recipe, make_query, test_config):
        test_config.PAGE_SIZE = 3
        ranked = [scored(f"S{i}", 1, 1) for i in range(2)]
        generated = [make_recipe(f"G{i}", source="LLM") for i in range(3)]

        response = assemble(ranked, generated, make_query("egg"), _decision(DB_PLUS_LLM, 3), test_config)

        assert [r.title for r in response.recipes] == ["S0", "S1", "G0"]
        assert response.metadata.total_recipes == 3
        assert response.metadata.llm_generated_count == 1

    def test_page_size_truncates_stored(self, scored, make_query, test_config):
        test_config.PAGE_SIZE = 2
        ranked = [scored(f"S{i}", 1, 1) for i in range(4)]

        response = assemble(ranked, [], make_query("egg"), _decision(DB_SUFFICIENT), test_config)

        assert response.metadata.total_recipes == 2
        assert response.metadata.user_has_all_count == 2

    def test_fallback_recipes_are_counted_and_noted(self, make_recipe, make_query, test_config):
        generated = [make_recipe("Omelette", source="FALLBACK")]

        response = assemble([], generated, make_query("egg"), _decision(LLM_ONLY, 3), test_config)

        assert response.metadata.fallback_count == 1
        assert response.metadata.llm_generated_count == 0
        assert "built-in" in response.metadata.message

    def test_empty_generation_is_noted(self, make_query, test_config):
        response = assemble([], [], make_query("chocolate"), _decision(LLM_ONLY, 3), test_config)

        assert response.recipes == []
        assert response.metadata.total_recipes == 0
        assert response.metadata.has_user_has_all_recipes is False
        assert "no recipes" in response.metadata.message

    def test_servings_scaling_applied(self, scored, make_query, test_config):
        ranked = [scored("Crepes", 2, 2, servings=2, ingredients=[{"name": "egg", "quantity": "2"}])]

        response = assemble(ranked, [], make_query("egg", servings=4), _decision(DB_SUFFICIENT), test_config)

        [recipe] = response.recipes
        assert recipe.ingredients[0].quantity == "4"
        assert recipe.servings == 4
        assert recipe.source == RecipeSource.DB

    def test_no_scaling_without_servings(self, scored, make_query, test_config):
        ranked = [scored("Crepes", 2, 2, servings=2, ingredients=[{"name": "egg", "quantity": "2"}])]

        response = assemble(ranked, [], make_query("egg"), _decision(DB_SUFFICIENT), test_config)

        assert response.recipes[0].ingredients[0].quantity == "2"
        assert response.recipes[0].servings == 2
