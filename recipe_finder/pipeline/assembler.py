"""Response assembler: merge ranked stored recipes and generated recipes into one response."""

from typing import List, Sequence

from recipe_finder.models.models import (
    MatchTier,
    Recipe,
    RecipeMetadata,
    RecipeQuery,
    RecipeResponse,
    RecipeSource,
    ScoredCandidate,
    SupplementDecision,
)
from recipe_finder.pipeline.ranker import classify
from recipe_finder.pipeline.scaling import scale_recipe_for_servings
from recipe_finder.pipeline.sufficiency import DB_PLUS_LLM, DB_SUFFICIENT, LLM_ONLY
from recipe_finder.utils.config import Config

STRATEGY_MESSAGES = {
    DB_SUFFICIENT: "Found enough matching recipes in the recipe collection.",
    DB_PLUS_LLM: "Combined matching recipes from the collection with newly generated ones.",
    LLM_ONLY: "No stored recipe matched your ingredients, so new recipes were generated.",
}


def _build_message(decision: SupplementDecision, generated: Sequence[Recipe]) -> str:
    message = STRATEGY_MESSAGES.get(decision.reason, decision.reason)
    if decision.needed == 0:
        return message
    if not generated:
        return f"{message} Recipe generation returned no recipes."
    if any(recipe.source == RecipeSource.FALLBACK for recipe in generated):
        return f"{message} Live generation was unavailable; built-in recipes were used instead."
    return message


def assemble(
    ranked: Sequence[ScoredCandidate],
    generated: Sequence[Recipe],
    query: RecipeQuery,
    decision: SupplementDecision,
    config: Config,
) -> RecipeResponse:
    """Build the final response.

    Stored recipes come first in ranked order (deduplicated by id), then generated
    recipes in the order the adapter returned them. The list is cut to PAGE_SIZE,
    so stored recipes keep their slots. Metadata is computed from what is included.
    """
    seen_ids = set()
    stored: List[ScoredCandidate] = []
    for candidate in ranked:
        if candidate.recipe.id in seen_ids:
            continue
        seen_ids.add(candidate.recipe.id)
        stored.append(candidate)

    stored = stored[: config.PAGE_SIZE]
    extra = list(generated)[: config.PAGE_SIZE - len(stored)]

    tiers = [classify(candidate, config.HIGH_MATCH_THRESHOLD) for candidate in stored]
    user_has_all_ids = [
        candidate.recipe.id for candidate, tier in zip(stored, tiers) if tier == MatchTier.USER_HAS_ALL
    ]

    recipes = [candidate.recipe for candidate in stored] + extra
    if query.servings is not None:
        recipes = [
            scale_recipe_for_servings(recipe, query.servings, config.DEFAULT_RECIPE_SERVINGS) for recipe in recipes
        ]

    metadata = RecipeMetadata(
        total_recipes=len(recipes),
        high_match_count=tiers.count(MatchTier.HIGH_MATCH),
        user_has_all_count=len(user_has_all_ids),
        llm_generated_count=sum(1 for recipe in recipes if recipe.source == RecipeSource.LLM),
        fallback_count=sum(1 for recipe in recipes if recipe.source == RecipeSource.FALLBACK),
        strategy=decision.reason,
        has_user_has_all_recipes=bool(user_has_all_ids),
        user_has_all_recipe_ids=user_has_all_ids,
        message=_build_message(decision, generated),
    )
    return RecipeResponse(recipes=recipes, metadata=metadata)
