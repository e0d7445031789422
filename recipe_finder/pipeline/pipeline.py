"""Recipe retrieval pipeline.

Flow for one request:
1. build_query: normalize ingredients, validate filters (InvalidQueryError on failure)
2. RecipeQueryEngine: store search + coverage scoring
3. rank: coverage, matched count, recency
4. SufficiencyPolicy: decide how many recipes to generate, if any
5. GenerationAdapter: only when the policy asks for recipes
6. assemble: merged, truncated, scaled response with metadata

Store failures propagate as StoreUnavailableError. Generation is a supplement to
stored results, never a substitute for an unavailable store.
"""

import time
import uuid
from typing import Any, Dict, Union

from pydantic import ValidationError

from recipe_finder.generation.adapter import GenerationAdapter
from recipe_finder.models.errors import InvalidQueryError, StoreUnavailableError
from recipe_finder.models.models import RecipeQuery, RecipeRequest, RecipeResponse
from recipe_finder.pipeline.assembler import assemble
from recipe_finder.pipeline.normalizer import normalize
from recipe_finder.pipeline.query_engine import RecipeQueryEngine
from recipe_finder.pipeline.ranker import rank
from recipe_finder.pipeline.sufficiency import SufficiencyPolicy
from recipe_finder.store.recipe_store import RecipeStore
from recipe_finder.utils.config import Config
from recipe_finder.utils.logger import logger

RequestLike = Union[RecipeRequest, RecipeQuery, Dict[str, Any]]


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(item) for item in detail.get("loc", ())) or "request"
        parts.append(f"{location}: {detail.get('msg')}")
    return "; ".join(parts)


def build_query(request: RequestLike) -> RecipeQuery:
    """Turn a raw request into a validated RecipeQuery.

    Accepts a RecipeRequest, a plain dict in request shape (camelCase or snake_case
    keys), or an already built RecipeQuery.

    Raises:
        InvalidQueryError: No usable ingredient after normalization, or a filter
            value outside its domain (e.g. maxTimeMinutes <= 0, unknown difficulty).
    """
    if isinstance(request, RecipeQuery):
        # Caller-built queries still go through the normalizer
        ingredients = normalize(request.ingredients)
        if not ingredients:
            raise InvalidQueryError("At least one ingredient is required")
        return request.model_copy(update={"ingredients": ingredients})

    try:
        if not isinstance(request, RecipeRequest):
            request = RecipeRequest.model_validate(request)

        ingredients = normalize(request.ingredients)
        if not ingredients:
            raise InvalidQueryError("At least one ingredient is required")

        return RecipeQuery(
            ingredients=ingredients,
            diet_tags=request.diet_tags,
            max_time_minutes=request.max_time_minutes,
            difficulty=request.difficulty,
            cuisine=request.cuisine,
            servings=request.servings,
        )
    except ValidationError as e:
        raise InvalidQueryError(f"Invalid recipe query: {_describe_validation_error(e)}") from e


class RecipePipeline:
    """Orchestrates one recipe request end to end.

    Holds no per-request state; one instance serves concurrent requests.
    """

    def __init__(self, store: RecipeStore, adapter: GenerationAdapter, config: Config) -> None:
        self.config = config
        self.query_engine = RecipeQueryEngine(store)
        self.policy = SufficiencyPolicy(config)
        self.adapter = adapter

    async def recommend(self, request: RequestLike) -> RecipeResponse:
        """Return ranked recipes for a request.

        Raises:
            InvalidQueryError: Before any store or generation call.
            StoreUnavailableError: If the recipe store cannot be queried.
        """
        query = build_query(request)
        request_id = uuid.uuid4().hex[:8]
        start_time = time.perf_counter()
        logger.debug(
            f"Recipe request: ingredients={sorted(query.ingredients)} diet={sorted(query.diet_tags)}",
            extra={"request_id": request_id},
        )

        try:
            candidates = await self.query_engine.query(query)
        except StoreUnavailableError:
            logger.error("Recipe store unavailable, request failed", extra={"request_id": request_id})
            raise

        ranked = rank(candidates)
        decision = self.policy.decide(ranked, query)

        generated = []
        if decision.needed > 0:
            exclude_titles = [candidate.recipe.title for candidate in ranked[: self.config.PAGE_SIZE]]
            generated = await self.adapter.generate(query, decision.needed, exclude_titles)

        response = assemble(ranked, generated, query, decision, self.config)

        duration_ms = round((time.perf_counter() - start_time) * 1000, 1)
        metadata = response.metadata
        logger.info(
            f"✓ {metadata.total_recipes} recipes ({decision.reason}): "
            f"{metadata.user_has_all_count} user-has-all, {metadata.high_match_count} high-match, "
            f"{metadata.llm_generated_count} generated, {metadata.fallback_count} fallback in {duration_ms}ms",
            extra={"request_id": request_id, "strategy": decision.reason, "duration_ms": duration_ms},
        )
        return response
