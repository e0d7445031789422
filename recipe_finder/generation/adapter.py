"""Generation adapter.

Wraps the external generator with a timeout, a bounded retry, output validation
and the built-in fallback. ``GenerationAdapter.generate`` never raises because of
the external call: every failure ends in ``fallback_recipes``.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from recipe_finder.generation.fallback import fallback_recipes
from recipe_finder.generation.generators import RecipeGenerator
from recipe_finder.models.errors import GenerationUnavailableError
from recipe_finder.models.models import GenerationRequest, Recipe, RecipeQuery, RecipeSource
from recipe_finder.utils.config import Config
from recipe_finder.utils.logger import logger


def build_generation_request(query: RecipeQuery, count: int, exclude_titles: Iterable[str] = ()) -> GenerationRequest:
    return GenerationRequest(
        ingredients=sorted(query.ingredients),
        diet_tags=sorted(query.diet_tags),
        max_time_minutes=query.max_time_minutes,
        difficulty=query.difficulty,
        cuisine=query.cuisine,
        servings=query.servings,
        count=count,
        exclude_titles=list(exclude_titles),
    )


def validate_candidates(payloads: List[Dict[str, Any]], count: int) -> List[Recipe]:
    """Validate raw payloads as generated recipes, dropping invalid ones.

    Provenance fields are owned here, not by the model output: accepted recipes
    are tagged LLM with no id, creator or timestamp. At most ``count`` are kept.
    """
    if not isinstance(payloads, list):
        logger.debug(f"Generator returned {type(payloads).__name__} instead of a list of recipes")
        return []

    recipes = []
    for index, payload in enumerate(payloads):
        if not isinstance(payload, Mapping):
            logger.debug(f"Dropping generated recipe {index}: not an object")
            continue
        try:
            recipe = Recipe.model_validate({**payload, "id": None, "source": RecipeSource.LLM})
        except ValidationError as e:
            logger.debug(f"Dropping generated recipe {index} ({payload.get('title', '?')}): {e.error_count()} errors")
            continue
        except TypeError as e:
            logger.debug(f"Dropping generated recipe {index}: {e}")
            continue
        recipes.append(recipe.model_copy(update={"created_by": None, "created_at": None}))
        if len(recipes) == count:
            break
    return recipes


class GenerationAdapter:
    """Bounded, validated access to the external recipe generator.

    Args:
        generator: External generation client, or None when no provider is configured.
        config: Supplies GENERATION_TIMEOUT_SECONDS and GENERATION_RETRIES.
    """

    def __init__(self, generator: Optional[RecipeGenerator], config: Config) -> None:
        self.generator = generator
        self.timeout_seconds = config.GENERATION_TIMEOUT_SECONDS
        self.retries = config.GENERATION_RETRIES

    async def generate(self, query: RecipeQuery, count: int, exclude_titles: Iterable[str] = ()) -> List[Recipe]:
        """Return up to ``count`` recipes: live LLM recipes, or FALLBACK recipes on any failure."""
        if count <= 0:
            return []
        try:
            return await self._generate_live(query, count, exclude_titles)
        except GenerationUnavailableError as e:
            logger.warning(f"Recipe generation unavailable, using built-in fallback recipes: {e}")
            return fallback_recipes(query, count)

    async def _generate_live(self, query: RecipeQuery, count: int, exclude_titles: Iterable[str]) -> List[Recipe]:
        if self.generator is None:
            raise GenerationUnavailableError("no generation provider configured")

        request = build_generation_request(query, count, exclude_titles)
        attempts = 1 + self.retries
        failure = ""
        for attempt in range(1, attempts + 1):
            try:
                payloads = await asyncio.wait_for(self.generator.generate(request), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                failure = f"timed out after {self.timeout_seconds}s"
            except Exception as e:
                # Any client error (HTTP, SDK, network) is a failed attempt
                failure = f"{type(e).__name__}: {e}"
            else:
                recipes = validate_candidates(payloads or [], count)
                if recipes:
                    logger.info(f"✓ Generated {len(recipes)}/{count} recipes (attempt {attempt})")
                    return recipes
                received = len(payloads) if isinstance(payloads, list) else 0
                failure = f"no valid recipes in {received} candidates"
            logger.warning(f"Generation attempt {attempt}/{attempts} failed: {failure}")

        raise GenerationUnavailableError(failure)
