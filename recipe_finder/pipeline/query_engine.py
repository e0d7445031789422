"""Recipe store query engine.

Retrieves stored recipes for a query and scores each by ingredient coverage.
Structural filters are applied by the store and re-applied here so a store that
over-returns cannot leak non-matching recipes into the response.
"""

import asyncio
from typing import List

from recipe_finder.models.models import RecipeQuery, ScoredCandidate
from recipe_finder.store.recipe_store import RecipeStore, matches_filters, recipe_terms
from recipe_finder.utils.logger import logger


class RecipeQueryEngine:
    def __init__(self, store: RecipeStore) -> None:
        self.store = store

    async def query(self, query: RecipeQuery) -> List[ScoredCandidate]:
        """Return scored candidates in store retrieval order.

        Recipes sharing no ingredient with the query are excluded. An empty list
        is a normal result.

        Raises:
            StoreUnavailableError: If the store cannot be queried.
        """
        recipes = await asyncio.to_thread(self.store.search, query)

        candidates = []
        for recipe in recipes:
            if not matches_filters(recipe, query):
                logger.debug(f"Dropping '{recipe.title}': store returned it outside the query filters")
                continue
            required = recipe_terms(recipe)
            if not required:
                continue
            matched = len(required & query.ingredients)
            if matched == 0:
                continue
            candidates.append(
                ScoredCandidate(
                    recipe=recipe,
                    matched_count=matched,
                    required_count=len(required),
                    coverage=matched / len(required),
                )
            )

        logger.debug(f"Store returned {len(recipes)} recipes, {len(candidates)} scored candidates")
        return candidates
