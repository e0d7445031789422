"""Seed the recipe store from a JSON file of the form ``{"recipes": [...]}``."""

import json
import os
import uuid
from typing import List

from pydantic import ValidationError

from recipe_finder.models.models import Recipe, RecipeSource
from recipe_finder.store.recipe_store import RecipeStore
from recipe_finder.utils.logger import logger


def read_seed_file(path: str) -> List[Recipe]:
    """Read and validate seed recipes.

    Entries failing validation are skipped with a warning. A missing file yields
    an empty list; a file that is not valid JSON raises ValueError.
    """
    if not os.path.exists(path):
        logger.warning(f"Seed recipes file not found at {path}")
        return []

    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Seed file {path} is not valid JSON: {e}") from e

    entries = data.get("recipes") if isinstance(data, dict) else None
    if not entries:
        logger.warning(f"No recipes found in seed data at {path}")
        return []

    recipes = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping seed entry {index}: not an object")
            continue
        try:
            recipes.append(
                Recipe.model_validate(
                    {
                        **entry,
                        "id": entry.get("id") or str(uuid.uuid4()),
                        "source": RecipeSource.DB,
                        "createdBy": None,
                    }
                )
            )
        except ValidationError as e:
            logger.warning(f"Skipping seed entry {index} ({entry.get('title', '?')}): {e.error_count()} errors")
    return recipes


def load_seed_recipes(store: RecipeStore, path: str) -> int:
    """Load seed recipes into ``store``. Returns the number stored."""
    recipes = read_seed_file(path)
    if not recipes:
        return 0
    stored = store.add_recipes(recipes)
    logger.info(f"✅ Loaded {len(stored)} seed recipes from {path}")
    return len(stored)
