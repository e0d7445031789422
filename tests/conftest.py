"""Shared fixtures for unit and integration tests.

Environment defaults are applied before any test module imports the package, so
the module-level config validates without API keys and never touches a real
database file.
"""

import os
import uuid
from datetime import datetime, timezone

import pytest

from recipe_finder.models.models import Recipe, RecipeQuery


def pytest_configure(config):
    """Set safe defaults for the module-level configuration."""
    os.environ.setdefault("GENERATION_PROVIDER", "none")
    os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
    os.environ.setdefault("SEED_ON_START", "false")
    os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture
def test_config():
    """Config with the documented defaults and no generation provider."""
    from recipe_finder.utils.config import Config

    cfg = Config()
    cfg.DATABASE_URL = "sqlite:///:memory:"
    cfg.SEED_ON_START = False
    cfg.GENERATION_PROVIDER = "none"
    cfg.HIGH_MATCH_THRESHOLD = 0.7
    cfg.MIN_USABLE_RECIPES = 3
    cfg.MIN_TOTAL_RECIPES = 5
    cfg.TARGET_RECIPES = 5
    cfg.MAX_GENERATED_PER_REQUEST = 3
    cfg.PAGE_SIZE = 20
    cfg.DEFAULT_RECIPE_SERVINGS = 1
    cfg.GENERATION_TIMEOUT_SECONDS = 0.2
    cfg.GENERATION_RETRIES = 0
    return cfg


@pytest.fixture
def make_recipe():
    """Factory for valid recipes; stored (source DB) recipes get an id automatically."""

    def _make(title="Test Recipe", ingredients=("egg", "flour"), **fields):
        data = {
            "title": title,
            "ingredients": [
                ingredient if isinstance(ingredient, dict) else {"name": ingredient} for ingredient in ingredients
            ],
            "steps": ["Mix everything.", "Cook until done."],
            "time_minutes": 20,
            "difficulty": "EASY",
            "source": "DB",
        }
        data.update(fields)
        if data["source"] == "DB" and not data.get("id"):
            data["id"] = str(uuid.uuid4())
        return Recipe.model_validate(data)

    return _make


@pytest.fixture
def make_payload():
    """Factory for raw generated recipe payloads in wire (camelCase) form."""

    def _make(title="Generated Recipe", ingredients=("egg", "flour"), **fields):
        payload = {
            "title": title,
            "ingredients": [{"name": name, "quantity": "1"} for name in ingredients],
            "steps": ["Combine the ingredients.", "Cook and serve."],
            "timeMinutes": 25,
            "difficulty": "EASY",
            "cuisine": "Home",
        }
        payload.update(fields)
        return payload

    return _make


@pytest.fixture
def make_query():
    """Factory for RecipeQuery objects from plain ingredient names."""

    def _make(*ingredients, **filters):
        return RecipeQuery(ingredients=frozenset(ingredients), **filters)

    return _make


@pytest.fixture
def timestamp():
    """Factory for timezone-aware timestamps relative to a fixed day."""

    def _make(hour=0):
        return datetime(2024, 1, 1, hour, tzinfo=timezone.utc)

    return _make
