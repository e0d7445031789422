"""Unit tests for the recipe stores and seeding."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from recipe_finder.models.errors import StoreUnavailableError
from recipe_finder.models.models import Difficulty, RecipeSource
from recipe_finder.store.recipe_store import InMemoryRecipeStore, SqlRecipeStore, matches_filters, recipe_terms
from recipe_finder.store.seed import load_seed_recipes, read_seed_file

SEED_FILE = Path(__file__).resolve().parents[2] / "data" / "seed_recipes.json"


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Each store test runs against both implementations."""
    if request.param == "memory":
        return InMemoryRecipeStore()
    return SqlRecipeStore("sqlite:///:memory:")


@pytest.fixture
def stocked_store(store, make_recipe, timestamp):
    store.add_recipes(
        [
            make_recipe("Crepes", ["Eggs", "flour"], time_minutes=20, cuisine="French", diet_tags=["vegetarian"]),
            make_recipe(
                "Pancakes",
                ["egg", "flour", "sugar", "milk"],
                time_minutes=25,
                cuisine="American",
                diet_tags=["vegetarian"],
                created_at=timestamp(5),
            ),
            make_recipe("Beef Stew", ["beef", "carrot", "onion"], time_minutes=180, difficulty="HARD"),
            make_recipe("Tomato Salad", ["tomato", "basil"], time_minutes=10, diet_tags=["vegan", "vegetarian"]),
        ]
    )
    return store


class TestHelpers:
    """Test shared filter helpers."""

    def test_recipe_terms_are_normalized_and_distinct(self, make_recipe):
        recipe = make_recipe(ingredients=["Eggs", "egg", "Plain Flour"])

        assert recipe_terms(recipe) == frozenset({"egg", "flour"})

    def test_matches_filters(self, make_recipe, make_query):
        recipe = make_recipe(time_minutes=30, difficulty="MEDIUM", cuisine="Italian", diet_tags=["vegan", "nut-free"])

        assert matches_filters(recipe, make_query("egg", cuisine="italian", max_time_minutes=30))
        assert matches_filters(recipe, make_query("egg", diet_tags=["vegan"], difficulty="medium"))
        assert not matches_filters(recipe, make_query("egg", max_time_minutes=29))
        assert not matches_filters(recipe, make_query("egg", difficulty="EASY"))
        assert not matches_filters(recipe, make_query("egg", cuisine="French"))
        assert not matches_filters(recipe, make_query("egg", diet_tags=["vegan", "gluten-free"]))


class TestRecipeStoreSearch:
    """Test search semantics shared by both store implementations."""

    def test_returns_only_overlapping_recipes_in_insertion_order(self, stocked_store, make_query):
        titles = [recipe.title for recipe in stocked_store.search(make_query("egg", "flour"))]

        assert titles == ["Crepes", "Pancakes"]

    def test_applies_structural_filters(self, stocked_store, make_query):
        assert [r.title for r in stocked_store.search(make_query("egg", max_time_minutes=20))] == ["Crepes"]
        assert [r.title for r in stocked_store.search(make_query("egg", cuisine="american"))] == ["Pancakes"]
        assert [r.title for r in stocked_store.search(make_query("beef", difficulty="HARD"))] == ["Beef Stew"]
        assert stocked_store.search(make_query("beef", difficulty="EASY")) == []

    def test_diet_tags_must_all_be_present(self, stocked_store, make_query):
        assert [r.title for r in stocked_store.search(make_query("tomato", "egg", diet_tags=["vegan"]))] == [
            "Tomato Salad"
        ]

    def test_no_overlap_returns_empty_list(self, stocked_store, make_query):
        assert stocked_store.search(make_query("chocolate")) == []

    def test_returned_recipes_are_store_owned(self, stocked_store, make_query):
        recipes = stocked_store.search(make_query("egg"))

        assert all(recipe.source == RecipeSource.DB and recipe.id for recipe in recipes)

    def test_round_trips_recipe_fields(self, store, make_recipe, make_query):
        """Test that every recipe field survives storage."""
        original = make_recipe(
            "Omelette",
            [{"name": "Eggs", "quantity": "3"}, {"name": "salt", "quantity": "to taste", "unit": None}],
            steps=["Beat.", "Cook."],
            time_minutes=10,
            difficulty="EASY",
            cuisine="French",
            diet_tags=["vegetarian"],
            servings=1,
            nutrition={"kcal": 300, "protein": 20, "carbs": 1, "fat": 22},
        )
        store.add_recipes([original])

        [found] = store.search(make_query("egg"))

        assert found.id == original.id
        assert [(i.name, i.quantity) for i in found.ingredients] == [("Eggs", "3"), ("salt", "to taste")]
        assert found.steps == ["Beat.", "Cook."]
        assert found.difficulty == Difficulty.EASY
        assert found.diet_tags == ["vegetarian"]
        assert found.servings == 1
        assert found.nutrition.kcal == 300
        assert found.created_at is not None


class TestAddRecipes:
    """Test persisting recipes."""

    def test_generated_recipe_is_stamped_as_stored(self, store, make_recipe):
        generated = make_recipe("Generated", source="LLM")

        [stored] = store.add_recipes([generated])

        assert stored.source == RecipeSource.DB
        assert stored.id
        assert stored.created_at is not None
        assert store.count() == 1

    def test_existing_id_is_kept(self, store, make_recipe):
        [stored] = store.add_recipes([make_recipe(id="fixed-id")])

        assert stored.id == "fixed-id"


class TestSqlRecipeStoreErrors:
    """Test that database failures surface as StoreUnavailableError."""

    def test_search_failure_raises_store_unavailable(self, make_query):
        store = SqlRecipeStore("sqlite:///:memory:")

        with patch.object(store, "_session_factory", side_effect=OperationalError("SELECT", {}, Exception("down"))):
            with pytest.raises(StoreUnavailableError):
                store.search(make_query("egg"))

    def test_store_unavailable_is_a_connection_error(self):
        assert issubclass(StoreUnavailableError, ConnectionError)


class TestSeeding:
    """Test loading seed recipes from JSON."""

    def test_loads_bundled_seed_file(self):
        store = InMemoryRecipeStore()

        loaded = load_seed_recipes(store, str(SEED_FILE))

        assert loaded == store.count() > 0

    def test_invalid_entries_are_skipped(self, tmp_path, make_payload):
        path = tmp_path / "seed.json"
        path.write_text(
            json.dumps({"recipes": [make_payload("Good"), {**make_payload("Bad"), "steps": []}, "not a recipe"]})
        )

        recipes = read_seed_file(str(path))

        assert [recipe.title for recipe in recipes] == ["Good"]
        assert recipes[0].source == RecipeSource.DB
        assert recipes[0].id

    def test_missing_file_loads_nothing(self, tmp_path):
        assert load_seed_recipes(InMemoryRecipeStore(), str(tmp_path / "missing.json")) == 0

    def test_malformed_json_raises(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text("{not json")

        with pytest.raises(ValueError):
            read_seed_file(str(path))
