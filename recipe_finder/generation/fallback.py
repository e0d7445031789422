"""Built-in fallback recipes.

Served when live generation is unavailable (no provider, timeout, transport error
or no valid output). The set is fixed so responses stay deterministic.
"""

from typing import List

from recipe_finder.models.models import Difficulty, Ingredient, Recipe, RecipeQuery, RecipeSource
from recipe_finder.store.recipe_store import recipe_terms


def _recipe(title, ingredients, steps, time_minutes, difficulty, cuisine, diet_tags, servings) -> Recipe:
    return Recipe(
        title=title,
        ingredients=[Ingredient(name=name, quantity=quantity, unit=unit) for name, quantity, unit in ingredients],
        steps=steps,
        time_minutes=time_minutes,
        difficulty=difficulty,
        cuisine=cuisine,
        diet_tags=diet_tags,
        source=RecipeSource.FALLBACK,
        servings=servings,
    )


FALLBACK_RECIPES: List[Recipe] = [
    _recipe(
        "Basic Omelette",
        [("egg", "2", None), ("butter", "1", "tsp"), ("salt", "to taste", None)],
        ["Beat the eggs with a pinch of salt.", "Melt the butter in a pan and cook the eggs gently, then fold."],
        10,
        Difficulty.EASY,
        "French",
        ["gluten-free", "vegetarian"],
        1,
    ),
    _recipe(
        "Egg Fried Rice",
        [("rice", "2", "cups"), ("egg", "2", None), ("green onion", "2", None), ("soy sauce", "1", "tbsp")],
        [
            "Scramble the eggs in a hot oiled pan and set aside.",
            "Fry the cooked rice until hot, add soy sauce and the eggs.",
            "Finish with sliced green onion.",
        ],
        15,
        Difficulty.EASY,
        "Chinese",
        ["dairy-free", "vegetarian"],
        2,
    ),
    _recipe(
        "Simple Tomato Pasta",
        [("pasta", "200", "g"), ("tomato", "3", None), ("garlic", "2", "cloves"), ("olive oil", "2", "tbsp")],
        [
            "Cook the pasta in salted water.",
            "Cook chopped tomato and garlic in olive oil for 10 minutes.",
            "Toss the pasta through the sauce.",
        ],
        25,
        Difficulty.EASY,
        "Italian",
        ["dairy-free", "vegan", "vegetarian"],
        2,
    ),
    _recipe(
        "Flatbread",
        [("flour", "2", "cups"), ("water", "3/4", "cup"), ("salt", "1/2", "tsp"), ("olive oil", "1", "tbsp")],
        [
            "Mix everything into a soft dough and rest for 10 minutes.",
            "Divide, roll thin and cook in a dry hot pan for 1 to 2 minutes per side.",
        ],
        30,
        Difficulty.EASY,
        None,
        ["dairy-free", "vegan", "vegetarian"],
        4,
    ),
    _recipe(
        "Vegetable Soup",
        [
            ("onion", "1", None),
            ("carrot", "2", None),
            ("potato", "2", None),
            ("vegetable stock", "1", "l"),
        ],
        [
            "Soften the chopped onion in a pot.",
            "Add diced carrot, potato and the stock.",
            "Simmer for 25 minutes and season.",
        ],
        35,
        Difficulty.EASY,
        None,
        ["dairy-free", "gluten-free", "vegan", "vegetarian"],
        4,
    ),
    _recipe(
        "Garlic Chicken Skillet",
        [("chicken breast", "2", None), ("garlic", "3", "cloves"), ("olive oil", "1", "tbsp"), ("lemon", "1", None)],
        [
            "Season and sear the chicken in olive oil until cooked through.",
            "Add sliced garlic for the last minute, then squeeze over the lemon.",
        ],
        25,
        Difficulty.MEDIUM,
        None,
        ["dairy-free", "gluten-free"],
        2,
    ),
]


def fallback_recipes(query: RecipeQuery, count: int) -> List[Recipe]:
    """Pick up to ``count`` built-in recipes for a query.

    Only recipes sharing at least one ingredient with the query and carrying every
    requested diet tag qualify. Ordered by ingredient coverage, ties in definition
    order. Returned recipes are fresh copies tagged FALLBACK with no id.
    """
    if count <= 0:
        return []

    scored = []
    for recipe in FALLBACK_RECIPES:
        if not query.diet_tags.issubset(recipe.diet_tags):
            continue
        required = recipe_terms(recipe)
        matched = len(required & query.ingredients)
        if matched:
            scored.append((matched / len(required), recipe))

    scored.sort(key=lambda item: -item[0])
    return [recipe.model_copy(deep=True) for _, recipe in scored[:count]]
