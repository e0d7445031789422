"""Scale recipe quantities and nutrition to a requested number of servings."""

import re
from typing import Optional

from recipe_finder.models.models import Ingredient, Nutrition, Recipe

# "2", "1.5", "1/2", "1 1/2"
_QUANTITY = re.compile(r"^\s*(?:(\d+)\s+)?(\d+(?:\.\d+)?)(?:\s*/\s*(\d+))?\s*$")


def parse_quantity(quantity: Optional[str]) -> Optional[float]:
    """Parse a numeric quantity string. Returns None for anything non-numeric ("to taste", "a pinch")."""
    if not quantity:
        return None
    match = _QUANTITY.match(quantity)
    if not match:
        return None
    whole, number, denominator = match.groups()
    value = float(number)
    if denominator is not None:
        if int(denominator) == 0 or "." in number:
            return None
        value = value / int(denominator)
    elif whole is not None:
        # "1 2" is not a mixed number
        return None
    return value + (int(whole) if whole else 0)


_QUARTERS = {1: "1/4", 2: "1/2", 3: "3/4"}


def format_quantity(value: float) -> str:
    """Format a scaled quantity.

    Whole numbers print as integers and quarters as fractions ("3/4", "1 1/2").
    Anything else prints with up to two decimals; amounts below 0.01 keep two
    significant digits so a positive quantity never prints as 0.
    """
    if value == round(value):
        return str(int(round(value)))
    quarters = value * 4
    if quarters == round(quarters):
        whole, rest = divmod(int(round(quarters)), 4)
        return _QUARTERS[rest] if whole == 0 else f"{whole} {_QUARTERS[rest]}"
    if value < 0.01:
        return f"{value:.2g}"
    return f"{value:.2f}".rstrip("0").rstrip(".")


def scale_quantity(quantity: Optional[str], factor: float) -> Optional[str]:
    value = parse_quantity(quantity)
    if value is None:
        return quantity
    return format_quantity(value * factor)


def scale_nutrition(nutrition: Optional[Nutrition], factor: float) -> Optional[Nutrition]:
    if nutrition is None:
        return None
    return Nutrition(
        kcal=round(nutrition.kcal * factor),
        protein=round(nutrition.protein * factor, 1),
        carbs=round(nutrition.carbs * factor, 1),
        fat=round(nutrition.fat * factor, 1),
    )


def scale_recipe_for_servings(recipe: Recipe, servings: int, default_base: int = 1) -> Recipe:
    """Return a copy of ``recipe`` scaled from its base servings to ``servings``.

    The base is the recipe's own ``servings`` when set, else ``default_base``.
    Identity and provenance (id, source) are unchanged. Non-numeric quantities
    are kept as they are.
    """
    base = recipe.servings or default_base
    if servings == base:
        return recipe.model_copy(update={"servings": servings})

    factor = servings / base
    ingredients = [
        Ingredient(name=ingredient.name, quantity=scale_quantity(ingredient.quantity, factor), unit=ingredient.unit)
        for ingredient in recipe.ingredients
    ]
    return recipe.model_copy(
        update={
            "ingredients": ingredients,
            "nutrition": scale_nutrition(recipe.nutrition, factor),
            "servings": servings,
        }
    )
