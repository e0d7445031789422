"""Prompts for recipe generation.

The system prompt is fixed; the user prompt is built from a GenerationRequest so the
model sees the same ingredients and filters the store was queried with.
"""

from recipe_finder.models.models import GenerationRequest

SYSTEM_PROMPT = (
    "You are a culinary assistant creating practical, detailed, safe recipes. "
    "Always return valid JSON."
)

_RESPONSE_FORMAT = """
## Response Format (CRITICAL)

Return ONLY valid JSON in this exact shape, with no text before or after it:

{
  "recipes": [
    {
      "title": "Recipe Title",
      "timeMinutes": 30,
      "difficulty": "EASY",
      "cuisine": "Cuisine Name",
      "dietTags": ["vegetarian"],
      "servings": 2,
      "ingredients": [
        {"name": "Ingredient Name", "quantity": "2", "unit": "cups"}
      ],
      "steps": [
        "Step 1 description",
        "Step 2 description"
      ],
      "nutrition": {"kcal": 400, "protein": 20.0, "carbs": 45.0, "fat": 15.0}
    }
  ]
}

- `difficulty` is one of EASY, MEDIUM, HARD.
- `timeMinutes` is the total time (prep + cook) as a positive integer.
- Every recipe needs at least one ingredient and at least one non-empty step.
- Quantities are strings ("2", "1/2", "to taste").
"""


def build_recipe_generation_prompt(request: GenerationRequest) -> str:
    """Build the user prompt for a generation request.

    Args:
        request: Ingredients, filters, recipe count and titles to avoid.

    Returns:
        str: Prompt text ending with the JSON response contract.
    """
    noun = "recipe" if request.count == 1 else "recipes"
    lines = [
        f"Generate {request.count} practical {noun} using these ingredients: {', '.join(request.ingredients)}.",
        "Prefer recipes that use as many of these ingredients as possible and few extra ones.",
    ]

    if request.diet_tags:
        lines.append(
            f"Dietary requirements: {', '.join(request.diet_tags)}. "
            "Ensure every recipe strictly follows these dietary restrictions and lists them in dietTags."
        )
    if request.cuisine:
        lines.append(f"Cuisine: {request.cuisine}.")
    if request.max_time_minutes is not None:
        lines.append(f"Maximum total time: {request.max_time_minutes} minutes.")
    if request.difficulty is not None:
        lines.append(f"Difficulty: {request.difficulty.value}.")
    if request.servings is not None:
        lines.append(f"Number of people: {request.servings}.")
    if request.exclude_titles:
        lines.append(f"Do NOT create a recipe with these titles: {', '.join(request.exclude_titles)}.")

    return "\n".join(lines) + "\n" + _RESPONSE_FORMAT
