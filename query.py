#!/usr/bin/env python3
"""Ad hoc query runner for the Recipe Finder pipeline.

Run a recipe request directly from the command line.

Usage:
    python query.py egg flour
    python query.py "egg, flour, milk"
    python query.py --max-time 30 --difficulty easy egg flour
    python query.py --diet vegan --diet gluten-free chickpeas tomatoes
    python query.py --servings 4 --cuisine italian pasta tomato
    python query.py --memory --seed data/seed_recipes.json egg  # In-memory store
    python query.py --debug egg flour  # Show full JSON response

Features:
- Single request through the full pipeline (store, ranking, generation)
- Results rendered as a table with source and match details
- Debug mode to display the full camelCase JSON response
- Memory mode to run against an in-memory store seeded from a file
"""

import asyncio
import sys

from rich.console import Console
from rich.table import Table

from recipe_finder.models.errors import InvalidQueryError, StoreUnavailableError
from recipe_finder.models.models import RecipeResponse
from recipe_finder.pipeline.factory import initialize_recipe_pipeline
from recipe_finder.utils.config import Config
from recipe_finder.utils.logger import logger

console = Console()

USAGE = (
    "Usage: python query.py [--debug] [--memory] [--seed PATH] [--diet TAG ...] "
    "[--max-time N] [--difficulty LEVEL] [--cuisine NAME] [--servings N] <ingredient> ..."
)

SOURCE_STYLES = {"DB": "green", "LLM": "magenta", "FALLBACK": "yellow"}


def render_response(response: RecipeResponse) -> None:
    """Print recipes as a table followed by the metadata summary."""
    metadata = response.metadata
    user_has_all = set(metadata.user_has_all_recipe_ids)

    table = Table(title=f"Recipes ({metadata.total_recipes})", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Source")
    table.add_column("Time", justify="right")
    table.add_column("Difficulty")
    table.add_column("Cuisine")
    table.add_column("Ingredients")

    for index, recipe in enumerate(response.recipes, start=1):
        title = recipe.title + (" ✓" if recipe.id in user_has_all else "")
        style = SOURCE_STYLES.get(recipe.source.value, "white")
        table.add_row(
            str(index),
            title,
            f"[{style}]{recipe.source.value}[/{style}]",
            f"{recipe.time_minutes} min",
            recipe.difficulty.value.lower(),
            recipe.cuisine or "-",
            ", ".join(ingredient.name for ingredient in recipe.ingredients),
        )

    console.print(table)
    console.print(f"[bold]Strategy:[/bold] {metadata.strategy}")
    console.print(
        f"[bold]User has all:[/bold] {metadata.user_has_all_count}  "
        f"[bold]High match:[/bold] {metadata.high_match_count}  "
        f"[bold]Generated:[/bold] {metadata.llm_generated_count}  "
        f"[bold]Fallback:[/bold] {metadata.fallback_count}"
    )
    if metadata.message:
        console.print(f"[dim]{metadata.message}[/dim]")


def run_query(request: dict, debug: bool = False, memory: bool = False, seed_path: str = None) -> None:
    """Execute a single recipe request and print the response.

    Args:
        request: Request fields (ingredients, dietTags, maxTimeMinutes, ...).
        debug: If True, display the full JSON response.
        memory: If True, use an in-memory store instead of DATABASE_URL.
        seed_path: Optional seed file overriding SEED_FILE.
    """
    try:
        cfg = Config()
        if seed_path:
            cfg.SEED_FILE = seed_path
            cfg.SEED_ON_START = True
        cfg.validate()

        pipeline = initialize_recipe_pipeline(cfg, use_db=not memory)

        logger.info(f"Running request: {request}")
        logger.info("---")
        response = asyncio.run(pipeline.recommend(request))
        logger.info("---")
        console.print()

        if debug:
            console.print("[bold cyan]Debug Mode: Full Response[/bold cyan]")
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print_json(data=response.model_dump(mode="json", by_alias=True))
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print()

        render_response(response)

    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except InvalidQueryError as e:
        console.print(f"[red]✗ Invalid request: {e}[/red]")
        sys.exit(2)
    except StoreUnavailableError as e:
        console.print(f"[red]✗ Recipe store unavailable: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


def _flag_value(args: list, index: int, flag: str) -> str:
    if index >= len(args):
        print(f"Error: {flag} flag requires a value")
        sys.exit(1)
    return args[index]


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        print("")
        print("Examples:")
        print("  python query.py egg flour")
        print("  python query.py --max-time 30 egg flour")
        print("  python query.py --diet vegetarian --servings 4 eggs mushrooms")
        print("  python query.py --memory --debug tomato pasta")
        sys.exit(1)

    debug_mode = False
    memory_mode = False
    seed_path = None
    request = {"dietTags": []}
    value_flags = {
        "--max-time": "maxTimeMinutes",
        "--difficulty": "difficulty",
        "--cuisine": "cuisine",
        "--servings": "servings",
    }

    args = sys.argv[1:]
    position = 0
    while position < len(args) and args[position].startswith("--"):
        flag = args[position]
        if flag == "--debug":
            debug_mode = True
            position += 1
        elif flag == "--memory":
            memory_mode = True
            position += 1
        elif flag == "--seed":
            seed_path = _flag_value(args, position + 1, flag)
            position += 2
        elif flag == "--diet":
            request["dietTags"].append(_flag_value(args, position + 1, flag))
            position += 2
        elif flag in value_flags:
            # Numeric strings are validated (and converted) by the request model
            request[value_flags[flag]] = _flag_value(args, position + 1, flag)
            position += 2
        else:
            print(f"Unknown flag: {flag}")
            sys.exit(1)

    if position >= len(args):
        print("Error: No ingredients provided")
        print(USAGE)
        sys.exit(1)

    # Accept "egg flour" as well as "egg, flour" and "olive oil, egg"
    joined = " ".join(args[position:])
    request["ingredients"] = joined.split(",") if "," in joined else args[position:]

    run_query(request, debug=debug_mode, memory=memory_mode, seed_path=seed_path)
