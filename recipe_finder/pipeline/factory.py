"""Pipeline initialization factory.

Wires the recipe store, the generation client and the pipeline from configuration.
"""

from typing import Optional

from recipe_finder.generation.adapter import GenerationAdapter
from recipe_finder.generation.generators import RecipeGenerator, create_generator
from recipe_finder.pipeline.pipeline import RecipePipeline
from recipe_finder.store.recipe_store import InMemoryRecipeStore, RecipeStore, SqlRecipeStore
from recipe_finder.store.seed import load_seed_recipes
from recipe_finder.utils.config import Config, config as default_config
from recipe_finder.utils.logger import logger


def _configure_store(cfg: Config, use_db: bool) -> RecipeStore:
    """Create the recipe store (SQL database, or in-memory when use_db is False)."""
    logger.info("Step 1/3: Configuring recipe store...")

    if not use_db:
        logger.info("✓ In-memory recipe store configured")
        return InMemoryRecipeStore()

    url = cfg.DATABASE_URL
    # Hide credentials in server URLs
    shown = url.split("@")[1] if "@" in url else url
    logger.info(f"Using database: {shown}")
    store = SqlRecipeStore(url)
    logger.info("✓ Recipe store configured")
    return store


def _seed_store(cfg: Config, store: RecipeStore) -> None:
    if not cfg.SEED_ON_START:
        logger.info("Step 2/3: Seeding disabled (SEED_ON_START=false)")
        return

    logger.info("Step 2/3: Seeding recipe store...")
    existing = store.count()
    if existing:
        logger.info(f"✓ Store already holds {existing} recipes, skipping seed")
        return
    loaded = load_seed_recipes(store, cfg.SEED_FILE)
    logger.info(f"✓ Seeded {loaded} recipes")


def _configure_generation(cfg: Config, generator: Optional[RecipeGenerator]) -> GenerationAdapter:
    logger.info("Step 3/3: Configuring recipe generation...")

    if generator is None:
        generator = create_generator(cfg)
    if generator is None:
        logger.info("No generation provider configured, built-in fallback recipes only")
    else:
        logger.info(f"✓ Generation provider: {type(generator).__name__}")
    return GenerationAdapter(generator, cfg)


def initialize_recipe_pipeline(
    cfg: Optional[Config] = None,
    store: Optional[RecipeStore] = None,
    generator: Optional[RecipeGenerator] = None,
    use_db: bool = True,
) -> RecipePipeline:
    """Factory function to initialize the recipe pipeline.

    Orchestrates initialization in sequence:
    1. Recipe store (SQL via DATABASE_URL, or in-memory)
    2. Seeding from SEED_FILE when SEED_ON_START is set and the store is empty
    3. Generation client for GENERATION_PROVIDER, wrapped in the adapter

    Args:
        cfg: Configuration. Defaults to the module-level config.
        store: Pre-built store; skips store configuration when given.
        generator: Pre-built generation client; skips provider selection when given.
        use_db: If False and no store is given, use an in-memory store.

    Returns:
        RecipePipeline ready to serve requests.

    Raises:
        StoreUnavailableError: If the configured database cannot be opened.
    """
    cfg = cfg or default_config
    logger.info("=== Initializing Recipe Pipeline ===")

    if store is None:
        store = _configure_store(cfg, use_db)
    _seed_store(cfg, store)
    adapter = _configure_generation(cfg, generator)
    pipeline = RecipePipeline(store, adapter, cfg)

    logger.info("=== Pipeline initialization complete ===")
    return pipeline
