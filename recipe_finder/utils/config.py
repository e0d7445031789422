"""Configuration management for the Recipe Finder pipeline.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Pipeline configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Recipe store: any SQLAlchemy URL. Default: SQLite file at the absolute path /tmp/recipe_finder.db
        self.DATABASE_URL: str = os.getenv("DATABASE_URL") or "sqlite:////tmp/recipe_finder.db"
        # Seed data loaded into an empty store at startup
        self.SEED_FILE: str = os.getenv("SEED_FILE", "data/seed_recipes.json")
        self.SEED_ON_START: bool = _env_bool("SEED_ON_START", "true")

        # Ranking & sufficiency policy
        # Coverage at or above this (but below 1.0) counts as a high match. Default: 0.7
        self.HIGH_MATCH_THRESHOLD: float = float(os.getenv("HIGH_MATCH_THRESHOLD", "0.7"))
        # Minimum user-has-all + high-match recipes before generation is skipped. Default: 3
        self.MIN_USABLE_RECIPES: int = int(os.getenv("MIN_USABLE_RECIPES", "3"))
        # Minimum number of stored matches of any tier before generation is skipped. Default: 5
        self.MIN_TOTAL_RECIPES: int = int(os.getenv("MIN_TOTAL_RECIPES", "5"))
        # Usable recipes the response aims for when supplementing. Default: 5
        self.TARGET_RECIPES: int = int(os.getenv("TARGET_RECIPES", "5"))
        # Hard cap on generated recipes per request. Default: 3
        self.MAX_GENERATED_PER_REQUEST: int = int(os.getenv("MAX_GENERATED_PER_REQUEST", "3"))
        # Maximum recipes in a single response. Default: 20
        self.PAGE_SIZE: int = int(os.getenv("PAGE_SIZE", "20"))
        # Servings assumed for recipes that do not declare their own
        self.DEFAULT_RECIPE_SERVINGS: int = int(os.getenv("DEFAULT_RECIPE_SERVINGS", "1"))

        # Generation provider: "gemini", "openrouter" or "none" (always use the built-in fallback set)
        self.GENERATION_PROVIDER: str = os.getenv("GENERATION_PROVIDER", "gemini").lower()
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Default: gemini-2.5-flash (fast, cost-effective, supports JSON output)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
        self.OPENROUTER_BASE_URL: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
        self.OPENROUTER_MODEL: str = os.getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini")
        # Upper bound for one generation call, in seconds. Default: 30
        self.GENERATION_TIMEOUT_SECONDS: float = float(os.getenv("GENERATION_TIMEOUT_SECONDS", "30"))
        # Extra attempts after a failed generation call (0 or 1). Default: 0
        self.GENERATION_RETRIES: int = int(os.getenv("GENERATION_RETRIES", "0"))
        # Temperature: 0.7 gives varied but still practical recipes
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # Max Output Tokens: a batch of 3 full recipes fits comfortably in 4096
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "4096"))

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a required API key is missing or a value is out of range.
        """
        if self.GENERATION_PROVIDER not in ("gemini", "openrouter", "none"):
            raise ValueError(
                f"GENERATION_PROVIDER must be 'gemini', 'openrouter' or 'none', got: {self.GENERATION_PROVIDER}"
            )
        if self.GENERATION_PROVIDER == "gemini" and not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required when GENERATION_PROVIDER=gemini")
        if self.GENERATION_PROVIDER == "openrouter" and not self.OPENROUTER_API_KEY:
            raise ValueError("OPENROUTER_API_KEY environment variable is required when GENERATION_PROVIDER=openrouter")
        if not (0.0 < self.HIGH_MATCH_THRESHOLD <= 1.0):
            raise ValueError(
                f"HIGH_MATCH_THRESHOLD must be in (0.0, 1.0], got: {self.HIGH_MATCH_THRESHOLD}"
            )
        if self.MIN_USABLE_RECIPES < 0 or self.MIN_TOTAL_RECIPES < 0:
            raise ValueError(
                f"MIN_USABLE_RECIPES and MIN_TOTAL_RECIPES must be >= 0, "
                f"got: {self.MIN_USABLE_RECIPES}, {self.MIN_TOTAL_RECIPES}"
            )
        if self.TARGET_RECIPES < 1:
            raise ValueError(f"TARGET_RECIPES must be at least 1, got: {self.TARGET_RECIPES}")
        if self.MAX_GENERATED_PER_REQUEST < 0:
            raise ValueError(
                f"MAX_GENERATED_PER_REQUEST must be >= 0, got: {self.MAX_GENERATED_PER_REQUEST}"
            )
        if self.PAGE_SIZE < 1:
            raise ValueError(f"PAGE_SIZE must be at least 1, got: {self.PAGE_SIZE}")
        if self.DEFAULT_RECIPE_SERVINGS < 1:
            raise ValueError(
                f"DEFAULT_RECIPE_SERVINGS must be at least 1, got: {self.DEFAULT_RECIPE_SERVINGS}"
            )
        if self.GENERATION_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"GENERATION_TIMEOUT_SECONDS must be positive, got: {self.GENERATION_TIMEOUT_SECONDS}"
            )
        if self.GENERATION_RETRIES not in (0, 1):
            raise ValueError(f"GENERATION_RETRIES must be 0 or 1, got: {self.GENERATION_RETRIES}")
        if not (0.0 <= self.TEMPERATURE <= 1.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 1.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_OUTPUT_TOKENS < 512:
            raise ValueError(
                f"MAX_OUTPUT_TOKENS must be at least 512, got: {self.MAX_OUTPUT_TOKENS}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()
