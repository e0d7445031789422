"""Pytest configuration and fixtures for integration tests.

Loads the project .env and skips live generation tests when no Gemini API key
is configured.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv


def pytest_configure(config):
    """Load .env before the live tests read API keys."""
    # Load environment variables from .env (in project root)
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    print("\n" + "=" * 70)
    print("Note: Live generation tests require a valid GEMINI_API_KEY")
    print(f"Environment loaded from: {env_path}")
    print("=" * 70 + "\n")


@pytest.fixture(scope="session")
def gemini_api_key():
    """Return the Gemini API key, skipping the test when it is not configured."""
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        pytest.skip("Live generation tests skipped. Missing GEMINI_API_KEY; set it in your .env file.")
    return key


@pytest.fixture
def live_config(gemini_api_key):
    """Config wired to Gemini with an in-memory store and the bundled seed data."""
    from recipe_finder.utils.config import Config

    cfg = Config()
    cfg.DATABASE_URL = "sqlite:///:memory:"
    cfg.SEED_ON_START = True
    cfg.SEED_FILE = str(Path(__file__).resolve().parents[2] / "data" / "seed_recipes.json")
    cfg.GENERATION_PROVIDER = "gemini"
    cfg.GEMINI_API_KEY = gemini_api_key
    cfg.GENERATION_TIMEOUT_SECONDS = 60
    cfg.GENERATION_RETRIES = 1
    return cfg
