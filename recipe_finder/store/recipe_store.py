"""Persistent recipe store.

The pipeline only reads from the store through ``RecipeStore.search``; writes
(``add_recipes``) exist for seeding and for the external save operation.

Two implementations:
- SqlRecipeStore: SQLAlchemy ORM over any SQLAlchemy URL (SQLite by default,
  PostgreSQL via DATABASE_URL). Structural filters and ingredient overlap run in SQL.
- InMemoryRecipeStore: list-backed, for tests and quick local runs.

Everything a store returns is store-owned: ``source=DB`` with an id.
"""

import os
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, create_engine, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from recipe_finder.models.errors import StoreUnavailableError
from recipe_finder.models.models import Difficulty, Ingredient, Nutrition, Recipe, RecipeQuery, RecipeSource
from recipe_finder.pipeline.normalizer import normalize_name
from recipe_finder.utils.logger import logger


class RecipeStore(Protocol):
    """Filtered-search capability over persisted recipes."""

    def search(self, query: RecipeQuery) -> List[Recipe]:
        """Return recipes matching the query's structural filters with at least one shared ingredient.

        Raises:
            StoreUnavailableError: If the store cannot be queried.
        """
        ...

    def add_recipes(self, recipes: Iterable[Recipe]) -> List[Recipe]:
        """Persist recipes and return them as stored (with ids, source=DB)."""
        ...

    def count(self) -> int:
        ...


def recipe_terms(recipe: Recipe) -> frozenset[str]:
    """Distinct normalized ingredient names of a recipe."""
    terms = {normalize_name(ingredient.name) for ingredient in recipe.ingredients}
    terms.discard("")
    return frozenset(terms)


def matches_filters(recipe: Recipe, query: RecipeQuery) -> bool:
    """Check the structural filters of a query (ingredients not included).

    - cuisine: case-insensitive equality when requested
    - max_time_minutes: recipe time must not exceed it
    - difficulty: exact match
    - diet_tags: recipe tags must include every requested tag
    """
    if query.cuisine and (recipe.cuisine or "").lower() != query.cuisine.lower():
        return False
    if query.max_time_minutes is not None and recipe.time_minutes > query.max_time_minutes:
        return False
    if query.difficulty is not None and recipe.difficulty != query.difficulty:
        return False
    if query.diet_tags and not query.diet_tags.issubset(recipe.diet_tags):
        return False
    return True


def _as_stored(recipe: Recipe) -> Recipe:
    """Stamp a recipe as store-owned: id assigned, source DB, creation time set."""
    return recipe.model_copy(
        update={
            "id": recipe.id or str(uuid.uuid4()),
            "source": RecipeSource.DB,
            "created_at": recipe.created_at or datetime.now(timezone.utc),
        }
    )


class InMemoryRecipeStore:
    """List-backed store. Retrieval order is insertion order."""

    def __init__(self, recipes: Optional[Iterable[Recipe]] = None) -> None:
        self._recipes: List[Recipe] = []
        if recipes:
            self.add_recipes(recipes)

    def search(self, query: RecipeQuery) -> List[Recipe]:
        return [
            recipe
            for recipe in self._recipes
            if matches_filters(recipe, query) and recipe_terms(recipe) & query.ingredients
        ]

    def add_recipes(self, recipes: Iterable[Recipe]) -> List[Recipe]:
        stored = [_as_stored(recipe) for recipe in recipes]
        self._recipes.extend(stored)
        return stored

    def count(self) -> int:
        return len(self._recipes)


# ============================================================================
# SQL store
# ============================================================================

Base = declarative_base()


class RecipeRow(Base):
    __tablename__ = "recipes"

    # Surrogate key; also the retrieval order
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), unique=True, nullable=False)
    title = Column(String(200), nullable=False)
    steps = Column(JSON, nullable=False)
    time_minutes = Column(Integer, nullable=False, index=True)
    difficulty = Column(String(10), nullable=False, index=True)
    cuisine = Column(String(100), index=True)
    diet_tags = Column(JSON, nullable=False, default=list)
    servings = Column(Integer)
    nutrition = Column(JSON)
    created_by = Column(String(64))
    created_at = Column(DateTime(timezone=True))

    ingredients = relationship(
        "RecipeIngredientRow",
        order_by="RecipeIngredientRow.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class RecipeIngredientRow(Base):
    __tablename__ = "recipe_ingredients"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    recipe_pk = Column(Integer, ForeignKey("recipes.pk", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    name = Column(String(200), nullable=False)
    # normalize_name(name); the ingredient-overlap join runs on this column
    normalized_name = Column(String(200), nullable=False, index=True)
    quantity = Column(String(50))
    unit = Column(String(50))


def _create_engine(database_url: str):
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, pool_pre_ping=True)
    if url.database in (None, "", ":memory:"):
        # One shared connection so every worker thread sees the same in-memory database
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    directory = os.path.dirname(url.database)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return create_engine(database_url, connect_args={"check_same_thread": False})


class SqlRecipeStore:
    """SQLAlchemy-backed recipe store.

    Tables are created on construction if missing. Any SQLAlchemyError surfaces as
    StoreUnavailableError so callers never see driver-specific exceptions.
    """

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        try:
            self._engine = _create_engine(database_url)
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Recipe store unavailable: {e}") from e
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    def search(self, query: RecipeQuery) -> List[Recipe]:
        overlapping = select(RecipeIngredientRow.recipe_pk).where(
            RecipeIngredientRow.normalized_name.in_(sorted(query.ingredients))
        )
        stmt = select(RecipeRow).where(RecipeRow.pk.in_(overlapping))
        if query.cuisine:
            stmt = stmt.where(func.lower(RecipeRow.cuisine) == query.cuisine.lower())
        if query.max_time_minutes is not None:
            stmt = stmt.where(RecipeRow.time_minutes <= query.max_time_minutes)
        if query.difficulty is not None:
            stmt = stmt.where(RecipeRow.difficulty == query.difficulty.value)
        stmt = stmt.order_by(RecipeRow.pk)

        try:
            with self._session_factory() as session:
                recipes = [self._to_recipe(row) for row in session.scalars(stmt).all()]
        except SQLAlchemyError as e:
            logger.error(f"Recipe store query failed: {e}")
            raise StoreUnavailableError(f"Recipe store unavailable: {e}") from e

        # JSON containment is not portable across backends; diet tags are checked here
        return [recipe for recipe in recipes if query.diet_tags.issubset(recipe.diet_tags)]

    def add_recipes(self, recipes: Iterable[Recipe]) -> List[Recipe]:
        stored = [_as_stored(recipe) for recipe in recipes]
        try:
            with self._session_factory() as session, session.begin():
                session.add_all([self._to_row(recipe) for recipe in stored])
        except SQLAlchemyError as e:
            logger.error(f"Saving {len(stored)} recipes failed: {e}")
            raise StoreUnavailableError(f"Recipe store unavailable: {e}") from e
        return stored

    def count(self) -> int:
        try:
            with self._session_factory() as session:
                return session.scalar(select(func.count()).select_from(RecipeRow)) or 0
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Recipe store unavailable: {e}") from e

    @staticmethod
    def _to_row(recipe: Recipe) -> RecipeRow:
        return RecipeRow(
            id=recipe.id,
            title=recipe.title,
            steps=list(recipe.steps),
            time_minutes=recipe.time_minutes,
            difficulty=recipe.difficulty.value,
            cuisine=recipe.cuisine,
            diet_tags=list(recipe.diet_tags),
            servings=recipe.servings,
            nutrition=recipe.nutrition.model_dump() if recipe.nutrition else None,
            created_by=recipe.created_by,
            created_at=recipe.created_at,
            ingredients=[
                RecipeIngredientRow(
                    position=position,
                    name=ingredient.name,
                    normalized_name=normalize_name(ingredient.name),
                    quantity=ingredient.quantity,
                    unit=ingredient.unit,
                )
                for position, ingredient in enumerate(recipe.ingredients)
            ],
        )

    @staticmethod
    def _to_recipe(row: RecipeRow) -> Recipe:
        return Recipe(
            id=row.id,
            title=row.title,
            ingredients=[
                Ingredient(name=ing.name, quantity=ing.quantity, unit=ing.unit) for ing in row.ingredients
            ],
            steps=row.steps,
            time_minutes=row.time_minutes,
            difficulty=Difficulty(row.difficulty),
            cuisine=row.cuisine,
            diet_tags=row.diet_tags or [],
            source=RecipeSource.DB,
            servings=row.servings,
            nutrition=Nutrition(**row.nutrition) if row.nutrition else None,
            created_by=row.created_by,
            created_at=row.created_at,
        )
