"""Data models and schemas for the recipe retrieval pipeline.

Defines Pydantic models for request/response validation and domain objects.
All models use Pydantic v2. Wire form is camelCase (``timeMinutes``, ``dietTags``);
Python attributes are snake_case. Serialize with ``model_dump(mode="json", by_alias=True)``.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Difficulty(str, Enum):
    """Recipe difficulty. Values are part of the wire contract."""

    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class RecipeSource(str, Enum):
    """Provenance of a recipe. Values are part of the wire contract."""

    DB = "DB"
    LLM = "LLM"
    FALLBACK = "FALLBACK"


class MatchTier(str, Enum):
    """Coverage tier of a scored stored recipe. Used for metadata counts only."""

    USER_HAS_ALL = "user-has-all"
    HIGH_MATCH = "high-match"
    PARTIAL_MATCH = "partial-match"


def _upper_difficulty(value):
    if isinstance(value, str):
        return value.strip().upper()
    return value


def _clean_tags(tags) -> List[str]:
    if not tags:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return sorted({str(tag).strip().lower() for tag in tags if str(tag).strip()})


class WireModel(BaseModel):
    """Base for models exchanged with callers and collaborators."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class Ingredient(WireModel):
    """One ingredient line of a recipe."""

    name: Annotated[str, Field(min_length=1, max_length=200, description="Ingredient name")]
    quantity: Annotated[Optional[str], Field(None, max_length=50, description="Amount, e.g. '2' or '1/2'")]
    unit: Annotated[Optional[str], Field(None, max_length=50, description="Unit, e.g. 'cups'")]

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_as_text(cls, value):
        """Accept numeric quantities (models often emit 2 instead of "2")."""
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else str(value)
        return value


class Nutrition(WireModel):
    """Per-recipe nutrition totals."""

    kcal: Annotated[int, Field(0, ge=0)]
    protein: Annotated[float, Field(0.0, ge=0)]
    carbs: Annotated[float, Field(0.0, ge=0)]
    fat: Annotated[float, Field(0.0, ge=0)]


class Recipe(WireModel):
    """Domain model for a recipe from any source.

    ``id`` is set only for recipes persisted in the store. Stored recipes
    (``source=DB``) must carry an id; generated and fallback recipes are created
    without one and only gain an id if a caller later persists them.
    """

    id: Annotated[Optional[str], Field(None, description="Store identifier, absent for generated recipes")]
    title: Annotated[str, Field(min_length=1, max_length=200, description="Recipe name (1-200 chars)")]
    ingredients: Annotated[List[Ingredient], Field(min_length=1, max_length=100)]
    steps: Annotated[List[str], Field(min_length=1, max_length=100, description="Ordered cooking steps")]
    time_minutes: Annotated[int, Field(gt=0, description="Total time (prep + cook) in minutes")]
    difficulty: Difficulty
    cuisine: Annotated[Optional[str], Field(None, max_length=100)]
    diet_tags: Annotated[List[str], Field(default_factory=list, description="Lowercase, sorted, unique")]
    source: RecipeSource
    servings: Annotated[Optional[int], Field(None, ge=1, le=100, description="Servings the quantities are for")]
    nutrition: Optional[Nutrition] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value):
        """Accept "easy" as well as "EASY"."""
        return _upper_difficulty(value)

    @field_validator("steps")
    @classmethod
    def steps_not_blank(cls, steps: List[str]) -> List[str]:
        """Every step must contain text."""
        if any(not step for step in steps):
            raise ValueError("Recipe steps must be non-empty strings")
        return steps

    @field_validator("diet_tags", mode="before")
    @classmethod
    def normalize_diet_tags(cls, tags):
        return _clean_tags(tags)

    @field_validator("cuisine")
    @classmethod
    def empty_cuisine_is_none(cls, cuisine: Optional[str]) -> Optional[str]:
        return cuisine or None

    @model_validator(mode="after")
    def stored_recipes_have_ids(self) -> "Recipe":
        """A recipe claiming to come from the store must carry its store id."""
        if self.source == RecipeSource.DB and not self.id:
            raise ValueError("Recipes with source=DB require an id")
        return self


class RecipeRequest(WireModel):
    """Raw request from the request-handling layer.

    Ingredients may be typed by the user or come from image recognition; they are
    normalized when the request is turned into a RecipeQuery. Accepts a list or a
    comma-separated string of ingredients.
    """

    ingredients: Annotated[List[str], Field(default_factory=list, max_length=100)]
    diet_tags: Annotated[List[str], Field(default_factory=list, max_length=20)]
    max_time_minutes: Optional[int] = None
    difficulty: Optional[str] = None
    cuisine: Optional[str] = None
    servings: Optional[int] = None

    @field_validator("ingredients", "diet_tags", mode="before")
    @classmethod
    def split_comma_separated(cls, value):
        """Split "egg, flour" into ["egg", "flour"]; None becomes []."""
        if value is None:
            return []
        if isinstance(value, str):
            return [item for item in value.split(",")]
        return value


class RecipeQuery(WireModel):
    """Validated, immutable query built once per request (see pipeline.build_query)."""

    model_config = ConfigDict(frozen=True)

    ingredients: Annotated[frozenset[str], Field(min_length=1, description="Normalized ingredient terms")]
    diet_tags: frozenset[str] = frozenset()
    max_time_minutes: Annotated[Optional[int], Field(None, gt=0)]
    difficulty: Optional[Difficulty] = None
    cuisine: Annotated[Optional[str], Field(None, max_length=100)]
    servings: Annotated[Optional[int], Field(None, ge=1, le=100)]

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value):
        """Accept "easy" as well as "EASY"."""
        return _upper_difficulty(value)

    @field_validator("diet_tags", mode="before")
    @classmethod
    def normalize_diet_tags(cls, tags):
        return frozenset(_clean_tags(tags))

    @field_validator("cuisine")
    @classmethod
    def empty_cuisine_is_none(cls, cuisine: Optional[str]) -> Optional[str]:
        return cuisine or None


class ScoredCandidate(BaseModel):
    """A stored recipe with its ingredient coverage for one query. Never persisted."""

    model_config = ConfigDict(frozen=True)

    recipe: Recipe
    matched_count: Annotated[int, Field(ge=0)]
    required_count: Annotated[int, Field(ge=1)]
    coverage: Annotated[float, Field(ge=0.0, le=1.0)]


class SupplementDecision(BaseModel):
    """Outcome of the sufficiency policy: how many recipes to generate and why."""

    model_config = ConfigDict(frozen=True)

    needed: Annotated[int, Field(ge=0)]
    reason: str
    usable_count: Annotated[int, Field(0, ge=0)]
    total_count: Annotated[int, Field(0, ge=0)]


class GenerationRequest(WireModel):
    """Structured prompt context sent to the external generation capability."""

    ingredients: List[str]
    diet_tags: List[str] = Field(default_factory=list)
    max_time_minutes: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    cuisine: Optional[str] = None
    servings: Optional[int] = None
    count: Annotated[int, Field(ge=1)]
    exclude_titles: List[str] = Field(default_factory=list)


class RecipeMetadata(WireModel):
    """Match-quality summary derived from the final recipe list."""

    total_recipes: Annotated[int, Field(ge=0)]
    high_match_count: Annotated[int, Field(ge=0)]
    user_has_all_count: Annotated[int, Field(ge=0)]
    llm_generated_count: Annotated[int, Field(ge=0)]
    fallback_count: Annotated[int, Field(0, ge=0)]
    strategy: str
    has_user_has_all_recipes: bool
    user_has_all_recipe_ids: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class RecipeResponse(WireModel):
    """Final ranked recipes plus metadata."""

    recipes: List[Recipe] = Field(default_factory=list)
    metadata: RecipeMetadata
