"""Error taxonomy for the recipe pipeline.

- InvalidQueryError: rejected before any store or generation call.
- StoreUnavailableError: the recipe store could not be queried; surfaced to the caller.
- GenerationUnavailableError: raised and handled inside the generation adapter only;
  it always turns into the built-in fallback recipes and never leaves the adapter.
"""


class RecipeFinderError(Exception):
    """Base class for pipeline errors."""


class InvalidQueryError(RecipeFinderError, ValueError):
    """Query has no usable ingredients or a filter value outside its domain."""


class StoreUnavailableError(RecipeFinderError, ConnectionError):
    """Persistent recipe store cannot be reached or queried."""


class GenerationUnavailableError(RecipeFinderError):
    """External generation timed out, failed, or produced no valid recipe."""
