"""
Exception hierarchy for the Shelfwise core.

Engines raise these for contract violations; lenient fallbacks (unknown
categories, unknown storage locations, out-of-range ratings) never raise.
"""


class ShelfwiseError(Exception):
    """Base class for all Shelfwise errors."""


class InvalidInputError(ShelfwiseError, ValueError):
    """A mandatory input field is missing or malformed."""


class CatalogConfigurationError(ShelfwiseError, ValueError):
    """Static configuration (knowledge base, achievement catalog) is invalid."""


class UserNotFoundError(ShelfwiseError, LookupError):
    """No progression record exists for the requested user."""


class RecipeNotFoundError(ShelfwiseError, LookupError):
    """No recipe exists with the requested identifier."""


class PredictionNotFoundError(ShelfwiseError, LookupError):
    """No stored prediction matches the requested item."""
