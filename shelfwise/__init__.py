"""
Shelfwise Core

Decision engines for a household food-inventory application: expiration
prediction, consumption and waste analysis, recipe ranking for expiring
items, and gamified progression.
"""

from .core import (
    CoreServices,
    build_core_services,
    get_core_services,
    predict_expiration,
    record_prediction_outcome,
    model_performance,
    analyze_consumption,
    waste_likelihood,
    rank_recipes,
    award_experience,
    track_achievement,
    update_streak,
)
from .exceptions import (
    ShelfwiseError,
    InvalidInputError,
    CatalogConfigurationError,
    UserNotFoundError,
    RecipeNotFoundError,
    PredictionNotFoundError,
)

__all__ = [
    # Services
    "CoreServices",
    "build_core_services",
    "get_core_services",

    # Entry points
    "predict_expiration",
    "record_prediction_outcome",
    "model_performance",
    "analyze_consumption",
    "waste_likelihood",
    "rank_recipes",
    "award_experience",
    "track_achievement",
    "update_streak",

    # Errors
    "ShelfwiseError",
    "InvalidInputError",
    "CatalogConfigurationError",
    "UserNotFoundError",
    "RecipeNotFoundError",
    "PredictionNotFoundError",
]

__version__ = "1.0.0"
