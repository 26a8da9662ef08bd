"""
Recipe catalog queries.

Unscored lookups over an in-memory recipe catalog: text search, meal-type
filter, top-rated, most popular, quick recipes, plus rating submission and
view counting.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..exceptions import InvalidInputError, RecipeNotFoundError
from ..ml.config import (
    MealType,
    Recipe,
    QUICK_RECIPE_MINUTES,
    MIN_RATING,
    MAX_RATING,
)

logger = logging.getLogger(__name__)


class RecipeCatalog:
    """Query surface over a set of recipes, kept in insertion order."""

    def __init__(
        self,
        recipes: Optional[Iterable[Recipe]] = None,
        quick_recipe_minutes: int = QUICK_RECIPE_MINUTES,
    ):
        self.quick_recipe_minutes = quick_recipe_minutes
        self._recipes: Dict[str, Recipe] = {}
        for recipe in recipes or []:
            self.add(recipe)

    def __len__(self) -> int:
        return len(self._recipes)

    def __iter__(self):
        return iter(self._recipes.values())

    def add(self, recipe: Recipe) -> Recipe:
        """Add or replace a recipe."""
        if not recipe.id:
            raise InvalidInputError("Recipe id is required")
        if not recipe.name:
            raise InvalidInputError(f"Recipe {recipe.id} has no name")
        self._recipes[recipe.id] = recipe
        return recipe

    def get(self, recipe_id: str) -> Recipe:
        try:
            return self._recipes[recipe_id]
        except KeyError:
            raise RecipeNotFoundError(f"Recipe {recipe_id} not found") from None

    def remove(self, recipe_id: str) -> bool:
        return self._recipes.pop(recipe_id, None) is not None

    def all_public(self) -> List[Recipe]:
        return [r for r in self._recipes.values() if r.is_public]

    def search(self, query: str) -> List[Recipe]:
        """Public recipes whose name or description contains the query (case-insensitive)."""
        needle = (query or "").strip().lower()
        if not needle:
            return self.all_public()
        return [
            r for r in self.all_public()
            if needle in r.name.lower() or needle in (r.description or "").lower()
        ]

    def by_meal_type(self, meal_type: MealType) -> List[Recipe]:
        meal_type = MealType(meal_type)
        return [r for r in self._recipes.values() if r.meal_type == meal_type]

    def top_rated(self, limit: Optional[int] = None) -> List[Recipe]:
        """Public recipes by rating average, then rating count, descending."""
        ranked = sorted(
            self.all_public(),
            key=lambda r: (r.rating_average, r.rating_count),
            reverse=True,
        )
        return ranked[:limit] if limit is not None else ranked

    def most_popular(self, limit: Optional[int] = None) -> List[Recipe]:
        ranked = sorted(self.all_public(), key=lambda r: r.view_count, reverse=True)
        return ranked[:limit] if limit is not None else ranked

    def quick_recipes(self, max_minutes: Optional[int] = None) -> List[Recipe]:
        """Public recipes whose prep + cook time is known and within max_minutes."""
        if max_minutes is None:
            max_minutes = self.quick_recipe_minutes
        return [
            r for r in self.all_public()
            if r.total_time_minutes is not None and r.total_time_minutes <= max_minutes
        ]

    def rate(self, recipe_id: str, rating: float) -> bool:
        """
        Fold a new rating into the recipe's running average.

        Ratings outside [1.0, 5.0] are ignored rather than rejected.

        Returns:
            True if the rating was applied
        """
        recipe = self.get(recipe_id)

        if rating is None or not MIN_RATING <= rating <= MAX_RATING:
            logger.warning(f"Ignoring out-of-range rating {rating} for recipe {recipe_id}")
            return False

        current_total = recipe.rating_average * recipe.rating_count
        new_count = recipe.rating_count + 1
        recipe.rating_average = (current_total + rating) / new_count
        recipe.rating_count = new_count

        logger.debug(
            f"Recipe {recipe_id} rated {rating}: "
            f"average={recipe.rating_average:.2f} over {new_count} ratings"
        )
        return True

    def increment_view_count(self, recipe_id: str) -> int:
        recipe = self.get(recipe_id)
        recipe.view_count += 1
        return recipe.view_count
