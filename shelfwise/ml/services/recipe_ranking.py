"""
Recipe Ranking for Expiring Items

Scores every catalog recipe against the household's soon-to-expire items and
returns the recipes that use them, best first.

Scoring per recipe:
- +15 per matched ingredient whose item expires within the urgent window
- +match percentage (0-100)
- +20 if match >= 80%, else +10 if match >= 60%
- +5 per rating star
- +min(views / 100, 10)
- -2 per missing ingredient beyond 5
- +10 if prep + cook <= 30 min, else +5 if <= 60 min
Final scores are clamped at 0; ties keep catalog order.
"""

from typing import Iterable, List, Optional, Sequence, Tuple
from datetime import date, timedelta
import logging

from ...exceptions import InvalidInputError
from ..config import (
    ExpiringItem,
    Recipe,
    RecipeSuggestion,
    DEFAULT_DAYS_AHEAD,
    URGENT_WINDOW_DAYS,
    RECIPE_SCORING_WEIGHTS,
    HIGH_MATCH_PERCENTAGE,
    MEDIUM_MATCH_PERCENTAGE,
    MISSING_INGREDIENT_ALLOWANCE,
    QUICK_RECIPE_MINUTES,
    MEDIUM_RECIPE_MINUTES,
)
from ..utils.text_normalizer import normalize_name, substring_match


logger = logging.getLogger(__name__)


class RecipeRankingEngine:
    """Ranks recipes by how well they use up expiring items."""

    def __init__(
        self,
        urgent_window_days: int = URGENT_WINDOW_DAYS,
        default_days_ahead: int = DEFAULT_DAYS_AHEAD,
        weights: Optional[dict] = None,
    ):
        """
        Initialize ranking engine.

        Args:
            urgent_window_days: Items expiring before today + this are "urgent"
            default_days_ahead: Expiring window when the caller gives none
            weights: Overrides for RECIPE_SCORING_WEIGHTS
        """
        self.urgent_window_days = urgent_window_days
        self.default_days_ahead = default_days_ahead
        self.weights = {**RECIPE_SCORING_WEIGHTS, **(weights or {})}

        logger.info(
            f"Initialized RecipeRankingEngine "
            f"(urgent_window={urgent_window_days}d, days_ahead={default_days_ahead}d)"
        )

    def expiring_within(
        self,
        items: Iterable[ExpiringItem],
        days_ahead: int,
        today: date,
    ) -> List[ExpiringItem]:
        """Items with an expiration date strictly before today + days_ahead."""
        cutoff = today + timedelta(days=days_ahead)
        selected = []
        for item in items:
            if not item.name or not item.name.strip():
                raise InvalidInputError("Expiring item without a name")
            if item.expiration_date is not None and item.expiration_date < cutoff:
                selected.append(item)
        return selected

    def _is_urgent(
        self,
        name: str,
        items: Sequence[Tuple[str, ExpiringItem]],
        today: date,
    ) -> bool:
        urgent_cutoff = today + timedelta(days=self.urgent_window_days)
        return any(
            item_name == name
            and item.expiration_date is not None
            and item.expiration_date < urgent_cutoff
            for item_name, item in items
        )

    def score(
        self,
        recipe: Recipe,
        expiring_items: Sequence[ExpiringItem],
        today: Optional[date] = None,
    ) -> RecipeSuggestion:
        """Score a single recipe against the given expiring items."""
        today = today or date.today()
        w = self.weights

        available = [(normalize_name(item.name), item) for item in expiring_items]
        score = 0.0
        matched: List[str] = []
        missing: List[str] = []
        urgent_items_used = 0

        for ingredient in recipe.ingredients:
            normalized = normalize_name(ingredient)
            hit = next(
                (name for name, _ in available if substring_match(normalized, name)),
                None,
            )
            if hit is None:
                missing.append(ingredient)
                continue

            matched.append(ingredient)
            if self._is_urgent(hit, available, today):
                urgent_items_used += 1
                score += w["urgent_item"]

        total = len(recipe.ingredients)
        match_percentage = (len(matched) * 100.0 / total) if total else 0.0
        score += match_percentage

        if match_percentage >= HIGH_MATCH_PERCENTAGE:
            score += w["match_bonus_high"]
        elif match_percentage >= MEDIUM_MATCH_PERCENTAGE:
            score += w["match_bonus_medium"]

        score += (recipe.rating_average or 0.0) * w["rating"]
        score += min((recipe.view_count or 0) / w["views_divisor"], w["views_cap"])

        if len(missing) > MISSING_INGREDIENT_ALLOWANCE:
            score -= (len(missing) - MISSING_INGREDIENT_ALLOWANCE) * w["missing_penalty"]

        total_time = recipe.total_time_minutes
        if total_time is not None:
            if total_time <= QUICK_RECIPE_MINUTES:
                score += w["quick_bonus"]
            elif total_time <= MEDIUM_RECIPE_MINUTES:
                score += w["medium_time_bonus"]

        return RecipeSuggestion(
            recipe=recipe,
            score=max(0.0, score),
            matched_ingredients=matched,
            missing_ingredients=missing,
            match_percentage=min(100.0, max(0.0, match_percentage)),
            urgent_items_used=urgent_items_used,
        )

    def rank(
        self,
        expiring_items: Iterable[ExpiringItem],
        catalog: Iterable[Recipe],
        days_ahead: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[RecipeSuggestion]:
        """
        Rank catalog recipes for a household's expiring items.

        Args:
            expiring_items: Household inventory items
            catalog: Candidate recipes
            days_ahead: Expiring window in days (default 7)
            today: Reference date (default: date.today())

        Returns:
            Suggestions for recipes using at least one expiring item, score
            descending; empty when nothing is expiring
        """
        today = today or date.today()
        if days_ahead is None:
            days_ahead = self.default_days_ahead
        if days_ahead < 0:
            raise InvalidInputError(f"days_ahead must be >= 0, got {days_ahead}")

        expiring = self.expiring_within(expiring_items or [], days_ahead, today)
        if not expiring:
            logger.debug("No items expiring within window, no recipe suggestions")
            return []

        suggestions = []
        for recipe in catalog or []:
            suggestion = self.score(recipe, expiring, today)
            if suggestion.matched_ingredients:
                suggestions.append(suggestion)

        # Stable: equal scores keep catalog order
        ranked = sorted(suggestions, key=lambda s: s.score, reverse=True)

        logger.info(
            f"Ranked {len(ranked)} recipes for {len(expiring)} expiring items "
            f"(window={days_ahead}d)"
        )
        return ranked
