"""
Waste Risk Scoring

Estimates how likely an item is to be thrown away, comparing its days left
before expiry against how long the household usually takes to use up items
of the same category, then scaling by the category's perishability.
"""

from typing import Dict, Iterable, List, Optional
from datetime import date
import logging

from ...exceptions import InvalidInputError
from ..config import (
    ConsumptionPattern,
    RiskClass,
    TrendDirection,
    DEFAULT_AVG_CONSUMPTION_DAYS,
    WASTE_LATENCY_TIERS,
    WASTE_EXPIRED_PROBABILITY,
    WASTE_FLOOR_PROBABILITY,
    HIGH_RISK_THRESHOLD,
    MEDIUM_RISK_THRESHOLD,
    STAPLE_CATEGORY_RECOMMENDATIONS,
)
from ..knowledge_base import KnowledgeBase


logger = logging.getLogger(__name__)


def clamp_probability(value: float) -> float:
    return max(0.0, min(1.0, value))


def base_waste_probability(days_until_expiration: int, avg_consumption_days: float) -> float:
    """Waste probability before the perishability adjustment."""
    if days_until_expiration <= 0:
        return WASTE_EXPIRED_PROBABILITY

    for latency_fraction, probability in WASTE_LATENCY_TIERS:
        if days_until_expiration < avg_consumption_days * latency_fraction:
            return probability
    return WASTE_FLOOR_PROBABILITY


class WasteRiskScorer:
    """Waste likelihood from expiry date vs. consumption latency."""

    def __init__(self, knowledge_base: KnowledgeBase):
        self.kb = knowledge_base
        logger.info("Initialized WasteRiskScorer")

    def average_consumption_days(
        self,
        category: str,
        patterns: Optional[Dict[str, ConsumptionPattern]],
    ) -> float:
        pattern = (patterns or {}).get(category)
        if pattern is None:
            return DEFAULT_AVG_CONSUMPTION_DAYS
        return pattern.average_days_to_consume

    def waste_likelihood(
        self,
        item_name: str,
        expiration_date: date,
        patterns: Optional[Dict[str, ConsumptionPattern]] = None,
        today: Optional[date] = None,
    ) -> float:
        """
        Probability in [0, 1] that the item is wasted before it is used.

        Args:
            item_name: Item name (resolved against the knowledge base)
            expiration_date: Expected expiration date
            patterns: Output of ConsumptionPatternAnalyzer.analyze
            today: Reference date (default: date.today())

        Raises:
            InvalidInputError: If item name or expiration date is missing
        """
        if not item_name:
            raise InvalidInputError("item_name is required for waste scoring")
        if expiration_date is None:
            raise InvalidInputError("expiration_date is required for waste scoring")
        today = today or date.today()

        profile = self.kb.profile_for(item_name)
        days_until_expiration = (expiration_date - today).days
        avg_days = self.average_consumption_days(profile.category, patterns)

        probability = base_waste_probability(days_until_expiration, avg_days)
        probability *= 0.5 + 0.5 * profile.perishability_score

        likelihood = clamp_probability(probability)
        logger.debug(
            f"Waste likelihood for '{item_name}' ({profile.category}): "
            f"days_left={days_until_expiration} avg={avg_days:.1f} -> {likelihood:.3f}"
        )
        return likelihood

    @staticmethod
    def risk_class(likelihood: float) -> RiskClass:
        if likelihood >= HIGH_RISK_THRESHOLD:
            return RiskClass.HIGH
        if likelihood >= MEDIUM_RISK_THRESHOLD:
            return RiskClass.MEDIUM
        return RiskClass.LOW

    def generate_recommendations(
        self,
        inventory: Iterable[str],
        patterns: Optional[Dict[str, ConsumptionPattern]] = None,
    ) -> List[str]:
        """
        Shopping suggestions from inventory gaps and consumption trends.

        One fixed message per staple category (Dairy, Fruit, Vegetable, Meat)
        absent from the inventory, then one per category whose consumption
        trend is increasing, in pattern order.
        """
        present = {self.kb.category_for(name) for name in inventory}

        recommendations = [
            message
            for category, message in STAPLE_CATEGORY_RECOMMENDATIONS.items()
            if category not in present
        ]

        for category, pattern in (patterns or {}).items():
            if pattern.trend == TrendDirection.INCREASING:
                recommendations.append(
                    f"Your {category} consumption is increasing - consider buying more"
                )

        return recommendations
