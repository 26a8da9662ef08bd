"""
Sustainability estimates.

Rough CO2 avoided by using an item before it expires: the earlier it is
used, the more of its footprint counts as saved.
"""

import logging
from datetime import date
from typing import Optional

from ..exceptions import InvalidInputError

logger = logging.getLogger(__name__)

CO2_KG_PER_ITEM = 0.5
DAYS_PER_WEEK = 7.0


class SustainabilityService:
    """CO2-saved estimation for items used before expiry."""

    def __init__(self, co2_kg_per_item: float = CO2_KG_PER_ITEM):
        self.co2_kg_per_item = co2_kg_per_item

    def co2_saved(
        self,
        quantity: int,
        expiration_date: date,
        today: Optional[date] = None,
    ) -> float:
        """
        (days before expiration / 7) x quantity x 0.5 kg.

        Returns 0.0 for items that have already expired.
        """
        if expiration_date is None:
            raise InvalidInputError("expiration_date is required for CO2 estimation")
        if quantity is None or quantity < 0:
            raise InvalidInputError(f"quantity must be >= 0, got {quantity}")

        today = today or date.today()
        days_before_expiration = (expiration_date - today).days
        if days_before_expiration < 0:
            return 0.0

        saved = (days_before_expiration / DAYS_PER_WEEK) * quantity * self.co2_kg_per_item
        logger.debug(
            f"CO2 saved: {saved:.3f}kg ({quantity} items, {days_before_expiration}d early)"
        )
        return saved
