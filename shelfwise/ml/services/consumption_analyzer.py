"""
Consumption Pattern Analysis

Derives per-category consumption latency (days from purchase to use) from a
household's consumption history, with a linear trend over the sequence of
records. Patterns are recomputed from the full history on every call.
"""

from typing import Dict, List, Optional, Sequence
import logging

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from ...exceptions import InvalidInputError
from ..config import (
    ConsumptionRecord,
    ConsumptionPattern,
    TrendDirection,
    MIN_CONSUMPTION_HISTORY,
    DEFAULT_CONSUMPTION_DAYS,
)
from ..knowledge_base import KnowledgeBase


logger = logging.getLogger(__name__)

# Slopes this close to zero are treated as flat (floating-point noise)
SLOPE_EPSILON = 1e-9


def default_patterns() -> Dict[str, ConsumptionPattern]:
    """Pattern table used when history is too short to learn from."""
    return {
        category: ConsumptionPattern(
            category=category,
            average_days_to_consume=days,
            predicted_days_to_consume=days,
            trend=None,
            sample_size=0,
            slope=0.0,
            is_default=True,
        )
        for category, days in DEFAULT_CONSUMPTION_DAYS.items()
    }


class ConsumptionPatternAnalyzer:
    """Per-category consumption latency and trend."""

    def __init__(self, knowledge_base: KnowledgeBase):
        self.kb = knowledge_base
        logger.info("Initialized ConsumptionPatternAnalyzer")

    def _category(self, record: ConsumptionRecord) -> str:
        if record.category:
            profile, recognized = self.kb.resolve(record.category)
            return profile.category if recognized else record.category
        return self.kb.category_for(record.item_name)

    def to_frame(self, records: Sequence[ConsumptionRecord]) -> pd.DataFrame:
        """
        Tabulate history as (category, days_to_consume) rows in input order.

        Raises:
            InvalidInputError: On missing dates or consumption before purchase
        """
        rows = []
        for record in records:
            if record.purchase_date is None or record.consumption_date is None:
                raise InvalidInputError(
                    f"Consumption record for '{record.item_name}' is missing a date"
                )
            days = record.days_to_consume
            if days < 0:
                raise InvalidInputError(
                    f"Consumption record for '{record.item_name}' ends before it starts "
                    f"({record.purchase_date} -> {record.consumption_date})"
                )
            rows.append({"category": self._category(record), "days_to_consume": days})

        return pd.DataFrame(rows, columns=["category", "days_to_consume"])

    def _fit_trend(self, days: np.ndarray) -> tuple:
        """Return (slope, prediction one step past the last record)."""
        n = len(days)
        if n < 2:
            return 0.0, float(days[0])

        x = np.arange(n, dtype=float).reshape(-1, 1)
        model = LinearRegression().fit(x, days.astype(float))
        slope = float(model.coef_[0])
        predicted = float(model.predict(np.array([[float(n)]]))[0])
        return slope, predicted

    def analyze(
        self,
        records: Optional[Sequence[ConsumptionRecord]],
    ) -> Dict[str, ConsumptionPattern]:
        """
        Analyze consumption history.

        Args:
            records: Consumption history, oldest first

        Returns:
            Mapping of category -> ConsumptionPattern, in order of first appearance;
            the default table when fewer than 3 records are supplied
        """
        if not records or len(records) < MIN_CONSUMPTION_HISTORY:
            logger.debug(
                f"History too short ({len(records) if records else 0} records), "
                f"using default consumption patterns"
            )
            return default_patterns()

        df = self.to_frame(records)
        patterns: Dict[str, ConsumptionPattern] = {}

        for category, group in df.groupby("category", sort=False):
            days = group["days_to_consume"].to_numpy()
            slope, predicted = self._fit_trend(days)
            trend = (
                TrendDirection.INCREASING if slope > SLOPE_EPSILON else TrendDirection.DECREASING
            )
            patterns[category] = ConsumptionPattern(
                category=category,
                average_days_to_consume=float(days.mean()),
                predicted_days_to_consume=predicted,
                trend=trend,
                sample_size=len(days),
                slope=slope,
            )

        logger.info(
            f"Analyzed {len(df)} consumption records across {len(patterns)} categories"
        )
        return patterns

    def increasing_categories(self, patterns: Dict[str, ConsumptionPattern]) -> List[str]:
        return [
            category for category, pattern in patterns.items()
            if pattern.trend == TrendDirection.INCREASING
        ]
