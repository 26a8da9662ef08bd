"""
Feature Engineering for Expiration Prediction.

Builds the feature snapshot stored alongside every expiration prediction so
that predictions can be audited offline against the actual outcome.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass
from datetime import date
import logging

from ..config import (
    PredictionInput,
    DEFAULT_FEATURE_TEMPERATURE_C,
    DEFAULT_FEATURE_HUMIDITY_PCT,
)
from ..knowledge_base import FoodCategoryProfile, KnowledgeBase


logger = logging.getLogger(__name__)


EXPIRATION_FEATURES = [
    # Temporal features
    "days_since_purchase",
    "labeled_shelf_life",
    # Environmental features
    "temperature_avg",
    "humidity_avg",
    # Usage features
    "open_count",
    # Category features
    "baseline_shelf_life",
    "perishability_score",
    "is_dairy",
    "is_meat",
    "is_fish",
    "is_produce",
    # Storage features
    "storage_multiplier",
    "is_refrigerated",
    "is_frozen",
]


@dataclass
class FeatureVector:
    """Engineered feature vector for a single prediction request."""
    item_id: Optional[str]
    features: Dict[str, float]
    feature_names: List[str]
    metadata: Dict[str, Any]


class ExpirationFeatureEngineer:
    """Feature extraction for the expiration model."""

    def __init__(self, knowledge_base: KnowledgeBase):
        """
        Initialize feature engineer.

        Args:
            knowledge_base: Shelf-life tables used for category/storage encoding
        """
        self.kb = knowledge_base
        self.feature_names = EXPIRATION_FEATURES

        logger.info(f"Initialized ExpirationFeatureEngineer with {len(self.feature_names)} features")

    def extract(
        self,
        request: PredictionInput,
        profile: FoodCategoryProfile,
        reference_date: Optional[date] = None,
    ) -> FeatureVector:
        """
        Extract all features for a prediction request.

        Args:
            request: Prediction input (purchase date must be set)
            profile: Resolved category profile
            reference_date: Date for feature extraction (default: today)

        Returns:
            FeatureVector with all engineered features
        """
        if reference_date is None:
            reference_date = date.today()

        features: Dict[str, float] = {}

        # ===== Temporal Features =====
        features["days_since_purchase"] = float((reference_date - request.purchase_date).days)
        if request.labeled_expiration_date is not None:
            features["labeled_shelf_life"] = float(
                (request.labeled_expiration_date - request.purchase_date).days
            )
        else:
            features["labeled_shelf_life"] = -1.0  # Unknown

        # ===== Environmental Features =====
        features["temperature_avg"] = (
            float(request.temperature_avg)
            if request.temperature_avg is not None
            else DEFAULT_FEATURE_TEMPERATURE_C
        )
        features["humidity_avg"] = (
            float(request.humidity_avg)
            if request.humidity_avg is not None
            else DEFAULT_FEATURE_HUMIDITY_PCT
        )

        # ===== Usage Features =====
        features["open_count"] = float(request.open_count or 0)

        # ===== Category Features =====
        features["baseline_shelf_life"] = float(profile.baseline_shelf_life_days)
        features["perishability_score"] = profile.perishability_score
        features["is_dairy"] = float(profile.category == "Dairy")
        features["is_meat"] = float(profile.category == "Meat")
        features["is_fish"] = float(profile.category == "Fish")
        features["is_produce"] = float(profile.category in ("Fruit", "Vegetable"))

        # ===== Storage Features =====
        location = (request.storage_location or "").lower()
        features["storage_multiplier"] = self.kb.storage_multiplier(request.storage_location)
        features["is_refrigerated"] = float(self.kb.is_refrigerated(request.storage_location))
        features["is_frozen"] = float("freezer" in location)

        logger.debug(f"Extracted {len(features)} features for item {request.item_id}")

        return FeatureVector(
            item_id=request.item_id,
            features=features,
            feature_names=list(self.feature_names),
            metadata={
                "category": profile.category,
                "reference_date": reference_date.isoformat(),
            },
        )
