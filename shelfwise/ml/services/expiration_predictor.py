"""
Expiration Prediction Service

Deterministic shelf-life model: category baseline adjusted by storage
location, environmental telemetry and container openings. Every prediction
carries a confidence score derived from which inputs were available and a
feature snapshot for later accuracy auditing (see prediction_monitor).
"""

from typing import Optional, Tuple
from datetime import date, timedelta
import logging
import math

from ...exceptions import InvalidInputError
from ..config import (
    PredictionInput,
    ExpirationPrediction,
    MODEL_VERSION,
    BASE_CONFIDENCE,
    LABELED_DATE_CONFIDENCE_BONUS,
    ENVIRONMENT_CONFIDENCE_BONUS,
    KNOWN_CATEGORY_CONFIDENCE_BONUS,
    MAX_CONFIDENCE,
    OPTIMAL_FRIDGE_TEMPERATURE_C,
    TEMPERATURE_TOLERANCE_BANDS,
    TEMPERATURE_FACTOR_FLOOR,
    HUMIDITY_BANDS,
    HUMIDITY_FACTOR_FLOOR,
    OPEN_COUNT_DECAY,
    OPEN_COUNT_FACTOR_FLOOR,
    QUICK_MODEL_WEIGHT,
    QUICK_DECLARED_WEIGHT,
    QUICK_REFRIGERATED_EXTRA_DAYS,
    QUICK_ROOM_TEMPERATURE_EXTRA_DAYS,
    SUMMER_MONTHS,
    WINTER_MONTHS,
    SUMMER_MULTIPLIER,
    WINTER_MULTIPLIER,
)
from ..features.feature_engineer import ExpirationFeatureEngineer
from ..knowledge_base import FoodCategoryProfile, KnowledgeBase


logger = logging.getLogger(__name__)

# A prediction never lands on the purchase day itself
MIN_PREDICTED_SHELF_LIFE_DAYS = 1


def temperature_factor(temperature: Optional[float]) -> float:
    """Shelf-life factor for average storage temperature (optimum 4C)."""
    if temperature is None:
        return 1.0

    deviation = abs(temperature - OPTIMAL_FRIDGE_TEMPERATURE_C)
    for max_deviation, factor in TEMPERATURE_TOLERANCE_BANDS:
        if deviation <= max_deviation:
            return factor
    return TEMPERATURE_FACTOR_FLOOR


def humidity_factor(humidity: Optional[float]) -> float:
    """Shelf-life factor for average relative humidity (optimum 50-70%)."""
    if humidity is None:
        return 1.0

    for low, high, factor in HUMIDITY_BANDS:
        if low <= humidity <= high:
            return factor
    return HUMIDITY_FACTOR_FLOOR


def open_count_factor(open_count: Optional[int]) -> float:
    """Each opening costs 5% of shelf life, never below half of it."""
    if not open_count:
        return 1.0
    return max(OPEN_COUNT_FACTOR_FLOOR, 1.0 - OPEN_COUNT_DECAY * open_count)


def seasonal_multiplier(reference_date: date) -> float:
    """Summer heat shortens shelf life, winter lengthens it."""
    if reference_date.month in SUMMER_MONTHS:
        return SUMMER_MULTIPLIER
    if reference_date.month in WINTER_MONTHS:
        return WINTER_MULTIPLIER
    return 1.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ExpirationPredictor:
    """Heuristic expiration model over the shelf-life knowledge base."""

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        model_version: str = MODEL_VERSION,
    ):
        """
        Initialize predictor.

        Args:
            knowledge_base: Category/storage tables
            model_version: Version tag stamped on every prediction
        """
        self.kb = knowledge_base
        self.model_version = model_version
        self.feature_engineer = ExpirationFeatureEngineer(knowledge_base)

        logger.info(f"Initialized ExpirationPredictor (model_version={model_version})")

    def _validate(self, request: PredictionInput) -> None:
        if request.purchase_date is None:
            raise InvalidInputError("purchase_date is required for expiration prediction")
        if not (request.category or request.item_name):
            raise InvalidInputError("category or item_name is required for expiration prediction")
        if request.open_count is not None and request.open_count < 0:
            raise InvalidInputError(f"open_count must be >= 0, got {request.open_count}")

    def resolve_profile(self, request: PredictionInput) -> Tuple[FoodCategoryProfile, bool]:
        """Resolve by item name first, then by declared category."""
        if request.item_name:
            profile, recognized = self.kb.resolve(request.item_name)
            if recognized:
                return profile, True
        return self.kb.resolve(request.category)

    def adjusted_shelf_life(
        self,
        request: PredictionInput,
        profile: FoodCategoryProfile,
    ) -> float:
        """Baseline days scaled by storage, temperature, humidity and openings."""
        return (
            profile.baseline_shelf_life_days
            * self.kb.storage_multiplier(request.storage_location)
            * temperature_factor(request.temperature_avg)
            * humidity_factor(request.humidity_avg)
            * open_count_factor(request.open_count)
        )

    def confidence_score(self, request: PredictionInput, recognized: bool) -> float:
        """Self-reported certainty from the inputs that were supplied."""
        confidence = BASE_CONFIDENCE

        if request.labeled_expiration_date is not None:
            confidence += LABELED_DATE_CONFIDENCE_BONUS

        if request.temperature_avg is not None and request.humidity_avg is not None:
            confidence += ENVIRONMENT_CONFIDENCE_BONUS

        if recognized:
            confidence += KNOWN_CATEGORY_CONFIDENCE_BONUS

        return max(0.0, min(MAX_CONFIDENCE, confidence))

    def predict(
        self,
        request: PredictionInput,
        reference_date: Optional[date] = None,
    ) -> ExpirationPrediction:
        """
        Predict the expiration date for one item.

        Args:
            request: Prediction input
            reference_date: "Today" for feature extraction (default: date.today())

        Returns:
            ExpirationPrediction with date, confidence and feature snapshot

        Raises:
            InvalidInputError: If purchase date or category/name is missing
        """
        self._validate(request)

        profile, recognized = self.resolve_profile(request)
        adjusted = self.adjusted_shelf_life(request, profile)
        shelf_life_days = max(MIN_PREDICTED_SHELF_LIFE_DAYS, round_half_up(adjusted))
        predicted_date = request.purchase_date + timedelta(days=shelf_life_days)

        confidence = self.confidence_score(request, recognized)
        feature_vector = self.feature_engineer.extract(request, profile, reference_date)

        logger.debug(
            f"Predicted {request.item_id}: {profile.category} "
            f"shelf_life={adjusted:.2f}d -> {predicted_date} (confidence={confidence:.2f})"
        )

        return ExpirationPrediction(
            item_id=request.item_id,
            category=request.category or profile.category,
            storage_location=request.storage_location,
            purchase_date=request.purchase_date,
            labeled_expiration_date=request.labeled_expiration_date,
            predicted_expiration_date=predicted_date,
            confidence_score=confidence,
            features=feature_vector.features,
            model_version=self.model_version,
            temperature_avg=request.temperature_avg,
            humidity_avg=request.humidity_avg,
            open_count=request.open_count or 0,
        )

    def quick_estimate(
        self,
        item_name: str,
        storage_location: Optional[str] = None,
        declared_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> date:
        """
        Telemetry-free estimate used when an item is created by hand.

        With a declared date the result is a 70/30 blend of the model's
        shelf life and the declared days remaining; without one it is the
        category baseline plus 3 days (refrigerated) or 2 days.

        Raises:
            InvalidInputError: If item_name is empty
        """
        if not item_name or not item_name.strip():
            raise InvalidInputError("item_name is required for a quick estimate")
        today = today or date.today()

        profile = self.kb.profile_for(item_name)

        if declared_date is None:
            extra = (
                QUICK_REFRIGERATED_EXTRA_DAYS
                if self.kb.is_refrigerated(storage_location)
                else QUICK_ROOM_TEMPERATURE_EXTRA_DAYS
            )
            return today + timedelta(days=profile.baseline_shelf_life_days + extra)

        model_days = int(
            profile.baseline_shelf_life_days
            * self.kb.storage_multiplier(storage_location)
            * seasonal_multiplier(today)
        )
        declared_days = (declared_date - today).days
        blended_days = int(model_days * QUICK_MODEL_WEIGHT + declared_days * QUICK_DECLARED_WEIGHT)

        return today + timedelta(days=blended_days)
