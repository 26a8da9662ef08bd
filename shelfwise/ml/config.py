"""
Scoring & Prediction Design for Shelfwise
Heuristic engines for expiration prediction and food waste reduction.

Components:
1. Expiration Prediction - Shelf-life model with confidence + accuracy auditing
2. Consumption Patterns - Per-category latency and trend fitting
3. Waste Risk Scoring - Waste likelihood from expiry vs. consumption latency
4. Recipe Ranking - Multi-factor scoring of recipes against expiring items
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional
from datetime import date, datetime, timezone


MODEL_VERSION = "1.0.0"


class TrendDirection(str, Enum):
    """Direction of a category's days-to-consume trend."""
    INCREASING = "increasing"
    DECREASING = "decreasing"


class RiskClass(str, Enum):
    """Waste risk classifications"""
    HIGH = "high"  # >= 0.7
    MEDIUM = "medium"  # 0.4 - 0.7
    LOW = "low"  # < 0.4


class MealType(str, Enum):
    """Meal slots a recipe is intended for."""
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    DESSERT = "dessert"
    BEVERAGE = "beverage"


class DifficultyLevel(str, Enum):
    """Recipe difficulty."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# ============================================================================
# Expiration Prediction Configuration
# ============================================================================

# Empirical increments; recalibrate against recorded outcomes in
# prediction_monitor.
BASE_CONFIDENCE = 0.70
LABELED_DATE_CONFIDENCE_BONUS = 0.15
ENVIRONMENT_CONFIDENCE_BONUS = 0.10
KNOWN_CATEGORY_CONFIDENCE_BONUS = 0.05
MAX_CONFIDENCE = 1.0

# Accuracy decays 5 points per day of error, floored at 0
ACCURACY_MAX = 100.0
ACCURACY_PENALTY_PER_DAY = 5.0

OPTIMAL_FRIDGE_TEMPERATURE_C = 4.0
TEMPERATURE_TOLERANCE_BANDS = [  # (max |deviation| in C, factor)
    (2.0, 1.0),
    (5.0, 0.9),
    (10.0, 0.7),
]
TEMPERATURE_FACTOR_FLOOR = 0.5

HUMIDITY_BANDS = [  # (low %, high %, factor), checked in order
    (50.0, 70.0, 1.0),
    (40.0, 80.0, 0.95),
    (30.0, 90.0, 0.85),
]
HUMIDITY_FACTOR_FLOOR = 0.7

OPEN_COUNT_DECAY = 0.05  # freshness lost per container opening
OPEN_COUNT_FACTOR_FLOOR = 0.5

DEFAULT_FEATURE_TEMPERATURE_C = 4.0
DEFAULT_FEATURE_HUMIDITY_PCT = 50.0

# Quick (telemetry-free) estimate used for ad-hoc item creation
QUICK_MODEL_WEIGHT = 0.7
QUICK_DECLARED_WEIGHT = 0.3
QUICK_REFRIGERATED_EXTRA_DAYS = 3
QUICK_ROOM_TEMPERATURE_EXTRA_DAYS = 2
SUMMER_MONTHS = (6, 7, 8)
WINTER_MONTHS = (12, 1, 2)
SUMMER_MULTIPLIER = 0.9
WINTER_MULTIPLIER = 1.1


# ============================================================================
# Consumption & Waste Configuration
# ============================================================================

MIN_CONSUMPTION_HISTORY = 3
DEFAULT_AVG_CONSUMPTION_DAYS = 7.0
DEFAULT_CONSUMPTION_DAYS = {
    "Dairy": 5.0,
    "Meat": 2.0,
    "Fruit": 7.0,
    "Vegetable": 5.0,
    "Grain/Bread": 14.0,
}

# (fraction of avg consumption latency, waste probability), checked in order
WASTE_LATENCY_TIERS = [
    (0.5, 0.8),
    (1.0, 0.5),
    (1.5, 0.2),
]
WASTE_EXPIRED_PROBABILITY = 1.0
WASTE_FLOOR_PROBABILITY = 0.1

HIGH_RISK_THRESHOLD = 0.7
MEDIUM_RISK_THRESHOLD = 0.4

STAPLE_CATEGORY_RECOMMENDATIONS = {
    "Dairy": "Consider adding dairy products like milk or yogurt",
    "Fruit": "Add some fresh fruits for a balanced diet",
    "Vegetable": "Stock up on vegetables for healthy meals",
    "Meat": "Consider adding protein sources like chicken or fish",
}


# ============================================================================
# Recipe Ranking Configuration
# ============================================================================

DEFAULT_DAYS_AHEAD = 7
URGENT_WINDOW_DAYS = 3
RECIPE_SCORING_WEIGHTS = {
    "urgent_item": 15.0,  # per matched ingredient expiring soon
    "match_bonus_high": 20.0,  # match >= 80%
    "match_bonus_medium": 10.0,  # match >= 60%
    "rating": 5.0,  # per rating star
    "views_divisor": 100.0,
    "views_cap": 10.0,
    "missing_penalty": 2.0,  # per missing ingredient beyond the allowance
    "quick_bonus": 10.0,  # prep + cook <= 30 min
    "medium_time_bonus": 5.0,  # prep + cook <= 60 min
}
HIGH_MATCH_PERCENTAGE = 80.0
MEDIUM_MATCH_PERCENTAGE = 60.0
MISSING_INGREDIENT_ALLOWANCE = 5
QUICK_RECIPE_MINUTES = 30
MEDIUM_RECIPE_MINUTES = 60
MIN_RATING = 1.0
MAX_RATING = 5.0


# ============================================================================
# Result Types
# ============================================================================

@dataclass
class PredictionInput:
    """Request for a single expiration prediction."""
    item_id: Optional[str]
    category: Optional[str]
    storage_location: Optional[str]
    purchase_date: Optional[date]
    labeled_expiration_date: Optional[date] = None
    temperature_avg: Optional[float] = None
    humidity_avg: Optional[float] = None
    open_count: int = 0
    item_name: Optional[str] = None


@dataclass
class ExpirationPrediction:
    """Result from the expiration model, enriched once ground truth arrives."""
    item_id: Optional[str]
    category: Optional[str]
    storage_location: Optional[str]
    purchase_date: date
    labeled_expiration_date: Optional[date]
    predicted_expiration_date: date
    confidence_score: float
    features: Dict[str, float]
    model_version: str = MODEL_VERSION
    temperature_avg: Optional[float] = None
    humidity_avg: Optional[float] = None
    open_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    actual_expiration_date: Optional[date] = None
    prediction_accuracy: Optional[float] = None

    @property
    def has_outcome(self) -> bool:
        return self.actual_expiration_date is not None


@dataclass
class ModelPerformanceMetrics:
    """Offline quality report for a batch of audited predictions."""
    mean_absolute_error: float = 0.0
    root_mean_squared_error: float = 0.0
    accuracy_within_one_day: float = 0.0  # percent of predictions, 0-100
    total_predictions: int = 0
    model_version: str = MODEL_VERSION


@dataclass
class ConsumptionRecord:
    """Historical fact: an item bought on one day and used up on another."""
    item_name: str
    purchase_date: date
    consumption_date: date
    category: Optional[str] = None

    @property
    def days_to_consume(self) -> int:
        return (self.consumption_date - self.purchase_date).days


@dataclass
class ConsumptionPattern:
    """Per-category consumption latency derived from history."""
    category: str
    average_days_to_consume: float
    predicted_days_to_consume: float
    trend: Optional[TrendDirection]  # None for default-table rows
    sample_size: int = 0
    slope: float = 0.0
    is_default: bool = False


@dataclass
class ExpiringItem:
    """Inventory item considered for recipe matching."""
    name: str
    expiration_date: Optional[date]
    category: Optional[str] = None


@dataclass
class Recipe:
    """Recipe as stored in the (external) catalog."""
    id: str
    name: str
    ingredients: List[str]
    description: str = ""
    instructions: List[str] = field(default_factory=list)
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None
    servings: Optional[int] = None
    meal_type: Optional[MealType] = None
    difficulty: Optional[DifficultyLevel] = None
    cuisine_type: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    rating_average: float = 0.0
    rating_count: int = 0
    view_count: int = 0
    is_public: bool = True

    @property
    def total_time_minutes(self) -> Optional[int]:
        if self.prep_time_minutes is None or self.cook_time_minutes is None:
            return None
        return self.prep_time_minutes + self.cook_time_minutes


@dataclass
class RecipeSuggestion:
    """Recipe recommendation for expiring items."""
    recipe: Recipe
    score: float
    matched_ingredients: List[str]
    missing_ingredients: List[str]
    match_percentage: float
    urgent_items_used: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipe_id": self.recipe.id,
            "recipe_name": self.recipe.name,
            "score": round(self.score, 2),
            "matched_ingredients": list(self.matched_ingredients),
            "missing_ingredients": list(self.missing_ingredients),
            "match_percentage": round(self.match_percentage, 2),
            "urgent_items_used": self.urgent_items_used,
        }
