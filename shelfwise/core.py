"""
Shelfwise core entry points.

`CoreServices` wires the engines from Settings once; the module-level
functions below are the computation surface a service layer calls. Every
function takes an optional `services` argument and otherwise uses the
process-wide instance from `get_core_services()`.
"""

import logging
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Dict, Iterable, List, Optional

from .config import Settings, get_settings
from .ml.config import (
    ConsumptionPattern,
    ConsumptionRecord,
    ExpirationPrediction,
    ExpiringItem,
    ModelPerformanceMetrics,
    PredictionInput,
    Recipe,
    RecipeSuggestion,
)
from .ml.knowledge_base import KnowledgeBase, default_knowledge_base, load_knowledge_base
from .ml.services.consumption_analyzer import ConsumptionPatternAnalyzer
from .ml.services.expiration_predictor import ExpirationPredictor
from .ml.services.prediction_monitor import PredictionMonitor
from .ml.services.recipe_ranking import RecipeRankingEngine
from .ml.services.waste_risk_scorer import WasteRiskScorer
from .services.achievement_catalog import (
    AchievementCatalog,
    default_achievement_catalog,
    load_achievement_catalog,
)
from .services.gamification_service import GamificationService
from .services.progress_store import (
    AchievementProgressStore,
    ExperienceAward,
    UnlockedAchievement,
    UserProgress,
)
from .services.recipe_catalog import RecipeCatalog
from .services.sustainability_service import SustainabilityService

logger = logging.getLogger(__name__)


@dataclass
class CoreServices:
    """Engines sharing one knowledge base and one achievement catalog."""
    settings: Settings
    knowledge_base: KnowledgeBase
    achievement_catalog: AchievementCatalog
    predictor: ExpirationPredictor
    monitor: PredictionMonitor
    consumption_analyzer: ConsumptionPatternAnalyzer
    waste_scorer: WasteRiskScorer
    recipe_ranker: RecipeRankingEngine
    recipes: RecipeCatalog
    gamification: GamificationService
    sustainability: SustainabilityService


def build_core_services(
    settings: Optional[Settings] = None,
    store: Optional[AchievementProgressStore] = None,
) -> CoreServices:
    """
    Build all engines from settings.

    Args:
        settings: Configuration (default: cached settings)
        store: Achievement progress store (default: in-memory)

    Raises:
        CatalogConfigurationError: If a configured knowledge base or
            achievement catalog file is invalid
    """
    settings = settings or get_settings()

    if settings.KNOWLEDGE_BASE_PATH:
        knowledge_base = load_knowledge_base(settings.KNOWLEDGE_BASE_PATH)
    else:
        knowledge_base = default_knowledge_base()

    if settings.ACHIEVEMENT_CATALOG_PATH:
        catalog = load_achievement_catalog(settings.ACHIEVEMENT_CATALOG_PATH)
    else:
        catalog = default_achievement_catalog()

    services = CoreServices(
        settings=settings,
        knowledge_base=knowledge_base,
        achievement_catalog=catalog,
        predictor=ExpirationPredictor(knowledge_base),
        monitor=PredictionMonitor(),
        consumption_analyzer=ConsumptionPatternAnalyzer(knowledge_base),
        waste_scorer=WasteRiskScorer(knowledge_base),
        recipe_ranker=RecipeRankingEngine(
            urgent_window_days=settings.URGENT_WINDOW_DAYS,
            default_days_ahead=settings.RECIPE_DAYS_AHEAD,
        ),
        recipes=RecipeCatalog(quick_recipe_minutes=settings.QUICK_RECIPE_MAX_MINUTES),
        gamification=GamificationService(
            catalog=catalog,
            store=store,
            leaderboard_limit=settings.LEADERBOARD_DEFAULT_LIMIT,
        ),
        sustainability=SustainabilityService(),
    )

    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} core services ready")
    return services


@lru_cache()
def get_core_services() -> CoreServices:
    """Process-wide CoreServices built from cached settings."""
    return build_core_services()


def _resolve(services: Optional[CoreServices]) -> CoreServices:
    return services if services is not None else get_core_services()


# ============================================================================
# EXPIRATION
# ============================================================================

def predict_expiration(
    request: PredictionInput,
    services: Optional[CoreServices] = None,
) -> ExpirationPrediction:
    return _resolve(services).predictor.predict(request)


def record_prediction_outcome(
    prediction: ExpirationPrediction,
    actual_expiration_date: date,
    services: Optional[CoreServices] = None,
) -> ExpirationPrediction:
    return _resolve(services).monitor.record_outcome(prediction, actual_expiration_date)


def model_performance(
    predictions: Iterable[ExpirationPrediction],
    services: Optional[CoreServices] = None,
) -> ModelPerformanceMetrics:
    return _resolve(services).monitor.model_performance(predictions)


# ============================================================================
# CONSUMPTION & WASTE
# ============================================================================

def analyze_consumption(
    records: List[ConsumptionRecord],
    services: Optional[CoreServices] = None,
) -> Dict[str, ConsumptionPattern]:
    return _resolve(services).consumption_analyzer.analyze(records)


def waste_likelihood(
    item_name: str,
    expiration_date: date,
    patterns: Optional[Dict[str, ConsumptionPattern]] = None,
    today: Optional[date] = None,
    services: Optional[CoreServices] = None,
) -> float:
    return _resolve(services).waste_scorer.waste_likelihood(
        item_name, expiration_date, patterns, today=today
    )


# ============================================================================
# RECIPES
# ============================================================================

def rank_recipes(
    expiring_items: Iterable[ExpiringItem],
    catalog: Iterable[Recipe],
    days_ahead: Optional[int] = None,
    today: Optional[date] = None,
    services: Optional[CoreServices] = None,
) -> List[RecipeSuggestion]:
    return _resolve(services).recipe_ranker.rank(
        expiring_items, catalog, days_ahead=days_ahead, today=today
    )


# ============================================================================
# GAMIFICATION
# ============================================================================

def award_experience(
    progress: UserProgress,
    xp: int,
    reason: str = "",
    services: Optional[CoreServices] = None,
) -> ExperienceAward:
    return _resolve(services).gamification.award_experience(progress, xp, reason)


def track_achievement(
    progress: UserProgress,
    achievement_type: str,
    value: int,
    catalog: Optional[AchievementCatalog] = None,
    services: Optional[CoreServices] = None,
) -> List[UnlockedAchievement]:
    return _resolve(services).gamification.track_achievement(
        progress, achievement_type, value, catalog=catalog
    )


def update_streak(
    progress: UserProgress,
    today: Optional[date] = None,
    services: Optional[CoreServices] = None,
) -> UserProgress:
    return _resolve(services).gamification.update_streak(progress, today)
