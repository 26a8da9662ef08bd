"""
ML Services

Components:
- expiration_predictor: Heuristic shelf-life model and quick estimates
- prediction_monitor: Accuracy auditing and model performance
- consumption_analyzer: Per-category consumption latency and trend
- waste_risk_scorer: Waste likelihood and shopping recommendations
- recipe_ranking: Recipe scoring against expiring items
"""

from .expiration_predictor import ExpirationPredictor
from .prediction_monitor import PredictionMonitor
from .consumption_analyzer import ConsumptionPatternAnalyzer
from .waste_risk_scorer import WasteRiskScorer
from .recipe_ranking import RecipeRankingEngine

__all__ = [
    "ExpirationPredictor",
    "PredictionMonitor",
    "ConsumptionPatternAnalyzer",
    "WasteRiskScorer",
    "RecipeRankingEngine",
]
