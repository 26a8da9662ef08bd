"""
Prediction Monitoring Service

Closes the loop on expiration predictions: once the real expiration date of
an item is known, the prediction is scored, and batches of scored
predictions are summarised for offline model-quality monitoring.

Accuracy per prediction:
    accuracy = max(0, 100 - 5 * |predicted - actual| days)

Batch report:
- Mean absolute error (days)
- Root mean squared error (days)
- Share of predictions within one day of the actual date (percent)

Nothing here feeds back into runtime decisions.
"""

from typing import Iterable, List
from datetime import date
import logging
import math

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error

from ...exceptions import InvalidInputError
from ..config import (
    ExpirationPrediction,
    ModelPerformanceMetrics,
    MODEL_VERSION,
    ACCURACY_MAX,
    ACCURACY_PENALTY_PER_DAY,
)


logger = logging.getLogger(__name__)


def prediction_accuracy(predicted: date, actual: date) -> float:
    """Accuracy in [0, 100] for a single prediction."""
    days_difference = abs((predicted - actual).days)
    return max(0.0, ACCURACY_MAX - days_difference * ACCURACY_PENALTY_PER_DAY)


class PredictionMonitor:
    """Accuracy auditing for expiration predictions."""

    def __init__(self, model_version: str = MODEL_VERSION):
        self.model_version = model_version
        logger.info(f"Initialized PredictionMonitor (model_version={model_version})")

    def record_outcome(
        self,
        prediction: ExpirationPrediction,
        actual_expiration_date: date,
    ) -> ExpirationPrediction:
        """
        Record the observed expiration date and score the prediction.

        A prediction takes ground truth once; re-recording the same date is a
        no-op, a different date is rejected.

        Args:
            prediction: Prediction to enrich (mutated in place)
            actual_expiration_date: Observed expiration date

        Returns:
            The same prediction with actual date and accuracy set

        Raises:
            InvalidInputError: If the date is missing or conflicts with a recorded outcome
        """
        if actual_expiration_date is None:
            raise InvalidInputError("actual_expiration_date is required")

        if prediction.has_outcome:
            if prediction.actual_expiration_date == actual_expiration_date:
                return prediction
            raise InvalidInputError(
                f"Outcome already recorded for item {prediction.item_id} "
                f"({prediction.actual_expiration_date}); refusing {actual_expiration_date}"
            )

        prediction.actual_expiration_date = actual_expiration_date
        prediction.prediction_accuracy = prediction_accuracy(
            prediction.predicted_expiration_date,
            actual_expiration_date,
        )

        logger.info(
            f"Outcome recorded for item {prediction.item_id}: "
            f"predicted={prediction.predicted_expiration_date} actual={actual_expiration_date} "
            f"accuracy={prediction.prediction_accuracy:.1f}"
        )
        return prediction

    def model_performance(
        self,
        predictions: Iterable[ExpirationPrediction],
    ) -> ModelPerformanceMetrics:
        """
        Summarise error statistics over predictions with a recorded outcome.

        Predictions without an actual date are skipped; an empty set yields
        an all-zero report.
        """
        audited: List[ExpirationPrediction] = [
            p for p in predictions
            if p.actual_expiration_date is not None and p.predicted_expiration_date is not None
        ]

        if not audited:
            return ModelPerformanceMetrics(model_version=self.model_version)

        y_true = np.array([p.actual_expiration_date.toordinal() for p in audited], dtype=float)
        y_pred = np.array([p.predicted_expiration_date.toordinal() for p in audited], dtype=float)

        mae = float(mean_absolute_error(y_true, y_pred))
        rmse = math.sqrt(float(mean_squared_error(y_true, y_pred)))
        within_one_day = float(np.mean(np.abs(y_true - y_pred) <= 1.0)) * 100.0

        metrics = ModelPerformanceMetrics(
            mean_absolute_error=mae,
            root_mean_squared_error=rmse,
            accuracy_within_one_day=min(100.0, max(0.0, within_one_day)),
            total_predictions=len(audited),
            model_version=self.model_version,
        )

        logger.info(
            f"Model performance over {metrics.total_predictions} predictions: "
            f"MAE={mae:.2f}d RMSE={rmse:.2f}d within_1d={within_one_day:.1f}%"
        )
        return metrics
