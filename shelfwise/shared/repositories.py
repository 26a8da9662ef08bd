"""
SQL-backed stores for user progress, achievement progress and predictions.

Each public method runs in its own transaction. `SqlUserProgressRepository.locked`
holds the user's row lock for the duration of a read-modify-write so two
processes updating the same user are serialized by the database.
"""

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ..exceptions import InvalidInputError, PredictionNotFoundError, UserNotFoundError
from ..ml.config import ExpirationPrediction
from ..ml.services.prediction_monitor import PredictionMonitor
from ..services.achievement_catalog import AchievementDefinition
from ..services.progress_store import AchievementProgress, UserProgress
from .database import session_scope
from .models import AchievementProgressRow, ExpirationPredictionRow, UserProgressRow

logger = logging.getLogger(__name__)


# ============================================================================
# USER PROGRESS
# ============================================================================

class SqlUserProgressRepository:
    """Persisted UserProgress records."""

    def __init__(self, factory: sessionmaker):
        self.factory = factory

    def create(self, user_id: str, name: str = "") -> UserProgress:
        if not user_id:
            raise InvalidInputError("user_id is required")

        with session_scope(self.factory) as session:
            if session.get(UserProgressRow, user_id) is not None:
                raise InvalidInputError(f"User {user_id} already has a progress record")
            row = UserProgressRow(
                user_id=user_id,
                name=name,
                level=1,
                experience_points=0,
                total_points=0,
                items_saved=0,
                items_scanned=0,
                streak=0,
                total_co2_saved_kg=0.0,
            )
            session.add(row)
            session.flush()
            logger.info(f"Created progress record for user {user_id}")
            return row.to_domain()

    def get(self, user_id: str) -> UserProgress:
        with session_scope(self.factory) as session:
            row = session.get(UserProgressRow, user_id)
            if row is None:
                raise UserNotFoundError(f"User {user_id} not found")
            return row.to_domain()

    def all(self) -> List[UserProgress]:
        """Every user in insertion order."""
        with session_scope(self.factory) as session:
            rows = session.execute(
                select(UserProgressRow).order_by(UserProgressRow.created_at, UserProgressRow.user_id)
            ).scalars().all()
            return [row.to_domain() for row in rows]

    @contextmanager
    def locked(self, user_id: str) -> Iterator[UserProgress]:
        """
        Row-locked read-modify-write of one user's progress.

        Usage:
            with repo.locked("u1") as progress:
                service.award_experience(progress, 50, "bonus")

        The changes are written back when the block exits normally and
        discarded when it raises.
        """
        session: Session = self.factory()
        try:
            # FOR NO KEY UPDATE on PostgreSQL: achievement rows referencing
            # this user can still be inserted while the lock is held
            row = session.execute(
                select(UserProgressRow)
                .where(UserProgressRow.user_id == user_id)
                .with_for_update(key_share=True)
            ).scalar_one_or_none()
            if row is None:
                raise UserNotFoundError(f"User {user_id} not found")

            progress = row.to_domain()
            yield progress

            row.apply(progress)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


# ============================================================================
# ACHIEVEMENT PROGRESS
# ============================================================================

class SqlAchievementProgressStore:
    """AchievementProgressStore over the achievement_progress table."""

    def __init__(self, factory: sessionmaker):
        self.factory = factory

    @staticmethod
    def _find(session: Session, user_id: str, achievement_type: str, tier: str):
        return session.execute(
            select(AchievementProgressRow).where(
                AchievementProgressRow.user_id == user_id,
                AchievementProgressRow.achievement_type == achievement_type,
                AchievementProgressRow.tier == tier,
            )
        ).scalar_one_or_none()

    def load_or_create(
        self, user_id: str, definition: AchievementDefinition
    ) -> AchievementProgress:
        with session_scope(self.factory) as session:
            row = self._find(session, user_id, definition.type, definition.tier)
            if row is None:
                return AchievementProgress(user_id, definition.type, definition.tier)
            return row.to_domain()

    def save(self, record: AchievementProgress) -> None:
        with session_scope(self.factory) as session:
            row = self._find(session, record.user_id, record.achievement_type, record.tier)
            if row is None:
                row = AchievementProgressRow(
                    user_id=record.user_id,
                    achievement_type=record.achievement_type,
                    tier=record.tier,
                )
                session.add(row)
            row.progress = record.progress
            row.is_unlocked = record.is_unlocked
            row.unlocked_at = record.unlocked_at

    def for_user(self, user_id: str) -> List[AchievementProgress]:
        with session_scope(self.factory) as session:
            rows = session.execute(
                select(AchievementProgressRow)
                .where(AchievementProgressRow.user_id == user_id)
                .order_by(AchievementProgressRow.id)
            ).scalars().all()
            return [row.to_domain() for row in rows]


# ============================================================================
# PREDICTIONS
# ============================================================================

class SqlPredictionRepository:
    """Stored predictions and their audited outcomes."""

    def __init__(self, factory: sessionmaker):
        self.factory = factory

    def save(self, prediction: ExpirationPrediction) -> int:
        """Persist a prediction; returns its row id."""
        with session_scope(self.factory) as session:
            row = ExpirationPredictionRow.from_domain(prediction)
            session.add(row)
            session.flush()
            logger.debug(f"Stored prediction {row.id} for item {prediction.item_id}")
            return row.id

    def get(self, prediction_id: int) -> ExpirationPrediction:
        with session_scope(self.factory) as session:
            row = session.get(ExpirationPredictionRow, prediction_id)
            if row is None:
                raise PredictionNotFoundError(f"Prediction {prediction_id} not found")
            return row.to_domain()

    def latest_for_item(self, item_id: str) -> ExpirationPrediction:
        with session_scope(self.factory) as session:
            row = self._latest_row(session, item_id)
            return row.to_domain()

    @staticmethod
    def _latest_row(session: Session, item_id: str) -> ExpirationPredictionRow:
        row = session.execute(
            select(ExpirationPredictionRow)
            .where(ExpirationPredictionRow.item_id == item_id)
            .order_by(ExpirationPredictionRow.created_at.desc(), ExpirationPredictionRow.id.desc())
            .limit(1)
        ).scalar_one_or_none()
        if row is None:
            raise PredictionNotFoundError(f"No prediction stored for item {item_id}")
        return row

    def record_outcome(
        self,
        item_id: str,
        actual_expiration_date: date,
        monitor: PredictionMonitor,
    ) -> ExpirationPrediction:
        """Audit the item's most recent prediction against the observed date."""
        with session_scope(self.factory) as session:
            row = self._latest_row(session, item_id)
            prediction = monitor.record_outcome(row.to_domain(), actual_expiration_date)
            row.actual_expiration_date = prediction.actual_expiration_date
            row.prediction_accuracy = prediction.prediction_accuracy
            return prediction

    def audited(self, model_version: Optional[str] = None) -> List[ExpirationPrediction]:
        """Predictions with a recorded outcome, oldest first."""
        with session_scope(self.factory) as session:
            query = select(ExpirationPredictionRow).where(
                ExpirationPredictionRow.actual_expiration_date.is_not(None)
            )
            if model_version is not None:
                query = query.where(ExpirationPredictionRow.model_version == model_version)
            rows = session.execute(query.order_by(ExpirationPredictionRow.id)).scalars().all()
            return [row.to_domain() for row in rows]
