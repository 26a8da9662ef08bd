"""
SQLAlchemy models for persisted progression and prediction state.

Rows convert to and from the engine dataclasses; the engines never see ORM
objects.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Date, DateTime, Float, ForeignKey,
    Integer, String, Text, UniqueConstraint, func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..ml.config import ExpirationPrediction
from ..services.progress_store import AchievementProgress, UserProgress


# ============================================================================
# BASE & MIXINS
# ============================================================================

class Base(DeclarativeBase):
    """Base class for all models"""
    type_annotation_map = {
        dict: JSON,
    }


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps"""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


# ============================================================================
# GAMIFICATION
# ============================================================================

class UserProgressRow(Base, TimestampMixin):
    """Progression counters for one user"""
    __tablename__ = "user_progress"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, server_default="")

    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    experience_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    items_saved: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    items_scanned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_active_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    total_co2_saved_kg: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    __table_args__ = (
        CheckConstraint("level >= 1", name="user_progress_level_check"),
        CheckConstraint("experience_points >= 0", name="user_progress_xp_check"),
        CheckConstraint("streak >= 0", name="user_progress_streak_check"),
    )

    def to_domain(self) -> UserProgress:
        return UserProgress(
            user_id=self.user_id,
            name=self.name or "",
            level=self.level,
            experience_points=self.experience_points,
            total_points=self.total_points,
            items_saved=self.items_saved,
            items_scanned=self.items_scanned,
            streak=self.streak,
            last_active_date=self.last_active_date,
            total_co2_saved_kg=self.total_co2_saved_kg,
        )

    def apply(self, progress: UserProgress) -> None:
        """Copy mutable counters from the domain object."""
        self.name = progress.name
        self.level = progress.level
        self.experience_points = progress.experience_points
        self.total_points = progress.total_points
        self.items_saved = progress.items_saved
        self.items_scanned = progress.items_scanned
        self.streak = progress.streak
        self.last_active_date = progress.last_active_date
        self.total_co2_saved_kg = progress.total_co2_saved_kg


class AchievementProgressRow(Base, TimestampMixin):
    """Progress of one user towards one achievement tier"""
    __tablename__ = "achievement_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("user_progress.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    achievement_type: Mapped[str] = mapped_column(String(64), nullable=False)
    tier: Mapped[str] = mapped_column(String(32), nullable=False)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_unlocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unlocked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "achievement_type", "tier", name="achievement_progress_unique"),
    )

    def to_domain(self) -> AchievementProgress:
        return AchievementProgress(
            user_id=self.user_id,
            achievement_type=self.achievement_type,
            tier=self.tier,
            progress=self.progress,
            is_unlocked=self.is_unlocked,
            unlocked_at=self.unlocked_at,
        )


# ============================================================================
# PREDICTIONS
# ============================================================================

class ExpirationPredictionRow(Base):
    """Stored expiration prediction, audited once the real date is known"""
    __tablename__ = "expiration_predictions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    storage_location: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    labeled_expiration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    predicted_expiration_date: Mapped[date] = mapped_column(Date, nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False)

    features: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    model_version: Mapped[str] = mapped_column(String(32), nullable=False)
    temperature_avg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    humidity_avg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    open_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    actual_expiration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    prediction_accuracy: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "confidence_score >= 0 AND confidence_score <= 1",
            name="expiration_predictions_confidence_check"
        ),
    )

    @classmethod
    def from_domain(cls, prediction: ExpirationPrediction) -> "ExpirationPredictionRow":
        return cls(
            item_id=prediction.item_id,
            category=prediction.category,
            storage_location=prediction.storage_location,
            purchase_date=prediction.purchase_date,
            labeled_expiration_date=prediction.labeled_expiration_date,
            predicted_expiration_date=prediction.predicted_expiration_date,
            confidence_score=prediction.confidence_score,
            features=dict(prediction.features),
            model_version=prediction.model_version,
            temperature_avg=prediction.temperature_avg,
            humidity_avg=prediction.humidity_avg,
            open_count=prediction.open_count,
            created_at=prediction.created_at,
            actual_expiration_date=prediction.actual_expiration_date,
            prediction_accuracy=prediction.prediction_accuracy,
        )

    def to_domain(self) -> ExpirationPrediction:
        return ExpirationPrediction(
            item_id=self.item_id,
            category=self.category,
            storage_location=self.storage_location,
            purchase_date=self.purchase_date,
            labeled_expiration_date=self.labeled_expiration_date,
            predicted_expiration_date=self.predicted_expiration_date,
            confidence_score=self.confidence_score,
            features=dict(self.features or {}),
            model_version=self.model_version,
            temperature_avg=self.temperature_avg,
            humidity_avg=self.humidity_avg,
            open_count=self.open_count,
            created_at=self.created_at,
            actual_expiration_date=self.actual_expiration_date,
            prediction_accuracy=self.prediction_accuracy,
        )
