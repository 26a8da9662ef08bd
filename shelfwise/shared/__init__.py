"""
Shared persistence

SQLAlchemy models, engine/session helpers and SQL-backed stores.
"""

from .models import Base, UserProgressRow, AchievementProgressRow, ExpirationPredictionRow
from .database import (
    create_database_engine,
    session_factory,
    session_scope,
    init_database,
    drop_database,
)
from .repositories import (
    SqlUserProgressRepository,
    SqlAchievementProgressStore,
    SqlPredictionRepository,
)

__all__ = [
    "Base",
    "UserProgressRow",
    "AchievementProgressRow",
    "ExpirationPredictionRow",
    "create_database_engine",
    "session_factory",
    "session_scope",
    "init_database",
    "drop_database",
    "SqlUserProgressRepository",
    "SqlAchievementProgressStore",
    "SqlPredictionRepository",
]
