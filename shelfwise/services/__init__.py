"""
Application services

Components:
- gamification_service: XP/levels, achievements, streaks, leaderboard
- achievement_catalog: Achievement definitions and validation
- progress_store: Progression state and achievement progress storage
- recipe_catalog: Unscored recipe queries, ratings and views
- sustainability_service: CO2-saved estimation
"""

from .achievement_catalog import (
    AchievementCatalog,
    AchievementDefinition,
    AchievementType,
    default_achievement_catalog,
    load_achievement_catalog,
)
from .progress_store import (
    UserProgress,
    AchievementProgress,
    UnlockedAchievement,
    ExperienceAward,
    AchievementProgressStore,
    InMemoryAchievementProgressStore,
)
from .gamification_service import GamificationService, xp_for_level, level_for_xp
from .recipe_catalog import RecipeCatalog
from .sustainability_service import SustainabilityService

__all__ = [
    # Achievements
    "AchievementCatalog",
    "AchievementDefinition",
    "AchievementType",
    "default_achievement_catalog",
    "load_achievement_catalog",

    # Progress
    "UserProgress",
    "AchievementProgress",
    "UnlockedAchievement",
    "ExperienceAward",
    "AchievementProgressStore",
    "InMemoryAchievementProgressStore",

    # Engines
    "GamificationService",
    "xp_for_level",
    "level_for_xp",
    "RecipeCatalog",
    "SustainabilityService",
]
