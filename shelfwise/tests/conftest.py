"""Shared fixtures for Shelfwise tests."""

from datetime import date

import pytest

from shelfwise.config import Settings
from shelfwise.ml.knowledge_base import default_knowledge_base
from shelfwise.services.achievement_catalog import default_achievement_catalog
from shelfwise.services.gamification_service import GamificationService
from shelfwise.services.progress_store import InMemoryAchievementProgressStore, UserProgress


@pytest.fixture
def kb():
    return default_knowledge_base()


@pytest.fixture
def today():
    # Mid-April: outside the summer and winter seasonal adjustments
    return date(2024, 4, 10)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        ENVIRONMENT="testing",
        DATABASE_URL="sqlite:///:memory:",
        LOG_FILE=None,
    )


@pytest.fixture
def catalog():
    return default_achievement_catalog()


@pytest.fixture
def progress_store():
    return InMemoryAchievementProgressStore()


@pytest.fixture
def gamification(catalog, progress_store):
    return GamificationService(catalog=catalog, store=progress_store)


@pytest.fixture
def user():
    return UserProgress(user_id="user-1", name="Test User")
