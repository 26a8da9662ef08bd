"""
User progression state and achievement progress storage.

`UserProgress` is owned by the user and mutated only by GamificationService.
Achievement progress is kept per (user, family, tier) behind the
`AchievementProgressStore` protocol so the engine can run against memory or
a database.
"""

import threading
import weakref
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .achievement_catalog import AchievementDefinition


# ============================================================================
# DOMAIN TYPES
# ============================================================================

@dataclass
class UserProgress:
    """Per-user progression counters."""
    user_id: str
    name: str = ""
    level: int = 1
    experience_points: int = 0
    total_points: int = 0
    items_saved: int = 0
    items_scanned: int = 0
    streak: int = 0
    last_active_date: Optional[date] = None
    total_co2_saved_kg: float = 0.0


@dataclass
class AchievementProgress:
    """Progress of one user towards one achievement tier."""
    user_id: str
    achievement_type: str
    tier: str
    progress: int = 0
    is_unlocked: bool = False
    unlocked_at: Optional[datetime] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.user_id, self.achievement_type, self.tier)


@dataclass
class UnlockedAchievement:
    name: str
    description: str
    type: str
    tier: str
    badge_icon: str
    xp_reward: int
    unlocked_at: datetime

    @classmethod
    def from_definition(cls, definition: AchievementDefinition, unlocked_at: datetime):
        return cls(
            name=definition.name,
            description=definition.description,
            type=definition.type,
            tier=definition.tier,
            badge_icon=definition.badge_icon,
            xp_reward=definition.xp_reward,
            unlocked_at=unlocked_at,
        )


@dataclass
class ExperienceAward:
    old_level: int
    new_level: int
    leveled_up: bool
    xp_gained: int
    total_xp: int
    reason: str = ""


# ============================================================================
# STORAGE
# ============================================================================

class AchievementProgressStore(Protocol):
    """Load-or-create / save access to achievement progress records."""

    def load_or_create(
        self, user_id: str, definition: AchievementDefinition
    ) -> AchievementProgress:
        ...

    def save(self, record: AchievementProgress) -> None:
        ...

    def for_user(self, user_id: str) -> List[AchievementProgress]:
        ...


class InMemoryAchievementProgressStore:
    """Dict-backed store; records are copied in and out."""

    def __init__(self):
        self._records: Dict[Tuple[str, str, str], AchievementProgress] = {}
        self._lock = threading.Lock()

    def load_or_create(
        self, user_id: str, definition: AchievementDefinition
    ) -> AchievementProgress:
        key = (user_id, definition.type, definition.tier)
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return AchievementProgress(user_id, definition.type, definition.tier)
            return AchievementProgress(**vars(record))

    def save(self, record: AchievementProgress) -> None:
        with self._lock:
            self._records[record.key] = AchievementProgress(**vars(record))

    def for_user(self, user_id: str) -> List[AchievementProgress]:
        with self._lock:
            return [
                AchievementProgress(**vars(record))
                for key, record in self._records.items()
                if key[0] == user_id
            ]


# ============================================================================
# PER-USER LOCKS
# ============================================================================

class UserLockRegistry:
    """
    One re-entrant lock per user id, created on first use.

    Locks are held weakly: an entry disappears once no caller references its
    lock, so the registry only tracks users with work in flight.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, Any]" = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def lock_for(self, user_id: str):
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
            return lock

    def __len__(self) -> int:
        return len(self._locks)
