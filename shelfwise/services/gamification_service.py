"""
Gamification Engine

Experience/level curve, achievement unlocks and daily streaks.

All mutations of one user's progress run under that user's lock, so
concurrent awards for the same user are applied one after the other and no
increment is lost. Different users never contend.

Achievement evaluation is two-phase: every tier of a family is evaluated
first, then the XP rewards of the newly unlocked tiers are applied. Applying
a reward only touches XP and level, never achievement evaluation, so a
single call unlocks each tier at most once and always terminates.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import InvalidInputError
from .achievement_catalog import (
    AchievementCatalog,
    AchievementType,
    default_achievement_catalog,
)
from .progress_store import (
    AchievementProgressStore,
    ExperienceAward,
    InMemoryAchievementProgressStore,
    UnlockedAchievement,
    UserLockRegistry,
    UserProgress,
)

logger = logging.getLogger(__name__)


# ============================================================================
# XP CURVE
# ============================================================================

XP_CURVE_BASE = 100
XP_CURVE_GROWTH = 1.5

# Points and XP granted per user action
ITEM_SAVED_POINTS = 10
ITEM_SAVED_XP = 10
ITEM_SCANNED_POINTS = 5
ITEM_SCANNED_XP = 5

DEFAULT_LEADERBOARD_LIMIT = 10


def xp_for_level(level: int) -> int:
    """Cumulative XP needed to reach a level (level 1 starts at 0)."""
    if level <= 1:
        return 0
    return int(XP_CURVE_BASE * XP_CURVE_GROWTH ** (level - 1))


def level_for_xp(xp: int) -> int:
    """Largest level L with xp >= xp_for_level(L)."""
    level = 1
    while xp >= xp_for_level(level + 1):
        level += 1
    return level


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GamificationService:
    """Per-user progression state machine."""

    def __init__(
        self,
        catalog: Optional[AchievementCatalog] = None,
        store: Optional[AchievementProgressStore] = None,
        locks: Optional[UserLockRegistry] = None,
        leaderboard_limit: int = DEFAULT_LEADERBOARD_LIMIT,
    ):
        self.catalog = catalog if catalog is not None else default_achievement_catalog()
        self.store = store if store is not None else InMemoryAchievementProgressStore()
        self.locks = locks or UserLockRegistry()
        self.leaderboard_limit = leaderboard_limit

        logger.info(
            f"Initialized GamificationService "
            f"({len(self.catalog)} achievements, store={type(self.store).__name__})"
        )

    # ------------------------------------------------------------------
    # Experience
    # ------------------------------------------------------------------

    def _apply_experience(self, progress: UserProgress, xp: int, reason: str) -> ExperienceAward:
        """Add XP and recompute level. Never evaluates achievements."""
        old_level = progress.level
        progress.experience_points += xp
        progress.level = level_for_xp(progress.experience_points)

        award = ExperienceAward(
            old_level=old_level,
            new_level=progress.level,
            leveled_up=progress.level > old_level,
            xp_gained=xp,
            total_xp=progress.experience_points,
            reason=reason,
        )
        if award.leveled_up:
            logger.info(
                f"User {progress.user_id} leveled up {old_level} -> {progress.level} ({reason})"
            )
        return award

    def award_experience(
        self,
        progress: UserProgress,
        xp: int,
        reason: str = "",
        today: Optional[date] = None,
        record_activity: bool = True,
    ) -> ExperienceAward:
        """
        Award XP to a user.

        Args:
            progress: User progress (mutated in place)
            xp: Non-negative XP delta
            reason: Free-text reason for logs
            today: Activity date for the streak (default: date.today())
            record_activity: Also count today towards the daily streak

        Returns:
            ExperienceAward describing the level change

        Raises:
            InvalidInputError: If xp is negative
        """
        if xp is None or xp < 0:
            raise InvalidInputError(f"XP delta must be >= 0, got {xp}")

        with self.locks.lock_for(progress.user_id):
            award = self._apply_experience(progress, xp, reason)
            if record_activity:
                self._update_streak(progress, today or date.today())
                # Streak rewards may have added XP after the award was built
                award = ExperienceAward(
                    old_level=award.old_level,
                    new_level=progress.level,
                    leveled_up=progress.level > award.old_level,
                    xp_gained=xp,
                    total_xp=progress.experience_points,
                    reason=reason,
                )

        logger.debug(f"Awarded {xp} XP to {progress.user_id} ({reason}), total={award.total_xp}")
        return award

    # ------------------------------------------------------------------
    # Achievements
    # ------------------------------------------------------------------

    def _evaluate_family(
        self,
        progress: UserProgress,
        achievement_type: str,
        value: int,
        catalog: AchievementCatalog,
        now: datetime,
    ) -> List[UnlockedAchievement]:
        unlocked = []
        for definition in catalog.family(achievement_type):
            record = self.store.load_or_create(progress.user_id, definition)
            record.progress = value
            if not record.is_unlocked and value >= definition.points_required:
                record.is_unlocked = True
                record.unlocked_at = now
                unlocked.append(UnlockedAchievement.from_definition(definition, now))
            self.store.save(record)
        return unlocked

    def _apply_rewards(self, progress: UserProgress, unlocked: List[UnlockedAchievement]) -> None:
        for achievement in unlocked:
            logger.info(
                f"User {progress.user_id} unlocked '{achievement.name}' "
                f"(+{achievement.xp_reward} XP)"
            )
            if achievement.xp_reward:
                self._apply_experience(
                    progress, achievement.xp_reward, f"Achievement: {achievement.name}"
                )

    def _track(
        self,
        progress: UserProgress,
        achievement_type: str,
        value: int,
        catalog: AchievementCatalog,
    ) -> List[UnlockedAchievement]:
        unlocked = self._evaluate_family(progress, achievement_type, value, catalog, _utcnow())
        self._apply_rewards(progress, unlocked)
        return unlocked

    def track_achievement(
        self,
        progress: UserProgress,
        achievement_type: str,
        value: int,
        catalog: Optional[AchievementCatalog] = None,
    ) -> List[UnlockedAchievement]:
        """
        Set a family's progress value and unlock every tier it reaches.

        Repeating a call with the same value unlocks nothing and awards no XP.

        Raises:
            InvalidInputError: On an unknown family or a negative value
        """
        catalog = catalog if catalog is not None else self.catalog
        if not catalog.has_family(achievement_type):
            raise InvalidInputError(f"Unknown achievement family: {achievement_type}")
        if value is None or value < 0:
            raise InvalidInputError(f"Achievement progress must be >= 0, got {value}")

        with self.locks.lock_for(progress.user_id):
            return self._track(progress, achievement_type, int(value), catalog)

    def achievements_for(self, user_id: str) -> List[Dict[str, Any]]:
        """Every catalog tier with this user's progress, in catalog order."""
        records = {record.key: record for record in self.store.for_user(user_id)}
        result = []
        for definition in self.catalog:
            if not definition.is_active:
                continue
            record = records.get((user_id, definition.type, definition.tier))
            result.append({
                "name": definition.name,
                "description": definition.description,
                "type": definition.type,
                "tier": definition.tier,
                "badge_icon": definition.badge_icon,
                "points_required": definition.points_required,
                "xp_reward": definition.xp_reward,
                "progress": record.progress if record else 0,
                "is_unlocked": record.is_unlocked if record else False,
                "unlocked_at": record.unlocked_at if record else None,
            })
        return result

    # ------------------------------------------------------------------
    # Streaks
    # ------------------------------------------------------------------

    def _update_streak(self, progress: UserProgress, today: date) -> None:
        last = progress.last_active_date

        if last == today:
            return

        if last is not None and last == today - timedelta(days=1):
            progress.streak += 1
            progress.last_active_date = today
            if self.catalog.has_family(AchievementType.STREAK):
                self._track(progress, AchievementType.STREAK, progress.streak, self.catalog)
            return

        # First activity or a gap of two days or more
        progress.streak = 1
        progress.last_active_date = today

    def update_streak(self, progress: UserProgress, today: Optional[date] = None) -> UserProgress:
        """Record daily activity. Same-day calls are no-ops."""
        with self.locks.lock_for(progress.user_id):
            self._update_streak(progress, today or date.today())
        return progress

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def record_item_saved(
        self,
        progress: UserProgress,
        co2_kg: float = 0.0,
        today: Optional[date] = None,
    ) -> List[UnlockedAchievement]:
        """An item was used before it expired."""
        with self.locks.lock_for(progress.user_id):
            progress.items_saved += 1
            progress.total_points += ITEM_SAVED_POINTS
            self.award_experience(progress, ITEM_SAVED_XP, "Item saved", today=today)
            unlocked = []
            if self.catalog.has_family(AchievementType.WASTE_WARRIOR):
                unlocked += self._track(
                    progress, AchievementType.WASTE_WARRIOR, progress.items_saved, self.catalog
                )
            if co2_kg:
                unlocked += self.record_co2_saved(progress, co2_kg)
        return unlocked

    def record_item_scanned(
        self,
        progress: UserProgress,
        today: Optional[date] = None,
    ) -> List[UnlockedAchievement]:
        """An item was added by scanning a receipt or barcode."""
        with self.locks.lock_for(progress.user_id):
            progress.items_scanned += 1
            progress.total_points += ITEM_SCANNED_POINTS
            self.award_experience(progress, ITEM_SCANNED_XP, "Item scanned", today=today)
            if not self.catalog.has_family(AchievementType.SCAN_MASTER):
                return []
            return self._track(
                progress, AchievementType.SCAN_MASTER, progress.items_scanned, self.catalog
            )

    def record_co2_saved(self, progress: UserProgress, kg: float) -> List[UnlockedAchievement]:
        """Add avoided emissions; ECO_CHAMPION tracks whole kilograms."""
        if kg is None or kg < 0:
            raise InvalidInputError(f"CO2 saved must be >= 0, got {kg}")

        with self.locks.lock_for(progress.user_id):
            progress.total_co2_saved_kg += kg
            if not self.catalog.has_family(AchievementType.ECO_CHAMPION):
                return []
            return self._track(
                progress,
                AchievementType.ECO_CHAMPION,
                int(progress.total_co2_saved_kg),
                self.catalog,
            )

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def user_stats(self, progress: UserProgress) -> Dict[str, Any]:
        """
        Progress summary for profile screens.

        `xp_progress` is the XP earned inside the current level; `xp_needed` is
        the width of the current level band (next threshold minus floor).
        """
        with self.locks.lock_for(progress.user_id):
            current_floor = xp_for_level(progress.level)
            next_level_xp = xp_for_level(progress.level + 1)
            achievements = self.achievements_for(progress.user_id)

            return {
                "user_id": progress.user_id,
                "name": progress.name,
                "level": progress.level,
                "experience_points": progress.experience_points,
                "xp_progress": progress.experience_points - current_floor,
                "xp_needed": next_level_xp - current_floor,
                "next_level_xp": next_level_xp,
                "total_points": progress.total_points,
                "items_saved": progress.items_saved,
                "items_scanned": progress.items_scanned,
                "streak": progress.streak,
                "last_active_date": progress.last_active_date,
                "total_co2_saved_kg": round(progress.total_co2_saved_kg, 2),
                "achievements_unlocked": sum(1 for a in achievements if a["is_unlocked"]),
                "achievements": achievements,
            }

    def leaderboard(
        self,
        users: Iterable[UserProgress],
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Users by experience points, descending.

        The sort is stable: users with equal XP keep their input order.
        """
        limit = self.leaderboard_limit if limit is None else limit
        if limit < 0:
            raise InvalidInputError(f"Leaderboard limit must be >= 0, got {limit}")

        ranked = sorted(users or [], key=lambda u: u.experience_points, reverse=True)[:limit]
        return [
            {
                "rank": position,
                "user_id": user.user_id,
                "name": user.name,
                "level": user.level,
                "experience_points": user.experience_points,
                "items_saved": user.items_saved,
                "total_co2_saved_kg": round(user.total_co2_saved_kg, 2),
            }
            for position, user in enumerate(ranked, start=1)
        ]
