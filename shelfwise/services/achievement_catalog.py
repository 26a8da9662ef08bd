"""
Achievement catalog.

Static definitions of achievement families (ordered tiers with a progress
threshold and an XP reward). The catalog is validated when it is built so a
misconfigured family fails at startup instead of at award time.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Set, Tuple, Union

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import CatalogConfigurationError

logger = logging.getLogger(__name__)


class AchievementType:
    """Achievement family tags."""
    WASTE_WARRIOR = "WASTE_WARRIOR"
    ECO_CHAMPION = "ECO_CHAMPION"
    SCAN_MASTER = "SCAN_MASTER"
    STREAK = "STREAK"


# Families whose progress is driven by XP itself. Unlock rewards are XP, so a
# family of this kind would re-trigger its own evaluation.
REWARD_DERIVED_TYPES = frozenset({"LEVEL", "EXPERIENCE", "XP"})


@dataclass(frozen=True)
class AchievementDefinition:
    """One tier of an achievement family."""
    name: str
    description: str
    type: str
    tier: str
    points_required: int
    xp_reward: int
    badge_icon: str = ""
    is_active: bool = True


DEFAULT_ACHIEVEMENTS: List[AchievementDefinition] = [
    # Waste Warrior
    AchievementDefinition("Waste Warrior I", "Save 10 items from expiring",
                          AchievementType.WASTE_WARRIOR, "BRONZE", 10, 50, "medal-bronze"),
    AchievementDefinition("Waste Warrior II", "Save 50 items from expiring",
                          AchievementType.WASTE_WARRIOR, "SILVER", 50, 150, "medal-silver"),
    AchievementDefinition("Waste Warrior III", "Save 100 items from expiring",
                          AchievementType.WASTE_WARRIOR, "GOLD", 100, 300, "medal-gold"),
    AchievementDefinition("Waste Warrior IV", "Save 500 items from expiring",
                          AchievementType.WASTE_WARRIOR, "PLATINUM", 500, 1000, "gem"),
    # Eco Champion
    AchievementDefinition("Eco Champion I", "Save 10kg of CO2",
                          AchievementType.ECO_CHAMPION, "BRONZE", 10, 50, "seedling"),
    AchievementDefinition("Eco Champion II", "Save 50kg of CO2",
                          AchievementType.ECO_CHAMPION, "SILVER", 50, 150, "herb"),
    AchievementDefinition("Eco Champion III", "Save 100kg of CO2",
                          AchievementType.ECO_CHAMPION, "GOLD", 100, 300, "deciduous-tree"),
    AchievementDefinition("Eco Champion IV", "Save 500kg of CO2",
                          AchievementType.ECO_CHAMPION, "PLATINUM", 500, 1000, "evergreen-tree"),
    # Scan Master
    AchievementDefinition("Scan Master I", "Scan 10 items",
                          AchievementType.SCAN_MASTER, "BRONZE", 10, 30, "camera"),
    AchievementDefinition("Scan Master II", "Scan 50 items",
                          AchievementType.SCAN_MASTER, "SILVER", 50, 100, "camera-flash"),
    AchievementDefinition("Scan Master III", "Scan 200 items",
                          AchievementType.SCAN_MASTER, "GOLD", 200, 250, "video-camera"),
    # Streaks
    AchievementDefinition("Consistent I", "7-day streak",
                          AchievementType.STREAK, "BRONZE", 7, 100, "fire"),
    AchievementDefinition("Consistent II", "30-day streak",
                          AchievementType.STREAK, "SILVER", 30, 300, "fire"),
    AchievementDefinition("Consistent III", "100-day streak",
                          AchievementType.STREAK, "GOLD", 100, 1000, "fire"),
]


class AchievementCatalog:
    """Validated, read-only set of achievement definitions."""

    def __init__(self, definitions: Iterable[AchievementDefinition]):
        self._definitions: Tuple[AchievementDefinition, ...] = tuple(definitions)
        self._validate()

        families: Dict[str, List[AchievementDefinition]] = {}
        for definition in self._definitions:
            if definition.is_active:
                families.setdefault(definition.type, []).append(definition)
        self._families = {
            family_type: tuple(sorted(members, key=lambda d: d.points_required))
            for family_type, members in families.items()
        }

        logger.info(
            f"Achievement catalog ready: {len(self._definitions)} definitions "
            f"in {len(self._families)} active families"
        )

    def _validate(self) -> None:
        seen_tiers: Set[Tuple[str, str]] = set()
        seen_thresholds: Set[Tuple[str, int]] = set()

        for d in self._definitions:
            if not d.type or not d.tier or not d.name:
                raise CatalogConfigurationError(f"Achievement needs name, type and tier: {d}")
            if d.type.upper() in REWARD_DERIVED_TYPES:
                raise CatalogConfigurationError(
                    f"Achievement '{d.name}' tracks {d.type}, which its own XP reward "
                    f"would re-trigger"
                )
            if d.points_required <= 0:
                raise CatalogConfigurationError(
                    f"Achievement '{d.name}' must require a positive amount, got {d.points_required}"
                )
            if d.xp_reward < 0:
                raise CatalogConfigurationError(
                    f"Achievement '{d.name}' has a negative XP reward ({d.xp_reward})"
                )
            if (d.type, d.tier) in seen_tiers:
                raise CatalogConfigurationError(f"Duplicate tier {d.tier} in family {d.type}")
            if (d.type, d.points_required) in seen_thresholds:
                raise CatalogConfigurationError(
                    f"Duplicate threshold {d.points_required} in family {d.type}"
                )
            seen_tiers.add((d.type, d.tier))
            seen_thresholds.add((d.type, d.points_required))

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions)

    def types(self) -> List[str]:
        return list(self._families)

    def has_family(self, achievement_type: str) -> bool:
        return achievement_type in self._families

    def family(self, achievement_type: str) -> Tuple[AchievementDefinition, ...]:
        """Active definitions of a family, ascending by points required."""
        return self._families.get(achievement_type, ())

    def find(self, achievement_type: str, tier: str) -> AchievementDefinition:
        for definition in self._definitions:
            if definition.type == achievement_type and definition.tier == tier:
                return definition
        raise KeyError(f"{achievement_type}/{tier}")


def default_achievement_catalog() -> AchievementCatalog:
    return AchievementCatalog(DEFAULT_ACHIEVEMENTS)


class AchievementEntry(BaseModel):
    """Achievement as written in a catalog file."""
    name: str = Field(..., min_length=1)
    description: str = ""
    type: str = Field(..., min_length=1)
    tier: str = Field(..., min_length=1)
    points_required: int
    xp_reward: int
    badge_icon: str = ""
    is_active: bool = True


class AchievementCatalogFile(BaseModel):
    achievements: List[AchievementEntry]


def load_achievement_catalog(path: Union[str, Path]) -> AchievementCatalog:
    """
    Load and validate an achievement catalog from JSON.

    Raises:
        CatalogConfigurationError: If the file is unreadable or invalid
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        parsed = AchievementCatalogFile.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise CatalogConfigurationError(f"Invalid achievement catalog {path}: {e}") from e

    return AchievementCatalog(
        AchievementDefinition(**entry.model_dump()) for entry in parsed.achievements
    )
