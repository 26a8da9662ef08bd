"""
Shelf-life knowledge base.

Static lookup tables mapping food names and categories to a baseline shelf
life plus perishability score, and storage locations to a shelf-life
multiplier. Built once (embedded defaults or a JSON file) and passed into the
engines explicitly so tests can swap in alternate tables.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..exceptions import CatalogConfigurationError
from .utils.text_normalizer import TextNormalizer, substring_match


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoodCategoryProfile:
    """Baseline shelf life and perishability for a food category."""
    category: str
    baseline_shelf_life_days: int
    perishability_score: float  # 0.0 (non-perishable) to 1.0 (highly perishable)


# ============================================================================
# Embedded Tables
# ============================================================================

DEFAULT_CATEGORY = "Other"

CATEGORY_PROFILES: Dict[str, Tuple[int, float]] = {
    "Dairy": (7, 0.8),
    "Meat": (3, 0.9),
    "Fish": (2, 0.95),
    "Fruit": (7, 0.75),
    "Vegetable": (7, 0.75),
    "Grain/Bread": (7, 0.6),
    "Canned/Packaged": (365, 0.6),
    DEFAULT_CATEGORY: (7, 0.7),
}

CATEGORY_ALIASES: Dict[str, str] = {
    "seafood": "Fish",
    "poultry": "Meat",
    "produce": "Vegetable",
    "bakery": "Grain/Bread",
    "grains": "Grain/Bread",
    "canned": "Canned/Packaged",
    "packaged": "Canned/Packaged",
}

# item keyword -> (category, baseline days, perishability)
FOOD_ITEMS: Dict[str, Tuple[str, int, float]] = {
    # Dairy
    "milk": ("Dairy", 7, 0.9),
    "cheese": ("Dairy", 21, 0.7),
    "yogurt": ("Dairy", 14, 0.8),
    "butter": ("Dairy", 90, 0.6),
    "cream": ("Dairy", 10, 0.85),
    # Meat & Poultry
    "chicken": ("Meat", 2, 0.95),
    "beef": ("Meat", 3, 0.9),
    "pork": ("Meat", 3, 0.9),
    "turkey": ("Meat", 2, 0.95),
    # Fish
    "fish": ("Fish", 2, 0.95),
    "salmon": ("Fish", 2, 0.95),
    "shrimp": ("Fish", 2, 0.95),
    # Fruits
    "apple": ("Fruit", 30, 0.6),
    "banana": ("Fruit", 7, 0.8),
    "orange": ("Fruit", 14, 0.7),
    "strawberry": ("Fruit", 5, 0.9),
    "grape": ("Fruit", 7, 0.8),
    # Vegetables
    "lettuce": ("Vegetable", 7, 0.85),
    "tomato": ("Vegetable", 7, 0.8),
    "carrot": ("Vegetable", 21, 0.6),
    "broccoli": ("Vegetable", 7, 0.8),
    "potato": ("Vegetable", 60, 0.6),
    "spinach": ("Vegetable", 5, 0.9),
    # Bread & Grains
    "bread": ("Grain/Bread", 7, 0.8),
    "rice": ("Grain/Bread", 365, 0.6),
    "pasta": ("Grain/Bread", 730, 0.6),
}

# Checked in order; first substring hit wins
STORAGE_MULTIPLIERS: Dict[str, float] = {
    "freezer": 10.0,
    "fridge": 1.5,
    "refrigerator": 1.5,
    "pantry": 1.0,
    "cupboard": 1.0,
    "counter": 0.8,
    "other": 0.8,
}
UNRECOGNIZED_STORAGE = "other"
NEUTRAL_STORAGE_MULTIPLIER = 1.0
REFRIGERATED_STORAGE = ("fridge", "refrigerator")


# ============================================================================
# Knowledge Base
# ============================================================================

def _singular(name: str) -> str:
    """Cheap plural folding: berries -> berry, tomatoes -> tomato, apples -> apple."""
    if name.endswith("ies") and len(name) > 4:
        return name[:-3] + "y"
    if name.endswith("oes") and len(name) > 4:
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss") and len(name) > 3:
        return name[:-1]
    return name


@dataclass(frozen=True)
class KnowledgeBase:
    """Immutable shelf-life lookup tables."""

    items: Mapping[str, FoodCategoryProfile]
    categories: Mapping[str, FoodCategoryProfile]
    aliases: Mapping[str, str]
    storage_multipliers: Mapping[str, float]
    default_profile: FoodCategoryProfile
    normalizer: TextNormalizer = field(default_factory=TextNormalizer, compare=False)

    @classmethod
    def build(
        cls,
        items: Mapping[str, FoodCategoryProfile],
        categories: Mapping[str, FoodCategoryProfile],
        storage_multipliers: Mapping[str, float],
        aliases: Optional[Mapping[str, str]] = None,
        default_category: str = DEFAULT_CATEGORY,
    ) -> "KnowledgeBase":
        """Validate and freeze the given tables."""
        if default_category not in categories:
            raise CatalogConfigurationError(
                f"Default category '{default_category}' missing from category table"
            )
        for name, multiplier in storage_multipliers.items():
            if multiplier <= 0:
                raise CatalogConfigurationError(
                    f"Storage multiplier for '{name}' must be positive, got {multiplier}"
                )
        if UNRECOGNIZED_STORAGE not in storage_multipliers:
            raise CatalogConfigurationError(
                f"Storage table needs an '{UNRECOGNIZED_STORAGE}' entry for unknown locations"
            )
        profiles = list(items.values()) + list(categories.values())
        for profile in profiles:
            if not 0.0 <= profile.perishability_score <= 1.0:
                raise CatalogConfigurationError(
                    f"Perishability for '{profile.category}' outside [0, 1]: "
                    f"{profile.perishability_score}"
                )
            if profile.baseline_shelf_life_days <= 0:
                raise CatalogConfigurationError(
                    f"Baseline shelf life for '{profile.category}' must be positive"
                )
        aliases = aliases or {}
        for alias, target in aliases.items():
            if target not in categories:
                raise CatalogConfigurationError(
                    f"Alias '{alias}' points at unknown category '{target}'"
                )

        return cls(
            items=MappingProxyType({k.lower(): v for k, v in items.items()}),
            categories=MappingProxyType(dict(categories)),
            aliases=MappingProxyType({k.lower(): v for k, v in aliases.items()}),
            storage_multipliers=MappingProxyType(
                {k.lower(): float(v) for k, v in storage_multipliers.items()}
            ),
            default_profile=categories[default_category],
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _key(self, text: str) -> str:
        return self.normalizer.normalize(text).normalized

    def _category_keys(self) -> Iterable[Tuple[str, FoodCategoryProfile]]:
        for name, profile in self.categories.items():
            if name == self.default_profile.category:
                continue
            yield self._key(name), profile
        for alias, target in self.aliases.items():
            yield self._key(alias), self.categories[target]

    def resolve(self, name: Optional[str]) -> Tuple[FoodCategoryProfile, bool]:
        """
        Resolve a food name or category to its profile.

        Exact item keyword, then exact category/alias, then substring match in
        either direction over keywords and categories; default profile otherwise.

        Returns:
            (profile, recognized) where recognized is False for the fallback
        """
        key = self._key(name) if name else ""
        if not key:
            return self.default_profile, False

        candidates: List[str] = [key]
        singular = _singular(key)
        if singular != key:
            candidates.append(singular)

        for candidate in candidates:
            if candidate in self.items:
                return self.items[candidate], True
        category_keys = list(self._category_keys())
        for candidate in candidates:
            for category_key, profile in category_keys:
                if candidate == category_key:
                    return profile, True
        for candidate in candidates:
            for keyword, profile in self.items.items():
                if substring_match(candidate, keyword):
                    return profile, True
        for candidate in candidates:
            for category_key, profile in category_keys:
                if substring_match(candidate, category_key):
                    return profile, True

        logger.debug(f"No knowledge-base match for '{name}', using default profile")
        return self.default_profile, False

    def profile_for(self, name: Optional[str]) -> FoodCategoryProfile:
        """Profile for a name, falling back to the default profile."""
        return self.resolve(name)[0]

    def category_for(self, name: Optional[str]) -> str:
        return self.resolve(name)[0].category

    def storage_multiplier(self, location: Optional[str]) -> float:
        """
        Shelf-life multiplier for a storage location.

        No location is neutral (1.0); an unrecognized one counts as "other".
        """
        if not location or not location.strip():
            return NEUTRAL_STORAGE_MULTIPLIER
        normalized = location.lower()
        for label, multiplier in self.storage_multipliers.items():
            if label in normalized:
                return multiplier
        return self.storage_multipliers[UNRECOGNIZED_STORAGE]

    def is_refrigerated(self, location: Optional[str]) -> bool:
        if not location:
            return False
        normalized = location.lower()
        return any(label in normalized for label in REFRIGERATED_STORAGE)

    def is_known_category(self, category: str) -> bool:
        return category in self.categories and category != self.default_profile.category


def default_knowledge_base() -> KnowledgeBase:
    """Knowledge base built from the embedded tables."""
    categories = {
        name: FoodCategoryProfile(name, days, perishability)
        for name, (days, perishability) in CATEGORY_PROFILES.items()
    }
    items = {
        keyword: FoodCategoryProfile(category, days, perishability)
        for keyword, (category, days, perishability) in FOOD_ITEMS.items()
    }
    return KnowledgeBase.build(
        items=items,
        categories=categories,
        storage_multipliers=STORAGE_MULTIPLIERS,
        aliases=CATEGORY_ALIASES,
    )


# ============================================================================
# File Loading
# ============================================================================

class ProfileEntry(BaseModel):
    """Category profile as written in a knowledge-base file."""
    baseline_shelf_life_days: int = Field(..., gt=0)
    perishability_score: float = Field(..., ge=0.0, le=1.0)


class ItemEntry(ProfileEntry):
    """Item keyword entry; belongs to a declared category."""
    category: str


class KnowledgeBaseFile(BaseModel):
    """Schema of a JSON knowledge-base override."""
    categories: Dict[str, ProfileEntry]
    items: Dict[str, ItemEntry] = Field(default_factory=dict)
    aliases: Dict[str, str] = Field(default_factory=dict)
    storage_multipliers: Dict[str, float]
    default_category: str = DEFAULT_CATEGORY

    @model_validator(mode="after")
    def check_item_categories(self) -> "KnowledgeBaseFile":
        unknown = sorted(
            {entry.category for entry in self.items.values()} - set(self.categories)
        )
        if unknown:
            raise ValueError(f"Items reference unknown categories: {unknown}")
        return self


def load_knowledge_base(path: Union[str, Path]) -> KnowledgeBase:
    """
    Load a knowledge base from a JSON file.

    Raises:
        CatalogConfigurationError: If the file is missing or fails validation
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        parsed = KnowledgeBaseFile.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise CatalogConfigurationError(f"Invalid knowledge base file {path}: {e}") from e

    categories = {
        name: FoodCategoryProfile(name, entry.baseline_shelf_life_days, entry.perishability_score)
        for name, entry in parsed.categories.items()
    }
    items = {
        keyword: FoodCategoryProfile(
            entry.category, entry.baseline_shelf_life_days, entry.perishability_score
        )
        for keyword, entry in parsed.items.items()
    }
    kb = KnowledgeBase.build(
        items=items,
        categories=categories,
        storage_multipliers=parsed.storage_multipliers,
        aliases=parsed.aliases,
        default_category=parsed.default_category,
    )
    logger.info(
        f"Loaded knowledge base from {path} "
        f"({len(categories)} categories, {len(items)} items)"
    )
    return kb
