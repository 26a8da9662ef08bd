"""
Unit Tests for the Shelf-Life Knowledge Base

Tests:
- Name/category resolution order
- Storage multipliers
- Immutability and validation
- JSON loading
"""

import json

import pytest

from shelfwise.exceptions import CatalogConfigurationError
from shelfwise.ml.knowledge_base import (
    FoodCategoryProfile,
    KnowledgeBase,
    STORAGE_MULTIPLIERS,
    load_knowledge_base,
)
from shelfwise.ml.utils.text_normalizer import TextNormalizer, normalize_name, substring_match


# ============================================================================
# Resolution Tests
# ============================================================================

class TestResolve:
    """Test food name and category resolution."""

    def test_exact_item_keyword(self, kb):
        profile, recognized = kb.resolve("milk")
        assert recognized
        assert profile.category == "Dairy"
        assert profile.baseline_shelf_life_days == 7
        assert profile.perishability_score == 0.9

    def test_exact_category(self, kb):
        profile, recognized = kb.resolve("Dairy")
        assert recognized
        assert profile == FoodCategoryProfile("Dairy", 7, 0.8)

    def test_category_with_slash(self, kb):
        profile, recognized = kb.resolve("Grain/Bread")
        assert recognized
        assert profile.category == "Grain/Bread"

    def test_alias(self, kb):
        assert kb.category_for("Seafood") == "Fish"
        assert kb.category_for("poultry") == "Meat"

    def test_substring_over_keywords(self, kb):
        profile, recognized = kb.resolve("Whole Milk 1 gallon")
        assert recognized
        assert profile.category == "Dairy"
        assert profile.perishability_score == 0.9

    def test_plural_folding(self, kb):
        assert kb.category_for("Tomatoes") == "Vegetable"
        assert kb.category_for("Strawberries") == "Fruit"
        assert kb.category_for("Apples") == "Fruit"

    def test_case_and_diacritics_insensitive(self, kb):
        assert kb.category_for("  CHICKEN  breast ") == "Meat"
        assert kb.category_for("Crème brûlée yogurt") == "Dairy"

    def test_unknown_falls_back_to_default(self, kb):
        profile, recognized = kb.resolve("Mystery Kombucha")
        assert not recognized
        assert profile == FoodCategoryProfile("Other", 7, 0.7)

    def test_empty_and_none(self, kb):
        assert kb.resolve(None) == (kb.default_profile, False)
        assert kb.resolve("   ") == (kb.default_profile, False)

    def test_other_is_not_a_recognized_match(self, kb):
        _, recognized = kb.resolve("Other")
        assert not recognized

    def test_known_category(self, kb):
        assert kb.is_known_category("Meat")
        assert not kb.is_known_category("Other")
        assert not kb.is_known_category("Snacks")

    def test_recognized_profiles_are_perishable_enough(self, kb):
        # Expired items must score >= 0.8 waste likelihood
        for profile in list(kb.items.values()) + list(kb.categories.values()):
            assert profile.perishability_score >= 0.6


# ============================================================================
# Storage Tests
# ============================================================================

class TestStorage:
    """Test storage location multipliers."""

    @pytest.mark.parametrize("location,expected", [
        ("Freezer", 10.0),
        ("chest freezer", 10.0),
        ("Fridge", 1.5),
        ("Refrigerator", 1.5),
        ("Pantry", 1.0),
        ("kitchen cupboard", 1.0),
        ("Counter", 0.8),
        ("Other", 0.8),
        ("garage shelf", 0.8),
    ])
    def test_multiplier(self, kb, location, expected):
        assert kb.storage_multiplier(location) == expected

    def test_missing_location_is_neutral(self, kb):
        assert kb.storage_multiplier(None) == 1.0
        assert kb.storage_multiplier("") == 1.0

    def test_is_refrigerated(self, kb):
        assert kb.is_refrigerated("Fridge")
        assert kb.is_refrigerated("main refrigerator")
        assert not kb.is_refrigerated("Freezer")
        assert not kb.is_refrigerated(None)


# ============================================================================
# Construction Tests
# ============================================================================

class TestConstruction:
    """Test immutability, validation and loading."""

    def _categories(self):
        return {
            "Dairy": FoodCategoryProfile("Dairy", 7, 0.8),
            "Other": FoodCategoryProfile("Other", 7, 0.7),
        }

    def test_tables_are_read_only(self, kb):
        with pytest.raises(TypeError):
            kb.items["milk"] = FoodCategoryProfile("Dairy", 1, 0.1)
        with pytest.raises(TypeError):
            kb.storage_multipliers["freezer"] = 1.0

    def test_alternate_tables(self):
        kb = KnowledgeBase.build(
            items={"oat milk": FoodCategoryProfile("Dairy", 10, 0.7)},
            categories=self._categories(),
            storage_multipliers={"cellar": 2.0, "other": 0.5},
        )
        assert kb.resolve("Oat Milk")[0].baseline_shelf_life_days == 10
        assert kb.storage_multiplier("Cellar") == 2.0
        assert kb.storage_multiplier("Fridge") == 0.5

    def test_rejects_missing_default_category(self):
        with pytest.raises(CatalogConfigurationError):
            KnowledgeBase.build(
                items={},
                categories={"Dairy": FoodCategoryProfile("Dairy", 7, 0.8)},
                storage_multipliers=STORAGE_MULTIPLIERS,
            )

    def test_rejects_out_of_range_perishability(self):
        categories = self._categories()
        categories["Dairy"] = FoodCategoryProfile("Dairy", 7, 1.5)
        with pytest.raises(CatalogConfigurationError):
            KnowledgeBase.build(items={}, categories=categories,
                                storage_multipliers=STORAGE_MULTIPLIERS)

    def test_rejects_non_positive_multiplier(self):
        with pytest.raises(CatalogConfigurationError):
            KnowledgeBase.build(items={}, categories=self._categories(),
                                storage_multipliers={"fridge": 0.0, "other": 0.8})

    def test_rejects_dangling_alias(self):
        with pytest.raises(CatalogConfigurationError):
            KnowledgeBase.build(items={}, categories=self._categories(),
                                storage_multipliers=STORAGE_MULTIPLIERS,
                                aliases={"seafood": "Fish"})

    def test_load_from_json(self, tmp_path):
        path = tmp_path / "kb.json"
        path.write_text(json.dumps({
            "categories": {
                "Dairy": {"baseline_shelf_life_days": 6, "perishability_score": 0.8},
                "Other": {"baseline_shelf_life_days": 5, "perishability_score": 0.7},
            },
            "items": {
                "kefir": {"category": "Dairy", "baseline_shelf_life_days": 12,
                          "perishability_score": 0.75},
            },
            "storage_multipliers": {"fridge": 2.0, "other": 0.9},
        }))

        kb = load_knowledge_base(path)

        assert kb.resolve("kefir")[0].baseline_shelf_life_days == 12
        assert kb.resolve("dairy")[0].baseline_shelf_life_days == 6
        assert kb.storage_multiplier("fridge") == 2.0

    def test_load_rejects_unknown_item_category(self, tmp_path):
        path = tmp_path / "kb.json"
        path.write_text(json.dumps({
            "categories": {"Other": {"baseline_shelf_life_days": 5, "perishability_score": 0.7}},
            "items": {"kefir": {"category": "Dairy", "baseline_shelf_life_days": 12,
                                "perishability_score": 0.75}},
            "storage_multipliers": {"other": 0.9},
        }))
        with pytest.raises(CatalogConfigurationError):
            load_knowledge_base(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(CatalogConfigurationError):
            load_knowledge_base(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "kb.json"
        path.write_text("{not json")
        with pytest.raises(CatalogConfigurationError):
            load_knowledge_base(path)


# ============================================================================
# Text Normalization Tests
# ============================================================================

class TestTextNormalizer:
    """Test name normalization helpers."""

    def test_removes_quantities_and_punctuation(self):
        result = TextNormalizer().normalize("Milk (2 lb) - Organic!")
        assert result.normalized == "milk organic"
        assert result.removed_tokens == ["2 lb"]

    def test_removes_diacritics(self):
        assert TextNormalizer().normalize("Crème Fraîche").normalized == "creme fraiche"

    def test_empty(self):
        assert TextNormalizer().normalize(None).normalized == ""

    def test_normalize_name(self):
        assert normalize_name("  Fresh   Spinach ") == "fresh spinach"
        assert normalize_name(None) == ""

    def test_substring_match_either_direction(self):
        assert substring_match("spinach", "fresh spinach")
        assert substring_match("fresh spinach", "spinach")
        assert not substring_match("", "spinach")
        assert not substring_match("kale", "spinach")
