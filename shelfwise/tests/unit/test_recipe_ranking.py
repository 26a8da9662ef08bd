"""
Unit Tests for Recipe Ranking and the Recipe Catalog

Tests:
- Expiring window and urgency
- Multi-factor recipe scoring
- Ordering and filtering of suggestions
- Catalog queries, ratings and views
"""

from datetime import timedelta

import pytest

from shelfwise.exceptions import InvalidInputError, RecipeNotFoundError
from shelfwise.ml.config import ExpiringItem, MealType, Recipe
from shelfwise.ml.services.recipe_ranking import RecipeRankingEngine
from shelfwise.services.recipe_catalog import RecipeCatalog


@pytest.fixture
def engine():
    return RecipeRankingEngine()


@pytest.fixture
def pantry(today):
    return [
        ExpiringItem("Spinach", today + timedelta(days=1)),
        ExpiringItem("Milk", today + timedelta(days=2)),
        ExpiringItem("Eggs", today + timedelta(days=5)),
        ExpiringItem("Cheese", today + timedelta(days=6)),
    ]


def make_recipe(recipe_id, ingredients, **overrides):
    fields = dict(
        id=recipe_id,
        name=recipe_id.replace("-", " ").title(),
        ingredients=ingredients,
    )
    fields.update(overrides)
    return Recipe(**fields)


# ============================================================================
# Scoring Tests
# ============================================================================

class TestRecipeScoring:
    """Test the per-recipe score."""

    def test_full_scenario(self, engine, pantry, today):
        recipe = make_recipe(
            "spinach-omelette",
            ["Eggs", "Spinach", "Milk", "Cheese", "Salt"],
            rating_average=4.5,
            view_count=150,
            prep_time_minutes=10,
            cook_time_minutes=15,
        )

        suggestion = engine.score(recipe, pantry, today)

        # 2 urgent x 15 + 80% match + 20 bonus + 4.5 x 5 + 150 / 100 + quick 10
        assert suggestion.score == pytest.approx(164.0)
        assert suggestion.match_percentage == pytest.approx(80.0)
        assert suggestion.urgent_items_used == 2
        assert suggestion.matched_ingredients == ["Eggs", "Spinach", "Milk", "Cheese"]
        assert suggestion.missing_ingredients == ["Salt"]

    def test_medium_match_bonus(self, engine, pantry, today):
        recipe = make_recipe("frittata", ["eggs", "cheese", "milk", "onion", "pepper"])
        suggestion = engine.score(recipe, pantry, today)
        # 1 urgent (milk) + 60% + 10
        assert suggestion.score == pytest.approx(15 + 60 + 10)

    def test_substring_either_direction(self, engine, today):
        items = [ExpiringItem("fresh baby spinach", today + timedelta(days=5))]
        recipe = make_recipe("salad", ["Spinach"])
        assert engine.score(recipe, items, today).matched_ingredients == ["Spinach"]

    def test_urgent_window_is_strict(self, engine, today):
        items = [ExpiringItem("milk", today + timedelta(days=3))]
        suggestion = engine.score(make_recipe("latte", ["milk", "coffee"]), items, today)
        assert suggestion.urgent_items_used == 0

    def test_views_term_is_capped(self, engine, pantry, today):
        base = engine.score(make_recipe("a", ["eggs", "rice"]), pantry, today).score
        popular = engine.score(make_recipe("b", ["eggs", "rice"], view_count=50_000), pantry, today).score
        assert popular - base == pytest.approx(10.0)

    def test_missing_ingredient_penalty(self, engine, pantry, today):
        ingredients = ["eggs"] + [f"spice {i}" for i in range(7)]
        suggestion = engine.score(make_recipe("stew", ingredients), pantry, today)
        # 1/8 match = 12.5, 7 missing -> (7 - 5) x 2 penalty
        assert suggestion.score == pytest.approx(12.5 - 4.0)

    def test_score_is_never_negative(self, engine, pantry, today):
        ingredients = ["eggs"] + [f"spice {i}" for i in range(29)]
        assert engine.score(make_recipe("feast", ingredients), pantry, today).score == 0.0

    def test_time_bonuses(self, engine, pantry, today):
        quick = engine.score(
            make_recipe("q", ["eggs", "rice"], prep_time_minutes=10, cook_time_minutes=20), pantry, today
        )
        medium = engine.score(
            make_recipe("m", ["eggs", "rice"], prep_time_minutes=20, cook_time_minutes=25), pantry, today
        )
        slow = engine.score(
            make_recipe("s", ["eggs", "rice"], prep_time_minutes=30, cook_time_minutes=60), pantry, today
        )
        unknown = engine.score(make_recipe("u", ["eggs", "rice"], prep_time_minutes=5), pantry, today)

        assert quick.score - slow.score == pytest.approx(10.0)
        assert medium.score - slow.score == pytest.approx(5.0)
        assert unknown.score == pytest.approx(slow.score)

    def test_to_dict(self, engine, pantry, today):
        suggestion = engine.score(make_recipe("omelette", ["eggs", "salt"]), pantry, today)
        payload = suggestion.to_dict()
        assert payload["recipe_id"] == "omelette"
        assert payload["match_percentage"] == 50.0
        assert payload["missing_ingredients"] == ["salt"]


# ============================================================================
# Ranking Tests
# ============================================================================

class TestRecipeRanking:
    """Test suggestion lists."""

    def test_no_expiring_items(self, engine, today):
        assert engine.rank([], [make_recipe("a", ["eggs"])], today=today) == []
        assert engine.rank(None, [make_recipe("a", ["eggs"])], today=today) == []

    def test_items_outside_window_are_ignored(self, engine, today):
        items = [
            ExpiringItem("eggs", today + timedelta(days=7)),
            ExpiringItem("milk", None),
        ]
        assert engine.rank(items, [make_recipe("a", ["eggs", "milk"])], today=today) == []

    def test_custom_window(self, engine, today):
        items = [ExpiringItem("eggs", today + timedelta(days=10))]
        ranked = engine.rank(items, [make_recipe("a", ["eggs"])], days_ahead=14, today=today)
        assert [s.recipe.id for s in ranked] == ["a"]

    def test_sorted_by_score(self, engine, pantry, today):
        catalog = [
            make_recipe("toast", ["bread", "eggs"]),
            make_recipe("omelette", ["eggs", "spinach", "cheese"]),
            make_recipe("soup", ["carrot", "onion"]),
        ]
        ranked = engine.rank(pantry, catalog, today=today)

        assert [s.recipe.id for s in ranked] == ["omelette", "toast"]
        assert ranked[0].score >= ranked[1].score

    def test_ties_keep_catalog_order(self, engine, pantry, today):
        catalog = [make_recipe(name, ["eggs", "flour"]) for name in ("c", "a", "b")]
        ranked = engine.rank(pantry, catalog, today=today)
        assert [s.recipe.id for s in ranked] == ["c", "a", "b"]

    def test_rejects_nameless_item(self, engine, today):
        with pytest.raises(InvalidInputError):
            engine.rank([ExpiringItem("", today)], [make_recipe("a", ["eggs"])], today=today)

    def test_rejects_negative_window(self, engine, pantry, today):
        with pytest.raises(InvalidInputError):
            engine.rank(pantry, [], days_ahead=-1, today=today)


# ============================================================================
# Recipe Catalog Tests
# ============================================================================

class TestRecipeCatalog:
    """Test unscored catalog queries."""

    @pytest.fixture
    def recipe_catalog(self):
        return RecipeCatalog([
            make_recipe("pancakes", ["flour", "milk"], meal_type=MealType.BREAKFAST,
                        description="Fluffy weekend stack", prep_time_minutes=10,
                        cook_time_minutes=15, rating_average=4.0, rating_count=2, view_count=30),
            make_recipe("beef-stew", ["beef", "carrot"], meal_type=MealType.DINNER,
                        prep_time_minutes=20, cook_time_minutes=120, rating_average=4.0,
                        rating_count=10, view_count=500),
            make_recipe("green-salad", ["lettuce"], meal_type=MealType.LUNCH,
                        prep_time_minutes=10, cook_time_minutes=0, rating_average=4.8,
                        rating_count=1, view_count=5),
            make_recipe("secret-sauce", ["tomato"], is_public=False, view_count=9000),
        ])

    def test_get_and_missing(self, recipe_catalog):
        assert recipe_catalog.get("pancakes").name == "Pancakes"
        with pytest.raises(RecipeNotFoundError):
            recipe_catalog.get("nope")

    def test_add_requires_id(self, recipe_catalog):
        with pytest.raises(InvalidInputError):
            recipe_catalog.add(make_recipe("", ["x"]))

    def test_search_name_and_description(self, recipe_catalog):
        assert [r.id for r in recipe_catalog.search("STEW")] == ["beef-stew"]
        assert [r.id for r in recipe_catalog.search("weekend")] == ["pancakes"]
        assert recipe_catalog.search("sauce") == []

    def test_by_meal_type(self, recipe_catalog):
        assert [r.id for r in recipe_catalog.by_meal_type(MealType.DINNER)] == ["beef-stew"]
        assert [r.id for r in recipe_catalog.by_meal_type("lunch")] == ["green-salad"]

    def test_top_rated(self, recipe_catalog):
        ranked = [r.id for r in recipe_catalog.top_rated()]
        assert ranked == ["green-salad", "beef-stew", "pancakes"]
        assert len(recipe_catalog.top_rated(limit=1)) == 1

    def test_most_popular_excludes_private(self, recipe_catalog):
        assert [r.id for r in recipe_catalog.most_popular(limit=2)] == ["beef-stew", "pancakes"]

    def test_quick_recipes(self, recipe_catalog):
        assert [r.id for r in recipe_catalog.quick_recipes()] == ["pancakes", "green-salad"]
        assert [r.id for r in recipe_catalog.quick_recipes(max_minutes=10)] == ["green-salad"]

    def test_rate_updates_running_average(self, recipe_catalog):
        assert recipe_catalog.rate("pancakes", 5.0)
        recipe = recipe_catalog.get("pancakes")
        assert recipe.rating_count == 3
        assert recipe.rating_average == pytest.approx(13.0 / 3)

    @pytest.mark.parametrize("rating", [0.5, 5.5, None])
    def test_rate_ignores_out_of_range(self, recipe_catalog, rating):
        assert not recipe_catalog.rate("pancakes", rating)
        recipe = recipe_catalog.get("pancakes")
        assert recipe.rating_count == 2
        assert recipe.rating_average == 4.0

    def test_increment_view_count(self, recipe_catalog):
        assert recipe_catalog.increment_view_count("green-salad") == 6
