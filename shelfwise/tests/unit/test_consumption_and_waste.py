"""
Unit Tests for Consumption Patterns and Waste Risk

Tests:
- Default pattern table for short histories
- Per-category averages, trend and next-step prediction
- Waste likelihood tiers and perishability scaling
- Shopping recommendations
"""

from datetime import date, timedelta

import pytest

from shelfwise.exceptions import InvalidInputError
from shelfwise.ml.config import ConsumptionPattern, ConsumptionRecord, RiskClass, TrendDirection
from shelfwise.ml.services.consumption_analyzer import ConsumptionPatternAnalyzer
from shelfwise.ml.services.waste_risk_scorer import WasteRiskScorer, base_waste_probability


@pytest.fixture
def analyzer(kb):
    return ConsumptionPatternAnalyzer(kb)


@pytest.fixture
def scorer(kb):
    return WasteRiskScorer(kb)


def record(name, days, start=date(2024, 3, 1), category=None):
    return ConsumptionRecord(
        item_name=name,
        purchase_date=start,
        consumption_date=start + timedelta(days=days),
        category=category,
    )


def pattern(category, avg, trend=TrendDirection.DECREASING):
    return ConsumptionPattern(
        category=category,
        average_days_to_consume=avg,
        predicted_days_to_consume=avg,
        trend=trend,
    )


# ============================================================================
# Consumption Pattern Tests
# ============================================================================

class TestConsumptionPatterns:
    """Test consumption latency analysis."""

    @pytest.mark.parametrize("records", [None, [], [record("milk", 3), record("bread", 4)]])
    def test_short_history_uses_defaults(self, analyzer, records):
        patterns = analyzer.analyze(records)

        assert list(patterns) == ["Dairy", "Meat", "Fruit", "Vegetable", "Grain/Bread"]
        assert patterns["Dairy"].average_days_to_consume == 5.0
        assert patterns["Meat"].average_days_to_consume == 2.0
        assert patterns["Grain/Bread"].predicted_days_to_consume == 14.0
        assert all(p.is_default and p.trend is None for p in patterns.values())

    def test_average_and_increasing_trend(self, analyzer):
        patterns = analyzer.analyze([
            record("milk", 2),
            record("yogurt", 4),
            record("cheese", 6),
        ])

        dairy = patterns["Dairy"]
        assert dairy.average_days_to_consume == pytest.approx(4.0)
        assert dairy.slope == pytest.approx(2.0)
        assert dairy.predicted_days_to_consume == pytest.approx(8.0)
        assert dairy.trend == TrendDirection.INCREASING
        assert dairy.sample_size == 3
        assert not dairy.is_default

    def test_decreasing_trend(self, analyzer):
        patterns = analyzer.analyze([record("apple", 9), record("banana", 6), record("grape", 3)])
        fruit = patterns["Fruit"]
        assert fruit.trend == TrendDirection.DECREASING
        assert fruit.predicted_days_to_consume == pytest.approx(0.0)

    def test_flat_history_is_not_increasing(self, analyzer):
        patterns = analyzer.analyze([record("bread", 5)] * 4)
        assert patterns["Grain/Bread"].trend == TrendDirection.DECREASING
        assert patterns["Grain/Bread"].predicted_days_to_consume == pytest.approx(5.0)

    def test_groups_in_first_seen_order(self, analyzer):
        patterns = analyzer.analyze([
            record("chicken", 1),
            record("milk", 4),
            record("beef", 3),
        ])
        assert list(patterns) == ["Meat", "Dairy"]

    def test_single_record_group(self, analyzer):
        patterns = analyzer.analyze([
            record("chicken", 1),
            record("beef", 3),
            record("milk", 4),
        ])
        dairy = patterns["Dairy"]
        assert dairy.slope == 0.0
        assert dairy.predicted_days_to_consume == 4.0
        assert dairy.sample_size == 1

    def test_declared_category_wins(self, analyzer):
        patterns = analyzer.analyze([
            record("oat drink", 3, category="Dairy"),
            record("soy drink", 5, category="dairy"),
            record("house blend", 7, category="Snacks"),
        ])
        assert set(patterns) == {"Dairy", "Snacks"}
        assert patterns["Dairy"].sample_size == 2

    def test_rejects_consumption_before_purchase(self, analyzer):
        with pytest.raises(InvalidInputError):
            analyzer.analyze([record("milk", 2), record("milk", -1), record("milk", 3)])

    def test_rejects_missing_dates(self, analyzer):
        broken = ConsumptionRecord("milk", date(2024, 3, 1), None)
        with pytest.raises(InvalidInputError):
            analyzer.analyze([record("milk", 2), broken, record("milk", 3)])

    def test_increasing_categories(self, analyzer):
        patterns = analyzer.analyze([
            record("milk", 1), record("milk", 5),
            record("apple", 8), record("apple", 2),
        ])
        assert analyzer.increasing_categories(patterns) == ["Dairy"]


# ============================================================================
# Waste Likelihood Tests
# ============================================================================

class TestWasteLikelihood:
    """Test waste probability scoring."""

    def test_base_tiers(self):
        assert base_waste_probability(0, 7.0) == 1.0
        assert base_waste_probability(-3, 7.0) == 1.0
        assert base_waste_probability(3, 7.0) == 0.8
        assert base_waste_probability(5, 7.0) == 0.5
        assert base_waste_probability(10, 7.0) == 0.2
        assert base_waste_probability(11, 7.0) == 0.1

    def test_expired_item(self, scorer, today):
        # Perishability 0.7 -> 1.0 x (0.5 + 0.35)
        likelihood = scorer.waste_likelihood("Mystery Kombucha", today, today=today)
        assert likelihood == pytest.approx(0.85)

    def test_expired_recognized_never_below_threshold(self, scorer, today, kb):
        for name in list(kb.items) + [c for c in kb.categories if c != "Other"]:
            likelihood = scorer.waste_likelihood(name, today - timedelta(days=1), today=today)
            assert likelihood >= 0.8 - 1e-9

    def test_uses_category_pattern(self, scorer, today):
        patterns = {"Dairy": pattern("Dairy", 20.0)}
        # 8 days left < 0.5 x 20 -> 0.8 x (0.5 + 0.45)
        likelihood = scorer.waste_likelihood("milk", today + timedelta(days=8), patterns, today)
        assert likelihood == pytest.approx(0.76)

    def test_unseen_category_defaults_to_seven_days(self, scorer, today):
        patterns = {"Meat": pattern("Meat", 1.0)}
        # bread: 4 days left, 0.5 x 7 <= 4 < 7 -> 0.5 x (0.5 + 0.4)
        likelihood = scorer.waste_likelihood("bread", today + timedelta(days=4), patterns, today)
        assert likelihood == pytest.approx(0.45)

    def test_monotonic_in_days_left(self, scorer, today):
        patterns = {"Dairy": pattern("Dairy", 6.0)}
        values = [
            scorer.waste_likelihood("milk", today + timedelta(days=d), patterns, today)
            for d in range(-3, 20)
        ]
        assert all(a >= b for a, b in zip(values, values[1:]))
        assert all(0.0 <= v <= 1.0 for v in values)

    def test_requires_inputs(self, scorer, today):
        with pytest.raises(InvalidInputError):
            scorer.waste_likelihood("", today)
        with pytest.raises(InvalidInputError):
            scorer.waste_likelihood("milk", None)

    @pytest.mark.parametrize("likelihood,expected", [
        (0.95, RiskClass.HIGH),
        (0.7, RiskClass.HIGH),
        (0.5, RiskClass.MEDIUM),
        (0.4, RiskClass.MEDIUM),
        (0.1, RiskClass.LOW),
    ])
    def test_risk_class(self, likelihood, expected):
        assert WasteRiskScorer.risk_class(likelihood) == expected


# ============================================================================
# Recommendation Tests
# ============================================================================

class TestRecommendations:
    """Test shopping recommendations."""

    def test_missing_staples_in_order(self, scorer):
        recommendations = scorer.generate_recommendations(["bread", "rice"])
        assert recommendations == [
            "Consider adding dairy products like milk or yogurt",
            "Add some fresh fruits for a balanced diet",
            "Stock up on vegetables for healthy meals",
            "Consider adding protein sources like chicken or fish",
        ]

    def test_present_staples_are_skipped(self, scorer):
        recommendations = scorer.generate_recommendations(["milk", "apple", "carrot", "chicken"])
        assert recommendations == []

    def test_increasing_trends_follow(self, scorer):
        patterns = {
            "Fruit": pattern("Fruit", 5.0, TrendDirection.INCREASING),
            "Dairy": pattern("Dairy", 4.0),
            "Meat": pattern("Meat", 2.0, TrendDirection.INCREASING),
        }
        recommendations = scorer.generate_recommendations(
            ["milk", "apple", "carrot", "chicken"], patterns
        )
        assert recommendations == [
            "Your Fruit consumption is increasing - consider buying more",
            "Your Meat consumption is increasing - consider buying more",
        ]
