"""Tests for duration adjustment and productivity classification."""

from __future__ import annotations

import pytest

from ratecard.models import Novelty, Rule
from ratecard.performance import (
    Indicator,
    ProductivityContext,
    adjust_duration,
    classify_productivity,
    elapsed_minutes,
    summarize_performance,
)


@pytest.fixture
def standard() -> Rule:
    return Rule.standard("ACME", "despacho", "fijo", 0, 100, 60)


@pytest.fixture
def ctx() -> ProductivityContext:
    return ProductivityContext(concept_type="CARGUE")


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------

class TestElapsedMinutes:
    def test_same_day(self):
        assert elapsed_minutes("08:00", "09:45") == 105

    def test_crosses_midnight(self):
        assert elapsed_minutes("22:30", "01:00") == 150

    def test_missing_time(self):
        assert elapsed_minutes(None, "09:00") is None
        assert elapsed_minutes("08:00", "") is None

    def test_zero(self):
        assert elapsed_minutes("08:00", "08:00") == 0


class TestAdjustDuration:
    def test_only_impacting_novelties_subtracted(self):
        novelties = [
            Novelty(downtime_minutes=20, impacts_productivity=True),
            Novelty(downtime_minutes=15, impacts_productivity=False),
        ]
        assert adjust_duration(120, novelties) == 100

    def test_none_propagates(self):
        assert adjust_duration(None, [Novelty(downtime_minutes=5)]) is None

    def test_negative_result_preserved(self):
        assert adjust_duration(30, [Novelty(downtime_minutes=45)]) == -15

    def test_no_novelties(self):
        assert adjust_duration(75, []) == 75


# ---------------------------------------------------------------------------
# Productivity
# ---------------------------------------------------------------------------

class TestClassifyProductivity:
    def test_optimal(self, standard, ctx):
        assert classify_productivity(59, standard, ctx) is Indicator.OPTIMAL

    def test_exact_base_is_normal(self, standard, ctx):
        assert classify_productivity(60, standard, ctx) is Indicator.NORMAL

    def test_tolerance_edge_is_normal(self, standard, ctx):
        assert classify_productivity(70, standard, ctx) is Indicator.NORMAL

    def test_over_tolerance_is_slow(self, standard, ctx):
        assert classify_productivity(70.5, standard, ctx) is Indicator.SLOW

    def test_custom_tolerance(self, standard, ctx):
        assert classify_productivity(70, standard, ctx, tolerance=5) is Indicator.SLOW

    def test_no_standard(self, ctx):
        assert classify_productivity(30, None, ctx) is Indicator.NO_STANDARD

    def test_none_duration(self, standard, ctx):
        assert classify_productivity(None, standard, ctx) is Indicator.NOT_COMPUTED

    def test_negative_duration(self, standard, ctx):
        assert classify_productivity(-1, standard, ctx) is Indicator.NOT_COMPUTED

    def test_not_applicable_concept_wins(self, standard):
        ctx = ProductivityContext(concept_type="REESTIBADO", weight_entered=False)
        assert classify_productivity(None, None, ctx) is Indicator.NOT_APPLICABLE

    def test_concept_name_case_insensitive(self, standard):
        ctx = ProductivityContext(concept_type="descargue")
        assert classify_productivity(10, standard, ctx) is Indicator.OPTIMAL

    def test_pending_weight(self, standard):
        ctx = ProductivityContext(concept_type="CARGUE", weight_entered=False, applies_crew=True)
        assert classify_productivity(30, standard, ctx) is Indicator.PENDING_WEIGHT

    def test_missing_weight_without_crew_is_not_computed(self, standard):
        ctx = ProductivityContext(concept_type="CARGUE", weight_entered=False, applies_crew=False)
        assert classify_productivity(30, standard, ctx) is Indicator.NOT_COMPUTED

    def test_zero_weight_is_not_computed(self, standard):
        ctx = ProductivityContext(concept_type="CARGUE", tons=0)
        assert classify_productivity(20, standard, ctx) is Indicator.NOT_COMPUTED

    def test_pending_weight_wins_over_zero_weight(self, standard):
        ctx = ProductivityContext(concept_type="CARGUE", weight_entered=False, tons=0)
        assert classify_productivity(20, standard, ctx) is Indicator.PENDING_WEIGHT

    def test_labels(self):
        assert Indicator.OPTIMAL.label == "Óptimo"
        assert Indicator.PENDING_WEIGHT.label == "Pendiente (P. Bruto)"
        assert Indicator.NO_STANDARD.label == "N/A"


class TestSummary:
    def test_nothing_evaluable(self):
        summary = summarize_performance([Indicator.NOT_APPLICABLE, Indicator.NO_STANDARD])
        assert summary.evaluable == 0
        assert summary.total == 2
        assert summary.qualification == "No Calculable"

    def test_excellent(self):
        summary = summarize_performance([Indicator.OPTIMAL] * 4 + [Indicator.SLOW])
        assert summary.percent(Indicator.OPTIMAL) == pytest.approx(80.0)
        assert summary.qualification == "Excelente"

    def test_good(self):
        summary = summarize_performance([Indicator.OPTIMAL, Indicator.NORMAL] * 2 + [Indicator.SLOW])
        assert summary.qualification == "Bueno"

    def test_needs_improvement(self):
        summary = summarize_performance([Indicator.OPTIMAL, Indicator.SLOW, Indicator.SLOW])
        assert summary.qualification == "Necesita Mejora"

    def test_just_under_good_threshold(self):
        summary = summarize_performance([Indicator.OPTIMAL] * 15 + [Indicator.SLOW] * 4)
        assert summary.qualification == "Necesita Mejora"

    def test_non_evaluable_excluded_from_denominator(self):
        summary = summarize_performance(
            [Indicator.OPTIMAL] * 4 + [Indicator.NOT_COMPUTED] * 6
        )
        assert summary.evaluable == 4
        assert summary.qualification == "Excelente"
