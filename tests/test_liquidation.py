"""Tests for liquidation aggregation."""

from __future__ import annotations

import json
import random

import pytest

from ratecard.liquidation import LiquidationLine, aggregate_liquidation


@pytest.fixture
def lines() -> list[dict]:
    return [
        {"concept": "CARGUE", "quantity": 10.5, "unit_value": 1000, "unit_of_measure": "TONELADA"},
        {"concept": "CARGUE", "quantity": 4.25, "unit_value": 1200, "unit_of_measure": "TONELADA"},
        {"concept": "CARGUE", "quantity": -1, "unit_value": 1000, "unit_of_measure": "TONELADA"},
        {"concept": "REESTIBADO", "quantity": 30, "unit_value": 0, "unit_of_measure": "PALETA"},
        {"concept": "REESTIBADO", "quantity": 12, "unit_value": 250.5, "unit_of_measure": "PALETA"},
        {"concept": "HORA EXTRA", "quantity": 0.1, "unit_value": 0.2},
        {"concept": "HORA EXTRA", "quantity": 0.7, "unit_value": 0.3},
    ]


class TestAggregateLiquidation:
    def test_per_concept_totals(self, lines):
        summary = aggregate_liquidation(lines)
        cargue = summary.get("CARGUE")
        assert cargue.quantity == pytest.approx(14.75)
        assert cargue.total == pytest.approx(10.5 * 1000 + 4.25 * 1200)
        assert cargue.unit_value == 1200
        assert cargue.unit_of_measure == "TONELADA"

    def test_pending_lines_excluded(self, lines):
        summary = aggregate_liquidation(lines)
        assert summary.pending_lines == 1
        assert summary.get("CARGUE").lines == 2

    def test_zero_priced_lines_count_quantity_not_money(self, lines):
        reestibado = aggregate_liquidation(lines).get("REESTIBADO")
        assert reestibado.quantity == 42
        assert reestibado.total == pytest.approx(12 * 250.5)

    def test_grand_total(self, lines):
        summary = aggregate_liquidation(lines)
        assert summary.grand_total == pytest.approx(sum(c.total for c in summary.concepts))

    def test_order_independent(self, lines):
        baseline = aggregate_liquidation(lines)
        rng = random.Random(7)
        for _ in range(20):
            shuffled = lines[:]
            rng.shuffle(shuffled)
            result = aggregate_liquidation(shuffled)
            assert result.grand_total == baseline.grand_total
            assert result.to_dict() == baseline.to_dict()

    def test_concepts_sorted_by_name(self, lines):
        names = [c.concept for c in aggregate_liquidation(lines).concepts]
        assert names == sorted(names)

    def test_accepts_models(self):
        summary = aggregate_liquidation([LiquidationLine(concept="X", quantity=2, unit_value=3)])
        assert summary.grand_total == 6

    def test_empty(self):
        summary = aggregate_liquidation([])
        assert summary.concepts == []
        assert summary.grand_total == 0.0

    def test_only_pending(self):
        summary = aggregate_liquidation([{"concept": "CARGUE", "quantity": -1, "unit_value": 5}])
        assert summary.get("CARGUE") is None
        assert summary.grand_total == 0.0


class TestLiquidationReport:
    def test_markdown(self, lines):
        md = aggregate_liquidation(lines).to_markdown()
        assert "# Liquidation Summary" in md
        assert "| CARGUE |" in md
        assert "pending gross weight" in md

    def test_json(self, lines):
        data = json.loads(aggregate_liquidation(lines).to_json())
        assert {c["concept"] for c in data["concepts"]} == {"CARGUE", "REESTIBADO", "HORA EXTRA"}
        assert data["pending_lines"] == 1
