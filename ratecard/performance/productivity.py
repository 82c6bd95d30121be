"""ProductivityClassifier — grade an operation against its standard.

The indicator is a total function of its inputs, evaluated in this order
(first match wins):

1. ``NOT_APPLICABLE`` – the concept is not a load/unload concept.
2. ``PENDING_WEIGHT`` – fixed-weight crew operation without gross weight.
3. ``NOT_COMPUTED``   – no weight, zero weight, or duration unknown or negative.
4. ``NO_STANDARD``    – no standard matched the operation.
5. ``OPTIMAL``        – duration below the standard's base minutes.
6. ``NORMAL``         – at most ``tolerance`` minutes over the base.
7. ``SLOW``           – anything slower.
"""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field

from ratecard.config import LOAD_UNLOAD_CONCEPTS, NORMAL_TOLERANCE_MINUTES
from ratecard.models.rule import Rule


class Indicator(str, Enum):
    """Productivity indicator for one operation."""

    NOT_APPLICABLE = "not_applicable"
    PENDING_WEIGHT = "pending_weight"
    NOT_COMPUTED = "not_computed"
    NO_STANDARD = "no_standard"
    OPTIMAL = "optimal"
    NORMAL = "normal"
    SLOW = "slow"

    @property
    def label(self) -> str:
        """Label shown on crew reports."""
        return _LABELS[self]

    @property
    def is_evaluable(self) -> bool:
        return self in (Indicator.OPTIMAL, Indicator.NORMAL, Indicator.SLOW)


_LABELS = {
    Indicator.NOT_APPLICABLE: "No Aplica",
    Indicator.PENDING_WEIGHT: "Pendiente (P. Bruto)",
    Indicator.NOT_COMPUTED: "No Calculado",
    Indicator.NO_STANDARD: "N/A",
    Indicator.OPTIMAL: "Óptimo",
    Indicator.NORMAL: "Normal",
    Indicator.SLOW: "Lento",
}


class ProductivityContext(BaseModel):
    """Facts about the operation row beyond its duration and standard."""

    concept_type: str = ""
    """Liquidated concept, e.g. 'CARGUE' or 'REESTIBADO'."""

    weight_entered: bool = True
    tons: float | None = None
    """Recorded weight, when known.  A zero weight cannot be graded."""

    applies_crew: bool = True
    fixed_product: bool = True
    """Fixed-weight product; only these wait on a gross weight."""


def classify_productivity(
    operational_duration: float | None,
    standard: Rule | None,
    context: ProductivityContext,
    *,
    tolerance: float = NORMAL_TOLERANCE_MINUTES,
) -> Indicator:
    """Return the productivity indicator for one operation."""
    if context.concept_type.strip().upper() not in LOAD_UNLOAD_CONCEPTS:
        return Indicator.NOT_APPLICABLE

    if context.fixed_product and context.applies_crew and not context.weight_entered:
        return Indicator.PENDING_WEIGHT

    if not context.weight_entered or context.tons == 0:
        return Indicator.NOT_COMPUTED

    if operational_duration is None or operational_duration < 0:
        return Indicator.NOT_COMPUTED

    if standard is None or standard.base_minutes is None:
        return Indicator.NO_STANDARD

    base = standard.base_minutes
    if operational_duration < base:
        return Indicator.OPTIMAL
    if operational_duration <= base + tolerance:
        return Indicator.NORMAL
    return Indicator.SLOW


class PerformanceSummary(BaseModel):
    """Indicator counts and an overall qualification for a crew report."""

    counts: dict[Indicator, int] = Field(default_factory=dict)
    total: int = 0
    evaluable: int = 0
    qualification: str = "No Calculable"

    def percent(self, indicator: Indicator) -> float:
        """Share of *indicator* among evaluable operations, 0-100."""
        if self.evaluable == 0:
            return 0.0
        return self.counts.get(indicator, 0) * 100.0 / self.evaluable


def summarize_performance(indicators: Iterable[Indicator]) -> PerformanceSummary:
    """Count indicators and qualify the crew.

    Only optimal, normal and slow operations are evaluable.  Excellent
    needs 80% optimal, good needs 80% optimal or normal, and more than 20%
    slow needs improvement; anything else is regular.
    """
    counts = Counter(indicators)
    summary = PerformanceSummary(
        counts={ind: counts.get(ind, 0) for ind in Indicator},
        total=sum(counts.values()),
        evaluable=sum(n for ind, n in counts.items() if ind.is_evaluable),
    )
    if summary.evaluable == 0:
        return summary

    optimal = summary.percent(Indicator.OPTIMAL)
    normal = summary.percent(Indicator.NORMAL)
    slow = summary.percent(Indicator.SLOW)

    if optimal >= 80:
        summary.qualification = "Excelente"
    elif optimal + normal >= 80:
        summary.qualification = "Bueno"
    elif slow > 20:
        summary.qualification = "Necesita Mejora"
    else:
        summary.qualification = "Regular"
    return summary
