"""LiquidationAggregator — per-concept quantities and money totals."""

from __future__ import annotations

import json
import logging
import math
from collections import defaultdict
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from ratecard.config import PENDING_QUANTITY, ROUND_DIGITS

logger = logging.getLogger(__name__)


class LiquidationLine(BaseModel):
    """One priced line of a liquidation."""

    concept: str
    quantity: float = 0.0
    """Billable quantity.  ``-1`` marks a line still waiting on its weight."""

    unit_value: float = 0.0
    unit_of_measure: str = ""

    @property
    def is_pending(self) -> bool:
        return self.quantity == PENDING_QUANTITY


class ConceptTotal(BaseModel):
    """Aggregated figures for one concept."""

    concept: str
    quantity: float = 0.0
    total: float = 0.0
    unit_value: float = 0.0
    """Largest non-zero unit value seen for the concept."""

    unit_of_measure: str = ""
    lines: int = 0


class LiquidationSummary:
    """Per-concept totals and the grand total of a liquidation."""

    def __init__(self, concepts: list[ConceptTotal] | None = None, pending_lines: int = 0) -> None:
        self.concepts = sorted(concepts or [], key=lambda c: c.concept)
        self.pending_lines = pending_lines

    @property
    def grand_total(self) -> float:
        return math.fsum(c.total for c in self.concepts)

    @property
    def per_concept(self) -> dict[str, ConceptTotal]:
        return {c.concept: c for c in self.concepts}

    def get(self, concept: str) -> ConceptTotal | None:
        return self.per_concept.get(concept)

    def to_markdown(self) -> str:
        """Render the liquidation as a Markdown table."""
        lines: list[str] = []

        lines.append("# Liquidation Summary")
        lines.append("")
        lines.append("| Concept | Quantity | Unit | Unit Value | Total |")
        lines.append("|---------|----------|------|------------|-------|")
        for c in self.concepts:
            lines.append(
                f"| {c.concept} | {c.quantity:,.2f} | {c.unit_of_measure} "
                f"| ${c.unit_value:,.2f} | ${c.total:,.2f} |"
            )
        lines.append(f"| **Total** | | | | **${self.grand_total:,.2f}** |")
        lines.append("")

        if self.pending_lines:
            lines.append(f"_{self.pending_lines} line(s) pending gross weight were excluded._")
            lines.append("")

        return "\n".join(lines)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    def to_dict(self) -> dict[str, Any]:
        return {
            "concepts": [c.model_dump() for c in self.concepts],
            "grand_total": round(self.grand_total, ROUND_DIGITS),
            "pending_lines": self.pending_lines,
        }


def aggregate_liquidation(resolutions: Iterable[LiquidationLine | Mapping[str, Any]]) -> LiquidationSummary:
    """Sum quantities and money per concept.

    Pending lines are left out entirely.  Lines priced at zero still count
    toward the concept quantity but add nothing to its total.  The result
    does not depend on the order of *resolutions*.
    """
    quantities: dict[str, list[float]] = defaultdict(list)
    amounts: dict[str, list[float]] = defaultdict(list)
    unit_values: dict[str, float] = {}
    units: dict[str, set[str]] = defaultdict(set)
    pending = 0

    for raw in resolutions:
        line = raw if isinstance(raw, LiquidationLine) else LiquidationLine.model_validate(raw)
        if line.is_pending:
            pending += 1
            continue

        quantities[line.concept].append(line.quantity)
        if line.unit_of_measure:
            units[line.concept].add(line.unit_of_measure)
        if line.unit_value != 0:
            amounts[line.concept].append(line.quantity * line.unit_value)
            unit_values[line.concept] = max(unit_values.get(line.concept, line.unit_value), line.unit_value)

    concepts = [
        ConceptTotal(
            concept=name,
            quantity=math.fsum(qty),
            total=math.fsum(amounts[name]),
            unit_value=unit_values.get(name, 0.0),
            # several units for one concept is a data problem; pick one deterministically
            unit_of_measure=min(units[name]) if units[name] else "",
            lines=len(qty),
        )
        for name, qty in quantities.items()
    ]
    if pending:
        logger.info("Excluded %d pending line(s) from liquidation", pending)
    return LiquidationSummary(concepts, pending_lines=pending)
