"""Operation records, novelties and the queries derived from them."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from ratecard.config import PENDING_QUANTITY
from ratecard.models.rule import Rule


class Novelty(BaseModel):
    """A downtime event recorded against an operation."""

    id: str | None = None
    type: str = ""
    downtime_minutes: int = Field(default=0, ge=0)
    impacts_productivity: bool = True
    """Justified downtime: subtracted before productivity is classified."""

    @classmethod
    def from_legacy(cls, doc: dict[str, Any]) -> Novelty:
        """Build from a stored novelty (``purpose`` = justification/settlement)."""
        return cls(
            id=doc.get("id"),
            type=doc.get("type", ""),
            downtime_minutes=int(doc.get("downtimeMinutes", 0) or 0),
            impacts_productivity=doc.get("purpose", "justification") == "justification",
        )


class StandardQuery(BaseModel):
    """Dimension values and tonnage used to look up a rule."""

    client: str | None = None
    operation_type: str | None = None
    product_type: str | None = None
    tons: float = 0.0

    @property
    def is_complete(self) -> bool:
        return bool(self.client and self.operation_type and self.product_type)


class OperationRecord(BaseModel):
    """An operation as supplied by the host application."""

    id: str | None = None
    client: str | None = None
    operation_type: str | None = None
    """'recepcion' or 'despacho'."""

    product_type: str | None = None
    """'fijo' (fixed weight) or 'variable'."""

    quantity: float = 0.0
    """Weight in tons.  ``-1`` flags a fixed-weight operation with no gross weight yet."""

    start_time: str | None = None
    end_time: str | None = None
    operation_date: date | None = None
    vehicle_type: str | None = None
    applies_crew: bool = False
    novelties: list[Novelty] = Field(default_factory=list)

    @property
    def weight_entered(self) -> bool:
        return self.quantity != PENDING_QUANTITY

    def query(self) -> StandardQuery:
        return StandardQuery(
            client=self.client,
            operation_type=self.operation_type,
            product_type=self.product_type,
            tons=max(self.quantity, 0.0),
        )


class ResolutionResult(BaseModel):
    """The outcome of resolving an operation against a rule set."""

    matched_rule: Rule | None = None
    tariff_value: float | None = None
    tier_used: int | None = None
    """1..8 for specificity tiers, 9 for the substring fallback."""

    @property
    def matched(self) -> bool:
        return self.matched_rule is not None
