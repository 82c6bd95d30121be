"""Rule model: scope, quantity range and tariff payload.

A single ``Rule`` type covers both performance standards (which carry
``base_minutes``) and billing concepts (which carry a tariff ``payload``).
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ratecard.config import (
    DEFAULT_DAY_SHIFT_END,
    ROUND_DIGITS,
    SCOPE_DIMENSIONS,
    WILDCARD_TOKENS,
)


class ScopeValue(BaseModel):
    """One scope dimension: either an exact value or a wildcard.

    ``value is None`` is the wildcard.  Legacy sentinel strings such as
    ``'TODOS'`` are only turned into wildcards by :meth:`parse`; a client
    really named ``'TODOS'`` can still be built with :meth:`exact`.
    """

    model_config = ConfigDict(frozen=True)

    value: str | None = None

    @classmethod
    def exact(cls, value: str) -> ScopeValue:
        return cls(value=value)

    @classmethod
    def wildcard(cls) -> ScopeValue:
        return cls()

    @classmethod
    def parse(cls, token: Any) -> ScopeValue:
        """Build a ScopeValue from a raw token, mapping legacy wildcards."""
        if isinstance(token, ScopeValue):
            return token
        if isinstance(token, dict):
            return cls.model_validate(token)
        if token is None:
            return cls()
        text = str(token).strip()
        if text.upper() in WILDCARD_TOKENS:
            return cls()
        return cls(value=text)

    @property
    def is_wildcard(self) -> bool:
        return self.value is None

    def matches(self, candidate: str | None) -> bool:
        """True if this dimension accepts *candidate*."""
        return self.value is None or self.value == candidate

    def __str__(self) -> str:
        return "*" if self.value is None else self.value


class Scope(BaseModel):
    """The (client, operation type, product type) a rule applies to."""

    model_config = ConfigDict(frozen=True)

    client: ScopeValue = Field(default_factory=ScopeValue.wildcard)
    operation_type: ScopeValue = Field(default_factory=ScopeValue.wildcard)
    product_type: ScopeValue = Field(default_factory=ScopeValue.wildcard)

    @field_validator("client", "operation_type", "product_type", mode="before")
    @classmethod
    def _parse_token(cls, value: Any) -> ScopeValue:
        return ScopeValue.parse(value)

    def dimension(self, name: str) -> ScopeValue:
        return getattr(self, name)

    @property
    def specificity(self) -> int:
        """Number of exact (non-wildcard) dimensions."""
        return sum(1 for d in SCOPE_DIMENSIONS if not self.dimension(d).is_wildcard)

    @property
    def key(self) -> tuple[str | None, ...]:
        return tuple(self.dimension(d).value for d in SCOPE_DIMENSIONS)


class QuantityRange(BaseModel):
    """Inclusive ``[min, max]`` range over tons."""

    min: float = 0.0
    max: float = math.inf

    @property
    def is_malformed(self) -> bool:
        """A range with ``max <= min`` can never be matched."""
        return self.max <= self.min

    def contains(self, quantity: float) -> bool:
        """True if *quantity* is in ``[min, max]``, compared at 2 decimals."""
        if self.is_malformed:
            return False
        q = round(float(quantity), ROUND_DIGITS)
        return round(self.min, ROUND_DIGITS) <= q <= round(self.max, ROUND_DIGITS)

    def overlaps(self, other: QuantityRange) -> bool:
        lo, hi = round(self.min, ROUND_DIGITS), round(self.max, ROUND_DIGITS)
        return lo <= round(other.max, ROUND_DIGITS) and round(other.min, ROUND_DIGITS) <= hi


# -- Tariff payloads ---------------------------------------------------------


class FlatTariff(BaseModel):
    """Single unit value regardless of time or weight."""

    kind: Literal["flat"] = "flat"
    value: float = 0.0


class ShiftTariff(BaseModel):
    """Day and night unit values split by a configured day shift.

    When ``day_shift_start`` is omitted the operation is classified by its
    end time alone; otherwise the whole operation must fall inside the
    day window to get the day tariff.
    """

    kind: Literal["shift"] = "shift"
    day_tariff: float = 0.0
    night_tariff: float = 0.0
    day_shift_start: str | None = None
    day_shift_end: str = DEFAULT_DAY_SHIFT_END


class ShiftWindow(BaseModel):
    """A day-shift window, ``HH:MM`` to ``HH:MM``."""

    start: str = "06:00"
    end: str = "18:00"


class VehicleTariffRange(BaseModel):
    """Tariffs for one tonnage band and vehicle type."""

    min_tons: float
    max_tons: float
    vehicle_type: str = ""
    day_tariff: float = 0.0
    night_tariff: float = 0.0
    extra_tariff: float = 0.0

    @property
    def range(self) -> QuantityRange:
        return QuantityRange(min=self.min_tons, max=self.max_tons)


class RangedTariff(BaseModel):
    """Tonnage bands with day/night/extra tariffs per logistics shift."""

    kind: Literal["ranges"] = "ranges"
    ranges: list[VehicleTariffRange] = Field(default_factory=list)
    weekday_shift: ShiftWindow = Field(default_factory=ShiftWindow)
    saturday_shift: ShiftWindow | None = None
    """Saturday window.  When unset, Saturdays use the weekday window."""


class SpecificTariffItem(BaseModel):
    id: str
    name: str = ""
    value: float = 0.0
    unit: str = ""


class SpecificTariff(BaseModel):
    """Named tariffs (overtime hours, transport, ...) selected by id."""

    kind: Literal["specific"] = "specific"
    tariffs: list[SpecificTariffItem] = Field(default_factory=list)

    def get(self, tariff_id: str) -> SpecificTariffItem | None:
        for item in self.tariffs:
            if item.id == tariff_id:
                return item
        return None


TariffPayload = Annotated[
    Union[FlatTariff, ShiftTariff, RangedTariff, SpecificTariff],
    Field(discriminator="kind"),
]


class Rule(BaseModel):
    """A configuration rule: a standard or a billing concept."""

    id: int | str | None = None
    name: str = ""
    """Concept name ('CARGUE', 'REESTIBADO') or a standard description."""

    scope: Scope = Field(default_factory=Scope)
    range: QuantityRange = Field(default_factory=QuantityRange)

    base_minutes: float | None = None
    """Expected duration for a standard; unused on billing concepts."""

    unit_of_measure: str = ""
    """'TONELADA', 'PALETA', 'HORA', ..."""

    payload: TariffPayload | None = None

    @classmethod
    def standard(
        cls,
        client: Any,
        operation_type: Any,
        product_type: Any,
        min_tons: float,
        max_tons: float,
        base_minutes: float,
        **kwargs: Any,
    ) -> Rule:
        """Build a performance standard from flat legacy-style fields."""
        return cls(
            scope=Scope(
                client=client,
                operation_type=operation_type,
                product_type=product_type,
            ),
            range=QuantityRange(min=min_tons, max=max_tons),
            base_minutes=base_minutes,
            **kwargs,
        )

    @classmethod
    def concept(
        cls,
        name: str,
        payload: Any,
        *,
        client: Any = None,
        operation_type: Any = None,
        product_type: Any = None,
        unit_of_measure: str = "",
        min_tons: float = 0.0,
        max_tons: float = math.inf,
        **kwargs: Any,
    ) -> Rule:
        """Build a billing concept.  Omitted scope dimensions are wildcards."""
        return cls(
            name=name,
            scope=Scope(
                client=client,
                operation_type=operation_type,
                product_type=product_type,
            ),
            range=QuantityRange(min=min_tons, max=max_tons),
            unit_of_measure=unit_of_measure,
            payload=payload,
            **kwargs,
        )


def expand_legacy_standard(doc: dict[str, Any]) -> list[Rule]:
    """Turn a stored standard document into one rule per client and range.

    Accepts either a single ``clientName`` or a ``clientNames`` list, and
    either flat ``minTons``/``maxTons``/``baseMinutes`` or a ``ranges``
    list, mirroring how standards are authored in bulk.
    """
    clients = doc.get("clientNames") or [doc.get("clientName")]
    ranges = doc.get("ranges") or [
        {
            "minTons": doc.get("minTons", 0),
            "maxTons": doc.get("maxTons", 0),
            "baseMinutes": doc.get("baseMinutes", 0),
        }
    ]
    rules: list[Rule] = []
    for client in clients:
        for rng in ranges:
            rules.append(
                Rule.standard(
                    client,
                    doc.get("operationType"),
                    doc.get("productType"),
                    float(rng["minTons"]),
                    float(rng["maxTons"]),
                    float(rng["baseMinutes"]),
                    id=doc.get("id"),
                    name=doc.get("description", ""),
                )
            )
    return rules
