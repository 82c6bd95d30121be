"""Data models shared by every engine component."""

from ratecard.models.operation import (
    Novelty,
    OperationRecord,
    ResolutionResult,
    StandardQuery,
)
from ratecard.models.rule import (
    FlatTariff,
    QuantityRange,
    RangedTariff,
    Rule,
    Scope,
    ScopeValue,
    ShiftTariff,
    ShiftWindow,
    SpecificTariff,
    SpecificTariffItem,
    VehicleTariffRange,
)

__all__ = [
    "FlatTariff",
    "Novelty",
    "OperationRecord",
    "QuantityRange",
    "RangedTariff",
    "ResolutionResult",
    "Rule",
    "Scope",
    "ScopeValue",
    "ShiftTariff",
    "ShiftWindow",
    "SpecificTariff",
    "SpecificTariffItem",
    "StandardQuery",
    "VehicleTariffRange",
]
