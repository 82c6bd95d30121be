"""ratecard — rule resolution and tariff computation for logistics operations."""

from ratecard.engine import PerformanceRow, RateEngine, match_standard, resolve_standard
from ratecard.liquidation import ConceptTotal, LiquidationLine, LiquidationSummary, aggregate_liquidation
from ratecard.matching import (
    InMemoryRuleRepository,
    MatchResult,
    RuleDatabase,
    RuleRepository,
    RuleValidationError,
    filter_by_range,
    find_overlaps,
    match,
    validate_rule,
)
from ratecard.models import (
    FlatTariff,
    Novelty,
    OperationRecord,
    QuantityRange,
    RangedTariff,
    ResolutionResult,
    Rule,
    Scope,
    ScopeValue,
    ShiftTariff,
    ShiftWindow,
    SpecificTariff,
    SpecificTariffItem,
    StandardQuery,
    VehicleTariffRange,
)
from ratecard.performance import (
    Indicator,
    PerformanceSummary,
    ProductivityContext,
    adjust_duration,
    classify_productivity,
    elapsed_minutes,
    summarize_performance,
)
from ratecard.settings import ConfigManager, EngineSettings, configure_logging
from ratecard.tariff import Shift, TariffContext, resolve_tariff

__version__ = "0.1.0"

__all__ = [
    "ConceptTotal",
    "ConfigManager",
    "EngineSettings",
    "FlatTariff",
    "InMemoryRuleRepository",
    "Indicator",
    "LiquidationLine",
    "LiquidationSummary",
    "MatchResult",
    "Novelty",
    "OperationRecord",
    "PerformanceRow",
    "PerformanceSummary",
    "ProductivityContext",
    "QuantityRange",
    "RangedTariff",
    "RateEngine",
    "ResolutionResult",
    "Rule",
    "RuleDatabase",
    "RuleRepository",
    "RuleValidationError",
    "Scope",
    "ScopeValue",
    "Shift",
    "ShiftTariff",
    "ShiftWindow",
    "SpecificTariff",
    "SpecificTariffItem",
    "StandardQuery",
    "TariffContext",
    "VehicleTariffRange",
    "adjust_duration",
    "aggregate_liquidation",
    "classify_productivity",
    "configure_logging",
    "elapsed_minutes",
    "filter_by_range",
    "find_overlaps",
    "match",
    "match_standard",
    "resolve_standard",
    "resolve_tariff",
    "summarize_performance",
    "validate_rule",
]
