"""Liquidation — aggregate priced lines into per-concept totals."""

from ratecard.liquidation.aggregator import (
    ConceptTotal,
    LiquidationLine,
    LiquidationSummary,
    aggregate_liquidation,
)

__all__ = ["ConceptTotal", "LiquidationLine", "LiquidationSummary", "aggregate_liquidation"]
