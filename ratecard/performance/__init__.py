"""Crew performance — operational duration and productivity indicators."""

from ratecard.performance.duration import adjust_duration, elapsed_minutes, justified_downtime
from ratecard.performance.productivity import (
    Indicator,
    PerformanceSummary,
    ProductivityContext,
    classify_productivity,
    summarize_performance,
)

__all__ = [
    "Indicator",
    "PerformanceSummary",
    "ProductivityContext",
    "adjust_duration",
    "classify_productivity",
    "elapsed_minutes",
    "justified_downtime",
    "summarize_performance",
]
