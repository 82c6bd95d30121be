"""Tariff selection — shift classification and unit-value resolution."""

from ratecard.tariff.resolver import TariffContext, resolve_shift, resolve_tariff
from ratecard.tariff.shift import (
    Shift,
    classify_by_end,
    classify_logistics,
    classify_window,
    holiday_calendar,
    in_window,
)

__all__ = [
    "Shift",
    "TariffContext",
    "classify_by_end",
    "classify_logistics",
    "classify_window",
    "holiday_calendar",
    "in_window",
    "resolve_shift",
    "resolve_tariff",
]
