"""Tariff resolution — turn a matched rule into a unit value."""

from __future__ import annotations

import logging
from collections.abc import Container
from datetime import date

from pydantic import BaseModel, Field, InstanceOf

from ratecard.matching.ranges import in_range
from ratecard.models.rule import (
    FlatTariff,
    RangedTariff,
    Rule,
    ShiftTariff,
    SpecificTariff,
    VehicleTariffRange,
)
from ratecard.tariff.shift import Shift, classify_by_end, classify_logistics, classify_window

logger = logging.getLogger(__name__)


class TariffContext(BaseModel):
    """Operation details a time- or weight-sensitive tariff needs."""

    start_time: str | None = None
    end_time: str | None = None
    operation_date: date | None = None
    tons: float | None = None
    vehicle_type: str | None = None
    specific_tariff_id: str | None = None
    holiday_dates: InstanceOf[Container] = Field(default_factory=frozenset)
    """Container of holiday dates: a set of dates or a ``holidays`` calendar."""


def resolve_shift(rule: Rule, context: TariffContext) -> Shift | None:
    """Return the shift used to price *rule*, or None if it is not time-sensitive
    or the context lacks the times needed."""
    payload = rule.payload

    if isinstance(payload, ShiftTariff):
        if context.end_time is None:
            return None
        if payload.day_shift_start is not None and context.start_time is not None:
            return classify_window(
                context.start_time, context.end_time,
                payload.day_shift_start, payload.day_shift_end,
            )
        if payload.day_shift_start is not None:
            return classify_by_end(context.end_time, payload.day_shift_end, payload.day_shift_start)
        return classify_by_end(context.end_time, payload.day_shift_end)

    if isinstance(payload, RangedTariff):
        if context.start_time is None:
            return None
        return classify_logistics(
            context.operation_date,
            context.start_time,
            payload.weekday_shift,
            payload.saturday_shift,
            context.holiday_dates,
        )

    return None


def select_range(payload: RangedTariff, tons: float | None, vehicle_type: str | None = None) -> VehicleTariffRange | None:
    """First tonnage band containing *tons*, restricted to *vehicle_type* if given."""
    if tons is None:
        return None
    for band in payload.ranges:
        if vehicle_type and band.vehicle_type != vehicle_type:
            continue
        if in_range(band.range, tons):
            return band
    return None


def resolve_tariff(rule: Rule, context: TariffContext | None = None) -> float:
    """Return the unit value *rule* charges for the operation in *context*.

    Always returns a number: rules without a payload, unknown specific
    tariffs and tonnages outside every band price at ``0.0``.  A shift
    tariff with no end time is priced at its day value.
    """
    context = context or TariffContext()
    payload = rule.payload

    if payload is None:
        return 0.0

    if isinstance(payload, FlatTariff):
        return payload.value

    if isinstance(payload, ShiftTariff):
        shift = resolve_shift(rule, context)
        if shift is None:
            logger.debug("No end time for %s; using day tariff", rule.name)
            return payload.day_tariff
        return payload.day_tariff if shift is Shift.DAY else payload.night_tariff

    if isinstance(payload, RangedTariff):
        band = select_range(payload, context.tons, context.vehicle_type)
        if band is None:
            logger.debug("No tariff band for %s at %s tons", rule.name, context.tons)
            return 0.0
        shift = resolve_shift(rule, context)
        if shift is Shift.DAY:
            return band.day_tariff
        if shift is Shift.NIGHT:
            return band.night_tariff
        if shift is Shift.EXTRA:
            return band.extra_tariff
        logger.debug("No start time for %s; cannot pick a shift", rule.name)
        return 0.0

    if isinstance(payload, SpecificTariff):
        item = payload.get(context.specific_tariff_id or "")
        return item.value if item is not None else 0.0

    return 0.0
