"""ShiftClassifier — decide whether an operation is billed as day, night or extra.

Three variants are supported:

* ``classify_by_end`` — the end time alone decides (simple concepts).
* ``classify_window`` — the whole operation must sit inside the day window.
* ``classify_logistics`` — the calendar day matters too: Sundays and
  holidays are always extra, Saturdays outside their window are extra,
  weekdays outside theirs are night.

Windows are half-open ``[start, end)`` and wrap past midnight when
``end < start``.  The logistics variant keeps the inclusive end used for
ranged tariffs.
"""

from __future__ import annotations

import logging
from collections.abc import Container
from datetime import date, datetime
from enum import Enum

import holidays

from ratecard.clock import MINUTES_PER_DAY, TimeOfDay, minutes_of_day
from ratecard.config import DEFAULT_DAY_SHIFT_START
from ratecard.models.rule import ShiftWindow

logger = logging.getLogger(__name__)

_SATURDAY = 5
_SUNDAY = 6


class Shift(str, Enum):
    """Tariff shift an operation falls in."""

    DAY = "day"
    NIGHT = "night"
    EXTRA = "extra"

    @property
    def label(self) -> str:
        return {"day": "Diurno", "night": "Nocturno", "extra": "Extra"}[self.value]


def in_window(
    t: TimeOfDay,
    start: TimeOfDay,
    end: TimeOfDay,
    *,
    closed: bool = False,
) -> bool:
    """True if *t* lies in the window from *start* to *end*.

    The window is ``[start, end)``, or ``[start, end]`` when *closed*.  If
    ``end < start`` it wraps past midnight.  ``start == end`` is an empty
    window (or the single instant *start* when *closed*).
    """
    tm, s, e = minutes_of_day(t), minutes_of_day(start), minutes_of_day(end)
    if s == e:
        return closed and tm == s
    if s < e:
        return s <= tm < e or (closed and tm == e)
    return tm >= s or tm < e or (closed and tm == e)


def classify_by_end(
    end: TimeOfDay,
    day_shift_end: TimeOfDay,
    day_shift_start: TimeOfDay = DEFAULT_DAY_SHIFT_START,
) -> Shift:
    """Classify by end time: day iff it falls in ``[day_shift_start, day_shift_end)``."""
    return Shift.DAY if in_window(end, day_shift_start, day_shift_end) else Shift.NIGHT


def classify_window(
    start: TimeOfDay,
    end: TimeOfDay,
    day_shift_start: TimeOfDay,
    day_shift_end: TimeOfDay,
) -> Shift:
    """Day iff the entire operation lies inside ``[day_shift_start, day_shift_end)``.

    Both the window and the operation may cross midnight; everything is
    measured as an offset from the window start, modulo one day.
    """
    window_start = minutes_of_day(day_shift_start)
    window_len = (minutes_of_day(day_shift_end) - window_start) % MINUTES_PER_DAY
    if window_len == 0:
        return Shift.NIGHT

    op_start = minutes_of_day(start)
    offset = (op_start - window_start) % MINUTES_PER_DAY
    duration = (minutes_of_day(end) - op_start) % MINUTES_PER_DAY
    return Shift.DAY if offset + duration < window_len else Shift.NIGHT


def classify_logistics(
    operation_date: date | datetime | None,
    start: TimeOfDay,
    weekday_shift: ShiftWindow,
    saturday_shift: ShiftWindow | None = None,
    holiday_dates: Container[date] = (),
) -> Shift:
    """Classify a ranged-tariff operation by calendar day and start time.

    Parameters
    ----------
    operation_date:
        Day the operation happened.  Without a date the weekday rules apply.
    start:
        Operation start time.
    weekday_shift:
        Monday–Friday day window; outside it the operation is night.
    saturday_shift:
        Saturday day window; outside it the operation is extra.  Falls back
        to *weekday_shift*.
    holiday_dates:
        Any container of dates (a set, or a ``holidays`` calendar); a
        holiday is billed like a Sunday.
    """
    if isinstance(operation_date, datetime):
        operation_date = operation_date.date()

    if operation_date is not None:
        weekday = operation_date.weekday()
        if weekday == _SUNDAY or operation_date in holiday_dates:
            return Shift.EXTRA
        if weekday == _SATURDAY:
            window = saturday_shift or weekday_shift
            inside = in_window(start, window.start, window.end, closed=True)
            return Shift.DAY if inside else Shift.EXTRA

    inside = in_window(start, weekday_shift.start, weekday_shift.end, closed=True)
    return Shift.DAY if inside else Shift.NIGHT


def holiday_calendar(country: str, years: int | list[int] | None = None) -> holidays.HolidayBase:
    """Return the public-holiday calendar for *country* (ISO code, e.g. 'CO').

    The calendar works as *holiday_dates* for :func:`classify_logistics`
    and fills in missing years lazily on lookup.
    """
    logger.debug("Loading %s holiday calendar", country)
    return holidays.country_holidays(country, years=years)
