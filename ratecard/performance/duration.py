"""Elapsed and operational durations."""

from __future__ import annotations

from typing import Iterable

from ratecard.clock import MINUTES_PER_DAY, TimeOfDay, minutes_of_day
from ratecard.models.operation import Novelty


def elapsed_minutes(start: TimeOfDay | None, end: TimeOfDay | None) -> int | None:
    """Minutes from *start* to *end*; an end before the start is on the next day.

    Returns None when either time is missing.
    """
    if start in (None, "") or end in (None, ""):
        return None
    return (minutes_of_day(end) - minutes_of_day(start)) % MINUTES_PER_DAY


def justified_downtime(novelties: Iterable[Novelty]) -> int:
    """Total downtime of the novelties that excuse lost productivity."""
    return sum(n.downtime_minutes for n in novelties if n.impacts_productivity)


def adjust_duration(total_minutes: float | None, novelties: Iterable[Novelty]) -> float | None:
    """Operational duration: *total_minutes* minus justified downtime.

    ``None`` stays ``None``.  The result is not clamped, so downtime larger
    than the operation gives a negative duration.
    """
    if total_minutes is None:
        return None
    return total_minutes - justified_downtime(novelties)
