"""Time-of-day helpers.

Operations record their start and end as wall-clock ``HH:MM`` strings
with no date attached, so all shift arithmetic is done in minutes since
midnight, modulo one day.
"""

from __future__ import annotations

import re
from datetime import datetime, time
from typing import Union

MINUTES_PER_DAY = 24 * 60

TimeOfDay = Union[str, time]

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")


def minutes_of_day(value: TimeOfDay) -> int:
    """Return *value* as minutes since midnight (0..1439).

    Accepts ``'HH:MM'``, ``'H:MM'``, ``'HH:MM:SS'`` (seconds ignored),
    ``datetime.time`` and ``datetime.datetime``.

    Raises
    ------
    ValueError
        If the string is not a valid 24-hour time.
    """
    if isinstance(value, datetime):
        return value.hour * 60 + value.minute
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    m = _HHMM_RE.match(str(value))
    if not m:
        raise ValueError(f"Invalid time of day: {value!r}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time of day: {value!r}")
    return hours * 60 + minutes
