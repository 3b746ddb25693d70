"""Calendar and clock helpers shared by the availability engine.

Times are naive local ``HH:MM`` strings; internally they are compared as
minutes since midnight.
"""

import datetime as dt
from collections.abc import Iterator
from typing import Final

# Size of one micro-slot in minutes.
SLOT_GRANULARITY: Final[int] = 30

WEEKDAY_NAMES: Final[tuple[str, ...]] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
WEEKEND: Final[frozenset[str]] = frozenset({"Saturday", "Sunday"})


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_name(day: dt.date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def iter_dates(start: dt.date, end: dt.date) -> Iterator[dt.date]:
    """Yield every calendar date from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += dt.timedelta(days=1)
