import datetime as dt
from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from iepsched.errors import BadRequestError
from iepsched.models.availability import AvailableSlot, CommonBlock, MicroSlot
from iepsched.scheduling.times import SLOT_GRANULARITY, minutes_to_time, time_to_minutes

STANDARD_DURATIONS: tuple[int, ...] = (30, 45, 60, 90, 120)


class _Run(NamedTuple):
    date: dt.date
    start: int
    end: int
    members: list[str]


def _contiguous_runs(common_slots: Iterable[MicroSlot]) -> list[_Run]:
    by_date: dict[dt.date, list[MicroSlot]] = defaultdict(list)
    for slot in common_slots:
        by_date[slot.date].append(slot)

    runs: list[_Run] = []
    for day in sorted(by_date):
        current: _Run | None = None
        for slot in sorted(by_date[day], key=lambda s: time_to_minutes(s.start_time)):
            start = time_to_minutes(slot.start_time)
            end = time_to_minutes(slot.end_time)
            if current is not None and start == current.end:
                current = current._replace(end=end)
                continue
            if current is not None:
                runs.append(current)
            current = _Run(day, start, end, list(slot.available_members))
        if current is not None:
            runs.append(current)
    return runs


def duration_options(block_minutes: int, options: Sequence[int] = STANDARD_DURATIONS) -> list[int]:
    """Standard meeting lengths that fit inside a block of block_minutes."""
    return [d for d in options if d <= block_minutes]


def find_common_blocks(common_slots: Iterable[MicroSlot]) -> list[CommonBlock]:
    """Merge common micro-slots into maximal contiguous blocks per date."""
    return [
        CommonBlock(
            date=run.date,
            start_time=minutes_to_time(run.start),
            end_time=minutes_to_time(run.end),
            duration_minutes=run.end - run.start,
            duration_options=duration_options(run.end - run.start),
        )
        for run in _contiguous_runs(common_slots)
    ]


def find_duration_fit_slots(common_slots: Iterable[MicroSlot], duration_minutes: int) -> list[AvailableSlot]:
    """Enumerate every window of exactly duration_minutes inside the common runs.

    Windows start at the run start and advance by SLOT_GRANULARITY while the
    window still ends inside the run. A run is only extended when the next
    micro-slot starts exactly where the previous one ended.
    """
    if duration_minutes <= 0:
        raise BadRequestError(detail="duration_minutes must be positive", duration_minutes=duration_minutes)

    slots: list[AvailableSlot] = []
    for run in _contiguous_runs(common_slots):
        start = run.start
        while start + duration_minutes <= run.end:
            slots.append(
                AvailableSlot(
                    date=run.date,
                    start_time=minutes_to_time(start),
                    end_time=minutes_to_time(start + duration_minutes),
                    is_common=True,
                    available_members=list(run.members),
                )
            )
            start += SLOT_GRANULARITY
    return slots
