import datetime as dt
from collections.abc import Iterable

from iepsched.models.availability import MemberSlot
from iepsched.models.team import DistrictBlackout, IndividualBlackout, TeamMember
from iepsched.scheduling.times import (
    SLOT_GRANULARITY,
    WEEKEND,
    minutes_to_time,
    time_to_minutes,
    weekday_name,
)


def generate_member_slots(member: TeamMember, day: dt.date) -> list[MemberSlot]:
    """Expand a member's weekly schedule into free micro-slots for one date.

    Saturdays and Sundays never have slots, whatever the schedule says. Working
    hours are walked in SLOT_GRANULARITY steps; a step overlapping an
    unavailable interval is skipped, and a trailing remainder shorter than one
    step is dropped.
    """
    name = weekday_name(day)
    if name in WEEKEND:
        return []
    hours = member.weekly_schedule.get(name)
    if hours is None:
        return []

    work_end = time_to_minutes(hours.end_time)
    blocked = sorted(
        (time_to_minutes(s.start_time), time_to_minutes(s.end_time)) for s in hours.unavailable_slots
    )

    slots: list[MemberSlot] = []
    cursor = time_to_minutes(hours.start_time)

    def emit_until(limit: int) -> None:
        nonlocal cursor
        while cursor + SLOT_GRANULARITY <= limit:
            slots.append(
                MemberSlot(
                    date=day,
                    start_time=minutes_to_time(cursor),
                    end_time=minutes_to_time(cursor + SLOT_GRANULARITY),
                )
            )
            cursor += SLOT_GRANULARITY

    for blocked_start, blocked_end in blocked:
        emit_until(blocked_start)
        cursor = max(cursor, blocked_end)
    emit_until(work_end)
    return slots


def apply_blackouts(
    slots: Iterable[MemberSlot],
    member_id: str,
    district_blackouts: Iterable[DistrictBlackout] = (),
    individual_blackouts: Iterable[IndividualBlackout] = (),
) -> list[MemberSlot]:
    """Drop micro-slots that fall on a district blackout or the member's own blackout."""
    district = list(district_blackouts)
    personal = [b for b in individual_blackouts if b.user_id == member_id]
    if not district and not personal:
        return list(slots)

    kept = []
    for slot in slots:
        if any(b.covers(slot.date) for b in district):
            continue
        start = time_to_minutes(slot.start_time)
        end = time_to_minutes(slot.end_time)
        if any(_blocks(b, slot.date, start, end) for b in personal):
            continue
        kept.append(slot)
    return kept


def _blocks(blackout: IndividualBlackout, day: dt.date, start: int, end: int) -> bool:
    if not blackout.covers(day):
        return False
    if blackout.start_time is None or blackout.end_time is None:
        return True
    return start < time_to_minutes(blackout.end_time) and time_to_minutes(blackout.start_time) < end
