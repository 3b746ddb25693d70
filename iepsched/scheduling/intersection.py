import datetime as dt
import logging
from collections.abc import Iterable, Sequence

from iepsched.directory import TeamDirectory
from iepsched.errors import BadRequestError
from iepsched.models.availability import AvailabilityResult, MemberAvailability, MicroSlot
from iepsched.models.team import DistrictBlackout, IndividualBlackout, TeamMember
from iepsched.scheduling.availability import apply_blackouts, generate_member_slots
from iepsched.scheduling.slot_finder import find_common_blocks, find_duration_fit_slots
from iepsched.scheduling.times import iter_dates, time_to_minutes

logger = logging.getLogger(__name__)


def intersect(
    members: Sequence[TeamMember],
    start_date: dt.date,
    end_date: dt.date,
    district_blackouts: Iterable[DistrictBlackout] = (),
    individual_blackouts: Iterable[IndividualBlackout] = (),
) -> AvailabilityResult:
    """Combine every member's micro-slots over a date range.

    A micro-slot is common when the number of members free during it equals the
    number of members requested.
    """
    district = list(district_blackouts)
    personal = list(individual_blackouts)
    individual: list[MemberAvailability] = []
    by_key: dict[tuple[dt.date, str, str], MicroSlot] = {}

    for member in members:
        member_slots = []
        for day in iter_dates(start_date, end_date):
            day_slots = apply_blackouts(generate_member_slots(member, day), member.id, district, personal)
            member_slots.extend(day_slots)
            for slot in day_slots:
                key = (slot.date, slot.start_time, slot.end_time)
                micro = by_key.get(key)
                if micro is None:
                    micro = by_key[key] = MicroSlot(
                        date=slot.date, start_time=slot.start_time, end_time=slot.end_time
                    )
                micro.available_members.append(member.id)
        individual.append(MemberAvailability(member_id=member.id, member_name=member.name, slots=member_slots))

    all_slots = sorted(by_key.values(), key=lambda s: (s.date, time_to_minutes(s.start_time)))
    for micro in all_slots:
        micro.is_common = len(micro.available_members) == len(members)
    common_slots = [s for s in all_slots if s.is_common]

    return AvailabilityResult(
        individual_availability=individual,
        common_slots=common_slots,
        all_slots=all_slots,
    )


def calculate_availability(
    directory: TeamDirectory,
    participant_ids: Sequence[str],
    start_date: dt.date,
    end_date: dt.date,
    duration_minutes: int,
    max_lookahead_days: int = 90,
) -> AvailabilityResult:
    """Find every window where all participants are free for duration_minutes.

    Raises:
        BadRequestError: Empty participant list, inverted or oversized date
            range, or a non-positive duration.
        NotFoundError: A participant ID is not in the directory.
    """
    if not participant_ids:
        raise BadRequestError(detail="participant_ids must not be empty")
    if start_date > end_date:
        raise BadRequestError(
            detail=f"start_date {start_date} is after end_date {end_date}",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )
    if duration_minutes <= 0:
        raise BadRequestError(detail="duration_minutes must be positive", duration_minutes=duration_minutes)
    span = (end_date - start_date).days + 1
    if span > max_lookahead_days:
        raise BadRequestError(
            detail=f"date range covers {span} days, limit is {max_lookahead_days}",
            error_code="RANGE_TOO_LONG",
        )

    members = directory.resolve(list(dict.fromkeys(participant_ids)))
    result = intersect(
        members,
        start_date,
        end_date,
        directory.district_blackouts,
        directory.individual_blackouts,
    )
    result.common_blocks = find_common_blocks(result.common_slots)
    result.bookable_slots = find_duration_fit_slots(result.common_slots, duration_minutes)
    logger.info(
        "Availability for %d members %s..%s (%d min): %d common micro-slots, %d bookable slots",
        len(members),
        start_date,
        end_date,
        duration_minutes,
        len(result.common_slots),
        len(result.bookable_slots),
    )
    return result
