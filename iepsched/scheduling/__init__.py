"""Team-availability engine: per-member micro-slots, intersection, duration fit."""

from iepsched.scheduling.availability import apply_blackouts, generate_member_slots
from iepsched.scheduling.intersection import calculate_availability, intersect
from iepsched.scheduling.slot_finder import (
    STANDARD_DURATIONS,
    duration_options,
    find_common_blocks,
    find_duration_fit_slots,
)
from iepsched.scheduling.times import SLOT_GRANULARITY

__all__ = [
    "SLOT_GRANULARITY",
    "STANDARD_DURATIONS",
    "apply_blackouts",
    "calculate_availability",
    "duration_options",
    "find_common_blocks",
    "find_duration_fit_slots",
    "generate_member_slots",
    "intersect",
]
