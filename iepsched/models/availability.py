import datetime as dt

from pydantic import BaseModel, Field


class MemberSlot(BaseModel):
    date: dt.date
    start_time: str
    end_time: str


class MicroSlot(BaseModel):
    """One SLOT_GRANULARITY-sized unit with the members free during it."""

    date: dt.date
    start_time: str
    end_time: str
    is_common: bool = False
    available_members: list[str] = []


class AvailableSlot(BaseModel):
    """A bookable window of exactly the requested duration."""

    date: dt.date
    start_time: str
    end_time: str
    is_common: bool = True
    available_members: list[str]


class CommonBlock(BaseModel):
    """A maximal contiguous run of common micro-slots on one date."""

    date: dt.date
    start_time: str
    end_time: str
    duration_minutes: int
    duration_options: list[int] = []


class MemberAvailability(BaseModel):
    member_id: str
    member_name: str
    slots: list[MemberSlot]


class AvailabilityResult(BaseModel):
    individual_availability: list[MemberAvailability]
    common_slots: list[MicroSlot]
    all_slots: list[MicroSlot]
    common_blocks: list[CommonBlock] = []
    bookable_slots: list[AvailableSlot] = []


class AvailabilityRequest(BaseModel):
    participant_ids: list[str]
    start_date: dt.date
    end_date: dt.date
    duration_minutes: int = Field(description="Desired meeting length in minutes")
