import re
import datetime as dt
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, model_validator

TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def validate_hhmm(v: str) -> str:
    if not TIME_RE.match(v):
        raise ValueError(f"invalid time format: {v}")
    return v


HHMM = Annotated[str, AfterValidator(validate_hhmm)]


class TimeRange(BaseModel):
    start_time: HHMM
    end_time: HHMM

    @model_validator(mode="after")
    def check_order(self) -> "TimeRange":
        # zero-padded HH:MM strings order the same way as minutes
        if self.start_time >= self.end_time:
            raise ValueError(f"start_time {self.start_time} must be before end_time {self.end_time}")
        return self


class WorkingHours(TimeRange):
    unavailable_slots: list[TimeRange] = []


class TeamMember(BaseModel):
    id: str
    name: str
    role: str
    email: str | None = None
    weekly_schedule: dict[Weekday, WorkingHours] = {}


class DistrictBlackout(BaseModel):
    id: str
    title: str
    start_date: dt.date
    end_date: dt.date
    type: Literal["holiday", "pd_day", "break", "other"] = "other"
    notes: str | None = None

    def covers(self, day: dt.date) -> bool:
        return self.start_date <= day <= self.end_date


class IndividualBlackout(BaseModel):
    id: str
    user_id: str
    title: str
    start_date: dt.date
    end_date: dt.date
    start_time: HHMM | None = None
    end_time: HHMM | None = None
    reason: Literal["PTO", "meeting", "appointment", "other"] = "other"
    notes: str | None = None

    @model_validator(mode="after")
    def check_times(self) -> "IndividualBlackout":
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must be given together")
        if self.start_time is not None and self.start_time >= self.end_time:
            raise ValueError(f"start_time {self.start_time} must be before end_time {self.end_time}")
        return self

    def covers(self, day: dt.date) -> bool:
        return self.start_date <= day <= self.end_date


class TeamMembersResponse(BaseModel):
    members: list[TeamMember]
