import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from iepsched.models.team import HHMM

MeetingType = Literal["Annual IEP", "Triennial IEP", "30 Day IEP", "Amendment IEP", "Other"]
MeetingStatus = Literal["pending_scheduling", "scheduled", "cancelled"]
RSVPStatus = Literal["Pending", "Accepted", "Declined", "ProposedNewTime", "VotedOnAlternative"]
InvitationStatus = Literal["Pending", "Accepted", "Declined", "ProposedNewTime"]
VoteChoice = Literal["Pending", "AcceptAlternative", "PreferOriginal"]


class ParticipantRSVP(BaseModel):
    team_member_id: str
    # summary field: last response of any kind, including votes
    status: RSVPStatus = "Pending"
    # response to the original invitation only
    invitation_status: InvitationStatus = "Pending"
    note: str | None = None
    responded_at: dt.datetime | None = None


class ProposalVote(BaseModel):
    team_member_id: str
    vote: VoteChoice = "Pending"
    voted_at: dt.datetime | None = None


class AlternativeProposal(BaseModel):
    proposal_id: str
    proposed_date: dt.date
    proposed_time: str
    proposed_by_member_id: str
    proposed_at: dt.datetime
    note: str | None = None
    votes: list[ProposalVote] = []

    def vote_of(self, member_id: str) -> ProposalVote | None:
        return next((v for v in self.votes if v.team_member_id == member_id), None)

    @property
    def is_unanimous(self) -> bool:
        return bool(self.votes) and all(v.vote == "AcceptAlternative" for v in self.votes)


class MeetingRevision(BaseModel):
    """Meeting details as they were before an edit."""

    version: int
    replaced_at: dt.datetime
    date: dt.date | None = None
    time: str | None = None
    duration_minutes: int | None = None
    team_member_ids: list[str]
    participants: list[ParticipantRSVP]


class Meeting(BaseModel):
    id: str
    event_type: Literal["iep_meeting"] = "iep_meeting"
    student_id: str
    student_name: str
    meeting_type: MeetingType
    custom_meeting_type: str | None = None
    team_member_ids: list[str]
    date: dt.date | None = None
    time: str | None = None
    duration_minutes: int | None = None
    status: MeetingStatus = "pending_scheduling"
    notes: str | None = None
    created_by_user_id: str
    participants: list[ParticipantRSVP] = []
    alternative_proposals: list[AlternativeProposal] = []
    version: int = 1
    created_at: dt.datetime
    updated_at: dt.datetime
    history: list[MeetingRevision] = []

    @model_validator(mode="after")
    def check_schedule(self) -> "Meeting":
        if self.status == "scheduled" and None in (self.date, self.time, self.duration_minutes):
            raise ValueError("a scheduled meeting needs date, time and duration_minutes")
        return self

    def rsvp_of(self, member_id: str) -> ParticipantRSVP | None:
        return next((p for p in self.participants if p.team_member_id == member_id), None)

    def proposal(self, proposal_id: str) -> AlternativeProposal | None:
        return next((p for p in self.alternative_proposals if p.proposal_id == proposal_id), None)

    @property
    def display_type(self) -> str:
        if self.meeting_type == "Other" and self.custom_meeting_type:
            return self.custom_meeting_type
        return self.meeting_type


def _unique_ids(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    if not v:
        raise ValueError("team_member_ids must not be empty")
    return list(dict.fromkeys(v))


class MeetingCreate(BaseModel):
    student_id: str
    student_name: str
    meeting_type: MeetingType
    custom_meeting_type: str | None = None
    team_member_ids: list[str]
    created_by_user_id: str
    date: dt.date | None = None
    time: HHMM | None = None
    duration_minutes: int | None = Field(default=None, gt=0)
    notes: str | None = None

    @field_validator("team_member_ids")
    @classmethod
    def validate_members(cls, v: list[str] | None) -> list[str] | None:
        return _unique_ids(v)


class MeetingUpdate(BaseModel):
    """Fields to replace on an existing meeting; omitted fields keep their value."""

    student_id: str | None = None
    student_name: str | None = None
    meeting_type: MeetingType | None = None
    custom_meeting_type: str | None = None
    team_member_ids: list[str] | None = None
    date: dt.date | None = None
    time: HHMM | None = None
    duration_minutes: int | None = Field(default=None, gt=0)
    notes: str | None = None
    expected_version: int | None = None

    @field_validator("team_member_ids")
    @classmethod
    def validate_members(cls, v: list[str] | None) -> list[str] | None:
        return _unique_ids(v)


class ScheduleRequest(BaseModel):
    date: dt.date
    time: HHMM
    duration_minutes: int | None = Field(default=None, gt=0)
    expected_version: int | None = None


class RSVPRequest(BaseModel):
    member_id: str
    status: RSVPStatus
    note: str | None = None
    expected_version: int | None = None


class ProposalCreate(BaseModel):
    member_id: str
    proposed_date: dt.date
    proposed_time: HHMM
    note: str | None = None
    expected_version: int | None = None


class VoteRequest(BaseModel):
    member_id: str
    vote: Literal["AcceptAlternative", "PreferOriginal"]
    expected_version: int | None = None


class VersionedRequest(BaseModel):
    expected_version: int | None = None


class MeetingsListResponse(BaseModel):
    meetings: list[Meeting]
    total: int
