"""Meeting lifecycle and RSVP/proposal transitions.

Every function takes the current meeting and returns a new one with
``version`` bumped; the input is never modified. Lifecycle::

    pending_scheduling --schedule--> scheduled --cancel--> cancelled
                                     scheduled --edit/adopt--> scheduled (RSVPs reset)

Cancelled meetings reject every transition.
"""

import datetime as dt
from collections.abc import Sequence
from typing import Any

from iepsched.errors import BadRequestError, ConflictError, NotFoundError
from iepsched.models.meetings import (
    AlternativeProposal,
    Meeting,
    MeetingRevision,
    ParticipantRSVP,
    ProposalVote,
)

SCHEDULE_FIELDS = ("date", "time", "duration_minutes")
EDITABLE_FIELDS = (
    "student_id",
    "student_name",
    "meeting_type",
    "custom_meeting_type",
    "team_member_ids",
    "date",
    "time",
    "duration_minutes",
    "notes",
)
RESPONSE_STATUSES = ("Accepted", "Declined")
VOTE_CHOICES = ("AcceptAlternative", "PreferOriginal")


def new_participants(member_ids: Sequence[str]) -> list[ParticipantRSVP]:
    return [ParticipantRSVP(team_member_id=member_id) for member_id in member_ids]


def ensure_active(meeting: Meeting) -> None:
    if meeting.status == "cancelled":
        raise ConflictError(
            detail=f"Meeting {meeting.id} is cancelled",
            error_code="MEETING_CANCELLED",
            meeting_id=meeting.id,
        )


def ensure_scheduled(meeting: Meeting) -> None:
    ensure_active(meeting)
    if meeting.status != "scheduled":
        raise ConflictError(
            detail=f"Meeting {meeting.id} has no time slot yet",
            error_code="MEETING_NOT_SCHEDULED",
            meeting_id=meeting.id,
        )


def require_rsvp(meeting: Meeting, member_id: str) -> ParticipantRSVP:
    rsvp = meeting.rsvp_of(member_id)
    if rsvp is None:
        raise NotFoundError(
            detail=f"Team member {member_id} is not invited to meeting {meeting.id}",
            error_code="PARTICIPANT_NOT_FOUND",
            meeting_id=meeting.id,
            member_id=member_id,
        )
    return rsvp


def require_proposal(meeting: Meeting, proposal_id: str) -> AlternativeProposal:
    proposal = meeting.proposal(proposal_id)
    if proposal is None:
        raise NotFoundError(
            detail=f"Proposal {proposal_id} not found on meeting {meeting.id}",
            error_code="PROPOSAL_NOT_FOUND",
            meeting_id=meeting.id,
            proposal_id=proposal_id,
        )
    return proposal


def _next(meeting: Meeting) -> Meeting:
    updated = meeting.model_copy(deep=True)
    updated.version += 1
    return updated


def _record_revision(meeting: Meeting, now: dt.datetime) -> None:
    if meeting.status != "scheduled":
        return
    meeting.history.append(
        MeetingRevision(
            version=meeting.version - 1,
            replaced_at=now,
            date=meeting.date,
            time=meeting.time,
            duration_minutes=meeting.duration_minutes,
            team_member_ids=list(meeting.team_member_ids),
            participants=[p.model_copy() for p in meeting.participants],
        )
    )


def _realign_votes(proposal: AlternativeProposal, member_ids: Sequence[str]) -> None:
    existing = {v.team_member_id: v for v in proposal.votes}
    proposal.votes = [existing.get(m) or ProposalVote(team_member_id=m) for m in member_ids]


def _reset_invitations(meeting: Meeting) -> None:
    meeting.participants = new_participants(meeting.team_member_ids)
    for proposal in meeting.alternative_proposals:
        _realign_votes(proposal, meeting.team_member_ids)


def _promote_if_complete(meeting: Meeting) -> None:
    if meeting.status == "pending_scheduling" and None not in (
        meeting.date,
        meeting.time,
        meeting.duration_minutes,
    ):
        meeting.status = "scheduled"


def schedule(
    meeting: Meeting,
    date: dt.date,
    time: str,
    duration_minutes: int | None,
    now: dt.datetime,
) -> Meeting:
    """Pin the meeting to a chosen slot; every RSVP starts over at Pending."""
    ensure_active(meeting)
    duration = duration_minutes if duration_minutes is not None else meeting.duration_minutes
    if duration is None:
        raise BadRequestError(
            detail=f"Meeting {meeting.id} needs duration_minutes to be scheduled",
            meeting_id=meeting.id,
        )
    updated = _next(meeting)
    _record_revision(updated, now)
    updated.date = date
    updated.time = time
    updated.duration_minutes = duration
    updated.status = "scheduled"
    updated.updated_at = now
    _reset_invitations(updated)
    return updated


def edit(meeting: Meeting, changes: dict[str, Any], now: dt.datetime) -> Meeting:
    """Replace meeting details and reset every RSVP for the (new) invite list."""
    ensure_active(meeting)
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise BadRequestError(detail=f"Fields cannot be edited: {', '.join(sorted(unknown))}")
    updated = _next(meeting)
    _record_revision(updated, now)
    for field, value in changes.items():
        setattr(updated, field, value)
    updated.updated_at = now
    _promote_if_complete(updated)
    _reset_invitations(updated)
    return updated


def respond(
    meeting: Meeting,
    member_id: str,
    status: str,
    note: str | None,
    now: dt.datetime,
) -> Meeting:
    """Accept or decline; members may change their answer until cancellation."""
    if status not in RESPONSE_STATUSES:
        raise BadRequestError(
            detail=f"RSVP status must be one of {', '.join(RESPONSE_STATUSES)}, got {status}",
            error_code="INVALID_RSVP_STATUS",
        )
    ensure_scheduled(meeting)
    require_rsvp(meeting, member_id)
    updated = _next(meeting)
    rsvp = updated.rsvp_of(member_id)
    rsvp.status = status
    rsvp.invitation_status = status
    rsvp.note = note or rsvp.note
    rsvp.responded_at = now
    return updated


def propose(
    meeting: Meeting,
    member_id: str,
    proposed_date: dt.date,
    proposed_time: str,
    note: str | None,
    proposal_id: str,
    now: dt.datetime,
) -> Meeting:
    """Record an alternative slot and mark the proposer as ProposedNewTime."""
    ensure_scheduled(meeting)
    require_rsvp(meeting, member_id)
    updated = _next(meeting)
    rsvp = updated.rsvp_of(member_id)
    rsvp.status = "ProposedNewTime"
    rsvp.invitation_status = "ProposedNewTime"
    rsvp.note = note or rsvp.note
    rsvp.responded_at = now
    updated.alternative_proposals.append(
        AlternativeProposal(
            proposal_id=proposal_id,
            proposed_date=proposed_date,
            proposed_time=proposed_time,
            proposed_by_member_id=member_id,
            proposed_at=now,
            note=note,
            votes=[ProposalVote(team_member_id=m) for m in updated.team_member_ids],
        )
    )
    return updated


def vote(
    meeting: Meeting,
    proposal_id: str,
    member_id: str,
    choice: str,
    now: dt.datetime,
    allow_revote: bool = True,
) -> Meeting:
    """Cast a vote on one proposal; other proposals keep their votes."""
    if choice not in VOTE_CHOICES:
        raise BadRequestError(
            detail=f"Vote must be one of {', '.join(VOTE_CHOICES)}, got {choice}",
            error_code="INVALID_VOTE",
        )
    ensure_scheduled(meeting)
    proposal = require_proposal(meeting, proposal_id)
    require_rsvp(meeting, member_id)
    current = proposal.vote_of(member_id)
    if current is None:
        raise NotFoundError(
            detail=f"Team member {member_id} has no vote on proposal {proposal_id}",
            error_code="VOTER_NOT_FOUND",
            proposal_id=proposal_id,
            member_id=member_id,
        )
    if current.vote != "Pending" and not allow_revote:
        raise ConflictError(
            detail=f"Team member {member_id} already voted on proposal {proposal_id}",
            error_code="VOTE_ALREADY_CAST",
            proposal_id=proposal_id,
            member_id=member_id,
        )
    updated = _next(meeting)
    ballot = updated.proposal(proposal_id).vote_of(member_id)
    ballot.vote = choice
    ballot.voted_at = now
    rsvp = updated.rsvp_of(member_id)
    rsvp.status = "VotedOnAlternative"
    rsvp.responded_at = now
    return updated


def adopt(meeting: Meeting, proposal_id: str, now: dt.datetime) -> Meeting:
    """Move the meeting to a proposal's slot; this counts as an edit."""
    ensure_scheduled(meeting)
    proposal = require_proposal(meeting, proposal_id)
    updated = _next(meeting)
    _record_revision(updated, now)
    updated.date = proposal.proposed_date
    updated.time = proposal.proposed_time
    updated.alternative_proposals = [
        p for p in updated.alternative_proposals if p.proposal_id != proposal_id
    ]
    updated.updated_at = now
    _reset_invitations(updated)
    return updated


def cancel(meeting: Meeting) -> Meeting:
    ensure_scheduled(meeting)
    updated = _next(meeting)
    updated.status = "cancelled"
    return updated
