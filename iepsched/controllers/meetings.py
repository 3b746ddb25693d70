import logging

from fastapi import APIRouter, Query

from iepsched.dependencies import Directory, Meetings
from iepsched.models.meetings import (
    Meeting,
    MeetingCreate,
    MeetingsListResponse,
    MeetingUpdate,
    ProposalCreate,
    RSVPRequest,
    ScheduleRequest,
    VersionedRequest,
    VoteRequest,
)

logger = logging.getLogger("iepsched.controllers.meetings")
router = APIRouter(prefix="/meetings", tags=["meetings"])


@router.post("", status_code=201, response_model=Meeting)
async def create_meeting(req: MeetingCreate, service: Meetings, directory: Directory) -> Meeting:
    logger.info("POST /meetings student=%s members=%d", req.student_id, len(req.team_member_ids))
    directory.resolve(req.team_member_ids)
    return await service.create_meeting(req)


@router.get("", response_model=MeetingsListResponse)
async def list_meetings(
    service: Meetings,
    member_id: str | None = Query(None, description="Only meetings this member attends or organizes"),
) -> MeetingsListResponse:
    meetings = await service.list_meetings(member_id=member_id)
    return MeetingsListResponse(meetings=meetings, total=len(meetings))


@router.get("/{meeting_id}", response_model=Meeting)
async def get_meeting(meeting_id: str, service: Meetings) -> Meeting:
    return await service.get_meeting(meeting_id)


@router.post("/{meeting_id}/schedule", response_model=Meeting)
async def schedule_meeting(meeting_id: str, req: ScheduleRequest, service: Meetings) -> Meeting:
    logger.info("POST /meetings/%s/schedule date=%s time=%s", meeting_id, req.date, req.time)
    return await service.schedule_meeting(
        meeting_id, req.date, req.time, req.duration_minutes, req.expected_version
    )


@router.put("/{meeting_id}", response_model=Meeting)
async def update_meeting(
    meeting_id: str, req: MeetingUpdate, service: Meetings, directory: Directory
) -> Meeting:
    logger.info("PUT /meetings/%s", meeting_id)
    if req.team_member_ids is not None:
        directory.resolve(req.team_member_ids)
    return await service.update_meeting(meeting_id, req)


@router.post("/{meeting_id}/rsvp", response_model=Meeting)
async def set_rsvp(meeting_id: str, req: RSVPRequest, service: Meetings) -> Meeting:
    logger.info("POST /meetings/%s/rsvp member=%s status=%s", meeting_id, req.member_id, req.status)
    return await service.set_rsvp(meeting_id, req.member_id, req.status, req.note, req.expected_version)


@router.post("/{meeting_id}/proposals", status_code=201, response_model=Meeting)
async def add_alternative_proposal(meeting_id: str, req: ProposalCreate, service: Meetings) -> Meeting:
    logger.info(
        "POST /meetings/%s/proposals member=%s date=%s time=%s",
        meeting_id,
        req.member_id,
        req.proposed_date,
        req.proposed_time,
    )
    return await service.add_alternative_proposal(meeting_id, req)


@router.post("/{meeting_id}/proposals/{proposal_id}/votes", response_model=Meeting)
async def vote_on_alternative(
    meeting_id: str, proposal_id: str, req: VoteRequest, service: Meetings
) -> Meeting:
    return await service.vote_on_alternative(
        meeting_id, proposal_id, req.member_id, req.vote, req.expected_version
    )


@router.post("/{meeting_id}/proposals/{proposal_id}/adopt", response_model=Meeting)
async def adopt_alternative(
    meeting_id: str, proposal_id: str, service: Meetings, req: VersionedRequest | None = None
) -> Meeting:
    logger.info("POST /meetings/%s/proposals/%s/adopt", meeting_id, proposal_id)
    return await service.adopt_alternative(meeting_id, proposal_id, req.expected_version if req else None)


@router.post("/{meeting_id}/cancel", response_model=Meeting)
async def cancel_meeting(meeting_id: str, service: Meetings, req: VersionedRequest | None = None) -> Meeting:
    logger.info("POST /meetings/%s/cancel", meeting_id)
    return await service.cancel_meeting(meeting_id, req.expected_version if req else None)
