"""Meeting service: the operations the UI layer calls on the meeting collection.

The service owns a MeetingStore passed in by the caller. Mutations on one
meeting ID are serialized by a per-meeting lock, and every mutation can carry
the version the caller last saw so stale writes fail with ConflictError.
"""

import asyncio
import logging
import secrets
import string
from collections import Counter
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

from iepsched.config import SchedulingSettings
from iepsched.errors import APIError, ConflictError, NotFoundError
from iepsched.meetings import rsvp
from iepsched.meetings.store import MeetingStore
from iepsched.models.meetings import Meeting, MeetingCreate, MeetingUpdate, ProposalCreate

logger = logging.getLogger("iepsched.meetings")

Clock = Callable[[], datetime]


def _generate_id(prefix: str, length: int = 10) -> str:
    chars = string.ascii_lowercase + string.digits
    return prefix + "".join(secrets.choice(chars) for _ in range(length))


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MeetingService:
    def __init__(
        self,
        store: MeetingStore,
        settings: SchedulingSettings | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self.store = store
        self.settings = settings or SchedulingSettings()
        self.clock = clock
        # one lock per meeting with a writer in flight; dropped when the last waiter leaves
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: Counter[str] = Counter()

    async def get_meeting(self, meeting_id: str) -> Meeting:
        meeting = await self.store.get(meeting_id)
        if meeting is None:
            raise NotFoundError(
                detail=f"Meeting {meeting_id} not found",
                error_code="MEETING_NOT_FOUND",
                meeting_id=meeting_id,
            )
        return meeting

    async def list_meetings(self, member_id: str | None = None) -> list[Meeting]:
        """All meetings, or those a member is invited to or organizes."""
        meetings = await self.store.list_all()
        if member_id is None:
            return meetings
        return [
            m for m in meetings if member_id in m.team_member_ids or m.created_by_user_id == member_id
        ]

    async def create_meeting(self, req: MeetingCreate) -> Meeting:
        now = self.clock()
        complete = None not in (req.date, req.time, req.duration_minutes)
        meeting = Meeting(
            id=_generate_id("mtg_"),
            student_id=req.student_id,
            student_name=req.student_name,
            meeting_type=req.meeting_type,
            custom_meeting_type=req.custom_meeting_type,
            team_member_ids=req.team_member_ids,
            date=req.date,
            time=req.time,
            duration_minutes=req.duration_minutes,
            status="scheduled" if complete else "pending_scheduling",
            notes=req.notes,
            created_by_user_id=req.created_by_user_id,
            participants=rsvp.new_participants(req.team_member_ids),
            created_at=now,
            updated_at=now,
        )
        await self.store.save(meeting)
        logger.info(
            "Created meeting id=%s student=%s members=%d status=%s",
            meeting.id,
            meeting.student_id,
            len(meeting.team_member_ids),
            meeting.status,
        )
        return meeting

    async def schedule_meeting(
        self,
        meeting_id: str,
        date: date,
        time: str,
        duration_minutes: int | None = None,
        expected_version: int | None = None,
    ) -> Meeting:
        return await self._mutate(
            meeting_id,
            expected_version,
            "schedule",
            lambda m, now: rsvp.schedule(m, date, time, duration_minutes, now),
        )

    async def update_meeting(self, meeting_id: str, req: MeetingUpdate) -> Meeting:
        changes = req.model_dump(exclude_unset=True, exclude_none=True, exclude={"expected_version"})
        return await self._mutate(
            meeting_id,
            req.expected_version,
            "update",
            lambda m, now: rsvp.edit(m, changes, now),
        )

    async def set_rsvp(
        self,
        meeting_id: str,
        member_id: str,
        status: str,
        note: str | None = None,
        expected_version: int | None = None,
    ) -> Meeting:
        return await self._mutate(
            meeting_id,
            expected_version,
            f"rsvp member={member_id} status={status}",
            lambda m, now: rsvp.respond(m, member_id, status, note, now),
        )

    async def add_alternative_proposal(self, meeting_id: str, req: ProposalCreate) -> Meeting:
        proposal_id = _generate_id("prop_")
        return await self._mutate(
            meeting_id,
            req.expected_version,
            f"propose member={req.member_id} proposal={proposal_id}",
            lambda m, now: rsvp.propose(
                m, req.member_id, req.proposed_date, req.proposed_time, req.note, proposal_id, now
            ),
        )

    async def vote_on_alternative(
        self,
        meeting_id: str,
        proposal_id: str,
        member_id: str,
        vote: str,
        expected_version: int | None = None,
    ) -> Meeting:
        def apply(m: Meeting, now: datetime) -> Meeting:
            updated = rsvp.vote(m, proposal_id, member_id, vote, now, self.settings.allow_revote)
            if self.settings.auto_adopt_unanimous and updated.proposal(proposal_id).is_unanimous:
                logger.info("Proposal %s on meeting %s is unanimous, adopting", proposal_id, meeting_id)
                updated = rsvp.adopt(updated, proposal_id, now)
            return updated

        return await self._mutate(
            meeting_id,
            expected_version,
            f"vote member={member_id} proposal={proposal_id} vote={vote}",
            apply,
        )

    async def adopt_alternative(
        self,
        meeting_id: str,
        proposal_id: str,
        expected_version: int | None = None,
    ) -> Meeting:
        return await self._mutate(
            meeting_id,
            expected_version,
            f"adopt proposal={proposal_id}",
            lambda m, now: rsvp.adopt(m, proposal_id, now),
        )

    async def cancel_meeting(self, meeting_id: str, expected_version: int | None = None) -> Meeting:
        return await self._mutate(meeting_id, expected_version, "cancel", lambda m, now: rsvp.cancel(m))

    async def _mutate(
        self,
        meeting_id: str,
        expected_version: int | None,
        action: str,
        transition: Callable[[Meeting, datetime], Meeting],
    ) -> Meeting:
        async with self._meeting_lock(meeting_id):
            meeting = await self.get_meeting(meeting_id)
            if expected_version is not None and expected_version != meeting.version:
                raise ConflictError(
                    detail=f"Meeting {meeting_id} is at version {meeting.version}, not {expected_version}",
                    error_code="VERSION_MISMATCH",
                    meeting_id=meeting_id,
                    current_version=meeting.version,
                )
            try:
                updated = transition(meeting, self.clock())
                await self.store.save(updated, expected_version=meeting.version)
            except APIError as e:
                logger.warning("Rejected %s on meeting %s: %s", action, meeting_id, e.detail)
                raise
        logger.info("Meeting %s %s -> version %d status=%s", meeting_id, action, updated.version, updated.status)
        return updated

    @asynccontextmanager
    async def _meeting_lock(self, meeting_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(meeting_id)
        if lock is None:
            lock = self._locks[meeting_id] = asyncio.Lock()
        self._waiters[meeting_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[meeting_id] -= 1
            if not self._waiters[meeting_id]:
                del self._waiters[meeting_id]
                del self._locks[meeting_id]
