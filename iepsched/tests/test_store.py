"""Tests for meeting stores."""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import fakeredis
import fakeredis.aioredis
import pytest

from iepsched.errors import ConflictError
from iepsched.meetings import InMemoryMeetingStore, MeetingService, RedisMeetingStore
from iepsched.meetings.rsvp import new_participants
from iepsched.models.meetings import Meeting, MeetingCreate

T0 = datetime(2024, 8, 30, 8, 0, tzinfo=UTC)


def _meeting(meeting_id, created_at=T0):
    return Meeting(
        id=meeting_id,
        student_id="s1",
        student_name="Leo Gonzalez",
        meeting_type="Triennial IEP",
        team_member_ids=["tm1", "tm2"],
        date=date(2024, 9, 3),
        time="09:00",
        duration_minutes=60,
        status="scheduled",
        created_by_user_id="tm1",
        participants=new_participants(["tm1", "tm2"]),
        created_at=created_at,
        updated_at=created_at,
    )


class TestInMemoryMeetingStore:
    @pytest.mark.asyncio
    async def test_save_get_and_list(self):
        store = InMemoryMeetingStore()
        await store.save(_meeting("m1"))
        await store.save(_meeting("m2"))

        assert (await store.get("m1")).id == "m1"
        assert await store.get("missing") is None
        assert [m.id for m in await store.list_all()] == ["m1", "m2"]
        assert await store.ping() is True


class TestRedisMeetingStore:
    @pytest.mark.asyncio
    async def test_round_trips_meeting(self, redis_store):
        meeting = _meeting("m1")

        await redis_store.save(meeting)

        assert await redis_store.get("m1") == meeting
        assert await redis_store.get("missing") is None

    @pytest.mark.asyncio
    async def test_uses_key_prefix(self, redis_store, fake_redis):
        await redis_store.save(_meeting("m1"))

        assert await fake_redis.exists("test:meeting:m1") == 1
        assert await fake_redis.zscore("test:meetings:index", "m1") == T0.timestamp()

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_creation(self, redis_store):
        await redis_store.save(_meeting("late", created_at=T0 + timedelta(hours=1)))
        await redis_store.save(_meeting("early"))

        assert [m.id for m in await redis_store.list_all()] == ["early", "late"]

    @pytest.mark.asyncio
    async def test_resave_replaces_document(self, redis_store):
        meeting = _meeting("m1")
        await redis_store.save(meeting)

        changed = meeting.model_copy(update={"status": "cancelled", "version": 2})
        await redis_store.save(changed)

        stored = await redis_store.get("m1")
        assert stored.status == "cancelled"
        assert stored.version == 2
        assert len(await redis_store.list_all()) == 1

    @pytest.mark.asyncio
    async def test_empty_store_lists_nothing(self, redis_store):
        assert await redis_store.list_all() == []

    @pytest.mark.asyncio
    async def test_ping(self, redis_store):
        assert await redis_store.ping() is True

    @pytest.mark.asyncio
    async def test_ping_failure_is_reported(self):
        client = AsyncMock()
        client.ping.side_effect = ConnectionError("refused")

        assert await RedisMeetingStore(client).ping() is False

    @pytest.mark.asyncio
    async def test_service_on_redis_store(self, redis_store, clock):
        service = MeetingService(redis_store, clock=clock)
        meeting = await service.create_meeting(
            MeetingCreate(
                student_id="s2",
                student_name="Maya Patel",
                meeting_type="Other",
                custom_meeting_type="Transition Planning",
                team_member_ids=["tm1", "tm2"],
                created_by_user_id="tm1",
                date=date(2024, 9, 4),
                time="10:00",
                duration_minutes=30,
            )
        )

        await service.set_rsvp(meeting.id, "tm2", "Declined", note="Testing window")

        stored = await redis_store.get(meeting.id)
        assert stored.rsvp_of("tm2").status == "Declined"
        assert stored.rsvp_of("tm2").note == "Testing window"
        assert stored.display_type == "Transition Planning"


class TestVersionedSave:
    """A save that names the version it read must not overwrite a newer one."""

    @pytest.mark.asyncio
    async def test_in_memory_rejects_stale_version(self):
        store = InMemoryMeetingStore()
        meeting = _meeting("m1")
        await store.save(meeting)
        await store.save(meeting.model_copy(update={"version": 2}), expected_version=1)

        with pytest.raises(ConflictError) as exc_info:
            await store.save(meeting.model_copy(update={"version": 2, "notes": "stale"}), expected_version=1)

        assert exc_info.value.context["current_version"] == 2
        assert (await store.get("m1")).notes is None

    @pytest.mark.asyncio
    async def test_redis_rejects_stale_version(self, redis_store):
        meeting = _meeting("m1")
        await redis_store.save(meeting)
        await redis_store.save(meeting.model_copy(update={"version": 2}), expected_version=1)

        with pytest.raises(ConflictError) as exc_info:
            await redis_store.save(
                meeting.model_copy(update={"version": 2, "status": "cancelled"}), expected_version=1
            )

        assert exc_info.value.error_code == "VERSION_MISMATCH"
        stored = await redis_store.get("m1")
        assert stored.status == "scheduled"
        assert stored.version == 2

    @pytest.mark.asyncio
    async def test_redis_rejects_versioned_save_of_missing_meeting(self, redis_store):
        with pytest.raises(ConflictError):
            await redis_store.save(_meeting("m1").model_copy(update={"version": 2}), expected_version=1)
        assert await redis_store.get("m1") is None

    @pytest.mark.asyncio
    async def test_redis_write_between_check_and_exec_aborts_save(self):
        server = fakeredis.FakeServer()
        store = RedisMeetingStore(fakeredis.aioredis.FakeRedis(server=server, decode_responses=True), "test")
        other_worker = fakeredis.FakeRedis(server=server, decode_responses=True)
        meeting = _meeting("m1")
        await store.save(meeting)
        newer = meeting.model_copy(update={"version": 2, "notes": "from worker B"})

        def read_then_race(raw):
            # another process commits version 2 right after this save read version 1
            other_worker.set("test:meeting:m1", newer.model_dump_json())
            return Meeting.model_validate_json(raw)

        fake_model = MagicMock()
        fake_model.model_validate_json.side_effect = read_then_race
        with patch("iepsched.meetings.store.Meeting", fake_model):
            with pytest.raises(ConflictError) as exc_info:
                await store.save(meeting.model_copy(update={"version": 2, "notes": "from worker A"}), expected_version=1)

        assert exc_info.value.error_code == "VERSION_MISMATCH"
        assert (await store.get("m1")).notes == "from worker B"
