"""Meeting collection storage.

The in-memory store is the session-scoped default. The Redis store keeps each
meeting as a JSON document plus a sorted-set index ordered by creation time.

``save`` takes the version the caller read. When given, the write only lands
if the stored meeting is still at that version; otherwise ConflictError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Final

import redis.asyncio as redis
from redis.exceptions import WatchError

from iepsched.errors import ConflictError
from iepsched.models.meetings import Meeting

logger = logging.getLogger(__name__)

INDEX_SUFFIX: Final[str] = "meetings:index"


def _version_conflict(meeting_id: str, expected: int, current: int | None) -> ConflictError:
    return ConflictError(
        detail=f"Meeting {meeting_id} is at version {current}, not {expected}",
        error_code="VERSION_MISMATCH",
        meeting_id=meeting_id,
        current_version=current,
    )


class MeetingStore(ABC):
    @abstractmethod
    async def get(self, meeting_id: str) -> Meeting | None: ...

    @abstractmethod
    async def list_all(self) -> list[Meeting]: ...

    @abstractmethod
    async def save(self, meeting: Meeting, expected_version: int | None = None) -> None: ...

    async def ping(self) -> bool:
        return True


class InMemoryMeetingStore(MeetingStore):
    def __init__(self) -> None:
        self._meetings: dict[str, Meeting] = {}

    async def get(self, meeting_id: str) -> Meeting | None:
        return self._meetings.get(meeting_id)

    async def list_all(self) -> list[Meeting]:
        return list(self._meetings.values())

    async def save(self, meeting: Meeting, expected_version: int | None = None) -> None:
        if expected_version is not None:
            stored = self._meetings.get(meeting.id)
            current = stored.version if stored else None
            if current != expected_version:
                raise _version_conflict(meeting.id, expected_version, current)
        self._meetings[meeting.id] = meeting


class RedisMeetingStore(MeetingStore):
    """Meetings shared by every worker process through one Redis.

    Versioned saves WATCH the meeting key, so a write from another process
    between the version check and EXEC aborts this one.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "iepsched") -> None:
        self.redis_client = redis_client
        self.key_prefix = key_prefix

    def _key(self, meeting_id: str) -> str:
        return f"{self.key_prefix}:meeting:{meeting_id}"

    @property
    def _index_key(self) -> str:
        return f"{self.key_prefix}:{INDEX_SUFFIX}"

    async def get(self, meeting_id: str) -> Meeting | None:
        raw = await self.redis_client.get(self._key(meeting_id))
        if raw is None:
            return None
        return Meeting.model_validate_json(raw)

    async def list_all(self) -> list[Meeting]:
        ids = await self.redis_client.zrange(self._index_key, 0, -1)
        if not ids:
            return []
        raws = await self.redis_client.mget([self._key(_decode(i)) for i in ids])
        return [Meeting.model_validate_json(raw) for raw in raws if raw is not None]

    async def save(self, meeting: Meeting, expected_version: int | None = None) -> None:
        key = self._key(meeting.id)
        async with self.redis_client.pipeline(transaction=True) as pipe:
            if expected_version is not None:
                await pipe.watch(key)
                raw = await pipe.get(key)
                current = Meeting.model_validate_json(raw).version if raw is not None else None
                if current != expected_version:
                    await pipe.unwatch()
                    raise _version_conflict(meeting.id, expected_version, current)
                pipe.multi()
            pipe.set(key, meeting.model_dump_json())
            pipe.zadd(self._index_key, {meeting.id: meeting.created_at.timestamp()})
            try:
                await pipe.execute()
            except WatchError:
                logger.warning("Meeting %s changed during save of version %d", meeting.id, meeting.version)
                raise ConflictError(
                    detail=f"Meeting {meeting.id} was modified concurrently",
                    error_code="VERSION_MISMATCH",
                    meeting_id=meeting.id,
                ) from None
        logger.debug("Saved meeting %s version %d", meeting.id, meeting.version)

    async def ping(self) -> bool:
        try:
            await self.redis_client.ping()
            return True
        except Exception as e:
            logger.warning("Redis ping failed: %s", e)
            return False


def _decode(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value
