"""Lifespan management for the FastAPI application.

Builds the team directory, the meeting store and the meeting service on
startup and tears them down on shutdown.
"""

import logging
import os
from dataclasses import dataclass

import redis.asyncio as redis
from redis.asyncio import BlockingConnectionPool as RedisConnectionPool

from iepsched import state
from iepsched.config import get_settings
from iepsched.directory import TeamDirectory
from iepsched.meetings import InMemoryMeetingStore, MeetingService, MeetingStore, RedisMeetingStore

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    redis_client: redis.Redis | None = None
    store: MeetingStore | None = None
    team_directory: TeamDirectory | None = None
    meeting_service: MeetingService | None = None


async def init_redis() -> redis.Redis:
    """Initialize Redis connection with connection pool.

    Returns:
        Configured Redis client.
    """
    settings = get_settings()

    redis_pool = RedisConnectionPool(
        host=settings.redis.host,
        port=settings.redis.port,
        password=settings.redis.password if settings.redis.password else None,
        max_connections=settings.redis.max_connections,
        timeout=settings.redis.pool_timeout_sec,
        socket_timeout=settings.redis.socket_timeout,
        socket_connect_timeout=settings.redis.socket_connect_timeout,
        decode_responses=True,
    )
    redis_client = redis.Redis(connection_pool=redis_pool)

    if settings.debug.redis:
        logging.getLogger("redis").setLevel(logging.DEBUG)

    return redis_client


def init_directory() -> TeamDirectory:
    """Load the team directory from the configured seed file, or start empty."""
    seed_path = get_settings().directory.seed_path
    if seed_path and os.path.exists(seed_path):
        return TeamDirectory.from_file(seed_path)
    if seed_path:
        logger.warning("Directory seed file %s not found, starting with an empty directory", seed_path)
    return TeamDirectory()


async def setup_resources() -> LifespanResources:
    """Set up all shared resources.

    Returns:
        LifespanResources containing all initialized resources.
    """
    settings = get_settings()
    resources = LifespanResources()

    if settings.store.backend == "redis":
        resources.redis_client = await init_redis()
        resources.store = RedisMeetingStore(resources.redis_client, settings.store.key_prefix)
    else:
        resources.store = InMemoryMeetingStore()

    resources.team_directory = init_directory()
    resources.meeting_service = MeetingService(resources.store, settings.scheduling)
    logger.info(
        "Scheduling service ready (store=%s, members=%d)",
        settings.store.backend,
        len(resources.team_directory),
    )

    state.team_directory = resources.team_directory
    state.meeting_service = resources.meeting_service

    return resources


async def cleanup_resources(resources: LifespanResources) -> None:
    """Clean up all resources on shutdown.

    Args:
        resources: The resources to clean up.
    """
    if resources.redis_client:
        await resources.redis_client.aclose()

    state.team_directory = None
    state.meeting_service = None
