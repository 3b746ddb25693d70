import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import json
from datetime import UTC, date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
import fakeredis.aioredis as fakeredis

from iepsched.config import clear_settings_cache
from iepsched.directory import TeamDirectory
from iepsched.meetings import InMemoryMeetingStore, MeetingService, RedisMeetingStore
from iepsched.models.team import TeamMember

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

# 2024-09-02 is a Monday
MONDAY = date(2024, 9, 2)


def _make_member(member_id, start="09:00", end="15:00", unavailable=(), days=WEEKDAYS, name=None):
    hours = {
        "start_time": start,
        "end_time": end,
        "unavailable_slots": [{"start_time": s, "end_time": e} for s, e in unavailable],
    }
    return TeamMember(
        id=member_id,
        name=name or f"Member {member_id}",
        role="Teacher",
        weekly_schedule={day: hours for day in days},
    )


class TickingClock:
    """Returns a strictly increasing UTC time, one minute per call."""

    def __init__(self, start=datetime(2024, 8, 30, 8, 0, tzinfo=UTC)):
        self.now = start

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def make_member():
    return _make_member


@pytest.fixture
def directory():
    return TeamDirectory(
        [
            _make_member("tm1", name="Sarah Miller"),
            _make_member("tm2", name="David Chen"),
            _make_member("tm3", name="Linda Kim"),
            _make_member("tm4", name="Robert Davis"),
        ]
    )


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def service(clock):
    return MeetingService(InMemoryMeetingStore(), clock=clock)


@pytest.fixture
def seed_file(tmp_path, directory):
    path = tmp_path / "team.json"
    path.write_text(
        json.dumps(
            {
                "members": [m.model_dump(mode="json") for m in directory.members()],
                "district_blackouts": [
                    {"id": "b1", "title": "Winter Break", "start_date": "2024-12-23", "end_date": "2025-01-03", "type": "break"}
                ],
            }
        )
    )
    return path


@pytest.fixture
def client(monkeypatch, seed_file):
    monkeypatch.setenv("DIRECTORY_SEED_PATH", str(seed_file))
    monkeypatch.setenv("STORE_BACKEND", "memory")
    clear_settings_cache()

    import iepsched.main as main

    with TestClient(main.app) as c:
        yield c
    clear_settings_cache()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def redis_store(fake_redis):
    return RedisMeetingStore(fake_redis, key_prefix="test")


@pytest.fixture
def redis_client(monkeypatch, seed_file):
    """App client backed by the Redis meeting store."""
    monkeypatch.setenv("DIRECTORY_SEED_PATH", str(seed_file))
    monkeypatch.setenv("STORE_BACKEND", "redis")
    clear_settings_cache()

    import iepsched.lifespan as lifespan
    import iepsched.main as main

    async def fake_init_redis():
        return fakeredis.FakeRedis(decode_responses=True)

    monkeypatch.setattr(lifespan, "init_redis", fake_init_redis)

    with TestClient(main.app) as c:
        yield c
    clear_settings_cache()
