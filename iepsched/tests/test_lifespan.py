"""Tests for lifespan management."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from iepsched import state


class TestLifespanResources:
    """Test LifespanResources dataclass."""

    def test_lifespan_resources_defaults(self):
        """Test that LifespanResources has correct defaults."""
        from iepsched.lifespan import LifespanResources

        resources = LifespanResources()
        assert resources.redis_client is None
        assert resources.store is None
        assert resources.team_directory is None
        assert resources.meeting_service is None


class TestInitRedis:
    """Test init_redis function."""

    @pytest.mark.asyncio
    async def test_init_redis_creates_client(self):
        """Test that init_redis creates a Redis client on a pool."""
        from iepsched.lifespan import init_redis

        mock_redis_class = MagicMock()
        mock_client = MagicMock()
        mock_redis_class.return_value = mock_client

        with patch("iepsched.lifespan.redis.Redis", mock_redis_class):
            with patch("iepsched.lifespan.RedisConnectionPool") as mock_pool:
                with patch("iepsched.lifespan.get_settings") as mock_settings:
                    mock_settings.return_value.redis.host = "localhost"
                    mock_settings.return_value.redis.port = 6379
                    mock_settings.return_value.redis.password = ""
                    mock_settings.return_value.redis.max_connections = 10
                    mock_settings.return_value.redis.pool_timeout_sec = 5.0
                    mock_settings.return_value.redis.socket_timeout = 5.0
                    mock_settings.return_value.redis.socket_connect_timeout = 5.0
                    mock_settings.return_value.debug.redis = False

                    result = await init_redis()

        assert result is mock_client
        kwargs = mock_pool.call_args.kwargs
        assert kwargs["host"] == "localhost"
        assert kwargs["password"] is None
        assert kwargs["decode_responses"] is True
        mock_redis_class.assert_called_once_with(connection_pool=mock_pool.return_value)


class TestInitDirectory:
    """Test init_directory function."""

    def test_loads_seed_file(self, seed_file):
        from iepsched.lifespan import init_directory

        with patch("iepsched.lifespan.get_settings") as mock_settings:
            mock_settings.return_value.directory.seed_path = str(seed_file)
            directory = init_directory()

        assert len(directory) == 4
        assert "tm3" in directory
        assert directory.district_blackouts[0].title == "Winter Break"

    def test_missing_seed_file_gives_empty_directory(self, tmp_path):
        from iepsched.lifespan import init_directory

        with patch("iepsched.lifespan.get_settings") as mock_settings:
            mock_settings.return_value.directory.seed_path = str(tmp_path / "nope.json")
            assert len(init_directory()) == 0

    def test_individual_blackouts_are_loaded(self, tmp_path):
        from iepsched.lifespan import init_directory

        seed = tmp_path / "team.json"
        seed.write_text(
            json.dumps(
                {
                    "members": [],
                    "individual_blackouts": [
                        {
                            "id": "ib1",
                            "user_id": "tm1",
                            "title": "Conference",
                            "start_date": "2024-10-07",
                            "end_date": "2024-10-08",
                        }
                    ],
                }
            )
        )
        with patch("iepsched.lifespan.get_settings") as mock_settings:
            mock_settings.return_value.directory.seed_path = str(seed)
            directory = init_directory()

        assert directory.individual_blackouts[0].user_id == "tm1"


class TestSetupAndCleanup:
    """Test setup_resources and cleanup_resources."""

    @pytest.mark.asyncio
    async def test_memory_backend(self, monkeypatch, seed_file):
        from iepsched.config import clear_settings_cache
        from iepsched.lifespan import cleanup_resources, setup_resources
        from iepsched.meetings import InMemoryMeetingStore

        monkeypatch.setenv("STORE_BACKEND", "memory")
        monkeypatch.setenv("DIRECTORY_SEED_PATH", str(seed_file))
        clear_settings_cache()
        try:
            resources = await setup_resources()

            assert resources.redis_client is None
            assert isinstance(resources.store, InMemoryMeetingStore)
            assert state.meeting_service is resources.meeting_service
            assert state.team_directory is resources.team_directory

            await cleanup_resources(resources)
            assert state.meeting_service is None
            assert state.team_directory is None
        finally:
            clear_settings_cache()

    @pytest.mark.asyncio
    async def test_redis_backend_closes_client(self, monkeypatch):
        from iepsched.config import clear_settings_cache
        from iepsched.lifespan import cleanup_resources, setup_resources
        from iepsched.meetings import RedisMeetingStore

        mock_client = MagicMock()
        mock_client.aclose = AsyncMock()
        monkeypatch.setenv("STORE_BACKEND", "redis")
        monkeypatch.setenv("STORE_KEY_PREFIX", "district7")
        monkeypatch.setenv("DIRECTORY_SEED_PATH", "")
        monkeypatch.setattr("iepsched.lifespan.init_redis", AsyncMock(return_value=mock_client))
        clear_settings_cache()
        try:
            resources = await setup_resources()

            assert isinstance(resources.store, RedisMeetingStore)
            assert resources.store.key_prefix == "district7"
            assert resources.redis_client is mock_client

            await cleanup_resources(resources)
            mock_client.aclose.assert_awaited_once()
        finally:
            clear_settings_cache()
