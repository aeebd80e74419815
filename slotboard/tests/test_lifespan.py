"""Tests for lifespan management and request dependencies."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from slotboard import state
from slotboard.errors import ServiceUnavailableError


class TestLifespanResources:
    def test_defaults(self):
        from slotboard.lifespan import LifespanResources

        resources = LifespanResources()
        assert resources.redis_client is None
        assert resources.event_bus is None
        assert resources.db_enabled is False


class TestInitRedis:
    @pytest.mark.asyncio
    async def test_init_redis_creates_client(self):
        from slotboard.lifespan import init_redis

        mock_redis_class = MagicMock()
        mock_client = MagicMock()
        mock_redis_class.return_value = mock_client

        with patch("slotboard.lifespan.redis.Redis", mock_redis_class):
            with patch("slotboard.lifespan.get_settings") as mock_settings:
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
        mock_redis_class.assert_called_once()


class TestInitDatabase:
    @pytest.mark.asyncio
    async def test_disabled_by_default(self):
        from slotboard.lifespan import init_database

        with patch("slotboard.lifespan.db.init_pool", new_callable=AsyncMock) as init_pool:
            assert await init_database() is False
        init_pool.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enabled_and_successful(self, monkeypatch):
        from slotboard.config import clear_settings_cache
        from slotboard.lifespan import init_database

        monkeypatch.setenv("ENABLE_ROOMS_DB", "1")
        clear_settings_cache()
        with patch("slotboard.lifespan.db.init_pool", new_callable=AsyncMock):
            assert await init_database() is True

    @pytest.mark.asyncio
    async def test_connection_failure_is_logged(self, monkeypatch):
        from slotboard.config import clear_settings_cache
        from slotboard.lifespan import init_database

        monkeypatch.setenv("ENABLE_ROOMS_DB", "1")
        clear_settings_cache()
        with patch("slotboard.lifespan.db.init_pool", new=AsyncMock(side_effect=OSError("refused"))):
            assert await init_database() is False


class TestSetupAndCleanup:
    @pytest.mark.asyncio
    async def test_setup_publishes_state(self):
        from slotboard.lifespan import cleanup_resources, setup_resources

        mock_redis = MagicMock()
        mock_redis.aclose = AsyncMock()
        mock_bus = MagicMock()

        with patch("slotboard.lifespan.init_redis", new_callable=AsyncMock, return_value=mock_redis), \
                patch("slotboard.lifespan.EventBus", return_value=mock_bus), \
                patch("slotboard.lifespan.init_database", new_callable=AsyncMock, return_value=False):
            resources = await setup_resources()

        assert state.redis_client is mock_redis
        assert state.event_bus is mock_bus

        await cleanup_resources(resources)

        mock_redis.aclose.assert_awaited_once()
        assert state.redis_client is None
        assert state.event_bus is None

    @pytest.mark.asyncio
    async def test_cleanup_closes_pool(self):
        from slotboard.lifespan import LifespanResources, cleanup_resources

        with patch("slotboard.lifespan.db.close_pool", new_callable=AsyncMock) as close_pool:
            await cleanup_resources(LifespanResources(db_enabled=True))
        close_pool.assert_awaited_once()


class TestDependencies:
    def test_get_redis_raises_when_not_connected(self):
        from slotboard.dependencies import get_redis

        with patch.object(state, "redis_client", None):
            with pytest.raises(ServiceUnavailableError) as exc_info:
                get_redis()
        assert "Redis not connected" in exc_info.value.detail

    def test_get_optional_redis(self):
        from slotboard.dependencies import get_optional_redis

        mock_redis = MagicMock()
        with patch.object(state, "redis_client", mock_redis):
            assert get_optional_redis() is mock_redis

    def test_event_bus_returned_when_enabled(self):
        from slotboard.dependencies import get_optional_event_bus

        mock_bus = MagicMock()
        with patch.object(state, "event_bus", mock_bus):
            assert get_optional_event_bus() is mock_bus

    def test_event_bus_suppressed_when_disabled(self, monkeypatch):
        from slotboard.config import clear_settings_cache
        from slotboard.dependencies import get_optional_event_bus

        monkeypatch.setenv("ENABLE_ROOM_EVENTS", "false")
        clear_settings_cache()
        with patch.object(state, "event_bus", MagicMock()):
            assert get_optional_event_bus() is None
