"""Dependency injection for FastAPI endpoints.

Usage in controllers:
    from slotboard.dependencies import OptionalBus

    @router.delete("/rooms/{room_id}")
    async def delete_room(room_id: str, bus: OptionalBus):
        ...
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from slotboard import state
from slotboard.bus import EventBus
from slotboard.config import get_settings
from slotboard.errors import ServiceUnavailableError


def get_redis() -> redis.Redis:
    """Get the Redis client.

    Raises:
        ServiceUnavailableError: If Redis is not connected.
    """
    if state.redis_client is None:
        raise ServiceUnavailableError(detail="Redis not connected")
    return state.redis_client


def get_optional_redis() -> redis.Redis | None:
    return state.redis_client


def get_optional_event_bus() -> EventBus | None:
    """Get the EventBus when room events are enabled and Redis is up, else None."""
    if not get_settings().features.room_events:
        return None
    return state.event_bus


Redis = Annotated[redis.Redis, Depends(get_redis)]
OptionalRedis = Annotated[redis.Redis | None, Depends(get_optional_redis)]
OptionalBus = Annotated[EventBus | None, Depends(get_optional_event_bus)]
