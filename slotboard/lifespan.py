"""Application startup and shutdown.

Redis and the database pool are both optional at runtime: a failure to
reach either is logged and the app still starts, so rooms can be served
from per-request connections and room events are simply not published.
"""

import logging
from dataclasses import dataclass

import redis.asyncio as redis
from redis.asyncio import BlockingConnectionPool as RedisConnectionPool

from slotboard import db, state
from slotboard.bus import EventBus
from slotboard.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    redis_client: redis.Redis | None = None
    event_bus: EventBus | None = None
    db_enabled: bool = False


async def init_redis() -> redis.Redis:
    """Initialize Redis connection with connection pool."""
    settings = get_settings()

    redis_pool = RedisConnectionPool(
        host=settings.redis.host,
        port=settings.redis.port,
        password=settings.redis.password if settings.redis.password else None,
        max_connections=settings.redis.max_connections,
        timeout=settings.redis.pool_timeout_sec,
        socket_timeout=settings.redis.socket_timeout,
        socket_connect_timeout=settings.redis.socket_connect_timeout,
    )

    candidate_client = redis.Redis(connection_pool=redis_pool, decode_responses=True)
    if hasattr(candidate_client, "__await__"):
        redis_client = await candidate_client
    else:
        redis_client = candidate_client

    if settings.debug.redis:
        logging.getLogger("redis").setLevel(logging.DEBUG)

    return redis_client


async def init_database() -> bool:
    """Open the connection pool and run migrations when ENABLE_ROOMS_DB is set."""
    if not get_settings().features.rooms_db:
        return False
    try:
        await db.init_pool()
        return True
    except Exception as e:
        logger.warning("Failed to initialize database: %s", e)
        return False


async def setup_resources(enable_db: bool = True) -> LifespanResources:
    resources = LifespanResources()

    resources.redis_client = await init_redis()
    resources.event_bus = EventBus(resources.redis_client)

    if enable_db:
        resources.db_enabled = await init_database()

    state.redis_client = resources.redis_client
    state.event_bus = resources.event_bus
    state.db_enabled = resources.db_enabled
    return resources


async def cleanup_resources(resources: LifespanResources) -> None:
    if resources.db_enabled:
        try:
            await db.close_pool()
        except Exception as e:
            logger.warning("Error closing database pool: %s", e)

    if resources.redis_client:
        aclose = getattr(resources.redis_client, "aclose", None)
        if callable(aclose):
            await aclose()
        else:
            close = getattr(resources.redis_client, "close", None)
            if callable(close):
                close()

    state.redis_client = None
    state.event_bus = None
    state.db_enabled = False
