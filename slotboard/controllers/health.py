from fastapi import APIRouter
from typing import Dict

from slotboard import db, state
from slotboard.dependencies import OptionalRedis

router = APIRouter()


@router.get("/health")
async def health(redis_client: OptionalRedis) -> Dict[str, object]:
    redis_status = "disconnected"
    if redis_client:
        try:
            await redis_client.ping()
            redis_status = "healthy"
        except Exception:
            redis_status = "unhealthy"

    database_status = "disabled"
    if state.db_enabled:
        database_status = "healthy" if await db.ping() else "unhealthy"

    return {
        "status": "ok",
        "redis": redis_status,
        "database": database_status,
        "pool": db.get_pool_stats(),
    }
