"""
Room activity bus, backed by Redis pub/sub.

Publishing is best-effort: the database is the source of truth and a lost
event only means a subscriber has to refetch.
"""
import json
import logging
from datetime import UTC, datetime
from typing import Final

import redis.asyncio as redis

from slotboard.events import (
    ParticipantCancelledEvent,
    ParticipantJoinedEvent,
    RoomDeletedEvent,
    RoomEvent,
)

CHANNEL_ROOM_PREFIX: Final[str] = "room:"

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class EventBus:
    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    @staticmethod
    def room_channel(room_id: str) -> str:
        return f"{CHANNEL_ROOM_PREFIX}{room_id}"

    async def publish_room(self, room_id: str, event: RoomEvent) -> bool:
        try:
            await self.redis_client.publish(self.room_channel(room_id), json.dumps(event))
            return True
        except Exception as e:
            logger.warning("Failed to publish %s for room %s: %s", event.get("type"), room_id, e)
            return False

    async def participant_joined(self, participant: dict) -> bool:
        event: ParticipantJoinedEvent = {
            "type": "participant_joined",
            "room_id": participant["room_id"],
            "participant_id": participant["id"],
            "name": participant["name"],
            "slots": participant["slots"],
            "timestamp": _now_iso(),
        }
        return await self.publish_room(participant["room_id"], event)

    async def participant_cancelled(self, room_id: str, participant_id: str) -> bool:
        event: ParticipantCancelledEvent = {
            "type": "participant_cancelled",
            "room_id": room_id,
            "participant_id": participant_id,
            "timestamp": _now_iso(),
        }
        return await self.publish_room(room_id, event)

    async def room_deleted(self, room_id: str) -> bool:
        event: RoomDeletedEvent = {
            "type": "room_deleted",
            "room_id": room_id,
            "timestamp": _now_iso(),
        }
        return await self.publish_room(room_id, event)
