import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from slotboard.bus import EventBus


async def _next_message(pubsub, timeout=1.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        msg = await pubsub.get_message(ignore_subscribe_messages=True, timeout=0.05)
        if msg is not None:
            return msg
    return None


class TestEventBus:
    def test_room_channel(self):
        assert EventBus.room_channel("abc") == "room:abc"

    @pytest.mark.asyncio
    async def test_participant_joined_reaches_subscriber(self, fake_redis):
        bus = EventBus(fake_redis)
        pubsub = fake_redis.pubsub()
        await pubsub.subscribe("room:r1")

        ok = await bus.participant_joined(
            {"id": "p1", "room_id": "r1", "name": "Ana", "slots": ["2025-03-10T09:00"]}
        )

        assert ok is True
        msg = await _next_message(pubsub)
        assert msg is not None
        event = json.loads(msg["data"])
        assert event["type"] == "participant_joined"
        assert event["participant_id"] == "p1"
        assert event["slots"] == ["2025-03-10T09:00"]
        await pubsub.aclose()

    @pytest.mark.asyncio
    async def test_cancel_and_delete_events(self):
        client = MagicMock()
        client.publish = AsyncMock(return_value=1)
        bus = EventBus(client)

        await bus.participant_cancelled("r1", "p1")
        await bus.room_deleted("r1")

        channels = [call.args[0] for call in client.publish.call_args_list]
        types = [json.loads(call.args[1])["type"] for call in client.publish.call_args_list]
        assert channels == ["room:r1", "room:r1"]
        assert types == ["participant_cancelled", "room_deleted"]

    @pytest.mark.asyncio
    async def test_publish_failure_is_reported_not_raised(self):
        client = MagicMock()
        client.publish = AsyncMock(side_effect=ConnectionError("redis down"))
        bus = EventBus(client)

        assert await bus.room_deleted("r1") is False
