import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import asyncio
import uuid
from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient
import fakeredis.aioredis as fakeredis
from psycopg import errors as pg_errors

from slotboard import db
from slotboard.config import clear_settings_cache
import slotboard.lifespan as lifespan
import slotboard.main as main


class _AwaitableRedis:
    def __init__(self, client):
        self._client = client

    def __await__(self):
        async def _coro():
            return self._client

        return _coro().__await__()


class FakeRoomStore:
    """In-memory stand-in for slotboard.db with the same function signatures.

    Booking inserts check and write under one lock, mirroring the row lock
    the real query takes.
    """

    def __init__(self):
        self.rooms: dict[str, dict] = {}
        self.participants: dict[str, dict] = {}
        self._lock = asyncio.Lock()

    async def rooms_create(self, title, kind, dates, time_start, time_end, time_ranges=None,
                           host_slots=None, host_name=None, host_email=None, meet_link=None):
        room = {
            "id": str(uuid.uuid4()),
            "title": title,
            "kind": kind,
            "dates": list(dates),
            "time_start": time_start,
            "time_end": time_end,
            "time_ranges": time_ranges or None,
            "host_slots": host_slots or None,
            "host_name": host_name,
            "host_email": host_email,
            "meet_link": meet_link,
            "created_at": datetime.now(UTC).isoformat(),
        }
        self.rooms[room["id"]] = room
        return dict(room)

    async def rooms_get(self, room_id):
        room = self.rooms.get(room_id)
        return dict(room) if room else None

    async def rooms_delete(self, room_id):
        if self.rooms.pop(room_id, None) is None:
            return False
        for pid in [pid for pid, p in self.participants.items() if p["room_id"] == room_id]:
            del self.participants[pid]
        return True

    async def participants_list(self, room_id):
        return [dict(p) for p in self.participants.values() if p["room_id"] == room_id]

    def _insert(self, room_id, name, slots, email):
        if room_id not in self.rooms:
            raise pg_errors.ForeignKeyViolation("room does not exist")
        p = {
            "id": str(uuid.uuid4()),
            "room_id": room_id,
            "name": name,
            "email": email,
            "slots": list(slots),
            "created_at": datetime.now(UTC).isoformat(),
        }
        self.participants[p["id"]] = p
        return dict(p)

    async def participants_insert(self, room_id, name, slots, email=None):
        return self._insert(room_id, name, slots, email)

    async def participants_insert_booking(self, room_id, name, slot, email=None):
        async with self._lock:
            # Yield so a competing booking gets scheduled while the lock is held.
            await asyncio.sleep(0)
            for p in self.participants.values():
                if p["room_id"] == room_id and slot in p["slots"]:
                    return None
            return self._insert(room_id, name, [slot], email)

    async def participants_delete(self, room_id, participant_id):
        p = self.participants.get(participant_id)
        if p is None or p["room_id"] != room_id:
            return False
        del self.participants[participant_id]
        return True

    def install(self, monkeypatch):
        for name in (
            "rooms_create",
            "rooms_get",
            "rooms_delete",
            "participants_list",
            "participants_insert",
            "participants_insert_booking",
            "participants_delete",
        ):
            monkeypatch.setattr(db, name, getattr(self, name))


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for var in ("RESEND_API_KEY", "ENABLE_ROOMS_DB", "ENABLE_ROOM_EVENTS", "REQUEST_DEBUG"):
        monkeypatch.delenv(var, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def store(monkeypatch):
    s = FakeRoomStore()
    s.install(monkeypatch)
    return s


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def client(monkeypatch, store, fake_redis):
    def fake_redis_constructor(*_args, **_kwargs):
        return _AwaitableRedis(fake_redis)

    monkeypatch.setattr(lifespan.redis, "Redis", fake_redis_constructor)

    with TestClient(main.app) as c:
        yield c
