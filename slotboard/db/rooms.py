"""Rooms and participants repository.

Booking occupancy is never stored on its own: a slot is booked when some
participant row of the room lists it. ``participants_insert_booking`` is the
only write path for booking rooms and re-checks occupancy under a row lock on
the room, so two guests racing for one slot cannot both get in.
"""

import logging
from datetime import UTC
from typing import Any

from psycopg.types.json import Json

from slotboard.db.core import _get_connection

logger = logging.getLogger(__name__)

_ROOM_COLUMNS = (
    "id, title, kind, dates, time_start, time_end, time_ranges, "
    "host_slots, host_name, host_email, meet_link, created_at"
)
_PARTICIPANT_COLUMNS = "id, room_id, name, email, available_slots, created_at"


def _room_from_row(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "title": row[1],
        "kind": row[2],
        "dates": row[3],
        "time_start": row[4],
        "time_end": row[5],
        "time_ranges": row[6],
        "host_slots": row[7],
        "host_name": row[8],
        "host_email": row[9],
        "meet_link": row[10],
        "created_at": row[11].astimezone(UTC).isoformat(),
    }


def _participant_from_row(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "room_id": str(row[1]),
        "name": row[2],
        "email": row[3],
        "slots": row[4],
        "created_at": row[5].astimezone(UTC).isoformat(),
    }


async def rooms_create(
    title: str,
    kind: str,
    dates: list[str],
    time_start: int,
    time_end: int,
    time_ranges: dict[str, list[int]] | None = None,
    host_slots: list[str] | None = None,
    host_name: str | None = None,
    host_email: str | None = None,
    meet_link: str | None = None,
) -> dict[str, Any]:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"""INSERT INTO rooms (title, kind, dates, time_start, time_end, time_ranges,
                                       host_slots, host_name, host_email, meet_link)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_ROOM_COLUMNS}""",
                (
                    title,
                    kind,
                    Json(dates),
                    time_start,
                    time_end,
                    Json(time_ranges) if time_ranges else None,
                    Json(host_slots) if host_slots else None,
                    host_name,
                    host_email,
                    meet_link,
                ),
            )
        ).fetchone()
        return _room_from_row(row)


async def rooms_get(room_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(f"SELECT {_ROOM_COLUMNS} FROM rooms WHERE id = %s", (room_id,))
        ).fetchone()
        if not row:
            return None
        return _room_from_row(row)


async def rooms_delete(room_id: str) -> bool:
    """Delete a room; participants go with it through the foreign key cascade."""
    async with _get_connection() as conn:
        row = await (
            await conn.execute("DELETE FROM rooms WHERE id = %s RETURNING id", (room_id,))
        ).fetchone()
        return row is not None


async def participants_list(room_id: str) -> list[dict[str, Any]]:
    async with _get_connection() as conn:
        rows = await conn.execute(
            f"SELECT {_PARTICIPANT_COLUMNS} FROM participants WHERE room_id = %s ORDER BY created_at, id",
            (room_id,),
        )
        result = []
        async for row in rows:
            result.append(_participant_from_row(row))
        return result


async def participants_insert(
    room_id: str,
    name: str,
    slots: list[str],
    email: str | None = None,
) -> dict[str, Any]:
    """Append an availability response. Availability rooms never conflict."""
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"""INSERT INTO participants (room_id, name, email, available_slots)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {_PARTICIPANT_COLUMNS}""",
                (room_id, name, email, Json(slots)),
            )
        ).fetchone()
        return _participant_from_row(row)


async def participants_insert_booking(
    room_id: str,
    name: str,
    slot: str,
    email: str | None = None,
) -> dict[str, Any] | None:
    """Insert a single-slot booking unless the slot is already taken.

    Returns None when another participant of the room already holds ``slot``.
    The room row is locked for the length of the transaction, which
    serialises concurrent bookings of the same room.
    """
    async with _get_connection(autocommit=False) as conn:
        async with conn.transaction():
            await conn.execute("SELECT id FROM rooms WHERE id = %s FOR UPDATE", (room_id,))
            taken = await (
                await conn.execute(
                    "SELECT id FROM participants WHERE room_id = %s AND available_slots @> %s LIMIT 1",
                    (room_id, Json([slot])),
                )
            ).fetchone()
            if taken:
                logger.info("Slot %s in room %s already held by participant %s", slot, room_id, taken[0])
                return None
            row = await (
                await conn.execute(
                    f"""INSERT INTO participants (room_id, name, email, available_slots)
                        VALUES (%s, %s, %s, %s)
                        RETURNING {_PARTICIPANT_COLUMNS}""",
                    (room_id, name, email, Json([slot])),
                )
            ).fetchone()
            return _participant_from_row(row)


async def participants_delete(room_id: str, participant_id: str) -> bool:
    """Delete one participant, matching both ids so a guessed id from another room does nothing."""
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                "DELETE FROM participants WHERE id = %s AND room_id = %s RETURNING id",
                (participant_id, room_id),
            )
        ).fetchone()
        return row is not None
