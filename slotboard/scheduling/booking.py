"""Single-slot booking with double-booking protection."""

import logging
from typing import Any

from psycopg import errors as pg_errors

from slotboard import db
from slotboard.errors import AlreadyBookedError, NotFoundError, ValidationError
from slotboard.events import BookingNotification
from slotboard.notifications.email import notify_booking
from slotboard.scheduling.slots import SlotKey, format_slot

logger = logging.getLogger(__name__)


def booked_slots(participants: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """Map each occupied slot to the participant holding it."""
    taken: dict[str, dict[str, Any]] = {}
    for p in participants:
        for slot in p.get("slots") or []:
            taken.setdefault(slot, p)
    return taken


def _notification(room: dict[str, Any], participant: dict[str, Any], slot: SlotKey) -> BookingNotification:
    return {
        "room_title": room["title"],
        "host_name": room.get("host_name") or "the host",
        "host_email": room.get("host_email"),
        "guest_name": participant["name"],
        "guest_email": participant.get("email"),
        "slot": str(slot),
        "when": format_slot(slot),
        "meet_link": room.get("meet_link"),
    }


async def attempt_book(
    room: dict[str, Any],
    slot: SlotKey,
    name: str,
    email: str | None = None,
) -> dict[str, Any]:
    """Claim ``slot`` in a booking room for one guest.

    Whatever the caller saw when it fetched the room is only advisory; the
    insert itself re-checks occupancy and returns nothing if the slot was
    taken in the meantime, which surfaces as ``AlreadyBookedError``.
    Emails go out after the booking is stored and cannot fail it.
    """
    if room["kind"] != "booking":
        raise ValidationError(detail="Room does not take bookings")
    if str(slot) not in (room.get("host_slots") or []):
        raise ValidationError(detail=f"Slot is not offered by the host: {slot}", slot=str(slot))

    try:
        participant = await db.participants_insert_booking(room["id"], name, str(slot), email=email)
    except pg_errors.ForeignKeyViolation:
        logger.warning("Room %s vanished while booking %s", room["id"], slot)
        raise NotFoundError(detail="Room not found", resource_type="room", resource_id=room["id"])

    if participant is None:
        logger.warning("Rejected booking of %s in room %s by %s: already booked", slot, room["id"], name)
        raise AlreadyBookedError(slot=str(slot))

    logger.info("Booked %s in room %s for participant %s", slot, room["id"], participant["id"])
    try:
        await notify_booking(_notification(room, participant, slot))
    except Exception:
        logger.exception("Booking notifications failed for participant %s", participant["id"])
    return participant
