import logging
import uuid
from typing import Any, Dict

import psycopg
from fastapi import APIRouter

from slotboard import db
from slotboard.dependencies import OptionalBus
from slotboard.errors import BadRequestError, DatabaseError, NotFoundError, ValidationError
from slotboard.models.rooms import (
    CreateRoomRequest,
    GridCellOut,
    GridResponse,
    HeatmapResponse,
    Participant,
    Room,
    RoomWithParticipants,
    SubmitParticipantRequest,
)
from slotboard.scheduling.aggregation import aggregate
from slotboard.scheduling.booking import attempt_book, booked_slots
from slotboard.scheduling.slots import SlotKey, format_hour, parse_slots
from slotboard.scheduling.time_ranges import resolver_for_room

logger = logging.getLogger("slotboard.rooms")
router = APIRouter(prefix="/rooms", tags=["rooms"])


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
        return True
    except ValueError:
        return False


async def _load_room(room_id: str) -> dict[str, Any]:
    # A malformed id cannot name a room; treat it like an unknown one.
    room = await db.rooms_get(room_id) if _is_uuid(room_id) else None
    if not room:
        logger.warning("Room not found: %s", room_id)
        raise NotFoundError(detail="Room not found", resource_type="room", resource_id=room_id)
    return room


@router.post("", status_code=201, response_model=Room)
async def create_room(req: CreateRoomRequest) -> Dict[str, Any]:
    logger.info("POST /rooms kind=%s title=%s dates=%d", req.kind, req.title, len(req.dates))
    host = req.host
    try:
        room = await db.rooms_create(
            title=req.title,
            kind=req.kind,
            dates=req.dates,
            time_start=req.time_start,
            time_end=req.time_end,
            time_ranges={d: [s, e] for d, (s, e) in req.time_ranges.items()} if req.time_ranges else None,
            host_slots=req.host_slots,
            host_name=host.name if host else None,
            host_email=host.email if host else None,
            meet_link=host.meeting_link if host else None,
        )
    except psycopg.Error as e:
        logger.exception("Failed to create room")
        raise DatabaseError(detail="Failed to create room") from e
    logger.info("Created room id=%s", room["id"])
    return room


@router.get("/{room_id}", response_model=RoomWithParticipants)
async def get_room(room_id: str) -> Dict[str, Any]:
    logger.info("GET /rooms/%s", room_id)
    room = await _load_room(room_id)
    participants = await db.participants_list(room_id)
    logger.info("Returning room %s with %d participants", room_id, len(participants))
    return {**room, "participants": participants}


@router.delete("/{room_id}")
async def delete_room(room_id: str, bus: OptionalBus) -> Dict[str, Any]:
    logger.info("DELETE /rooms/%s", room_id)
    if not _is_uuid(room_id) or not await db.rooms_delete(room_id):
        logger.warning("Room not found: %s", room_id)
        raise NotFoundError(detail="Room not found", resource_type="room", resource_id=room_id)
    if bus is not None:
        await bus.room_deleted(room_id)
    return {"success": True}


@router.get("/{room_id}/grid", response_model=GridResponse)
async def get_grid(room_id: str) -> GridResponse:
    room = await _load_room(room_id)
    resolver = resolver_for_room(room)
    is_booking = room["kind"] == "booking"
    offered = set(room.get("host_slots") or [])
    taken = booked_slots(await db.participants_list(room_id)) if is_booking else {}

    cells = []
    for cell in resolver.grid_cells():
        key = str(cell.slot)
        booked = key in taken
        available = not cell.out_of_range and (not is_booking or (key in offered and not booked))
        cells.append(GridCellOut(slot=key, out_of_range=cell.out_of_range, booked=booked, available=available))

    display = resolver.display_window
    windows = {}
    for d in resolver.dates:
        w = resolver.effective_window(d)
        windows[d.isoformat()] = (w.start, w.end)
    return GridResponse(
        room_id=room_id,
        display_start=display.start,
        display_end=display.end,
        hour_labels=[format_hour(h) for h in display.hours],
        windows=windows,
        cells=cells,
    )


@router.get("/{room_id}/heatmap", response_model=HeatmapResponse)
async def get_heatmap(room_id: str) -> Dict[str, Any]:
    logger.info("GET /rooms/%s/heatmap", room_id)
    room = await _load_room(room_id)
    if room["kind"] != "availability":
        raise BadRequestError(detail="Heatmap is only available for availability rooms")
    participants = await db.participants_list(room_id)
    heatmap = aggregate(resolver_for_room(room).room_slots(), participants)
    return {"room_id": room_id, **heatmap.to_dict()}


@router.post("/{room_id}/participants", status_code=201, response_model=Participant)
async def submit_participant(room_id: str, req: SubmitParticipantRequest, bus: OptionalBus) -> Dict[str, Any]:
    logger.info("POST /rooms/%s/participants name=%s slots=%d", room_id, req.name, len(req.slots))
    room = await _load_room(room_id)

    if room["kind"] == "booking":
        if len(req.slots) != 1:
            raise ValidationError(detail="A booking must contain exactly one slot")
        participant = await attempt_book(room, SlotKey.parse(req.slots[0]), req.name, req.email)
    else:
        grid = set(resolver_for_room(room).room_slots())
        for slot in parse_slots(req.slots):
            if slot not in grid:
                logger.warning("Invalid slot %s for room %s", slot, room_id)
                raise ValidationError(detail=f"Invalid slot: {slot}", slot=str(slot))
        try:
            participant = await db.participants_insert(room_id, req.name, req.slots, email=req.email)
        except psycopg.Error as e:
            logger.exception("Failed to add participant to room %s", room_id)
            raise DatabaseError(detail="Failed to add participant") from e

    logger.info("Added participant %s to room %s", participant["id"], room_id)
    if bus is not None:
        await bus.participant_joined(participant)
    return participant


@router.delete("/{room_id}/participants/{participant_id}")
async def cancel_participant(room_id: str, participant_id: str, bus: OptionalBus) -> Dict[str, Any]:
    logger.info("DELETE /rooms/%s/participants/%s", room_id, participant_id)
    found = (
        _is_uuid(room_id)
        and _is_uuid(participant_id)
        and await db.participants_delete(room_id, participant_id)
    )
    if not found:
        logger.warning("Participant %s not found in room %s", participant_id, room_id)
        raise NotFoundError(
            detail="Participant not found",
            resource_type="participant",
            resource_id=participant_id,
        )
    if bus is not None:
        await bus.participant_cancelled(room_id, participant_id)
    return {"success": True}
