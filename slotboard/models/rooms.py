import re
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from slotboard.config import get_settings
from slotboard.scheduling.slots import DATE_RE, SlotKey, TimeWindow, generate_slots, parse_date

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

RoomKind = Literal["availability", "booking"]
Hour = Annotated[int, Field(ge=0, le=23)]


def _clean_name(v: str, field: str) -> str:
    v = v.strip()
    limit = get_settings().scheduling.name_max
    if not v or len(v) > limit:
        raise ValueError(f"{field} must be 1-{limit} characters")
    return v


def _clean_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    if not EMAIL_RE.match(v) or len(v) > 254:
        raise ValueError(f"invalid email address: {v}")
    return v


class HostIdentity(BaseModel):
    name: str
    email: Optional[str] = None
    meeting_link: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v, "host name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _clean_email(v)

    @field_validator("meeting_link")
    @classmethod
    def validate_meeting_link(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("https://", "http://")):
            raise ValueError("meeting_link must be an http(s) URL")
        return v


class CreateRoomRequest(BaseModel):
    title: str
    kind: RoomKind = "availability"
    dates: list[str]
    time_start: Hour
    time_end: Hour
    time_ranges: Optional[dict[str, tuple[int, int]]] = None
    host_slots: Optional[list[str]] = None
    host: Optional[HostIdentity] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        limit = get_settings().scheduling.room_title_max
        if not v or len(v) > limit:
            raise ValueError(f"title must be 1-{limit} characters")
        return v

    @field_validator("dates")
    @classmethod
    def validate_dates(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("dates must not be empty")
        for d in v:
            if not DATE_RE.match(d):
                raise ValueError(f"invalid date format: {d}")
            parse_date(d)
        unique = sorted(set(v))
        if len(unique) > get_settings().scheduling.max_dates:
            raise ValueError("too many dates")
        return unique

    @field_validator("time_ranges")
    @classmethod
    def validate_time_ranges(cls, v: Optional[dict[str, tuple[int, int]]]) -> Optional[dict[str, tuple[int, int]]]:
        if not v:
            return None
        for d, (start, end) in v.items():
            if not DATE_RE.match(d):
                raise ValueError(f"invalid date format: {d}")
            if not (0 <= start < 24 and 0 <= end < 24):
                raise ValueError(f"hours must be between 0 and 23 for {d}")
            if start >= end:
                raise ValueError(f"time range for {d} must end after it starts")
        return v

    @field_validator("host_slots")
    @classmethod
    def validate_host_slots(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return None
        for s in v:
            SlotKey.parse(s)
        return sorted(set(v))

    @model_validator(mode="after")
    def check_room(self) -> "CreateRoomRequest":
        if self.time_start >= self.time_end:
            raise ValueError("time_end must be after time_start")
        if self.time_ranges:
            if self.kind != "availability":
                raise ValueError("per-date time ranges are only allowed for availability rooms")
            unknown = set(self.time_ranges) - set(self.dates)
            if unknown:
                raise ValueError(f"time_ranges has dates not in the room: {sorted(unknown)}")
        if self.kind == "booking":
            if not self.host_slots:
                raise ValueError("booking rooms need at least one host slot")
            if self.host is None:
                raise ValueError("booking rooms need a host name")
            grid = {
                str(s)
                for s in generate_slots(
                    [parse_date(d) for d in self.dates],
                    TimeWindow(self.time_start, self.time_end),
                )
            }
            outside = [s for s in self.host_slots if s not in grid]
            if outside:
                raise ValueError(f"host slots outside the room's dates and hours: {outside}")
        elif self.host_slots:
            raise ValueError("host_slots are only allowed for booking rooms")
        return self


class SubmitParticipantRequest(BaseModel):
    name: str
    email: Optional[str] = None
    slots: list[str]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v, "name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _clean_email(v)

    @field_validator("slots")
    @classmethod
    def validate_slots(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("slots must not be empty")
        for s in v:
            SlotKey.parse(s)
        return list(dict.fromkeys(v))


class Room(BaseModel):
    id: str
    title: str
    kind: RoomKind
    dates: list[str]
    time_start: int
    time_end: int
    time_ranges: Optional[dict[str, tuple[int, int]]] = None
    host_slots: Optional[list[str]] = None
    host_name: Optional[str] = None
    host_email: Optional[str] = None
    meet_link: Optional[str] = None
    created_at: str


class Participant(BaseModel):
    id: str
    room_id: str
    name: str
    email: Optional[str] = None
    slots: list[str]
    created_at: str


class RoomWithParticipants(Room):
    participants: list[Participant]


class GridCellOut(BaseModel):
    slot: str
    out_of_range: bool
    booked: bool = False
    available: bool = True


class GridResponse(BaseModel):
    room_id: str
    display_start: int
    display_end: int
    hour_labels: list[str]
    windows: dict[str, tuple[int, int]]
    cells: list[GridCellOut]


class HeatmapSlot(BaseModel):
    slot: str
    count: int
    intensity: float
    tier: int
    participants: list[str]


class HeatmapResponse(BaseModel):
    room_id: str
    max: int
    total_participants: int
    best_slots: list[str]
    slots: list[HeatmapSlot]
