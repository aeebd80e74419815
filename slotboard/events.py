from typing import Literal, Optional, TypedDict, Union


class ParticipantJoinedEvent(TypedDict):
    type: Literal["participant_joined"]
    room_id: str
    participant_id: str
    name: str
    slots: list[str]
    timestamp: str


class ParticipantCancelledEvent(TypedDict):
    type: Literal["participant_cancelled"]
    room_id: str
    participant_id: str
    timestamp: str


class RoomDeletedEvent(TypedDict):
    type: Literal["room_deleted"]
    room_id: str
    timestamp: str


# Discriminated union of everything published on a room channel
RoomEvent = Union[ParticipantJoinedEvent, ParticipantCancelledEvent, RoomDeletedEvent]


class BookingNotification(TypedDict):
    room_title: str
    host_name: str
    host_email: Optional[str]
    guest_name: str
    guest_email: Optional[str]
    slot: str
    when: str
    meet_link: Optional[str]
