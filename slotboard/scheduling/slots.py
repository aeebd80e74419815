"""Half-hour slot model.

A slot is identified by a calendar date, an hour and a minute in {0, 30}.
Its wire form is ``YYYY-MM-DDTHH:MM`` (naive local wall-clock time).
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

SLOT_MINUTES: tuple[int, int] = (0, 30)

SLOT_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})T([01]\d|2[0-3]):(00|30)$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: str) -> date:
    if not DATE_RE.match(value):
        raise ValueError(f"invalid date format: {value}")
    return date.fromisoformat(value)


@dataclass(frozen=True, order=True)
class SlotKey:
    date: date
    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour < 24:
            raise ValueError(f"hour out of range: {self.hour}")
        if self.minute not in SLOT_MINUTES:
            raise ValueError(f"minute must be 0 or 30: {self.minute}")

    @classmethod
    def parse(cls, value: str) -> "SlotKey":
        m = SLOT_RE.match(value)
        if not m:
            raise ValueError(f"invalid slot format: {value}")
        return cls(parse_date(m.group(1)), int(m.group(2)), int(m.group(3)))

    def to_datetime(self) -> datetime:
        return datetime(self.date.year, self.date.month, self.date.day, self.hour, self.minute)

    @property
    def time(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return f"{self.date.isoformat()}T{self.time}"


@dataclass(frozen=True)
class TimeWindow:
    """Half-open hour range ``[start, end)``."""

    start: int
    end: int

    def __post_init__(self) -> None:
        for hour in (self.start, self.end):
            if not 0 <= hour < 24:
                raise ValueError(f"hour out of range: {hour}")

    @property
    def is_empty(self) -> bool:
        return self.start >= self.end

    @property
    def hours(self) -> range:
        return range(self.start, self.end)

    def contains(self, hour: int) -> bool:
        return self.start <= hour < self.end


def generate_slots(dates: Iterable[date], window: TimeWindow) -> list[SlotKey]:
    """Enumerate the slots of ``dates`` x ``window`` in canonical order.

    Dates are deduplicated and visited in ascending order; within a date the
    slots run hour by hour at minute 0 then 30. An empty window yields no
    slots.
    """
    slots: list[SlotKey] = []
    for d in sorted(set(dates)):
        for hour in window.hours:
            for minute in SLOT_MINUTES:
                slots.append(SlotKey(d, hour, minute))
    return slots


def parse_slots(values: Iterable[str]) -> list[SlotKey]:
    """Parse wire-form slots, dropping duplicates but keeping first-seen order."""
    seen: set[SlotKey] = set()
    out: list[SlotKey] = []
    for value in values:
        slot = SlotKey.parse(value)
        if slot not in seen:
            seen.add(slot)
            out.append(slot)
    return out


def format_hour(hour: int) -> str:
    period = "PM" if hour >= 12 else "AM"
    display = hour % 12 or 12
    return f"{display}{period}"


def format_slot(slot: SlotKey) -> str:
    """Human readable form used in notification emails, e.g. ``Mon, Mar 10 at 9:30 AM``."""
    period = "PM" if slot.hour >= 12 else "AM"
    display = slot.hour % 12 or 12
    return f"{slot.date.strftime('%a, %b')} {slot.date.day} at {display}:{slot.minute:02d} {period}"
