"""Resolve a room's default time window and per-date overrides into one grid."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from slotboard.scheduling.slots import SLOT_MINUTES, SlotKey, TimeWindow, generate_slots, parse_date


@dataclass(frozen=True)
class GridCell:
    slot: SlotKey
    out_of_range: bool


@dataclass
class TimeRangeResolver:
    """Effective and display windows for a set of dates.

    ``overrides`` only ever holds entries for availability rooms; booking
    rooms are resolved with an empty mapping so every date uses ``default``.
    """

    dates: Sequence[date]
    default: TimeWindow
    overrides: Mapping[date, TimeWindow] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.dates = sorted(set(self.dates))

    def effective_window(self, d: date) -> TimeWindow:
        return self.overrides.get(d, self.default)

    @property
    def display_window(self) -> TimeWindow:
        windows = [self.effective_window(d) for d in self.dates] or [self.default]
        return TimeWindow(
            start=min(w.start for w in windows),
            end=max(w.end for w in windows),
        )

    def is_out_of_range(self, d: date, hour: int) -> bool:
        return not self.effective_window(d).contains(hour)

    def room_slots(self) -> list[SlotKey]:
        slots: list[SlotKey] = []
        for d in self.dates:
            slots.extend(generate_slots([d], self.effective_window(d)))
        return slots

    def grid_cells(self) -> list[GridCell]:
        """Every cell of the display window, date-major, flagged when outside its date's window."""
        display = self.display_window
        cells: list[GridCell] = []
        for d in self.dates:
            for hour in display.hours:
                out = self.is_out_of_range(d, hour)
                for minute in SLOT_MINUTES:
                    cells.append(GridCell(SlotKey(d, hour, minute), out))
        return cells


def resolver_for_room(room: Mapping[str, Any]) -> TimeRangeResolver:
    """Build the resolver for a stored room row.

    Per-date ranges are honoured for availability rooms only.
    """
    overrides: dict[date, TimeWindow] = {}
    if room.get("kind", "availability") == "availability":
        for raw, (start, end) in (room.get("time_ranges") or {}).items():
            overrides[parse_date(raw)] = TimeWindow(start, end)
    return TimeRangeResolver(
        dates=[parse_date(d) for d in room["dates"]],
        default=TimeWindow(room["time_start"], room["time_end"]),
        overrides=overrides,
    )
