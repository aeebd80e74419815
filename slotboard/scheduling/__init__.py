"""Slot grid, selection, booking and aggregation logic.

Everything here except ``booking`` is pure and does no I/O.
"""

from slotboard.scheduling.aggregation import Heatmap, aggregate, intensity_tier
from slotboard.scheduling.selection import DragMode, PointerInput, SelectionMachine, TouchInput
from slotboard.scheduling.slots import SlotKey, TimeWindow, generate_slots, parse_slots
from slotboard.scheduling.time_ranges import GridCell, TimeRangeResolver, resolver_for_room

__all__ = [
    "DragMode",
    "GridCell",
    "Heatmap",
    "PointerInput",
    "SelectionMachine",
    "SlotKey",
    "TimeRangeResolver",
    "TimeWindow",
    "TouchInput",
    "aggregate",
    "generate_slots",
    "intensity_tier",
    "parse_slots",
    "resolver_for_room",
]
