"""Drag/tap multi-select over a slot grid.

One state machine owns the selection. Pointer and touch input are thin
adapters that translate their native events into the three interaction
calls the machine understands: ``start``, ``move`` and ``end``.
"""

import logging
from collections.abc import Callable, Collection, Iterable
from datetime import datetime
from enum import Enum
from typing import Protocol

from slotboard.scheduling.slots import SlotKey

logger = logging.getLogger(__name__)

TOUCH_SCROLL_THRESHOLD_PX = 10


class DragMode(str, Enum):
    SELECT = "select"
    DESELECT = "deselect"


class Interaction(Protocol):
    def start(self, slot: SlotKey) -> bool: ...

    def move(self, slot: SlotKey) -> bool: ...

    def end(self) -> None: ...


class SelectionMachine:
    """Idle/Dragging selection state.

    ``mode`` is ``None`` while idle. Past slots, slots outside ``selectable``
    and any slot of a read-only grid never change state. "Past" is checked
    against ``clock()`` on every event, so a grid left open across midnight
    locks the earlier slots without being rebuilt.
    """

    def __init__(
        self,
        selected: Iterable[SlotKey] = (),
        *,
        selectable: Collection[SlotKey] | None = None,
        read_only: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._selected: dict[SlotKey, None] = dict.fromkeys(selected)
        self._selectable = set(selectable) if selectable is not None else None
        self._read_only = read_only
        self._clock = clock
        self.mode: DragMode | None = None
        self._last: SlotKey | None = None

    @property
    def is_dragging(self) -> bool:
        return self.mode is not None

    @property
    def selection(self) -> list[SlotKey]:
        return list(self._selected)

    def is_selected(self, slot: SlotKey) -> bool:
        return slot in self._selected

    def is_past(self, slot: SlotKey) -> bool:
        return slot.to_datetime() < self._clock()

    def is_selectable(self, slot: SlotKey) -> bool:
        if self._read_only or self.is_past(slot):
            return False
        return self._selectable is None or slot in self._selectable

    def start(self, slot: SlotKey) -> bool:
        """Begin a drag on ``slot`` and toggle it. Returns whether anything changed."""
        if not self.is_selectable(slot):
            return False
        if slot in self._selected:
            self.mode = DragMode.DESELECT
            del self._selected[slot]
        else:
            self.mode = DragMode.SELECT
            self._selected[slot] = None
        self._last = slot
        return True

    def move(self, slot: SlotKey) -> bool:
        if self.mode is None or slot == self._last:
            return False
        self._last = slot
        if not self.is_selectable(slot):
            return False
        if self.mode is DragMode.SELECT:
            if slot in self._selected:
                return False
            self._selected[slot] = None
            return True
        if slot not in self._selected:
            return False
        del self._selected[slot]
        return True

    def end(self) -> None:
        self.mode = None
        self._last = None

    def clear(self) -> None:
        self.end()
        self._selected.clear()

    def submit(self) -> list[str]:
        """Wire-form slots in canonical order, dropping anything that has since passed."""
        return [str(s) for s in sorted(self._selected) if not self.is_past(s)]


class PointerInput:
    """Mouse events: down starts, enter while held moves, up or leaving the grid ends."""

    def __init__(self, target: Interaction) -> None:
        self.target = target
        self._pressed = False

    def pointer_down(self, slot: SlotKey) -> None:
        self._pressed = True
        self.target.start(slot)

    def pointer_enter(self, slot: SlotKey) -> None:
        if self._pressed:
            self.target.move(slot)

    def pointer_up(self) -> None:
        self._pressed = False
        self.target.end()

    def pointer_leave_grid(self) -> None:
        self._pressed = False
        self.target.end()


class TouchInput:
    """Touch events with scroll detection.

    Once the finger has travelled more than ``threshold`` pixels on either
    axis from where it landed, the sequence is a scroll: the drag is ended
    and the rest of the sequence is ignored.
    """

    def __init__(self, target: Interaction, threshold: int = TOUCH_SCROLL_THRESHOLD_PX) -> None:
        self.target = target
        self.threshold = threshold
        self._origin: tuple[float, float] | None = None
        self.scrolling = False

    def touch_start(self, slot: SlotKey, x: float, y: float) -> None:
        self._origin = (x, y)
        self.scrolling = False
        self.target.start(slot)

    def touch_move(self, x: float, y: float, slot: SlotKey | None = None) -> None:
        if self._origin is None or self.scrolling:
            return
        ox, oy = self._origin
        if abs(x - ox) > self.threshold or abs(y - oy) > self.threshold:
            logger.debug("touch sequence classified as scroll at (%s, %s)", x, y)
            self.scrolling = True
            self.target.end()
            return
        if slot is not None:
            self.target.move(slot)

    def touch_end(self) -> None:
        self._origin = None
        self.scrolling = False
        self.target.end()
