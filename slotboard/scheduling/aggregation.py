"""Fold participants' slot choices into a heat-map."""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from slotboard.scheduling.slots import SlotKey

logger = logging.getLogger(__name__)

# Upper bounds (inclusive) of intensity tiers 1..4; tier 0 is "nobody".
TIER_BOUNDS: tuple[float, ...] = (0.25, 0.5, 0.75, 1.0)


def intensity_tier(intensity: float) -> int:
    if intensity <= 0:
        return 0
    for tier, bound in enumerate(TIER_BOUNDS, start=1):
        if intensity <= bound:
            return tier
    return len(TIER_BOUNDS)


@dataclass
class Heatmap:
    grid: list[SlotKey]
    counts: dict[SlotKey, int]
    names: dict[SlotKey, list[str]] = field(default_factory=dict)
    total_participants: int = 0

    @property
    def max(self) -> int:
        return max(self.counts.values(), default=0)

    def count(self, slot: SlotKey) -> int:
        return self.counts.get(slot, 0)

    def intensity(self, slot: SlotKey) -> float:
        top = self.max
        if top == 0:
            return 0.0
        return self.count(slot) / top

    def tier(self, slot: SlotKey) -> int:
        return intensity_tier(self.intensity(slot))

    def best_slots(self) -> list[SlotKey]:
        top = self.max
        if top == 0:
            return []
        return [s for s in self.grid if self.counts[s] == top]

    def to_dict(self) -> dict[str, Any]:
        return {
            "max": self.max,
            "total_participants": self.total_participants,
            "best_slots": [str(s) for s in self.best_slots()],
            "slots": [
                {
                    "slot": str(s),
                    "count": self.counts[s],
                    "intensity": self.intensity(s),
                    "tier": self.tier(s),
                    "participants": self.names.get(s, []),
                }
                for s in self.grid
            ],
        }


def aggregate(grid: Sequence[SlotKey], participants: Iterable[dict[str, Any]]) -> Heatmap:
    """Count, per grid slot, how many participants listed it.

    ``participants`` are rows with ``name`` and ``slots`` (wire-form
    strings). Values that do not parse or fall outside ``grid`` are skipped;
    a participant listing the same slot twice is counted once.
    """
    universe = set(grid)
    counts: Counter[SlotKey] = Counter({s: 0 for s in grid})
    names: dict[SlotKey, list[str]] = {}
    total = 0
    for p in participants:
        total += 1
        seen: set[SlotKey] = set()
        for raw in p.get("slots") or []:
            try:
                slot = SlotKey.parse(raw)
            except ValueError:
                logger.debug("ignoring malformed slot %r for participant %s", raw, p.get("id"))
                continue
            if slot not in universe or slot in seen:
                continue
            seen.add(slot)
            counts[slot] += 1
            names.setdefault(slot, []).append(p.get("name", ""))
    return Heatmap(grid=list(grid), counts=dict(counts), names=names, total_participants=total)
