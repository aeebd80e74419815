from datetime import date

import pytest

from slotboard.scheduling.aggregation import aggregate, intensity_tier
from slotboard.scheduling.slots import SlotKey, TimeWindow, generate_slots

DAY = date(2025, 3, 10)
A, B, C, D = (SlotKey(DAY, 9, 0), SlotKey(DAY, 9, 30), SlotKey(DAY, 10, 0), SlotKey(DAY, 10, 30))
UNIVERSE = [A, B, C, D]


def participant(name, *slots):
    return {"id": name, "name": name, "slots": [str(s) for s in slots]}


def test_counts_max_and_intensity():
    heatmap = aggregate(UNIVERSE, [participant("p1", A, B), participant("p2", B, C)])

    assert heatmap.counts == {A: 1, B: 2, C: 1, D: 0}
    assert heatmap.max == 2
    assert heatmap.intensity(B) == 1.0
    assert heatmap.tier(B) == 4
    assert heatmap.intensity(D) == 0
    assert heatmap.tier(D) == 0
    assert heatmap.intensity(A) == 0.5
    assert heatmap.tier(A) == 2
    assert heatmap.best_slots() == [B]
    assert heatmap.names[B] == ["p1", "p2"]


def test_no_participants():
    heatmap = aggregate(UNIVERSE, [])
    assert heatmap.max == 0
    assert all(heatmap.intensity(s) == 0 for s in UNIVERSE)
    assert heatmap.best_slots() == []


def test_stale_and_malformed_slots_are_ignored():
    rows = [
        {"id": "1", "name": "p1", "slots": [str(A), "2024-01-01T09:00", "not-a-slot", "2025-03-10T09:15"]},
        {"id": "2", "name": "p2", "slots": None},
    ]
    heatmap = aggregate(UNIVERSE, rows)

    assert heatmap.counts == {A: 1, B: 0, C: 0, D: 0}
    assert heatmap.total_participants == 2


def test_repeated_slot_counts_once_per_participant():
    heatmap = aggregate(UNIVERSE, [{"id": "1", "name": "p1", "slots": [str(A), str(A)]}])
    assert heatmap.count(A) == 1


@pytest.mark.parametrize(
    "value,tier",
    [(0, 0), (0.01, 1), (0.25, 1), (0.26, 2), (0.5, 2), (0.51, 3), (0.75, 3), (0.76, 4), (1.0, 4)],
)
def test_tier_boundaries(value, tier):
    assert intensity_tier(value) == tier


def test_to_dict_follows_grid_order():
    grid = generate_slots([DAY], TimeWindow(9, 11))
    data = aggregate(grid, [participant("p1", C)]).to_dict()

    assert [s["slot"] for s in data["slots"]] == [str(s) for s in grid]
    assert data["max"] == 1
    assert data["best_slots"] == [str(C)]
    assert data["slots"][2] == {
        "slot": str(C),
        "count": 1,
        "intensity": 1.0,
        "tier": 4,
        "participants": ["p1"],
    }
