from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence


@dataclass(frozen=True)
class DaySlot:
    id: int
    start_time: datetime
    end_time: datetime
    capacity: int
    booked_count: int

    @property
    def remaining_seats(self) -> int:
        return self.capacity - self.booked_count


def find_starting_slots(
    day_slots: Sequence[DaySlot],
    required_span: int,
    demand: Sequence[int],
    *,
    require_contiguous: bool = True,
) -> list[DaySlot]:
    """
    Return every slot from which the demand vector fits the following slots.

    `day_slots` must be ordered by start time for one location and day. With
    `require_contiguous`, a window that contains a time gap between two adjacent
    entries is rejected instead of being treated as consecutive.
    """
    if required_span < 1:
        raise ValueError("required_span must be >= 1")
    if len(demand) != required_span:
        raise ValueError(f"demand has {len(demand)} entries, expected {required_span}")
    if required_span > len(day_slots):
        return []

    gaps = _gap_positions(day_slots) if require_contiguous else set()
    starting: list[DaySlot] = []
    for i in range(len(day_slots) - required_span + 1):
        if any(j in gaps for j in range(i, i + required_span - 1)):
            continue
        if all(day_slots[i + k].remaining_seats >= demand[k] for k in range(required_span)):
            starting.append(day_slots[i])
    return starting


def slots_are_adjacent(earlier: DaySlot, later: DaySlot) -> bool:
    return later.start_time == earlier.end_time


def _gap_positions(day_slots: Sequence[DaySlot]) -> set[int]:
    # j is a gap when slot j+1 does not start where slot j ends
    return {j for j in range(len(day_slots) - 1) if not slots_are_adjacent(day_slots[j], day_slots[j + 1])}
