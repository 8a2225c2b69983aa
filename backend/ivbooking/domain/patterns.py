from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .durations import (
    ADD_ON_DURATION_MINUTES,
    SLOT_MINUTES,
    AttendeeDuration,
    AttendeeRequirement,
    DurationLookup,
    resolve_durations,
)
from .errors import PlacementImpossible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingPattern:
    required_span: int
    demand: list[int]


def compute_pattern(
    attendees: Sequence[AttendeeRequirement],
    duration_lookup: DurationLookup,
    slot_capacity: int = 2,
    *,
    slot_minutes: int = SLOT_MINUTES,
    add_on_minutes: int = ADD_ON_DURATION_MINUTES,
) -> BookingPattern:
    """
    Parallel placement: every attendee independently takes the earliest window
    of consecutive offsets that still has a free seat at each offset.

    Multi-slot attendees are placed before single-slot ones, each class in input
    order. This is first-fit, not an optimal packing.
    """
    if not attendees:
        raise ValueError("at least one attendee is required")
    durations = resolve_durations(
        attendees, duration_lookup, slot_minutes=slot_minutes, add_on_minutes=add_on_minutes
    )
    return place_first_fit(durations, slot_capacity)


def place_first_fit(durations: Sequence[AttendeeDuration], slot_capacity: int) -> BookingPattern:
    multi_slot = [d for d in durations if d.slots_needed > 1]
    single_slot = [d for d in durations if d.slots_needed <= 1]

    # No start offset beyond this can be needed while slot_capacity >= 1.
    bound = max(2 * len(durations), sum(d.slots_needed for d in durations))
    demand: list[int] = []
    max_offset = -1

    for entry in multi_slot + single_slot:
        start = 0
        while not _window_has_room(demand, start, entry.slots_needed, slot_capacity):
            start += 1
            if start > bound:
                raise PlacementImpossible(
                    f"no start offset within {bound} fits attendee {entry.attendee_index + 1} "
                    f"(capacity {slot_capacity})"
                )
        for offset in range(start, start + entry.slots_needed):
            add_demand(demand, offset, 1)
            max_offset = max(max_offset, offset)
        logger.debug(
            "placed attendee %d at offset %d for %d slot(s)",
            entry.attendee_index + 1,
            start,
            entry.slots_needed,
        )

    demand = demand[: max_offset + 1]
    over = [k for k, seats in enumerate(demand) if seats > slot_capacity]
    if over:
        raise PlacementImpossible(f"demand exceeds capacity {slot_capacity} at offsets {over}")
    return BookingPattern(required_span=max_offset + 1, demand=demand)


def _window_has_room(demand: list[int], start: int, length: int, capacity: int) -> bool:
    for offset in range(start, start + length):
        current = demand[offset] if offset < len(demand) else 0
        if current >= capacity:
            return False
    return True


def add_demand(demand: list[int], offset: int, seats: int) -> None:
    if offset >= len(demand):
        demand.extend([0] * (offset + 1 - len(demand)))
    demand[offset] += seats
