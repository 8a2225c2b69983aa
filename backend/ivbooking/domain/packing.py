from __future__ import annotations

import logging
import math
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
from .patterns import add_demand, place_first_fit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotAssignment:
    slot_index: int
    attendee_indexes: tuple[int, ...]
    attendee_count: int
    max_duration: int


@dataclass(frozen=True)
class UtilizationStats:
    total_slots: int
    full_utilization_slots: int
    utilization_percentage: int
    capacity_warnings: tuple[int, ...] = ()


@dataclass(frozen=True)
class PackedPattern:
    required_span: int
    demand: list[int]
    slot_assignments: list[SlotAssignment]
    is_sequential: bool
    utilization_stats: UtilizationStats


@dataclass(frozen=True)
class SequentialFeasibility:
    feasible: bool
    reason: str | None = None


def compute_optimized_pattern(
    attendees: Sequence[AttendeeRequirement],
    duration_lookup: DurationLookup,
    slot_capacity: int = 2,
    *,
    slot_minutes: int = SLOT_MINUTES,
    add_on_minutes: int = ADD_ON_DURATION_MINUTES,
) -> PackedPattern:
    """
    Pack attendees into groups of similar duration and stagger the groups over
    consecutive slots to keep the total span short.

    Groups never exceed `slot_capacity` members. A group normally starts one slot
    after the previous one; it falls back to starting after the previous group
    finishes when staggering would overfill a slot. Offsets whose demand still
    exceeds capacity are reported in `utilization_stats.capacity_warnings` and
    logged, never raised.
    """
    if not attendees:
        raise ValueError("at least one attendee is required")
    if slot_capacity < 1:
        raise PlacementImpossible(f"slot capacity must be >= 1, got {slot_capacity}")

    durations = resolve_durations(
        attendees, duration_lookup, slot_minutes=slot_minutes, add_on_minutes=add_on_minutes
    )

    if len(durations) <= slot_capacity:
        pattern = place_first_fit(durations, slot_capacity)
        assignments = [_assignment(0, durations)]
        return _finish(pattern.demand, assignments, slot_capacity, is_sequential=False)

    groups = group_by_duration(durations, slot_capacity)
    logger.debug(
        "packed %d attendees into %d groups: %s",
        len(durations),
        len(groups),
        [[d.attendee_index + 1 for d in group] for group in groups],
    )

    demand: list[int] = []
    assignments: list[SlotAssignment] = []
    start = 0
    for position, group in enumerate(groups):
        if position > 0:
            start = _next_start(demand, start, groups[position - 1], group, slot_capacity)
        for offset in range(start, start + _max_slots(group)):
            add_demand(demand, offset, len(group))
        assignments.append(_assignment(start, group))

    return _finish(demand, assignments, slot_capacity, is_sequential=True)


def group_by_duration(
    durations: Sequence[AttendeeDuration],
    slot_capacity: int,
) -> list[list[AttendeeDuration]]:
    pool = sorted(durations, key=lambda d: d.slots_needed)
    groups: list[list[AttendeeDuration]] = []
    while pool:
        group = [pool.pop(0)]
        while len(group) < slot_capacity and pool:
            target = _max_slots(group)
            # min() keeps the earliest candidate on ties
            best = min(range(len(pool)), key=lambda i: abs(pool[i].slots_needed - target))
            group.append(pool.pop(best))
        groups.append(group)
    return groups


def format_slot_assignments(slot_assignments: Sequence[SlotAssignment]) -> list[str]:
    lines = []
    for number, assignment in enumerate(slot_assignments, start=1):
        names = " & ".join(f"Attendee {i + 1}" for i in assignment.attendee_indexes)
        lines.append(f"Group {number}: {names} ({assignment.max_duration}min)")
    return lines


def validate_sequential_booking(
    attendee_count: int,
    available_slot_count: int,
    required_span: int,
    slot_capacity: int = 2,
) -> SequentialFeasibility:
    if available_slot_count < required_span:
        return SequentialFeasibility(
            feasible=False,
            reason=f"Insufficient time slots: need {required_span}, have {available_slot_count}",
        )
    if attendee_count > available_slot_count * slot_capacity:
        return SequentialFeasibility(
            feasible=False,
            reason=f"Too many attendees: {attendee_count} attendees need more capacity than available",
        )
    return SequentialFeasibility(feasible=True)


def _next_start(
    demand: list[int],
    previous_start: int,
    previous: list[AttendeeDuration],
    group: list[AttendeeDuration],
    slot_capacity: int,
) -> int:
    previous_span = _max_slots(previous)
    span = _max_slots(group)
    if len(previous) == 1 and previous_span <= 2:
        candidate = previous_start + previous_span
    else:
        candidate = previous_start + 1
        if not _fits(demand, candidate, span, len(group), slot_capacity):
            candidate = previous_start + previous_span
    # earlier long groups may still hold the window
    while not _fits(demand, candidate, span, len(group), slot_capacity):
        candidate += 1
    return candidate


def _fits(demand: list[int], start: int, length: int, seats: int, capacity: int) -> bool:
    for offset in range(start, start + length):
        current = demand[offset] if offset < len(demand) else 0
        if current + seats > capacity:
            return False
    return True


def _max_slots(group: Sequence[AttendeeDuration]) -> int:
    return max(d.slots_needed for d in group)


def _assignment(slot_index: int, group: Sequence[AttendeeDuration]) -> SlotAssignment:
    return SlotAssignment(
        slot_index=slot_index,
        attendee_indexes=tuple(d.attendee_index for d in group),
        attendee_count=len(group),
        max_duration=max(d.duration_minutes for d in group),
    )


def _finish(
    demand: list[int],
    assignments: list[SlotAssignment],
    slot_capacity: int,
    *,
    is_sequential: bool,
) -> PackedPattern:
    warnings = tuple(k for k, seats in enumerate(demand) if seats > slot_capacity)
    for offset in warnings:
        logger.warning(
            "slot offset %d has demand %d > capacity %d", offset, demand[offset], slot_capacity
        )

    occupied = sum(1 for seats in demand if seats > 0)
    percentage = 0
    if occupied:
        percentage = math.floor(sum(demand) / (occupied * slot_capacity) * 100 + 0.5)

    stats = UtilizationStats(
        total_slots=len(demand),
        full_utilization_slots=sum(1 for a in assignments if a.attendee_count == slot_capacity),
        utilization_percentage=percentage,
        capacity_warnings=warnings,
    )
    logger.info(
        "pattern span=%d demand=%s groups=%d utilization=%d%%",
        len(demand),
        demand,
        len(assignments),
        percentage,
    )
    return PackedPattern(
        required_span=len(demand),
        demand=list(demand),
        slot_assignments=assignments,
        is_sequential=is_sequential,
        utilization_stats=stats,
    )
