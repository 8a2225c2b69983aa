from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Sequence
from zoneinfo import ZoneInfo

from ..domain.availability import DaySlot, find_starting_slots
from ..domain.durations import AttendeeRequirement, lookup_key
from ..domain.errors import MissingDurationInfo
from ..domain.packing import SlotAssignment, UtilizationStats, compute_optimized_pattern, validate_sequential_booking
from ..domain.patterns import compute_pattern
from ..domain.repositories import TimeSlotRepository, TreatmentRepository
from ..models import TimeSlot
from ..utils.time import day_bounds_utc

logger = logging.getLogger(__name__)

PatternType = Literal["parallel", "sequential"]


@dataclass(frozen=True)
class AvailabilityResult:
    pattern_type: PatternType
    required_span: int
    demand: list[int]
    starting_slots: list[DaySlot]
    slot_assignments: list[SlotAssignment] = field(default_factory=list)
    utilization_stats: UtilizationStats | None = None


def to_day_slot(slot: TimeSlot) -> DaySlot:
    return DaySlot(
        id=slot.id,
        start_time=slot.start_time,
        end_time=slot.end_time,
        capacity=slot.capacity,
        booked_count=slot.booked_count,
    )


async def list_day_slots(
    slot_repo: TimeSlotRepository,
    *,
    location_id: str,
    day: date,
    tz: ZoneInfo,
) -> list[DaySlot]:
    start, end = day_bounds_utc(day, tz)
    rows = await slot_repo.list_for_day(location_id=location_id, start=start, end=end)
    return [to_day_slot(row) for row in rows]


async def check_availability(
    treatment_repo: TreatmentRepository,
    slot_repo: TimeSlotRepository,
    *,
    location_id: str,
    day: date,
    attendees: Sequence[AttendeeRequirement],
    tz: ZoneInfo,
    slot_capacity: int = 2,
    slot_minutes: int = 30,
    add_on_minutes: int = 90,
    require_contiguous: bool = True,
) -> AvailabilityResult:
    if not attendees:
        raise ValueError("at least one attendee is required")

    treatment_ids = {lookup_key(a.treatment_id) for a in attendees}
    numeric_ids = [tid for tid in treatment_ids if isinstance(tid, int)]
    durations = await treatment_repo.get_durations(numeric_ids)
    missing = sorted((str(tid) for tid in treatment_ids if tid not in durations))
    if missing:
        raise MissingDurationInfo(missing[0], f"duration info missing for treatment ids {', '.join(missing)}")

    options = {"slot_minutes": slot_minutes, "add_on_minutes": add_on_minutes}
    if len(attendees) > slot_capacity:
        packed = compute_optimized_pattern(attendees, durations, slot_capacity, **options)
        pattern_type: PatternType = "sequential"
        required_span, demand = packed.required_span, packed.demand
        assignments, stats = packed.slot_assignments, packed.utilization_stats
    else:
        pattern = compute_pattern(attendees, durations, slot_capacity, **options)
        pattern_type = "parallel"
        required_span, demand = pattern.required_span, pattern.demand
        assignments, stats = [], None

    day_slots = await list_day_slots(slot_repo, location_id=location_id, day=day, tz=tz)
    feasibility = validate_sequential_booking(len(attendees), len(day_slots), required_span, slot_capacity)
    if not feasibility.feasible:
        logger.info("no availability at %s on %s: %s", location_id, day, feasibility.reason)
        starting: list[DaySlot] = []
    else:
        starting = find_starting_slots(day_slots, required_span, demand, require_contiguous=require_contiguous)

    return AvailabilityResult(
        pattern_type=pattern_type,
        required_span=required_span,
        demand=demand,
        starting_slots=starting,
        slot_assignments=assignments,
        utilization_stats=stats,
    )
