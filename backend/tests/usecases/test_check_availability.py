from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

import pytest
from ivbooking.domain.durations import AttendeeRequirement, FluidOption, TreatmentDuration
from ivbooking.domain.errors import MissingDurationInfo
from ivbooking.models import TimeSlot
from ivbooking.usecases import availability as uc

TZ = ZoneInfo("Africa/Johannesburg")
DAY = date(2025, 5, 10)


class FakeTreatmentRepo:
    def __init__(self, durations: Dict[int, TreatmentDuration]) -> None:
        self.durations = durations
        self.requested: Optional[List[int]] = None

    async def get_durations(self, treatment_ids: Iterable[int]) -> Dict[int, TreatmentDuration]:
        self.requested = sorted(treatment_ids)
        return {tid: d for tid, d in self.durations.items() if tid in self.requested}


class FakeSlotRepo:
    def __init__(self, slots: List[TimeSlot]) -> None:
        self.slots = slots
        self.bounds: Optional[Tuple[str, datetime, datetime]] = None

    async def list_for_day(self, location_id: str, start: datetime, end: datetime) -> List[TimeSlot]:
        self.bounds = (location_id, start, end)
        return self.slots


def _slots(booked: List[int], capacity: int = 2) -> List[TimeSlot]:
    # 09:00 lounge time is 07:00 UTC
    first = datetime(2025, 5, 10, 7, 0)
    return [
        TimeSlot(
            id=i + 1,
            location_id="table_bay",
            start_time=first + timedelta(minutes=30 * i),
            end_time=first + timedelta(minutes=30 * (i + 1)),
            capacity=capacity,
            booked_count=count,
        )
        for i, count in enumerate(booked)
    ]


DURATIONS = {
    15: TreatmentDuration(duration_minutes_200ml=30, duration_minutes_1000ml=60),
    16: TreatmentDuration(duration_minutes_200ml=30, duration_minutes_1000ml=60),
    17: TreatmentDuration(duration_minutes_200ml=30, duration_minutes_1000ml=60),
}


@pytest.mark.asyncio
async def test_small_group_uses_parallel_pattern() -> None:
    treatment_repo = FakeTreatmentRepo(DURATIONS)
    slot_repo = FakeSlotRepo(_slots([2, 0, 0]))
    result = await uc.check_availability(
        treatment_repo,
        slot_repo,
        location_id="table_bay",
        day=DAY,
        attendees=[AttendeeRequirement(treatment_id=15, fluid_option=FluidOption.ML_200)],
        tz=TZ,
    )
    assert result.pattern_type == "parallel"
    assert result.required_span == 1
    assert result.demand == [1]
    assert [s.id for s in result.starting_slots] == [2, 3]
    assert result.slot_assignments == []
    assert result.utilization_stats is None


@pytest.mark.asyncio
async def test_day_bounds_follow_lounge_timezone() -> None:
    slot_repo = FakeSlotRepo([])
    await uc.check_availability(
        FakeTreatmentRepo(DURATIONS),
        slot_repo,
        location_id="table_bay",
        day=DAY,
        attendees=[AttendeeRequirement(treatment_id=15, fluid_option=FluidOption.ML_200)],
        tz=TZ,
    )
    assert slot_repo.bounds == ("table_bay", datetime(2025, 5, 9, 22, 0), datetime(2025, 5, 10, 22, 0))


@pytest.mark.asyncio
async def test_large_group_uses_sequential_pattern() -> None:
    attendees = [
        AttendeeRequirement(treatment_id=15, fluid_option=FluidOption.ML_200),
        AttendeeRequirement(treatment_id=16, fluid_option=FluidOption.ML_1000),
        AttendeeRequirement(treatment_id=17, fluid_option=FluidOption.ML_200),
    ]
    result = await uc.check_availability(
        FakeTreatmentRepo(DURATIONS),
        FakeSlotRepo(_slots([0, 0, 0, 1, 0, 0])),
        location_id="table_bay",
        day=DAY,
        attendees=attendees,
        tz=TZ,
    )
    assert result.pattern_type == "sequential"
    assert result.demand == [2, 1, 1]
    assert len(result.slot_assignments) == 2
    assert result.utilization_stats is not None
    # slot 4 has one seat left but the window needs two at its first offset
    assert [s.id for s in result.starting_slots] == [1, 2, 3]


@pytest.mark.asyncio
async def test_string_treatment_ids_are_accepted() -> None:
    treatment_repo = FakeTreatmentRepo(DURATIONS)
    result = await uc.check_availability(
        treatment_repo,
        FakeSlotRepo(_slots([0, 0])),
        location_id="table_bay",
        day=DAY,
        attendees=[AttendeeRequirement(treatment_id="16", fluid_option=FluidOption.ML_1000)],
        tz=TZ,
    )
    assert treatment_repo.requested == [16]
    assert result.demand == [1, 1]
    assert [s.id for s in result.starting_slots] == [1]


@pytest.mark.asyncio
async def test_missing_durations_raise_before_slots_are_fetched() -> None:
    slot_repo = FakeSlotRepo(_slots([0]))
    with pytest.raises(MissingDurationInfo) as excinfo:
        await uc.check_availability(
            FakeTreatmentRepo(DURATIONS),
            slot_repo,
            location_id="table_bay",
            day=DAY,
            attendees=[
                AttendeeRequirement(treatment_id=15, fluid_option=FluidOption.ML_200),
                AttendeeRequirement(treatment_id=88, fluid_option=FluidOption.ML_200),
                AttendeeRequirement(treatment_id="abc", fluid_option=FluidOption.ML_200),
            ],
            tz=TZ,
        )
    assert "88" in str(excinfo.value)
    assert "abc" in str(excinfo.value)
    assert slot_repo.bounds is None


@pytest.mark.asyncio
async def test_short_day_yields_no_starting_slots() -> None:
    result = await uc.check_availability(
        FakeTreatmentRepo(DURATIONS),
        FakeSlotRepo(_slots([0, 0])),
        location_id="table_bay",
        day=DAY,
        attendees=[AttendeeRequirement(treatment_id=15, fluid_option=FluidOption.ML_200, add_on_treatment_id=14)],
        tz=TZ,
    )
    assert result.required_span == 3
    assert result.starting_slots == []


@pytest.mark.asyncio
async def test_list_day_slots_reports_remaining_seats() -> None:
    slots = await uc.list_day_slots(FakeSlotRepo(_slots([1, 2])), location_id="table_bay", day=DAY, tz=TZ)
    assert [s.remaining_seats for s in slots] == [1, 0]
