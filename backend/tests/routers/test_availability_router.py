from datetime import date, datetime
from typing import Any, cast
from zoneinfo import ZoneInfo

import pytest
from fastapi import HTTPException
from ivbooking.config import Settings
from ivbooking.domain.availability import DaySlot
from ivbooking.domain.errors import MissingDurationInfo, PlacementImpossible
from ivbooking.domain.packing import SlotAssignment, UtilizationStats
from ivbooking.routers import availability as router
from ivbooking.schemas import AvailabilityRequest
from ivbooking.usecases.availability import AvailabilityResult
from sqlalchemy.ext.asyncio import AsyncSession

TZ = ZoneInfo("Africa/Johannesburg")


class DummySession:
    pass


def _payload(count: int = 1) -> AvailabilityRequest:
    return AvailabilityRequest.model_validate(
        {
            "locationId": "table_bay",
            "date": "2025-05-10",
            "attendees": [{"treatmentId": 15, "fluidOption": "200ml"} for _ in range(count)],
        }
    )


def _day_slot(slot_id: int, hour: int) -> DaySlot:
    return DaySlot(
        id=slot_id,
        start_time=datetime(2025, 5, 10, hour, 0),
        end_time=datetime(2025, 5, 10, hour, 30),
        capacity=2,
        booked_count=0,
    )


def _patch_repos(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(router, "SqlAlchemyTreatmentRepository", lambda s: s)  # type: ignore[assignment]
    monkeypatch.setattr(router, "SqlAlchemyTimeSlotRepository", lambda s: s)  # type: ignore[assignment]


async def _call(payload: AvailabilityRequest) -> Any:
    return await router.check_availability(
        payload=payload,
        session=cast(AsyncSession, DummySession()),
        settings=Settings(),
        tz=TZ,
    )


@pytest.mark.asyncio
async def test_returns_starting_slots_with_pattern(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    async def fake_check(*args: object, **kwargs: Any) -> AvailabilityResult:
        captured.update(kwargs)
        return AvailabilityResult(
            pattern_type="parallel",
            required_span=1,
            demand=[1],
            starting_slots=[_day_slot(7, 7), _day_slot(8, 8)],
        )

    calls: list[dict[str, Any]] = []

    def fake_emit(**kwargs: Any) -> None:
        calls.append(kwargs)

    _patch_repos(monkeypatch)
    monkeypatch.setattr(router.availability_usecase, "check_availability", fake_check)
    monkeypatch.setattr(router, "emit_event_log", fake_emit)

    result = await _call(_payload())

    assert [slot.id for slot in result] == [7, 8]
    assert result[0].start_time.isoformat() == "2025-05-10T09:00:00+02:00"
    assert result[0].booking_pattern.type == "parallel"
    assert result[0].booking_pattern.demand == [1]
    assert captured["slot_capacity"] == 2
    assert captured["day"] == date(2025, 5, 10)
    assert len(calls) == 1
    assert calls[0]["action"] == "availability.checked"
    assert calls[0]["starting_slot_count"] == 2


@pytest.mark.asyncio
async def test_capacity_warnings_emit_a_second_event(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_check(*args: object, **kwargs: object) -> AvailabilityResult:
        return AvailabilityResult(
            pattern_type="sequential",
            required_span=2,
            demand=[3, 1],
            starting_slots=[],
            slot_assignments=[SlotAssignment(slot_index=0, attendee_indexes=(0, 1, 2), attendee_count=3, max_duration=60)],
            utilization_stats=UtilizationStats(
                total_slots=2, full_utilization_slots=0, utilization_percentage=100, capacity_warnings=(0,)
            ),
        )

    calls: list[dict[str, Any]] = []

    def fake_emit(**kwargs: Any) -> None:
        calls.append(kwargs)

    _patch_repos(monkeypatch)
    monkeypatch.setattr(router.availability_usecase, "check_availability", fake_check)
    monkeypatch.setattr(router, "emit_event_log", fake_emit)

    result = await _call(_payload(3))

    assert result == []
    assert [c["action"] for c in calls] == ["availability.checked", "availability.capacity_warning"]
    assert calls[1]["extra"] == {"offsets": [0]}


@pytest.mark.asyncio
async def test_missing_duration_maps_to_404(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_check(*args: object, **kwargs: object) -> AvailabilityResult:
        raise MissingDurationInfo(15)

    _patch_repos(monkeypatch)
    monkeypatch.setattr(router.availability_usecase, "check_availability", fake_check)

    with pytest.raises(HTTPException) as excinfo:
        await _call(_payload())
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_placement_failure_maps_to_500(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_check(*args: object, **kwargs: object) -> AvailabilityResult:
        raise PlacementImpossible("bound exceeded")

    _patch_repos(monkeypatch)
    monkeypatch.setattr(router.availability_usecase, "check_availability", fake_check)

    with pytest.raises(HTTPException) as excinfo:
        await _call(_payload())
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_event_log_failure_returns_500(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_check(*args: object, **kwargs: object) -> AvailabilityResult:
        return AvailabilityResult(pattern_type="parallel", required_span=1, demand=[1], starting_slots=[])

    def fake_emit(**kwargs: Any) -> None:
        raise RuntimeError("fail log")

    _patch_repos(monkeypatch)
    monkeypatch.setattr(router.availability_usecase, "check_availability", fake_check)
    monkeypatch.setattr(router, "emit_event_log", fake_emit)

    with pytest.raises(HTTPException) as excinfo:
        await _call(_payload())
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_list_day_slots_converts_to_lounge_time(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_list(*args: object, **kwargs: object) -> list[DaySlot]:
        return [_day_slot(1, 7)]

    monkeypatch.setattr(router, "SqlAlchemyTimeSlotRepository", lambda s: s)  # type: ignore[assignment]
    monkeypatch.setattr(router.availability_usecase, "list_day_slots", fake_list)

    result = await router.list_day_slots(
        location_id="table_bay",
        day=date(2025, 5, 10),
        session=cast(AsyncSession, DummySession()),
        tz=TZ,
    )
    assert result[0].start_time.isoformat() == "2025-05-10T09:00:00+02:00"
    assert result[0].remaining_seats == 2
