import logging
from datetime import date
from typing import List
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..deps import get_lounge_zone, get_session
from ..domain.errors import MissingDurationInfo, PlacementImpossible
from ..infrastructure.repositories import SqlAlchemyTimeSlotRepository, SqlAlchemyTreatmentRepository
from ..schemas import AvailabilityRequest, BookingPatternRead, DaySlotRead, StartingSlotRead
from ..usecases import availability as availability_usecase
from ..utils.event_log import emit_event_log
from ..utils.time import utc_naive_to_local

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("", response_model=List[DaySlotRead])
async def list_day_slots(
    location_id: str = Query(..., alias="locationId", min_length=1),
    day: date = Query(..., alias="date", description="Lounge-local date (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session),
    tz: ZoneInfo = Depends(get_lounge_zone),
) -> list[DaySlotRead]:
    slot_repo = SqlAlchemyTimeSlotRepository(session)
    slots = await availability_usecase.list_day_slots(slot_repo, location_id=location_id, day=day, tz=tz)
    return [DaySlotRead.from_domain(slot=slot, tz=tz) for slot in slots]


@router.post("", response_model=List[StartingSlotRead])
async def check_availability(
    payload: AvailabilityRequest,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    tz: ZoneInfo = Depends(get_lounge_zone),
) -> list[StartingSlotRead]:
    treatment_repo = SqlAlchemyTreatmentRepository(session)
    slot_repo = SqlAlchemyTimeSlotRepository(session)
    try:
        result = await availability_usecase.check_availability(
            treatment_repo,
            slot_repo,
            location_id=payload.location_id,
            day=payload.day,
            attendees=[attendee.to_domain() for attendee in payload.attendees],
            tz=tz,
            slot_capacity=settings.slot_capacity,
            slot_minutes=settings.slot_minutes,
            add_on_minutes=settings.add_on_duration_minutes,
            require_contiguous=settings.require_contiguous_slots,
        )
    except MissingDurationInfo as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PlacementImpossible as exc:
        logger.error("booking pattern failed for %s on %s: %s", payload.location_id, payload.day, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="could not compute a booking pattern",
        ) from exc

    try:
        emit_event_log(
            action="availability.checked",
            location_id=payload.location_id,
            day=payload.day,
            attendee_count=len(payload.attendees),
            pattern_type=result.pattern_type,
            required_span=result.required_span,
            demand=result.demand,
            starting_slot_count=len(result.starting_slots),
        )
        stats = result.utilization_stats
        if stats is not None and stats.capacity_warnings:
            emit_event_log(
                action="availability.capacity_warning",
                location_id=payload.location_id,
                day=payload.day,
                attendee_count=len(payload.attendees),
                pattern_type=result.pattern_type,
                required_span=result.required_span,
                demand=result.demand,
                starting_slot_count=None,
                level="warning",
                extra={"offsets": list(stats.capacity_warnings)},
            )
    except RuntimeError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="failed to record availability event",
        ) from exc

    pattern = BookingPatternRead.from_result(result)
    return [
        StartingSlotRead(
            id=slot.id,
            start_time=utc_naive_to_local(slot.start_time, tz),
            end_time=utc_naive_to_local(slot.end_time, tz),
            remaining_seats=slot.remaining_seats,
            booking_pattern=pattern,
        )
        for slot in result.starting_slots
    ]
