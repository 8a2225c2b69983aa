from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.durations import TreatmentDuration
from ..domain.repositories import LocationRepository, TimeSlotRepository, TreatmentRepository, VitaminRepository
from ..models import AdditionalVitamin, Location, TimeSlot, Treatment


class SqlAlchemyTreatmentRepository(TreatmentRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_active(self) -> List[Treatment]:
        stmt = select(Treatment).where(Treatment.is_active.is_(True)).order_by(Treatment.name)
        return list((await self.session.scalars(stmt)).all())

    async def list_by_ids(self, treatment_ids: Iterable[int]) -> List[Treatment]:
        ids = list(set(treatment_ids))
        if not ids:
            return []
        stmt = select(Treatment).where(Treatment.id.in_(ids))
        return list((await self.session.scalars(stmt)).all())

    async def get_durations(self, treatment_ids: Iterable[int]) -> Dict[int, TreatmentDuration]:
        durations: Dict[int, TreatmentDuration] = {}
        for treatment in await self.list_by_ids(treatment_ids):
            # rows without both durations stay out so lookups fail loudly
            if treatment.duration_minutes_200ml is None or treatment.duration_minutes_1000ml is None:
                continue
            durations[int(treatment.id)] = TreatmentDuration(
                duration_minutes_200ml=treatment.duration_minutes_200ml,
                duration_minutes_1000ml=treatment.duration_minutes_1000ml,
            )
        return durations


class SqlAlchemyVitaminRepository(VitaminRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_all(self) -> List[AdditionalVitamin]:
        stmt = select(AdditionalVitamin).order_by(AdditionalVitamin.name)
        return list((await self.session.scalars(stmt)).all())


class SqlAlchemyLocationRepository(LocationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_all(self) -> List[Location]:
        stmt = select(Location).order_by(Location.name)
        return list((await self.session.scalars(stmt)).all())


class SqlAlchemyTimeSlotRepository(TimeSlotRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_day(
        self,
        location_id: str,
        start: datetime,
        end: datetime,
    ) -> List[TimeSlot]:
        stmt = (
            select(TimeSlot)
            .where(
                TimeSlot.location_id == location_id,
                TimeSlot.start_time >= start,
                TimeSlot.start_time < end,
            )
            .order_by(TimeSlot.start_time.asc())
        )
        return list((await self.session.scalars(stmt)).all())
