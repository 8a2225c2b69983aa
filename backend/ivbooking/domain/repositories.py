from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping, Protocol

from ..models import AdditionalVitamin, Location, TimeSlot, Treatment
from .durations import TreatmentDuration


class TreatmentRepository(Protocol):
    async def list_active(self) -> list[Treatment]: ...

    async def get_durations(self, treatment_ids: Iterable[int]) -> Mapping[int, TreatmentDuration]: ...

    async def list_by_ids(self, treatment_ids: Iterable[int]) -> list[Treatment]: ...


class VitaminRepository(Protocol):
    async def list_all(self) -> list[AdditionalVitamin]: ...


class LocationRepository(Protocol):
    async def list_all(self) -> list[Location]: ...


class TimeSlotRepository(Protocol):
    async def list_for_day(
        self,
        location_id: str,
        start: datetime,
        end: datetime,
    ) -> list[TimeSlot]: ...
