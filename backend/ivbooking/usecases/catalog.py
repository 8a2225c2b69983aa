from decimal import Decimal
from typing import Sequence

from ..domain.pricing import PricedAttendee, PricedItem, PricingCalculation, calculate_booking_price
from ..domain.repositories import LocationRepository, TreatmentRepository, VitaminRepository
from ..models import AdditionalVitamin, Location, Treatment


async def list_treatments(treatment_repo: TreatmentRepository) -> list[Treatment]:
    return await treatment_repo.list_active()


async def list_vitamins(vitamin_repo: VitaminRepository) -> list[AdditionalVitamin]:
    return await vitamin_repo.list_all()


async def list_locations(location_repo: LocationRepository) -> list[Location]:
    return await location_repo.list_all()


async def quote_price(
    treatment_repo: TreatmentRepository,
    vitamin_repo: VitaminRepository,
    *,
    attendees: Sequence[PricedAttendee],
    currency: str,
) -> PricingCalculation:
    if not attendees:
        raise ValueError("at least one attendee is required")
    treatments = await treatment_repo.list_by_ids(a.treatment_id for a in attendees)
    vitamins = await vitamin_repo.list_all()
    return calculate_booking_price(
        attendees,
        [PricedItem(id=int(t.id), name=t.name, price=Decimal(t.price)) for t in treatments],
        [PricedItem(id=int(v.id), name=v.name, price=Decimal(v.price)) for v in vitamins],
        currency=currency,
    )
