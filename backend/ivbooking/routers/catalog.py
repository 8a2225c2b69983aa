from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..deps import get_session
from ..infrastructure.repositories import (
    SqlAlchemyLocationRepository,
    SqlAlchemyTreatmentRepository,
    SqlAlchemyVitaminRepository,
)
from ..schemas import LocationRead, PricingQuoteRead, PricingQuoteRequest, TreatmentRead, VitaminRead
from ..usecases import catalog as catalog_usecase

router = APIRouter(prefix="", tags=["catalog"])


@router.get("/treatments", response_model=List[TreatmentRead])
async def list_treatments(session: AsyncSession = Depends(get_session)) -> list[TreatmentRead]:
    treatment_repo = SqlAlchemyTreatmentRepository(session)
    treatments = await catalog_usecase.list_treatments(treatment_repo)
    return [TreatmentRead.from_db(treatment=t) for t in treatments]


@router.get("/vitamins", response_model=List[VitaminRead])
async def list_vitamins(session: AsyncSession = Depends(get_session)) -> list[VitaminRead]:
    vitamin_repo = SqlAlchemyVitaminRepository(session)
    vitamins = await catalog_usecase.list_vitamins(vitamin_repo)
    return [VitaminRead.from_db(vitamin=v) for v in vitamins]


@router.get("/locations", response_model=List[LocationRead])
async def list_locations(session: AsyncSession = Depends(get_session)) -> list[LocationRead]:
    location_repo = SqlAlchemyLocationRepository(session)
    locations = await catalog_usecase.list_locations(location_repo)
    return [LocationRead.from_db(location=loc) for loc in locations]


@router.post("/pricing/quote", response_model=PricingQuoteRead)
async def quote_price(
    payload: PricingQuoteRequest,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> PricingQuoteRead:
    treatment_repo = SqlAlchemyTreatmentRepository(session)
    vitamin_repo = SqlAlchemyVitaminRepository(session)
    try:
        pricing = await catalog_usecase.quote_price(
            treatment_repo,
            vitamin_repo,
            attendees=[a.to_domain() for a in payload.attendees],
            currency=settings.currency,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return PricingQuoteRead.from_domain(pricing)
