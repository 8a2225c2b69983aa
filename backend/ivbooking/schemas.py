from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional, Union
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .domain.availability import DaySlot
from .domain.durations import AttendeeRequirement, FluidOption
from .domain.packing import SlotAssignment, UtilizationStats
from .domain.pricing import PricedAttendee, PricingCalculation, generate_pricing_description
from .models import AdditionalVitamin, Location, Treatment
from .usecases.availability import AvailabilityResult
from .utils.time import utc_naive_to_local


class AttendeeRequirementIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    treatment_id: Union[int, str] = Field(alias="treatmentId")
    fluid_option: FluidOption = Field(alias="fluidOption")
    add_on_treatment_id: Optional[Union[int, str]] = Field(default=None, alias="addOnTreatmentId")

    @field_validator("treatment_id")
    @classmethod
    def _treatment_id_not_blank(cls, value: Union[int, str]) -> Union[int, str]:
        if isinstance(value, str) and not value.strip():
            raise ValueError("treatment selection is required for each attendee")
        return value

    def to_domain(self) -> AttendeeRequirement:
        return AttendeeRequirement(
            treatment_id=self.treatment_id,
            fluid_option=self.fluid_option,
            add_on_treatment_id=self.add_on_treatment_id,
        )


class AvailabilityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location_id: str = Field(alias="locationId", min_length=1)
    day: date = Field(alias="date")
    attendees: list[AttendeeRequirementIn] = Field(min_length=1)


class DaySlotRead(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime
    capacity: int
    booked_count: int
    remaining_seats: int

    @field_serializer("start_time", "end_time")
    def _ser_datetime(self, dt: datetime) -> str:
        return dt.isoformat()

    @classmethod
    def from_domain(cls, *, slot: DaySlot, tz: ZoneInfo) -> "DaySlotRead":
        return cls(
            id=slot.id,
            start_time=utc_naive_to_local(slot.start_time, tz),
            end_time=utc_naive_to_local(slot.end_time, tz),
            capacity=slot.capacity,
            booked_count=slot.booked_count,
            remaining_seats=slot.remaining_seats,
        )


class SlotAssignmentRead(BaseModel):
    slot_index: int
    attendee_indexes: list[int]
    attendee_count: int
    max_duration: int

    @classmethod
    def from_domain(cls, assignment: SlotAssignment) -> "SlotAssignmentRead":
        return cls(
            slot_index=assignment.slot_index,
            attendee_indexes=list(assignment.attendee_indexes),
            attendee_count=assignment.attendee_count,
            max_duration=assignment.max_duration,
        )


class UtilizationStatsRead(BaseModel):
    total_slots: int
    full_utilization_slots: int
    utilization_percentage: int
    capacity_warnings: list[int]

    @classmethod
    def from_domain(cls, stats: UtilizationStats) -> "UtilizationStatsRead":
        return cls(
            total_slots=stats.total_slots,
            full_utilization_slots=stats.full_utilization_slots,
            utilization_percentage=stats.utilization_percentage,
            capacity_warnings=list(stats.capacity_warnings),
        )


class BookingPatternRead(BaseModel):
    type: Literal["parallel", "sequential"]
    required_span: int
    demand: list[int]
    slot_assignments: list[SlotAssignmentRead] = Field(default_factory=list)
    utilization_stats: Optional[UtilizationStatsRead] = None

    @classmethod
    def from_result(cls, result: AvailabilityResult) -> "BookingPatternRead":
        return cls(
            type=result.pattern_type,
            required_span=result.required_span,
            demand=list(result.demand),
            slot_assignments=[SlotAssignmentRead.from_domain(a) for a in result.slot_assignments],
            utilization_stats=(
                UtilizationStatsRead.from_domain(result.utilization_stats)
                if result.utilization_stats is not None
                else None
            ),
        )


class StartingSlotRead(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime
    remaining_seats: int
    booking_pattern: BookingPatternRead

    @field_serializer("start_time", "end_time")
    def _ser_datetime(self, dt: datetime) -> str:
        return dt.isoformat()


class TreatmentRead(BaseModel):
    id: int
    name: str
    price: Decimal
    duration_minutes_200ml: Optional[int]
    duration_minutes_1000ml: Optional[int]

    @classmethod
    def from_db(cls, *, treatment: Treatment) -> "TreatmentRead":
        return cls(
            id=treatment.id,
            name=treatment.name,
            price=treatment.price,
            duration_minutes_200ml=treatment.duration_minutes_200ml,
            duration_minutes_1000ml=treatment.duration_minutes_1000ml,
        )


class VitaminRead(BaseModel):
    id: int
    name: str
    price: Decimal

    @classmethod
    def from_db(cls, *, vitamin: AdditionalVitamin) -> "VitaminRead":
        return cls(id=vitamin.id, name=vitamin.name, price=vitamin.price)


class LocationRead(BaseModel):
    id: str
    name: str

    @classmethod
    def from_db(cls, *, location: Location) -> "LocationRead":
        return cls(id=location.id, name=location.name)


class PricedAttendeeIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
    treatment_id: int = Field(alias="treatmentId")
    additional_vitamin_id: Optional[int] = Field(default=None, alias="additionalVitaminId")

    def to_domain(self) -> PricedAttendee:
        return PricedAttendee(
            first_name=self.first_name,
            last_name=self.last_name,
            treatment_id=self.treatment_id,
            additional_vitamin_id=self.additional_vitamin_id,
        )


class PricingQuoteRequest(BaseModel):
    attendees: list[PricedAttendeeIn] = Field(min_length=1)


class AttendeePriceRead(BaseModel):
    attendee_name: str
    treatment_name: str
    treatment_price: Decimal
    vitamin_name: Optional[str]
    vitamin_price: Decimal
    attendee_total: Decimal


class PricingQuoteRead(BaseModel):
    attendee_breakdown: list[AttendeePriceRead]
    total_treatment_cost: Decimal
    total_vitamin_cost: Decimal
    grand_total: Decimal
    currency: str
    description: str

    @classmethod
    def from_domain(cls, pricing: PricingCalculation) -> "PricingQuoteRead":
        return cls(
            attendee_breakdown=[
                AttendeePriceRead(
                    attendee_name=a.attendee_name,
                    treatment_name=a.treatment_name,
                    treatment_price=a.treatment_price,
                    vitamin_name=a.vitamin_name,
                    vitamin_price=a.vitamin_price,
                    attendee_total=a.attendee_total,
                )
                for a in pricing.attendee_breakdown
            ],
            total_treatment_cost=pricing.total_treatment_cost,
            total_vitamin_cost=pricing.total_vitamin_cost,
            grand_total=pricing.grand_total,
            currency=pricing.currency,
            description=generate_pricing_description(pricing),
        )
