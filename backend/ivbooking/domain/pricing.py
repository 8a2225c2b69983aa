from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence


@dataclass(frozen=True)
class PricedItem:
    id: int
    name: str
    price: Decimal


@dataclass(frozen=True)
class PricedAttendee:
    first_name: str
    last_name: str
    treatment_id: int
    additional_vitamin_id: int | None = None


@dataclass(frozen=True)
class AttendeePrice:
    attendee_name: str
    treatment_name: str
    treatment_price: Decimal
    vitamin_name: str | None
    vitamin_price: Decimal
    attendee_total: Decimal


@dataclass(frozen=True)
class PricingCalculation:
    attendee_breakdown: list[AttendeePrice]
    total_treatment_cost: Decimal
    total_vitamin_cost: Decimal
    grand_total: Decimal
    currency: str


def calculate_booking_price(
    attendees: Sequence[PricedAttendee],
    treatments: Sequence[PricedItem],
    vitamins: Sequence[PricedItem],
    *,
    currency: str = "ZAR",
) -> PricingCalculation:
    """Price each attendee's treatment plus optional vitamin add-on. Unknown ids cost nothing."""
    treatment_by_id = {t.id: t for t in treatments}
    vitamin_by_id = {v.id: v for v in vitamins}

    breakdown: list[AttendeePrice] = []
    for attendee in attendees:
        treatment = treatment_by_id.get(attendee.treatment_id)
        treatment_name = treatment.name if treatment else f"Treatment {attendee.treatment_id}"
        treatment_price = treatment.price if treatment else Decimal(0)

        vitamin_name: str | None = None
        vitamin_price = Decimal(0)
        if attendee.additional_vitamin_id is not None:
            vitamin = vitamin_by_id.get(attendee.additional_vitamin_id)
            if vitamin is not None:
                vitamin_name = vitamin.name
                vitamin_price = vitamin.price

        breakdown.append(
            AttendeePrice(
                attendee_name=f"{attendee.first_name} {attendee.last_name}",
                treatment_name=treatment_name,
                treatment_price=treatment_price,
                vitamin_name=vitamin_name,
                vitamin_price=vitamin_price,
                attendee_total=treatment_price + vitamin_price,
            )
        )

    total_treatment = sum((a.treatment_price for a in breakdown), Decimal(0))
    total_vitamin = sum((a.vitamin_price for a in breakdown), Decimal(0))
    return PricingCalculation(
        attendee_breakdown=breakdown,
        total_treatment_cost=total_treatment,
        total_vitamin_cost=total_vitamin,
        grand_total=total_treatment + total_vitamin,
        currency=currency,
    )


def format_currency(amount: Decimal | int, currency: str = "ZAR") -> str:
    value = Decimal(amount)
    if currency == "ZAR":
        return f"R{value.quantize(Decimal(1)):,}"
    return f"{currency} {value.quantize(Decimal('0.01'))}"


def generate_pricing_description(pricing: PricingCalculation) -> str:
    cur = pricing.currency
    lines = ["", "--- PRICING BREAKDOWN ---"]
    for number, attendee in enumerate(pricing.attendee_breakdown, start=1):
        lines.append("")
        lines.append(f"Attendee {number}: {attendee.attendee_name}")
        lines.append(f"  Treatment: {attendee.treatment_name} - {format_currency(attendee.treatment_price, cur)}")
        if attendee.vitamin_name and attendee.vitamin_price > 0:
            lines.append(f"  Vitamin Add-on: {attendee.vitamin_name} - {format_currency(attendee.vitamin_price, cur)}")
        lines.append(f"  Subtotal: {format_currency(attendee.attendee_total, cur)}")
    lines.append("")
    lines.append("--- TOTALS ---")
    lines.append(f"Total Treatments: {format_currency(pricing.total_treatment_cost, cur)}")
    lines.append(f"Total Vitamins: {format_currency(pricing.total_vitamin_cost, cur)}")
    lines.append(f"GRAND TOTAL: {format_currency(pricing.grand_total, cur)}")
    return "\n".join(lines) + "\n"
