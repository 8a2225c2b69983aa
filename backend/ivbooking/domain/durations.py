from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Mapping, Sequence

from .errors import MissingDurationInfo

SLOT_MINUTES = 30
ADD_ON_DURATION_MINUTES = 90

_NO_ADD_ON_MARKERS = {"", "none", "null"}


class FluidOption(StrEnum):
    ML_200 = "200ml"
    ML_1000 = "1000ml"
    ML_1000_DEXTROSE = "1000ml_dextrose"


@dataclass(frozen=True)
class AttendeeRequirement:
    treatment_id: int | str
    fluid_option: FluidOption
    add_on_treatment_id: int | str | None = None


@dataclass(frozen=True)
class TreatmentDuration:
    duration_minutes_200ml: int
    duration_minutes_1000ml: int


@dataclass(frozen=True)
class AttendeeDuration:
    attendee_index: int
    duration_minutes: int
    slots_needed: int


DurationLookup = Mapping[int, TreatmentDuration]


def has_add_on(add_on_treatment_id: object) -> bool:
    """Return True if the value names a real add-on treatment."""
    if add_on_treatment_id is None:
        return False
    return str(add_on_treatment_id).strip().lower() not in _NO_ADD_ON_MARKERS


def lookup_key(treatment_id: int | str) -> int | str:
    if isinstance(treatment_id, str) and treatment_id.strip().isdigit():
        return int(treatment_id)
    return treatment_id


def resolve_duration(
    attendee: AttendeeRequirement,
    duration_lookup: DurationLookup,
    *,
    attendee_index: int = 0,
    slot_minutes: int = SLOT_MINUTES,
    add_on_minutes: int = ADD_ON_DURATION_MINUTES,
) -> AttendeeDuration:
    """
    Resolve how long one attendee occupies a seat.

    An add-on treatment fixes the duration at `add_on_minutes` regardless of the
    base treatment. Otherwise the fluid option picks the 200ml or 1000ml duration
    of the base treatment (dextrose uses the 1000ml duration).
    Raises MissingDurationInfo if the base treatment has no usable entry.
    """
    key = lookup_key(attendee.treatment_id)
    info = duration_lookup.get(key)  # type: ignore[arg-type]
    if info is None:
        raise MissingDurationInfo(attendee.treatment_id)

    if has_add_on(attendee.add_on_treatment_id):
        minutes = add_on_minutes
    elif attendee.fluid_option == FluidOption.ML_200:
        minutes = info.duration_minutes_200ml
    else:
        minutes = info.duration_minutes_1000ml

    if minutes is None or minutes <= 0:
        raise MissingDurationInfo(
            attendee.treatment_id,
            f"treatment id {attendee.treatment_id} has no positive duration for {attendee.fluid_option}",
        )
    return AttendeeDuration(
        attendee_index=attendee_index,
        duration_minutes=minutes,
        slots_needed=math.ceil(minutes / slot_minutes),
    )


def resolve_durations(
    attendees: Sequence[AttendeeRequirement],
    duration_lookup: DurationLookup,
    *,
    slot_minutes: int = SLOT_MINUTES,
    add_on_minutes: int = ADD_ON_DURATION_MINUTES,
) -> list[AttendeeDuration]:
    return [
        resolve_duration(
            attendee,
            duration_lookup,
            attendee_index=index,
            slot_minutes=slot_minutes,
            add_on_minutes=add_on_minutes,
        )
        for index, attendee in enumerate(attendees)
    ]
