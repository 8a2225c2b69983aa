class BookingDomainError(Exception):
    """Base class for errors raised by the slot-allocation core."""


class MissingDurationInfo(BookingDomainError):
    def __init__(self, treatment_id: object, message: str | None = None) -> None:
        self.treatment_id = treatment_id
        super().__init__(message or f"duration info missing for treatment id {treatment_id}")


class PlacementImpossible(BookingDomainError):
    pass
