# cinebook/exceptions.py
from typing import Optional


class BookingError(Exception):
    """Base class for errors surfaced to API callers as an error envelope."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(BookingError):
    status_code = 400


class NotFoundError(BookingError):
    status_code = 404


class UnauthorizedError(BookingError):
    status_code = 401


class ForbiddenError(BookingError):
    status_code = 403


class ConflictError(BookingError):
    status_code = 409


class CapacityExceededError(ConflictError):
    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"Not enough available seats (requested {requested}, available {available})")


class DuplicateConfirmedBookingError(ConflictError):
    def __init__(self, seat_id: int) -> None:
        self.seat_id = seat_id
        super().__init__(f"You have already confirmed booking for seat {seat_id} in this showtime")


class SeatUnavailableError(ConflictError):
    def __init__(self, seat_id: Optional[int] = None, reason: str = "is not available") -> None:
        self.seat_id = seat_id
        if seat_id is None:
            super().__init__("One or more seats were claimed by another booking")
        else:
            super().__init__(f"Seat {seat_id} {reason}")


class InvalidStateError(ConflictError):
    # state-transition conflicts travel as 400, matching the booking API contract
    status_code = 400


class StoreFailure(BookingError):
    status_code = 500


class BookingCodeConflict(ConflictError):
    """A concurrent booking committed the same booking code first."""

    def __init__(self) -> None:
        super().__init__("Booking code already in use")
