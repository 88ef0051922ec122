import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import update
from sqlalchemy.orm import Session

from cinebook.database import models
from cinebook.database.database import transaction
from cinebook.exceptions import InvalidStateError, NotFoundError
from cinebook.services.seat_inventory import SeatInventory

logger = logging.getLogger(__name__)


class BookingLifecycle:
    """
    Booking state transitions and their seat side effects.

    pending -> confirmed (payment), pending -> cancelled (user, admin or expiry).
    Cancelled and confirmed are both terminal for these operations.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = models.utcnow):
        self.db = db
        self.clock = clock
        self.inventory = SeatInventory(db)

    def _locked_booking(self, booking_id: int) -> models.Booking:
        # showtime row first, then the booking, the same order as reservations
        showtime_id = (
            self.db.query(models.Booking.showtime_id)
            .filter(models.Booking.id == booking_id)
            .scalar()
        )
        if showtime_id is None:
            raise NotFoundError("Booking not found")
        self.inventory.lock_showtimes([showtime_id])
        booking = (
            self.db.query(models.Booking)
            .filter(models.Booking.id == booking_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    def _transition(self, booking: models.Booking, **values) -> None:
        """Apply `values` only if the booking is still pending and unpaid."""
        result = self.db.execute(
            update(models.Booking)
            .where(models.Booking.id == booking.id)
            .where(models.Booking.booking_status == models.BookingStatus.pending.value)
            .where(models.Booking.payment_status == models.PaymentStatus.pending.value)
            .values(updated_at=self.clock(), **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InvalidStateError("Booking is no longer pending")
        self.db.refresh(booking)

    def confirm_payment(self, booking_id: int) -> models.Booking:
        with transaction(self.db):
            booking = self._locked_booking(booking_id)
            if booking.booking_status == models.BookingStatus.cancelled.value:
                raise InvalidStateError("Cannot confirm payment for a cancelled booking")
            if booking.payment_status == models.PaymentStatus.paid.value:
                raise InvalidStateError("Payment already confirmed for this booking")

            self._transition(
                booking,
                booking_status=models.BookingStatus.confirmed.value,
                payment_status=models.PaymentStatus.paid.value,
            )
            booked = self.inventory.book(booking.id)

        logger.info("✓ Payment confirmed for booking %s (%s seat(s) booked)", booking.booking_code, booked)
        return booking

    def cancel_booking(self, booking_id: int) -> models.Booking:
        with transaction(self.db):
            booking = self._locked_booking(booking_id)
            if booking.booking_status == models.BookingStatus.cancelled.value:
                raise InvalidStateError("Booking is already cancelled")
            if booking.booking_status == models.BookingStatus.confirmed.value:
                raise InvalidStateError("Confirmed bookings cannot be cancelled")

            self._transition(booking, booking_status=models.BookingStatus.cancelled.value)
            seat_count = (
                self.db.query(models.BookingSeat)
                .filter(models.BookingSeat.booking_id == booking.id)
                .count()
            )
            self.inventory.release(booking.id)
            self.inventory.give_back(booking.showtime_id, seat_count)

        logger.info("Booking %s cancelled, %s seat(s) returned to showtime %s",
                    booking.booking_code, seat_count, booking.showtime_id)
        return booking
