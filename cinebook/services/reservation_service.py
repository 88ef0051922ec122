import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, List, NamedTuple, Sequence

from sqlalchemy.orm import Session

from cinebook.core.config import settings as default_settings
from cinebook.database import models
from cinebook.database.database import transaction
from cinebook.exceptions import (
    BookingCodeConflict,
    CapacityExceededError,
    DuplicateConfirmedBookingError,
    SeatUnavailableError,
    StoreFailure,
    ValidationError,
)
from cinebook.services.seat_inventory import SeatInventory

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


class BookingCreated(NamedTuple):
    booking_id: int
    booking_code: str
    total_amount: float


class ReservationService:
    """Creates pending bookings and the seat holds that back them."""

    def __init__(self, db: Session, settings=None, clock: Callable[[], datetime] = models.utcnow):
        self.db = db
        self.settings = settings or default_settings
        self.clock = clock
        self.inventory = SeatInventory(db)

    def create_booking(self, user_id: int, showtime_id: int, seat_ids: Sequence[int]) -> BookingCreated:
        seat_ids = list(seat_ids)
        if not seat_ids:
            raise ValidationError("At least one seat must be selected")
        if len(set(seat_ids)) != len(seat_ids):
            raise ValidationError("Duplicate seat ids in request")

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            try:
                return self._create(user_id, showtime_id, seat_ids)
            except BookingCodeConflict:
                logger.warning("Booking code taken concurrently (attempt %s), retrying", attempt)
        raise StoreFailure("Could not generate a unique booking code")

    def _create(self, user_id: int, showtime_id: int, seat_ids: List[int]) -> BookingCreated:
        now = self.clock()
        hold_until = now + timedelta(minutes=self.settings.RESERVATION_HOLD_MINUTES)

        with transaction(self.db):
            showtime = self.inventory.lock_showtime(showtime_id)
            if len(seat_ids) > showtime.available_seats:
                raise CapacityExceededError(len(seat_ids), showtime.available_seats)

            self._validate_seats(showtime, seat_ids)
            for seat_id in seat_ids:
                if self._has_confirmed_booking(showtime.id, seat_id, user_id=user_id):
                    raise DuplicateConfirmedBookingError(seat_id)

            # claim the counter first; concurrent bookings queue behind this write
            self.inventory.take(showtime, len(seat_ids))

            existing = {}
            for seat_id in sorted(seat_ids):
                if self._has_confirmed_booking(showtime.id, seat_id):
                    raise SeatUnavailableError(seat_id, "is already booked")
                status = self.inventory.lock_status(showtime.id, seat_id)
                if status is not None and status.status == models.SeatState.booked.value:
                    raise SeatUnavailableError(seat_id, "is already booked")
                if status is not None and status.status == models.SeatState.reserved.value:
                    raise SeatUnavailableError(seat_id, "is currently reserved")
                existing[seat_id] = status

            unit_price = showtime.price
            booking = models.Booking(
                user_id=user_id,
                showtime_id=showtime.id,
                booking_code=self._new_booking_code(now),
                total_amount=round(unit_price * len(seat_ids), 2),
                booking_status=models.BookingStatus.pending.value,
                payment_status=models.PaymentStatus.pending.value,
                booking_date=now,
                created_at=now,
                updated_at=now,
            )
            self.db.add(booking)
            self.db.flush()

            for seat_id in seat_ids:
                self.db.add(models.BookingSeat(booking_id=booking.id, seat_id=seat_id, price=unit_price))
                self.inventory.hold(showtime.id, seat_id, booking.id, hold_until, existing=existing[seat_id])
            self.db.flush()

        logger.info(
            "✓ Booking %s created for user %s: showtime %s, seats %s, total %.2f",
            booking.booking_code, user_id, showtime_id, seat_ids, booking.total_amount,
        )
        return BookingCreated(booking.id, booking.booking_code, booking.total_amount)

    def _validate_seats(self, showtime: models.Showtime, seat_ids: List[int]) -> None:
        seats = {
            seat.id: seat
            for seat in self.db.query(models.Seat).filter(models.Seat.id.in_(seat_ids)).all()
        }
        for seat_id in seat_ids:
            seat = seats.get(seat_id)
            if seat is None or not seat.is_active:
                raise ValidationError(f"Seat {seat_id} does not exist")
            if seat.theater_id != showtime.theater_id:
                raise ValidationError(f"Seat {seat_id} does not belong to this showtime's theater")

    def _has_confirmed_booking(self, showtime_id: int, seat_id: int, user_id: int = None) -> bool:
        query = (
            self.db.query(models.BookingSeat.id)
            .join(models.Booking, models.Booking.id == models.BookingSeat.booking_id)
            .filter(
                models.Booking.showtime_id == showtime_id,
                models.BookingSeat.seat_id == seat_id,
                models.Booking.booking_status == models.BookingStatus.confirmed.value,
            )
        )
        if user_id is not None:
            query = query.filter(models.Booking.user_id == user_id)
        return query.first() is not None

    def _new_booking_code(self, now: datetime) -> str:
        prefix = self.settings.BOOKING_CODE_PREFIX
        for _ in range(MAX_CODE_ATTEMPTS):
            code = f"{prefix}{now:%Y%m%d%H%M%S}{secrets.token_hex(4).upper()}"
            taken = self.db.query(models.Booking.id).filter(models.Booking.booking_code == code).first()
            if taken is None:
                return code
            logger.warning("Booking code collision on %s, regenerating", code)
        raise StoreFailure("Could not generate a unique booking code")
