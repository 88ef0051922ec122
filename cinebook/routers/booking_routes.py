# cinebook/routers/booking_routes.py
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from cinebook.auth import CurrentUser, get_current_user
from cinebook.database.database import get_db
from cinebook.database.schemas import CreateBookingRequest, ok
from cinebook.deps.services import (
    booking_owner_or_admin,
    get_booking_lifecycle,
    get_reservation_service,
)
from cinebook.services import read_views
from cinebook.services.booking_lifecycle import BookingLifecycle
from cinebook.services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

# Router: main.py mounts this under "/api"
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: CreateBookingRequest,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    service: ReservationService = Depends(get_reservation_service),
):
    created = service.create_booking(current_user.user_id, payload.showtime_id, payload.seat_ids)
    return ok(
        data={
            "booking_id": created.booking_id,
            "booking_code": created.booking_code,
            "total_amount": created.total_amount,
        },
        message=(
            "Booking created successfully. Please complete payment within "
            f"{request.app.state.settings.RESERVATION_HOLD_MINUTES} minutes"
        ),
    )


# declared before /{booking_id} so "my-bookings" is not parsed as an id
@router.get("/my-bookings")
def my_bookings(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(data=read_views.user_bookings(db, current_user.user_id))


@router.get("/{booking_id}")
def get_booking(
    booking_id: int,
    _: CurrentUser = Depends(booking_owner_or_admin),
    db: Session = Depends(get_db),
):
    return ok(data=read_views.booking_detail(db, booking_id))


@router.delete("/{booking_id}")
def cancel_booking(
    booking_id: int,
    current_user: CurrentUser = Depends(booking_owner_or_admin),
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
):
    lifecycle.cancel_booking(booking_id)
    logger.info("Booking %s cancelled by user %s", booking_id, current_user.user_id)
    return ok(message="Booking cancelled successfully")


@router.put("/{booking_id}/confirm-payment")
def confirm_payment(
    booking_id: int,
    _: CurrentUser = Depends(booking_owner_or_admin),
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
):
    booking = lifecycle.confirm_payment(booking_id)
    return ok(
        data={
            "booking_id": booking.id,
            "booking_code": booking.booking_code,
            "booking_status": booking.booking_status,
            "payment_status": booking.payment_status,
        },
        message="Payment confirmed successfully",
    )
