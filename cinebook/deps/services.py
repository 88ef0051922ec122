# cinebook/deps/services.py
"""FastAPI dependencies handing out per-request service objects."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from cinebook.auth import CurrentUser, get_current_user
from cinebook.database.database import get_db
from cinebook.exceptions import ForbiddenError
from cinebook.services import read_views
from cinebook.services.booking_lifecycle import BookingLifecycle
from cinebook.services.expiry_reaper import ExpiryReaper
from cinebook.services.reservation_service import ReservationService


def get_reservation_service(request: Request, db: Session = Depends(get_db)) -> ReservationService:
    return ReservationService(db, settings=request.app.state.settings, clock=request.app.state.clock)


def get_booking_lifecycle(request: Request, db: Session = Depends(get_db)) -> BookingLifecycle:
    return BookingLifecycle(db, clock=request.app.state.clock)


def get_reaper(request: Request) -> ExpiryReaper:
    return request.app.state.reaper


def booking_owner_or_admin(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """404 if the booking is missing, 403 if it belongs to someone else."""
    owner_id = read_views.get_booking_owner(db, booking_id)
    if owner_id != current_user.user_id and not current_user.is_admin:
        raise ForbiddenError("You do not have access to this booking")
    return current_user
