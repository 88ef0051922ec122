"""
Read-only views joining bookings, showtimes and seats into API shapes.

Nothing here takes locks or writes; a view may trail a concurrent writer by
one request.
"""
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from cinebook.database import models
from cinebook.exceptions import NotFoundError


def _booking_rows(db: Session):
    return (
        db.query(
            models.Booking,
            models.Movie.title,
            models.Cinema.name,
            models.Theater.name,
            models.Showtime.show_date,
            models.Showtime.show_time,
        )
        .join(models.Showtime, models.Showtime.id == models.Booking.showtime_id)
        .join(models.Movie, models.Movie.id == models.Showtime.movie_id)
        .join(models.Theater, models.Theater.id == models.Showtime.theater_id)
        .join(models.Cinema, models.Cinema.id == models.Theater.cinema_id)
    )


def _booking_dict(row) -> Dict:
    booking, movie_title, cinema_name, theater_name, show_date, show_time = row
    return {
        "booking_id": booking.id,
        "booking_code": booking.booking_code,
        "user_id": booking.user_id,
        "showtime_id": booking.showtime_id,
        "movie_title": movie_title,
        "cinema_name": cinema_name,
        "theater_name": theater_name,
        "show_date": show_date.isoformat() if show_date else None,
        "show_time": show_time.strftime("%H:%M:%S") if show_time else None,
        "total_amount": booking.total_amount,
        "booking_status": booking.booking_status,
        "payment_status": booking.payment_status,
        "booking_date": booking.booking_date,
    }


def _seat_lines(db: Session, booking_ids: List[int]) -> Dict[int, List[Dict]]:
    lines: Dict[int, List[Dict]] = {booking_id: [] for booking_id in booking_ids}
    if not booking_ids:
        return lines
    rows = (
        db.query(models.BookingSeat, models.Seat.seat_row, models.Seat.seat_number)
        .join(models.Seat, models.Seat.id == models.BookingSeat.seat_id)
        .filter(models.BookingSeat.booking_id.in_(booking_ids))
        .order_by(models.Seat.seat_row, models.Seat.seat_number)
        .all()
    )
    for line, seat_row, seat_number in rows:
        lines[line.booking_id].append({
            "seat_id": line.seat_id,
            "seat_row": seat_row,
            "seat_number": seat_number,
            "price": line.price,
        })
    return lines


def get_booking_owner(db: Session, booking_id: int) -> int:
    user_id = db.query(models.Booking.user_id).filter(models.Booking.id == booking_id).scalar()
    if user_id is None:
        raise NotFoundError("Booking not found")
    return user_id


def booking_detail(db: Session, booking_id: int) -> Dict:
    row = _booking_rows(db).filter(models.Booking.id == booking_id).first()
    if row is None:
        raise NotFoundError("Booking not found")
    detail = _booking_dict(row)
    detail["seats"] = _seat_lines(db, [booking_id])[booking_id]
    return detail


def all_bookings(db: Session) -> List[Dict]:
    rows = _booking_rows(db).order_by(models.Booking.booking_date.desc(), models.Booking.id.desc()).all()
    return [_booking_dict(row) for row in rows]


def user_bookings(db: Session, user_id: int) -> List[Dict]:
    """A user's pending and confirmed bookings, newest first, with seats."""
    rows = (
        _booking_rows(db)
        .filter(
            models.Booking.user_id == user_id,
            models.Booking.booking_status.in_([
                models.BookingStatus.pending.value,
                models.BookingStatus.confirmed.value,
            ]),
        )
        .order_by(models.Booking.booking_date.desc(), models.Booking.id.desc())
        .all()
    )
    bookings = [_booking_dict(row) for row in rows]
    lines = _seat_lines(db, [b["booking_id"] for b in bookings])
    for booking in bookings:
        booking["seats"] = lines[booking["booking_id"]]
    return bookings


def seat_map(db: Session, showtime_id: int) -> Dict:
    """Every active seat of the showtime's theater with its live status."""
    showtime = db.query(models.Showtime).filter(models.Showtime.id == showtime_id).first()
    if showtime is None:
        raise NotFoundError("Showtime not found")

    rows = (
        db.query(models.Seat, models.SeatStatus)
        .outerjoin(
            models.SeatStatus,
            (models.SeatStatus.seat_id == models.Seat.id)
            & (models.SeatStatus.showtime_id == showtime_id),
        )
        .filter(models.Seat.theater_id == showtime.theater_id, models.Seat.is_active.is_(True))
        .order_by(models.Seat.seat_row, models.Seat.seat_number)
        .all()
    )
    seats = []
    for seat, status in rows:
        seats.append({
            "seat_id": seat.id,
            "seat_row": seat.seat_row,
            "seat_number": seat.seat_number,
            "seat_type": seat.seat_type,
            "status": status.status if status else models.SeatState.available.value,
            "booking_id": status.booking_id if status else None,
            "reserved_until": status.reserved_until if status else None,
        })
    return {
        "showtime_id": showtime.id,
        "theater_id": showtime.theater_id,
        "available_seats": showtime.available_seats,
        "seats": seats,
    }


# ---------- showtimes ----------

def _showtime_rows(db: Session):
    return (
        db.query(models.Showtime, models.Movie.title, models.Theater.name, models.Theater.cinema_id, models.Cinema.name)
        .join(models.Movie, models.Movie.id == models.Showtime.movie_id)
        .join(models.Theater, models.Theater.id == models.Showtime.theater_id)
        .join(models.Cinema, models.Cinema.id == models.Theater.cinema_id)
    )


def _showtime_dict(row) -> Dict:
    showtime, movie_title, theater_name, cinema_id, cinema_name = row
    return {
        "showtime_id": showtime.id,
        "movie_id": showtime.movie_id,
        "movie_title": movie_title,
        "theater_id": showtime.theater_id,
        "theater_name": theater_name,
        "cinema_id": cinema_id,
        "cinema_name": cinema_name,
        "show_date": showtime.show_date.isoformat(),
        "show_time": showtime.show_time.strftime("%H:%M:%S"),
        "end_time": showtime.end_time.strftime("%H:%M:%S"),
        "price": showtime.price,
        "available_seats": showtime.available_seats,
        "is_active": showtime.is_active,
        "created_at": showtime.created_at,
        "updated_at": showtime.updated_at,
    }


def list_showtimes(
    db: Session,
    movie_id: Optional[int] = None,
    theater_id: Optional[int] = None,
    show_date: Optional[date] = None,
    is_active: Optional[bool] = None,
) -> List[Dict]:
    query = _showtime_rows(db)
    if movie_id is not None:
        query = query.filter(models.Showtime.movie_id == movie_id)
    if theater_id is not None:
        query = query.filter(models.Showtime.theater_id == theater_id)
    if show_date is not None:
        query = query.filter(models.Showtime.show_date == show_date)
    if is_active is not None:
        query = query.filter(models.Showtime.is_active == is_active)
    rows = query.order_by(models.Showtime.show_date, models.Showtime.show_time).all()
    return [_showtime_dict(row) for row in rows]


def showtime_detail(db: Session, showtime_id: int) -> Dict:
    row = _showtime_rows(db).filter(models.Showtime.id == showtime_id).first()
    if row is None:
        raise NotFoundError("Showtime not found")
    return _showtime_dict(row)
