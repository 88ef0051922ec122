import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from cinebook.database import models
from cinebook.database.database import transaction
from cinebook.exceptions import ConflictError, NotFoundError, ValidationError
from cinebook.services.seat_inventory import SeatInventory

logger = logging.getLogger(__name__)


def _seat_exists_conflict() -> ConflictError:
    return ConflictError("Seat already exists in this theater")


def _record_conflict() -> ConflictError:
    return ConflictError("Conflicts with an existing record")


def _get_or_404(db: Session, model, entity_id: int, label: str):
    obj = db.query(model).filter(model.id == entity_id).first()
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


def _apply(obj, changes: Dict[str, Any]):
    for key, value in changes.items():
        setattr(obj, key, value)
    obj.updated_at = models.utcnow()


def _soft_delete(db: Session, model, entity_id: int, label: str) -> None:
    with transaction(db, on_conflict=_record_conflict):
        obj = _get_or_404(db, model, entity_id, label)
        obj.is_active = False
    logger.info("%s %s deactivated", label, entity_id)


# --------- Cinema Management ---------

def create_cinema(db: Session, name: str, address: str, city: str) -> models.Cinema:
    cinema = models.Cinema(name=name, address=address, city=city, is_active=True)
    with transaction(db, on_conflict=_record_conflict):
        db.add(cinema)
    return cinema


def list_cinemas(db: Session, cinema_id: Optional[int] = None, is_active: Optional[bool] = None) -> List[models.Cinema]:
    query = db.query(models.Cinema)
    if cinema_id is not None:
        query = query.filter(models.Cinema.id == cinema_id)
    if is_active is not None:
        query = query.filter(models.Cinema.is_active == is_active)
    return query.order_by(models.Cinema.id).all()


def get_cinema(db: Session, cinema_id: int) -> models.Cinema:
    return _get_or_404(db, models.Cinema, cinema_id, "Cinema")


def update_cinema(db: Session, cinema_id: int, **changes) -> models.Cinema:
    with transaction(db, on_conflict=_record_conflict):
        cinema = _get_or_404(db, models.Cinema, cinema_id, "Cinema")
        _apply(cinema, changes)
    return cinema


def delete_cinema(db: Session, cinema_id: int) -> None:
    _soft_delete(db, models.Cinema, cinema_id, "Cinema")


# --------- Theater Management ---------

def create_theater(db: Session, cinema_id: int, name: str, total_seats: int,
                   theater_type: Optional[str] = None) -> models.Theater:
    if db.query(models.Cinema.id).filter(models.Cinema.id == cinema_id).first() is None:
        raise ValidationError("Cinema not found")
    theater = models.Theater(
        cinema_id=cinema_id, name=name, total_seats=total_seats,
        theater_type=theater_type, is_active=True,
    )
    with transaction(db, on_conflict=_record_conflict):
        db.add(theater)
    return theater


def list_theaters(db: Session, cinema_id: Optional[int] = None, is_active: Optional[bool] = None) -> List[models.Theater]:
    query = db.query(models.Theater)
    if cinema_id is not None:
        query = query.filter(models.Theater.cinema_id == cinema_id)
    if is_active is not None:
        query = query.filter(models.Theater.is_active == is_active)
    return query.order_by(models.Theater.id).all()


def get_theater(db: Session, theater_id: int) -> models.Theater:
    return _get_or_404(db, models.Theater, theater_id, "Theater")


def _resize_showtimes(db: Session, theater: models.Theater, new_total: int) -> None:
    """Shift available_seats of every showtime in the theater by the size change."""
    delta = new_total - theater.total_seats
    showtime_ids = [
        showtime_id
        for (showtime_id,) in db.query(models.Showtime.id)
        .filter(models.Showtime.theater_id == theater.id)
        .all()
    ]
    if not showtime_ids:
        return
    SeatInventory(db).lock_showtimes(showtime_ids)
    result = db.execute(
        update(models.Showtime)
        .where(models.Showtime.theater_id == theater.id)
        .where(models.Showtime.available_seats + delta >= 0)
        .values(available_seats=models.Showtime.available_seats + delta)
        .execution_options(synchronize_session=False)
    )
    # every showtime has to absorb the change or none does
    if result.rowcount != len(showtime_ids):
        raise ConflictError(
            f"Cannot resize theater to {new_total} seats: a showtime has more seats held than that"
        )
    logger.info("Theater %s resized to %s seats, %s showtime(s) adjusted", theater.id, new_total, len(showtime_ids))


def update_theater(db: Session, theater_id: int, **changes) -> models.Theater:
    with transaction(db, on_conflict=_record_conflict):
        theater = _get_or_404(db, models.Theater, theater_id, "Theater")
        new_total = changes.get("total_seats")
        if new_total is not None and new_total != theater.total_seats:
            _resize_showtimes(db, theater, new_total)
        _apply(theater, changes)
    return theater


def delete_theater(db: Session, theater_id: int) -> None:
    _soft_delete(db, models.Theater, theater_id, "Theater")


# --------- Movie Management ---------

def create_movie(db: Session, title: str, duration: int, **fields) -> models.Movie:
    movie = models.Movie(title=title, duration=duration, is_active=True, **fields)
    with transaction(db, on_conflict=_record_conflict):
        db.add(movie)
    logger.info("Movie created: %s", title)
    return movie


def list_movies(db: Session, is_active: Optional[bool] = None) -> List[models.Movie]:
    query = db.query(models.Movie)
    if is_active is not None:
        query = query.filter(models.Movie.is_active == is_active)
    return query.order_by(models.Movie.id).all()


def get_movie(db: Session, movie_id: int) -> models.Movie:
    return _get_or_404(db, models.Movie, movie_id, "Movie")


def update_movie(db: Session, movie_id: int, **changes) -> models.Movie:
    with transaction(db, on_conflict=_record_conflict):
        movie = _get_or_404(db, models.Movie, movie_id, "Movie")
        _apply(movie, changes)
    return movie


def delete_movie(db: Session, movie_id: int) -> None:
    _soft_delete(db, models.Movie, movie_id, "Movie")


# --------- Showtime Management ---------

def create_showtime(db: Session, movie_id: int, theater_id: int, show_date, show_time,
                    end_time, price: float) -> models.Showtime:
    if db.query(models.Movie.id).filter(models.Movie.id == movie_id).first() is None:
        raise ValidationError("Movie not found")
    theater = db.query(models.Theater).filter(models.Theater.id == theater_id).first()
    if theater is None:
        raise ValidationError("Theater not found")

    # a new showtime starts with every seat of the theater free
    showtime = models.Showtime(
        movie_id=movie_id, theater_id=theater_id, show_date=show_date,
        show_time=show_time, end_time=end_time, price=price,
        available_seats=theater.total_seats, is_active=True,
    )
    with transaction(db, on_conflict=_record_conflict):
        db.add(showtime)
    logger.info("Showtime %s created for movie %s in theater %s", showtime.id, movie_id, theater_id)
    return showtime


def update_showtime(db: Session, showtime_id: int, **changes) -> models.Showtime:
    # available_seats is owned by the booking flow and never set here
    changes.pop("available_seats", None)
    with transaction(db, on_conflict=_record_conflict):
        showtime = _get_or_404(db, models.Showtime, showtime_id, "Showtime")
        _apply(showtime, changes)
    return showtime


def delete_showtime(db: Session, showtime_id: int) -> None:
    _soft_delete(db, models.Showtime, showtime_id, "Showtime")


# --------- Seat Management ---------

def _require_theater(db: Session, theater_id: int) -> None:
    if db.query(models.Theater.id).filter(models.Theater.id == theater_id).first() is None:
        raise ValidationError("Theater not found")


def _seat_taken(db: Session, theater_id: int, seat_row: str, seat_number: int) -> bool:
    return db.query(models.Seat.id).filter(
        models.Seat.theater_id == theater_id,
        models.Seat.seat_row == seat_row,
        models.Seat.seat_number == seat_number,
    ).first() is not None


def create_seat(db: Session, theater_id: int, seat_row: str, seat_number: int,
                seat_type: Optional[str] = None) -> models.Seat:
    _require_theater(db, theater_id)
    if _seat_taken(db, theater_id, seat_row, seat_number):
        raise _seat_exists_conflict()
    seat = models.Seat(
        theater_id=theater_id, seat_row=seat_row, seat_number=seat_number,
        seat_type=seat_type or "standard", is_active=True,
    )
    with transaction(db, on_conflict=_seat_exists_conflict):
        db.add(seat)
    return seat


def create_seats_bulk(db: Session, theater_id: int, rows: List[str], seats_per_row: int,
                      seat_type: Optional[str] = None) -> Dict[str, int]:
    """Create rows x seats_per_row seats, skipping positions that already exist."""
    _require_theater(db, theater_id)
    created = skipped = 0
    with transaction(db, on_conflict=_seat_exists_conflict):
        for seat_row in rows:
            for seat_number in range(1, seats_per_row + 1):
                if _seat_taken(db, theater_id, seat_row, seat_number):
                    skipped += 1
                    continue
                db.add(models.Seat(
                    theater_id=theater_id, seat_row=seat_row, seat_number=seat_number,
                    seat_type=seat_type or "standard", is_active=True,
                ))
                db.flush()
                created += 1
    logger.info("Bulk seats for theater %s: %s created, %s skipped", theater_id, created, skipped)
    return {"created": created, "skipped": skipped, "total": created + skipped}


def list_seats(db: Session, theater_id: Optional[int] = None, is_active: Optional[bool] = None) -> List[models.Seat]:
    query = db.query(models.Seat)
    if theater_id is not None:
        query = query.filter(models.Seat.theater_id == theater_id)
    if is_active is not None:
        query = query.filter(models.Seat.is_active == is_active)
    return query.order_by(models.Seat.theater_id, models.Seat.seat_row, models.Seat.seat_number).all()


def get_seat(db: Session, seat_id: int) -> models.Seat:
    return _get_or_404(db, models.Seat, seat_id, "Seat")


def update_seat(db: Session, seat_id: int, **changes) -> models.Seat:
    with transaction(db, on_conflict=_record_conflict):
        seat = _get_or_404(db, models.Seat, seat_id, "Seat")
        for key, value in changes.items():
            setattr(seat, key, value)
    return seat


def delete_seat(db: Session, seat_id: int) -> None:
    _soft_delete(db, models.Seat, seat_id, "Seat")
