# cinebook/routers/admin_routes.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from cinebook.auth import require_role
from cinebook.database import schemas
from cinebook.database.database import get_db
from cinebook.database.schemas import ok
from cinebook.deps.services import get_reaper
from cinebook.services import catalog_service, read_views
from cinebook.services.expiry_reaper import ExpiryReaper

logger = logging.getLogger(__name__)

# ==============================
# 📍 Router Configuration
# ==============================
router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_role("admin"))],
)


def _changes(payload) -> dict:
    return payload.model_dump(exclude_unset=True, exclude_none=True)


# ==============================
# 🎬 MOVIES
# ==============================
@router.post("/movies", status_code=status.HTTP_201_CREATED)
def create_movie(payload: schemas.MovieCreate, db: Session = Depends(get_db)):
    movie = catalog_service.create_movie(db, **payload.model_dump())
    return ok(data=schemas.MovieResponse.model_validate(movie).model_dump(), message="Movie created successfully")


@router.put("/movies/{movie_id}")
def update_movie(movie_id: int, payload: schemas.MovieUpdate, db: Session = Depends(get_db)):
    movie = catalog_service.update_movie(db, movie_id, **_changes(payload))
    return ok(data=schemas.MovieResponse.model_validate(movie).model_dump(), message="Movie updated successfully")


@router.delete("/movies/{movie_id}")
def delete_movie(movie_id: int, db: Session = Depends(get_db)):
    catalog_service.delete_movie(db, movie_id)
    return ok(message="Movie deleted successfully")


# ==============================
# 🏢 CINEMAS
# ==============================
@router.post("/cinemas", status_code=status.HTTP_201_CREATED)
def create_cinema(payload: schemas.CinemaCreate, db: Session = Depends(get_db)):
    cinema = catalog_service.create_cinema(db, **payload.model_dump())
    return ok(data=schemas.CinemaResponse.model_validate(cinema).model_dump(), message="Cinema created successfully")


@router.put("/cinemas/{cinema_id}")
def update_cinema(cinema_id: int, payload: schemas.CinemaUpdate, db: Session = Depends(get_db)):
    cinema = catalog_service.update_cinema(db, cinema_id, **_changes(payload))
    return ok(data=schemas.CinemaResponse.model_validate(cinema).model_dump(), message="Cinema updated successfully")


@router.delete("/cinemas/{cinema_id}")
def delete_cinema(cinema_id: int, db: Session = Depends(get_db)):
    catalog_service.delete_cinema(db, cinema_id)
    return ok(message="Cinema deleted successfully")


# ==============================
# 🏛 THEATERS
# ==============================
@router.post("/theaters", status_code=status.HTTP_201_CREATED)
def create_theater(payload: schemas.TheaterCreate, db: Session = Depends(get_db)):
    theater = catalog_service.create_theater(db, **payload.model_dump())
    return ok(data=schemas.TheaterResponse.model_validate(theater).model_dump(), message="Theater created successfully")


@router.put("/theaters/{theater_id}")
def update_theater(theater_id: int, payload: schemas.TheaterUpdate, db: Session = Depends(get_db)):
    theater = catalog_service.update_theater(db, theater_id, **_changes(payload))
    return ok(data=schemas.TheaterResponse.model_validate(theater).model_dump(), message="Theater updated successfully")


@router.delete("/theaters/{theater_id}")
def delete_theater(theater_id: int, db: Session = Depends(get_db)):
    catalog_service.delete_theater(db, theater_id)
    return ok(message="Theater deleted successfully")


# ==============================
# 🎞 SHOWTIMES
# ==============================
@router.post("/showtimes", status_code=status.HTTP_201_CREATED)
def create_showtime(payload: schemas.ShowtimeCreate, db: Session = Depends(get_db)):
    showtime = catalog_service.create_showtime(db, **payload.model_dump())
    return ok(
        data=schemas.ShowtimeResponse.model_validate(showtime).model_dump(),
        message="Showtime created successfully",
    )


@router.put("/showtimes/{showtime_id}")
def update_showtime(showtime_id: int, payload: schemas.ShowtimeUpdate, db: Session = Depends(get_db)):
    showtime = catalog_service.update_showtime(db, showtime_id, **_changes(payload))
    return ok(
        data=schemas.ShowtimeResponse.model_validate(showtime).model_dump(),
        message="Showtime updated successfully",
    )


@router.delete("/showtimes/{showtime_id}")
def delete_showtime(showtime_id: int, db: Session = Depends(get_db)):
    catalog_service.delete_showtime(db, showtime_id)
    return ok(message="Showtime deleted successfully")


# ==============================
# 💺 SEATS
# ==============================
@router.post("/seats", status_code=status.HTTP_201_CREATED)
def create_seat(payload: schemas.SeatCreate, db: Session = Depends(get_db)):
    seat = catalog_service.create_seat(db, **payload.model_dump())
    return ok(data=schemas.SeatResponse.model_validate(seat).model_dump(), message="Seat created successfully")


@router.post("/seats/bulk", status_code=status.HTTP_201_CREATED)
def create_seats_bulk(payload: schemas.SeatBulkCreate, db: Session = Depends(get_db)):
    summary = catalog_service.create_seats_bulk(db, **payload.model_dump())
    return ok(data=summary, message="Seats created successfully")


@router.put("/seats/{seat_id}")
def update_seat(seat_id: int, payload: schemas.SeatUpdate, db: Session = Depends(get_db)):
    seat = catalog_service.update_seat(db, seat_id, **_changes(payload))
    return ok(data=schemas.SeatResponse.model_validate(seat).model_dump(), message="Seat updated successfully")


@router.delete("/seats/{seat_id}")
def delete_seat(seat_id: int, db: Session = Depends(get_db)):
    catalog_service.delete_seat(db, seat_id)
    return ok(message="Seat deleted successfully")


# ==============================
# 🎟 BOOKINGS
# ==============================
@router.get("/bookings")
def list_all_bookings(db: Session = Depends(get_db)):
    return ok(data=read_views.all_bookings(db))


# ==============================
# ⏰ EXPIRY REAPER
# ==============================
@router.get("/cron/status")
def cron_status(reaper: ExpiryReaper = Depends(get_reaper)):
    return ok(data=reaper.status())


@router.post("/cron/cancel-expired")
def trigger_cancel_expired(reaper: ExpiryReaper = Depends(get_reaper)):
    result = reaper.sweep()
    logger.info("Manual expiry sweep cancelled %s booking(s)", result["cancelled_count"])
    return ok(data=result, message="Expired reservations processed")


@router.post("/cron/purge-cancelled")
def trigger_purge_cancelled(
    request: Request,
    days: Optional[int] = Query(None, ge=1),
    reaper: ExpiryReaper = Depends(get_reaper),
):
    retention = days or request.app.state.settings.CANCELLED_RETENTION_DAYS
    purged = reaper.purge_cancelled(retention)
    return ok(data={"purged": purged, "older_than_days": retention}, message="Old cancelled bookings purged")
