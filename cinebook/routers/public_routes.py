# cinebook/routers/public_routes.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cinebook.database import schemas
from cinebook.database.database import get_db
from cinebook.database.schemas import ok
from cinebook.services import catalog_service, read_views

# Router: DO NOT include "/api" here, main.py mounts this router under "/api"
router = APIRouter(tags=["Public"])


def _dump(schema, items):
    return [schema.model_validate(item).model_dump() for item in items]


# -------------------------
# Movies
# -------------------------
@router.get("/movies")
def list_movies(is_active: Optional[bool] = Query(None), db: Session = Depends(get_db)):
    return ok(data=_dump(schemas.MovieResponse, catalog_service.list_movies(db, is_active=is_active)))


@router.get("/movies/{movie_id}")
def get_movie(movie_id: int, db: Session = Depends(get_db)):
    movie = catalog_service.get_movie(db, movie_id)
    return ok(data=schemas.MovieResponse.model_validate(movie).model_dump())


# -------------------------
# Cinemas & theaters
# -------------------------
@router.get("/cinemas")
def list_cinemas(
    id: Optional[int] = Query(None, description="Filter by cinema id"),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    cinemas = catalog_service.list_cinemas(db, cinema_id=id, is_active=is_active)
    return ok(data=_dump(schemas.CinemaResponse, cinemas))


@router.get("/cinemas/{cinema_id}")
def get_cinema(cinema_id: int, db: Session = Depends(get_db)):
    cinema = catalog_service.get_cinema(db, cinema_id)
    return ok(data=schemas.CinemaResponse.model_validate(cinema).model_dump())


@router.get("/theaters")
def list_theaters(
    cinema_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    theaters = catalog_service.list_theaters(db, cinema_id=cinema_id, is_active=is_active)
    return ok(data=_dump(schemas.TheaterResponse, theaters))


@router.get("/theaters/{theater_id}")
def get_theater(theater_id: int, db: Session = Depends(get_db)):
    theater = catalog_service.get_theater(db, theater_id)
    return ok(data=schemas.TheaterResponse.model_validate(theater).model_dump())


# -------------------------
# Showtimes & seat map
# -------------------------
@router.get("/showtimes")
def list_showtimes(
    movie_id: Optional[int] = Query(None),
    theater_id: Optional[int] = Query(None),
    show_date: Optional[date] = Query(None),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    return ok(data=read_views.list_showtimes(
        db, movie_id=movie_id, theater_id=theater_id, show_date=show_date, is_active=is_active,
    ))


@router.get("/showtimes/{showtime_id}")
def get_showtime(showtime_id: int, db: Session = Depends(get_db)):
    return ok(data=read_views.showtime_detail(db, showtime_id))


@router.get("/showtimes/{showtime_id}/seats")
def get_seat_map(showtime_id: int, db: Session = Depends(get_db)):
    """Seats of the showtime's theater with live status; seats without a hold report available."""
    return ok(data=read_views.seat_map(db, showtime_id))


# -------------------------
# Seats
# -------------------------
@router.get("/seats")
def list_seats(
    theater_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    seats = catalog_service.list_seats(db, theater_id=theater_id, is_active=is_active)
    return ok(data=_dump(schemas.SeatResponse, seats))


@router.get("/seats/{seat_id}")
def get_seat(seat_id: int, db: Session = Depends(get_db)):
    seat = catalog_service.get_seat(db, seat_id)
    return ok(data=schemas.SeatResponse.model_validate(seat).model_dump())
