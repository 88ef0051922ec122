from datetime import time

import pytest

from cinebook.database import models
from cinebook.exceptions import ConflictError, NotFoundError
from cinebook.services import catalog_service


def test_resize_shifts_every_showtime_of_the_theater(db, session_factory, catalog, reserve, assert_capacity):
    second = models.Showtime(
        movie_id=catalog.movie.id,
        theater_id=catalog.theater.id,
        show_date=catalog.showtime.show_date,
        show_time=time(21, 30),
        end_time=time(23, 30),
        price=150.0,
        available_seats=4,
    )
    db.add(second)
    db.commit()
    reserve(1, catalog.showtime.id, catalog.seat_ids[:3])

    with session_factory() as session:
        theater = catalog_service.update_theater(session, catalog.theater.id, total_seats=3)
    assert theater.total_seats == 3

    assert assert_capacity(catalog.showtime.id) == 0
    assert assert_capacity(second.id) == 3


def test_refused_resize_leaves_theater_and_showtimes_untouched(session_factory, make_catalog, reserve, assert_capacity):
    busy = make_catalog(seat_count=4)
    reserve(1, busy.showtime.id, busy.seat_ids[:3])

    with session_factory() as session:
        with pytest.raises(ConflictError):
            catalog_service.update_theater(session, busy.theater.id, total_seats=2)

    with session_factory() as session:
        assert session.get(models.Theater, busy.theater.id).total_seats == 4
    assert assert_capacity(busy.showtime.id) == 1


def test_resize_without_showtimes_and_renames(db, session_factory):
    cinema = catalog_service.create_cinema(db, name="North", address="2 Hill Road", city="Lampang")
    theater = catalog_service.create_theater(db, cinema_id=cinema.id, name="Hall A", total_seats=20)

    with session_factory() as session:
        updated = catalog_service.update_theater(session, theater.id, total_seats=30, name="Hall A+")
    assert (updated.total_seats, updated.name) == (30, "Hall A+")

    with pytest.raises(NotFoundError):
        catalog_service.update_theater(db, 9999, total_seats=5)
