import pytest

from cinebook.database import models
from cinebook.exceptions import NotFoundError
from cinebook.services import read_views


def _status_by_seat(view):
    return {seat["seat_id"]: seat["status"] for seat in view["seats"]}


def test_seat_map_reports_available_reserved_and_booked(db, catalog, reserve, confirm):
    held = reserve(1, catalog.showtime.id, [catalog.seat_ids[0]])
    paid = reserve(2, catalog.showtime.id, [catalog.seat_ids[1]])
    confirm(paid.booking_id)

    db.expire_all()
    view = read_views.seat_map(db, catalog.showtime.id)
    statuses = _status_by_seat(view)

    assert statuses[catalog.seat_ids[0]] == "reserved"
    assert statuses[catalog.seat_ids[1]] == "booked"
    assert statuses[catalog.seat_ids[2]] == "available"
    assert statuses[catalog.seat_ids[3]] == "available"
    assert view["available_seats"] == 2

    reserved = next(s for s in view["seats"] if s["seat_id"] == catalog.seat_ids[0])
    assert reserved["booking_id"] == held.booking_id
    assert reserved["reserved_until"] is not None


def test_seat_map_is_ordered_and_skips_inactive_seats(db, catalog):
    db.add(models.Seat(theater_id=catalog.theater.id, seat_row="B", seat_number=1))
    seat = db.get(models.Seat, catalog.seat_ids[3])
    seat.is_active = False
    db.commit()

    view = read_views.seat_map(db, catalog.showtime.id)
    labels = [(s["seat_row"], s["seat_number"]) for s in view["seats"]]
    assert labels == [("A", 1), ("A", 2), ("A", 3), ("B", 1)]


def test_seat_map_unknown_showtime(db):
    with pytest.raises(NotFoundError):
        read_views.seat_map(db, 777)


def test_cancelled_seats_show_as_available_again(db, catalog, reserve, cancel):
    created = reserve(1, catalog.showtime.id, catalog.seat_ids[:2])
    cancel(created.booking_id)

    db.expire_all()
    statuses = _status_by_seat(read_views.seat_map(db, catalog.showtime.id))
    assert set(statuses.values()) == {"available"}


def test_user_bookings_lists_pending_and_confirmed_with_seats(db, catalog, clock, reserve, confirm, cancel):
    first = reserve(1, catalog.showtime.id, [catalog.seat_ids[1], catalog.seat_ids[0]])
    confirm(first.booking_id)
    clock.advance(minutes=1)
    dropped = reserve(1, catalog.showtime.id, [catalog.seat_ids[2]])
    cancel(dropped.booking_id)
    clock.advance(minutes=1)
    latest = reserve(1, catalog.showtime.id, [catalog.seat_ids[3]])
    reserve(2, catalog.showtime.id, [catalog.seat_ids[2]])

    db.expire_all()
    bookings = read_views.user_bookings(db, 1)

    assert [b["booking_id"] for b in bookings] == [latest.booking_id, first.booking_id]
    assert bookings[0]["booking_status"] == "pending"
    assert bookings[1]["booking_status"] == "confirmed"
    assert bookings[1]["movie_title"] == "The Great Adventure"
    assert bookings[1]["cinema_name"] == "Central"
    assert bookings[1]["theater_name"] == "Screen 1"
    assert [s["seat_number"] for s in bookings[1]["seats"]] == [1, 2]


def test_user_without_bookings_gets_empty_list(db, catalog):
    assert read_views.user_bookings(db, 42) == []


def test_booking_detail_and_owner(db, catalog, reserve):
    created = reserve(5, catalog.showtime.id, catalog.seat_ids[:2])

    detail = read_views.booking_detail(db, created.booking_id)
    assert detail["booking_code"] == created.booking_code
    assert detail["total_amount"] == 400.0
    assert detail["show_date"] == "2025-11-23"
    assert detail["show_time"] == "19:00:00"
    assert len(detail["seats"]) == 2
    assert read_views.get_booking_owner(db, created.booking_id) == 5

    with pytest.raises(NotFoundError):
        read_views.booking_detail(db, 999)
    with pytest.raises(NotFoundError):
        read_views.get_booking_owner(db, 999)


def test_all_bookings_includes_every_user_and_status(db, catalog, reserve, cancel):
    a = reserve(1, catalog.showtime.id, [catalog.seat_ids[0]])
    b = reserve(2, catalog.showtime.id, [catalog.seat_ids[1]])
    cancel(a.booking_id)

    db.expire_all()
    ids = {row["booking_id"] for row in read_views.all_bookings(db)}
    assert ids == {a.booking_id, b.booking_id}


def test_list_showtimes_filters(db, make_catalog):
    first = make_catalog()
    second = make_catalog()
    second.showtime.is_active = False
    db.commit()

    everything = read_views.list_showtimes(db)
    assert {s["showtime_id"] for s in everything} == {first.showtime.id, second.showtime.id}

    by_movie = read_views.list_showtimes(db, movie_id=first.movie.id)
    assert [s["showtime_id"] for s in by_movie] == [first.showtime.id]

    active = read_views.list_showtimes(db, is_active=True)
    assert [s["showtime_id"] for s in active] == [first.showtime.id]

    detail = read_views.showtime_detail(db, first.showtime.id)
    assert detail["cinema_name"] == "Central"
    assert detail["available_seats"] == 4
