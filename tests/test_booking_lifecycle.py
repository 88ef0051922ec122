import pytest

from cinebook.database import models
from cinebook.exceptions import InvalidStateError, NotFoundError


# a paid booking cannot be cancelled afterwards
def test_confirm_payment_books_seats_and_blocks_cancel(db, catalog, reserve, confirm, cancel, assert_capacity):
    created = reserve(1, catalog.showtime.id, catalog.seat_ids[:2])

    booking = confirm(created.booking_id)
    assert booking.booking_status == "confirmed"
    assert booking.payment_status == "paid"

    statuses = db.query(models.SeatStatus).filter_by(booking_id=created.booking_id).all()
    assert len(statuses) == 2
    assert all(s.status == "booked" and s.reserved_until is None for s in statuses)

    with pytest.raises(InvalidStateError) as excinfo:
        cancel(created.booking_id)
    assert excinfo.value.status_code == 400
    assert assert_capacity(catalog.showtime.id) == 2


def test_confirm_twice_is_invalid_state(catalog, reserve, confirm):
    created = reserve(1, catalog.showtime.id, [catalog.seat_ids[0]])
    confirm(created.booking_id)
    with pytest.raises(InvalidStateError):
        confirm(created.booking_id)


def test_cancel_releases_seats_and_restores_counter(db, catalog, reserve, cancel, assert_capacity):
    created = reserve(1, catalog.showtime.id, catalog.seat_ids[:3])
    assert assert_capacity(catalog.showtime.id) == 1

    booking = cancel(created.booking_id)
    assert booking.booking_status == "cancelled"
    assert db.query(models.SeatStatus).filter_by(booking_id=created.booking_id).count() == 0
    assert assert_capacity(catalog.showtime.id) == 4

    # line items stay on record
    assert db.query(models.BookingSeat).filter_by(booking_id=created.booking_id).count() == 3


def test_cancelled_booking_is_terminal(catalog, reserve, confirm, cancel, assert_capacity):
    created = reserve(1, catalog.showtime.id, [catalog.seat_ids[0]])
    cancel(created.booking_id)

    with pytest.raises(InvalidStateError):
        confirm(created.booking_id)
    with pytest.raises(InvalidStateError):
        cancel(created.booking_id)
    assert assert_capacity(catalog.showtime.id) == 4


def test_cancelled_seat_can_be_booked_again(catalog, reserve, cancel, assert_capacity):
    first = reserve(1, catalog.showtime.id, [catalog.seat_ids[0]])
    cancel(first.booking_id)

    second = reserve(2, catalog.showtime.id, [catalog.seat_ids[0]])
    assert second.booking_id != first.booking_id
    assert assert_capacity(catalog.showtime.id) == 3


def test_missing_booking_is_not_found(catalog, confirm, cancel):
    with pytest.raises(NotFoundError):
        confirm(4242)
    with pytest.raises(NotFoundError):
        cancel(4242)


def test_expired_but_unswept_booking_can_still_be_confirmed(catalog, clock, reserve, confirm):
    created = reserve(1, catalog.showtime.id, [catalog.seat_ids[0]])
    clock.advance(minutes=20)
    booking = confirm(created.booking_id)
    assert booking.booking_status == "confirmed"
