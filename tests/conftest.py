from datetime import date, datetime, time, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func

from cinebook.auth import create_access_token
from cinebook.core.config import Settings
from cinebook.database import models
from cinebook.database.database import Base, create_db_engine, create_session_factory
from cinebook.main import create_app
from cinebook.services.booking_lifecycle import BookingLifecycle
from cinebook.services.expiry_reaper import ExpiryReaper
from cinebook.services.reservation_service import ReservationService


class FakeClock:
    """Callable clock that only moves when a test says so."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cinebook_test.db'}"


@pytest.fixture()
def settings(database_url):
    return Settings(DATABASE_URL=database_url, REAPER_ENABLED=False, SECRET_KEY="test-secret")


@pytest.fixture()
def engine(database_url):
    engine = create_db_engine(database_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def clock():
    return FakeClock(datetime(2025, 11, 22, 12, 0, 0))


def build_catalog(db, seat_count=4, price=200.0):
    cinema = models.Cinema(name="Central", address="1 Main Street", city="Bangkok")
    db.add(cinema)
    db.flush()
    theater = models.Theater(cinema_id=cinema.id, name="Screen 1", total_seats=seat_count)
    db.add(theater)
    db.flush()
    seats = [
        models.Seat(theater_id=theater.id, seat_row="A", seat_number=n)
        for n in range(1, seat_count + 1)
    ]
    db.add_all(seats)
    movie = models.Movie(title="The Great Adventure", duration=120)
    db.add(movie)
    db.flush()
    showtime = models.Showtime(
        movie_id=movie.id,
        theater_id=theater.id,
        show_date=date(2025, 11, 23),
        show_time=time(19, 0),
        end_time=time(21, 0),
        price=price,
        available_seats=seat_count,
    )
    db.add(showtime)
    db.commit()
    return SimpleNamespace(
        cinema=cinema,
        theater=theater,
        movie=movie,
        showtime=showtime,
        seat_ids=[seat.id for seat in seats],
    )


@pytest.fixture()
def catalog(db):
    return build_catalog(db, seat_count=4)


@pytest.fixture()
def make_catalog(db):
    def _make(seat_count=4, price=200.0):
        return build_catalog(db, seat_count=seat_count, price=price)
    return _make


def held_seat_count(db, showtime_id):
    return (
        db.query(func.count(models.SeatStatus.id))
        .filter(
            models.SeatStatus.showtime_id == showtime_id,
            models.SeatStatus.status.in_([models.SeatState.reserved.value, models.SeatState.booked.value]),
        )
        .scalar()
    )


@pytest.fixture()
def assert_capacity(db):
    """available_seats + held seats must add up to the theater size."""
    def _check(showtime_id):
        db.expire_all()
        showtime = db.get(models.Showtime, showtime_id)
        total = db.get(models.Theater, showtime.theater_id).total_seats
        assert showtime.available_seats + held_seat_count(db, showtime_id) == total
        return showtime.available_seats
    return _check


@pytest.fixture()
def reserve(session_factory, settings, clock):
    def _reserve(user_id, showtime_id, seat_ids):
        with session_factory() as session:
            service = ReservationService(session, settings=settings, clock=clock)
            return service.create_booking(user_id, showtime_id, seat_ids)
    return _reserve


@pytest.fixture()
def confirm(session_factory, clock):
    def _confirm(booking_id):
        with session_factory() as session:
            return BookingLifecycle(session, clock=clock).confirm_payment(booking_id)
    return _confirm


@pytest.fixture()
def cancel(session_factory, clock):
    def _cancel(booking_id):
        with session_factory() as session:
            return BookingLifecycle(session, clock=clock).cancel_booking(booking_id)
    return _cancel


@pytest.fixture()
def reaper(session_factory, clock):
    return ExpiryReaper(session_factory, interval_seconds=60, clock=clock)


@pytest.fixture()
def app(settings, clock, engine):
    return create_app(settings, clock=clock)


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def token_for(settings):
    def _token(user_id=1, role="user"):
        return create_access_token({"user_id": user_id, "role": role}, settings=settings)
    return _token


@pytest.fixture()
def user_headers(token_for):
    return {"Authorization": f"Bearer {token_for(1, 'user')}"}


@pytest.fixture()
def other_user_headers(token_for):
    return {"Authorization": f"Bearer {token_for(2, 'user')}"}


@pytest.fixture()
def admin_headers(token_for):
    return {"Authorization": f"Bearer {token_for(99, 'admin')}"}
