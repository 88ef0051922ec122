"""Seed the database with a demo cinema, theater, seats, movie and showtime.

Run from the project root:
python scripts/seed_demo.py

Prints a user token and an admin token for trying the booking endpoints.
"""
from datetime import date, time, timedelta

from cinebook.auth import create_access_token
from cinebook.core.config import settings
from cinebook.database import models
from cinebook.database.database import Base, create_db_engine, create_session_factory
from cinebook.services import catalog_service

ROWS = ["A", "B", "C", "D", "E"]
SEATS_PER_ROW = 10


def seed():
    engine = create_db_engine(settings.DATABASE_URL)
    # ensure tables exist
    Base.metadata.create_all(bind=engine)
    db = create_session_factory(engine)()
    try:
        existing = db.query(models.Showtime).count()
        if existing:
            print(f"DB already has {existing} showtime(s); skipping seeding.")
            return

        cinema = catalog_service.create_cinema(db, name="Cinebook Central", address="1 Main Street", city="Bangkok")
        theater = catalog_service.create_theater(
            db, cinema_id=cinema.id, name="Screen 1",
            total_seats=len(ROWS) * SEATS_PER_ROW, theater_type="standard",
        )
        summary = catalog_service.create_seats_bulk(db, theater.id, ROWS, SEATS_PER_ROW)
        movie = catalog_service.create_movie(
            db, title="The Great Adventure", duration=120,
            description="An epic journey.", genres=["Adventure"], language="English",
        )
        showtime = catalog_service.create_showtime(
            db, movie_id=movie.id, theater_id=theater.id,
            show_date=date.today() + timedelta(days=1),
            show_time=time(19, 0), end_time=time(21, 0), price=250.0,
        )
        print(f"Seeded cinema {cinema.id}, theater {theater.id} ({summary['created']} seats), "
              f"movie {movie.id}, showtime {showtime.id}.")
    finally:
        db.close()
        engine.dispose()

    print("User token: ", create_access_token({"user_id": 1, "role": "user"}))
    print("Admin token:", create_access_token({"user_id": 99, "role": "admin"}))


if __name__ == '__main__':
    seed()
