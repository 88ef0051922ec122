"""Print seat-inventory consistency for every showtime.

For each showtime, available_seats plus seats held (reserved or booked)
must equal the theater's total_seats.
"""
from sqlalchemy import func

from cinebook.core.config import settings
from cinebook.database import models
from cinebook.database.database import create_db_engine, create_session_factory


def check() -> int:
    engine = create_db_engine(settings.DATABASE_URL)
    db = create_session_factory(engine)()
    mismatches = 0
    try:
        held = dict(
            db.query(models.SeatStatus.showtime_id, func.count(models.SeatStatus.id))
            .group_by(models.SeatStatus.showtime_id)
            .all()
        )
        rows = (
            db.query(models.Showtime, models.Theater.total_seats)
            .join(models.Theater, models.Theater.id == models.Showtime.theater_id)
            .order_by(models.Showtime.id)
            .all()
        )
        for showtime, total_seats in rows:
            taken = held.get(showtime.id, 0)
            ok = showtime.available_seats + taken == total_seats
            mismatches += 0 if ok else 1
            print(f"showtime {showtime.id}: available={showtime.available_seats} held={taken} "
                  f"total={total_seats} {'ok' if ok else 'MISMATCH'}")
    finally:
        db.close()
        engine.dispose()
    return mismatches


if __name__ == '__main__':
    raise SystemExit(1 if check() else 0)
