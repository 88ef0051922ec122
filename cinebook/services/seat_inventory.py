import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from cinebook.database import models
from cinebook.exceptions import CapacityExceededError, NotFoundError

logger = logging.getLogger(__name__)


class SeatInventory:
    """
    Per-showtime seat state backed by the `seat_status` table.

    A seat with no SeatStatus row is available. Every method runs inside the
    caller's transaction; nothing here commits. Callers lock the showtime row
    (`lock_showtime`) before touching seat rows so all writers queue in the
    same order.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- showtime counter ----------

    def lock_showtime(self, showtime_id: int, active_only: bool = True) -> models.Showtime:
        query = self.db.query(models.Showtime).filter(models.Showtime.id == showtime_id)
        if active_only:
            query = query.filter(models.Showtime.is_active.is_(True))
        showtime = query.with_for_update().one_or_none()
        if showtime is None:
            raise NotFoundError("Showtime not found")
        return showtime

    def lock_showtimes(self, showtime_ids: Iterable[int]) -> None:
        """Lock several showtime rows in ascending id order."""
        for showtime_id in sorted(set(showtime_ids)):
            self.db.query(models.Showtime.id).filter(
                models.Showtime.id == showtime_id
            ).with_for_update().one_or_none()

    def take(self, showtime: models.Showtime, count: int) -> None:
        """Decrement available_seats by `count`, refusing to go below zero."""
        result = self.db.execute(
            update(models.Showtime)
            .where(models.Showtime.id == showtime.id)
            .where(models.Showtime.available_seats >= count)
            .values(available_seats=models.Showtime.available_seats - count)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.refresh(showtime)
            raise CapacityExceededError(count, showtime.available_seats)
        self.db.refresh(showtime)

    def give_back(self, showtime_id: int, count: int) -> None:
        if count <= 0:
            return
        self.db.execute(
            update(models.Showtime)
            .where(models.Showtime.id == showtime_id)
            .values(available_seats=models.Showtime.available_seats + count)
            .execution_options(synchronize_session=False)
        )

    # ---------- seat status rows ----------

    def lock_status(self, showtime_id: int, seat_id: int) -> Optional[models.SeatStatus]:
        return (
            self.db.query(models.SeatStatus)
            .filter(
                models.SeatStatus.showtime_id == showtime_id,
                models.SeatStatus.seat_id == seat_id,
            )
            .with_for_update()
            .one_or_none()
        )

    def hold(
        self,
        showtime_id: int,
        seat_id: int,
        booking_id: int,
        reserved_until: datetime,
        existing: Optional[models.SeatStatus] = None,
    ) -> models.SeatStatus:
        """Mark a seat reserved for `booking_id` until `reserved_until`."""
        row = existing
        if row is None:
            row = models.SeatStatus(showtime_id=showtime_id, seat_id=seat_id)
            self.db.add(row)
        row.status = models.SeatState.reserved.value
        row.booking_id = booking_id
        row.reserved_until = reserved_until
        return row

    def book(self, booking_id: int) -> int:
        """Turn every hold owned by the booking into a booked seat."""
        result = self.db.execute(
            update(models.SeatStatus)
            .where(models.SeatStatus.booking_id == booking_id)
            .values(status=models.SeatState.booked.value, reserved_until=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def release(self, booking_id: int) -> int:
        """Delete the booking's seat status rows; the seats become available."""
        released = (
            self.db.query(models.SeatStatus)
            .filter(models.SeatStatus.booking_id == booking_id)
            .delete(synchronize_session=False)
        )
        logger.debug("Released %s seat(s) held by booking %s", released, booking_id)
        return released
