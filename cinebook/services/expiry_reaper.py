import asyncio
import contextlib
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from cinebook.database import models
from cinebook.database.database import transaction
from cinebook.services.seat_inventory import SeatInventory

logger = logging.getLogger(__name__)


class ExpiryReaper:
    """
    Background sweep that cancels pending bookings whose seat holds ran out.

    One sweep is one transaction: every expired booking found in a cycle is
    cancelled, its seats released and its showtime counter restored together,
    or nothing is. A booking that is no longer pending does not match the
    sweep predicate, so repeated sweeps are no-ops.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        interval_seconds: int = 60,
        clock: Callable[[], datetime] = models.utcnow,
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.last_run: Optional[datetime] = None
        self.last_result: Optional[Dict] = None
        self._task: Optional[asyncio.Task] = None

    # ---------- queries ----------

    @staticmethod
    def _reserved_holds(db: Session, *criteria):
        return (
            db.query(models.Booking.id)
            .join(models.SeatStatus, models.SeatStatus.booking_id == models.Booking.id)
            .filter(
                models.Booking.booking_status == models.BookingStatus.pending.value,
                models.Booking.payment_status == models.PaymentStatus.pending.value,
                models.SeatStatus.status == models.SeatState.reserved.value,
                *criteria,
            )
        )

    def _expired_bookings(self, db: Session, now: datetime):
        return (
            self._reserved_holds(db, models.SeatStatus.reserved_until < now)
            .with_entities(models.Booking.id, models.Booking.showtime_id, models.Booking.booking_code)
            .distinct()
            .order_by(models.Booking.id)
            .all()
        )

    @staticmethod
    def _cancel_if_pending(db: Session, booking_id: int, now: datetime) -> bool:
        result = db.execute(
            update(models.Booking)
            .where(models.Booking.id == booking_id)
            .where(models.Booking.booking_status == models.BookingStatus.pending.value)
            .where(models.Booking.payment_status == models.PaymentStatus.pending.value)
            .values(booking_status=models.BookingStatus.cancelled.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ---------- sweep ----------

    def sweep(self) -> Dict:
        """Cancel every expired pending booking. Returns a summary of the cycle."""
        now = self.clock()
        logger.info("⏰ Running expired reservation sweep at %s", now.strftime("%Y-%m-%d %H:%M:%S"))
        cancelled = []
        released_seats = 0

        db = self.session_factory()
        try:
            with transaction(db):
                candidates = self._expired_bookings(db, now)
                if candidates:
                    inventory = SeatInventory(db)
                    inventory.lock_showtimes(showtime_id for _, showtime_id, _ in candidates)
                    for booking_id, showtime_id, booking_code in candidates:
                        if not self._cancel_if_pending(db, booking_id, now):
                            continue
                        released = inventory.release(booking_id)
                        inventory.give_back(showtime_id, released)
                        released_seats += released
                        cancelled.append(booking_code)
                        logger.info(
                            "Cancelled expired booking %s (showtime %s, %s seat(s))",
                            booking_code, showtime_id, released,
                        )
        finally:
            db.close()

        result = {
            "ran_at": now.isoformat(),
            "cancelled_count": len(cancelled),
            "released_seats": released_seats,
            "cancelled_bookings": cancelled,
        }
        self.last_run = now
        self.last_result = result
        if cancelled:
            logger.info("✓ Auto-cancelled %s expired reservation(s)", len(cancelled))
        else:
            logger.info("✓ No expired reservations found")
        return result

    def purge_cancelled(self, days: int = 30) -> int:
        """Delete cancelled bookings created more than `days` days ago."""
        cutoff = self.clock() - timedelta(days=days)
        db = self.session_factory()
        try:
            with transaction(db):
                old_bookings = (
                    db.query(models.Booking)
                    .filter(
                        models.Booking.booking_status == models.BookingStatus.cancelled.value,
                        models.Booking.created_at < cutoff,
                    )
                    .all()
                )
                for booking in old_bookings:
                    # line items go with the booking (delete-orphan cascade)
                    db.delete(booking)
        finally:
            db.close()
        if old_bookings:
            logger.info("✓ Purged %s cancelled booking(s) older than %s day(s)", len(old_bookings), days)
        return len(old_bookings)

    def status(self) -> Dict:
        now = self.clock()
        db = self.session_factory()
        try:
            pending = self._reserved_holds(db, models.SeatStatus.reserved_until >= now).with_entities(
                func.count(func.distinct(models.Booking.id))
            ).scalar()
            expired = self._reserved_holds(db, models.SeatStatus.reserved_until < now).with_entities(
                func.count(func.distinct(models.Booking.id))
            ).scalar()
        finally:
            db.close()
        return {
            "running": self.running,
            "interval_seconds": self.interval_seconds,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_result": self.last_result,
            "pending_reservations": pending or 0,
            "expired_reservations": expired or 0,
        }

    # ---------- lifecycle ----------

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        while True:
            try:
                await run_in_threadpool(self.sweep)
            except Exception:
                logger.exception("❌ Expired reservation sweep failed")
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        """Run one sweep now and then every interval, until stop()."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info("🕐 Expiry reaper started (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Expiry reaper stopped")
