import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from cinebook.exceptions import BookingCodeConflict, BookingError, SeatUnavailableError, StoreFailure

logger = logging.getLogger(__name__)

# Base model for all ORM classes
Base = declarative_base()


def create_db_engine(database_url: str, isolation_level: Optional[str] = None) -> Engine:
    """Create the SQLAlchemy engine for the given URL."""
    kwargs = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        # request handlers run in a threadpool; sqlite writers wait on the busy timeout
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
    if isolation_level:
        kwargs["isolation_level"] = isolation_level
    return create_engine(database_url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def transaction(
    db: Session,
    on_conflict: Callable[[], BookingError] = SeatUnavailableError,
) -> Iterator[Session]:
    """
    One atomic unit of work on `db`.

    Commits when the block exits cleanly, rolls back on any exception.
    Store errors are re-raised as StoreFailure. A clash on the booking code
    is raised as BookingCodeConflict; any other unique-constraint violation
    is raised as `on_conflict()`, which for seat claims means another booking
    got there first.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity error, transaction rolled back: %s", exc.orig)
        if "booking_code" in str(exc.orig):
            raise BookingCodeConflict() from exc
        raise on_conflict() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error, transaction rolled back")
        raise StoreFailure("Database operation failed") from exc
    except BaseException:
        db.rollback()
        raise


# ✅ Dependency for FastAPI routes
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
