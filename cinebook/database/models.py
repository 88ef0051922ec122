# cinebook/database/models.py
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from cinebook.database.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the convention for every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BookingStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


class SeatState(str, enum.Enum):
    available = "available"
    reserved = "reserved"
    booked = "booked"


# ==========================
# ✅ CINEMA MODEL
# ==========================
class Cinema(Base):
    __tablename__ = "cinemas"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    theaters = relationship("Theater", back_populates="cinema")


# ==========================
# ✅ THEATER MODEL
# ==========================
class Theater(Base):
    __tablename__ = "theaters"

    id = Column(Integer, primary_key=True, index=True)
    cinema_id = Column(Integer, ForeignKey("cinemas.id"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    total_seats = Column(Integer, nullable=False)
    theater_type = Column(String(50), nullable=True)  # standard, vip, imax, 4dx
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    cinema = relationship("Cinema", back_populates="theaters")
    seats = relationship("Seat", back_populates="theater")
    showtimes = relationship("Showtime", back_populates="theater")


# ==========================
# ✅ MOVIE MODEL
# ==========================
class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False)  # minutes
    genres = Column(JSON, nullable=True)
    language = Column(String(50), nullable=True)
    subtitle = Column(String(50), nullable=True)
    poster_url = Column(String(500), nullable=True)
    release_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    showtimes = relationship("Showtime", back_populates="movie")


# ==========================
# ✅ SHOWTIME MODEL
# ==========================
class Showtime(Base):
    __tablename__ = "showtimes"

    id = Column(Integer, primary_key=True, index=True)
    movie_id = Column(Integer, ForeignKey("movies.id"), nullable=False, index=True)
    theater_id = Column(Integer, ForeignKey("theaters.id"), nullable=False, index=True)
    show_date = Column(Date, nullable=False)
    show_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    price = Column(Float, nullable=False)
    # mutated only by reservation (decrement) and cancel/expiry (increment)
    available_seats = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    movie = relationship("Movie", back_populates="showtimes")
    theater = relationship("Theater", back_populates="showtimes")
    bookings = relationship("Booking", back_populates="showtime")


# ==========================
# ✅ SEAT MODEL
# ==========================
class Seat(Base):
    __tablename__ = "seats"
    __table_args__ = (UniqueConstraint("theater_id", "seat_row", "seat_number", name="uq_seat_position"),)

    id = Column(Integer, primary_key=True, index=True)
    theater_id = Column(Integer, ForeignKey("theaters.id"), nullable=False, index=True)
    seat_row = Column(String(5), nullable=False)
    seat_number = Column(Integer, nullable=False)
    seat_type = Column(String(50), nullable=False, default="standard")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    theater = relationship("Theater", back_populates="seats")


# ==========================
# ✅ SEAT STATUS MODEL (per showtime x seat)
# ==========================
class SeatStatus(Base):
    __tablename__ = "seat_status"
    # at most one holder per (showtime, seat); no row means available
    __table_args__ = (UniqueConstraint("showtime_id", "seat_id", name="uq_seat_status_showtime_seat"),)

    id = Column(Integer, primary_key=True, index=True)
    showtime_id = Column(Integer, ForeignKey("showtimes.id"), nullable=False, index=True)
    seat_id = Column(Integer, ForeignKey("seats.id"), nullable=False)
    status = Column(String(20), nullable=False, default=SeatState.reserved.value)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True, index=True)
    reserved_until = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    seat = relationship("Seat")


# ==========================
# ✅ BOOKING MODEL
# ==========================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    showtime_id = Column(Integer, ForeignKey("showtimes.id"), nullable=False, index=True)
    booking_code = Column(String(40), unique=True, nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    booking_status = Column(String(20), nullable=False, default=BookingStatus.pending.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.pending.value)
    booking_date = Column(DateTime, default=utcnow)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    showtime = relationship("Showtime", back_populates="bookings")
    seats = relationship("BookingSeat", back_populates="booking", cascade="all, delete-orphan")


# ==========================
# ✅ BOOKING SEAT MODEL (price locked at booking time)
# ==========================
class BookingSeat(Base):
    __tablename__ = "booking_seats"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    seat_id = Column(Integer, ForeignKey("seats.id"), nullable=False)
    price = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    booking = relationship("Booking", back_populates="seats")
    seat = relationship("Seat")
