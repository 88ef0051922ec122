# cinebook/database/schemas.py
# =========================================================
# 🧩 Cinebook Schemas (Pydantic v2 Compatible)
# =========================================================

from datetime import date, datetime, time
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =========================================================
# ✅ Base Config for ORM Compatibility (Pydantic v2)
# =========================================================
class ConfigModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# =========================================================
# 📦 Response Envelope
# =========================================================
class ApiResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Build a success envelope, omitting empty fields."""
    return ApiResponse(success=True, message=message, data=data).model_dump(exclude_none=True)


def fail(error: str) -> dict:
    return ApiResponse(success=False, error=error).model_dump(exclude_none=True)


# =========================================================
# 🎟 Booking Schemas
# =========================================================
class CreateBookingRequest(BaseModel):
    showtime_id: int = Field(..., gt=0)
    seat_ids: List[int] = Field(..., min_length=1)

    @field_validator("seat_ids")
    @classmethod
    def seat_ids_distinct(cls, value: List[int]) -> List[int]:
        if len(set(value)) != len(value):
            raise ValueError("seat_ids must not contain duplicates")
        if any(seat_id <= 0 for seat_id in value):
            raise ValueError("seat_ids must be positive integers")
        return value


# =========================================================
# 🎬 Movie Schemas
# =========================================================
class MovieCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration: int = Field(..., ge=1)  # minutes
    genres: List[str] = Field(default_factory=list)
    language: Optional[str] = None
    subtitle: Optional[str] = None
    poster_url: Optional[str] = None
    release_date: Optional[date] = None


class MovieUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(None, ge=1)
    genres: Optional[List[str]] = None
    language: Optional[str] = None
    subtitle: Optional[str] = None
    poster_url: Optional[str] = None
    release_date: Optional[date] = None
    is_active: Optional[bool] = None


class MovieResponse(ConfigModel):
    id: int
    title: str
    description: Optional[str] = None
    duration: int
    genres: Optional[List[str]] = None
    language: Optional[str] = None
    subtitle: Optional[str] = None
    poster_url: Optional[str] = None
    release_date: Optional[date] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =========================================================
# 🏢 Cinema Schemas
# =========================================================
class CinemaCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)


class CinemaUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    is_active: Optional[bool] = None


class CinemaResponse(ConfigModel):
    id: int
    name: str
    address: str
    city: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =========================================================
# 🏛 Theater Schemas
# =========================================================
class TheaterCreate(BaseModel):
    cinema_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1)
    total_seats: int = Field(..., ge=1)
    theater_type: Optional[str] = None


class TheaterUpdate(BaseModel):
    name: Optional[str] = None
    total_seats: Optional[int] = Field(None, ge=1)
    theater_type: Optional[str] = None
    is_active: Optional[bool] = None


class TheaterResponse(ConfigModel):
    id: int
    cinema_id: int
    name: str
    total_seats: int
    theater_type: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =========================================================
# 🎞 Showtime Schemas
# =========================================================
class ShowtimeCreate(BaseModel):
    movie_id: int = Field(..., gt=0)
    theater_id: int = Field(..., gt=0)
    show_date: date
    show_time: time
    end_time: time
    price: float = Field(..., ge=0)


class ShowtimeUpdate(BaseModel):
    show_date: Optional[date] = None
    show_time: Optional[time] = None
    end_time: Optional[time] = None
    price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ShowtimeResponse(ConfigModel):
    id: int
    movie_id: int
    theater_id: int
    show_date: date
    show_time: time
    end_time: time
    price: float
    available_seats: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =========================================================
# 💺 Seat Schemas
# =========================================================
class SeatCreate(BaseModel):
    theater_id: int = Field(..., gt=0)
    seat_row: str = Field(..., min_length=1, max_length=5)
    seat_number: int = Field(..., ge=1)
    seat_type: Optional[str] = None


class SeatBulkCreate(BaseModel):
    theater_id: int = Field(..., gt=0)
    rows: List[str] = Field(..., min_length=1)
    seats_per_row: int = Field(..., ge=1)
    seat_type: Optional[str] = None


class SeatUpdate(BaseModel):
    seat_type: Optional[str] = None
    is_active: Optional[bool] = None


class SeatResponse(ConfigModel):
    id: int
    theater_id: int
    seat_row: str
    seat_number: int
    seat_type: str
    is_active: bool
    created_at: Optional[datetime] = None
