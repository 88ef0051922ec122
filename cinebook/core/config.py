"""
Application configuration and settings
"""
import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _bool_env(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if os.getenv("DB_HOST"):
        return (
            f"postgresql+psycopg2://{os.getenv('DB_USER')}:{os.getenv('DB_PASSWORD')}@"
            f"{os.getenv('DB_HOST')}:{os.getenv('DB_PORT', '5432')}/{os.getenv('DB_NAME')}"
        )
    return "sqlite:///./cinebook.db"


# Database Configuration
DATABASE_URL = _database_url()
DB_ISOLATION_LEVEL = os.getenv("DB_ISOLATION_LEVEL") or None

# Auth Configuration
SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Reservation / Reaper Configuration
RESERVATION_HOLD_MINUTES = int(os.getenv("RESERVATION_HOLD_MINUTES", "15"))
REAPER_INTERVAL_SECONDS = int(os.getenv("REAPER_INTERVAL_SECONDS", "60"))
REAPER_ENABLED = _bool_env("REAPER_ENABLED", "true")
CANCELLED_RETENTION_DAYS = int(os.getenv("CANCELLED_RETENTION_DAYS", "30"))
BOOKING_CODE_PREFIX = os.getenv("BOOKING_CODE_PREFIX", "BK")

# CORS / Logging
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class Settings:
    PROJECT_NAME: str = "Cinebook API"
    VERSION: str = "1.0.0"

    def __init__(self, **overrides):
        self.DATABASE_URL: str = DATABASE_URL
        self.DB_ISOLATION_LEVEL: Optional[str] = DB_ISOLATION_LEVEL
        self.SECRET_KEY: str = SECRET_KEY
        self.JWT_ALGORITHM: str = JWT_ALGORITHM
        self.ACCESS_TOKEN_EXPIRE_MINUTES: int = ACCESS_TOKEN_EXPIRE_MINUTES
        self.RESERVATION_HOLD_MINUTES: int = RESERVATION_HOLD_MINUTES
        self.REAPER_INTERVAL_SECONDS: int = REAPER_INTERVAL_SECONDS
        self.REAPER_ENABLED: bool = REAPER_ENABLED
        self.CANCELLED_RETENTION_DAYS: int = CANCELLED_RETENTION_DAYS
        self.BOOKING_CODE_PREFIX: str = BOOKING_CODE_PREFIX
        self.ALLOWED_ORIGINS: List[str] = list(ALLOWED_ORIGINS)
        self.LOG_LEVEL: str = LOG_LEVEL
        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


settings = Settings()
