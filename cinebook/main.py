# cinebook/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cinebook.core.config import Settings
from cinebook.database.database import create_db_engine, create_session_factory
from cinebook.database.models import Base, utcnow
from cinebook.exception_handlers import register_exception_handlers
from cinebook.routers import admin_routes, booking_routes, health, public_routes
from cinebook.services.expiry_reaper import ExpiryReaper

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None, clock: Optional[Callable[[], datetime]] = None) -> FastAPI:
    """Build the API with its own engine, session factory and expiry reaper."""
    settings = settings or Settings()
    clock = clock or utcnow
    configure_logging(settings.LOG_LEVEL)

    engine = create_db_engine(settings.DATABASE_URL, settings.DB_ISOLATION_LEVEL)
    session_factory = create_session_factory(engine)
    reaper = ExpiryReaper(session_factory, interval_seconds=settings.REAPER_INTERVAL_SECONDS, clock=clock)

    # Lifespan events (startup/shutdown)
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Ensure DB tables exist (alembic manages them in deployed databases)
        Base.metadata.create_all(bind=engine)
        if settings.REAPER_ENABLED:
            reaper.start()
        else:
            logger.info("ℹ️ Expiry reaper disabled (REAPER_ENABLED=false)")

        yield

        logger.info("🔄 Starting graceful shutdown...")
        await reaper.stop()
        engine.dispose()
        logger.info("✅ Graceful shutdown complete")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Backend APIs for cinema seat reservation and booking",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = clock
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.reaper = reaper

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # every router is mounted under the /api prefix the frontend expects
    app.include_router(public_routes.router, prefix="/api")
    app.include_router(booking_routes.router, prefix="/api")
    app.include_router(admin_routes.router, prefix="/api")
    app.include_router(health.router, prefix="/api")

    @app.get("/")
    def root():
        return {"success": True, "message": "🎬 Cinebook API is running"}

    return app


app = create_app()
