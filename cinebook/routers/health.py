# cinebook/routers/health.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cinebook.database.database import get_db
from cinebook.database.schemas import fail, ok
from cinebook.deps.services import get_reaper
from cinebook.services.expiry_reaper import ExpiryReaper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(db: Session = Depends(get_db), reaper: ExpiryReaper = Depends(get_reaper)):
    """
    Lightweight health check: one database round trip plus the reaper state.
    Returns 503 when the database does not answer.
    """
    try:
        db.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        return JSONResponse(status_code=503, content=fail("Database unavailable"))
    return ok(data={"database": "ok", "reaper_running": reaper.running})
