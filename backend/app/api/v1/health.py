import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.db import engine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", summary="Health check")
def read_health() -> dict[str, str]:
    """Liveness probe; no dependencies are touched."""
    return {"status": "ok"}


@router.get("/ready", summary="Readiness check")
def read_ready():
    """Probe the database before reporting ready."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error(f"Readiness probe failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "database": "disconnected",
                "error": str(exc) if settings.ENVIRONMENT != "production" else "Database connection failed",
            },
        )
    return {"status": "ready", "database": "connected"}
