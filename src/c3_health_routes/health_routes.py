"""Health check routes for TicketDesk."""

import logging

from fastapi import APIRouter
from sqlalchemy import text

from src.c1_database_session import get_db
from src.core.time_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        dict: Health status, database reachability, timestamp and version
    """
    database = "ok"
    try:
        with get_db() as db:
            db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "timestamp": to_iso(utcnow()),
        "version": API_VERSION,
    }


@router.get("/api/hello")
async def hello():
    return {"message": "API is running"}
