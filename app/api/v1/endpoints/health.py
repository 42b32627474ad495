"""Health check endpoint for load balancers and monitoring."""

import logging
import os

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_tracker
from app.core.exceptions import StoreError
from app.db.session import get_db
from app.services.session_manager import WorkoutTracker

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health():
    """Simple liveness check. Includes built_at if BACKEND_BUILT_AT env is set."""
    payload: dict = {"status": "ok"}
    built_at = os.environ.get("BACKEND_BUILT_AT")
    if built_at:
        payload["built_at"] = built_at
    return payload


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_db),
    tracker: WorkoutTracker = Depends(get_tracker),
):
    """Readiness: DB connectivity plus the active-session invariant (at most one)."""
    try:
        await db.execute(text("SELECT 1"))
        active = await tracker.active_session_count()
    except (SQLAlchemyError, StoreError) as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "database": str(e)},
        )
    return {
        "status": "ok" if active <= 1 else "degraded",
        "database": "connected",
        "active_sessions": active,
    }
