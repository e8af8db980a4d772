"""
Accounting Notes Backend: Health Check Route
============================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs lightweight probes against the database and the bucket.
Who:   Render health checks, uptime monitors.

Status levels:
    - healthy:   database and bucket reachable
    - degraded:  bucket unreachable (notes still editable, narration stalls)
    - unhealthy: database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from app import __version__
from app.database import engine
from app.schemas.common import HealthResponse
from app.services.storage_service import storage_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    storage_status = "available"
    overall = "healthy"

    # ── Database: SELECT 1 ────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Bucket: HeadBucket ────────────────────────────────────────────────
    if not await storage_service.health_check():
        storage_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
