"""
Food Catalog Backend: Health Check Route
=========================================

What:  GET /health for container health checks and load balancers.
How:   Runs SELECT 1 against the database and checks that the upload
       directory is writable.

Status levels:
    healthy:   database connected and storage writable
    degraded:  database connected, storage unavailable (reads still work)
    unhealthy: database unreachable
"""

import logging
import os
import time

from fastapi import APIRouter
from sqlalchemy import text

from food_catalog import __version__
from food_catalog.database import engine
from food_catalog.schemas.food import HealthResponse
from food_catalog.services.file_store import file_store

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
    storage_status = "writable"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not (file_store.upload_dir.is_dir() and os.access(file_store.upload_dir, os.W_OK)):
        storage_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall
        logger.warning("Health check: upload directory not writable: %s", file_store.upload_dir)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
