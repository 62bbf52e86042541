"""Health Probes: liveness and database readiness for the reward tracker API.

Invariants:
    - GET /health/ answers 200 while the process runs; it never touches the store
    - GET /health/ready answers 503 until the store answers a ping

Design Decisions:
    - db_manager is looked up per call: the lifespan creates it after this module loads
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from reward_tracker.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "reward-tracker-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness():
    """503 with a reason when the database cannot be reached."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        logger.warning("Readiness probe failed: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
