"""Health — liveness, plus readiness that checks the database and its migrated schema.

Invariants:
    - GET /health/ answers 200 while the process is up and never touches storage
    - GET /health/ready is 503 until the database answers AND every table the
      models declare exists (alembic has run)
    - A failed readiness check names what is missing, never a driver message
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import mutual_aid.models  # noqa: F401
from mutual_aid.db.base import Base
from mutual_aid.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE = "mutual-aid-api"


def _not_ready(reason: str, **details) -> JSONResponse:
    logger.warning(f"Readiness failed: {reason}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason, **details},
    )


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE}


@router.get("/ready")
async def readiness():
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")

    missing = await manager.missing_tables(Base.metadata.tables)
    if missing:
        return _not_ready("schema_not_migrated", missing_tables=missing)

    return {
        "status": "ready",
        "checks": {"database": "healthy", "schema": "migrated"},
    }
