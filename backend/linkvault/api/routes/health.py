"""Health & Readiness - process liveness, database reachability and sync status.

Invariants:
    - GET /health/ returns 200 whenever the process is up
    - GET /health/ready returns 503 when the database is unreachable or the
      workspace was never initialized
    - A signed-in workspace still loading its first snapshots is reported
      (sync.loading) but does not fail readiness: an empty workspace is
      a valid state

Design Decisions:
    - Singletons are read through their modules at request time so a
      re-initialized db_manager / workspace is picked up
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import linkvault.infrastructure.database as db_module
import linkvault.services.workspace as workspace_module

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "linkvault-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


def _sync_check() -> dict | None:
    ws = workspace_module.workspace
    if ws is None:
        return None
    return {
        "phase": ws.engine.phase.value,
        "loading": ws.engine.loading,
        "signed_in": ws.identity.current_user_id is not None,
    }


@router.get("/ready")
async def readiness_check():
    """Database ping plus the sync engine's phase."""
    manager = db_module.db_manager
    db_ok = await manager.health_check() if manager else False
    sync = _sync_check()

    reason = None
    if not db_ok:
        reason = "database_unavailable"
    elif sync is None:
        reason = "workspace_unavailable"
    if reason:
        logger.warning(f"Readiness failed: {reason}", extra={"path": "/api/v1/health/ready"})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": reason, "checks": {"sync": sync}},
        )
    return {"status": "ready", "checks": {"database": "healthy", "sync": sync}}
