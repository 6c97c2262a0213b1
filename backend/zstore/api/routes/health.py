"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /api/v1/health/ always returns 200 if process is up (liveness)
    - GET /api/v1/health/ready returns 503 if the policy store or Discord is unreachable
    - Readiness reports pending deletions and policy read failures (non-durable state made visible)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
      (ADR: production readiness)
"""

import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "zstore-ticket-gate",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe — policy store and Discord connectivity."""
    state = request.app.state
    db_ok = await state.db.health_check()
    discord_ok = await state.chat.health_check()
    checks = {
        "database": "healthy" if db_ok else "unavailable",
        "discord": "healthy" if discord_ok else "unavailable",
    }
    stats = {
        "pending_deletions": len(state.scheduler.pending()),
        "policy_read_failures": state.access_gate.read_failures,
    }
    if not (db_ok and discord_ok):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks, "stats": stats},
        )
    return {"status": "ready", "checks": checks, "stats": stats}
