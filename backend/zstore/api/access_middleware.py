"""Access Middleware — runs the AccessGate before any route handler executes.

Invariants:
    - Every request passes through the gate, static and health routes included
    - Denied requests never reach a handler: 403 (banned) or 503 (maintenance)
    - Denial bodies use the same envelope as ZStoreError.to_response()
    - The resolved client IP is stored on request.state.client_ip for handlers

Design Decisions:
    - Middleware renders the error itself: exceptions raised here run outside
      FastAPI's exception handlers (Starlette middleware stack order)
    - Gate read from app.state (built in lifespan) so tests can swap the policy store
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from zstore.core.domain_types import AccessReason
from zstore.core.errors import AccessDeniedError, ErrorContext, MaintenanceError
from zstore.core.resolve_client_ip import resolve_client_ip
from zstore.services.access_gate import AccessGate

logger = logging.getLogger(__name__)


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Rejects banned requesters and non-admin traffic during maintenance."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        gate: AccessGate = request.app.state.access_gate
        client_ip = resolve_client_ip(
            request.headers, request.client.host if request.client else None,
        )
        request.state.client_ip = client_ip
        path = request.url.path

        decision = await gate.evaluate(client_ip, path)
        if decision.allowed:
            return await call_next(request)

        ctx = ErrorContext(client_ip=client_ip, path=path)
        error = (
            AccessDeniedError(ctx) if decision.reason == AccessReason.BANNED
            else MaintenanceError(ctx)
        )
        logger.info(
            f"Request rejected by access gate ({decision.reason.value})",
            extra={
                "client_ip": client_ip,
                "path": path,
                "decision": decision.reason.value,
                "error_code": error.code,
            },
        )
        return JSONResponse(status_code=error.http_status, content=error.to_response())
