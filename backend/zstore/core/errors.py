"""Error Hierarchy — typed, categorized exceptions for all ZStore failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - to_response() always carries "error" as a plain user-facing string
    - No internal details leaked in user-facing messages (debug_info stays in logs)

Design Decisions:
    - Single hierarchy with ZStoreError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - "error" is a string, not an object: the storefront JS reads response.error directly
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from zstore.core.domain_types import AccessReason


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    ACCESS = "access"
    AVAILABILITY = "availability"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    client_ip: str | None = None
    path: str | None = None
    channel_id: str | None = None
    debug_info: dict[str, Any] | None = None


class ZStoreError(Exception):
    """Base exception for all ZStore errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": self.message,
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }


# ─── Access Gate (400-level / 503) ──────────────────────────────

BANNED_MESSAGE = (
    "AKSES DITOLAK: IP Anda telah diblokir secara permanen oleh sistem ZStore "
    "karena terindikasi penipuan."
)
MAINTENANCE_MESSAGE = (
    "MAINTENANCE: ZStore sedang dalam pemeliharaan rutin. "
    "Silahkan kembali nanti."
)


class AccessDeniedError(ZStoreError):
    """Requester IP is on the ban list."""
    reason = AccessReason.BANNED

    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            BANNED_MESSAGE, "ACCESS_DENIED", ErrorCategory.ACCESS,
            ErrorSeverity.WARNING, context, 403,
        )


class MaintenanceError(ZStoreError):
    """Store is globally closed and the path is not exempt."""
    reason = AccessReason.MAINTENANCE

    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            MAINTENANCE_MESSAGE, "MAINTENANCE", ErrorCategory.AVAILABILITY,
            ErrorSeverity.INFO, context, 503,
        )


class PolicyReadError(ZStoreError):
    """Policy store read failed. Logged by the gate, never returned to callers."""
    def __init__(self, message: str, document: str, context: ErrorContext | None = None):
        super().__init__(
            f"Policy read '{document}' failed: {message}",
            "POLICY_READ_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.WARNING, context, 503,
        )
        self.document = document


# ─── Ticket Lifecycle (500-level) ───────────────────────────────

class CreationFailedError(ZStoreError):
    """Ticket channel could not be provisioned. No configured channel remains reachable."""
    def __init__(
        self,
        cause: str,
        rolled_back: bool = False,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.debug_info = {**(ctx.debug_info or {}), "cause": cause, "rolled_back": rolled_back}
        super().__init__(
            "Gagal membuat tiket Discord.",
            "CREATION_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.cause = cause
        self.rolled_back = rolled_back


class CloseFailedError(ZStoreError):
    """Ticket could not enter CLOSING. Nothing was scheduled."""
    def __init__(
        self,
        channel_id: str,
        cause: str,
        code: str = "CLOSE_FAILED",
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.channel_id = channel_id
        ctx.debug_info = {**(ctx.debug_info or {}), "cause": cause}
        super().__init__(
            "Gagal menutup tiket.",
            code, ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.channel_id = channel_id
        self.cause = cause


class LookupFailedError(CloseFailedError):
    """Channel lookup failed for a reason other than not-found."""
    def __init__(self, channel_id: str, cause: str, context: ErrorContext | None = None):
        super().__init__(channel_id, cause, "LOOKUP_FAILED", context)


# ─── Infrastructure Errors ──────────────────────────────────────

class DatabaseError(ZStoreError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class DiscordAPIError(ZStoreError):
    """Discord REST call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Discord API error ({api_error_type}): {message}",
            "DISCORD_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.api_error_type = api_error_type
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.api_error_type == "not_found"
