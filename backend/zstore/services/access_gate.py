"""Access Gate — consults the policy store and turns two reads into one AccessDecision.

Invariants:
    - Ban lookup runs first; a banned requester short-circuits (config is never read)
    - A failed read is logged and counted; with fail_open it counts as permissive
    - Without fail_open a failed read denies with MAINTENANCE (503, retryable)
    - No side effects beyond the two reads

Design Decisions:
    - Fail-open by default: the storefront stays up during policy-store outages, at the
      cost of briefly admitting banned IPs. Kept explicit via the fail_open flag and the
      read_failures counter so the trade-off is visible, not buried in a bare except
    - Verdict logic delegated to core/enforce_access.py (pure, unit-tested)
"""

import logging

from zstore.core.domain_types import AccessDecision, AccessReason, ClientIp
from zstore.core.enforce_access import decide_access
from zstore.core.errors import PolicyReadError
from zstore.core.repository_protocols import PolicyStore

logger = logging.getLogger(__name__)


class AccessGate:
    """Request-level policy check shared by every route."""

    def __init__(
        self, policy_store: PolicyStore, admin_path: str, fail_open: bool = True,
    ):
        self._store = policy_store
        self.admin_path = admin_path
        self.fail_open = fail_open
        self.read_failures = 0

    async def evaluate(self, client_ip: ClientIp | None, path: str) -> AccessDecision:
        """Decide whether a request from client_ip for path may proceed."""
        is_banned: bool | None = False
        if client_ip:
            try:
                is_banned = await self._store.is_banned(client_ip)
            except PolicyReadError as e:
                self._record_failure(e, client_ip, path)
                if not self.fail_open:
                    return AccessDecision.deny(AccessReason.MAINTENANCE)
                is_banned = None
        else:
            logger.warning(
                "Could not resolve client IP; ban check skipped",
                extra={"path": path},
            )

        if is_banned:
            return decide_access(
                is_banned=True, is_global_open=None,
                path=path, admin_path=self.admin_path,
            )

        try:
            is_open: bool | None = await self._store.is_global_open()
        except PolicyReadError as e:
            self._record_failure(e, client_ip, path)
            if not self.fail_open:
                return AccessDecision.deny(AccessReason.MAINTENANCE)
            is_open = None

        return decide_access(
            is_banned=is_banned, is_global_open=is_open,
            path=path, admin_path=self.admin_path,
        )

    def _record_failure(
        self, error: PolicyReadError, client_ip: ClientIp | None, path: str,
    ) -> None:
        self.read_failures += 1
        logger.warning(
            f"Access gate policy read failed ({error.document}); "
            f"{'allowing' if self.fail_open else 'denying'} request",
            extra={
                "client_ip": client_ip,
                "path": path,
                "error_code": error.code,
            },
            exc_info=error,
        )
