"""Access Policy Enforcement — pure verdict for the request-level access gate.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Ban check strictly precedes the maintenance check
    - A banned requester is rejected on every path, the admin path included
    - None for a policy input means "read failed" and is treated as permissive (fail-open)

Design Decisions:
    - Reads happen in the shell (services/access_gate.py); this module only decides,
      so ordering and exemption rules are testable without a database (ADR: ExMA Functional Core)
    - Admin exemption is a substring match on the path: the owner panel lives under
      several URLs (/panelowner, /panelowner.html, /api/panelowner/...)
"""

from zstore.core.domain_types import AccessDecision, AccessReason


def is_admin_path(path: str, admin_path: str) -> bool:
    """True if the request path targets the maintenance-exempt owner panel."""
    return bool(admin_path) and admin_path in path


def decide_access(
    *,
    is_banned: bool | None,
    is_global_open: bool | None,
    path: str,
    admin_path: str,
) -> AccessDecision:
    """Combine the two policy reads into a single verdict."""
    if is_banned:
        return AccessDecision.deny(AccessReason.BANNED)
    store_open = True if is_global_open is None else is_global_open
    if not store_open and not is_admin_path(path, admin_path):
        return AccessDecision.deny(AccessReason.MAINTENANCE)
    return AccessDecision.allow()
