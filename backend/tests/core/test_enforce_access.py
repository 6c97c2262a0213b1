"""Access Enforcement — tests for the pure access verdict.

Tests cover:
    - Banned requesters are rejected on every path, maintenance or not
    - Maintenance rejects non-admin paths and exempts the admin path
    - Failed reads (None) are permissive
"""

import pytest

from zstore.core.domain_types import AccessDecision, AccessReason
from zstore.core.enforce_access import decide_access, is_admin_path

ADMIN = "panelowner"
PATHS = ["/", "/api/create-ticket", "/api/close-ticket", "/panelowner", "/panelowner.html"]


# ─── ban list ────────────────────────────────────────────────────

@pytest.mark.parametrize("path", PATHS)
@pytest.mark.parametrize("store_open", [True, False, None])
def test_banned_rejected_regardless_of_path_or_status(path, store_open):
    decision = decide_access(
        is_banned=True, is_global_open=store_open, path=path, admin_path=ADMIN,
    )
    assert decision == AccessDecision(allowed=False, reason=AccessReason.BANNED)


def test_unbanned_open_store_allows():
    decision = decide_access(
        is_banned=False, is_global_open=True, path="/api/create-ticket", admin_path=ADMIN,
    )
    assert decision.allowed
    assert decision.reason == AccessReason.NONE


# ─── maintenance ─────────────────────────────────────────────────

@pytest.mark.parametrize("path", ["/", "/api/create-ticket", "/order.html"])
def test_closed_store_rejects_non_admin_paths(path):
    decision = decide_access(
        is_banned=False, is_global_open=False, path=path, admin_path=ADMIN,
    )
    assert not decision.allowed
    assert decision.reason == AccessReason.MAINTENANCE


@pytest.mark.parametrize("path", ["/panelowner", "/panelowner.html", "/api/panelowner/status"])
def test_closed_store_exempts_admin_path(path):
    decision = decide_access(
        is_banned=False, is_global_open=False, path=path, admin_path=ADMIN,
    )
    assert decision.allowed


# ─── fail-open inputs ────────────────────────────────────────────

def test_unknown_ban_status_is_permissive():
    decision = decide_access(
        is_banned=None, is_global_open=True, path="/", admin_path=ADMIN,
    )
    assert decision.allowed


def test_unknown_store_status_is_open():
    decision = decide_access(
        is_banned=False, is_global_open=None, path="/", admin_path=ADMIN,
    )
    assert decision.allowed


def test_empty_admin_path_exempts_nothing():
    assert not is_admin_path("/panelowner", "")
    decision = decide_access(
        is_banned=False, is_global_open=False, path="/panelowner", admin_path="",
    )
    assert decision.reason == AccessReason.MAINTENANCE
