"""SQL Policy Store — ban and store-status reads against in-memory SQLite.

Invariants:
    - Ban existence alone denies; unknown IPs are not banned
    - Missing store_config row reads as open
    - Read failures surface as PolicyReadError (never raw SQLAlchemy errors)
"""

import pytest

from zstore.core.errors import PolicyReadError
from zstore.db.base import Base


async def test_unknown_ip_is_not_banned(sql_policy_store):
    assert await sql_policy_store.is_banned("198.51.100.1") is False


async def test_banned_ip_is_banned(sql_policy_store):
    await sql_policy_store.ban_ip("203.0.113.9", reason="chargeback fraud")
    assert await sql_policy_store.is_banned("203.0.113.9") is True


async def test_unban_lifts_ban(sql_policy_store):
    await sql_policy_store.ban_ip("203.0.113.9")
    await sql_policy_store.unban_ip("203.0.113.9")
    assert await sql_policy_store.is_banned("203.0.113.9") is False


async def test_missing_store_config_means_open(sql_policy_store):
    assert await sql_policy_store.is_global_open() is True


async def test_store_config_toggle(sql_policy_store):
    await sql_policy_store.set_global_open(False)
    assert await sql_policy_store.is_global_open() is False
    await sql_policy_store.set_global_open(True)
    assert await sql_policy_store.is_global_open() is True


async def test_read_failure_maps_to_policy_read_error(sql_policy_store, test_engine):
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    with pytest.raises(PolicyReadError) as exc_info:
        await sql_policy_store.is_banned("198.51.100.1")
    assert exc_info.value.document == "banned_ips"

    with pytest.raises(PolicyReadError) as exc_info:
        await sql_policy_store.is_global_open()
    assert exc_info.value.document == "store_config"
