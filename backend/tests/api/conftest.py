"""API test fixtures — FastAPI app wired with fake collaborators.

Invariants:
    - Components built by the same wire_components() the lifespan uses
    - Discord and the policy store are in-memory fakes; the DB manager is in-memory SQLite
    - Teardown delay shortened so deletion tests finish quickly

Design Decisions:
    - httpx ASGITransport does not run the lifespan: app.state is populated here instead
"""

import pytest
from httpx import ASGITransport, AsyncClient

from zstore.config import Settings
from zstore.main import app, wire_components

from tests.fakes import CATEGORY_ID, GUILD_ID, OWNER_ID

CLOSE_DELAY = 0.3


@pytest.fixture
def test_settings():
    return Settings(
        guild_id=GUILD_ID,
        category_id=CATEGORY_ID,
        owner_id=OWNER_ID,
        close_delay_seconds=CLOSE_DELAY,
        admin_path="panelowner",
        access_gate_fail_open=True,
    )


@pytest.fixture
async def client(test_settings, policy_db, fake_policy_store, fake_discord):
    wire_components(
        app,
        settings=test_settings,
        db=policy_db,
        policy_store=fake_policy_store,
        chat=fake_discord,
    )
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    await app.state.scheduler.shutdown()
