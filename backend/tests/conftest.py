"""Root conftest — shared test configuration and collaborator fixtures."""

import os

# Ensure tests don't accidentally use real credentials
os.environ.setdefault("DISCORD_TOKEN", "discord-test-fake-token")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("GUILD_ID", "111111111111111111")
os.environ.setdefault("CATEGORY_ID", "222222222222222222")
os.environ.setdefault("OWNER_ID", "999999999999999999")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from zstore.db.base import Base  # noqa: E402
from zstore.infrastructure.database import DatabaseSessionManager  # noqa: E402
from zstore.infrastructure.policy_store import SqlPolicyStore  # noqa: E402
import zstore.models.banned_ip  # noqa: E402,F401
import zstore.models.system_setting  # noqa: E402,F401

from tests.fakes import FakeDiscord, FakePolicyStore  # noqa: E402


@pytest.fixture
def fake_discord():
    return FakeDiscord()


@pytest.fixture
def fake_policy_store():
    return FakePolicyStore()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def policy_db(test_engine):
    """DatabaseSessionManager bound to the in-memory test engine."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    return manager


@pytest.fixture
async def sql_policy_store(policy_db):
    return SqlPolicyStore(policy_db)
