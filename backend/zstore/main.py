"""ZStore Ticket Gate API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - AccessGateMiddleware wraps every route; it runs before any handler
    - Global error handlers map ZStoreError → structured JSON responses
    - One DiscordRestClient per process, injected into provisioner, teardown and scheduler
    - Pending deletions are cancelled (and logged as lost) on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Components live on app.state, built by wire_components(): tests call the same wiring
      with fakes instead of patching module globals
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zstore.api.access_middleware import AccessGateMiddleware
from zstore.api.error_handlers import register_error_handlers
from zstore.api.routes import health, tickets
from zstore.config import Settings, get_settings
from zstore.core.errors import DiscordAPIError
from zstore.core.repository_protocols import ChatPlatform, PolicyStore
from zstore.infrastructure.database import DatabaseSessionManager, init_db
from zstore.infrastructure.discord_client import DiscordRestClient
from zstore.infrastructure.observability import setup_logging
from zstore.infrastructure.policy_store import SqlPolicyStore
from zstore.services.access_gate import AccessGate
from zstore.services.channel_provisioner import ChannelProvisioner
from zstore.services.channel_teardown import ChannelTeardown
from zstore.services.deletion_scheduler import DeletionScheduler

logger = logging.getLogger(__name__)


def wire_components(
    app: FastAPI,
    *,
    settings: Settings,
    db: DatabaseSessionManager,
    policy_store: PolicyStore,
    chat: ChatPlatform,
) -> None:
    """Build the gate, provisioner and teardown around shared collaborators."""
    scheduler = DeletionScheduler(chat)
    app.state.db = db
    app.state.chat = chat
    app.state.scheduler = scheduler
    app.state.access_gate = AccessGate(
        policy_store,
        admin_path=settings.admin_path,
        fail_open=settings.access_gate_fail_open,
    )
    app.state.provisioner = ChannelProvisioner(
        chat,
        guild_id=settings.guild_id,
        category_id=settings.category_id,
        owner_id=settings.owner_id,
    )
    app.state.teardown = ChannelTeardown(
        chat,
        scheduler,
        delay_seconds=settings.close_delay_seconds,
        guild_id=settings.guild_id,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    chat = DiscordRestClient(
        settings.discord_token,
        api_base=settings.discord_api_base,
        timeout_seconds=settings.discord_timeout_seconds,
    )
    wire_components(
        app, settings=settings, db=db,
        policy_store=SqlPolicyStore(db), chat=chat,
    )
    try:
        me = await chat.fetch_current_user()
        logger.info(f"Discord bot online as {me.get('username')}#{me.get('discriminator', '0')}")
    except DiscordAPIError as e:
        logger.error(f"Discord login check failed: {e.message}")
    logger.info(f"ZStore ticket gate started on port {settings.port}")
    yield
    await app.state.scheduler.shutdown()
    await chat.aclose()
    await db.dispose()
    logger.info("ZStore ticket gate shutting down")


app = FastAPI(
    title="ZStore Ticket Gate", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Added last so it runs first: nothing executes before the gate
app.add_middleware(AccessGateMiddleware)

# Routes — explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(tickets.router)

register_error_handlers(app)
