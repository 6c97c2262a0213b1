"""Ticket Routes — storefront endpoints that open and close transaction channels.

Invariants:
    - POST /api/create-ticket → 200 {success, channelUrl} | 500 {error} (CreationFailedError)
    - POST /api/close-ticket → 200 {success, status} for closing, already_closing AND
      not_found; 500 {error} when the lookup or warning fails
    - Handlers hold no state; provisioner/teardown come from app.state (lifespan-built)

Design Decisions:
    - Paths kept unversioned (/api/create-ticket): the storefront JS calls them as-is
    - Missing channel on close answers 200 with status "not_found": closing is idempotent,
      and the caller always gets a body (never a hanging request)
"""

import logging

from fastapi import APIRouter, Depends, Request

from zstore.schemas.ticket import (
    CloseTicketRequest, CloseTicketResponse,
    CreateTicketRequest, CreateTicketResponse,
)
from zstore.services.channel_provisioner import ChannelProvisioner
from zstore.services.channel_teardown import ChannelTeardown

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["tickets"])


def get_provisioner(request: Request) -> ChannelProvisioner:
    return request.app.state.provisioner


def get_teardown(request: Request) -> ChannelTeardown:
    return request.app.state.teardown


@router.post("/create-ticket", response_model=CreateTicketResponse)
async def create_ticket(
    body: CreateTicketRequest,
    provisioner: ChannelProvisioner = Depends(get_provisioner),
):
    """Open a private channel between the buyer's seller and the store."""
    channel = await provisioner.create_transaction_channel(body.to_ticket())
    return CreateTicketResponse(channel_url=channel.url)


@router.post("/close-ticket", response_model=CloseTicketResponse)
async def close_ticket(
    body: CloseTicketRequest,
    teardown: ChannelTeardown = Depends(get_teardown),
):
    """Warn the channel, then delete it after the fixed delay."""
    ack = await teardown.close_channel(body.channel_id, body.seller_name)
    return CloseTicketResponse(
        status=ack.status, delete_after_seconds=ack.delete_after_seconds,
    )
