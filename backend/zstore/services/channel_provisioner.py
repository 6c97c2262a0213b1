"""Channel Provisioner — creates a private ticket channel and posts its order summary.

Invariants:
    - Overwrites are sent in the create payload and re-verified from Discord's echo
    - Any failure after the channel exists triggers a rollback delete before reporting
    - provision() never raises DiscordAPIError: it returns a ProvisionResult carrying either
      a fully configured channel or a failure (with orphan_channel_id if rollback failed)
    - create_transaction_channel() raises CreationFailedError on any failed result

Design Decisions:
    - Result type over exceptions inside the step: rollback bookkeeping stays in one place,
      and the route only ever sees "configured channel" or CreationFailedError
    - Chat client injected at construction (single long-lived REST session per process)
    - Clock injectable so embed timestamps are deterministic in tests
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from zstore.core.domain_types import (
    ChannelRef, ChannelType, ChannelId, GuildId, PermissionOverwrite,
    TransactionTicket,
)
from zstore.core.errors import CreationFailedError, DiscordAPIError
from zstore.core.format_messages import build_ticket_message
from zstore.core.repository_protocols import ChatPlatform
from zstore.core.ticket_channel import (
    build_channel_name, build_permission_overwrites, check_overwrites,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionResult:
    """Outcome of one provisioning attempt."""
    channel: ChannelRef | None = None
    failure: str | None = None
    orphan_channel_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.channel is not None

    @property
    def guaranteed_absent(self) -> bool:
        """True when no channel from this attempt remains on the platform."""
        return self.channel is None and self.orphan_channel_id is None


class ChannelProvisioner:
    """Builds one private channel per transaction ticket."""

    def __init__(
        self,
        chat: ChatPlatform,
        guild_id: str,
        category_id: str | None = None,
        owner_id: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._chat = chat
        self._guild_id = GuildId(guild_id)
        self._category_id = category_id or None
        self._owner_id = owner_id or None
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def create_transaction_channel(self, ticket: TransactionTicket) -> ChannelRef:
        """Provision the channel or raise CreationFailedError."""
        result = await self.provision(ticket)
        if not result.ok:
            raise CreationFailedError(
                result.failure or "unknown", rolled_back=result.guaranteed_absent,
            )
        return result.channel

    async def provision(self, ticket: TransactionTicket) -> ProvisionResult:
        try:
            guild = await self._chat.fetch_guild(self._guild_id)
        except DiscordAPIError as e:
            return self._failed(f"guild fetch failed: {e.message}")
        guild_id = GuildId(str(guild.get("id", self._guild_id)))

        try:
            overwrites = build_permission_overwrites(guild_id, ticket.counterparty_id)
        except ValueError as e:
            return self._failed(str(e))

        payload = {
            "name": build_channel_name(ticket.brand_name, ticket.buyer_name),
            "type": ChannelType.GUILD_TEXT.value,
            "permission_overwrites": [o.to_payload() for o in overwrites],
        }
        if self._category_id:
            payload["parent_id"] = self._category_id

        try:
            created = await self._chat.create_channel(guild_id, payload)
        except DiscordAPIError as e:
            return self._failed(f"channel create failed: {e.message}")
        channel_id = ChannelId(str(created["id"]))

        echoed = [
            PermissionOverwrite.from_payload(o)
            for o in created.get("permission_overwrites", [])
        ]
        problem = check_overwrites(echoed, guild_id, ticket.counterparty_id)
        if problem:
            return await self._rollback(channel_id, f"overwrite check failed: {problem}")

        message = build_ticket_message(
            ticket, owner_id=self._owner_id, timestamp=self._clock(),
        )
        try:
            await self._chat.send_message(channel_id, message)
        except DiscordAPIError as e:
            return await self._rollback(channel_id, f"summary message failed: {e.message}")

        ref = ChannelRef(
            guild_id=guild_id, channel_id=channel_id,
            name=str(created.get("name", payload["name"])),
        )
        logger.info(
            f"Ticket channel {ref.name} provisioned",
            extra={"guild_id": guild_id, "channel_id": channel_id},
        )
        return ProvisionResult(channel=ref)

    def _failed(self, cause: str) -> ProvisionResult:
        logger.error(f"Ticket provisioning failed: {cause}", extra={"guild_id": self._guild_id})
        return ProvisionResult(failure=cause)

    async def _rollback(self, channel_id: ChannelId, cause: str) -> ProvisionResult:
        """Delete a half-configured channel so it is never reachable."""
        try:
            await self._chat.delete_channel(channel_id)
        except DiscordAPIError as e:
            if not e.is_not_found:
                logger.error(
                    f"Rollback failed, orphan channel left behind: {e.message}",
                    extra={"channel_id": channel_id, "rolled_back": False},
                )
                return ProvisionResult(failure=cause, orphan_channel_id=channel_id)
        logger.error(
            f"Ticket provisioning rolled back: {cause}",
            extra={"channel_id": channel_id, "rolled_back": True},
        )
        return ProvisionResult(failure=cause)
