"""Channel Teardown — ACTIVE -> CLOSING -> DELETED for ticket channels.

Invariants:
    - ACTIVE -> CLOSING posts exactly one warning naming the actor and the delay
    - CLOSING -> DELETED is handed to DeletionScheduler and cannot be cancelled by callers
    - Missing channel: no message, no schedule, ack NOT_FOUND
    - Channel already CLOSING (pending deletion): ack ALREADY_CLOSING, no second warning,
      no duplicate schedule
    - A close that arrives while another close of the same channel is in flight waits for
      it: ALREADY_CLOSING if that one scheduled the deletion, otherwise its ack or its error
    - Missing channel ack carries no state: nothing transitioned
    - Lookup transport failure: LookupFailedError, nothing scheduled
    - Warning send failure: CloseFailedError, nothing scheduled

Design Decisions:
    - Channels outside the configured guild are reported NOT_FOUND: the close endpoint
      must not become a way to delete arbitrary channels the bot can see
    - _in_flight maps channel id to the running close task; single event loop, so a plain
      dict is enough (no locks). The task is shielded so a dropped request does not
      abandon a half-finished close
"""

import asyncio
import logging
from dataclasses import dataclass

from zstore.core.domain_types import ChannelState, CloseStatus
from zstore.core.errors import CloseFailedError, DiscordAPIError, LookupFailedError
from zstore.core.format_messages import build_close_warning
from zstore.core.repository_protocols import ChatPlatform
from zstore.services.deletion_scheduler import DeletionScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloseAck:
    """Answer to a close request."""
    channel_id: str
    status: CloseStatus
    state: ChannelState | None
    task_id: str | None = None
    delete_after_seconds: float | None = None


class ChannelTeardown:
    """Warns, then deletes a ticket channel after a fixed delay."""

    def __init__(
        self,
        chat: ChatPlatform,
        scheduler: DeletionScheduler,
        delay_seconds: float = 10,
        guild_id: str | None = None,
    ):
        self._chat = chat
        self._scheduler = scheduler
        self._delay_seconds = delay_seconds
        self._guild_id = guild_id or None
        self._in_flight: dict[str, asyncio.Task] = {}

    async def close_channel(self, channel_id: str, actor_name: str) -> CloseAck:
        pending = self._scheduler.get(channel_id)
        if pending is not None:
            return CloseAck(
                channel_id, CloseStatus.ALREADY_CLOSING, ChannelState.CLOSING,
                task_id=pending.task_id,
            )

        running = self._in_flight.get(channel_id)
        if running is not None:
            # Same outcome as the close already running; its errors propagate here too
            ack = await asyncio.shield(running)
            if ack.status == CloseStatus.CLOSING:
                return CloseAck(
                    channel_id, CloseStatus.ALREADY_CLOSING, ChannelState.CLOSING,
                    task_id=ack.task_id,
                )
            return ack

        task = asyncio.create_task(
            self._begin_close(channel_id, actor_name), name=f"close-channel-{channel_id}",
        )
        self._in_flight[channel_id] = task
        task.add_done_callback(lambda _: self._in_flight.pop(channel_id, None))
        return await asyncio.shield(task)

    async def _begin_close(self, channel_id: str, actor_name: str) -> CloseAck:
        try:
            channel = await self._chat.fetch_channel(channel_id)
        except DiscordAPIError as e:
            raise LookupFailedError(channel_id, e.message) from e

        if channel is None or not self._in_guild(channel):
            logger.info(
                "Close requested for missing channel; nothing to do",
                extra={"channel_id": channel_id},
            )
            return CloseAck(channel_id, CloseStatus.NOT_FOUND, None)

        try:
            await self._chat.send_message(
                channel_id, build_close_warning(actor_name, self._delay_seconds),
            )
        except DiscordAPIError as e:
            raise CloseFailedError(channel_id, e.message) from e

        entry = self._scheduler.schedule(channel_id, self._delay_seconds)
        logger.info(
            f"Ticket channel closing, requested by {actor_name}",
            extra={"channel_id": channel_id, "task_id": entry.task_id},
        )
        return CloseAck(
            channel_id, CloseStatus.CLOSING, ChannelState.CLOSING,
            task_id=entry.task_id, delete_after_seconds=self._delay_seconds,
        )

    def _in_guild(self, channel: dict) -> bool:
        if self._guild_id is None:
            return True
        return str(channel.get("guild_id")) == self._guild_id
