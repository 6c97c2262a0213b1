"""Deletion Scheduler — detached, delayed channel deletions with explicit identity.

Invariants:
    - At most one pending deletion per channel id; schedule() is idempotent per id
    - A scheduled deletion is never cancelled by callers; only shutdown() trips the
      cancellation token, and each lost deletion is logged
    - Pending state lives in this process only (non-durable): a restart between
      CLOSING and DELETED means the channel is never deleted
    - The deletion task removes itself from the pending map when it finishes, whatever the outcome

Design Decisions:
    - asyncio task on the server loop, not FastAPI BackgroundTasks: the deletion must not
      hold the HTTP response, and must outlive the requesting connection
    - Cancellation token (asyncio.Event) instead of Task.cancel(): the wait ends cleanly
      and the "lost on shutdown" path is observable in logs and tests
    - A 404 on delete means someone removed the channel first: treated as DELETED
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from zstore.core.errors import DiscordAPIError
from zstore.core.repository_protocols import ChatPlatform

logger = logging.getLogger(__name__)


@dataclass
class ScheduledDeletion:
    """One pending CLOSING -> DELETED transition."""
    channel_id: str
    delay_seconds: float
    task_id: str = field(default_factory=lambda: uuid4().hex)
    scheduled_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cancel_token: asyncio.Event = field(default_factory=asyncio.Event)
    task: asyncio.Task | None = None

    @property
    def due_at(self) -> datetime:
        return self.scheduled_at + timedelta(seconds=self.delay_seconds)


class DeletionScheduler:
    """Owns every pending channel deletion in this process."""

    def __init__(self, chat: ChatPlatform):
        self._chat = chat
        self._pending: dict[str, ScheduledDeletion] = {}

    def get(self, channel_id: str) -> ScheduledDeletion | None:
        return self._pending.get(channel_id)

    def pending(self) -> list[ScheduledDeletion]:
        return list(self._pending.values())

    def schedule(self, channel_id: str, delay_seconds: float) -> ScheduledDeletion:
        """Schedule deletion; returns the existing entry if one is already pending."""
        existing = self._pending.get(channel_id)
        if existing is not None:
            return existing
        entry = ScheduledDeletion(channel_id=channel_id, delay_seconds=delay_seconds)
        self._pending[channel_id] = entry
        entry.task = asyncio.create_task(
            self._run(entry), name=f"delete-channel-{channel_id}",
        )
        logger.info(
            f"Channel deletion scheduled in {delay_seconds}s",
            extra={"channel_id": channel_id, "task_id": entry.task_id},
        )
        return entry

    async def shutdown(self) -> None:
        """Trip every cancellation token and wait for the tasks to exit."""
        entries = self.pending()
        for entry in entries:
            logger.warning(
                "Pending channel deletion lost on shutdown",
                extra={"channel_id": entry.channel_id, "task_id": entry.task_id},
            )
            entry.cancel_token.set()
        tasks = [e.task for e in entries if e.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, entry: ScheduledDeletion) -> None:
        try:
            if await self._wait_or_cancelled(entry):
                return
            await self._chat.delete_channel(entry.channel_id)
            logger.info(
                "Ticket channel deleted",
                extra={"channel_id": entry.channel_id, "task_id": entry.task_id},
            )
        except DiscordAPIError as e:
            if e.is_not_found:
                logger.info(
                    "Ticket channel already gone at deletion time",
                    extra={"channel_id": entry.channel_id, "task_id": entry.task_id},
                )
            else:
                logger.error(
                    f"Scheduled channel deletion failed: {e.message}",
                    extra={
                        "channel_id": entry.channel_id,
                        "task_id": entry.task_id,
                        "api_error_type": e.api_error_type,
                    },
                )
        finally:
            self._pending.pop(entry.channel_id, None)

    @staticmethod
    async def _wait_or_cancelled(entry: ScheduledDeletion) -> bool:
        """Sleep for the delay; True if the cancellation token fired first."""
        try:
            await asyncio.wait_for(entry.cancel_token.wait(), timeout=entry.delay_seconds)
        except asyncio.TimeoutError:
            return False
        return True
