"""In-memory fakes for the two external collaborators (policy store, Discord).

Invariants:
    - FakeDiscord mimics the REST client's contract: DiscordAPIError on failure,
      fetch_channel -> None for unknown ids, delete of an unknown id -> not_found
    - Every call is recorded in `calls` in order, so tests can assert sequencing
    - Failures are injected per operation via `fail[op] = DiscordAPIError(...)`

Design Decisions:
    - Flat fake classes (no inheritance from the real clients): simple, explicit, easy to debug
    - Channel payloads stored as dicts shaped like Discord's responses
"""

import time

from zstore.core.errors import DiscordAPIError, PolicyReadError

GUILD_ID = "111111111111111111"
CATEGORY_ID = "222222222222222222"
OWNER_ID = "999999999999999999"


def not_found() -> DiscordAPIError:
    return DiscordAPIError("HTTP 404 (10003): Unknown Channel", "not_found", 404)


def transport_error() -> DiscordAPIError:
    return DiscordAPIError("GET /channels/x failed: connection reset", "connection_error")


class FakeDiscord:
    """Records what would hit the Discord REST API."""

    def __init__(self, guild_id: str = GUILD_ID):
        self.guild_id = guild_id
        self.channels: dict[str, dict] = {}
        self.messages: list[tuple[str, dict]] = []
        self.deleted: list[str] = []
        self.deleted_at: dict[str, float] = {}
        self.calls: list[str] = []
        self.fail: dict[str, DiscordAPIError] = {}
        self.drop_overwrites = False
        self.extra_overwrite: dict | None = None
        self._next_id = 500000000000000000

    def add_channel(self, channel_id: str, guild_id: str | None = None) -> dict:
        channel = {
            "id": channel_id,
            "guild_id": guild_id or self.guild_id,
            "name": f"channel-{channel_id}",
            "type": 0,
            "permission_overwrites": [],
        }
        self.channels[channel_id] = channel
        return channel

    def messages_for(self, channel_id: str) -> list[dict]:
        return [m for cid, m in self.messages if cid == channel_id]

    def _enter(self, op: str) -> None:
        self.calls.append(op)
        error = self.fail.get(op)
        if error is not None:
            raise error

    async def fetch_guild(self, guild_id: str) -> dict:
        self._enter("fetch_guild")
        return {"id": guild_id, "name": "ZStore"}

    async def create_channel(self, guild_id: str, payload: dict) -> dict:
        self._enter("create_channel")
        self._next_id += 1
        channel_id = str(self._next_id)
        overwrites = [] if self.drop_overwrites else list(payload["permission_overwrites"])
        if self.extra_overwrite:
            overwrites.append(self.extra_overwrite)
        channel = {
            "id": channel_id,
            "guild_id": guild_id,
            "name": payload["name"],
            "type": payload["type"],
            "parent_id": payload.get("parent_id"),
            "permission_overwrites": overwrites,
        }
        self.channels[channel_id] = channel
        return dict(channel)

    async def send_message(self, channel_id: str, payload: dict) -> dict:
        self._enter("send_message")
        if channel_id not in self.channels:
            raise not_found()
        self.messages.append((channel_id, payload))
        return {"id": str(len(self.messages)), "channel_id": channel_id}

    async def fetch_channel(self, channel_id: str) -> dict | None:
        self._enter("fetch_channel")
        channel = self.channels.get(channel_id)
        return dict(channel) if channel else None

    async def delete_channel(self, channel_id: str) -> None:
        self._enter("delete_channel")
        if channel_id not in self.channels:
            raise not_found()
        del self.channels[channel_id]
        self.deleted.append(channel_id)
        self.deleted_at[channel_id] = time.monotonic()

    async def fetch_current_user(self) -> dict:
        self._enter("fetch_current_user")
        return {"id": "1", "username": "zstore-bot", "discriminator": "0"}

    async def health_check(self) -> bool:
        return "fetch_current_user" not in self.fail


class FakePolicyStore:
    """Ban list + store status held in memory; failures injectable per document."""

    def __init__(self):
        self.banned: set[str] = set()
        self.global_open: bool | None = None  # None = store_config document missing
        self.fail_ban = False
        self.fail_config = False
        self.reads: list[str] = []

    async def is_banned(self, client_ip: str) -> bool:
        self.reads.append("banned_ips")
        if self.fail_ban:
            raise PolicyReadError("connection refused", "banned_ips")
        return client_ip in self.banned

    async def is_global_open(self) -> bool:
        self.reads.append("store_config")
        if self.fail_config:
            raise PolicyReadError("deadline exceeded", "store_config")
        return True if self.global_open is None else self.global_open


TICKET_BODY = {
    "buyerName": "Alex",
    "sellerId": "SELLER1",
    "productName": "Skin Pack",
    "price": 50000,
    "brandName": "NovaShop",
    "method": "QRIS",
}
