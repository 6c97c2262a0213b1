"""Boundary Protocols — contracts between core services and external collaborators.

Invariants:
    - Services depend on these Protocols, never on httpx or SQLAlchemy directly
    - All IO operations accessed through Protocol types
    - Implementations provided by the shell (main.py lifespan) via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance (ADR: ExMA anti-pattern)
    - ChatPlatform speaks Discord's JSON dicts: the REST client stays a thin mapper
      and fakes can record exactly what would hit the wire
"""

from typing import Protocol


class PolicyStore(Protocol):
    """Read side of the ban list and store-status document."""
    async def is_banned(self, client_ip: str) -> bool: ...
    async def is_global_open(self) -> bool: ...


class ChatPlatform(Protocol):
    """Subset of the Discord REST API used for ticket channels.

    Failures raise DiscordAPIError. fetch_channel returns None when the
    channel does not exist.
    """
    async def fetch_guild(self, guild_id: str) -> dict: ...
    async def create_channel(self, guild_id: str, payload: dict) -> dict: ...
    async def send_message(self, channel_id: str, payload: dict) -> dict: ...
    async def fetch_channel(self, channel_id: str) -> dict | None: ...
    async def delete_channel(self, channel_id: str) -> None: ...
