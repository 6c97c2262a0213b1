"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Discord snowflakes are strings end to end (JSON ints lose precision above 2^53)
    - AccessDecision.allowed is True iff reason is NONE
    - Permission bits match Discord's documented flag positions
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: API responses are JSON)
    - IntFlag for permissions: Discord sends allow/deny as stringified bitsets
"""

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

GuildId = NewType("GuildId", str)
ChannelId = NewType("ChannelId", str)
PrincipalId = NewType("PrincipalId", str)   # user or role snowflake
ClientIp = NewType("ClientIp", str)


# ─── Enums ───────────────────────────────────────────────────────

class AccessReason(str, Enum):
    """Why the access gate decided the way it did."""
    NONE = "none"
    BANNED = "banned"
    MAINTENANCE = "maintenance"


class ChannelState(str, Enum):
    """Transaction channel lifecycle as seen by teardown."""
    ACTIVE = "active"
    CLOSING = "closing"
    DELETED = "deleted"


class CloseStatus(str, Enum):
    """Outcome reported to the caller of close-ticket."""
    CLOSING = "closing"
    ALREADY_CLOSING = "already_closing"
    NOT_FOUND = "not_found"


class ChannelType(int, Enum):
    """Discord channel types used by this service."""
    GUILD_TEXT = 0


class OverwriteType(int, Enum):
    """Discord permission overwrite target kind."""
    ROLE = 0
    MEMBER = 1


class Permission(IntFlag):
    """Subset of Discord permission flags granted or denied on ticket channels."""
    VIEW_CHANNEL = 1 << 10
    SEND_MESSAGES = 1 << 11
    ATTACH_FILES = 1 << 15


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class AccessDecision:
    """Per-request gate verdict. Never persisted."""
    allowed: bool
    reason: AccessReason = AccessReason.NONE

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True, reason=AccessReason.NONE)

    @classmethod
    def deny(cls, reason: AccessReason) -> "AccessDecision":
        return cls(allowed=False, reason=reason)


@dataclass(frozen=True)
class PermissionOverwrite:
    """One (principal, allow-set, deny-set) entry on a channel."""
    principal_id: PrincipalId
    kind: OverwriteType
    allow: Permission = Permission(0)
    deny: Permission = Permission(0)

    def to_payload(self) -> dict:
        """Discord wire shape — bitsets are decimal strings."""
        return {
            "id": self.principal_id,
            "type": self.kind.value,
            "allow": str(int(self.allow)),
            "deny": str(int(self.deny)),
        }

    @classmethod
    def from_payload(cls, data: dict) -> "PermissionOverwrite":
        return cls(
            principal_id=PrincipalId(str(data["id"])),
            kind=OverwriteType(int(data.get("type", 0))),
            allow=Permission(int(data.get("allow", 0) or 0) & _KNOWN_BITS),
            deny=Permission(int(data.get("deny", 0) or 0) & _KNOWN_BITS),
        )


_KNOWN_BITS = int(
    Permission.VIEW_CHANNEL | Permission.SEND_MESSAGES | Permission.ATTACH_FILES
)


@dataclass(frozen=True)
class TransactionTicket:
    """Order details for one private buyer/seller channel. Consumed once, never stored."""
    buyer_name: str
    counterparty_id: PrincipalId
    product_name: str
    price: int
    brand_name: str
    method: str


@dataclass(frozen=True)
class ChannelRef:
    """Handle to a provisioned channel — enough to build its canonical URL."""
    guild_id: GuildId
    channel_id: ChannelId
    name: str = ""

    @property
    def url(self) -> str:
        return f"https://discord.com/channels/{self.guild_id}/{self.channel_id}"
