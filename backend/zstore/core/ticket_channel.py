"""Ticket Channel Layout — pure construction and verification of a private channel.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Exactly two overwrites: @everyone (role id == guild id) denied VIEW_CHANNEL,
      the counterparty allowed VIEW_CHANNEL | SEND_MESSAGES | ATTACH_FILES
    - Channel names only contain word characters, '-' and the ticket prefix; <= 100 chars
    - check_overwrites returns an error string on violation, None when the layout holds

Design Decisions:
    - Case is preserved in channel names: Discord lower-cases text channels server-side,
      and keeping it here makes names readable in logs
    - Verification runs on what Discord echoes back, not on what we sent, so a
      silently dropped overwrite is caught before the channel is handed out
"""

import re
from collections.abc import Iterable

from zstore.core.domain_types import (
    GuildId, OverwriteType, Permission, PermissionOverwrite, PrincipalId,
)

TICKET_PREFIX = "🎫"
MAX_CHANNEL_NAME = 100

COUNTERPARTY_GRANT = (
    Permission.VIEW_CHANNEL | Permission.SEND_MESSAGES | Permission.ATTACH_FILES
)

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^\w-]")
_DASH_RUNS = re.compile(r"-{2,}")


def _slug(part: str) -> str:
    part = _WHITESPACE.sub("-", part.strip())
    part = _DISALLOWED.sub("", part)
    return _DASH_RUNS.sub("-", part).strip("-")


def build_channel_name(brand_name: str, buyer_name: str) -> str:
    """Derive `🎫-{brand}-{buyer}` restricted to Discord's text-channel charset."""
    parts = [p for p in (_slug(brand_name), _slug(buyer_name)) if p]
    if not parts:
        parts = ["ticket"]
    return "-".join([TICKET_PREFIX, *parts])[:MAX_CHANNEL_NAME].rstrip("-")


def build_permission_overwrites(
    guild_id: GuildId, counterparty_id: PrincipalId,
) -> list[PermissionOverwrite]:
    """The only two overwrites a ticket channel may carry."""
    if counterparty_id == guild_id:
        raise ValueError("counterparty cannot be the @everyone role")
    return [
        PermissionOverwrite(
            principal_id=PrincipalId(guild_id),
            kind=OverwriteType.ROLE,
            deny=Permission.VIEW_CHANNEL,
        ),
        PermissionOverwrite(
            principal_id=counterparty_id,
            kind=OverwriteType.MEMBER,
            allow=COUNTERPARTY_GRANT,
        ),
    ]


def check_overwrites(
    overwrites: Iterable[PermissionOverwrite],
    guild_id: GuildId,
    counterparty_id: PrincipalId,
) -> str | None:
    """Verify a channel's overwrites match the ticket layout."""
    by_principal = {o.principal_id: o for o in overwrites}
    expected = {guild_id, counterparty_id}
    if set(by_principal) != expected:
        unexpected = sorted(set(by_principal) - expected)
        missing = sorted(expected - set(by_principal))
        return f"overwrite principals mismatch (unexpected={unexpected}, missing={missing})"

    everyone = by_principal[guild_id]
    if Permission.VIEW_CHANNEL not in everyone.deny:
        return "@everyone is not denied VIEW_CHANNEL"
    if Permission.VIEW_CHANNEL in everyone.allow:
        return "@everyone is allowed VIEW_CHANNEL"

    counterparty = by_principal[counterparty_id]
    if (counterparty.allow & COUNTERPARTY_GRANT) != COUNTERPARTY_GRANT:
        return "counterparty is missing view/send/attach grants"
    if counterparty.deny & COUNTERPARTY_GRANT:
        return "counterparty has a conflicting deny"
    return None
