"""Discord REST Client — wraps httpx.AsyncClient with bot auth and error mapping.

Invariants:
    - One long-lived instance per process, built in the lifespan and injected into services
    - Every failure mapped to DiscordAPIError with an api_error_type:
      rate_limit (429), forbidden (401/403), not_found (404), client_error (other 4xx),
      server_error (5xx), timeout, connection_error, invalid_response
    - No retries: callers decide (ticket provisioning rolls back instead)
    - fetch_channel returns None on 404 — "missing" is an answer, not a failure

Design Decisions:
    - REST over a gateway session: the service only creates, posts to and deletes
      channels, so no websocket, intents or event cache are needed
    - httpx transport injectable: tests use httpx.MockTransport instead of patching
"""

import logging
from typing import Any

import httpx

from zstore.core.errors import DiscordAPIError

logger = logging.getLogger(__name__)

_USER_AGENT = "DiscordBot (https://zstore.id, 1.0)"


def _error_type(status_code: int) -> str:
    if status_code == 429:
        return "rate_limit"
    if status_code in (401, 403):
        return "forbidden"
    if status_code == 404:
        return "not_found"
    if status_code >= 500:
        return "server_error"
    return "client_error"


class DiscordRestClient:
    """Minimal Discord v10 REST client for ticket channels."""

    def __init__(
        self,
        token: str,
        api_base: str = "https://discord.com/api/v10",
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=api_base,
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"Bot {token}",
                "User-Agent": _USER_AGENT,
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ─── ChatPlatform protocol ───────────────────────────────────

    async def fetch_guild(self, guild_id: str) -> dict:
        return await self._request("GET", f"/guilds/{guild_id}")

    async def create_channel(self, guild_id: str, payload: dict) -> dict:
        return await self._request(
            "POST", f"/guilds/{guild_id}/channels",
            json=payload, audit_reason="ZStore transaction ticket",
        )

    async def send_message(self, channel_id: str, payload: dict) -> dict:
        return await self._request(
            "POST", f"/channels/{channel_id}/messages", json=payload,
        )

    async def fetch_channel(self, channel_id: str) -> dict | None:
        try:
            return await self._request("GET", f"/channels/{channel_id}")
        except DiscordAPIError as e:
            if e.is_not_found:
                return None
            raise

    async def delete_channel(self, channel_id: str) -> None:
        await self._request(
            "DELETE", f"/channels/{channel_id}",
            audit_reason="ZStore ticket closed",
        )

    # ─── Extras ──────────────────────────────────────────────────

    async def fetch_current_user(self) -> dict:
        return await self._request("GET", "/users/@me")

    async def health_check(self) -> bool:
        """Check token validity and API reachability (for readiness probes)."""
        try:
            await self.fetch_current_user()
            return True
        except DiscordAPIError as e:
            logger.error(f"Discord health check failed: {e.message}")
            return False

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        audit_reason: str | None = None,
    ) -> Any:
        headers = {"X-Audit-Log-Reason": audit_reason} if audit_reason else None
        try:
            response = await self._client.request(
                method, path, json=json, headers=headers,
            )
        except httpx.TimeoutException as e:
            raise DiscordAPIError(f"{method} {path} timed out", "timeout") from e
        except httpx.HTTPError as e:
            raise DiscordAPIError(
                f"{method} {path} failed: {e}", "connection_error",
            ) from e

        if response.is_error:
            error_type = _error_type(response.status_code)
            logger.warning(
                f"Discord {method} {path} returned {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "api_error_type": error_type,
                },
            )
            raise DiscordAPIError(
                _describe(response), error_type, status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DiscordAPIError(
                f"{method} {path} returned non-JSON body", "invalid_response",
                status_code=response.status_code,
            ) from e


def _describe(response: httpx.Response) -> str:
    """Pull Discord's {code, message} error body when present."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and "message" in body:
        return f"HTTP {response.status_code} ({body.get('code')}): {body['message']}"
    return f"HTTP {response.status_code}"
