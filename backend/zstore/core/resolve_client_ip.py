"""Client IP Resolution — picks the requester's network identity from proxy headers.

Invariants:
    - Header precedence is fixed (see _IP_HEADERS); first valid address wins
    - X-Forwarded-For contributes only its left-most valid entry (the original client)
    - Returns None when no header or peer address is a valid IP

Design Decisions:
    - Same precedence the storefront used behind its Node proxy (request-ip), so existing
      ban records keep matching after deployment behind Railway / Cloudflare
    - ipaddress validation rejects garbage like "unknown" that some proxies emit
"""

import ipaddress
from collections.abc import Mapping

from zstore.core.domain_types import ClientIp

_IP_HEADERS = (
    "x-client-ip",
    "x-forwarded-for",
    "cf-connecting-ip",
    "fastly-client-ip",
    "true-client-ip",
    "x-real-ip",
    "x-cluster-client-ip",
)


def _clean(candidate: str) -> str | None:
    value = candidate.strip()
    # IPv4 with port ("1.2.3.4:5678") — IPv6 keeps its colons
    if value.count(":") == 1 and "." in value:
        value = value.split(":", 1)[0]
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return None
    return value


def resolve_client_ip(
    headers: Mapping[str, str], peer_host: str | None,
) -> ClientIp | None:
    """Return the requester IP from headers, falling back to the socket peer."""
    for name in _IP_HEADERS:
        raw = headers.get(name)
        if not raw:
            continue
        if name == "x-forwarded-for":
            for part in raw.split(","):
                ip = _clean(part)
                if ip:
                    return ClientIp(ip)
            continue
        ip = _clean(raw)
        if ip:
            return ClientIp(ip)
    ip = _clean(peer_host) if peer_host else None
    return ClientIp(ip) if ip else None
