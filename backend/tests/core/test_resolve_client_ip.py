"""Client IP Resolution — header precedence and validation."""

from zstore.core.resolve_client_ip import resolve_client_ip


def test_peer_used_without_headers():
    assert resolve_client_ip({}, "10.0.0.7") == "10.0.0.7"


def test_forwarded_for_uses_left_most_valid_entry():
    headers = {"x-forwarded-for": "unknown, 203.0.113.9, 10.0.0.1"}
    assert resolve_client_ip(headers, "10.0.0.1") == "203.0.113.9"


def test_client_ip_header_beats_forwarded_for():
    headers = {"x-client-ip": "198.51.100.4", "x-forwarded-for": "203.0.113.9"}
    assert resolve_client_ip(headers, None) == "198.51.100.4"


def test_cloudflare_header_used_when_forwarded_for_absent():
    headers = {"cf-connecting-ip": "2001:db8::1"}
    assert resolve_client_ip(headers, "10.0.0.1") == "2001:db8::1"


def test_ipv4_port_suffix_stripped():
    assert resolve_client_ip({"x-real-ip": "203.0.113.9:443"}, None) == "203.0.113.9"


def test_garbage_everywhere_returns_none():
    assert resolve_client_ip({"x-forwarded-for": "unknown"}, "not-an-ip") is None


def test_missing_or_invalid_peer_returns_none():
    assert resolve_client_ip({}, None) is None
    assert resolve_client_ip({"x-real-ip": "unknown"}, "not-an-ip") is None
