from app.utils.client_ip import headers_from_scope, normalize_ip, resolve_client_ip


def test_forwarded_for_leftmost_token():
    headers = {"x-forwarded-for": "203.0.113.9, 10.0.0.1, 10.0.0.2"}
    assert resolve_client_ip(headers, "10.0.0.2") == "203.0.113.9"


def test_unknown_tokens_skipped():
    headers = {"x-forwarded-for": "unknown, 198.51.100.4"}
    assert resolve_client_ip(headers, "10.0.0.2") == "198.51.100.4"


def test_header_precedence():
    headers = {"x-real-ip": "198.51.100.1", "proxy-client-ip": "198.51.100.2"}
    assert resolve_client_ip(headers, None) == "198.51.100.2"
    assert resolve_client_ip({"wl-proxy-client-ip": "unknown", "x-real-ip": "198.51.100.1"}, None) == "198.51.100.1"


def test_falls_back_to_peer():
    assert resolve_client_ip({}, "192.0.2.10") == "192.0.2.10"


def test_proxy_headers_ignored_when_untrusted():
    headers = {"x-forwarded-for": "203.0.113.9"}
    assert resolve_client_ip(headers, "192.0.2.10", trust_proxy_headers=False) == "192.0.2.10"


def test_loopback_normalized():
    assert normalize_ip("0:0:0:0:0:0:0:1") == "127.0.0.1"
    assert resolve_client_ip({}, "::1") == "127.0.0.1"


def test_nothing_known_is_empty():
    assert resolve_client_ip({}, None) == ""


def test_headers_from_scope_first_wins():
    raw = [(b"X-Real-IP", b"1.1.1.1"), (b"x-real-ip", b"2.2.2.2")]
    assert headers_from_scope(raw) == {"x-real-ip": "1.1.1.1"}
