from typing import Iterable, Mapping, Optional, Tuple

# Checked in order; the first usable value wins.
PROXY_HEADERS: Tuple[str, ...] = (
    "x-forwarded-for",
    "proxy-client-ip",
    "wl-proxy-client-ip",
    "x-real-ip",
)

_LOOPBACK_V6 = ("::1", "0:0:0:0:0:0:0:1")


def _usable(value: Optional[str]) -> bool:
    return bool(value) and value.lower() != "unknown"


def normalize_ip(ip: str) -> str:
    if ip in _LOOPBACK_V6:
        return "127.0.0.1"
    return ip


def headers_from_scope(raw: Iterable[Tuple[bytes, bytes]]) -> Mapping[str, str]:
    """Decode ASGI header pairs; the first occurrence of a name wins."""
    headers = {}
    for name, value in raw:
        key = name.decode("latin-1").lower()
        if key not in headers:
            headers[key] = value.decode("latin-1")
    return headers


def resolve_client_ip(
    headers: Mapping[str, str],
    peer_host: Optional[str],
    trust_proxy_headers: bool = True,
) -> str:
    """
    Resolve the originating client address.

    X-Forwarded-For may carry "client, proxy1, proxy2"; the leftmost usable
    token is the client. Returns "" when nothing is known.
    """
    if trust_proxy_headers:
        for name in PROXY_HEADERS:
            raw = headers.get(name)
            if not raw:
                continue
            for token in (p.strip() for p in raw.split(",")):
                if _usable(token):
                    return normalize_ip(token)
    if _usable(peer_host):
        return normalize_ip(peer_host)
    return ""
