from __future__ import annotations

import hmac
from functools import lru_cache
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network, ip_address, ip_network

from fastapi import Request

INTERNAL_TOKEN_HEADER = "X-Internal-Token"
FORWARDED_FOR_HEADER = "X-Forwarded-For"

IPNetwork = IPv4Network | IPv6Network


def is_valid_internal_token(*, expected_token: str, received_token: str | None) -> bool:
    if not expected_token or not received_token:
        return False
    return hmac.compare_digest(expected_token.encode("utf-8"), received_token.encode("utf-8"))


def is_internal_request_authenticated(request: Request, *, expected_token: str) -> bool:
    return is_valid_internal_token(
        expected_token=expected_token,
        received_token=request.headers.get(INTERNAL_TOKEN_HEADER),
    )


@lru_cache(maxsize=32)
def _networks(allowlist: str) -> tuple[IPNetwork, ...]:
    """Comma-separated hosts or CIDR blocks; unparseable entries are skipped."""
    parsed: list[IPNetwork] = []
    for entry in (item.strip() for item in allowlist.split(",")):
        if not entry:
            continue
        try:
            parsed.append(ip_network(entry, strict=False))
        except ValueError:
            continue
    return tuple(parsed)


def _as_address(value: str | None) -> IPv4Address | IPv6Address | None:
    if not value or not value.strip():
        return None
    try:
        return ip_address(value.strip())
    except ValueError:
        return None


def is_client_ip_allowed(*, client_ip: str | None, allowlist: str) -> bool:
    address = _as_address(client_ip)
    if address is None:
        return False
    return any(address in network for network in _networks(allowlist))


def extract_client_ip(request: Request, *, trusted_proxies: str = "") -> str | None:
    """Connection peer, or the first X-Forwarded-For hop when the peer is a trusted proxy."""
    peer = _as_address(request.client.host if request.client is not None else None)
    if peer is None:
        return None

    forwarded_for = request.headers.get(FORWARDED_FOR_HEADER)
    if forwarded_for and is_client_ip_allowed(client_ip=str(peer), allowlist=trusted_proxies):
        first_hop = _as_address(forwarded_for.split(",", maxsplit=1)[0])
        return str(first_hop) if first_hop is not None else None
    return str(peer)
