from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.services.internal_auth import (
    INTERNAL_TOKEN_HEADER,
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
    is_valid_internal_token,
)


def _request(*, host: str | None, headers: dict[str, str] | None = None) -> SimpleNamespace:
    client = SimpleNamespace(host=host) if host is not None else None
    return SimpleNamespace(headers=headers or {}, client=client)


@pytest.mark.parametrize(
    ("expected", "received", "valid"),
    [
        ("ops-token", "ops-token", True),
        ("ops-token", "ops-token ", False),
        ("ops-token", None, False),
        ("", "", False),
    ],
)
def test_internal_token_comparison(expected: str, received: str | None, valid: bool) -> None:
    assert is_valid_internal_token(expected_token=expected, received_token=received) is valid


def test_request_authenticated_only_by_token_header() -> None:
    authed = _request(host="127.0.0.1", headers={INTERNAL_TOKEN_HEADER: "ops-token"})
    anonymous = _request(host="127.0.0.1")

    assert is_internal_request_authenticated(authed, expected_token="ops-token") is True
    assert is_internal_request_authenticated(anonymous, expected_token="ops-token") is False


def test_allowlist_accepts_hosts_and_networks_and_skips_garbage() -> None:
    allowlist = "127.0.0.1, not-an-entry, 172.16.0.0/12, ::1"

    assert is_client_ip_allowed(client_ip="127.0.0.1", allowlist=allowlist) is True
    assert is_client_ip_allowed(client_ip="172.20.4.4", allowlist=allowlist) is True
    assert is_client_ip_allowed(client_ip="::1", allowlist=allowlist) is True
    assert is_client_ip_allowed(client_ip="8.8.8.8", allowlist=allowlist) is False
    assert is_client_ip_allowed(client_ip=None, allowlist=allowlist) is False
    assert is_client_ip_allowed(client_ip="127.0.0.1", allowlist="") is False


def test_client_ip_is_peer_without_trusted_proxy() -> None:
    request = _request(host="198.51.100.10", headers={"X-Forwarded-For": "203.0.113.7"})

    assert extract_client_ip(request) == "198.51.100.10"
    assert extract_client_ip(request, trusted_proxies="10.0.0.0/8") == "198.51.100.10"


def test_client_ip_uses_first_forwarded_hop_behind_trusted_proxy() -> None:
    request = _request(
        host="10.0.0.2",
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.2"},
    )
    assert extract_client_ip(request, trusted_proxies="10.0.0.0/8") == "203.0.113.7"


def test_client_ip_is_none_for_unparseable_values() -> None:
    forwarded_garbage = _request(host="10.0.0.2", headers={"X-Forwarded-For": "unknown"})
    no_client = _request(host=None)

    assert extract_client_ip(forwarded_garbage, trusted_proxies="10.0.0.0/8") is None
    assert extract_client_ip(no_client) is None
    assert extract_client_ip(_request(host="testclient")) is None
