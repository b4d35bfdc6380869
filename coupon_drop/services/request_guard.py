from __future__ import annotations

import ipaddress
import secrets
from functools import lru_cache

from fastapi import Request

ADMIN_TOKEN_HEADER = "X-Admin-Token"
FORWARDED_FOR_HEADER = "X-Forwarded-For"

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def is_admin_request_authenticated(request: Request, *, expected_token: str) -> bool:
    # An unset token leaves the admin surface open, as in local development.
    if not expected_token:
        return True
    received_token = request.headers.get(ADMIN_TOKEN_HEADER) or ""
    return secrets.compare_digest(expected_token.encode("utf-8"), received_token.encode("utf-8"))


def _to_address(value: str | None) -> IPAddress | None:
    candidate = (value or "").strip()
    if not candidate:
        return None
    try:
        return ipaddress.ip_address(candidate)
    except ValueError:
        return None


@lru_cache(maxsize=32)
def trusted_proxy_networks(trusted_proxies: str) -> tuple[IPNetwork, ...]:
    networks: list[IPNetwork] = []
    for entry in filter(None, (part.strip() for part in trusted_proxies.split(","))):
        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            continue
    return tuple(networks)


def _is_trusted(address: IPAddress, networks: tuple[IPNetwork, ...]) -> bool:
    return any(address in network for network in networks)


def extract_client_ip(request: Request, *, trusted_proxies: str = "") -> str | None:
    """Return the visitor IP as seen by the nearest untrusted hop.

    ``X-Forwarded-For`` is read only when the direct peer is a trusted proxy,
    and then from the right: proxies append the address they received from,
    so every entry left of the first untrusted hop is client-supplied. A
    malformed hop at that position yields the peer address.
    """
    peer_host = request.client.host if request.client is not None else None
    peer = _to_address(peer_host)
    if peer is None:
        # Non-IP peers (unix sockets, test transports) still throttle by their name.
        return (peer_host or "").strip() or None

    networks = trusted_proxy_networks(trusted_proxies)
    if not _is_trusted(peer, networks):
        return str(peer)

    client = peer
    hops = request.headers.get(FORWARDED_FOR_HEADER, "").split(",")
    for raw_hop in reversed(hops):
        if not raw_hop.strip():
            continue
        hop = _to_address(raw_hop)
        if hop is None:
            return str(peer)
        client = hop
        if not _is_trusted(hop, networks):
            break
    return str(client)
