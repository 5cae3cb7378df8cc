"""SSRF protection for outgoing notification requests."""

import asyncio
import ipaddress
import logging
import socket

import httpx

logger = logging.getLogger(__name__)

_BLOCKED_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("100.64.0.0/10"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

_BLOCKED_HOSTNAMES = {
    "localhost",
    "metadata",
    "metadata.google.internal",
}


def is_ip_blocked(ip_str: str) -> bool:
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return True
    return any(ip in network for network in _BLOCKED_NETWORKS)


class GuardedTransport(httpx.AsyncHTTPTransport):
    """Refuse requests whose host resolves to a private or reserved address."""

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        hostname = request.url.host
        if hostname:
            if hostname.lower() in _BLOCKED_HOSTNAMES:
                raise httpx.ConnectError(f"Blocked hostname: {hostname}", request=request)
            loop = asyncio.get_running_loop()
            try:
                addr_infos = await loop.getaddrinfo(
                    hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM
                )
            except socket.gaierror:
                raise httpx.ConnectError(f"Cannot resolve hostname: {hostname}", request=request)
            for _family, _, _, _, sockaddr in addr_infos:
                if is_ip_blocked(sockaddr[0]):
                    logger.warning("Refusing notification to %s: resolves to %s", hostname, sockaddr[0])
                    raise httpx.ConnectError(
                        f"DNS resolved to blocked IP for {hostname}", request=request
                    )
        return await super().handle_async_request(request)


def guarded_http_client(
    timeout: float = 10,
    allow_private: bool = False,
    **kwargs,
) -> httpx.AsyncClient:
    """Build a client for notification delivery; redirects are not followed."""
    transport = httpx.AsyncHTTPTransport() if allow_private else GuardedTransport()
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=False,
        transport=transport,
        **kwargs,
    )
