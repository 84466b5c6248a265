"""Name resolution and connection-pool partitioning strategies.

Requests only carry these strategies; the transport invokes them when it opens
connections.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
from typing import NamedTuple, Optional, Protocol, Union, runtime_checkable

from .proxy import ProxyServer
from .uri import Uri

LOGGER = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@runtime_checkable
class NameResolver(Protocol):
    def resolve(self, name: str) -> list[IPAddress]:
        ...


class SystemNameResolver:
    """Resolve through the platform resolver (``getaddrinfo``)."""

    def resolve(self, name: str) -> list[IPAddress]:
        infos = socket.getaddrinfo(name, None, proto=socket.IPPROTO_TCP)
        results: list[IPAddress] = []
        for info in infos:
            host_ip = info[-1][0]
            try:
                address = ipaddress.ip_address(host_ip)
            except ValueError:
                continue
            if address not in results:
                results.append(address)
        LOGGER.debug("Resolved %s to %d address(es)", name, len(results))
        return results

    def __repr__(self) -> str:
        return "SystemNameResolver()"


class ProxyPartitionKey(NamedTuple):
    proxy_url: str
    target_base_url: str


@runtime_checkable
class ConnectionPoolPartitioning(Protocol):
    def partition_key(self, uri: Uri, proxy_server: Optional[ProxyServer]) -> object:
        ...


class PerHostPartitioning:
    """Pool connections per target origin, or per proxy and origin."""

    def partition_key(self, uri: Uri, proxy_server: Optional[ProxyServer]) -> object:
        target = uri.base_url
        if proxy_server is not None and not proxy_server.is_ignored_for_host(uri.host):
            return ProxyPartitionKey(proxy_server.url, target)
        return target

    def __repr__(self) -> str:
        return "PerHostPartitioning()"


DEFAULT_NAME_RESOLVER = SystemNameResolver()
DEFAULT_PARTITIONING = PerHostPartitioning()

__all__ = [
    "ConnectionPoolPartitioning",
    "DEFAULT_NAME_RESOLVER",
    "DEFAULT_PARTITIONING",
    "IPAddress",
    "NameResolver",
    "PerHostPartitioning",
    "ProxyPartitionKey",
    "SystemNameResolver",
]
