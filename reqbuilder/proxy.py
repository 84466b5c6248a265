"""Proxy server descriptor recorded on requests for the transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .realm import Realm


class ProxyType(Enum):
    HTTP = "http"
    SOCKS_V4 = "socks4"
    SOCKS_V5 = "socks5"


@dataclass(frozen=True)
class ProxyServer:
    host: str
    port: int
    secured_port: Optional[int] = None
    realm: Optional[Realm] = None
    non_proxy_hosts: tuple[str, ...] = field(default_factory=tuple)
    proxy_type: ProxyType = ProxyType.HTTP

    def __post_init__(self) -> None:
        if self.port <= 0 or self.port > 65535:
            raise ValueError("Proxy port must be between 1 and 65535.")
        if self.secured_port is None:
            object.__setattr__(self, "secured_port", self.port)
        object.__setattr__(self, "non_proxy_hosts", tuple(self.non_proxy_hosts))

    @property
    def url(self) -> str:
        return f"{self.proxy_type.value}://{self.host}:{self.port}"

    def is_ignored_for_host(self, host: str) -> bool:
        """Return ``True`` when ``host`` matches a non-proxy host pattern.

        Patterns are exact host names or carry a single leading or trailing
        ``*`` wildcard (``*.internal``, ``10.0.*``).
        """

        host = host.lower()
        for pattern in self.non_proxy_hosts:
            pattern = pattern.lower()
            if pattern.startswith("*") and host.endswith(pattern[1:]):
                return True
            if pattern.endswith("*") and host.startswith(pattern[:-1]):
                return True
            if pattern == host:
                return True
        return False


__all__ = ["ProxyServer", "ProxyType"]
