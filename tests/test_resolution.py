from __future__ import annotations

import ipaddress
import socket

import pytest

from reqbuilder.builder import RequestBuilder
from reqbuilder.proxy import ProxyServer
from reqbuilder.resolution import (
    DEFAULT_NAME_RESOLVER,
    DEFAULT_PARTITIONING,
    PerHostPartitioning,
    ProxyPartitionKey,
    SystemNameResolver,
)
from reqbuilder.uri import Uri


def test_system_resolver_deduplicates(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_getaddrinfo(host, port, proto=socket.IPPROTO_TCP, **kwargs):
        return [
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", 0)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", 0)),
            (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("::1", 0, 0, 0)),
        ]

    monkeypatch.setattr("reqbuilder.resolution.socket.getaddrinfo", fake_getaddrinfo)

    assert SystemNameResolver().resolve("example.local") == [
        ipaddress.ip_address("127.0.0.1"),
        ipaddress.ip_address("::1"),
    ]


def test_per_host_partition_key() -> None:
    uri = Uri.create("https://example.com/path")

    assert PerHostPartitioning().partition_key(uri, None) == "https://example.com:443"


def test_proxy_partition_key() -> None:
    uri = Uri.create("http://example.com:8080/")
    proxy = ProxyServer("proxy.local", 3128)

    key = PerHostPartitioning().partition_key(uri, proxy)

    assert key == ProxyPartitionKey("http://proxy.local:3128", "http://example.com:8080")


def test_request_defaults_and_overrides() -> None:
    class _Pinned:
        def resolve(self, name):
            return [ipaddress.ip_address("192.0.2.1")]

    default = RequestBuilder().build()
    assert default.name_resolver is DEFAULT_NAME_RESOLVER
    assert default.connection_pool_partitioning is DEFAULT_PARTITIONING

    resolver = _Pinned()
    request = (
        RequestBuilder()
        .set_name_resolver(resolver)
        .set_inet_address("192.0.2.1")
        .set_local_inet_address(ipaddress.ip_address("10.0.0.2"))
        .build()
    )
    assert request.name_resolver is resolver
    assert request.inet_address == ipaddress.ip_address("192.0.2.1")
    assert str(request.local_address) == "10.0.0.2"


def test_proxy_non_proxy_hosts_matching() -> None:
    proxy = ProxyServer("p", 8080, non_proxy_hosts=("*.internal", "10.0.*", "localhost"))

    assert proxy.is_ignored_for_host("db.internal")
    assert proxy.is_ignored_for_host("10.0.3.4")
    assert proxy.is_ignored_for_host("LOCALHOST")
    assert not proxy.is_ignored_for_host("example.com")
