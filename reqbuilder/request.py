"""Immutable request description produced by :class:`RequestBuilder`."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any, Optional

from .body import BodyData, BodyGenerator, BodyKind, ByteBuffer, StreamBody
from .cookies import Cookie
from .headers import FrozenHeaderMap, HeaderMap
from .logging_utils import redact_headers
from .multipart import Part
from .params import Param, parse_query
from .proxy import ProxyServer
from .realm import Realm
from .resolution import (
    DEFAULT_NAME_RESOLVER,
    DEFAULT_PARTITIONING,
    ConnectionPoolPartitioning,
    IPAddress,
    NameResolver,
)
from .uri import Uri


@dataclass(frozen=True, eq=False)
class Request:
    """A ready-to-send request.

    Collections are private copies taken at build time. Body payloads
    (bytes, buffers, streams, generators) are shared with the builder that
    produced the request and with any builder prototyped from it.
    """

    method: str
    uri: Uri
    headers: HeaderMap = field(default_factory=FrozenHeaderMap)
    cookies: tuple[Cookie, ...] = ()
    data: Optional[BodyData] = None
    body_generator: Optional[BodyGenerator] = None
    file: Optional[Path] = None
    form_params: tuple[Param, ...] = ()
    parts: tuple[Part, ...] = ()
    inet_address: Optional[IPAddress] = None
    local_address: Optional[IPAddress] = None
    virtual_host: Optional[str] = None
    content_length: int = -1
    proxy_server: Optional[ProxyServer] = None
    realm: Optional[Realm] = None
    follow_redirect: Optional[bool] = None
    request_timeout: int = 0
    range_offset: int = 0
    body_charset: Optional[str] = None
    connection_pool_partitioning: ConnectionPoolPartitioning = DEFAULT_PARTITIONING
    name_resolver: NameResolver = DEFAULT_NAME_RESOLVER

    @property
    def url(self) -> str:
        return self.uri.to_url()

    @cached_property
    def query_params(self) -> tuple[Param, ...]:
        return tuple(parse_query(self.uri.query))

    def _payload(self, kind: BodyKind) -> Any:
        if self.data is not None and self.data.kind is kind:
            return self.data.value
        return None

    @property
    def byte_data(self) -> Optional[bytes]:
        return self._payload(BodyKind.BYTES)

    @property
    def composite_byte_data(self) -> Optional[list[bytes]]:
        return self._payload(BodyKind.COMPOSITE_BYTES)

    @property
    def string_data(self) -> Optional[str]:
        return self._payload(BodyKind.TEXT)

    @property
    def byte_buffer_data(self) -> Optional[ByteBuffer]:
        return self._payload(BodyKind.BYTE_BUFFER)

    @property
    def stream_data(self) -> Optional[StreamBody]:
        return self._payload(BodyKind.STREAM)

    @property
    def body_kind(self) -> Optional[str]:
        """Name of the populated body representation, if any."""

        if self.data is not None:
            return self.data.kind.value
        if self.body_generator is not None:
            return "generator"
        if self.form_params:
            return "form_params"
        if self.parts:
            return "parts"
        if self.file is not None:
            return "file"
        return None

    def as_dict(self, *, redact: bool = True) -> dict[str, object]:
        headers = {name: list(values) for name, values in self.headers.items()}
        if redact:
            headers = redact_headers(headers)
        return {
            "method": self.method,
            "url": self.url,
            "headers": headers,
            "cookies": [cookie.name for cookie in self.cookies] if redact else [
                cookie.header_value() for cookie in self.cookies
            ],
            "query_params": [[param.name, param.value] for param in self.query_params],
            "form_params": [[param.name, param.value] for param in self.form_params],
            "parts": [part.name for part in self.parts],
            "body_kind": self.body_kind,
            "file": str(self.file) if self.file is not None else None,
            "content_length": self.content_length,
            "body_charset": self.body_charset,
            "virtual_host": self.virtual_host,
            "inet_address": str(self.inet_address) if self.inet_address else None,
            "local_address": str(self.local_address) if self.local_address else None,
            "proxy_server": self.proxy_server.url if self.proxy_server else None,
            "realm": (
                {"principal": self.realm.principal, "scheme": self.realm.scheme.value}
                if self.realm
                else None
            ),
            "follow_redirect": self.follow_redirect,
            "request_timeout": self.request_timeout,
            "range_offset": self.range_offset,
        }

    def __str__(self) -> str:
        pieces = [self.url, self.method, "headers:"]
        for name in self.headers:
            pieces.append(f"{name}:{self.headers.get_joined_value(name, ', ')}")
        if self.form_params:
            pieces.append("formParams:")
            for param in self.form_params:
                pieces.append(f"{param.name}:{param.value}")
        return "\t".join(pieces)


__all__ = ["Request"]
