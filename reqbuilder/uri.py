"""URI value type, scheme validation and the stock query encoders."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import quote, urlsplit

from requests.utils import requote_uri

from .params import Param


SUPPORTED_SCHEMES = frozenset({"http", "https", "ws", "wss"})
DEFAULT_PORTS = {"http": 80, "ws": 80, "https": 443, "wss": 443}

# RFC 3986 unreserved characters; everything else in a param is escaped.
_PARAM_SAFE = "-._~"


class InvalidUriError(ValueError):
    """Raised when a URL string cannot be turned into a :class:`Uri`."""


class UnsupportedSchemeError(ValueError):
    """Raised when a request URI uses a scheme the client cannot speak."""


@dataclass(frozen=True)
class Uri:
    scheme: str
    host: str
    port: int = -1
    path: str = ""
    query: Optional[str] = None
    user_info: Optional[str] = None

    @classmethod
    def create(cls, url: str) -> "Uri":
        if not isinstance(url, str) or not url.strip():
            raise InvalidUriError("A URL must be a non-empty string.")
        try:
            parts = urlsplit(url.strip())
            port = parts.port
        except ValueError as exc:
            raise InvalidUriError(f"Invalid URL '{url}': {exc}") from exc
        if not parts.scheme:
            raise InvalidUriError(f"URL '{url}' has no scheme.")
        if not parts.hostname:
            raise InvalidUriError(f"URL '{url}' has no host.")
        user_info = None
        if "@" in parts.netloc:
            user_info = parts.netloc.rsplit("@", 1)[0]
        host = parts.hostname
        if ":" in host:
            host = f"[{host}]"
        return cls(
            scheme=parts.scheme.lower(),
            host=host,
            port=port if port is not None else -1,
            path=parts.path,
            query=parts.query or None,
            user_info=user_info,
        )

    @property
    def explicit_port(self) -> int:
        if self.port != -1:
            return self.port
        return DEFAULT_PORTS.get(self.scheme, -1)

    @property
    def is_secured(self) -> bool:
        return self.scheme in {"https", "wss"}

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.explicit_port}"

    def with_new_query(self, query: Optional[str]) -> "Uri":
        return replace(self, query=query or None)

    def to_url(self) -> str:
        url = f"{self.scheme}://"
        if self.user_info is not None:
            url += f"{self.user_info}@"
        url += self.host
        if self.port != -1:
            url += f":{self.port}"
        url += self.path
        if self.query:
            url += f"?{self.query}"
        return url

    def to_relative_url(self) -> str:
        path = self.path or "/"
        if self.query:
            return f"{path}?{self.query}"
        return path

    def __str__(self) -> str:
        return self.to_url()


def validate_supported_scheme(uri: Uri) -> None:
    if uri.scheme.lower() not in SUPPORTED_SCHEMES:
        raise UnsupportedSchemeError(
            f"The URI scheme, of the URI {uri}, must be equal (ignoring case) to "
            "'http', 'https', 'ws', or 'wss'"
        )


@runtime_checkable
class UriEncoder(Protocol):
    def encode(self, uri: Uri, params: Optional[Sequence[Param]]) -> Uri:
        """Return ``uri`` with ``params`` merged after its existing query."""


def _merge_query(query: Optional[str], rendered: list[str]) -> Optional[str]:
    if not rendered:
        return query
    pieces = [query] if query else []
    pieces.extend(rendered)
    return "&".join(pieces)


class FixingUriEncoder:
    """Quote what is not already quoted and escape every staged param."""

    name = "fixing"

    def encode(self, uri: Uri, params: Optional[Sequence[Param]]) -> Uri:
        path = requote_uri(uri.path) if uri.path else uri.path
        query = requote_uri(uri.query) if uri.query else None
        rendered = [self._encode_param(param) for param in params or ()]
        return replace(uri, path=path, query=_merge_query(query, rendered))

    @staticmethod
    def _encode_param(param: Param) -> str:
        name = quote(param.name, safe=_PARAM_SAFE)
        if param.value is None:
            return name
        return f"{name}={quote(param.value, safe=_PARAM_SAFE)}"


class RawUriEncoder:
    """Leave the URI untouched and append params verbatim."""

    name = "raw"

    def encode(self, uri: Uri, params: Optional[Sequence[Param]]) -> Uri:
        rendered = [param.render() for param in params or ()]
        return replace(uri, query=_merge_query(uri.query, rendered))


FIXING = FixingUriEncoder()
RAW = RawUriEncoder()


def uri_encoder(disable_url_encoding: bool) -> UriEncoder:
    return RAW if disable_url_encoding else FIXING


__all__ = [
    "DEFAULT_PORTS",
    "FIXING",
    "FixingUriEncoder",
    "InvalidUriError",
    "RAW",
    "RawUriEncoder",
    "SUPPORTED_SCHEMES",
    "UnsupportedSchemeError",
    "Uri",
    "UriEncoder",
    "uri_encoder",
    "validate_supported_scheme",
]
