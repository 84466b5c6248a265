"""Fluent, mutable builder producing immutable :class:`Request` values.

Builders are not thread-safe. Confine each builder to one thread or guard it
externally; ``build`` itself performs no I/O.
"""

from __future__ import annotations

import ipaddress
import logging
import os
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional, Protocol, TypeVar, Union, runtime_checkable

from .body import BodyData, BodyGenerator, classify
from .charset import CharsetError, parse_charset
from .cookies import Cookie
from .headers import HeaderMap, HeaderSource
from .metrics import record_inference_fallback, record_request_built, record_signature_applied
from .multipart import Part
from .params import Param, params_from_mapping
from .proxy import ProxyServer
from .realm import Realm
from .request import Request
from .resolution import (
    DEFAULT_NAME_RESOLVER,
    DEFAULT_PARTITIONING,
    ConnectionPoolPartitioning,
    IPAddress,
    NameResolver,
)
from .uri import FIXING, Uri, UriEncoder, validate_supported_scheme
from .uri import uri_encoder as select_uri_encoder

LOGGER = logging.getLogger(__name__)

DEFAULT_REQUEST_URL = Uri.create("http://localhost")

B = TypeVar("B", bound="RequestBuilderBase")
_CONTENT_LENGTH = re.compile(r"[+-]?[0-9]+")
ParamSource = Union[Sequence[Param], Mapping[str, Iterable[str]], None]


@runtime_checkable
class SignatureCalculator(Protocol):
    def calculate_and_add_signature(self, request: Request, builder: "RequestBuilderBase") -> None:
        """Inspect the unsigned ``request`` and add signature data to ``builder``."""


@dataclass
class _RequestState:
    """Mutable mirror of :class:`Request` fields held by a builder."""

    method: str = "GET"
    uri: Optional[Uri] = None
    headers: HeaderMap = field(default_factory=HeaderMap)
    cookies: Optional[list[Cookie]] = None
    data: Optional[BodyData] = None
    body_generator: Optional[BodyGenerator] = None
    file: Optional[Path] = None
    form_params: Optional[list[Param]] = None
    parts: Optional[list[Part]] = None
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

    @classmethod
    def from_request(cls, prototype: Request) -> "_RequestState":
        return cls(
            method=prototype.method,
            uri=prototype.uri,
            headers=HeaderMap(prototype.headers),
            cookies=list(prototype.cookies),
            data=prototype.data,
            body_generator=prototype.body_generator,
            file=prototype.file,
            form_params=list(prototype.form_params) if prototype.form_params else None,
            parts=list(prototype.parts) if prototype.parts else None,
            inet_address=prototype.inet_address,
            local_address=prototype.local_address,
            virtual_host=prototype.virtual_host,
            content_length=prototype.content_length,
            proxy_server=prototype.proxy_server,
            realm=prototype.realm,
            follow_redirect=prototype.follow_redirect,
            request_timeout=prototype.request_timeout,
            range_offset=prototype.range_offset,
            body_charset=prototype.body_charset,
            connection_pool_partitioning=prototype.connection_pool_partitioning,
            name_resolver=prototype.name_resolver,
        )

    def copy(self) -> "_RequestState":
        return replace(
            self,
            headers=HeaderMap(self.headers),
            cookies=list(self.cookies) if self.cookies is not None else None,
            form_params=list(self.form_params) if self.form_params is not None else None,
            parts=list(self.parts) if self.parts is not None else None,
        )

    def freeze(self, uri: Uri, body_charset: Optional[str], content_length: int) -> Request:
        return Request(
            method=self.method,
            uri=uri,
            headers=self.headers.frozen(),
            cookies=tuple(self.cookies or ()),
            data=self.data,
            body_generator=self.body_generator,
            file=self.file,
            form_params=tuple(self.form_params or ()),
            parts=tuple(self.parts or ()),
            inet_address=self.inet_address,
            local_address=self.local_address,
            virtual_host=self.virtual_host,
            content_length=content_length,
            proxy_server=self.proxy_server,
            realm=self.realm,
            follow_redirect=self.follow_redirect,
            request_timeout=self.request_timeout,
            range_offset=self.range_offset,
            body_charset=body_charset,
            connection_pool_partitioning=self.connection_pool_partitioning,
            name_resolver=self.name_resolver,
        )


def _as_address(address: Union[IPAddress, str, None]) -> Optional[IPAddress]:
    if address is None or isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return address
    return ipaddress.ip_address(address)


class RequestBuilderBase:
    """Accumulates request fields and derives the final :class:`Request`.

    Every mutator returns the builder so calls can be chained.
    """

    def __init__(
        self,
        method: str = "GET",
        *,
        disable_url_encoding: bool = False,
        uri_encoder: Optional[UriEncoder] = None,
    ) -> None:
        self._state = _RequestState(method=method)
        self.uri_encoder: UriEncoder = uri_encoder or select_uri_encoder(disable_url_encoding)
        self.query_params: Optional[list[Param]] = None
        self.signature_calculator: Optional[SignatureCalculator] = None

    @classmethod
    def from_prototype(
        cls: type[B], prototype: Request, *, uri_encoder: Optional[UriEncoder] = None
    ) -> B:
        builder = cls(prototype.method, uri_encoder=uri_encoder or FIXING)
        builder._state = _RequestState.from_request(prototype)
        return builder

    # -- target -----------------------------------------------------------

    def set_url(self: B, url: str) -> B:
        return self.set_uri(Uri.create(url))

    def set_uri(self: B, uri: Uri) -> B:
        self._state.uri = uri
        return self

    def set_inet_address(self: B, address: Union[IPAddress, str, None]) -> B:
        self._state.inet_address = _as_address(address)
        return self

    def set_local_inet_address(self: B, address: Union[IPAddress, str, None]) -> B:
        self._state.local_address = _as_address(address)
        return self

    def set_virtual_host(self: B, virtual_host: Optional[str]) -> B:
        self._state.virtual_host = virtual_host
        return self

    def set_method(self: B, method: str) -> B:
        self._state.method = method
        return self

    # -- headers & cookies --------------------------------------------------

    def set_header(self: B, name: str, value: Optional[str]) -> B:
        self._state.headers.replace_with(name, value)
        return self

    def add_header(self: B, name: str, value: Optional[str]) -> B:
        if value is None:
            LOGGER.warning(
                "Value was None for header %s, set to \"\"",
                name,
                extra={"event": "builder.null_header", "header": name},
            )
            value = ""
        self._state.headers.add(name, value)
        return self

    def set_headers(self: B, headers: Optional[HeaderSource]) -> B:
        self._state.headers = HeaderMap(headers)
        return self

    def set_content_length(self: B, length: int) -> B:
        self._state.content_length = int(length)
        return self

    def _cookies(self) -> list[Cookie]:
        if self._state.cookies is None:
            self._state.cookies = []
        return self._state.cookies

    def set_cookies(self: B, cookies: Iterable[Cookie]) -> B:
        self._state.cookies = list(cookies)
        return self

    def add_cookie(self: B, cookie: Cookie) -> B:
        self._cookies().append(cookie)
        return self

    def add_or_replace_cookie(self: B, cookie: Cookie) -> B:
        cookies = self._cookies()
        for index, existing in enumerate(cookies):
            if existing.name == cookie.name:
                cookies[index] = cookie
                break
        else:
            cookies.append(cookie)
        return self

    def reset_cookies(self: B) -> B:
        if self._state.cookies is not None:
            self._state.cookies.clear()
        return self

    # -- query --------------------------------------------------------------

    def reset_query(self: B) -> B:
        self.query_params = None
        if self._state.uri is not None:
            self._state.uri = self._state.uri.with_new_query(None)
        return self

    def add_query_param(self: B, name: str, value: Optional[str]) -> B:
        if self.query_params is None:
            self.query_params = []
        self.query_params.append(Param(name, value))
        return self

    def add_query_params(self: B, params: list[Param]) -> B:
        if self.query_params is None:
            self.query_params = params
        else:
            self.query_params.extend(params)
        return self

    def set_query_params(self: B, params: ParamSource) -> B:
        """Replace staged params; any query already on the URI is dropped."""

        if isinstance(params, Mapping):
            params = params_from_mapping(params)
        uri = self._state.uri
        if uri is not None and uri.query:
            self._state.uri = uri.with_new_query(None)
        self.query_params = list(params) if params is not None else None
        return self

    # -- body ---------------------------------------------------------------

    def reset_form_params(self: B) -> B:
        self._state.form_params = None
        return self

    def reset_non_multipart_data(self: B) -> B:
        self._state.data = None
        self._state.body_generator = None
        self._state.content_length = -1
        return self

    def reset_multipart_data(self: B) -> B:
        self._state.parts = None
        return self

    def _reset_body(self) -> None:
        self.reset_form_params()
        self.reset_non_multipart_data()
        self.reset_multipart_data()

    def set_body(self: B, body: Any) -> B:
        """Set the request body from one of the supported payload types.

        ``bytes``, ``bytearray``/``memoryview``, ``str``, a list of byte
        chunks and readable streams replace every other body. A
        :class:`BodyGenerator` or a filesystem path is stored alongside
        whatever is already set, so callers must not mix them with other
        body setters. ``None`` clears every body except a file.
        """

        if body is None:
            self._reset_body()
            return self
        if isinstance(body, BodyGenerator):
            self._state.body_generator = body
            return self
        if isinstance(body, (Path, os.PathLike)):
            self._state.file = Path(body)
            return self
        data = classify(body)
        self._reset_body()
        self._state.data = data
        return self

    def add_form_param(self: B, name: str, value: Optional[str]) -> B:
        self.reset_non_multipart_data()
        self.reset_multipart_data()
        if self._state.form_params is None:
            self._state.form_params = []
        self._state.form_params.append(Param(name, value))
        return self

    def set_form_params(self: B, params: ParamSource) -> B:
        if isinstance(params, Mapping):
            params = params_from_mapping(params)
        self.reset_non_multipart_data()
        self.reset_multipart_data()
        self._state.form_params = list(params) if params is not None else None
        return self

    def add_body_part(self: B, part: Part) -> B:
        self.reset_form_params()
        self.reset_non_multipart_data()
        if self._state.parts is None:
            self._state.parts = []
        self._state.parts.append(part)
        return self

    def set_body_charset(self: B, charset: Optional[str]) -> B:
        self._state.body_charset = charset
        return self

    # -- transport hints ----------------------------------------------------

    def set_proxy_server(self: B, proxy_server: Optional[ProxyServer]) -> B:
        self._state.proxy_server = proxy_server
        return self

    def set_realm(self: B, realm: Optional[Realm]) -> B:
        self._state.realm = realm
        return self

    def set_follow_redirect(self: B, follow_redirect: bool) -> B:
        self._state.follow_redirect = bool(follow_redirect)
        return self

    def set_request_timeout(self: B, request_timeout: int) -> B:
        self._state.request_timeout = request_timeout
        return self

    def set_range_offset(self: B, range_offset: int) -> B:
        self._state.range_offset = range_offset
        return self

    def set_connection_pool_partitioning(self: B, partitioning: ConnectionPoolPartitioning) -> B:
        self._state.connection_pool_partitioning = partitioning
        return self

    def set_name_resolver(self: B, name_resolver: NameResolver) -> B:
        self._state.name_resolver = name_resolver
        return self

    def set_signature_calculator(self: B, calculator: Optional[SignatureCalculator]) -> B:
        self.signature_calculator = calculator
        return self

    # -- build pipeline -----------------------------------------------------

    def _sibling(self) -> "RequestBuilder":
        sibling = RequestBuilder(self._state.method, uri_encoder=self.uri_encoder)
        sibling._state = self._state.copy()
        sibling.query_params = list(self.query_params) if self.query_params is not None else None
        return sibling

    def _execute_signature_calculator(self) -> None:
        if self.signature_calculator is None:
            return
        unsigned = self._sibling()._derive()
        self.signature_calculator.calculate_and_add_signature(unsigned, self)
        record_signature_applied()

    def _compute_final_uri(self) -> Uri:
        uri = self._state.uri
        if uri is None:
            LOGGER.debug(
                "set_url hasn't been invoked. Using %s",
                DEFAULT_REQUEST_URL,
                extra={"event": "build.default_url"},
            )
            uri = DEFAULT_REQUEST_URL
        else:
            validate_supported_scheme(uri)
        return self.uri_encoder.encode(uri, self.query_params)

    def _compute_charset(self) -> Optional[str]:
        if self._state.body_charset is not None:
            return self._state.body_charset
        content_type = self._state.headers.get_first_value("Content-Type")
        if content_type is None:
            return None
        try:
            return parse_charset(content_type)
        except CharsetError:
            record_inference_fallback("body_charset", content_type)
            return None

    def _compute_content_length(self) -> int:
        length = self._state.content_length
        data = self._state.data
        if length >= 0 or (data is not None and data.is_stream):
            return length
        header = self._state.headers.get_first_value("Content-Length")
        if header is None:
            return length
        if _CONTENT_LENGTH.fullmatch(header) is None:
            record_inference_fallback("content_length", header)
            return length
        return int(header)

    def _derive(self) -> Request:
        self._execute_signature_calculator()
        uri = self._compute_final_uri()
        charset = self._compute_charset()
        length = self._compute_content_length()
        return self._state.freeze(uri, charset, length)

    def build(self) -> Request:
        """Run the derivation pipeline and snapshot the result.

        Derived values (final URI, charset, length) live on the returned
        request only, so building again from the same builder starts from the
        same inputs.
        """

        request = self._derive()
        record_request_built(request.method)
        LOGGER.debug(
            "Built %s %s",
            request.method,
            request.url,
            extra={"event": "build.complete", "body_kind": request.body_kind},
        )
        return request


class RequestBuilder(RequestBuilderBase):
    """General purpose builder; ``RequestBuilder("POST").set_url(...).build()``."""


__all__ = [
    "DEFAULT_REQUEST_URL",
    "RequestBuilder",
    "RequestBuilderBase",
    "SignatureCalculator",
]
