"""Hand built requests over to the ``requests`` transport."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests
from requests.auth import AuthBase, HTTPBasicAuth, HTTPDigestAuth

from .body import BodyKind
from .cookies import encode_cookie_header
from .multipart import ByteArrayPart, FilePart, Part, StringPart
from .realm import AuthScheme
from .request import Request

LOGGER = logging.getLogger(__name__)


def _body_payload(request: Request) -> Any:
    data = request.data
    if data is not None:
        if data.kind is BodyKind.TEXT:
            return data.value.encode(request.body_charset or "utf-8")
        if data.kind is BodyKind.COMPOSITE_BYTES:
            return b"".join(bytes(chunk) for chunk in data.value)
        if data.kind is BodyKind.BYTE_BUFFER:
            return bytes(data.value)
        return data.value
    if request.body_generator is not None:
        return request.body_generator.create_body()
    if request.form_params:
        return [(param.name, param.value or "") for param in request.form_params]
    if request.file is not None and not request.parts:
        return request.file.read_bytes()
    return None


def _part_tuple(part: Part) -> tuple[str, tuple[Optional[str], bytes, Optional[str]]]:
    if isinstance(part, (StringPart, ByteArrayPart, FilePart)):
        payload = part.payload()
    else:
        raise TypeError(f"Unsupported multipart part: {type(part).__name__}")
    return part.name, (part.file_name, payload, part.content_type)


def _headers(request: Request) -> dict[str, str]:
    headers = {name: ", ".join(values) for name, values in request.headers.items()}
    lowered = {name.lower() for name in headers}
    if request.cookies and "cookie" not in lowered:
        headers["Cookie"] = encode_cookie_header(request.cookies)
    if request.virtual_host and "host" not in lowered:
        headers["Host"] = request.virtual_host
    if request.range_offset > 0 and "range" not in lowered:
        headers["Range"] = f"bytes={request.range_offset}-"
    return headers


def _auth(request: Request) -> Optional[AuthBase]:
    realm = request.realm
    if realm is None:
        return None
    if realm.scheme is AuthScheme.BASIC:
        return HTTPBasicAuth(realm.principal, realm.password)
    if realm.scheme is AuthScheme.DIGEST:
        return HTTPDigestAuth(realm.principal, realm.password)
    LOGGER.warning(
        "requests has no built-in %s authentication; realm ignored",
        realm.scheme.value,
        extra={"event": "adapter.realm_ignored", "scheme": realm.scheme.value},
    )
    return None


def to_requests(request: Request) -> requests.Request:
    """Translate ``request`` into an unprepared :class:`requests.Request`.

    BASIC and DIGEST realms become ``requests`` auth handlers; other schemes
    need a third-party handler and are dropped with a warning.
    """

    files = [_part_tuple(part) for part in request.parts] or None
    return requests.Request(
        method=request.method,
        url=request.url,
        headers=_headers(request),
        data=_body_payload(request),
        files=files,
        auth=_auth(request),
    )


def prepare(request: Request, session: Optional[requests.Session] = None) -> requests.PreparedRequest:
    outgoing = to_requests(request)
    if session is not None:
        return session.prepare_request(outgoing)
    return outgoing.prepare()


def _proxy_url(request: Request) -> Optional[str]:
    proxy = request.proxy_server
    if proxy is None or proxy.is_ignored_for_host(request.uri.host):
        return None
    port = proxy.secured_port if request.uri.is_secured else proxy.port
    credentials = ""
    if proxy.realm is not None:
        credentials = f"{quote(proxy.realm.principal, safe='')}:{quote(proxy.realm.password, safe='')}@"
    return f"{proxy.proxy_type.value}://{credentials}{proxy.host}:{port}"


def send_kwargs(request: Request) -> dict[str, Any]:
    """Keyword arguments for :meth:`requests.Session.send` derived from ``request``."""

    kwargs: dict[str, Any] = {}
    if request.request_timeout > 0:
        kwargs["timeout"] = request.request_timeout / 1000.0
    if request.follow_redirect is not None:
        kwargs["allow_redirects"] = request.follow_redirect
    proxy_url = _proxy_url(request)
    if proxy_url:
        kwargs["proxies"] = {"http": proxy_url, "https": proxy_url}
    LOGGER.debug(
        "Prepared transport arguments for %s",
        request.url,
        extra={"event": "adapter.send_kwargs", "options": sorted(kwargs)},
    )
    return kwargs


__all__ = ["prepare", "send_kwargs", "to_requests"]
