from __future__ import annotations

import pytest

from reqbuilder.params import Param
from reqbuilder.uri import (
    FIXING,
    RAW,
    InvalidUriError,
    UnsupportedSchemeError,
    Uri,
    validate_supported_scheme,
)


def test_create_parses_components() -> None:
    uri = Uri.create("https://user:pw@Example.com:8443/a/b?x=1#frag")

    assert uri.scheme == "https"
    assert uri.user_info == "user:pw"
    assert uri.host == "example.com"
    assert uri.port == 8443
    assert uri.path == "/a/b"
    assert uri.query == "x=1"
    assert uri.to_url() == "https://user:pw@example.com:8443/a/b?x=1"
    assert uri.to_relative_url() == "/a/b?x=1"


def test_base_url_fills_default_port() -> None:
    assert Uri.create("http://example.com/x").base_url == "http://example.com:80"
    assert Uri.create("wss://example.com").base_url == "wss://example.com:443"


@pytest.mark.parametrize("url", ["", "example.com/path", "http:///nohost"])
def test_create_rejects_incomplete_urls(url: str) -> None:
    with pytest.raises(InvalidUriError):
        Uri.create(url)


def test_unsupported_scheme_rejected() -> None:
    with pytest.raises(UnsupportedSchemeError):
        validate_supported_scheme(Uri.create("ftp://example.com/file"))
    validate_supported_scheme(Uri.create("WS://example.com/socket"))


def test_fixing_encoder_appends_escaped_params_after_existing_query() -> None:
    uri = Uri.create("http://x/a%20b/c d?z=9")

    encoded = FIXING.encode(uri, [Param("q", "a b&c"), Param("flag")])

    assert encoded.path == "/a%20b/c%20d"
    assert encoded.query == "z=9&q=a%20b%26c&flag"


def test_raw_encoder_appends_verbatim() -> None:
    uri = Uri.create("http://x/?z=9")

    encoded = RAW.encode(uri, [Param("q", "a b")])

    assert encoded.to_url() == "http://x/?z=9&q=a b"


def test_encoders_leave_query_alone_without_params() -> None:
    uri = Uri.create("http://x/path?keep=1")

    assert FIXING.encode(uri, None).query == "keep=1"
    assert RAW.encode(uri, []).query == "keep=1"
