from __future__ import annotations

import pytest

from reqbuilder import RequestBuilder, metrics
from reqbuilder.cookies import Cookie
from reqbuilder.realm import Realm


def _request():
    return (
        RequestBuilder("POST")
        .set_url("http://example.com/submit?page=2")
        .add_header("Accept", "text/html")
        .add_header("Accept", "application/json")
        .add_header("Authorization", "Bearer token")
        .add_cookie(Cookie("sid", "abc"))
        .add_form_param("name", "value")
        .set_realm(Realm("alice", "secret"))
        .build()
    )


def test_str_lists_url_method_headers_and_form_params() -> None:
    rendered = str(_request())

    assert rendered.split("\t") == [
        "http://example.com/submit?page=2",
        "POST",
        "headers:",
        "Accept:text/html, application/json",
        "Authorization:Bearer token",
        "formParams:",
        "name:value",
    ]


def test_as_dict_redacts_credentials_by_default() -> None:
    description = _request().as_dict()

    assert description["headers"]["Authorization"] == "[redacted]"
    assert description["headers"]["Accept"] == ["text/html", "application/json"]
    assert description["cookies"] == ["sid"]
    assert description["query_params"] == [["page", "2"]]
    assert description["form_params"] == [["name", "value"]]
    assert description["body_kind"] == "form_params"
    assert description["realm"] == {"principal": "alice", "scheme": "basic"}
    assert "secret" not in repr(description)


def test_as_dict_without_redaction_keeps_cookie_values() -> None:
    description = _request().as_dict(redact=False)

    assert description["headers"]["Authorization"] == ["Bearer token"]
    assert description["cookies"] == ["sid=abc"]


def test_metrics_payload_exposes_counters() -> None:
    RequestBuilder("OPTIONS").build()

    payload, content_type = metrics.metrics_payload()

    assert b'reqbuilder_requests_built_total{method="OPTIONS"}' in payload
    assert content_type.startswith("text/plain")


def test_built_request_headers_are_read_only() -> None:
    request = RequestBuilder().add_header("A", "1").build()

    with pytest.raises(TypeError):
        request.headers.add("A", "2")
    with pytest.raises(TypeError):
        request.headers.replace_with("B", "evil")

    assert request.headers["A"] == ("1",)
    assert "B" not in request.headers
