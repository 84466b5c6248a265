from __future__ import annotations

import pytest

from reqbuilder.headers import HeaderMap


def test_lookup_ignores_case_and_keeps_first_spelling() -> None:
    headers = HeaderMap()
    headers.add("Content-Type", "text/plain")
    headers.add("content-type", "charset=utf-8")

    assert headers["CONTENT-TYPE"] == ["text/plain", "charset=utf-8"]
    assert list(headers) == ["Content-Type"]
    assert headers.get_joined_value("content-type") == "text/plain, charset=utf-8"


def test_replace_with_keeps_position_of_name() -> None:
    headers = HeaderMap([("Accept", "a"), ("X-One", "1"), ("X-One", "2"), ("X-Two", "b")])

    headers.replace_with("x-one", "3")

    assert list(headers) == ["Accept", "x-one", "X-Two"]
    assert headers.get_first_value("X-ONE") == "3"
    assert headers["x-one"] == ["3"]


def test_replace_with_none_removes_header() -> None:
    headers = HeaderMap({"Authorization": "secret"})

    headers.replace_with("authorization", None)

    assert "Authorization" not in headers
    assert headers.get_first_value("Authorization") is None


def test_copy_is_independent() -> None:
    original = HeaderMap({"Accept": ["a", "b"]})
    duplicate = HeaderMap(original)

    duplicate.add("accept", "c")

    assert original["Accept"] == ["a", "b"]
    assert duplicate["Accept"] == ["a", "b", "c"]
    assert duplicate.pairs() == [("Accept", "a"), ("Accept", "b"), ("Accept", "c")]


def test_frozen_view_rejects_mutation() -> None:
    source = HeaderMap({"A": "1"})
    frozen = source.frozen()

    for mutate in (
        lambda: frozen.add("A", "2"),
        lambda: frozen.replace_with("B", "x"),
        lambda: frozen.delete("A"),
        lambda: frozen["A"].append("2"),
    ):
        with pytest.raises((TypeError, AttributeError)):
            mutate()

    source.add("A", "3")
    assert frozen["A"] == ("1",)
    assert frozen == HeaderMap({"A": "1"})
    assert frozen.copy().add("A", "2")["A"] == ["1", "2"]
