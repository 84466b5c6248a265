from __future__ import annotations

import base64
from pathlib import Path

import pytest
from nacl.signing import SigningKey

from reqbuilder import metrics
from reqbuilder.builder import RequestBuilder
from reqbuilder.signature import (
    KEY_ID_HEADER,
    Ed25519SignatureCalculator,
    SignatureError,
    load_signing_key,
    signature_base,
    verify_signature,
)


class _RecordingCalculator:
    def __init__(self) -> None:
        self.seen = []

    def calculate_and_add_signature(self, request, builder) -> None:
        self.seen.append(request)
        builder.add_header("X-Sig", "abc")
        builder.add_query_param("signed", "1")


def test_signature_header_only_on_signed_request() -> None:
    calculator = _RecordingCalculator()

    signed = (
        RequestBuilder()
        .set_url("http://x/")
        .add_query_param("a", "1")
        .set_signature_calculator(calculator)
        .build()
    )

    unsigned = calculator.seen[0]
    assert "X-Sig" not in unsigned.headers
    assert unsigned.url == "http://x/?a=1"
    assert signed.headers["X-Sig"] == ("abc",)
    assert signed.url == "http://x/?a=1&signed=1"


def test_unsigned_request_has_no_calculator_side_effects_on_builder_state() -> None:
    calculator = _RecordingCalculator()
    builder = RequestBuilder().set_url("http://x/").set_signature_calculator(calculator)

    builder.build()

    assert builder.signature_calculator is calculator
    assert len(calculator.seen) == 1


def test_ed25519_calculator_signs_verifiable_request(signing_key: SigningKey) -> None:
    before = metrics.sample_value("reqbuilder_signatures_total")
    calculator = Ed25519SignatureCalculator(signing_key, key_id="primary")

    request = (
        RequestBuilder("POST")
        .set_url("https://api.example.com/orders")
        .add_query_param("page", "2")
        .set_header("Content-Type", "application/json")
        .set_body(b'{"id": 1}')
        .set_signature_calculator(calculator)
        .build()
    )

    assert request.headers.get_first_value(KEY_ID_HEADER) == "primary"
    assert verify_signature(request, signing_key.verify_key)
    assert metrics.sample_value("reqbuilder_signatures_total") == before + 1


def test_signature_fails_after_tampering(signing_key: SigningKey) -> None:
    calculator = Ed25519SignatureCalculator(signing_key)
    signed = (
        RequestBuilder("POST")
        .set_url("https://api.example.com/orders")
        .set_body(b"original")
        .set_signature_calculator(calculator)
        .build()
    )

    tampered = RequestBuilder.from_prototype(signed).set_body(b"changed").build()

    assert verify_signature(signed, signing_key.verify_key)
    assert not verify_signature(tampered, signing_key.verify_key)


def test_signature_base_lists_sorted_allowed_headers() -> None:
    request = (
        RequestBuilder("get")
        .set_url("http://x/")
        .add_header("Host", "x")
        .add_header("Content-Type", "text/plain")
        .add_header("X-Ignored", "1")
        .build()
    )

    lines = signature_base(request).decode("utf-8").split("\n")

    assert lines[:4] == ["GET", "http://x/", "content-type:text/plain", "host:x"]
    assert len(lines) == 5


def test_load_signing_key_from_environment(signing_key: SigningKey) -> None:
    loaded = load_signing_key()

    assert loaded.verify_key.encode() == signing_key.verify_key.encode()


def test_load_signing_key_rejects_bad_material(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    bad = tmp_path / "short.key"
    bad.write_bytes(b"too-short")

    with pytest.raises(SignatureError):
        load_signing_key(bad)

    monkeypatch.delenv("REQBUILDER_SIGNING_KEY_PATH")
    with pytest.raises(SignatureError):
        load_signing_key()


def test_signature_header_cannot_be_signed(signing_key: SigningKey) -> None:
    with pytest.raises(SignatureError):
        Ed25519SignatureCalculator(signing_key, header_name="Date")


def test_invalid_base64_signature_rejected(signing_key: SigningKey) -> None:
    request = RequestBuilder().set_header("X-Signature", "***").build()

    with pytest.raises(SignatureError):
        verify_signature(request, signing_key.verify_key)

    valid_b64 = base64.b64encode(b"x" * 64).decode("ascii")
    forged = RequestBuilder().set_header("X-Signature", valid_b64).build()
    assert not verify_signature(forged, signing_key.verify_key)


def test_load_signing_key_rejects_empty_environment_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REQBUILDER_SIGNING_KEY_PATH", "")

    with pytest.raises(SignatureError, match="REQBUILDER_SIGNING_KEY_PATH"):
        load_signing_key()


def test_signed_text_body_with_non_text_charset_builds(signing_key: SigningKey) -> None:
    request = (
        RequestBuilder("POST")
        .set_url("http://x/")
        .set_header("Content-Type", "text/plain; charset=hex")
        .set_body("hi")
        .set_signature_calculator(Ed25519SignatureCalculator(signing_key))
        .build()
    )

    assert request.body_charset is None
    assert verify_signature(request, signing_key.verify_key)
