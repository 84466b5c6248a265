from __future__ import annotations

from pathlib import Path

import pytest

from reqbuilder.config import BuilderSettings, require_setting


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("REQBUILDER_DISABLE_URL_ENCODING", "true")
    monkeypatch.setenv("REQBUILDER_SIGNING_KEY_PATH", str(tmp_path / "k"))
    monkeypatch.setenv("REQBUILDER_SIGNATURE_HEADER", "X-Auth-Sig")

    settings = BuilderSettings.from_env()

    assert settings.disable_url_encoding is True
    assert settings.signing_key_path == tmp_path / "k"
    assert settings.signature_header == "X-Auth-Sig"


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REQBUILDER_SIGNING_KEY_PATH")

    settings = BuilderSettings.from_env()

    assert settings == BuilderSettings()


def test_require_setting(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REQBUILDER_TEST_VALUE", raising=False)
    with pytest.raises(RuntimeError):
        require_setting("REQBUILDER_TEST_VALUE")

    monkeypatch.setenv("REQBUILDER_TEST_VALUE", "x")
    assert require_setting("REQBUILDER_TEST_VALUE") == "x"
