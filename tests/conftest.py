import os
import sys
from pathlib import Path

import pytest

from nacl.signing import SigningKey

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.delenv("REQBUILDER_DISABLE_URL_ENCODING", raising=False)
    monkeypatch.delenv("REQBUILDER_SIGNATURE_HEADER", raising=False)
    seed = os.urandom(32)
    key_path = tmp_path / "request_signing.key"
    key_path.write_bytes(seed)
    monkeypatch.setenv("REQBUILDER_SIGNING_KEY_PATH", str(key_path))
    yield


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey(Path(os.environ["REQBUILDER_SIGNING_KEY_PATH"]).read_bytes())
