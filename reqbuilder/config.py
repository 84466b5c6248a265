"""Configuration helpers and .env loading for reqbuilder."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

DEFAULT_ENV_FILES: tuple[Path, ...] = (
    Path(".env"),
    Path("config/.env"),
)

TRUTHY = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def load_environment(*, extra_files: Iterable[Path] | None = None) -> dict[str, str]:
    """Load environment variables from .env files once per process."""

    candidates = list(DEFAULT_ENV_FILES)
    if extra_files:
        candidates = [*candidates, *extra_files]

    for path in candidates:
        try:
            if path.exists():
                load_dotenv(path, override=False)
        except OSError:
            continue

    load_dotenv(override=False)
    return dict(os.environ)


def require_setting(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f"Required environment variable '{name}' is not set")
    return value


def _flag(name: str) -> bool:
    return os.environ.get(name, "false").strip().lower() in TRUTHY


@dataclass(frozen=True)
class BuilderSettings:
    disable_url_encoding: bool = False
    signing_key_path: Optional[Path] = None
    signature_header: str = "X-Signature"

    @classmethod
    def from_env(cls) -> "BuilderSettings":
        key_path = os.environ.get("REQBUILDER_SIGNING_KEY_PATH")
        return cls(
            disable_url_encoding=_flag("REQBUILDER_DISABLE_URL_ENCODING"),
            signing_key_path=Path(key_path) if key_path else None,
            signature_header=os.environ.get("REQBUILDER_SIGNATURE_HEADER", "X-Signature"),
        )


__all__ = ["BuilderSettings", "DEFAULT_ENV_FILES", "load_environment", "require_setting"]
