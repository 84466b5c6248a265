"""Charset extraction from ``Content-Type`` header values."""

from __future__ import annotations

import codecs
from typing import Optional


class CharsetError(ValueError):
    """Raised when a ``charset`` parameter names an unknown encoding."""


def parse_charset(content_type: str) -> Optional[str]:
    """Return the charset named in ``content_type`` or ``None`` when absent.

    Quotes around the value are tolerated (``charset="utf-8"``). The name is
    returned as written once Python confirms it is a text encoding; codecs
    such as ``hex`` or ``zlib`` are rejected.
    """

    for part in content_type.split(";"):
        part = part.strip()
        if not part.lower().startswith("charset="):
            continue
        value = part.split("=", 1)[1].replace('"', "").replace("'", "").strip()
        if not value:
            return None
        try:
            codecs.lookup(value)
            # str.encode refuses bytes-to-bytes codecs
            "".encode(value)
        except (LookupError, ValueError) as exc:
            raise CharsetError(f"Unknown charset '{value}'") from exc
        return value
    return None


__all__ = ["CharsetError", "parse_charset"]
