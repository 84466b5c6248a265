"""Request cookie value type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Cookie:
    name: str
    value: str
    wrap: bool = False
    domain: Optional[str] = None
    path: Optional[str] = None
    max_age: int = -1
    secure: bool = False
    http_only: bool = False

    def header_value(self) -> str:
        """Render as it appears inside a ``Cookie`` request header."""

        value = f'"{self.value}"' if self.wrap else self.value
        return f"{self.name}={value}"


def encode_cookie_header(cookies: list[Cookie] | tuple[Cookie, ...]) -> str:
    return "; ".join(cookie.header_value() for cookie in cookies)


__all__ = ["Cookie", "encode_cookie_header"]
