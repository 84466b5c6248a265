"""Multipart part descriptors. Encoding them on the wire is left to the transport."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Part:
    name: str
    content_type: Optional[str] = None
    charset: Optional[str] = None
    content_id: Optional[str] = None
    transfer_encoding: Optional[str] = None

    @property
    def file_name(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class StringPart(Part):
    value: str = ""
    content_type: Optional[str] = "text/plain"
    charset: Optional[str] = "UTF-8"

    def payload(self) -> bytes:
        return self.value.encode(self.charset or "utf-8")


@dataclass(frozen=True)
class ByteArrayPart(Part):
    data: bytes = b""
    content_type: Optional[str] = "application/octet-stream"
    filename: Optional[str] = None

    @property
    def file_name(self) -> Optional[str]:
        return self.filename

    def payload(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class FilePart(Part):
    path: Optional[Path] = None
    content_type: Optional[str] = "application/octet-stream"
    filename: Optional[str] = None

    def __post_init__(self) -> None:
        if self.path is None:
            raise ValueError("FilePart requires a path.")
        object.__setattr__(self, "path", Path(self.path))

    @property
    def file_name(self) -> Optional[str]:
        return self.filename or self.path.name

    def payload(self) -> bytes:
        return self.path.read_bytes()


__all__ = ["ByteArrayPart", "FilePart", "Part", "StringPart"]
