"""Request body representations."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any, Protocol, Union, runtime_checkable


class BodyKind(Enum):
    BYTES = "bytes"
    COMPOSITE_BYTES = "composite_bytes"
    TEXT = "text"
    BYTE_BUFFER = "byte_buffer"
    STREAM = "stream"


@dataclass(frozen=True)
class BodyData:
    """One of the exclusive in-memory or streamed body payloads."""

    kind: BodyKind
    value: Any

    @property
    def is_stream(self) -> bool:
        return self.kind is BodyKind.STREAM


ByteBuffer = Union[bytearray, memoryview]


@runtime_checkable
class BodyGenerator(Protocol):
    """Produces body chunks on demand for the transport."""

    def create_body(self) -> Iterator[bytes]:
        ...


class ByteArrayBodyGenerator:
    def __init__(self, data: bytes) -> None:
        self.data = data

    def create_body(self) -> Iterator[bytes]:
        yield self.data

    @property
    def content_length(self) -> int:
        return len(self.data)


class IterableBodyGenerator:
    """Wrap an iterable of chunks; ``str`` chunks are UTF-8 encoded."""

    def __init__(self, chunks: Iterable[bytes | str]) -> None:
        self.chunks = chunks

    def create_body(self) -> Iterator[bytes]:
        for chunk in self.chunks:
            yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


def is_stream(value: object) -> bool:
    return callable(getattr(value, "read", None))


def classify(value: object) -> BodyData:
    """Tag a non-additive body payload with its kind."""

    if isinstance(value, bytes):
        return BodyData(BodyKind.BYTES, value)
    if isinstance(value, (bytearray, memoryview)):
        return BodyData(BodyKind.BYTE_BUFFER, value)
    if isinstance(value, str):
        return BodyData(BodyKind.TEXT, value)
    if isinstance(value, (list, tuple)):
        if not all(isinstance(chunk, (bytes, bytearray)) for chunk in value):
            raise TypeError("Composite bodies must be a sequence of byte chunks.")
        return BodyData(BodyKind.COMPOSITE_BYTES, list(value))
    if is_stream(value):
        return BodyData(BodyKind.STREAM, value)
    raise TypeError(f"Unsupported body type: {type(value).__name__}")


StreamBody = IO[bytes]

__all__ = [
    "BodyData",
    "BodyGenerator",
    "BodyKind",
    "ByteArrayBodyGenerator",
    "ByteBuffer",
    "IterableBodyGenerator",
    "StreamBody",
    "classify",
    "is_stream",
]
