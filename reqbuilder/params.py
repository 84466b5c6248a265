"""Name/value pairs used for query strings and form bodies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Param:
    """A single ``name=value`` pair; ``value`` is ``None`` for bare flags."""

    name: str
    value: Optional[str] = None

    def render(self) -> str:
        if self.value is None:
            return self.name
        return f"{self.name}={self.value}"


def params_from_mapping(mapping: Mapping[str, Iterable[str]] | None) -> list[Param] | None:
    """Flatten ``{name: [values]}`` into params, keeping mapping order."""

    if mapping is None:
        return None
    params: list[Param] = []
    for name, values in mapping.items():
        for value in values:
            params.append(Param(name, value))
    return params


def parse_query(query: str | None) -> list[Param]:
    if not query:
        return []
    params: list[Param] = []
    for chunk in query.split("&"):
        pos = chunk.find("=")
        if pos <= 0:
            params.append(Param(chunk, None))
        else:
            params.append(Param(chunk[:pos], chunk[pos + 1 :]))
    return params


__all__ = ["Param", "params_from_mapping", "parse_query"]
