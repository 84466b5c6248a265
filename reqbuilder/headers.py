"""Case-insensitive, multi-valued header container."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Optional, Union

from requests.structures import CaseInsensitiveDict

HeaderSource = Union[
    "HeaderMap",
    Mapping[str, Union[str, Iterable[str]]],
    Iterable[tuple[str, str]],
]


class HeaderMap(Mapping[str, list[str]]):
    """Ordered mapping of header name to its list of values.

    Lookups ignore case. Iteration yields names in first-insertion order using
    the case they were first added with, or the case of the latest
    :meth:`replace_with` call for that name.
    """

    def __init__(self, source: Optional[HeaderSource] = None) -> None:
        self._store: CaseInsensitiveDict = CaseInsensitiveDict()
        if source is None:
            return
        if isinstance(source, HeaderMap):
            for name, values in source.items():
                self._store[name] = list(values)
        elif isinstance(source, Mapping):
            for name, values in source.items():
                if isinstance(values, str):
                    self.add(name, values)
                else:
                    self.add(name, *values)
        else:
            for name, value in source:
                self.add(name, value)

    def __getitem__(self, name: str) -> list[str]:
        return self._store[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"HeaderMap({dict(self.items())!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderMap):
            return dict(self._store.lower_items()) == dict(other._store.lower_items())
        return NotImplemented

    def add(self, name: str, *values: str) -> "HeaderMap":
        """Append values for ``name`` keeping the values already present."""

        if name in self._store:
            self._store[name].extend(values)
        else:
            self._store[name] = list(values)
        return self

    def replace_with(self, name: str, *values: Optional[str]) -> "HeaderMap":
        """Drop every value held for ``name`` and store ``values`` instead.

        A single ``None`` removes the header altogether.
        """

        if not values or values == (None,):
            self.delete(name)
            return self
        self._store[name] = [value for value in values if value is not None]
        return self

    def delete(self, name: str) -> "HeaderMap":
        self._store.pop(name, None)
        return self

    def get_first_value(self, name: str) -> Optional[str]:
        values = self._store.get(name)
        if not values:
            return None
        return values[0]

    def get_joined_value(self, name: str, separator: str = ", ") -> Optional[str]:
        values = self._store.get(name)
        if values is None:
            return None
        return separator.join(values)

    def copy(self) -> "HeaderMap":
        return HeaderMap(self)

    def frozen(self) -> "FrozenHeaderMap":
        """Read-only snapshot of the current headers."""

        view = FrozenHeaderMap()
        for name, values in self._store.items():
            view._store[name] = list(values)
        return view

    def pairs(self) -> list[tuple[str, str]]:
        """Flatten into ``(name, value)`` tuples in iteration order."""

        return [(name, value) for name, values in self.items() for value in values]


class FrozenHeaderMap(HeaderMap):
    """Headers attached to a built request; every mutator raises ``TypeError``."""

    def __getitem__(self, name: str) -> tuple[str, ...]:  # type: ignore[override]
        return tuple(self._store[name])

    def _read_only(self, *args, **kwargs) -> "HeaderMap":
        raise TypeError("Headers of a built request are read-only; copy() them first.")

    add = replace_with = delete = _read_only

    def copy(self) -> HeaderMap:
        return HeaderMap(self)

    def frozen(self) -> "FrozenHeaderMap":
        return self


__all__ = ["FrozenHeaderMap", "HeaderMap", "HeaderSource"]
