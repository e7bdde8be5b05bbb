"""Attribute-value sets attached to experiments and files."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Union

RawValues = Union[str, int, float, Iterable[Union[str, int, float]], None]


def _normalize_values(raw: RawValues) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (str, int, float)):
        return (str(raw),)
    return tuple(str(v) for v in raw if v is not None)


class AttributeValueSet(Mapping):
    """Read-only mapping of attribute code to an ordered tuple of values.

    A code that is absent behaves exactly like a code with no values: both
    return an empty tuple from :meth:`get_values` and are not ``in`` the set.
    """

    def __init__(self, values: Mapping[str, RawValues] | None = None):
        self._values: dict[str, tuple[str, ...]] = {}
        for code, raw in (values or {}).items():
            normalized = _normalize_values(raw)
            if normalized:
                self._values[str(code)] = normalized

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple]) -> AttributeValueSet:
        """Build a set from ``(code, value)`` or ``(code, value, unit)`` items.

        Values sharing a code accumulate in insertion order.
        """
        grouped: dict[str, list[str]] = {}
        for pair in pairs:
            code, value = pair[0], pair[1]
            grouped.setdefault(str(code), []).append(str(value))
        return cls(grouped)

    def get_values(self, code: str) -> tuple[str, ...]:
        return self._values.get(code, ())

    def get_value(self, code: str) -> str | None:
        values = self._values.get(code)
        return values[0] if values else None

    def contains(self, code: str) -> bool:
        return code in self._values

    def __getitem__(self, code: str) -> tuple[str, ...]:
        return self._values[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"AttributeValueSet({self._values!r})"
