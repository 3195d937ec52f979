"""Small numeric, search and mapping helpers."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping


def max_int(x: int, y: int) -> int:
    return x if x > y else y


def decimal(value: float) -> float:
    """Round to two decimal places."""
    return float(f"{value:.2f}")


def array_search(target: str, items: Iterable[str]) -> bool:
    return any(target == item for item in items)


def md5_checksum(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


class Map(dict):
    """A string-keyed dict with set-style operations that return new maps."""

    def union(self, other: Mapping) -> "Map":
        """Keys of both maps; on conflict the value from ``self`` wins."""
        out = Map(other)
        out.update(self)
        return out

    def intersect(self, other: Mapping) -> "Map":
        """Keys present in both maps, with the values from ``self``."""
        return Map((key, value) for key, value in self.items() if key in other)

    def difference(self, other: Mapping) -> "Map":
        """Keys of ``self`` that are absent from ``other``."""
        return Map((key, value) for key, value in self.items() if key not in other)