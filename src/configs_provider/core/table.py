from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Generic, TypeVar

from .errors import DuplicateIdInBatch

T = TypeVar("T")

SINGLE_CONFIG_ID = 0

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def normalize_config_id(config_id: int) -> int:
    if isinstance(config_id, bool):
        raise TypeError("config ids must be integers, not bool")
    cid = int(config_id)
    if cid < _INT32_MIN or cid > _INT32_MAX:
        raise ValueError(f"config id {cid} does not fit a signed 32-bit integer")
    return cid


class ConfigTable(Mapping[int, T], Generic[T]):
    """Read-only mapping of config id -> record for a single config type.

    Ids are unique. Building a table from pairs that repeat an id raises
    `DuplicateIdInBatch` instead of keeping either value.
    """

    __slots__ = ("_tag", "_items")

    def __init__(self, pairs: Iterable[tuple[int, T]] = (), *, tag: str = "?") -> None:
        items: dict[int, T] = {}
        for config_id, value in pairs:
            cid = normalize_config_id(config_id)
            if cid in items:
                raise DuplicateIdInBatch(tag, cid)
            items[cid] = value
        self._tag = tag
        self._items = items

    @classmethod
    def single(cls, value: T, *, tag: str = "?") -> "ConfigTable[T]":
        return cls([(SINGLE_CONFIG_ID, value)], tag=tag)

    @classmethod
    def coerce(cls, table: "ConfigTable[T] | Mapping[int, T] | Iterable[tuple[int, T]]", *, tag: str) -> "ConfigTable[T]":
        if isinstance(table, ConfigTable):
            if table._tag == tag:
                return table
            return cls(table.items(), tag=tag)
        if isinstance(table, Mapping):
            return cls(table.items(), tag=tag)
        return cls(table, tag=tag)

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def is_singleton(self) -> bool:
        return SINGLE_CONFIG_ID in self._items

    def __getitem__(self, config_id: int) -> T:
        return self._items[config_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ConfigTable({self._tag}, {len(self._items)} configs)"
