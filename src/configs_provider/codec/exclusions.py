from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TypeVar

from ..core.identity import TypeTag, type_tag

C = TypeVar("C", bound=type)


class ExclusionSet:
    """Config types that are kept out of the serialized envelope.

    Exclusion only affects serialization. Excluded types are stored and looked up
    in a registry like any other type.
    """

    __slots__ = ("_tags",)

    def __init__(self, *types: type | TypeTag) -> None:
        self._tags: frozenset[TypeTag] = frozenset(type_tag(t) for t in types)

    @classmethod
    def from_iterable(cls, types: Iterable[type | TypeTag]) -> "ExclusionSet":
        return cls(*types)

    def union(self, other: "ExclusionSet | Iterable[type | TypeTag]") -> "ExclusionSet":
        return ExclusionSet(*self._tags, *other)

    def __contains__(self, cls: object) -> bool:
        if not isinstance(cls, (type, str)):
            return False
        return type_tag(cls) in self._tags

    def __iter__(self) -> Iterator[TypeTag]:
        return iter(sorted(self._tags))

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"ExclusionSet({', '.join(sorted(self._tags))})"


DEFAULT_EXCLUSIONS: set[TypeTag] = set()


def server_excluded(cls: C) -> C:
    """Class decorator: keep ``cls`` out of envelopes built with the default exclusions."""

    DEFAULT_EXCLUSIONS.add(type_tag(cls))
    return cls


def default_exclusions() -> ExclusionSet:
    return ExclusionSet(*DEFAULT_EXCLUSIONS)
