from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, ValidationError

from ..codec.records import table_codec
from ..core.errors import DuplicateIdInBatch, MalformedEnvelope
from ..core.identity import DEFAULT_RESOLVER, TypeResolver, TypeTag
from ..core.registry import ConfigRegistry
from ..core.table import ConfigTable

T = TypeVar("T")


@dataclass(frozen=True)
class Pair(Generic[T]):
    key: int
    value: T


@dataclass
class PairConfigsContainer(Generic[T]):
    """Ordered (id, config) pairs as edited in an asset, plus a dictionary view.

    The list is what authoring tools edit. `configs_dictionary` is built once, on
    first access, and rejects repeated ids.
    """

    configs: list[Pair[T]] = field(default_factory=list)
    tag: TypeTag = "?"
    _dictionary: Mapping[int, T] | None = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[int, T]], *, tag: TypeTag = "?") -> "PairConfigsContainer[T]":
        return cls(configs=[Pair(int(k), v) for k, v in pairs], tag=tag)

    @property
    def configs_dictionary(self) -> Mapping[int, T]:
        if self._dictionary is None:
            out: dict[int, T] = {}
            for pair in self.configs:
                if pair.key in out:
                    raise DuplicateIdInBatch(self.tag, pair.key)
                out[pair.key] = pair.value
            self._dictionary = MappingProxyType(out)
        return self._dictionary

    def to_table(self) -> ConfigTable[T]:
        return ConfigTable(((p.key, p.value) for p in self.configs), tag=self.tag)


class AssetPair(BaseModel):
    key: int
    value: Any


class ConfigAsset(BaseModel):
    """On-disk asset: ``{"type": "<module>:<qualname>", "configs": [{"key": 1, "value": {...}}, ...]}``."""

    type: str = Field(min_length=1)
    configs: list[AssetPair] | None = None


def load_asset_document(doc: Any, *, resolver: TypeResolver | None = None) -> tuple[type, PairConfigsContainer[Any]]:
    """Decode an asset from parsed JSON or raw JSON text/bytes."""

    try:
        if isinstance(doc, (str, bytes, bytearray)):
            asset = ConfigAsset.model_validate_json(doc)
        else:
            asset = ConfigAsset.model_validate(doc)
    except ValidationError as e:
        raise MalformedEnvelope(f"Config asset is invalid: {e}") from e

    cls = (resolver or DEFAULT_RESOLVER).resolve(asset.type)
    codec = table_codec(cls)
    pairs = [Pair(item.key, codec.decode({"0": item.value})[0]) for item in asset.configs or []]
    return cls, PairConfigsContainer(configs=pairs, tag=asset.type)


def load_asset_file(path: str | Path, *, resolver: TypeResolver | None = None) -> tuple[type, PairConfigsContainer[Any]]:
    """Load a JSON config asset.

    Expected layout::

        {"type": "<module>:<qualname>", "configs": [{"key": 1, "value": {...}}, ...]}
    """

    return load_asset_document(Path(path).read_bytes(), resolver=resolver)


def add_asset_to_registry(
    registry: ConfigRegistry,
    path: str | Path,
    *,
    resolver: TypeResolver | None = None,
) -> type:
    """Load an asset file and register its table. Returns the config class."""

    cls, container = load_asset_file(path, resolver=resolver)
    registry.add_table(container.tag, container.to_table())
    return cls
