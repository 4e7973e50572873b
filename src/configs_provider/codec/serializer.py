from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

from ..core.errors import MalformedEnvelope, UnknownConfigType, UnserializableType
from ..core.identity import DEFAULT_RESOLVER, TypeResolver, TypeTag
from ..core.registry import VERSION_MAX, ConfigRegistry
from ..core.table import ConfigTable, normalize_config_id
from .envelope import ConfigEnvelope
from .exclusions import ExclusionSet, default_exclusions
from .records import table_codec

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="ConfigsAdder")

_VERSION_RE = re.compile(r"^\s*\+?(\d+)\s*$")


class ConfigsExporter(Protocol):
    def export_all(self) -> Mapping[TypeTag, Mapping[int, Any]]: ...


class ConfigsAdder(Protocol):
    def update_to(self, version: int, configs: Mapping[Any, Any] | None) -> None: ...


@dataclass(frozen=True)
class DecodedConfigs:
    """Result of decoding an envelope: the parsed version and the tables by type tag."""

    version: int
    tables: dict[TypeTag, ConfigTable[Any]] = field(default_factory=dict)
    version_label: str | None = None


def _parse_version(label: Any) -> int | None:
    if isinstance(label, bool) or label is None:
        return None
    if isinstance(label, int):
        value = label
    else:
        m = _VERSION_RE.match(str(label))
        if m is None:
            return None
        value = int(m.group(1))
    return value if 0 <= value <= VERSION_MAX else None


def parse_version_label(label: Any) -> int:
    """Parse a version label as an unsigned 64-bit integer.

    Anything that does not parse (including out-of-range numbers) yields 0.
    """

    value = _parse_version(label)
    return 0 if value is None else value


class ConfigsSerializer:
    """Converts registries to and from the versioned JSON envelope.

    Envelope layout::

        {"version": "42", "tables": {"<module>:<qualname>": {"<id>": <record>, ...}, ...}}

    Types in the exclusion set never appear under ``tables``. Records go through
    a pydantic schema built from their type, so enums are written by member name.
    """

    def __init__(
        self,
        exclusions: ExclusionSet | Iterable[type | TypeTag] | None = None,
        *,
        resolver: TypeResolver | None = None,
        indent: int | None = None,
    ) -> None:
        if exclusions is None:
            exclusions = default_exclusions()
        elif not isinstance(exclusions, ExclusionSet):
            exclusions = ExclusionSet.from_iterable(exclusions)
        self.exclusions = exclusions
        self.resolver = resolver if resolver is not None else DEFAULT_RESOLVER
        self.indent = indent

    # ---- encode ------------------------------------------------------------------------

    def _envelope(self, configs: ConfigsExporter, version: int | str) -> ConfigEnvelope:
        tables: dict[str, dict[str, Any]] = {}
        for tag, table in configs.export_all().items():
            if tag in self.exclusions:
                continue
            try:
                cls = self.resolver.resolve(tag)
            except UnknownConfigType as e:
                raise UnserializableType(tag, str(e)) from e
            tables[tag] = table_codec(cls).encode(table)
        return ConfigEnvelope(version=str(version), tables=tables)

    def to_document(self, configs: ConfigsExporter, version: int | str) -> dict[str, Any]:
        return self._envelope(configs, version).model_dump()

    def serialize(self, configs: ConfigsExporter, version: int | str) -> str:
        return self._envelope(configs, version).model_dump_json(indent=self.indent)

    # ---- decode ------------------------------------------------------------------------

    def _decode(self, envelope: ConfigEnvelope) -> DecodedConfigs:
        label = envelope.version
        version = _parse_version(label)
        if version is None:
            logger.warning("Unparsable config version label %r, treating as version 0", label)
            version = 0

        tables: dict[TypeTag, ConfigTable[Any]] = {}
        for tag, raw in (envelope.tables or {}).items():
            codec = table_codec(self.resolver.resolve(tag))
            # Ids are parsed here rather than by the codec so "1" and "01" still collide.
            tables[tag] = ConfigTable(
                ((_parse_id(tag, cid), codec.decode({"0": rec})[0]) for cid, rec in raw.items()),
                tag=tag,
            )

        return DecodedConfigs(
            version=version,
            tables=tables,
            version_label=None if label is None else str(label),
        )

    def from_document(self, doc: Any) -> DecodedConfigs:
        if not isinstance(doc, Mapping):
            raise MalformedEnvelope("Config envelope must be a JSON object")
        return self._decode(ConfigEnvelope.parse(dict(doc)))

    def deserialize(self, serialized: str | bytes) -> DecodedConfigs:
        return self._decode(ConfigEnvelope.parse(serialized))

    def deserialize_into(self, serialized: str | bytes, configs: R) -> R:
        """Decode ``serialized`` and apply it to ``configs`` via ``update_to``."""

        decoded = self.deserialize(serialized)
        configs.update_to(decoded.version, decoded.tables)
        return configs

    def deserialize_new(
        self,
        serialized: str | bytes,
        factory: Callable[[], R] = ConfigRegistry,  # type: ignore[assignment]
    ) -> R:
        """Decode ``serialized`` into a fresh registry built by ``factory``."""

        return self.deserialize_into(serialized, factory())


def _parse_id(tag: TypeTag, cid: str) -> int:
    try:
        return normalize_config_id(int(cid))
    except ValueError:
        raise MalformedEnvelope(f"Config table {tag} has an invalid id {cid!r}") from None
