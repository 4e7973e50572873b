from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from .errors import (
    ConfigIdNotFound,
    ConfigTypeMismatch,
    ConfigTypeNotRegistered,
    DuplicateTypeRegistration,
    NotSingletonConfig,
)
from .identity import TypeTag, type_tag
from .table import SINGLE_CONFIG_ID, ConfigTable, normalize_config_id

T = TypeVar("T")

VERSION_MAX = 2**64 - 1

logger = logging.getLogger(__name__)


def normalize_version(version: int) -> int:
    if isinstance(version, bool):
        raise TypeError("version must be an integer, not bool")
    v = int(version)
    if v < 0 or v > VERSION_MAX:
        raise ValueError(f"version must be an unsigned 64-bit integer, got {v}")
    return v


def _check_instances(cls: type | TypeTag, table: ConfigTable[Any]) -> None:
    # Only class keys can be checked; bare tags carry no type to compare against.
    if not isinstance(cls, type):
        return
    for value in table.values():
        if not isinstance(value, cls):
            raise ConfigTypeMismatch(table.tag, value)


def _checked(cls: type[T] | TypeTag, tag: TypeTag, value: Any) -> T:
    if isinstance(cls, type) and not isinstance(value, cls):
        raise ConfigTypeMismatch(tag, value)
    return value


class ConfigRegistry:
    """Process-wide store of typed config tables plus the version they came from.

    One table per config type, each keyed by an integer config id. Singleton
    configs live at id 0 of their table.

    When a config class (rather than a bare type tag) is passed, configs are checked
    to be instances of it both when stored and when read; a mismatch raises
    `ConfigTypeMismatch`.

    Threading:
    - Writers (`add_*`, `replace_all`, `update_to`, `set_version`) are serialized.
    - Readers take no lock. Every write swaps the storage map in one assignment, so a
      reader sees either the state before a write or the state after it.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: dict[TypeTag, ConfigTable[Any]] = {}
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def set_version(self, version: int) -> None:
        v = normalize_version(version)
        with self._lock:
            self._version = v

    # ---- reads -------------------------------------------------------------------------

    def has(self, cls: type | TypeTag) -> bool:
        return type_tag(cls) in self._tables

    def __contains__(self, cls: object) -> bool:
        if not isinstance(cls, (type, str)):
            return False
        return self.has(cls)

    def __len__(self) -> int:
        return len(self._tables)

    def tags(self) -> list[TypeTag]:
        return list(self._tables)

    def get_table(self, cls: type[T] | TypeTag) -> Mapping[int, T]:
        tag = type_tag(cls)
        table = self._tables.get(tag)
        if table is None:
            raise ConfigTypeNotRegistered(tag)
        return table

    def try_get(self, cls: type[T] | TypeTag, config_id: int) -> tuple[bool, T | None]:
        """Return ``(found, config)``. Never raises.

        A missing type, a missing id, an id outside the int32 range, or a stored
        config that is not an instance of ``cls`` all give ``(False, None)``.
        """

        tag = type_tag(cls)
        table = self._tables.get(tag)
        if table is None:
            return False, None
        try:
            value = table[normalize_config_id(config_id)]
        except (KeyError, TypeError, ValueError):
            return False, None
        if isinstance(cls, type) and not isinstance(value, cls):
            return False, None
        return True, value

    def get(self, cls: type[T] | TypeTag, config_id: int | None = None) -> T:
        """Return the config of ``cls`` with ``config_id``.

        Without ``config_id`` the single config of ``cls`` is returned, which only
        works for tables created by `add_singleton` (or carrying an entry at id 0).

        An id that is not an int32 can never be stored, so it is reported as
        `ConfigIdNotFound` like any other absent id.
        """

        tag = type_tag(cls)
        table = self._tables.get(tag)

        if config_id is None:
            if table is None or SINGLE_CONFIG_ID not in table:
                raise NotSingletonConfig(tag)
            return _checked(cls, tag, table[SINGLE_CONFIG_ID])

        if table is None:
            raise ConfigTypeNotRegistered(tag)
        try:
            cid = normalize_config_id(config_id)
        except (TypeError, ValueError):
            raise ConfigIdNotFound(tag, config_id) from None
        try:
            value = table[cid]
        except KeyError:
            raise ConfigIdNotFound(tag, cid) from None
        return _checked(cls, tag, value)

    def get_all(self, cls: type[T] | TypeTag) -> list[T]:
        """Return every config of ``cls``; an unregistered type yields an empty list."""

        tag = type_tag(cls)
        table = self._tables.get(tag)
        if table is None:
            return []
        return [_checked(cls, tag, value) for value in table.values()]

    def export_all(self) -> Mapping[TypeTag, ConfigTable[Any]]:
        return MappingProxyType(dict(self._tables))

    # ---- writes ------------------------------------------------------------------------

    def add_singleton(self, config: T, cls: type[T] | None = None) -> None:
        """Register ``config`` as the single config of its type (or of ``cls``)."""

        key = cls if cls is not None else type(config)
        tag = type_tag(key)
        table = ConfigTable.single(config, tag=tag)
        _check_instances(key, table)
        self._add_locked_table(tag, table)

    def add_many(
        self,
        cls: type[T] | TypeTag,
        id_resolver: Callable[[T], int],
        configs: Iterable[T],
    ) -> None:
        """Register a table for ``cls`` keyed by ``id_resolver(config)``."""

        tag = type_tag(cls)
        if tag in self._tables:
            raise DuplicateTypeRegistration(tag)
        table = ConfigTable(((id_resolver(c), c) for c in configs), tag=tag)
        _check_instances(cls, table)
        self._add_locked_table(tag, table)

    def add_table(self, cls: type[T] | TypeTag, table: Mapping[int, T] | Iterable[tuple[int, T]]) -> None:
        tag = type_tag(cls)
        if tag in self._tables:
            raise DuplicateTypeRegistration(tag)
        staged = ConfigTable.coerce(table, tag=tag)
        _check_instances(cls, staged)
        self._add_locked_table(tag, staged)

    def _add_locked_table(self, tag: TypeTag, table: ConfigTable[Any]) -> None:
        with self._lock:
            if tag in self._tables:
                raise DuplicateTypeRegistration(tag)
            tables = dict(self._tables)
            tables[tag] = table
            self._tables = tables
        logger.debug("Registered config table %s (%d configs)", tag, len(table))

    def replace_all(self, configs: Mapping[type | TypeTag, Any] | None) -> None:
        """Overwrite the table of every type present in ``configs``.

        Types absent from ``configs`` keep their current table. Nothing is merged:
        an incoming table fully replaces the existing one. Every table is validated
        before any is swapped in.
        """

        if not configs:
            return
        staged = {}
        for cls, table in configs.items():
            tag = type_tag(cls)
            staged[tag] = ConfigTable.coerce(table, tag=tag)
            _check_instances(cls, staged[tag])

        with self._lock:
            tables = dict(self._tables)
            tables.update(staged)
            self._tables = tables
        logger.debug("Replaced %d config tables: %s", len(staged), ", ".join(sorted(staged)))

    def update_to(self, version: int, configs: Mapping[type | TypeTag, Any] | None) -> None:
        """Replace the given tables, then set the registry version (even if nothing changed)."""

        v = normalize_version(version)
        with self._lock:
            self.replace_all(configs)
            self._version = v
        logger.info("Config registry updated to version %d (%d tables)", v, len(configs or {}))


CONFIGS = ConfigRegistry()
