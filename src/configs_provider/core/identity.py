from __future__ import annotations

import importlib
import threading
from typing import Any

from .errors import UnknownConfigType

TypeTag = str


def type_tag(cls: type | TypeTag) -> TypeTag:
    """Return the stable wire identity of a config type: ``"<module>:<qualname>"``.

    Strings are assumed to already be tags and are returned unchanged.
    """

    if isinstance(cls, str):
        return cls
    if not isinstance(cls, type):
        raise TypeError(f"Expected a config class or type tag, got {cls!r}")
    return f"{cls.__module__}:{cls.__qualname__}"


class TypeResolver:
    """Maps type tags back to classes.

    Explicitly registered classes win. Anything else is resolved by importing the
    tag's module and walking its qualname, so a receiver needs no schema beyond
    having the record classes importable.
    """

    def __init__(self, *types: type, allow_import: bool = True) -> None:
        self._lock = threading.RLock()
        self._known: dict[TypeTag, type] = {}
        self._allow_import = bool(allow_import)
        for cls in types:
            self.register(cls)

    def register(self, cls: type) -> type:
        tag = type_tag(cls)
        with self._lock:
            self._known[tag] = cls
        return cls

    def resolve(self, tag: TypeTag) -> type:
        with self._lock:
            known = self._known.get(tag)
        if known is not None:
            return known
        if not self._allow_import:
            raise UnknownConfigType(tag)

        module_name, sep, qualname = str(tag).partition(":")
        if not sep or not module_name or not qualname:
            raise UnknownConfigType(tag)
        try:
            obj: Any = importlib.import_module(module_name)
        except ImportError as e:
            raise UnknownConfigType(tag) from e
        for part in qualname.split("."):
            obj = getattr(obj, part, None)
            if obj is None:
                raise UnknownConfigType(tag)
        if not isinstance(obj, type):
            raise UnknownConfigType(tag)

        with self._lock:
            self._known[tag] = obj
        return obj


DEFAULT_RESOLVER = TypeResolver()
