from __future__ import annotations

import functools
from collections.abc import Mapping
from enum import Enum
from typing import Any

import numpy as np
from pydantic import ConfigDict, TypeAdapter
from pydantic.errors import PydanticUserError
from pydantic_core import (
    PydanticSerializationError,
    SchemaError,
    SchemaSerializer,
    SchemaValidator,
    ValidationError,
    core_schema,
)

from ..core.errors import MalformedEnvelope, UnserializableType
from ..core.identity import type_tag

# Record classes are plain dataclasses/NamedTuples; numpy and other foreign field
# types are allowed and then handled (or rejected) per field.
_ADAPTER_CONFIG = ConfigDict(arbitrary_types_allowed=True)


def _enum_by_name(cls: type[Enum], ref: str | None) -> core_schema.CoreSchema:
    def validate(value: Any) -> Enum:
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value in cls.__members__:
            return cls[value]
        raise ValueError(f"{value!r} is not a member name of {cls.__qualname__}")

    return core_schema.no_info_plain_validator_function(
        validate,
        ref=ref,
        serialization=core_schema.plain_serializer_function_ser_schema(lambda member: member.name),
    )


def _ndarray(ref: str | None) -> core_schema.CoreSchema:
    return core_schema.no_info_plain_validator_function(
        np.asarray,
        ref=ref,
        serialization=core_schema.plain_serializer_function_ser_schema(lambda arr: np.asarray(arr).tolist()),
    )


def _rewrite(schema: Any) -> Any:
    """Swap enum schemas for by-name ones and ndarray instance checks for list conversion."""

    if isinstance(schema, list):
        return [_rewrite(s) for s in schema]
    if not isinstance(schema, dict):
        return schema
    kind = schema.get("type")
    if kind == "enum":
        return _enum_by_name(schema["cls"], schema.get("ref"))
    cls = schema.get("cls")
    if kind == "is-instance" and isinstance(cls, type) and issubclass(cls, np.ndarray):
        return _ndarray(schema.get("ref"))
    return {k: _rewrite(v) for k, v in schema.items()}


class TableCodec:
    """Validates and dumps one config type's table (``dict[int, cls]``) with pydantic.

    Enum members travel by *name*; numpy arrays travel as nested lists.
    """

    def __init__(self, cls: type) -> None:
        self.cls = cls
        self.tag = type_tag(cls)
        try:
            adapter = TypeAdapter(dict[int, cls], config=_ADAPTER_CONFIG)  # type: ignore[valid-type]
            schema = _rewrite(dict(adapter.core_schema))
            self._validator = SchemaValidator(schema)
            self._serializer = SchemaSerializer(schema)
        except (PydanticUserError, NameError, SchemaError) as e:
            # NameError covers annotations that cannot be resolved from the class's module.
            raise UnserializableType(self.tag, str(e)) from e

    def encode(self, table: Mapping[int, Any]) -> dict[str, Any]:
        try:
            out = self._serializer.to_python(dict(table), mode="json", warnings="error")
        except PydanticSerializationError as e:
            raise UnserializableType(self.tag, str(e)) from e
        return {str(k): v for k, v in out.items()}

    def decode(self, raw: Mapping[str, Any]) -> dict[int, Any]:
        try:
            return self._validator.validate_python(dict(raw))
        except ValidationError as e:
            raise MalformedEnvelope(f"Config table {self.tag} is invalid: {e}") from e


@functools.lru_cache(maxsize=None)
def table_codec(cls: type) -> TableCodec:
    return TableCodec(cls)


def encode_record(cls: type, value: Any) -> Any:
    """Convert one config of ``cls`` into JSON-compatible data."""

    return table_codec(cls).encode({0: value})["0"]


def decode_record(cls: type, data: Any) -> Any:
    """Rebuild one config of ``cls`` from data produced by `encode_record`."""

    return table_codec(cls).decode({"0": data})[0]
