from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from ..core.errors import MalformedEnvelope


class ConfigEnvelope(BaseModel):
    """Wire shape of a serialized registry: ``{"version": "<label>", "tables": {tag: {id: record}}}``.

    ``version`` stays untyped; label parsing is lenient and happens in the serializer.
    """

    version: Any = None
    tables: dict[str, dict[str, Any]] | None = None

    @classmethod
    def parse(cls, data: Any) -> "ConfigEnvelope":
        try:
            if isinstance(data, (str, bytes, bytearray)):
                return cls.model_validate_json(data)
            return cls.model_validate(data)
        except ValidationError as e:
            raise MalformedEnvelope(f"Config envelope is invalid: {e}") from e
