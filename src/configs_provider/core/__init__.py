from __future__ import annotations

from .errors import (
    BackendError,
    ConfigIdNotFound,
    ConfigTypeMismatch,
    ConfigsError,
    ConfigTypeNotRegistered,
    DuplicateIdInBatch,
    DuplicateTypeRegistration,
    MalformedEnvelope,
    NotSingletonConfig,
    UnknownConfigType,
    UnserializableType,
)
from .identity import DEFAULT_RESOLVER, TypeResolver, TypeTag, type_tag
from .registry import CONFIGS, VERSION_MAX, ConfigRegistry, normalize_version
from .table import SINGLE_CONFIG_ID, ConfigTable, normalize_config_id

__all__ = [
    "ConfigsError",
    "DuplicateTypeRegistration",
    "DuplicateIdInBatch",
    "ConfigTypeNotRegistered",
    "UnknownConfigType",
    "ConfigIdNotFound",
    "ConfigTypeMismatch",
    "NotSingletonConfig",
    "UnserializableType",
    "MalformedEnvelope",
    "BackendError",
    "TypeTag",
    "TypeResolver",
    "DEFAULT_RESOLVER",
    "type_tag",
    "ConfigRegistry",
    "CONFIGS",
    "normalize_version",
    "VERSION_MAX",
    "ConfigTable",
    "SINGLE_CONFIG_ID",
    "normalize_config_id",
]
