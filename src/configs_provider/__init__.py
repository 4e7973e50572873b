from __future__ import annotations

from .codec import ConfigsSerializer, DecodedConfigs, ExclusionSet, server_excluded
from .core import (
    CONFIGS,
    SINGLE_CONFIG_ID,
    BackendError,
    ConfigIdNotFound,
    ConfigRegistry,
    ConfigsError,
    ConfigTable,
    ConfigTypeMismatch,
    ConfigTypeNotRegistered,
    DuplicateIdInBatch,
    DuplicateTypeRegistration,
    MalformedEnvelope,
    NotSingletonConfig,
    TypeResolver,
    UnknownConfigType,
    UnserializableType,
    type_tag,
)
from .io import PairConfigsContainer, add_asset_to_registry, load_asset_file
from .sdk import ConfigBackendService, ConfigSynchronizer, HttpConfigBackend, InMemoryConfigBackend

__all__ = [
    "CONFIGS",
    "SINGLE_CONFIG_ID",
    "ConfigRegistry",
    "ConfigTable",
    "TypeResolver",
    "type_tag",
    "ConfigsSerializer",
    "DecodedConfigs",
    "ExclusionSet",
    "server_excluded",
    "PairConfigsContainer",
    "load_asset_file",
    "add_asset_to_registry",
    "ConfigBackendService",
    "InMemoryConfigBackend",
    "HttpConfigBackend",
    "ConfigSynchronizer",
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
]
