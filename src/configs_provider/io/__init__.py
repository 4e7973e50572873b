from __future__ import annotations

from .assets import (
    AssetPair,
    ConfigAsset,
    Pair,
    PairConfigsContainer,
    add_asset_to_registry,
    load_asset_document,
    load_asset_file,
)

__all__ = [
    "AssetPair",
    "ConfigAsset",
    "Pair",
    "PairConfigsContainer",
    "load_asset_document",
    "load_asset_file",
    "add_asset_to_registry",
]
