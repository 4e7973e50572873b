from __future__ import annotations

from .envelope import ConfigEnvelope
from .exclusions import DEFAULT_EXCLUSIONS, ExclusionSet, default_exclusions, server_excluded
from .records import TableCodec, decode_record, encode_record, table_codec
from .serializer import ConfigsSerializer, DecodedConfigs, parse_version_label

__all__ = [
    "ExclusionSet",
    "DEFAULT_EXCLUSIONS",
    "default_exclusions",
    "server_excluded",
    "ConfigEnvelope",
    "TableCodec",
    "table_codec",
    "encode_record",
    "decode_record",
    "ConfigsSerializer",
    "DecodedConfigs",
    "parse_version_label",
]
