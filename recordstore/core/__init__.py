"""
Core normalization primitives.

This module provides the typed value-normalization engine:
- DynamicValue: tagged runtime shape of an input value
- classify: dynamic mapping -> CanonicalTree
- flatten: CanonicalTree -> codec-ready mapping
- Encoding: timestamp and blob rules
- Canonical: deterministic JSON codec
"""

from .values import AssetReference, DynamicValue, ValueKind, to_dynamic
from .tree import CanonicalTree, Category, flatten
from .classifier import Diagnostic, classify, classify_array, read_asset_file
from .encoding import (
    REFERENCE_EPOCH,
    blob_to_text,
    offset_to_timestamp,
    text_to_blob,
    timestamp_to_offset,
)
from .canonical import canonicalize, canonical_json_bytes, canonical_json_str, json_loads
from .errors import (
    CodecDecodeError,
    CodecEncodeError,
    ConversionError,
    InvalidLocatorError,
    RecordStoreError,
    ResourceNotFoundError,
    ResourceReadError,
    ResourceWriteError,
)

__all__ = [
    "AssetReference",
    "DynamicValue",
    "ValueKind",
    "to_dynamic",
    "CanonicalTree",
    "Category",
    "flatten",
    "Diagnostic",
    "classify",
    "classify_array",
    "read_asset_file",
    "REFERENCE_EPOCH",
    "blob_to_text",
    "offset_to_timestamp",
    "text_to_blob",
    "timestamp_to_offset",
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "json_loads",
    "CodecDecodeError",
    "CodecEncodeError",
    "ConversionError",
    "InvalidLocatorError",
    "RecordStoreError",
    "ResourceNotFoundError",
    "ResourceReadError",
    "ResourceWriteError",
]
