"""
Dynamic values: the tagged union fed into the classifier.

to_dynamic() is the adapter at the Python boundary. It inspects a native
value once and returns a DynamicValue whose kind the classifier dispatches
on. Callers that already know the shape can build DynamicValue directly.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ValueKind(Enum):
    """Runtime shape of a dynamic value."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    TIMESTAMP = "timestamp"
    TEXT = "text"
    BLOB = "blob"
    ASSET = "asset"
    BOOLEAN_ARRAY = "boolean_array"
    INTEGER_ARRAY = "integer_array"
    FLOAT_ARRAY = "float_array"
    TIMESTAMP_ARRAY = "timestamp_array"
    TEXT_ARRAY = "text_array"
    BLOB_ARRAY = "blob_array"
    ASSET_ARRAY = "asset_array"
    MAPPING = "mapping"
    MAPPING_ARRAY = "mapping_array"
    EMPTY_ARRAY = "empty_array"
    UNTYPED_ARRAY = "untyped_array"
    ENUM = "enum"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class AssetReference:
    """
    Reference to binary content held outside the record.

    Fields:
        locator: Path or file:// URL understood by the asset resolver
    """
    locator: str


@dataclass(frozen=True)
class DynamicValue:
    """
    One untyped input value tagged with its shape.

    Fields:
        kind: Shape of the payload
        payload: Native value (bytes for BLOB, list for arrays,
                 mapping for MAPPING, Enum member or raw value for ENUM)
    """
    kind: ValueKind
    payload: Any = None


# Scalar kinds in classification precedence, with the array kind each maps to.
SCALAR_ARRAY_KINDS: Dict[ValueKind, ValueKind] = {
    ValueKind.BOOLEAN: ValueKind.BOOLEAN_ARRAY,
    ValueKind.INTEGER: ValueKind.INTEGER_ARRAY,
    ValueKind.FLOAT: ValueKind.FLOAT_ARRAY,
    ValueKind.TIMESTAMP: ValueKind.TIMESTAMP_ARRAY,
    ValueKind.TEXT: ValueKind.TEXT_ARRAY,
    ValueKind.BLOB: ValueKind.BLOB_ARRAY,
    ValueKind.ASSET: ValueKind.ASSET_ARRAY,
}


def _scalar_kind(value: Any) -> Optional[ValueKind]:
    # bool before int: bool is a subclass of int
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, datetime):
        return ValueKind.TIMESTAMP
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BLOB
    if isinstance(value, AssetReference):
        return ValueKind.ASSET
    return None


def _is_string_keyed(value: Any) -> bool:
    return isinstance(value, Mapping) and all(isinstance(k, str) for k in value)


def _array_kind(items: list) -> ValueKind:
    if not items:
        return ValueKind.EMPTY_ARRAY

    kinds = {_scalar_kind(item) for item in items}
    if len(kinds) == 1:
        kind = kinds.pop()
        if kind is not None:
            return SCALAR_ARRAY_KINDS[kind]
    elif kinds == {ValueKind.INTEGER, ValueKind.FLOAT}:
        return ValueKind.FLOAT_ARRAY

    if all(_is_string_keyed(item) for item in items):
        return ValueKind.MAPPING_ARRAY
    return ValueKind.UNTYPED_ARRAY


def _element(item: Any) -> Any:
    # tagged elements and enum members classify as their raw value, one level deep
    if isinstance(item, DynamicValue):
        item = item.payload
    if isinstance(item, Enum):
        item = item.value
    return item


def to_dynamic(value: Any) -> DynamicValue:
    """
    Tag a native Python value with its shape.

    Args:
        value: Any value (already-tagged DynamicValues are returned as is)

    Returns:
        DynamicValue
    """
    if isinstance(value, DynamicValue):
        return value
    if isinstance(value, Enum):
        return DynamicValue(ValueKind.ENUM, value)

    kind = _scalar_kind(value)
    if kind is ValueKind.BLOB:
        return DynamicValue(kind, bytes(value))
    if kind is not None:
        return DynamicValue(kind, value)

    if isinstance(value, (list, tuple)):
        items = [_element(item) for item in value]
        kind = _array_kind(items)
        if kind is ValueKind.BLOB_ARRAY:
            items = [bytes(item) for item in items]
        elif kind is ValueKind.FLOAT_ARRAY:
            items = [float(item) for item in items]
        return DynamicValue(kind, items)

    if _is_string_keyed(value):
        return DynamicValue(ValueKind.MAPPING, value)

    return DynamicValue(ValueKind.UNSUPPORTED, value)
