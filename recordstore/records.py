"""
Record conversions.

Encode path (always through the normalization core):

    record -> native mapping -> classify -> flatten -> canonical JSON bytes

Decode path (structure-aware, driven by the destination type hints):

    bytes -> JSON -> decode_value(cls, ...) -> typed record

A record is a dataclass instance, an object with to_dict(), a string-keyed
mapping, or a list/tuple of those.
"""

import dataclasses
import logging
import types
from collections.abc import Mapping, Sequence
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .core.canonical import canonical_json_bytes, json_loads
from .core.classifier import AssetResolver, DiagnosticObserver, classify
from .core.encoding import offset_to_timestamp, text_to_blob
from .core.errors import CodecDecodeError, CodecEncodeError, ConversionError
from .core.tree import flatten
from .core.values import AssetReference, DynamicValue

logger = logging.getLogger(__name__)

T = TypeVar("T")

ARRAY_KEY = "Array"


def type_name_of(record_or_cls: Any) -> str:
    """
    Name used for locators and array wrapping.

    Classes give their own name, typing generics the name of their origin
    (List[Foo] -> "list"), instances the name of their class.
    """
    if isinstance(record_or_cls, type):
        return record_or_cls.__name__
    origin = get_origin(record_or_cls)
    if origin is not None:
        return getattr(origin, "__name__", str(origin))
    return type(record_or_cls).__name__


def _native(value: Any) -> Any:
    # Dataclass records become mappings; everything else is left for the classifier.
    if isinstance(value, (AssetReference, DynamicValue, Enum)):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        # None fields are left out, like absent optionals
        return {
            f.name: _native(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if getattr(value, f.name) is not None
        }
    if isinstance(value, Mapping):
        return {k: _native(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_native(v) for v in value]
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict) and not isinstance(value, type):
        return _native(to_dict())
    return value


def _as_mapping(record: Any) -> Dict[str, Any]:
    if isinstance(record, (bytes, bytearray)):
        # raw JSON data converts itself
        obj = json_loads(bytes(record))
        if isinstance(obj, list):
            return {ARRAY_KEY: obj}
        if isinstance(obj, dict):
            return obj
        raise CodecEncodeError("JSON data is neither an object nor an array")
    if isinstance(record, (list, tuple)):
        return {type_name_of(record): _native(record)}

    native = _native(record)
    if isinstance(native, dict) and all(isinstance(k, str) for k in native):
        return native

    logger.error("Cannot convert %s to a mapping", type_name_of(record))
    raise CodecEncodeError(f"cannot convert {type_name_of(record)} to a mapping")


def to_dict(
    record: Any,
    resolver: Optional[AssetResolver] = None,
    observer: Optional[DiagnosticObserver] = None,
) -> Dict[str, Any]:
    """
    Normalize a record into its flattened, JSON-ready mapping.

    Lists and tuples are wrapped under their type name ({"list": [...]}).

    Raises:
        CodecEncodeError: If record has no mapping form
    """
    tree = classify(_as_mapping(record), resolver=resolver, observer=observer)
    return flatten(tree)


def _normalize_array(items: Sequence, resolver: Optional[AssetResolver] = None, observer: Optional[DiagnosticObserver] = None) -> list:
    tree = classify({ARRAY_KEY: _native(list(items))}, resolver=resolver, observer=observer)
    return flatten(tree).get(ARRAY_KEY, [])


def to_list(record: Any, resolver: Optional[AssetResolver] = None, observer: Optional[DiagnosticObserver] = None) -> list:
    """
    Normalize a sequence record into its flattened, JSON-ready list.

    Raises:
        CodecEncodeError: If record is not a list or tuple
    """
    if not isinstance(record, (list, tuple)):
        logger.error("Cannot convert %s to an array", type_name_of(record))
        raise CodecEncodeError(f"cannot convert {type_name_of(record)} to an array")
    return _normalize_array(record, resolver=resolver, observer=observer)


def to_bytes(record: Any, resolver: Optional[AssetResolver] = None, observer: Optional[DiagnosticObserver] = None) -> bytes:
    """
    Serialize a record to canonical JSON bytes.

    Sequences serialize as a JSON array, everything else as a JSON object.
    """
    if isinstance(record, (list, tuple)):
        return array_to_bytes(record, resolver=resolver, observer=observer)
    return canonical_json_bytes(to_dict(record, resolver=resolver, observer=observer))


def to_text(record: Any, resolver: Optional[AssetResolver] = None, observer: Optional[DiagnosticObserver] = None) -> str:
    """Serialize a record to a canonical JSON string."""
    return to_bytes(record, resolver=resolver, observer=observer).decode("utf-8")


def dict_to_bytes(mapping: Mapping[str, Any], resolver: Optional[AssetResolver] = None, observer: Optional[DiagnosticObserver] = None) -> bytes:
    """Normalize a loose mapping and encode it."""
    return canonical_json_bytes(flatten(classify(_native(mapping), resolver=resolver, observer=observer)))


def array_to_bytes(items: Sequence, resolver: Optional[AssetResolver] = None, observer: Optional[DiagnosticObserver] = None) -> bytes:
    """Normalize a loose array (through the synthetic "Array" key) and encode only the array."""
    return canonical_json_bytes(_normalize_array(items, resolver=resolver, observer=observer))


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _type_label(tp: Any) -> str:
    return getattr(tp, "__name__", None) or str(tp)


def _mismatch(tp: Any, value: Any, path: str) -> CodecDecodeError:
    return CodecDecodeError(
        f"{path}: expected {_type_label(tp)}, got {type(value).__name__}"
    )


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is getattr(types, "UnionType", None)


def _is_optional(tp: Any) -> bool:
    return _is_union(get_origin(tp)) and type(None) in get_args(tp)


def _decode_union(tp: Any, value: Any, path: str) -> Any:
    args = get_args(tp)
    if value is None and type(None) in args:
        return None
    for arg in args:
        if arg is type(None):
            continue
        try:
            return decode_value(arg, value, path)
        except CodecDecodeError:
            continue
    raise _mismatch(tp, value, path)


def _decode_dataclass(cls: Type[T], value: Any, path: str) -> T:
    if not isinstance(value, dict):
        raise _mismatch(cls, value, path)
    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}

    kwargs = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        field_tp = hints.get(f.name, f.type)
        if f.name in value:
            kwargs[f.name] = decode_value(field_tp, value[f.name], f"{path}.{f.name}")
        elif f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        elif _is_optional(field_tp):
            kwargs[f.name] = None
        else:
            raise CodecDecodeError(f"{path}: missing required field '{f.name}'")
    return cls(**kwargs)


def _decode_sequence(tp: Any, origin: Any, value: Any, path: str) -> Any:
    if not isinstance(value, list):
        raise _mismatch(tp, value, path)
    args = get_args(tp)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(decode_value(args[0], v, f"{path}[{i}]") for i, v in enumerate(value))
        if args and len(args) != len(value):
            raise CodecDecodeError(f"{path}: expected {len(args)} items, got {len(value)}")
        if args:
            return tuple(decode_value(a, v, f"{path}[{i}]") for i, (a, v) in enumerate(zip(args, value)))
        return tuple(value)
    item_tp = args[0] if args else Any
    return [decode_value(item_tp, v, f"{path}[{i}]") for i, v in enumerate(value)]


def _decode_mapping(tp: Any, value: Any, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise _mismatch(tp, value, path)
    args = get_args(tp)
    value_tp = args[1] if len(args) == 2 else Any
    return {k: decode_value(value_tp, v, f"{path}.{k}") for k, v in value.items()}


def _decode_scalar(tp: Any, value: Any, path: str) -> Any:
    if tp is bool:
        if isinstance(value, bool):
            return value
        raise _mismatch(tp, value, path)
    if tp is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise _mismatch(tp, value, path)
    if tp is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise _mismatch(tp, value, path)
    if tp is datetime:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return offset_to_timestamp(value)
            except (OverflowError, ValueError) as e:
                raise CodecDecodeError(f"{path}: {value!r} is out of range for a date") from e
        raise _mismatch(tp, value, path)
    if tp is bytes:
        if not isinstance(value, str):
            raise _mismatch(tp, value, path)
        try:
            return text_to_blob(value)
        except ConversionError as e:
            raise CodecDecodeError(f"{path}: {e}") from e
    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(value)
        except ValueError as e:
            raise CodecDecodeError(f"{path}: {value!r} is not a valid {tp.__name__}") from e
    if isinstance(tp, type):
        if isinstance(value, tp):
            return value
        raise _mismatch(tp, value, path)
    raise CodecDecodeError(f"{path}: unsupported destination type {tp!r}")


def decode_value(tp: Any, value: Any, path: str = "$") -> Any:
    """
    Convert a decoded JSON value into an instance of tp.

    Dates are read from epoch-offset numbers, bytes from base64 text, enums
    from their raw value. Dataclasses are built field by field from their
    type hints; classes with a from_dict() classmethod build themselves.

    Args:
        tp: Destination type (class or typing generic)
        value: Decoded JSON value
        path: Location of value, used in error messages

    Raises:
        CodecDecodeError: If value does not match tp
    """
    if tp is Any or tp is object:
        return value
    if tp is None or tp is type(None):
        if value is None:
            return None
        raise _mismatch(type(None), value, path)

    origin = get_origin(tp)
    if _is_union(origin):
        return _decode_union(tp, value, path)
    if origin in (list, tuple, Sequence):
        return _decode_sequence(tp, origin, value, path)
    if origin in (dict, Mapping):
        return _decode_mapping(tp, value, path)

    from_dict = getattr(tp, "from_dict", None)
    if isinstance(tp, type) and callable(from_dict) and isinstance(value, dict):
        try:
            return from_dict(value)
        except (KeyError, TypeError, ValueError) as e:
            raise CodecDecodeError(f"{path}: {_type_label(tp)}.from_dict failed: {e}") from e
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return _decode_dataclass(tp, value, path)
    if tp in (list, tuple):
        return _decode_sequence(tp, tp, value, path)
    if tp is dict:
        return _decode_mapping(tp, value, path)
    return _decode_scalar(tp, value, path)


def from_bytes(cls: Type[T], data: bytes) -> T:
    """
    Decode canonical JSON bytes into cls.

    Raises:
        ConversionError: If data is not UTF-8
        CodecDecodeError: If data is not JSON or does not match cls
    """
    try:
        return decode_value(cls, json_loads(data))
    except (CodecDecodeError, ConversionError):
        logger.error("Cannot decode %d bytes as %s", len(data), _type_label(cls))
        raise


def from_text(cls: Type[T], text: str) -> T:
    """
    Decode a JSON string into cls.

    Raises:
        ConversionError: If text cannot be encoded as UTF-8
    """
    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError as e:
        logger.error("Cannot read text as UTF-8 for %s", _type_label(cls))
        raise ConversionError(f"text is not valid UTF-8: {e}") from e
    return from_bytes(cls, data)


def from_dict(cls: Type[T], mapping: Mapping[str, Any]) -> T:
    """
    Build cls from a loose mapping.

    When the mapping holds cls's type name with a list value, that list is
    the payload (the wrapped form produced by to_dict for sequences).
    """
    wrapped = mapping.get(type_name_of(cls))
    if isinstance(wrapped, (list, tuple)):
        return from_list(cls, wrapped)
    try:
        return decode_value(cls, to_dict(mapping))
    except CodecDecodeError:
        logger.error("Cannot convert mapping to %s", _type_label(cls))
        raise


def from_list(cls: Type[T], items: Sequence) -> T:
    """Build cls (a sequence type) from a loose list."""
    try:
        return decode_value(cls, _normalize_array(items))
    except CodecDecodeError:
        logger.error("Cannot convert array to %s", _type_label(cls))
        raise


def convert(data: bytes, cls: Type[T]) -> T:
    """Decode bytes into cls, data first."""
    return from_bytes(cls, data)
