"""
Canonical JSON codec.

The codec only understands booleans, numbers, strings, and nested
mappings/arrays of those. Everything handed to it must already be in
flattened form (see tree.flatten).
"""

import json
from typing import Any

from .errors import CodecDecodeError, CodecEncodeError, ConversionError


def canonicalize(obj: Any) -> Any:
    """
    Convert arbitrary nested dict/list to canonical form.

    Rules:
    - dict keys sorted alphabetically
    - tuples converted to lists
    - recursive normalization
    """
    if isinstance(obj, dict):
        return {k: canonicalize(obj[k]) for k in sorted(obj.keys())}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    return obj


def canonical_json_bytes(obj: Any) -> bytes:
    """
    Deterministic JSON bytes.

    Guarantees:
    - sort_keys=True
    - separators remove whitespace
    - ensure_ascii=False keeps UTF-8 stable
    - NaN and infinity are rejected (not valid JSON)

    Raises:
        CodecEncodeError: If obj holds a value JSON cannot represent
    """
    canon = canonicalize(obj)
    try:
        s = json.dumps(
            canon,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise CodecEncodeError(f"cannot encode value as JSON: {e}") from e
    return s.encode("utf-8")


def canonical_json_str(obj: Any) -> str:
    """
    Deterministic JSON string (for display or storage).

    Same guarantees as canonical_json_bytes but returns string.
    """
    return canonical_json_bytes(obj).decode("utf-8")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON number")


def json_loads(data: bytes) -> Any:
    """
    Decode JSON bytes.

    Raises:
        ConversionError: If data is not valid UTF-8
        CodecDecodeError: If data is not valid JSON
    """
    try:
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
    except UnicodeDecodeError as e:
        raise ConversionError(f"data is not valid UTF-8: {e}") from e
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise CodecDecodeError(f"data is not valid JSON: {e}") from e
