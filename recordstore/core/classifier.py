"""
Value classifier: dynamic mapping -> CanonicalTree.

Each key/value pair goes through an ordered, first-match dispatch:

1. enum members are unwrapped to their raw value (one level only)
2. scalars: bool, int, float, datetime, str, bytes, asset reference
3. homogeneous arrays in the same precedence
4. nested mapping, then array of mappings (both recursive)
5. any other array -> empty string array placeholder (lossy)
6. anything else -> str(value) in the string bucket

Steps 5 and 6 emit a Diagnostic. classify() never raises.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from .tree import CanonicalTree, Category
from .values import AssetReference, DynamicValue, ValueKind, to_dynamic

logger = logging.getLogger(__name__)

AssetResolver = Callable[[AssetReference], Optional[bytes]]


@dataclass(frozen=True)
class Diagnostic:
    """
    Record of a lossy fallback taken during classification.

    Fields:
        key: Key whose value took the fallback path
        reason: "unsupported_array" or "unsupported_value"
        description: Textual description of the original value
    """
    key: str
    reason: str
    description: str


DiagnosticObserver = Callable[[Diagnostic], None]


def read_asset_file(reference: AssetReference) -> Optional[bytes]:
    """
    Default asset resolver: read the referenced local file.

    Accepts plain paths and file:// URLs. Returns None when the file cannot
    be read.
    """
    path = reference.locator
    if path.startswith("file://"):
        path = path[len("file://"):]
    try:
        with open(os.path.expanduser(path), "rb") as f:
            return f.read()
    except OSError:
        logger.debug("Asset %s could not be read", reference.locator)
        return None


def _ignore(diagnostic: Diagnostic) -> None:
    return None


_SCALAR_CATEGORIES: Dict[ValueKind, Category] = {
    ValueKind.BOOLEAN: Category.BOOL,
    ValueKind.INTEGER: Category.INT,
    ValueKind.FLOAT: Category.DOUBLE,
    ValueKind.TIMESTAMP: Category.DATE,
    ValueKind.TEXT: Category.STRING,
    ValueKind.BLOB: Category.DATA,
}

_ARRAY_CATEGORIES: Dict[ValueKind, Category] = {
    ValueKind.BOOLEAN_ARRAY: Category.BOOL_ARRAY,
    ValueKind.INTEGER_ARRAY: Category.INT_ARRAY,
    ValueKind.FLOAT_ARRAY: Category.DOUBLE_ARRAY,
    ValueKind.TIMESTAMP_ARRAY: Category.DATE_ARRAY,
    ValueKind.TEXT_ARRAY: Category.STRING_ARRAY,
    ValueKind.BLOB_ARRAY: Category.DATA_ARRAY,
}


class _Classifier:
    """Single classify() call: holds the injected collaborators and the buckets being filled."""

    def __init__(self, resolver: AssetResolver, observer: DiagnosticObserver) -> None:
        self.resolver = resolver
        self.observer = observer

    def build(self, mapping: Mapping[str, Any]) -> CanonicalTree:
        buckets: Dict[Category, Dict[str, Any]] = {category: {} for category in Category}
        for key, value in mapping.items():
            self._place(buckets, key, to_dynamic(value), unwrap=True)
        return CanonicalTree.from_buckets(buckets)

    def _place(self, buckets: Dict[Category, Dict[str, Any]], key: str, value: DynamicValue, unwrap: bool) -> None:
        kind = value.kind

        if kind is ValueKind.ENUM and unwrap:
            payload = value.payload
            raw = to_dynamic(payload.value if isinstance(payload, Enum) else payload)
            self._place(buckets, key, raw, unwrap=False)
            return

        if kind in _SCALAR_CATEGORIES:
            buckets[_SCALAR_CATEGORIES[kind]][key] = value.payload
            return

        if kind is ValueKind.ASSET:
            content = self.resolver(value.payload)
            if content is not None:
                buckets[Category.DATA][key] = bytes(content)
            else:
                logger.debug("Unresolved asset for key %s omitted", key)
            return

        if kind in _ARRAY_CATEGORIES:
            buckets[_ARRAY_CATEGORIES[kind]][key] = list(value.payload)
            return

        if kind is ValueKind.ASSET_ARRAY:
            resolved = [self.resolver(ref) for ref in value.payload]
            buckets[Category.DATA_ARRAY][key] = [bytes(c) for c in resolved if c is not None]
            return

        if kind is ValueKind.MAPPING:
            buckets[Category.CUSTOM][key] = self.build(value.payload)
            return

        if kind is ValueKind.MAPPING_ARRAY:
            buckets[Category.CUSTOM_ARRAY][key] = [self.build(item) for item in value.payload]
            return

        if kind in (ValueKind.EMPTY_ARRAY, ValueKind.UNTYPED_ARRAY):
            buckets[Category.STRING_ARRAY][key] = []
            self._report(key, "unsupported_array", value.payload)
            return

        # ValueKind.UNSUPPORTED, or an enum whose raw value is itself an enum
        original = value.payload
        buckets[Category.STRING][key] = str(original)
        self._report(key, "unsupported_value", original)

    def _report(self, key: str, reason: str, original: Any) -> None:
        diagnostic = Diagnostic(key=key, reason=reason, description=repr(original))
        logger.warning(
            "Unknown type in record: %s = %s -> stored as %s",
            key,
            diagnostic.description,
            "empty string array" if reason == "unsupported_array" else "string",
        )
        self.observer(diagnostic)


def classify(
    mapping: Mapping[str, Any],
    resolver: Optional[AssetResolver] = None,
    observer: Optional[DiagnosticObserver] = None,
) -> CanonicalTree:
    """
    Classify every value of a dynamic mapping into its canonical bucket.

    Args:
        mapping: String-keyed mapping of native values or DynamicValues
        resolver: Asset resolver (default: read_asset_file)
        observer: Called once per Diagnostic (default: no-op)

    Returns:
        CanonicalTree holding every key of mapping, except asset references
        that failed to resolve
    """
    classifier = _Classifier(resolver or read_asset_file, observer or _ignore)
    return classifier.build(mapping)


def classify_array(
    items: List[Any],
    key: str = "Array",
    resolver: Optional[AssetResolver] = None,
    observer: Optional[DiagnosticObserver] = None,
) -> CanonicalTree:
    """Classify a bare array by wrapping it under a synthetic key."""
    return classify({key: items}, resolver=resolver, observer=observer)
