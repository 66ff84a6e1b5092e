"""
Canonical tree: the normalized output of the classifier.

A CanonicalTree keeps one bucket per Category, each mapping an original key
to the category's native value. Keys are disjoint across buckets. flatten()
merges the buckets back into one codec-ready mapping:

    | category                     | flattened as                          |
    |------------------------------|---------------------------------------|
    | BOOL, INT, DOUBLE, STRING    | identity                              |
    | DATE                         | seconds since REFERENCE_EPOCH (float) |
    | DATA                         | base64 text                           |
    | CUSTOM                       | flatten(nested tree)                  |
    | *_ARRAY                      | element-wise rule of the scalar above |
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from .encoding import blob_to_text, timestamp_to_offset


class Category(Enum):
    """Semantic bucket of a normalized value (declaration order = flatten order)."""

    BOOL = "bool"
    INT = "int"
    DOUBLE = "double"
    DATE = "date"
    STRING = "string"
    DATA = "data"
    CUSTOM = "custom"
    BOOL_ARRAY = "boolArray"
    INT_ARRAY = "intArray"
    DOUBLE_ARRAY = "doubleArray"
    DATE_ARRAY = "dateArray"
    STRING_ARRAY = "stringArray"
    DATA_ARRAY = "dataArray"
    CUSTOM_ARRAY = "customArray"

    @property
    def is_array(self) -> bool:
        return self.name.endswith("_ARRAY")


def _identity(value: Any) -> Any:
    return value


def _flatten_tree(value: "CanonicalTree") -> Dict[str, Any]:
    return flatten(value)


_SCALAR_RULES: Dict[Category, Callable[[Any], Any]] = {
    Category.BOOL: _identity,
    Category.INT: _identity,
    Category.DOUBLE: _identity,
    Category.DATE: timestamp_to_offset,
    Category.STRING: _identity,
    Category.DATA: blob_to_text,
    Category.CUSTOM: _flatten_tree,
}

_ARRAY_ELEMENT_CATEGORY: Dict[Category, Category] = {
    Category.BOOL_ARRAY: Category.BOOL,
    Category.INT_ARRAY: Category.INT,
    Category.DOUBLE_ARRAY: Category.DOUBLE,
    Category.DATE_ARRAY: Category.DATE,
    Category.STRING_ARRAY: Category.STRING,
    Category.DATA_ARRAY: Category.DATA,
    Category.CUSTOM_ARRAY: Category.CUSTOM,
}


def element_category(category: Category) -> Category:
    """Return the scalar category of an array category (scalars map to themselves)."""
    return _ARRAY_ELEMENT_CATEGORY.get(category, category)


def encode_value(category: Category, value: Any) -> Any:
    """Apply the encoding rule of category to one bucket value."""
    rule = _SCALAR_RULES[element_category(category)]
    if category.is_array:
        return [rule(item) for item in value]
    return rule(value)


def _freeze(buckets: Optional[Mapping[Category, Mapping[str, Any]]]) -> Mapping[Category, Mapping[str, Any]]:
    buckets = buckets or {}
    frozen = {}
    for category in Category:
        entries = dict(buckets.get(category, {}))
        if category.is_array:
            entries = {k: tuple(v) for k, v in entries.items()}
        frozen[category] = MappingProxyType(entries)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class CanonicalTree:
    """
    Immutable record holding one bucket per Category.

    Array values are stored as tuples; bucket mappings are read-only views.
    Build through classify() or CanonicalTree.from_buckets().
    """
    buckets: Mapping[Category, Mapping[str, Any]] = field(default_factory=lambda: _freeze(None))

    @classmethod
    def from_buckets(cls, buckets: Mapping[Category, Mapping[str, Any]]) -> "CanonicalTree":
        """
        Build a tree from plain bucket dicts.

        Raises:
            ValueError: If a key appears in more than one bucket
        """
        seen = set()
        for entries in buckets.values():
            overlap = seen.intersection(entries)
            if overlap:
                raise ValueError(f"keys present in more than one bucket: {sorted(overlap)}")
            seen.update(entries)
        return cls(buckets=_freeze(buckets))

    def bucket(self, category: Category) -> Mapping[str, Any]:
        return self.buckets[category]

    def keys(self) -> Iterator[str]:
        """Iterate keys in flatten order."""
        for category in Category:
            yield from self.buckets[category]

    def category_of(self, key: str) -> Optional[Category]:
        for category in Category:
            if key in self.buckets[category]:
                return category
        return None

    def get(self, key: str, default: Any = None) -> Any:
        category = self.category_of(key)
        if category is None:
            return default
        return self.buckets[category][key]

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def __contains__(self, key: object) -> bool:
        return any(key in entries for entries in self.buckets.values())

    def __len__(self) -> int:
        return sum(len(entries) for entries in self.buckets.values())


def flatten(tree: CanonicalTree) -> Dict[str, Any]:
    """
    Derive the codec-ready mapping from a canonical tree.

    Pure and total. Output order is bucket declaration order, then insertion
    order inside each bucket.

    Args:
        tree: Canonical tree

    Returns:
        Dict of key -> bool | int | float | str | dict | list of those
    """
    flat: Dict[str, Any] = {}
    for category in Category:
        for key, value in tree.buckets[category].items():
            flat[key] = encode_value(category, value)
    return flat
