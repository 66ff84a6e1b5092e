"""
Tests for the value classifier.

Critical: every key lands in exactly one bucket, fallbacks are reported.
"""

import logging
import os
import tempfile
from datetime import datetime, timezone
from enum import Enum

from recordstore.core import (
    AssetReference,
    Category,
    DynamicValue,
    ValueKind,
    classify,
    classify_array,
    flatten,
)


class Level(Enum):
    LOW = 1
    HIGH = 3


class Mood(Enum):
    CALM = "calm"


class Nested(Enum):
    INNER = Level.HIGH


class Opaque:
    def __str__(self) -> str:
        return "<opaque>"


def test_scalars_land_in_their_buckets():
    """Each scalar kind must be classified into its own bucket."""
    ts = datetime(2024, 5, 17, 12, 30, tzinfo=timezone.utc)
    tree = classify({
        "flag": True,
        "count": 7,
        "ratio": 0.5,
        "when": ts,
        "name": "alpha",
        "blob": b"\x00\x01",
    })

    assert dict(tree.bucket(Category.BOOL)) == {"flag": True}
    assert dict(tree.bucket(Category.INT)) == {"count": 7}
    assert dict(tree.bucket(Category.DOUBLE)) == {"ratio": 0.5}
    assert dict(tree.bucket(Category.DATE)) == {"when": ts}
    assert dict(tree.bucket(Category.STRING)) == {"name": "alpha"}
    assert dict(tree.bucket(Category.DATA)) == {"blob": b"\x00\x01"}


def test_bool_is_not_an_integer():
    """bool subclasses int; it must still classify as boolean."""
    tree = classify({"a": False, "b": 0})

    assert tree.category_of("a") == Category.BOOL
    assert tree.category_of("b") == Category.INT


def test_bytearray_is_a_blob():
    tree = classify({"raw": bytearray(b"xyz")})

    assert tree.get("raw") == b"xyz"
    assert isinstance(tree.get("raw"), bytes)


def test_homogeneous_arrays():
    """Homogeneous arrays must land in the matching array bucket."""
    ts = datetime(2020, 1, 1, tzinfo=timezone.utc)
    tree = classify({
        "flags": [True, False],
        "counts": [1, 2, 3],
        "ratios": [0.25, 0.75],
        "stamps": [ts],
        "names": ("a", "b"),
        "blobs": [b"x", b"y"],
    })

    assert tree.category_of("flags") == Category.BOOL_ARRAY
    assert tree.category_of("counts") == Category.INT_ARRAY
    assert tree.category_of("ratios") == Category.DOUBLE_ARRAY
    assert tree.category_of("stamps") == Category.DATE_ARRAY
    assert tree.category_of("names") == Category.STRING_ARRAY
    assert tree.category_of("blobs") == Category.DATA_ARRAY
    assert tree.get("names") == ("a", "b")


def test_mixed_int_float_array_widens_to_float():
    tree = classify({"xs": [1, 2.5]})

    assert tree.category_of("xs") == Category.DOUBLE_ARRAY
    assert tree.get("xs") == (1.0, 2.5)


def test_nested_scenario():
    """{"outer": {"inner": 5}} must nest and flatten back exactly."""
    tree = classify({"outer": {"inner": 5}})

    assert tree.category_of("outer") == Category.CUSTOM
    inner = tree.bucket(Category.CUSTOM)["outer"]
    assert dict(inner.bucket(Category.INT)) == {"inner": 5}
    assert flatten(tree) == {"outer": {"inner": 5}}


def test_array_of_mappings_recurses():
    tree = classify({"points": [{"x": 1}, {"x": 2, "label": "b"}]})

    assert tree.category_of("points") == Category.CUSTOM_ARRAY
    points = tree.get("points")
    assert len(points) == 2
    assert dict(points[1].bucket(Category.STRING)) == {"label": "b"}
    assert flatten(tree) == {"points": [{"x": 1}, {"x": 2, "label": "b"}]}


def test_empty_array_scenario():
    """
    An empty array carries no element type: it is stored as an empty string array.

    This is the current placeholder choice, not a semantic requirement.
    """
    diagnostics = []
    tree = classify({"y": []}, observer=diagnostics.append)

    assert tree.category_of("y") == Category.STRING_ARRAY
    assert tree.get("y") == ()
    assert [d.reason for d in diagnostics] == ["unsupported_array"]


def test_mixed_array_falls_back_to_empty_string_array():
    diagnostics = []
    tree = classify({"mixed": [1, "a", None]}, observer=diagnostics.append)

    assert tree.category_of("mixed") == Category.STRING_ARRAY
    assert tree.get("mixed") == ()
    assert len(diagnostics) == 1


def test_unsupported_value_fallback_scenario():
    """Unsupported scalars become their text and emit exactly one diagnostic."""
    diagnostics = []
    tree = classify({"x": Opaque()}, observer=diagnostics.append)

    assert tree.category_of("x") == Category.STRING
    assert tree.get("x") == "<opaque>"
    assert len(diagnostics) == 1
    assert diagnostics[0].key == "x"
    assert diagnostics[0].reason == "unsupported_value"


def test_none_falls_back_to_text():
    diagnostics = []
    tree = classify({"nothing": None}, observer=diagnostics.append)

    assert tree.get("nothing") == "None"
    assert len(diagnostics) == 1


def test_fallback_is_logged(caplog):
    """Diagnostics are also logged as warnings."""
    with caplog.at_level(logging.WARNING, logger="recordstore.core.classifier"):
        classify({"x": Opaque(), "ok": 1})

    records = [r for r in caplog.records if r.name == "recordstore.core.classifier"]
    assert len(records) == 1
    assert "x" in records[0].getMessage()


def test_enum_scenario():
    """An enum member classifies exactly like its raw value."""
    with_enum = classify({"e": Level.HIGH})
    with_raw = classify({"e": 3})

    assert with_enum.category_of("e") == with_raw.category_of("e") == Category.INT
    assert flatten(with_enum) == flatten(with_raw) == {"e": 3}
    assert flatten(classify({"m": Mood.CALM})) == {"m": "calm"}


def test_enum_unwraps_only_one_level():
    diagnostics = []
    tree = classify({"n": Nested.INNER}, observer=diagnostics.append)

    assert tree.category_of("n") == Category.STRING
    assert tree.get("n") == str(Level.HIGH)
    assert len(diagnostics) == 1


def test_prebuilt_dynamic_values_are_accepted():
    tree = classify({
        "count": DynamicValue(ValueKind.INTEGER, 4),
        "names": DynamicValue(ValueKind.TEXT_ARRAY, ["a"]),
    })

    assert tree.get("count") == 4
    assert tree.get("names") == ("a",)


def test_asset_reference_resolves_from_file():
    """The default resolver reads the referenced file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "avatar.png")
        with open(path, "wb") as f:
            f.write(b"PNG")

        tree = classify({
            "avatar": AssetReference(path),
            "icon": AssetReference("file://" + path),
            "missing": AssetReference(os.path.join(tmpdir, "nope.png")),
        })

    assert tree.get("avatar") == b"PNG"
    assert tree.get("icon") == b"PNG"
    assert "missing" not in tree


def test_key_set_invariant_with_failing_resolver():
    """Unresolved asset references are the only keys allowed to disappear."""
    source = {"a": 1, "b": "x", "asset": AssetReference("anything"), "c": {"d": []}}
    tree = classify(source, resolver=lambda ref: None)

    assert set(tree.keys()) == set(source) - {"asset"}


def test_key_set_invariant_with_succeeding_resolver():
    source = {"a": 1, "b": "x", "asset": AssetReference("anything"), "c": {"d": []}}
    tree = classify(source, resolver=lambda ref: b"content")

    assert set(tree.keys()) == set(source)
    assert tree.category_of("asset") == Category.DATA
    assert tree.get("asset") == b"content"


def test_asset_array_drops_unresolved_elements():
    contents = {"one": b"1", "three": b"3"}
    refs = [AssetReference("one"), AssetReference("two"), AssetReference("three")]
    tree = classify({"assets": refs}, resolver=lambda ref: contents.get(ref.locator))

    assert tree.category_of("assets") == Category.DATA_ARRAY
    assert tree.get("assets") == (b"1", b"3")


def test_classify_array_wraps_under_synthetic_key():
    tree = classify_array([1, 2])

    assert flatten(tree) == {"Array": [1, 2]}


def test_empty_mapping_gives_empty_tree():
    tree = classify({})

    assert tree.is_empty
    assert flatten(tree) == {}


def test_tagged_enum_with_raw_payload():
    """An ENUM value may carry the raw value instead of the member."""
    tree = classify({"e": DynamicValue(ValueKind.ENUM, 3)})

    assert tree.category_of("e") == Category.INT
    assert flatten(tree) == {"e": 3}


def test_tagged_elements_inside_arrays():
    diagnostics = []
    tree = classify(
        {
            "xs": [DynamicValue(ValueKind.INTEGER, 1), 2],
            "levels": [DynamicValue(ValueKind.ENUM, Level.LOW)],
            "points": [DynamicValue(ValueKind.MAPPING, {"x": DynamicValue(ValueKind.FLOAT, 0.5)})],
        },
        observer=diagnostics.append,
    )

    assert flatten(tree) == {"xs": [1, 2], "levels": [1], "points": [{"x": 0.5}]}
    assert diagnostics == []
