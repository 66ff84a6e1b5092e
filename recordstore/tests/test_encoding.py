"""
Tests for the timestamp and blob encoding rules.
"""

from datetime import datetime, timedelta, timezone

import pytest

from recordstore.core.encoding import (
    REFERENCE_EPOCH,
    blob_to_text,
    offset_to_timestamp,
    text_to_blob,
    timestamp_to_offset,
)
from recordstore.core.errors import ConversionError


def test_reference_epoch_is_offset_zero():
    assert timestamp_to_offset(REFERENCE_EPOCH) == 0.0
    assert timestamp_to_offset(datetime(2001, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1.0


def test_unix_epoch_is_negative():
    unix_epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)

    assert timestamp_to_offset(unix_epoch) == -978307200.0


def test_naive_timestamps_are_utc():
    naive = datetime(2024, 3, 1, 8, 0)
    aware = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)

    assert timestamp_to_offset(naive) == timestamp_to_offset(aware)


def test_other_timezones_are_normalized():
    plus_two = timezone(timedelta(hours=2))
    local = datetime(2024, 3, 1, 10, 0, tzinfo=plus_two)
    utc = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)

    assert timestamp_to_offset(local) == timestamp_to_offset(utc)


def test_offset_round_trip():
    ts = datetime(2023, 7, 14, 9, 26, 53, 500000, tzinfo=timezone.utc)
    back = offset_to_timestamp(timestamp_to_offset(ts))

    assert back == ts
    assert back.tzinfo is not None


def test_blob_text_is_standard_base64():
    assert blob_to_text(b"hello") == "aGVsbG8="
    assert blob_to_text(b"") == ""
    assert text_to_blob("aGVsbG8=") == b"hello"


def test_invalid_base64_is_rejected():
    with pytest.raises(ConversionError):
        text_to_blob("not base64!")


def test_non_ascii_base64_is_rejected():
    with pytest.raises(ConversionError):
        text_to_blob("é")
