"""
Category encoding rules.

Stateless conversions used by the flattener (encode) and by the typed
decoder (decode):

- timestamps <-> seconds since REFERENCE_EPOCH (2001-01-01T00:00:00Z)
- blobs <-> standard base64 text
"""

import base64
import binascii
from datetime import datetime, timedelta, timezone

from .errors import ConversionError

REFERENCE_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)


def timestamp_to_offset(value: datetime) -> float:
    """
    Convert a datetime to seconds since REFERENCE_EPOCH.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - REFERENCE_EPOCH).total_seconds()


def offset_to_timestamp(offset: float) -> datetime:
    """Convert seconds since REFERENCE_EPOCH back to an aware UTC datetime."""
    return REFERENCE_EPOCH + timedelta(seconds=offset)


def blob_to_text(value: bytes) -> str:
    """Encode binary data as base64 text."""
    return base64.b64encode(bytes(value)).decode("ascii")


def text_to_blob(text: str) -> bytes:
    """
    Decode base64 text produced by blob_to_text.

    Raises:
        ConversionError: If text is not valid base64
    """
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise ConversionError(f"invalid base64 text: {e}") from e
