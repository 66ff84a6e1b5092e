"""
Tests for AES-GCM sealing.

Critical: sealed payloads only open with the key that sealed them.
"""

import os
import stat
import tempfile

import pytest

from recordstore.core.errors import ConversionError
from recordstore.sealing import NONCE_SIZE, TAG_SIZE, SealingKey, ensure_key


def test_seal_open_roundtrip():
    key = SealingKey.generate()
    sealed = key.seal(b'{"a":1}')

    assert len(sealed) == NONCE_SIZE + len(b'{"a":1}') + TAG_SIZE
    assert key.open(sealed) == b'{"a":1}'


def test_nonce_is_fresh_per_seal():
    key = SealingKey.generate()

    assert key.seal(b"same") != key.seal(b"same")


def test_wrong_key_fails():
    sealed = SealingKey.generate().seal(b"secret")

    with pytest.raises(ConversionError):
        SealingKey.generate().open(sealed)


def test_tampered_payload_fails():
    key = SealingKey.generate()
    sealed = bytearray(key.seal(b"secret"))
    sealed[NONCE_SIZE] ^= 0x01

    with pytest.raises(ConversionError):
        key.open(bytes(sealed))


def test_short_payload_fails():
    with pytest.raises(ConversionError):
        SealingKey.generate().open(b"short")


def test_associated_data_must_match():
    key = SealingKey.generate()
    sealed = key.seal(b"secret", associated_data=b"Settings")

    assert key.open(sealed, associated_data=b"Settings") == b"secret"
    with pytest.raises(ConversionError):
        key.open(sealed, associated_data=b"Other")


def test_key_size_is_enforced():
    with pytest.raises(ValueError):
        SealingKey(b"too short")


def test_save_and_load_key():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "keys", "record.key")
        key = SealingKey.generate()
        key.save_to_file(path)

        loaded = SealingKey.load_from_file(path)

        assert loaded.key == key.key
        assert loaded.key_id() == key.key_id()
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


def test_load_invalid_key_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "bad.key")
        with open(path, "w") as f:
            f.write("not base64 at all!")

        with pytest.raises(ValueError):
            SealingKey.load_from_file(path)


def test_load_missing_key_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(FileNotFoundError):
            SealingKey.load_from_file(os.path.join(tmpdir, "missing.key"))


def test_key_id_is_stable():
    key = SealingKey(b"\x00" * 32)

    assert len(key.key_id()) == 16
    assert key.key_id() == SealingKey(b"\x00" * 32).key_id()


def test_ensure_key_generates_once():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "record.key")

        assert ensure_key(path) == path
        first = SealingKey.load_from_file(path).key
        ensure_key(path)

        assert SealingKey.load_from_file(path).key == first
