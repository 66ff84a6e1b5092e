"""
AES-GCM sealing for stored records.

Sealed format (combined): nonce (12 bytes) || ciphertext || tag (16 bytes)

Key management:
- Dev mode: ~/.recordstore/keys/record_aesgcm
- Prod mode: RECORDSTORE_KEY_PATH (e.g. a mounted secret)
"""

import base64
import binascii
import hashlib
import os
from pathlib import Path
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .core.errors import ConversionError

NONCE_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32


class SealingKey:
    """
    AES-256-GCM key wrapper.

    Provides:
    - Key generation
    - Key loading from / saving to file
    - Sealing and opening in the combined format
    - Key identifier derivation
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ValueError(f"AES-GCM key must be {KEY_SIZE} bytes, got {len(key)}")
        self.key = bytes(key)
        self._aead = AESGCM(self.key)

    @classmethod
    def generate(cls) -> "SealingKey":
        """Generate new random 256-bit key."""
        return cls(AESGCM.generate_key(bit_length=KEY_SIZE * 8))

    @classmethod
    def load_from_file(cls, path: str) -> "SealingKey":
        """
        Load key from a base64 text file.

        Args:
            path: Path to key file

        Returns:
            SealingKey instance

        Raises:
            FileNotFoundError: If key file doesn't exist
            ValueError: If key format is invalid
        """
        with open(os.path.expanduser(path), "rb") as f:
            encoded = f.read().strip()

        try:
            raw = base64.b64decode(encoded, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Key file is not base64: {e}") from e

        return cls(raw)

    def save_to_file(self, path: str) -> None:
        """
        Save key as base64 text, readable by the owner only.

        Args:
            path: Path to save key
        """
        path = os.path.expanduser(path)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(base64.b64encode(self.key) + b"\n")

    def seal(self, data: bytes, associated_data: Optional[bytes] = None) -> bytes:
        """
        Encrypt and authenticate data.

        Args:
            data: Plaintext bytes
            associated_data: Optional authenticated, unencrypted context

        Returns:
            nonce || ciphertext || tag
        """
        nonce = os.urandom(NONCE_SIZE)
        return nonce + self._aead.encrypt(nonce, data, associated_data)

    def open(self, sealed: bytes, associated_data: Optional[bytes] = None) -> bytes:
        """
        Verify and decrypt a sealed payload.

        Raises:
            ConversionError: If the payload is truncated, tampered, or sealed with another key
        """
        if len(sealed) < NONCE_SIZE + TAG_SIZE:
            raise ConversionError("sealed payload is too short")

        nonce, ciphertext = sealed[:NONCE_SIZE], sealed[NONCE_SIZE:]
        try:
            return self._aead.decrypt(nonce, ciphertext, associated_data)
        except InvalidTag as e:
            raise ConversionError("sealed payload failed authentication") from e

    def key_id(self) -> str:
        """
        Get key identifier (SHA-256 hash of the raw key, first 16 chars).

        Returns:
            Hex string (16 characters)
        """
        return hashlib.sha256(self.key).hexdigest()[:16]


def get_default_key_path() -> Path:
    """
    Get default key path (~/.recordstore/keys/record_aesgcm).

    Returns:
        Path object
    """
    return Path.home() / ".recordstore" / "keys" / "record_aesgcm"


def ensure_key(key_path: Optional[str] = None) -> str:
    """
    Ensure a sealing key exists (generate if missing).

    Args:
        key_path: Optional custom key path (default: ~/.recordstore/keys/record_aesgcm)

    Returns:
        Path to the key file
    """
    if key_path is None:
        key_path = str(get_default_key_path())

    if not os.path.exists(os.path.expanduser(key_path)):
        SealingKey.generate().save_to_file(key_path)

    return key_path
