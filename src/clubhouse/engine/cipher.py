"""AES-256-CBC field encryption for credentials stored at rest.

Serialized format (must stay bit-compatible with values already stored):

    <32 hex chars of IV>:<hex ciphertext>

The IV is 16 random bytes, regenerated on every call. Plaintext is PKCS7-padded.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from clubhouse.errors import (
    ConfigurationError,
    DecryptionFailure,
    EncryptionFailure,
    MalformedCredentialFormat,
)

logger = logging.getLogger("clubhouse")

KEY_SIZE = 32
IV_SIZE = 16
BLOCK_SIZE_BITS = algorithms.AES.block_size
_SEPARATOR = ":"
_HEX = re.compile(r"[0-9a-fA-F]+")


_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def decode_key(encoded: str) -> bytes:
    """Decode a base64 key and check it is exactly 32 bytes.

    Surrounding whitespace, the URL-safe alphabet and missing ``=`` padding
    are all accepted, since keys are often pasted from other tooling. Any
    other stray character is an error.
    """
    encoded = (encoded or "").strip()
    if not encoded:
        raise ConfigurationError("CLUBHOUSE_ENCRYPTION_KEY is required")
    encoded = encoded.translate(_URLSAFE_TO_STANDARD)
    encoded += "=" * (-len(encoded) % 4)
    try:
        key = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("CLUBHOUSE_ENCRYPTION_KEY is not valid base64") from exc
    if len(key) != KEY_SIZE:
        raise ConfigurationError(
            f"CLUBHOUSE_ENCRYPTION_KEY must decode to {KEY_SIZE} bytes, got {len(key)}"
        )
    return key


def generate_key() -> str:
    """Return a fresh base64-encoded AES-256 key."""
    return base64.b64encode(os.urandom(KEY_SIZE)).decode("ascii")


class FieldCipher:
    """Stateless encrypt/decrypt over one process-wide key.

    The key is validated once here, so a misconfigured deployment fails at
    startup instead of on the first credential request.
    """

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_SIZE:
            raise ConfigurationError(f"Encryption key must be {KEY_SIZE} bytes")
        self._algorithm = algorithms.AES(key)

    @classmethod
    def from_base64(cls, encoded: str) -> FieldCipher:
        return cls(decode_key(encoded))

    def encrypt(self, plaintext: str) -> str:
        iv = os.urandom(IV_SIZE)
        try:
            padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
            padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
            encryptor = Cipher(self._algorithm, modes.CBC(iv)).encryptor()
            ciphertext = encryptor.update(padded) + encryptor.finalize()
        except (AttributeError, TypeError, ValueError) as exc:
            logger.error("credential encryption failed: %s", type(exc).__name__)
            raise EncryptionFailure("Failed to encrypt data") from exc
        return iv.hex() + _SEPARATOR + ciphertext.hex()

    def decrypt(self, serialized: str) -> str:
        iv, ciphertext = self._parse(serialized)
        try:
            decryptor = Cipher(self._algorithm, modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as exc:
            # One failure type for wrong key, tampering and bad padding alike.
            raise DecryptionFailure("Failed to decrypt data") from exc

    @staticmethod
    def _parse(serialized: str) -> tuple[bytes, bytes]:
        if not isinstance(serialized, str):
            raise MalformedCredentialFormat("Invalid encrypted data format")
        parts = serialized.split(_SEPARATOR)
        if len(parts) != 2:
            raise MalformedCredentialFormat("Invalid encrypted data format")
        iv_hex, ciphertext_hex = parts
        if not (_HEX.fullmatch(iv_hex) and _HEX.fullmatch(ciphertext_hex)):
            raise MalformedCredentialFormat("Invalid encrypted data format")
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
        except ValueError as exc:
            # Odd-length hex
            raise MalformedCredentialFormat("Invalid encrypted data format") from exc
        if len(iv) != IV_SIZE:
            raise MalformedCredentialFormat("Invalid encrypted data format")
        if not ciphertext or len(ciphertext) % (BLOCK_SIZE_BITS // 8):
            raise MalformedCredentialFormat("Invalid encrypted data format")
        return iv, ciphertext
