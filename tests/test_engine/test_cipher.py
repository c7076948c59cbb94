"""Tests for AES-256-CBC field encryption."""

import base64
import os

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from clubhouse.engine.cipher import FieldCipher, decode_key, generate_key
from clubhouse.errors import (
    ConfigurationError,
    DecryptionFailure,
    EncryptionFailure,
    MalformedCredentialFormat,
)


class TestKeyConfiguration:
    def test_missing_key_rejected(self):
        with pytest.raises(ConfigurationError):
            FieldCipher.from_base64("")

    def test_short_key_rejected(self):
        short = base64.b64encode(b"a" * 16).decode()
        with pytest.raises(ConfigurationError, match="32 bytes"):
            FieldCipher.from_base64(short)

    def test_long_key_rejected(self):
        long = base64.b64encode(b"a" * 48).decode()
        with pytest.raises(ConfigurationError):
            decode_key(long)

    def test_non_base64_rejected(self):
        with pytest.raises(ConfigurationError, match="base64"):
            FieldCipher.from_base64("not base64 at all!!")

    def test_urlsafe_alphabet_accepted(self):
        raw = b"\xfb\xff\xbf" * 10 + b"\xfb\xff"
        encoded = base64.urlsafe_b64encode(raw).decode()
        assert "-" in encoded and "_" in encoded
        assert decode_key(encoded) == raw

    def test_surrounding_whitespace_and_missing_padding_accepted(self):
        raw = b"k" * 32
        encoded = base64.b64encode(raw).decode().rstrip("=")
        assert decode_key(f"  {encoded}\n") == raw

    def test_embedded_garbage_still_rejected(self):
        encoded = base64.b64encode(b"k" * 32).decode()
        with pytest.raises(ConfigurationError, match="base64"):
            decode_key(encoded[:10] + "*" + encoded[10:])

    def test_raw_key_length_checked(self):
        with pytest.raises(ConfigurationError):
            FieldCipher(b"too-short")

    def test_generated_key_is_usable(self):
        key = generate_key()
        assert len(base64.b64decode(key)) == 32
        assert FieldCipher.from_base64(key).decrypt(FieldCipher.from_base64(key).encrypt("x")) == "x"


class TestEncrypt:
    def test_round_trip(self, cipher):
        assert cipher.decrypt(cipher.encrypt("sk-test123")) == "sk-test123"

    @pytest.mark.parametrize(
        "plaintext",
        ["", "a", "exactly-16-bytes", "ünïcødé ✓ 🔑", "x" * 1000],
    )
    def test_round_trip_edge_lengths(self, cipher, plaintext):
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_format_is_iv_colon_ciphertext(self, cipher):
        serialized = cipher.encrypt("hello")
        assert serialized.count(":") == 1
        iv_hex, ct_hex = serialized.split(":")
        assert len(bytes.fromhex(iv_hex)) == 16
        assert len(bytes.fromhex(ct_hex)) % 16 == 0
        assert serialized == serialized.lower()

    def test_fresh_iv_every_call(self, cipher):
        first = cipher.encrypt("same plaintext")
        second = cipher.encrypt("same plaintext")
        assert first != second
        assert first.split(":")[0] != second.split(":")[0]
        assert cipher.decrypt(first) == cipher.decrypt(second) == "same plaintext"

    def test_non_string_raises_encryption_failure(self, cipher):
        with pytest.raises(EncryptionFailure):
            cipher.encrypt(None)  # type: ignore[arg-type]


class TestDecrypt:
    def test_reads_values_written_by_other_implementations(self):
        """Any standard AES-256-CBC/PKCS7 producer with the same layout must decrypt."""
        key = os.urandom(32)
        iv = os.urandom(16)
        padder = padding.PKCS7(128).padder()
        padded = padder.update(b"sk-legacy") + padder.finalize()
        enc = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ct = enc.update(padded) + enc.finalize()
        stored = iv.hex() + ":" + ct.hex()

        cipher = FieldCipher(key)
        assert cipher.decrypt(stored) == "sk-legacy"
        assert cipher.decrypt(stored.upper()) == "sk-legacy"

    @pytest.mark.parametrize(
        "bad",
        [
            "not-a-valid-format",
            "",
            "abc",
            "a:b:c",
            "zz" * 16 + ":" + "00" * 16,
            "00" * 15 + ":" + "00" * 16,
            "00" * 16 + ":",
            "00" * 16 + ":" + "00" * 15,
            "00" * 16 + ":" + "0" * 33,
            "00" * 16 + ": " + "00" * 16,
        ],
    )
    def test_malformed_input(self, cipher, bad):
        with pytest.raises(MalformedCredentialFormat):
            cipher.decrypt(bad)

    def test_wrong_key(self, cipher):
        other = FieldCipher(b"z" * 32)
        with pytest.raises(DecryptionFailure):
            other.decrypt(cipher.encrypt("secret value that spans blocks"))

    def test_tampered_ciphertext(self, cipher):
        iv_hex, ct_hex = cipher.encrypt("tamper me").split(":")
        ct = bytearray(bytes.fromhex(ct_hex))
        ct[-1] ^= 0xFF
        with pytest.raises(DecryptionFailure):
            cipher.decrypt(iv_hex + ":" + ct.hex())

    def test_failure_message_is_generic(self, cipher):
        other = FieldCipher(b"z" * 32)
        with pytest.raises(DecryptionFailure) as exc_info:
            other.decrypt(cipher.encrypt("secret"))
        assert str(exc_info.value) == "Failed to decrypt data"
        assert "padding" not in str(exc_info.value).lower()
