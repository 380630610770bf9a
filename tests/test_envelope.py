"""
Unit tests for compression, authenticated encryption and the envelope.
"""

import json

import pytest

from licensekey import (
    AuthenticationError,
    DecodeError,
    DecompressError,
    InvalidKeyLengthError,
    InvalidNonceLengthError,
)
from licensekey.envelope import (
    Envelope,
    auth_decrypt,
    auth_encrypt,
    b64url_decode,
    b64url_encode,
    compress,
    decompress,
)

KEY = bytes(range(64))
NONCE = bytes(range(100, 132))


class TestCompression:
    """Tests for compress() and decompress()."""

    def test_roundtrip(self):
        data = b'{"d":"abc","h":"def","s":"ghi"}' * 20
        packed = compress(data)
        assert len(packed) < len(data)
        assert decompress(packed) == data

    def test_empty_input(self):
        """Empty input still produces a valid stream."""
        packed = compress(b"")
        assert packed
        assert decompress(packed) == b""

    def test_garbage(self):
        with pytest.raises(DecompressError):
            decompress(b"not a deflate stream")

    def test_empty_stream(self):
        with pytest.raises(DecompressError):
            decompress(b"")

    def test_truncated_stream(self):
        packed = compress(bytes(range(256)) * 8)
        with pytest.raises(DecompressError):
            decompress(packed[: len(packed) // 2])

    def test_trailing_data(self):
        with pytest.raises(DecompressError):
            decompress(compress(b"hello") + b"junk")


class TestAuthenticatedEncryption:
    """Tests for auth_encrypt() and auth_decrypt()."""

    def test_roundtrip(self):
        ciphertext = auth_encrypt(b"secret", KEY, NONCE)
        assert ciphertext != b"secret"
        assert auth_decrypt(ciphertext, KEY, NONCE) == b"secret"

    def test_only_prefixes_are_used(self):
        ciphertext = auth_encrypt(b"secret", KEY, NONCE)
        assert auth_decrypt(ciphertext, KEY[:32] + b"x" * 10, NONCE[:12] + b"y") == b"secret"

    def test_short_key(self):
        with pytest.raises(InvalidKeyLengthError):
            auth_encrypt(b"secret", b"k" * 31, NONCE)

    def test_short_nonce(self):
        with pytest.raises(InvalidNonceLengthError):
            auth_encrypt(b"secret", KEY, b"n" * 11)

    def test_tampered_ciphertext(self):
        ciphertext = bytearray(auth_encrypt(b"secret", KEY, NONCE))
        ciphertext[0] ^= 0x01
        with pytest.raises(AuthenticationError):
            auth_decrypt(bytes(ciphertext), KEY, NONCE)

    def test_wrong_key(self):
        ciphertext = auth_encrypt(b"secret", KEY, NONCE)
        with pytest.raises(AuthenticationError):
            auth_decrypt(ciphertext, bytes(64), NONCE)

    def test_wrong_nonce(self):
        ciphertext = auth_encrypt(b"secret", KEY, NONCE)
        with pytest.raises(AuthenticationError):
            auth_decrypt(ciphertext, KEY, bytes(32))


class TestBase64:
    """Tests for the base64-url helpers."""

    def test_no_padding(self):
        assert b64url_encode(b"\xfb\xff") == "-_8"
        assert b64url_decode("-_8") == b"\xfb\xff"

    def test_invalid_characters(self):
        with pytest.raises(DecodeError):
            b64url_decode("ab+/")

    def test_non_string(self):
        with pytest.raises(DecodeError):
            b64url_decode(123)


class TestEnvelope:
    """Tests for Envelope serialization."""

    def test_layout(self):
        envelope = Envelope(ciphertext=b"\x01", signature=b"\x02", content_hash=b"\x03")
        assert envelope.to_bytes() == b'{"d":"AQ","h":"Aw","s":"Ag","v":1}'

    def test_roundtrip(self):
        envelope = Envelope(ciphertext=b"c" * 40, signature=b"s" * 64, content_hash=b"h" * 32)
        assert Envelope.from_bytes(envelope.to_bytes()) == envelope

    def test_missing_version_is_version_one(self):
        content = {"d": "AQ", "h": b64url_encode(bytes(32)), "s": b64url_encode(bytes(64))}
        envelope = Envelope.from_bytes(json.dumps(content).encode())
        assert envelope.ciphertext == b"\x01"

    def test_short_hash(self):
        content = {"d": "AQ", "h": b64url_encode(bytes(31)), "s": b64url_encode(bytes(64))}
        with pytest.raises(DecodeError, match="hash"):
            Envelope.from_bytes(json.dumps(content).encode())

    def test_short_signature(self):
        content = {"d": "AQ", "h": b64url_encode(bytes(32)), "s": b64url_encode(bytes(16))}
        with pytest.raises(DecodeError, match="signature"):
            Envelope.from_bytes(json.dumps(content).encode())

    def test_non_canonical_base64(self):
        """Non-zero unused bits would give a second encoding of the same bytes."""
        with pytest.raises(DecodeError):
            b64url_decode("AR")

    def test_unsupported_version(self):
        with pytest.raises(DecodeError, match="version"):
            Envelope.from_bytes(b'{"d":"AQ","h":"Aw","s":"Ag","v":2}')

    def test_missing_field(self):
        with pytest.raises(DecodeError, match="'s'"):
            Envelope.from_bytes(json.dumps({"d": "AQ", "h": "Aw"}).encode())

    def test_bad_base64_field(self):
        with pytest.raises(DecodeError):
            Envelope.from_bytes(b'{"d":"AQ","h":"A*w","s":"Ag"}')

    def test_not_json(self):
        with pytest.raises(DecodeError):
            Envelope.from_bytes(b"\x00\x01garbage")

    def test_not_an_object(self):
        with pytest.raises(DecodeError):
            Envelope.from_bytes(b'["d","h","s"]')
