"""
License Envelope Codec - compression, authenticated encryption and the
intermediate envelope structure carried inside the armored block.

The symmetric key is the prefix of the license signature and the nonce is
the prefix of the content hash. This reuse is part of the wire format:
changing it (for example by adding a KDF) breaks every license key that
was issued before.
"""

import base64
import binascii
import json
import zlib
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from licensekey.errors import (
    AuthenticationError,
    DecodeError,
    DecompressError,
    InvalidKeyLengthError,
    InvalidNonceLengthError,
)

KEY_SIZE = 32
NONCE_SIZE = 12
HASH_SIZE = 32

ENVELOPE_VERSION = 1


# =============================================================================
# Base64 (URL alphabet, no padding)
# =============================================================================


def b64url_encode(data: bytes) -> str:
    """Encode bytes as base64-url without padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(value: str) -> bytes:
    """
    Decode a base64-url string without padding.

    Raises:
        DecodeError: If the value is not valid base64-url.
    """
    if not isinstance(value, str):
        raise DecodeError("base64 field must be a string")
    if "+" in value or "/" in value:
        raise DecodeError("invalid base64 data: standard alphabet characters in URL-safe field")
    padded = value + "=" * (-len(value) % 4)
    try:
        decoded = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise DecodeError(f"invalid base64 data: {e}") from e

    # Unused trailing bits must be zero so each value has one encoding
    if b64url_encode(decoded) != value:
        raise DecodeError("invalid base64 data: non-canonical encoding")
    return decoded


# =============================================================================
# Compression
# =============================================================================


def compress(data: bytes) -> bytes:
    """Compress with raw DEFLATE at the best compression level."""
    compressor = zlib.compressobj(level=zlib.Z_BEST_COMPRESSION, wbits=-zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def decompress(data: bytes) -> bytes:
    """
    Inflate a raw DEFLATE stream.

    The stream must be complete: a missing end-of-stream marker or trailing
    bytes after it are treated as corruption.

    Raises:
        DecompressError: On corrupt, truncated or non-deflate input.
    """
    decompressor = zlib.decompressobj(wbits=-zlib.MAX_WBITS)
    try:
        result = decompressor.decompress(data) + decompressor.flush()
    except zlib.error as e:
        raise DecompressError(f"corrupt compressed data: {e}") from e

    if not decompressor.eof:
        raise DecompressError("truncated compressed data")
    if decompressor.unused_data:
        raise DecompressError("trailing data after compressed stream")
    return result


# =============================================================================
# Authenticated Encryption (ChaCha20-Poly1305)
# =============================================================================


def _aead(key: bytes, nonce: bytes):
    if len(key) < KEY_SIZE:
        raise InvalidKeyLengthError(f"key material must be at least {KEY_SIZE} bytes, got {len(key)}")
    if len(nonce) < NONCE_SIZE:
        raise InvalidNonceLengthError(
            f"nonce material must be at least {NONCE_SIZE} bytes, got {len(nonce)}"
        )
    return ChaCha20Poly1305(bytes(key[:KEY_SIZE])), bytes(nonce[:NONCE_SIZE])


def auth_encrypt(data: bytes, key: bytes, nonce: bytes) -> bytes:
    """
    Encrypt and authenticate data.

    Only the first KEY_SIZE bytes of key and NONCE_SIZE bytes of nonce are used.

    Raises:
        InvalidKeyLengthError: If key is shorter than KEY_SIZE.
        InvalidNonceLengthError: If nonce is shorter than NONCE_SIZE.
    """
    aead, nonce = _aead(key, nonce)
    return aead.encrypt(nonce, data, None)


def auth_decrypt(ciphertext: bytes, key: bytes, nonce: bytes) -> bytes:
    """
    Decrypt ciphertext produced by auth_encrypt.

    Raises:
        AuthenticationError: If the tag does not verify. The error does not
            say whether the data, the key or the nonce was wrong.
    """
    aead, nonce = _aead(key, nonce)
    try:
        return aead.decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise AuthenticationError("license data failed authentication") from e


# =============================================================================
# Envelope
# =============================================================================


@dataclass(frozen=True)
class Envelope:
    """
    Encrypted and signed intermediate form of a license.

    Attributes:
        ciphertext: Encrypted canonical license bytes.
        signature: Signature over the canonical license bytes.
        content_hash: SHA-256 of the canonical license bytes.
    """

    ciphertext: bytes
    signature: bytes
    content_hash: bytes

    def to_bytes(self) -> bytes:
        """Serialize to the stable compact JSON layout."""
        content = {
            "d": b64url_encode(self.ciphertext),
            "s": b64url_encode(self.signature),
            "h": b64url_encode(self.content_hash),
            "v": ENVELOPE_VERSION,
        }
        return json.dumps(content, sort_keys=True, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Envelope":
        """
        Parse a serialized envelope.

        Raises:
            DecodeError: On malformed JSON, missing fields, bad base64 or an
                unsupported version.
        """
        try:
            content = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"malformed envelope: {e}") from e

        if not isinstance(content, dict):
            raise DecodeError("malformed envelope: expected an object")

        version = content.get("v", ENVELOPE_VERSION)
        if version != ENVELOPE_VERSION or isinstance(version, bool):
            raise DecodeError(f"unsupported envelope version: {version!r}")

        for field_name in ("d", "s", "h"):
            if field_name not in content:
                raise DecodeError(f"malformed envelope: missing field '{field_name}'")

        fields = {}
        for field_name in ("s", "h", "d"):
            try:
                fields[field_name] = b64url_decode(content[field_name])
            except DecodeError as e:
                raise DecodeError(f"envelope field '{field_name}': {e}") from e

        if len(fields["h"]) != HASH_SIZE:
            raise DecodeError(f"envelope hash must be {HASH_SIZE} bytes, got {len(fields['h'])}")
        if len(fields["s"]) < KEY_SIZE:
            raise DecodeError(f"envelope signature too short: {len(fields['s'])} bytes")

        return cls(ciphertext=fields["d"], signature=fields["s"], content_hash=fields["h"])
