"""
Error taxonomy for license key encoding and decoding.

Every failure raised by the encode and decode pipelines derives from
LicenseError, so callers can catch the whole family or a single kind.
"""


class LicenseError(Exception):
    """Base class for all license key errors."""


class MalformedContainerError(LicenseError):
    """The armored block could not be parsed or carries the wrong type tag."""


class DecodeError(LicenseError):
    """The envelope or license structure is not valid (JSON, base64, field types)."""


class DecompressError(LicenseError):
    """The compressed payload is corrupt, truncated or not a deflate stream."""


class AuthenticationError(LicenseError):
    """The ciphertext failed authentication (tampered data, wrong key or nonce)."""


class ChecksumMismatchError(LicenseError):
    """The decrypted content does not match the declared content hash."""


class SignatureInvalidError(LicenseError):
    """None of the trusted public keys validates the license signature."""


class IdentifierMismatchError(LicenseError):
    """The cleartext header id differs from the id inside the license."""


class MissingIdentifierError(LicenseError):
    """The license has no identifier."""


class InvalidValidityWindowError(LicenseError):
    """The expiry is negative or not strictly after the issue time."""


class MissingPrivateKeyError(LicenseError):
    """No private key was supplied for encoding."""


class InvalidKeyLengthError(LicenseError):
    """The symmetric key material is shorter than required."""


class InvalidNonceLengthError(LicenseError):
    """The nonce material is shorter than required."""
