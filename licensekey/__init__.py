"""
licensekey - Signed, encrypted software license keys.

Issues licenses as armored text blocks (signed with Ed25519, encrypted with
ChaCha20-Poly1305, compressed) and decodes them back with multi-key
signature verification and optional out-of-band fingerprint checks.
"""

__version__ = "1.0.0"

# Core encode/decode
from .license import License
from .codec import encode, decode, decode_file
from .generator import LicenseGenerator
from .errors import (
    LicenseError,
    MalformedContainerError,
    DecodeError,
    DecompressError,
    AuthenticationError,
    ChecksumMismatchError,
    SignatureInvalidError,
    IdentifierMismatchError,
    MissingIdentifierError,
    InvalidValidityWindowError,
    MissingPrivateKeyError,
    InvalidKeyLengthError,
    InvalidNonceLengthError,
)

# Key management
from .keys import generate_keypair, KeyPair, load_private_key, load_public_key


# Oracle client (lazy import keeps dnspython and httpx out of plain encode/decode imports)
def __getattr__(name):
    """Lazy loading of the oracle client."""
    if name in ("LicenseClient", "DNSChannel", "HTTPChannel", "OracleChannel", "OracleAnswer"):
        from . import client

        return getattr(client, name)
    raise AttributeError(f"module 'licensekey' has no attribute '{name}'")


__all__ = [
    "__version__",
    # Core
    "License",
    "encode",
    "decode",
    "decode_file",
    "LicenseGenerator",
    # Errors
    "LicenseError",
    "MalformedContainerError",
    "DecodeError",
    "DecompressError",
    "AuthenticationError",
    "ChecksumMismatchError",
    "SignatureInvalidError",
    "IdentifierMismatchError",
    "MissingIdentifierError",
    "InvalidValidityWindowError",
    "MissingPrivateKeyError",
    "InvalidKeyLengthError",
    "InvalidNonceLengthError",
    # Key management
    "generate_keypair",
    "KeyPair",
    "load_private_key",
    "load_public_key",
    # Oracle client (lazy loaded)
    "LicenseClient",
    "DNSChannel",
    "HTTPChannel",
    "OracleChannel",
    "OracleAnswer",
]
