"""
License signing and multi-key verification.

Ed25519 is the default algorithm. RSA keys sign with RSA-PSS over SHA-256.
The signature always covers the full canonical license bytes.
"""

import logging
from typing import Iterable, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from licensekey.errors import MissingPrivateKeyError
from licensekey.keys import KeyInput, PublicKey, load_private_key, load_public_keys

logger = logging.getLogger(__name__)


def _pss() -> padding.PSS:
    return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.MAX_LENGTH)


def sign(message: bytes, private_key: Optional[KeyInput]) -> bytes:
    """
    Sign message with the given private key.

    Args:
        message: Canonical license bytes.
        private_key: Ed25519 or RSA private key in any form accepted by
            keys.load_private_key.

    Returns:
        The raw signature bytes.

    Raises:
        MissingPrivateKeyError: If private_key is None.
        ValueError: If the key cannot be loaded.
    """
    key = load_private_key(private_key)
    if key is None:
        raise MissingPrivateKeyError("private key not defined")

    if isinstance(key, Ed25519PrivateKey):
        return key.sign(message)
    return key.sign(message, _pss(), hashes.SHA256())


def _verify_one(key: PublicKey, message: bytes, signature: bytes) -> bool:
    try:
        if isinstance(key, Ed25519PublicKey):
            key.verify(signature, message)
        elif isinstance(key, RSAPublicKey):
            key.verify(signature, message, _pss(), hashes.SHA256())
        else:
            return False
    except InvalidSignature:
        return False
    return True


def verify(message: bytes, signature: bytes, public_keys: Iterable[KeyInput]) -> bool:
    """
    Check the signature against a set of trusted keys.

    Returns True if any key validates the signature. Key order does not
    matter, so several issuers or rotated keys can be trusted at once.

    Callers that skip this check entirely (no trusted keys) accept licenses
    from anyone holding a valid envelope; see codec.decode.
    """
    for key in load_public_keys(public_keys):
        if _verify_one(key, message, signature):
            return True
    logger.debug("Signature did not verify against any trusted key")
    return False
