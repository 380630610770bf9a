"""
Key handling for license signing.

Keys are always passed explicitly. These helpers turn the formats callers
tend to hold (JWK JSON, PEM, jwcrypto JWK objects, cryptography key objects)
into cryptography key objects.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from jwcrypto import jwk
from jwcrypto.common import JWException

PrivateKey = Union[Ed25519PrivateKey, RSAPrivateKey]
PublicKey = Union[Ed25519PublicKey, RSAPublicKey]

KeyInput = Union[str, bytes, jwk.JWK, PrivateKey, PublicKey]


@dataclass
class KeyPair:
    """
    An Ed25519 key pair in JWK form.

    Attributes:
        private_key_jwk: JWK JSON string of the private key (keep secret).
        public_key_jwk: JWK JSON string of the public key.
        key_id: JWK thumbprint of the public key.
    """

    private_key_jwk: str
    public_key_jwk: str
    key_id: str


def generate_keypair() -> KeyPair:
    """Generate a fresh Ed25519 key pair for issuing licenses."""
    key = jwk.JWK.generate(kty="OKP", crv="Ed25519")
    return KeyPair(
        private_key_jwk=key.export_private(),
        public_key_jwk=key.export_public(),
        key_id=key.thumbprint(),
    )


def _to_jwk(key: Union[str, bytes, jwk.JWK]) -> jwk.JWK:
    if isinstance(key, jwk.JWK):
        return key
    if isinstance(key, str):
        key = key.encode("utf-8")
    if key.lstrip().startswith(b"-----BEGIN"):
        return jwk.JWK.from_pem(key)
    return jwk.JWK.from_json(key.decode("utf-8"))


def load_private_key(key: Optional[KeyInput]) -> Optional[PrivateKey]:
    """
    Normalize a private key to a cryptography key object.

    Returns None when key is None, leaving the "no key" decision to the caller.

    Raises:
        ValueError: If the key cannot be parsed or is not a private key.
    """
    if key is None:
        return None
    if isinstance(key, (Ed25519PrivateKey, RSAPrivateKey)):
        return key
    if isinstance(key, (Ed25519PublicKey, RSAPublicKey)):
        raise ValueError("A private key is required, got a public key")

    try:
        parsed = _to_jwk(key)
        if not parsed.has_private:
            raise ValueError("JWK has no private component")
        op_key = parsed.get_op_key("sign")
    except (ValueError, TypeError, JWException) as e:
        raise ValueError(f"Invalid private key: {e}") from e

    if not isinstance(op_key, (Ed25519PrivateKey, RSAPrivateKey)):
        raise ValueError("Private key must be Ed25519 (OKP) or RSA")
    return op_key


def load_public_key(key: KeyInput) -> PublicKey:
    """
    Normalize a public key to a cryptography key object.

    A private key is accepted and reduced to its public half.

    Raises:
        ValueError: If the key cannot be parsed or has an unsupported type.
    """
    if isinstance(key, (Ed25519PublicKey, RSAPublicKey)):
        return key
    if isinstance(key, (Ed25519PrivateKey, RSAPrivateKey)):
        return key.public_key()

    try:
        op_key = _to_jwk(key).get_op_key("verify")
    except (ValueError, TypeError, JWException) as e:
        raise ValueError(f"Invalid public key: {e}") from e

    if not isinstance(op_key, (Ed25519PublicKey, RSAPublicKey)):
        raise ValueError("Public key must be Ed25519 (OKP) or RSA")
    return op_key


def load_public_keys(keys: Optional[Iterable[KeyInput]]) -> List[PublicKey]:
    """Normalize a collection of public keys, preserving order."""
    if not keys:
        return []
    return [load_public_key(key) for key in keys]
