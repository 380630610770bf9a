"""
License key encode and decode pipelines.

Encode: validate -> serialize -> hash -> sign -> encrypt -> compress -> armor.
Decode: unarmor -> decompress -> parse envelope -> decrypt -> checksum ->
verify signature -> parse license -> check identifier binding.

Both directions are pure functions of their inputs. Expiry is not checked
on decode; use License.has_expired().
"""

import hashlib
import hmac
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from licensekey import armor, signer
from licensekey.envelope import Envelope, auth_decrypt, auth_encrypt, compress, decompress
from licensekey.errors import (
    ChecksumMismatchError,
    IdentifierMismatchError,
    MissingPrivateKeyError,
    SignatureInvalidError,
)
from licensekey.keys import KeyInput
from licensekey.license import License

logger = logging.getLogger(__name__)


def encode(lic: License, private_key: Optional[KeyInput]) -> str:
    """
    Encode a license into an armored license key.

    Args:
        lic: The license to issue.
        private_key: Ed25519 (preferred) or RSA private key.

    Returns:
        The armored license key text.

    Raises:
        MissingIdentifierError: If the license id is empty or would not
            survive the armor header unchanged.
        InvalidValidityWindowError: If the expiry is invalid.
        MissingPrivateKeyError: If no private key is given.
        DecodeError: If a text field is not encodable as UTF-8.
    """
    lic.validate()

    if private_key is None:
        raise MissingPrivateKeyError("private key not defined")

    data = lic.canonical_bytes()
    content_hash = hashlib.sha256(data).digest()
    signature = signer.sign(data, private_key)

    envelope = Envelope(
        ciphertext=auth_encrypt(data, key=signature, nonce=content_hash),
        signature=signature,
        content_hash=content_hash,
    )

    return armor.wrap(
        armor.LICENSE_KEY_TYPE,
        {"id": lic.id},
        compress(envelope.to_bytes()),
    )


def decode(text: Union[str, bytes], public_keys: Optional[Iterable[KeyInput]] = None) -> License:
    """
    Decode and check an armored license key.

    Args:
        text: The armored license key.
        public_keys: Trusted public keys. The signature is accepted if any
            of them verifies it. When no keys are given the signature is NOT
            checked and anyone able to build a well-formed envelope can mint
            a license; only use that for inspection.

    Returns:
        A new License instance.

    Raises:
        MalformedContainerError: Bad armor or wrong block type.
        DecompressError: Corrupt compressed payload.
        DecodeError: Malformed envelope, base64 or license fields.
        AuthenticationError: Ciphertext failed authentication.
        ChecksumMismatchError: Decrypted data does not match the declared hash.
        SignatureInvalidError: No trusted key verifies the signature.
        IdentifierMismatchError: Header id differs from the license id.
    """
    _, headers, payload = armor.unwrap(text, armor.LICENSE_KEY_TYPE)

    envelope = Envelope.from_bytes(decompress(payload))

    data = auth_decrypt(envelope.ciphertext, key=envelope.signature, nonce=envelope.content_hash)

    if not hmac.compare_digest(hashlib.sha256(data).digest(), envelope.content_hash):
        raise ChecksumMismatchError("wrong verify checksum")

    keys = list(public_keys) if public_keys else []
    if keys:
        if not signer.verify(data, envelope.signature, keys):
            raise SignatureInvalidError("error verify signature")
    else:
        logger.warning("Decoding license key without trusted public keys; signature not verified")

    lic = License.from_bytes(data)

    if lic.id != headers.get("id"):
        raise IdentifierMismatchError("wrong verify id")

    return lic


def decode_file(
    path: Union[str, Path], public_keys: Optional[Iterable[KeyInput]] = None
) -> License:
    """Read an armored license key from path and decode it."""
    return decode(Path(path).read_bytes(), public_keys)
