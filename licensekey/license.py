"""
License token model and its canonical serialization.
"""

import hashlib
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from licensekey.envelope import b64url_decode, b64url_encode
from licensekey.errors import (
    DecodeError,
    InvalidValidityWindowError,
    MissingIdentifierError,
)


@dataclass(frozen=True)
class License:
    """
    A software license.

    Attributes:
        id: Globally unique license identifier (required).
        customer: Customer identifier.
        subscription: Subscription identifier.
        type: License type or tier.
        issued_at: Unix timestamp of issue.
        expires_at: Unix timestamp of expiry. None or 0 means it never expires.
        data: Opaque payload. The license never interprets it; callers
            usually store JSON here.
    """

    id: str
    customer: str = ""
    subscription: str = ""
    type: str = ""
    issued_at: Optional[int] = None
    expires_at: Optional[int] = None
    data: bytes = b""

    def validate(self) -> None:
        """
        Check that the license may be issued.

        Raises:
            MissingIdentifierError: If the id is empty, has surrounding
                whitespace or contains line breaks (it must survive the
                cleartext armor header unchanged).
            InvalidValidityWindowError: If the expiry is negative, or set and
                not strictly after the issue time.
        """
        if not self.id:
            raise MissingIdentifierError("license id not defined")
        if self.id != self.id.strip() or "\n" in self.id or "\r" in self.id:
            raise MissingIdentifierError(
                "license id must not have surrounding whitespace or line breaks"
            )

        if self.expires_at:
            if self.expires_at < 0:
                raise InvalidValidityWindowError("the expire time must not be negative")
            if self.expires_at <= (self.issued_at or 0):
                raise InvalidValidityWindowError(
                    "the expire time must be greater than the issue time"
                )

    def has_expired(self, now: Optional[int] = None) -> bool:
        """Return True if an expiry is set and now is at or past it."""
        if not self.expires_at:
            return False
        if now is None:
            now = int(time.time())
        return now >= self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Map fields to their short wire names, dropping empty ones."""
        fields: Dict[str, Any] = {"id": self.id}
        if self.customer:
            fields["cus"] = self.customer
        if self.subscription:
            fields["sub"] = self.subscription
        if self.type:
            fields["typ"] = self.type
        if self.issued_at is not None:
            fields["iat"] = self.issued_at
        if self.expires_at is not None:
            fields["exp"] = self.expires_at
        if self.data:
            fields["dat"] = b64url_encode(self.data)
        return fields

    def canonical_bytes(self) -> bytes:
        """
        Deterministic serialization used for signing and hashing.

        Raises:
            DecodeError: If a text field cannot be encoded as UTF-8.
        """
        try:
            return json.dumps(
                self.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")
        except UnicodeEncodeError as e:
            raise DecodeError(f"license fields must be valid UTF-8 text: {e}") from e

    def fingerprint(self) -> str:
        """SHA-256 of the canonical serialization, base64-url without padding."""
        return b64url_encode(hashlib.sha256(self.canonical_bytes()).digest())

    @classmethod
    def from_dict(cls, fields: Dict[str, Any]) -> "License":
        """
        Build a license from its wire-name mapping. Unknown keys are ignored.

        Raises:
            DecodeError: If a field has the wrong type.
        """
        def text(name: str) -> str:
            value = fields.get(name, "")
            if not isinstance(value, str):
                raise DecodeError(f"license field '{name}' must be a string")
            return value

        def timestamp(name: str) -> Optional[int]:
            value = fields.get(name)
            if value is None:
                return None
            if isinstance(value, bool) or not isinstance(value, int):
                raise DecodeError(f"license field '{name}' must be an integer")
            return value

        return cls(
            id=text("id"),
            customer=text("cus"),
            subscription=text("sub"),
            type=text("typ"),
            issued_at=timestamp("iat"),
            expires_at=timestamp("exp"),
            data=b64url_decode(text("dat")),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "License":
        """
        Parse the canonical serialization.

        Raises:
            DecodeError: On invalid JSON or field types.
        """
        try:
            fields = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"malformed license data: {e}") from e

        if not isinstance(fields, dict):
            raise DecodeError("malformed license data: expected an object")
        return cls.from_dict(fields)
