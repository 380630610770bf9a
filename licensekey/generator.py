"""
Issuer-side helper for building and encoding licenses step by step.
"""

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from licensekey.codec import encode
from licensekey.keys import KeyInput
from licensekey.license import License

logger = logging.getLogger(__name__)


def _to_timestamp(ts: datetime) -> int:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int(ts.timestamp())


class LicenseGenerator:
    """
    Builds a License and encodes it into a license key.

    The issue time defaults to the start of the current UTC day.

    Example:
        >>> gen = LicenseGenerator()
        >>> gen.load_private_key(keypair.private_key_jwk)
        >>> gen.set_id("5e7f1d2a-0c6b-4d1e-9a53-7b2f0e8c41d9")
        >>> gen.set_data({"seats": 10})
        >>> key_text = gen.get_license_key()
    """

    def __init__(self):
        today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        self._license = License(id="", issued_at=int(today.timestamp()))
        self._key: Optional[KeyInput] = None

    def load_private_key(self, key: KeyInput) -> None:
        self._key = key

    def set_id(self, license_id: str) -> None:
        self._license = replace(self._license, id=license_id)

    def set_customer(self, customer: str) -> None:
        self._license = replace(self._license, customer=customer)

    def set_subscription(self, subscription: str) -> None:
        self._license = replace(self._license, subscription=subscription)

    def set_type(self, license_type: str) -> None:
        self._license = replace(self._license, type=license_type)

    def set_data(self, data: Any) -> None:
        """
        Store data as the license payload, encoded as compact JSON.

        Raises:
            TypeError: If data is not JSON serializable.
        """
        payload = json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")
        self._license = replace(self._license, data=payload)

    def set_issued(self, ts: datetime) -> None:
        """Set the issue time. Naive datetimes are taken as UTC."""
        self._license = replace(self._license, issued_at=_to_timestamp(ts))

    def set_expired(self, ts: datetime) -> None:
        """Set the expiry time. Naive datetimes are taken as UTC."""
        self._license = replace(self._license, expires_at=_to_timestamp(ts))

    @property
    def license(self) -> License:
        """The license as currently configured."""
        return self._license

    def get_license_key(self) -> str:
        """
        Encode the configured license.

        Raises:
            LicenseError: See codec.encode.
        """
        key_text = encode(self._license, self._key)
        logger.info(f"Issued license {self._license.id}")
        return key_text
