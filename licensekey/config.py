# licensekey/config.py
"""
Centralized configuration for licensekey.

All configurable values are read from environment variables with sensible
defaults, so tools and services can be pointed at different oracles
without code changes.

Environment Variables:
    LICENSEKEY_DNS_HOSTS: Comma separated DNS zones holding fingerprint TXT records
    LICENSEKEY_API_ENDPOINTS: Comma separated HTTP endpoint bases for fingerprint lookups
    LICENSEKEY_LOOKUP_TIMEOUT: Per-lookup timeout in seconds (default: 5)
    LICENSEKEY_PRIVATE_KEY: Issuer private key (JWK JSON or PEM), used by the CLI
    LICENSEKEY_PUBLIC_KEYS: Trusted public keys, used by the CLI. Several JWK
        objects can be given as a JSON list.
"""

import os
from typing import Final, List, Optional


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# =============================================================================
# Oracle Configuration
# =============================================================================

# DNS zones queried as TXT <license-id>.<zone>, in order
DNS_HOSTS: Final[List[str]] = _split(os.getenv("LICENSEKEY_DNS_HOSTS", ""))

# HTTP endpoint bases queried as GET <endpoint>/<license-id>, in order
API_ENDPOINTS: Final[List[str]] = _split(os.getenv("LICENSEKEY_API_ENDPOINTS", ""))

# Lookups can hang; every DNS query and HTTP request is bounded by this
LOOKUP_TIMEOUT: Final[float] = float(os.getenv("LICENSEKEY_LOOKUP_TIMEOUT", "5"))

# =============================================================================
# Key Configuration (CLI)
# =============================================================================

PRIVATE_KEY: Final[Optional[str]] = os.getenv("LICENSEKEY_PRIVATE_KEY")

PUBLIC_KEYS: Final[Optional[str]] = os.getenv("LICENSEKEY_PUBLIC_KEYS")


def print_config() -> None:
    """Print current configuration (useful for debugging)."""
    print("licensekey configuration:")
    print(f"  DNS_HOSTS:      {', '.join(DNS_HOSTS) or '(none)'}")
    print(f"  API_ENDPOINTS:  {', '.join(API_ENDPOINTS) or '(none)'}")
    print(f"  LOOKUP_TIMEOUT: {LOOKUP_TIMEOUT}")
    print(f"  PRIVATE_KEY:    {'set' if PRIVATE_KEY else 'not set'}")
    print(f"  PUBLIC_KEYS:    {'set' if PUBLIC_KEYS else 'not set'}")


if __name__ == "__main__":
    print_config()
