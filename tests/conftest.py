"""
Shared pytest fixtures for licensekey tests.
"""

import time

import pytest

from licensekey import License, KeyPair, generate_keypair


@pytest.fixture
def keypair() -> KeyPair:
    """Generate a fresh issuer keypair for testing."""
    return generate_keypair()


@pytest.fixture
def other_keypair() -> KeyPair:
    """A second, unrelated keypair."""
    return generate_keypair()


@pytest.fixture
def now() -> int:
    return int(time.time())


@pytest.fixture
def sample_license(now) -> License:
    """A license valid for one hour with JSON data."""
    return License(
        id="f3a2b3e9-107a-498a-9b5d-24812371ee87",
        customer="cus_42",
        subscription="sub_7",
        type="enterprise",
        issued_at=now,
        expires_at=now + 3600,
        data=b'{"features":["api","auth"],"seats":25}',
    )
