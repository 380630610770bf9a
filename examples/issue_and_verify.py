#!/usr/bin/env python3
"""
issue_and_verify.py - Issue a License Key and Check It

Generate an issuer key, issue a license, then decode it the way an
application would. Rotated keys are handled by passing every trusted key.

Run: python issue_and_verify.py
"""

import json
from datetime import datetime, timedelta, timezone

from licensekey import (
    LicenseClient,
    LicenseGenerator,
    SignatureInvalidError,
    decode,
    generate_keypair,
)

print("License Keys")
print("=" * 50)

# =============================================================================
# Issuer Side
# =============================================================================

current_key = generate_keypair()
retired_key = generate_keypair()

gen = LicenseGenerator()
gen.load_private_key(current_key.private_key_jwk)
gen.set_id("5e7f1d2a-0c6b-4d1e-9a53-7b2f0e8c41d9")
gen.set_customer("cus_1042")
gen.set_type("enterprise")
gen.set_data({"seats": 50, "features": ["sso", "audit"]})
gen.set_expired(datetime.now(timezone.utc) + timedelta(days=365))

key_text = gen.get_license_key()
print("\nIssued license key:\n")
print(key_text)

# =============================================================================
# Application Side
# =============================================================================

trusted = [retired_key.public_key_jwk, current_key.public_key_jwk]
lic = decode(key_text, public_keys=trusted)

print(f"License ID:  {lic.id}")
print(f"Customer:    {lic.customer}")
print(f"Expired:     {lic.has_expired()}")
print(f"Data:        {json.loads(lic.data)}")
print(f"Fingerprint: {lic.fingerprint()}")

try:
    decode(key_text, public_keys=[retired_key.public_key_jwk])
except SignatureInvalidError:
    print("\nRejected when only the retired key is trusted")

# Publish the fingerprint as TXT <license-id>.licenses.example.com to
# enable out-of-band confirmation.
client = LicenseClient(dns_hosts=["licenses.example.com"])
print(f"\nConfirmed by oracle: {client.verify(lic)}")
