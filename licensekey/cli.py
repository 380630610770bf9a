"""
licensekey Command Line Interface.

Provides commands for generating issuer keys, issuing license keys,
inspecting them and checking them against the configured oracles.
"""

import argparse
import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import List, Optional

from licensekey import config
from licensekey.client import LicenseClient
from licensekey.codec import decode_file, encode
from licensekey.errors import LicenseError
from licensekey.keys import generate_keypair
from licensekey.license import License


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def _public_keys(args: argparse.Namespace) -> List[str]:
    """Collect trusted keys from --key options or LICENSEKEY_PUBLIC_KEYS."""
    if args.key:
        return args.key
    raw = config.PUBLIC_KEYS
    if not raw:
        return []
    if raw.lstrip().startswith("["):
        return [json.dumps(item) if isinstance(item, dict) else item for item in json.loads(raw)]
    return [raw]


def _format_ts(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S %z")


def cmd_keygen(args: argparse.Namespace) -> int:
    """Generate a new Ed25519 issuer keypair."""
    keys = generate_keypair()

    if args.env:
        print(f"export LICENSEKEY_PRIVATE_KEY='{keys.private_key_jwk}'")
        print(f"export LICENSEKEY_PUBLIC_KEYS='{keys.public_key_jwk}'")
    else:
        print(f"Key ID: {keys.key_id}")
        print("\n--- PRIVATE KEY (Keep Secret / Set as Env Var) ---")
        print(keys.private_key_jwk)
        print("\n--- PUBLIC KEY (Ship with your application) ---")
        print(keys.public_key_jwk)
    return 0


def cmd_issue(args: argparse.Namespace) -> int:
    """Issue a license key."""
    private_key = args.key or config.PRIVATE_KEY
    if not private_key:
        print("Error: Missing private key. Set LICENSEKEY_PRIVATE_KEY or use --key", file=sys.stderr)
        return 1

    data = b""
    if args.data:
        try:
            data = json.dumps(json.loads(args.data), sort_keys=True, separators=(",", ":")).encode("utf-8")
        except json.JSONDecodeError as e:
            print(f"Error: Invalid JSON data: {e}", file=sys.stderr)
            return 1

    issued_at = int(time.time())
    lic = License(
        id=args.id,
        customer=args.customer or "",
        subscription=args.subscription or "",
        type=args.type or "",
        issued_at=issued_at,
        expires_at=issued_at + args.expires_in if args.expires_in else None,
        data=data,
    )

    try:
        key_text = encode(lic, private_key)
    except (LicenseError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w") as f:
            f.write(key_text)
    else:
        sys.stdout.write(key_text)
    return 0


def _print_license(lic: License) -> None:
    print(f"License ID: {lic.id}")
    if lic.customer:
        print(f"License Customer: {lic.customer}")
    if lic.subscription:
        print(f"License Subscription: {lic.subscription}")
    if lic.type:
        print(f"License Type: {lic.type}")
    if lic.issued_at:
        print(f"License Issued At: {lic.issued_at} ({_format_ts(lic.issued_at)})")
    if lic.expires_at:
        print(f"License Expires At: {lic.expires_at} ({_format_ts(lic.expires_at)})")
    if lic.data:
        print("License Data:")
        try:
            print(json.dumps(json.loads(lic.data), indent=2))
        except ValueError:
            print(lic.data.hex())


def cmd_inspect(args: argparse.Namespace) -> int:
    """Decode a license key file and print its fields."""
    keys = _public_keys(args)
    try:
        lic = decode_file(args.file, keys)
    except (LicenseError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not keys:
        print("Warning: No public key provided, signature not verified", file=sys.stderr)

    if args.json:
        result = lic.to_dict()
        result["expired"] = lic.has_expired()
        result["fingerprint"] = lic.fingerprint()
        print(json.dumps(result, indent=2))
    else:
        _print_license(lic)
        print(f"Fingerprint: {lic.fingerprint()}")
        if lic.has_expired():
            print("Status: EXPIRED")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Decode a license key file and confirm it with the configured oracles."""
    keys = _public_keys(args)
    try:
        lic = decode_file(args.file, keys)
    except (LicenseError, ValueError, OSError) as e:
        print(f"INVALID: {e}")
        return 1

    client = LicenseClient.from_env()
    if args.dns:
        client.set_dns_hosts(args.dns)
    if args.api:
        client.set_api_endpoints(args.api)

    if not client.channels:
        print("Error: No oracle configured. Set LICENSEKEY_DNS_HOSTS or use --dns/--api", file=sys.stderr)
        return 1

    if client.verify(lic):
        print(f"VERIFIED: {lic.id}")
        return 0
    print(f"NOT VERIFIED: {lic.id}")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog='licensekey',
        description='Issue and verify signed license keys'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # keygen command
    p_keygen = subparsers.add_parser('keygen', help='Generate an issuer keypair')
    p_keygen.add_argument('--env', action='store_true', help='Output as environment variables')

    # issue command
    p_issue = subparsers.add_parser('issue', help='Issue a license key')
    p_issue.add_argument('--id', required=True, help='License ID')
    p_issue.add_argument('--customer', help='Customer ID')
    p_issue.add_argument('--subscription', help='Subscription ID')
    p_issue.add_argument('--type', help='License type')
    p_issue.add_argument('--data', help='License data (JSON)')
    p_issue.add_argument('--expires-in', type=int, help='Validity in seconds from now')
    p_issue.add_argument('--key', help='Private key (JWK JSON or PEM)')
    p_issue.add_argument('-o', '--output', help='Write the license key to this file')

    # inspect command
    p_inspect = subparsers.add_parser('inspect', help='Decode and print a license key')
    p_inspect.add_argument('file', help='License key file')
    p_inspect.add_argument('--key', action='append', help='Trusted public key (repeatable)')
    p_inspect.add_argument('--json', action='store_true', help='Output as JSON')

    # verify command
    p_verify = subparsers.add_parser('verify', help='Confirm a license key with the oracles')
    p_verify.add_argument('file', help='License key file')
    p_verify.add_argument('--key', action='append', help='Trusted public key (repeatable)')
    p_verify.add_argument('--dns', action='append', help='DNS zone (repeatable)')
    p_verify.add_argument('--api', action='append', help='HTTP endpoint base (repeatable)')

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command == 'keygen':
        return cmd_keygen(args)
    elif args.command == 'issue':
        return cmd_issue(args)
    elif args.command == 'inspect':
        return cmd_inspect(args)
    elif args.command == 'verify':
        return cmd_verify(args)
    else:
        parser.print_help()
        return 0


if __name__ == '__main__':
    sys.exit(main())
