"""
Unit tests for the License model.
"""

import pytest

from licensekey import (
    DecodeError,
    InvalidValidityWindowError,
    License,
    MissingIdentifierError,
)


class TestHasExpired:
    """Tests for License.has_expired()."""

    def test_no_expiry_never_expires(self):
        """Absent or zero expiry never expires."""
        assert License(id="a").has_expired(now=10**12) is False
        assert License(id="a", expires_at=0).has_expired(now=10**12) is False

    def test_future_expiry(self, now):
        assert License(id="a", expires_at=now + 60).has_expired(now=now) is False

    def test_past_expiry(self, now):
        assert License(id="a", expires_at=now - 1).has_expired(now=now) is True

    def test_expiry_boundary_is_expired(self):
        """A license expires at exactly expires_at."""
        assert License(id="a", expires_at=100).has_expired(now=100) is True
        assert License(id="a", expires_at=100).has_expired(now=99) is False

    def test_negative_expiry_counts_as_expired(self):
        assert License(id="a", expires_at=-5).has_expired(now=0) is True

    def test_defaults_to_current_time(self, now):
        assert License(id="a", expires_at=now - 10).has_expired() is True
        assert License(id="a", expires_at=now + 3600).has_expired() is False


class TestValidate:
    """Tests for License.validate()."""

    def test_valid_license(self, sample_license):
        sample_license.validate()

    def test_missing_id(self):
        with pytest.raises(MissingIdentifierError):
            License(id="").validate()

    @pytest.mark.parametrize("license_id", [" abc", "abc ", " abc ", "\tabc", "a\nb", "a\rb"])
    def test_id_must_survive_armor_header(self, license_id):
        with pytest.raises(MissingIdentifierError, match="whitespace or line breaks"):
            License(id=license_id).validate()

    def test_inner_spaces_are_allowed(self):
        License(id="a b").validate()

    def test_expiry_equal_to_issue(self):
        with pytest.raises(InvalidValidityWindowError):
            License(id="a", issued_at=100, expires_at=100).validate()

    def test_expiry_before_issue(self):
        with pytest.raises(InvalidValidityWindowError):
            License(id="a", issued_at=100, expires_at=50).validate()

    def test_negative_expiry(self):
        with pytest.raises(InvalidValidityWindowError):
            License(id="a", expires_at=-1).validate()

    def test_zero_expiry_is_allowed(self):
        License(id="a", issued_at=100, expires_at=0).validate()


class TestSerialization:
    """Tests for canonical serialization and fingerprints."""

    def test_canonical_bytes_layout(self):
        """Short field names, sorted, compact, empty fields omitted."""
        lic = License(id="abc", issued_at=1, expires_at=2)
        assert lic.canonical_bytes() == b'{"exp":2,"iat":1,"id":"abc"}'

    def test_payload_is_base64url(self):
        lic = License(id="abc", data=b"\xff\xfe")
        assert lic.canonical_bytes() == b'{"dat":"__4","id":"abc"}'

    def test_lone_surrogate_is_rejected(self):
        with pytest.raises(DecodeError, match="UTF-8"):
            License(id="abc", customer="\ud800").canonical_bytes()

    def test_from_bytes_restores_all_fields(self, sample_license):
        assert License.from_bytes(sample_license.canonical_bytes()) == sample_license

    def test_from_bytes_keeps_zero_timestamps(self):
        lic = License(id="abc", issued_at=0, expires_at=0)
        assert License.from_bytes(lic.canonical_bytes()) == lic

    def test_from_bytes_ignores_unknown_fields(self):
        lic = License.from_bytes(b'{"id":"abc","extra":true}')
        assert lic == License(id="abc")

    def test_from_bytes_rejects_bad_types(self):
        with pytest.raises(DecodeError):
            License.from_bytes(b'{"id":"abc","exp":"tomorrow"}')
        with pytest.raises(DecodeError):
            License.from_bytes(b'{"id":"abc","iat":true}')
        with pytest.raises(DecodeError):
            License.from_bytes(b'{"id":7}')

    def test_from_bytes_rejects_non_object(self):
        with pytest.raises(DecodeError):
            License.from_bytes(b"[1,2,3]")
        with pytest.raises(DecodeError):
            License.from_bytes(b"not json")

    def test_fingerprint_is_stable(self, sample_license):
        assert sample_license.fingerprint() == sample_license.fingerprint()
        assert len(sample_license.fingerprint()) == 43
        assert "=" not in sample_license.fingerprint()

    def test_fingerprint_changes_with_any_field(self, sample_license):
        from dataclasses import replace

        variants = [
            replace(sample_license, id="other"),
            replace(sample_license, customer="cus_43"),
            replace(sample_license, subscription="sub_8"),
            replace(sample_license, type="basic"),
            replace(sample_license, issued_at=sample_license.issued_at - 1),
            replace(sample_license, expires_at=sample_license.expires_at + 1),
            replace(sample_license, data=b"{}"),
        ]
        fingerprints = {v.fingerprint() for v in variants}
        assert len(fingerprints) == len(variants)
        assert sample_license.fingerprint() not in fingerprints
