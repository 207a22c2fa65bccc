"""
Unit tests for the OTP engine.

Tests:
- HOTP (RFC 4226 vectors, digit validation, counter bounds)
- TOTP (RFC 6238 vectors, time steps, windowed verification)
- Provisioning URI / QR code
"""

import hashlib
from dataclasses import FrozenInstanceError
from unittest.mock import patch

import pytest

from authkit.auth.otp import (
    DEFAULT_DIGITS, DEFAULT_STEP, OTPEngine, OtpConfig,
    create_otp, get_remaining_seconds, get_time_counter, hotp, totp, verify_totp,
)
from authkit.crypto import CryptographyHmacProvider, HashFamily
from authkit.encoding import base32
from authkit.errors import ProviderError, ValidationError


RFC4226_SECRET = b"12345678901234567890"
RFC4226_VECTORS = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]

# RFC 6238 Appendix B uses a key sized to each hash
RFC6238_SECRETS = {
    "SHA-1": b"12345678901234567890",
    "SHA-256": b"12345678901234567890123456789012",
    "SHA-512": b"1234567890123456789012345678901234567890123456789012345678901234",
}


class RecordingProvider(CryptographyHmacProvider):
    """HMAC provider that counts calls."""

    def __init__(self):
        self.calls = 0

    def sign(self, hash_family, key, message):
        self.calls += 1
        return super().sign(hash_family, key, message)


class TestOtpConfig:
    """Tests for OTP configuration."""

    def test_defaults(self):
        """Defaults should be the RFC values."""
        config = OtpConfig()
        assert config.hash_family is HashFamily.SHA1
        assert config.digits == DEFAULT_DIGITS == 6
        assert config.step == DEFAULT_STEP == 30

    def test_hash_name_accepted(self):
        """Hash family names should be parsed."""
        assert OtpConfig(hash_family="sha256").hash_family is HashFamily.SHA256

    @pytest.mark.parametrize("digits", [0, 9, -1])
    def test_invalid_digits(self, digits):
        with pytest.raises(ValidationError, match="Digits must be between 1 and 8"):
            OtpConfig(digits=digits)

    @pytest.mark.parametrize("step", [0, -30])
    def test_invalid_step(self, step):
        with pytest.raises(ValidationError):
            OtpConfig(step=step)

    def test_unknown_hash(self):
        with pytest.raises(ValidationError):
            OtpConfig(hash_family="MD5")

    def test_immutable(self):
        """Config cannot be changed after construction."""
        config = OtpConfig()
        with pytest.raises(FrozenInstanceError):
            config.digits = 8


class TestHOTP:
    """Tests for HOTP generation."""

    def test_rfc4226_vectors(self):
        """RFC 4226 Appendix D test values."""
        engine = OTPEngine()
        for counter, expected in enumerate(RFC4226_VECTORS):
            assert engine.generate_hotp(RFC4226_SECRET, counter) == expected

    def test_module_level_hotp(self):
        assert hotp(RFC4226_SECRET, 0) == "755224"

    def test_deterministic(self):
        """Same secret and counter should give the same code."""
        engine = create_otp()
        first = engine.generate_hotp("1234567890", counter=1)
        assert first == engine.generate_hotp("1234567890", counter=1)
        assert len(first) == 6
        assert first.isdigit()

    def test_str_and_bytes_secret_agree(self):
        """A str secret is its UTF-8 bytes."""
        engine = OTPEngine()
        assert engine.generate_hotp("1234567890", 7) == engine.generate_hotp(b"1234567890", 7)

    def test_different_counters(self):
        engine = OTPEngine()
        assert engine.generate_hotp(RFC4226_SECRET, 0) != engine.generate_hotp(RFC4226_SECRET, 1)

    @pytest.mark.parametrize("digits", [0, 9])
    def test_invalid_digits_before_hashing(self, digits):
        """Bad digit counts should fail before the provider is called."""
        provider = RecordingProvider()
        engine = OTPEngine(provider=provider)
        with pytest.raises(ValidationError, match="Digits must be between 1 and 8"):
            engine.generate_hotp("1234567890", counter=1, digits=digits)
        assert provider.calls == 0

    @pytest.mark.parametrize("digits", [1, 4, 8])
    def test_digit_lengths(self, digits):
        """Output length should always equal digits."""
        code = OTPEngine().generate_hotp(RFC4226_SECRET, 3, digits=digits)
        assert len(code) == digits

    def test_eight_digits_truncation(self):
        """8 digits keeps more of the truncated value than 6."""
        engine = OTPEngine()
        assert engine.generate_hotp(RFC4226_SECRET, 0, digits=8).endswith("755224")

    @pytest.mark.parametrize("counter", [-1, 2 ** 64])
    def test_counter_bounds(self, counter):
        """Counters outside unsigned 64 bits should be rejected."""
        with pytest.raises(ValidationError):
            OTPEngine().generate_hotp(RFC4226_SECRET, counter)

    def test_max_counter(self):
        """The largest 64-bit counter is valid."""
        assert len(OTPEngine().generate_hotp(RFC4226_SECRET, 2 ** 64 - 1)) == 6

    def test_provider_error_propagates(self):
        """Provider failures should reach the caller unchanged."""
        class FailingProvider:
            def sign(self, hash_family, key, message):
                raise ProviderError("backend down")

        with pytest.raises(ProviderError, match="backend down"):
            OTPEngine(provider=FailingProvider()).generate_hotp(RFC4226_SECRET, 0)

    def test_matches_pyotp(self):
        """Codes should match the pyotp reference implementation."""
        pyotp = pytest.importorskip("pyotp")
        secret_b32 = base32.encode(RFC4226_SECRET, padding=False)
        for family, digest in [("SHA-256", hashlib.sha256), ("SHA-384", hashlib.sha384)]:
            reference = pyotp.HOTP(secret_b32, digest=digest)
            engine = create_otp(family)
            for counter in range(5):
                assert engine.generate_hotp(RFC4226_SECRET, counter) == reference.at(counter)


class TestTOTP:
    """Tests for TOTP generation and verification."""

    @pytest.mark.parametrize("family,timestamp,expected", [
        ("SHA-1", 59, "94287082"),
        ("SHA-256", 59, "46119246"),
        ("SHA-512", 59, "90693936"),
        ("SHA-1", 1111111109, "07081804"),
        ("SHA-256", 1111111109, "68084774"),
        ("SHA-512", 1111111109, "25091201"),
    ])
    def test_rfc6238_vectors(self, family, timestamp, expected):
        """RFC 6238 Appendix B test values (8 digits, 30 s step)."""
        engine = create_otp(family, digits=8)
        assert engine.generate_totp(RFC6238_SECRETS[family], timestamp=timestamp) == expected

    def test_time_counter(self):
        """Counter is floor(time / step)."""
        assert get_time_counter(59, 30) == 1
        assert get_time_counter(60, 30) == 2
        assert get_time_counter(1.5, 0.5) == 3

    def test_uses_current_time(self):
        """Without a timestamp the current time should be used."""
        with patch("time.time", return_value=59.0):
            code = totp(RFC6238_SECRETS["SHA-1"], digits=8)
        assert code == "94287082"

    def test_generates_code(self):
        code = totp(b"12345678901234567890")
        assert len(code) == DEFAULT_DIGITS
        assert code.isdigit()

    def test_changes_between_steps(self):
        """Consecutive steps should give different codes."""
        engine = OTPEngine()
        t = 1_700_000_000
        assert engine.generate_totp("1234567890", step=3, timestamp=t) != \
            engine.generate_totp("1234567890", step=3, timestamp=t + 3)

    def test_verify_current(self):
        """A fresh code should verify."""
        engine = OTPEngine()
        t = 1_700_000_000
        code = engine.generate_totp("1234567890", timestamp=t)
        assert engine.verify_totp(code, "1234567890", timestamp=t)

    def test_verify_within_window(self):
        """Code from time T verifies at T + one step with window=1."""
        engine = OTPEngine()
        t = 1_700_000_000
        code = engine.generate_totp("1234567890", step=3, timestamp=t)
        assert engine.verify_totp(code, "1234567890", step=3, window=1, timestamp=t + 3)

    def test_verify_outside_window(self):
        """Code from an older step fails with window=0."""
        engine = OTPEngine()
        t = 1_700_000_000
        code = engine.generate_totp("1234567890", step=3, timestamp=t)
        assert not engine.verify_totp(code, "1234567890", step=3, window=0, timestamp=t + 30)

    def test_negative_window_always_false(self):
        """A negative window gives an empty range, even for a correct code."""
        engine = OTPEngine()
        t = 1_700_000_000
        code = engine.generate_totp("1234567890", step=3, timestamp=t)
        assert not engine.verify_totp(code, "1234567890", step=3, window=-1, timestamp=t)

    def test_verify_near_epoch(self):
        """Counters below zero are skipped instead of failing."""
        code = totp(RFC4226_SECRET, timestamp=0)
        assert verify_totp(code, RFC4226_SECRET, timestamp=0)

    def test_wrong_code_rejected(self):
        t = 1_700_000_000
        real = totp("1234567890", timestamp=t)
        wrong = "000000" if real != "000000" else "111111"
        assert not verify_totp(wrong, "1234567890", timestamp=t)

    def test_invalid_format_rejected(self):
        """Wrong length or non-digit codes should fail."""
        assert not verify_totp("12345", "1234567890")
        assert not verify_totp("1234567", "1234567890")
        assert not verify_totp("abcdef", "1234567890")

    def test_whitespace_not_stripped(self):
        """Codes are compared exactly, padding included."""
        t = 1_700_000_000
        code = totp("1234567890", timestamp=t)
        assert verify_totp(code, "1234567890", timestamp=t)
        assert not verify_totp(" " + code, "1234567890", timestamp=t)
        assert not verify_totp(code + "\n", "1234567890", timestamp=t)

    def test_verify_invalid_digits_raises(self):
        with pytest.raises(ValidationError):
            verify_totp("123456", "1234567890", digits=9)

    def test_matches_pyotp(self):
        """TOTP should match pyotp for the same instant."""
        pyotp = pytest.importorskip("pyotp")
        t = 1_700_000_000
        reference = pyotp.TOTP(base32.encode(RFC4226_SECRET, padding=False))
        assert totp(RFC4226_SECRET, timestamp=t) == reference.at(t)

    def test_remaining_seconds(self):
        assert get_remaining_seconds(30, timestamp=65) == 25

    @pytest.mark.parametrize("step", [0, -30, 0.0001])
    def test_remaining_seconds_rejects_bad_step(self, step):
        with pytest.raises(ValidationError):
            get_remaining_seconds(step, timestamp=65)


class TestProvisioning:
    """Tests for authenticator app provisioning."""

    def test_provisioning_uri(self):
        """URI should carry the unpadded Base32 secret and settings."""
        uri = OTPEngine().provisioning_uri(RFC4226_SECRET, "alice@example.com", "ACME")
        assert uri.startswith("otpauth://totp/ACME%3Aalice%40example.com?")
        assert "secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ" in uri
        assert "algorithm=SHA1" in uri
        assert "digits=6" in uri
        assert "period=30" in uri
        assert "issuer=ACME" in uri

    def test_provisioning_uri_without_issuer(self):
        uri = create_otp("SHA-256", digits=8).provisioning_uri(b"k" * 20, "bob")
        assert uri.startswith("otpauth://totp/bob?")
        assert "algorithm=SHA256" in uri
        assert "issuer" not in uri

    def test_pyotp_reads_uri(self):
        """pyotp should parse our URI into an equivalent generator."""
        pyotp = pytest.importorskip("pyotp")
        engine = OTPEngine()
        parsed = pyotp.parse_uri(engine.provisioning_uri(RFC4226_SECRET, "alice", "ACME"))
        t = 1_700_000_000
        assert parsed.at(t) == engine.generate_totp(RFC4226_SECRET, timestamp=t)

    def test_qr_code_ascii(self):
        """QR rendering should return ASCII art."""
        pytest.importorskip("qrcode")
        art = OTPEngine().qr_code(RFC4226_SECRET, "alice", "ACME")
        assert isinstance(art, str)
        assert len(art) > 0
