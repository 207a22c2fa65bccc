"""
One-Time Password Engine

Implements HOTP (RFC 4226) and TOTP (RFC 6238).

Features:
- HOTP generation with dynamic truncation
- TOTP generation and windowed verification
- Configurable hash family (SHA-1/256/384/512), digits (1-8) and time step
- otpauth:// provisioning URIs and QR codes for authenticator apps

The HMAC itself is computed by a KeyedHashProvider (cryptography by default),
so the engine is pure arithmetic around that one call.

Used with:
- Google Authenticator
- Authy
- Microsoft Authenticator
- Any RFC 6238 compliant authenticator
"""

import hmac
import logging
import struct
import time
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import quote

from ..binary import BinaryLike, to_bytes
from ..crypto.providers import DEFAULT_HMAC_PROVIDER, HashFamily, KeyedHashProvider
from ..encoding import base32
from ..errors import ValidationError

# qrcode is optional; only needed for QR rendering
try:
    import qrcode
    from qrcode.constants import ERROR_CORRECT_L
    HAS_QRCODE = True
except ImportError:
    HAS_QRCODE = False


logger = logging.getLogger(__name__)


# OTP configuration (RFC 4226 / RFC 6238 defaults)
DEFAULT_DIGITS = 6              # Number of digits in OTP
DEFAULT_STEP = 30               # Time step in seconds
DEFAULT_WINDOW = 1              # Accept codes from +/- this many time steps
DEFAULT_HASH = HashFamily.SHA1  # Hash family for the HMAC
MIN_DIGITS = 1
MAX_DIGITS = 8

MAX_COUNTER = 2 ** 64 - 1


def _validate_digits(digits: int) -> int:
    if isinstance(digits, bool) or not isinstance(digits, int) \
            or not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise ValidationError(f"Digits must be between {MIN_DIGITS} and {MAX_DIGITS}")
    return digits


def _validate_step(step: Union[int, float]) -> Union[int, float]:
    if isinstance(step, bool) or not isinstance(step, (int, float)) or step <= 0:
        raise ValidationError("Time step must be a positive number of seconds")
    if int(round(step * 1000)) < 1:
        raise ValidationError("Time step must be at least one millisecond")
    return step


@dataclass(frozen=True)
class OtpConfig:
    """
    Immutable OTP settings shared by every call on an engine.

    Attributes:
        hash_family: HMAC hash family (SHA-1 for standard authenticator apps)
        digits: Code length, 1-8
        step: TOTP time step in seconds
    """
    hash_family: HashFamily = DEFAULT_HASH
    digits: int = DEFAULT_DIGITS
    step: Union[int, float] = DEFAULT_STEP

    def __post_init__(self):
        object.__setattr__(self, 'hash_family', HashFamily.parse(self.hash_family))
        _validate_digits(self.digits)
        _validate_step(self.step)


def counter_to_bytes(counter: int) -> bytes:
    """
    Pack a counter as an 8-byte big-endian unsigned integer.

    Raises:
        ValidationError: If the counter does not fit in 64 unsigned bits
    """
    if isinstance(counter, bool) or not isinstance(counter, int) \
            or not 0 <= counter <= MAX_COUNTER:
        raise ValidationError("Counter must be an unsigned 64-bit integer")
    return struct.pack('>Q', counter)


def dynamic_truncate(mac: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    The low nibble of the last byte selects an offset. Four bytes are read
    from there, and the top bit is cleared so the result is a non-negative
    31-bit integer.
    """
    offset = mac[-1] & 0x0F
    return (
        (mac[offset] & 0x7F) << 24
        | (mac[offset + 1] & 0xFF) << 16
        | (mac[offset + 2] & 0xFF) << 8
        | (mac[offset + 3] & 0xFF)
    )


def get_time_counter(timestamp: Optional[float] = None,
                     step: Union[int, float] = DEFAULT_STEP) -> int:
    """
    Get the TOTP counter for a moment in time.

    Args:
        timestamp: Unix timestamp in seconds (uses current time if None)
        step: Time step in seconds

    Returns:
        floor(time_ms / step_ms)
    """
    if timestamp is None:
        timestamp = time.time()
    step_ms = int(round(_validate_step(step) * 1000))
    return int(timestamp * 1000) // step_ms


def get_remaining_seconds(step: Union[int, float] = DEFAULT_STEP,
                          timestamp: Optional[float] = None) -> float:
    """Seconds until the current TOTP code rolls over."""
    step = _validate_step(step)
    if timestamp is None:
        timestamp = time.time()
    return step - (timestamp % step)


class OTPEngine:
    """
    HOTP/TOTP generator and verifier bound to one OtpConfig.

    Example:
        >>> engine = OTPEngine()
        >>> engine.generate_hotp(b"12345678901234567890", counter=0)
        '755224'
        >>> code = engine.generate_totp("secret")
        >>> engine.verify_totp(code, "secret")
        True
    """

    def __init__(self, config: Optional[OtpConfig] = None,
                 provider: Optional[KeyedHashProvider] = None):
        """
        Initialize the engine.

        Args:
            config: OTP settings (RFC defaults if None)
            provider: HMAC backend (cryptography if None)
        """
        self._config = config or OtpConfig()
        self._provider = provider or DEFAULT_HMAC_PROVIDER

    @property
    def config(self) -> OtpConfig:
        return self._config

    @property
    def digits(self) -> int:
        return self._config.digits

    @property
    def step(self) -> Union[int, float]:
        return self._config.step

    @property
    def hash_family(self) -> HashFamily:
        return self._config.hash_family

    def generate_hotp(self, secret: BinaryLike, counter: int,
                      digits: Optional[int] = None) -> str:
        """
        Generate an HOTP value (RFC 4226).

        Args:
            secret: Shared secret (str secrets are UTF-8 encoded)
            counter: Moving factor, unsigned 64-bit
            digits: Code length (engine default if None)

        Returns:
            Decimal code, zero-padded to exactly `digits` characters

        Raises:
            ValidationError: On digits outside 1-8 or a bad counter.
                Raised before any hashing.
        """
        digits = _validate_digits(self.digits if digits is None else digits)
        counter_bytes = counter_to_bytes(counter)

        mac = self._provider.sign(self.hash_family, to_bytes(secret), counter_bytes)

        code = dynamic_truncate(mac) % (10 ** digits)
        return str(code).zfill(digits)

    def generate_totp(self, secret: BinaryLike,
                      step: Optional[Union[int, float]] = None,
                      digits: Optional[int] = None,
                      timestamp: Optional[float] = None) -> str:
        """
        Generate a TOTP value (RFC 6238).

        Args:
            secret: Shared secret
            step: Time step in seconds (engine default if None)
            digits: Code length (engine default if None)
            timestamp: Unix timestamp (uses current time if None)

        Returns:
            TOTP code string
        """
        counter = get_time_counter(timestamp, self.step if step is None else step)
        return self.generate_hotp(secret, counter, digits)

    def verify_totp(self, otp: str, secret: BinaryLike,
                    step: Optional[Union[int, float]] = None,
                    digits: Optional[int] = None,
                    window: int = DEFAULT_WINDOW,
                    timestamp: Optional[float] = None) -> bool:
        """
        Verify a TOTP code, allowing for clock drift.

        Checks counters current-window .. current+window inclusive and stops
        at the first match. A negative window gives an empty range, so the
        result is always False. The candidate is compared exactly, so
        surrounding whitespace makes it fail.

        Args:
            otp: Candidate code
            secret: Shared secret
            step: Time step in seconds (engine default if None)
            digits: Expected code length (engine default if None)
            window: Number of steps to check on each side
            timestamp: Unix timestamp (uses current time if None)

        Returns:
            True if the code matches any counter in the window
        """
        digits = _validate_digits(self.digits if digits is None else digits)
        step = self.step if step is None else step
        otp = str(otp)

        if len(otp) != digits:
            return False

        current = get_time_counter(timestamp, step)

        for offset in range(-window, window + 1):
            counter = current + offset
            if counter < 0:
                continue
            expected = self.generate_hotp(secret, counter, digits)
            if hmac.compare_digest(otp.encode(), expected.encode()):
                return True

        logger.debug("TOTP code did not match within window=%d", window)
        return False

    def provisioning_uri(self, secret: BinaryLike, account_name: str,
                         issuer: Optional[str] = None) -> str:
        """
        Build an otpauth:// URI for authenticator apps.

        The secret is Base32 encoded without padding, as the key URI format
        requires.

        Args:
            secret: Shared secret
            account_name: Account label (usually an email)
            issuer: Service name shown in the app

        Returns:
            otpauth://totp/... URI string
        """
        label = f"{issuer}:{account_name}" if issuer else account_name
        params = {
            'secret': base32.encode(secret, padding=False),
            'algorithm': self.hash_family.name,
            'digits': str(self.digits),
            'period': str(self.step),
        }
        if issuer:
            params['issuer'] = issuer

        param_str = '&'.join(f"{k}={quote(str(v))}" for k, v in params.items())
        return f"otpauth://totp/{quote(label)}?{param_str}"

    def qr_code(self, secret: BinaryLike, account_name: str,
                issuer: Optional[str] = None, filename: str = None) -> Optional[str]:
        """
        Render the provisioning URI as a QR code.

        Args:
            secret: Shared secret
            account_name: Account label
            issuer: Service name
            filename: Save a PNG here instead of returning ASCII art

        Returns:
            ASCII QR code string if no filename, else None
        """
        if not HAS_QRCODE:
            raise ImportError("qrcode library required for QR generation")

        qr = qrcode.QRCode(
            version=1,
            error_correction=ERROR_CORRECT_L,
            box_size=10,
            border=4,
        )
        qr.add_data(self.provisioning_uri(secret, account_name, issuer))
        qr.make(fit=True)

        if filename:
            img = qr.make_image(fill_color="black", back_color="white")
            img.save(filename)
            return None

        from io import StringIO
        f = StringIO()
        qr.print_ascii(out=f)
        return f.getvalue()

    def __repr__(self) -> str:
        return (f"OTPEngine(hash_family={self.hash_family.value!r}, "
                f"digits={self.digits}, step={self.step})")


def create_otp(hash_family: Union[HashFamily, str] = DEFAULT_HASH,
               digits: int = DEFAULT_DIGITS,
               step: Union[int, float] = DEFAULT_STEP,
               provider: Optional[KeyedHashProvider] = None) -> OTPEngine:
    """
    Create an OTPEngine from plain settings.

        >>> engine = create_otp("SHA-256", digits=8)
    """
    return OTPEngine(OtpConfig(hash_family, digits, step), provider)


_default_engine = OTPEngine()


def hotp(secret: BinaryLike, counter: int, digits: int = DEFAULT_DIGITS) -> str:
    """HOTP with the default SHA-1 engine."""
    return _default_engine.generate_hotp(secret, counter, digits)


def totp(secret: BinaryLike, timestamp: float = None, digits: int = DEFAULT_DIGITS,
         step: Union[int, float] = DEFAULT_STEP) -> str:
    """TOTP with the default SHA-1 engine."""
    return _default_engine.generate_totp(secret, step, digits, timestamp)


def verify_totp(otp: str, secret: BinaryLike, timestamp: float = None,
                digits: int = DEFAULT_DIGITS, step: Union[int, float] = DEFAULT_STEP,
                window: int = DEFAULT_WINDOW) -> bool:
    """TOTP verification with the default SHA-1 engine."""
    return _default_engine.verify_totp(otp, secret, step, digits, window, timestamp)


# Self-test when run directly
if __name__ == "__main__":
    print("OTP Engine (RFC 4226 / RFC 6238) Test")
    print("=" * 60)

    # RFC 4226 Appendix D
    print("\n[Test 1] HOTP test vectors (RFC 4226)")
    test_secret = b"12345678901234567890"
    expected_hotp = [
        "755224", "287082", "359152", "969429", "338314",
        "254676", "287922", "162583", "399871", "520489"
    ]
    test1_pass = all(hotp(test_secret, c) == e for c, e in enumerate(expected_hotp))
    print(f"  All 10 HOTP test vectors: {'✓ PASS' if test1_pass else '✗ FAIL'}")

    # RFC 6238 Appendix B, SHA-1, 8 digits
    print("\n[Test 2] TOTP test vectors (RFC 6238)")
    engine = create_otp("SHA-1", digits=8)
    test2_pass = (engine.generate_totp(test_secret, timestamp=59) == "94287082"
                  and engine.generate_totp(test_secret, timestamp=1111111109) == "07081804")
    print(f"  Status: {'✓ PASS' if test2_pass else '✗ FAIL'}")

    print("\n[Test 3] Window verification")
    now = time.time()
    code = totp(test_secret, timestamp=now - DEFAULT_STEP)
    test3_pass = verify_totp(code, test_secret, timestamp=now) \
        and not verify_totp(code, test_secret, timestamp=now, window=-1)
    print(f"  Status: {'✓ PASS' if test3_pass else '✗ FAIL'}")

    all_passed = test1_pass and test2_pass and test3_pass
    print("\n" + "=" * 60)
    print(f"Overall: {'All tests passed!' if all_passed else 'Some tests failed!'}")
