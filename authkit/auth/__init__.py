# Authentication Module
"""
Authentication protocols built on the codecs and keyed-hash providers:
- HOTP/TOTP (RFC 4226 / RFC 6238) - otp.py
- HMAC-SHA256 signed cookies - cookies.py

Security features:
- Constant-time comparison for OTP and signature checks
- Untrusted cookie headers are parsed best-effort, never raising
- RFC 6265bis attribute limits enforced before serialization
"""

from .otp import (
    OtpConfig,
    OTPEngine,
    create_otp,
    hotp,
    totp,
    verify_totp,
    get_time_counter,
    get_remaining_seconds,
)

from .cookies import (
    SameSite,
    CookieAttributes,
    ParsedSetCookie,
    CookieSigner,
    serialize_cookie,
    verify_signed_cookie,
    parse_cookies,
    parse_set_cookies,
    get_cookie,
    sign_value,
)

__all__ = [
    # OTP
    'OtpConfig',
    'OTPEngine',
    'create_otp',
    'hotp',
    'totp',
    'verify_totp',
    'get_time_counter',
    'get_remaining_seconds',
    # Cookies
    'SameSite',
    'CookieAttributes',
    'ParsedSetCookie',
    'CookieSigner',
    'serialize_cookie',
    'verify_signed_cookie',
    'parse_cookies',
    'parse_set_cookies',
    'get_cookie',
    'sign_value',
]
