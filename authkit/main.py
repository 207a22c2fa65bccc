"""
authkit - Main Entry Point
Prints a short walkthrough of the codecs, OTP engine and signed cookies.
"""

import time

from .auth.cookies import CookieAttributes, SameSite, get_cookie, serialize_cookie
from .auth.otp import create_otp
from .encoding import base32, base64


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "=" * 50)
    print(f"  {title}")
    print("=" * 50)


def main():
    """Main entry point for authkit."""
    print_header("authkit")
    print("\nAvailable modules:")
    print("  - Encoding (Base64, Base32, hex)")
    print("  - OTP (HOTP / TOTP)")
    print("  - Signed Cookies")

    print_header("Encoding")
    sample = "Hello, World!"
    print(f"  base64:     {base64.encode(sample)}")
    print(f"  base64url:  {base64.encode(sample, url_safe=True, padding=False)}")
    print(f"  base32:     {base32.encode(sample)}")
    print(f"  base32hex:  {base32.encode(sample, hex=True)}")

    print_header("OTP")
    engine = create_otp()
    secret = b"12345678901234567890"
    code = engine.generate_totp(secret)
    print(f"  HOTP(counter=0): {engine.generate_hotp(secret, 0)}")
    print(f"  TOTP now:        {code}")
    print(f"  verified:        {engine.verify_totp(code, secret)}")
    print(f"  uri:             {engine.provisioning_uri(secret, 'alice@example.com', 'authkit')}")

    print_header("Signed Cookies")
    header = serialize_cookie(
        "__Host-session", "user-42",
        CookieAttributes(http_only=True, same_site=SameSite.LAX, max_age=3600),
        signing_key="demo-key",
    )
    print(f"  Set-Cookie: {header}")
    request_header = header.split(";")[0]
    print(f"  read back:  {get_cookie(request_header, '__Host-session', 'demo-key')}")
    print(f"  tampered:   {get_cookie(request_header.replace('user-42', 'user-43'), '__Host-session', 'demo-key')}")
    print(f"\n  generated at {time.strftime('%Y-%m-%d %H:%M:%S')}\n")


if __name__ == "__main__":
    main()
