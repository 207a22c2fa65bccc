"""
authkit - building blocks for authentication subsystems.

Modules:
  - encoding: Base64 / Base32 / hex codecs
  - crypto:   keyed-hash and digest provider interfaces
  - auth:     HOTP/TOTP engine and signed cookies
"""

from .errors import AuthKitError, ValidationError, CodecError, PolicyError, ProviderError

__version__ = "0.3.0"

__all__ = [
    'AuthKitError',
    'ValidationError',
    'CodecError',
    'PolicyError',
    'ProviderError',
    '__version__',
]
