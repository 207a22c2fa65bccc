# Crypto Module
"""
Boundaries to the external crypto backend:
- Keyed-hash (HMAC) and digest providers - providers.py
- Encoded digest/MAC outputs - output.py

Nothing in authkit implements a hash function. Everything goes through
a provider object, and the default one uses `cryptography`.
"""

from .providers import (
    HashFamily,
    KeyedHashProvider,
    DigestProvider,
    CryptographyHmacProvider,
    CryptographyDigestProvider,
    DEFAULT_HMAC_PROVIDER,
    DEFAULT_DIGEST_PROVIDER,
)

from .output import (
    OutputEncoding,
    RawOutput,
    HexOutput,
    Base64Output,
    encode_output,
    digest,
    hmac_sign,
    hmac_verify,
)

__all__ = [
    # Providers
    'HashFamily',
    'KeyedHashProvider',
    'DigestProvider',
    'CryptographyHmacProvider',
    'CryptographyDigestProvider',
    'DEFAULT_HMAC_PROVIDER',
    'DEFAULT_DIGEST_PROVIDER',
    # Outputs
    'OutputEncoding',
    'RawOutput',
    'HexOutput',
    'Base64Output',
    'encode_output',
    'digest',
    'hmac_sign',
    'hmac_verify',
]
