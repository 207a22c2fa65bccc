"""
Keyed-hash and digest providers.

The OTP engine and the cookie signer do not call a crypto library directly.
They are given a provider object with a single method:

    KeyedHashProvider.sign(hash_family, key, message) -> bytes
    DigestProvider.digest(hash_family, message) -> bytes

The defaults wrap the `cryptography` package. Any object with the same
method can be used instead, for example an HSM adapter or a test double.
Errors raised by a caller-supplied provider are not wrapped.
"""

import logging
from enum import Enum
from typing import Protocol, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac

from ..errors import ProviderError, ValidationError


logger = logging.getLogger(__name__)


class HashFamily(Enum):
    """Hash functions supported for HMAC and digests."""
    SHA1 = 'SHA-1'
    SHA256 = 'SHA-256'
    SHA384 = 'SHA-384'
    SHA512 = 'SHA-512'

    @classmethod
    def parse(cls, value: Union['HashFamily', str]) -> 'HashFamily':
        """
        Accept a HashFamily or a name such as 'SHA-1', 'sha256' or 'SHA512'.

        Raises:
            ValidationError: If the name is not a supported hash family
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).upper().replace('-', '').replace('_', '')
        for family in cls:
            if family.name == normalized:
                return family
        raise ValidationError(f"Unsupported hash family: {value}")

    @property
    def digest_size(self) -> int:
        return _ALGORITHMS[self]().digest_size


_ALGORITHMS = {
    HashFamily.SHA1: hashes.SHA1,
    HashFamily.SHA256: hashes.SHA256,
    HashFamily.SHA384: hashes.SHA384,
    HashFamily.SHA512: hashes.SHA512,
}


class KeyedHashProvider(Protocol):
    def sign(self, hash_family: HashFamily, key: bytes, message: bytes) -> bytes:
        ...


class DigestProvider(Protocol):
    def digest(self, hash_family: HashFamily, message: bytes) -> bytes:
        ...


def _algorithm(hash_family: HashFamily) -> hashes.HashAlgorithm:
    try:
        return _ALGORITHMS[HashFamily.parse(hash_family)]()
    except ValidationError as e:
        raise ProviderError(str(e)) from e


class CryptographyHmacProvider:
    """HMAC provider backed by cryptography.hazmat.primitives.hmac."""

    def sign(self, hash_family: HashFamily, key: bytes, message: bytes) -> bytes:
        """
        Compute HMAC(key, message) with the given hash family.

        Args:
            hash_family: SHA-1, SHA-256, SHA-384 or SHA-512
            key: Secret key bytes
            message: Message bytes

        Returns:
            Raw MAC bytes

        Raises:
            ProviderError: If the backend cannot compute the MAC
        """
        try:
            h = hmac.HMAC(key, _algorithm(hash_family))
            h.update(message)
            return h.finalize()
        except UnsupportedAlgorithm as e:
            logger.error("HMAC backend rejected %s", hash_family)
            raise ProviderError(f"HMAC backend does not support {hash_family}") from e


class CryptographyDigestProvider:
    """Message digest provider backed by cryptography.hazmat.primitives.hashes."""

    def digest(self, hash_family: HashFamily, message: bytes) -> bytes:
        try:
            h = hashes.Hash(_algorithm(hash_family))
            h.update(message)
            return h.finalize()
        except UnsupportedAlgorithm as e:
            logger.error("Digest backend rejected %s", hash_family)
            raise ProviderError(f"Digest backend does not support {hash_family}") from e


# Shared stateless defaults
DEFAULT_HMAC_PROVIDER = CryptographyHmacProvider()
DEFAULT_DIGEST_PROVIDER = CryptographyDigestProvider()
