"""
Encoded outputs for digests and MACs.

A digest or MAC can be returned as raw bytes, hex text, or one of the Base64
forms. The caller picks the form with OutputEncoding, and the result is one
of three explicit types:

    RawOutput(value: bytes)
    HexOutput(value: str)
    Base64Output(value: str, encoding: OutputEncoding)

so the result type never has to be guessed from a string argument.
"""

import hmac as _hmac
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..binary import BinaryLike, to_bytes
from ..encoding import base64, hex
from .providers import (
    DEFAULT_DIGEST_PROVIDER,
    DEFAULT_HMAC_PROVIDER,
    DigestProvider,
    HashFamily,
    KeyedHashProvider,
)


class OutputEncoding(Enum):
    RAW = 'raw'
    HEX = 'hex'
    BASE64 = 'base64'
    BASE64URL = 'base64url'
    BASE64URL_NOPAD = 'base64urlnopad'


@dataclass(frozen=True)
class RawOutput:
    value: bytes

    def to_bytes(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class HexOutput:
    value: str

    def to_bytes(self) -> bytes:
        return hex.decode(self.value)


@dataclass(frozen=True)
class Base64Output:
    value: str
    encoding: OutputEncoding = OutputEncoding.BASE64

    def to_bytes(self) -> bytes:
        return base64.decode(self.value)


EncodedOutput = Union[RawOutput, HexOutput, Base64Output]


def encode_output(raw: bytes, encoding: OutputEncoding = OutputEncoding.RAW) -> EncodedOutput:
    """
    Wrap raw bytes in the requested output form.

    Args:
        raw: Digest or MAC bytes
        encoding: Requested representation

    Returns:
        RawOutput, HexOutput or Base64Output
    """
    encoding = OutputEncoding(encoding)
    if encoding is OutputEncoding.RAW:
        return RawOutput(raw)
    if encoding is OutputEncoding.HEX:
        return HexOutput(hex.encode(raw))
    if encoding is OutputEncoding.BASE64:
        return Base64Output(base64.encode(raw), encoding)
    if encoding is OutputEncoding.BASE64URL:
        return Base64Output(base64.encode(raw, url_safe=True), encoding)
    return Base64Output(base64.encode(raw, url_safe=True, padding=False), encoding)


def digest(data: BinaryLike,
           hash_family: Union[HashFamily, str] = HashFamily.SHA256,
           encoding: OutputEncoding = OutputEncoding.RAW,
           provider: Optional[DigestProvider] = None) -> EncodedOutput:
    """
    Hash data with the selected family.

        >>> digest("abc", "SHA-256", OutputEncoding.HEX).value[:16]
        'ba7816bf8f01cfea'
    """
    provider = provider or DEFAULT_DIGEST_PROVIDER
    raw = provider.digest(HashFamily.parse(hash_family), to_bytes(data))
    return encode_output(raw, encoding)


def hmac_sign(key: BinaryLike, data: BinaryLike,
              hash_family: Union[HashFamily, str] = HashFamily.SHA256,
              encoding: OutputEncoding = OutputEncoding.RAW,
              provider: Optional[KeyedHashProvider] = None) -> EncodedOutput:
    """
    Compute HMAC(key, data).

    Args:
        key: Secret key (str keys are UTF-8 encoded)
        data: Message to authenticate
        hash_family: Hash family, SHA-256 by default
        encoding: Output representation
        provider: Keyed-hash backend (cryptography by default)

    Returns:
        The MAC in the requested representation
    """
    provider = provider or DEFAULT_HMAC_PROVIDER
    raw = provider.sign(HashFamily.parse(hash_family), to_bytes(key), to_bytes(data))
    return encode_output(raw, encoding)


def hmac_verify(key: BinaryLike, data: BinaryLike,
                signature: Union[EncodedOutput, bytes],
                hash_family: Union[HashFamily, str] = HashFamily.SHA256,
                provider: Optional[KeyedHashProvider] = None) -> bool:
    """
    Check a MAC in constant time.

    The signature can be raw bytes or any EncodedOutput. A signature that
    cannot be decoded counts as a mismatch.
    """
    try:
        expected_sig = signature.to_bytes() if hasattr(signature, 'to_bytes') else bytes(signature)
    except ValueError:
        return False
    actual = hmac_sign(key, data, hash_family, OutputEncoding.RAW, provider).value
    return _hmac.compare_digest(actual, expected_sig)
