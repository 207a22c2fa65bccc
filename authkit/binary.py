"""
Binary input normalisation.

Codec, signing and OTP entry points take either text or raw bytes. The two
cases are modelled as a tagged union (Text | Bytes). to_bytes() converts
a value to bytes once, at the entry point.

    >>> to_bytes(Text("hi"))
    b'hi'
    >>> to_bytes(b"hi")
    b'hi'
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Text:
    """Text input, encoded as UTF-8."""
    value: str

    def to_bytes(self) -> bytes:
        return self.value.encode('utf-8')


@dataclass(frozen=True)
class Bytes:
    """Raw byte input."""
    value: bytes

    def to_bytes(self) -> bytes:
        return bytes(self.value)


BinaryInput = Union[Text, Bytes]

# Anything a public entry point accepts
BinaryLike = Union[Text, Bytes, str, bytes, bytearray, memoryview]


def as_binary(data: BinaryLike) -> BinaryInput:
    """
    Wrap a bare str or bytes-like value in the BinaryInput union.

    Values that are already Text or Bytes are returned unchanged.

    Args:
        data: Text, Bytes, str or any bytes-like object

    Returns:
        Text or Bytes
    """
    if isinstance(data, (Text, Bytes)):
        return data
    if isinstance(data, str):
        return Text(data)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return Bytes(bytes(data))
    raise TypeError(f"Expected str or bytes-like input, got {type(data).__name__}")


def to_bytes(data: BinaryLike) -> bytes:
    """Normalise any accepted input to bytes."""
    return as_binary(data).to_bytes()
