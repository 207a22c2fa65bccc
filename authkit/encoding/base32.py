"""
Base32 encoding (RFC 4648 sections 6 and 7).

Two alphabets are supported: the standard one ("A-Z2-7") and the
hex-ordered one ("0-9A-V"). Callers choose the alphabet explicitly. Unlike
Base64 there is no auto-detection, because the two alphabets share most
symbols.
"""

from ..binary import BinaryLike, to_bytes
from . import codec
from .alphabets import Alphabet


def get_alphabet(hex: bool = False) -> Alphabet:
    return Alphabet.BASE32_HEX if hex else Alphabet.BASE32_STANDARD


def encode(data: BinaryLike, hex: bool = False, padding: bool = True) -> str:
    """
    Encode data as Base32.

    Args:
        data: str (UTF-8) or bytes-like input
        hex: Use the extended hex alphabet
        padding: Append '=' to a multiple of 8 characters

    Returns:
        Base32 text
    """
    return codec.encode(to_bytes(data), get_alphabet(hex), padding)


def decode(text: str, hex: bool = False, casefold: bool = False) -> bytes:
    """
    Decode Base32 text.

    Args:
        text: Base32 text, padded or not
        hex: Text uses the extended hex alphabet
        casefold: Accept lowercase input (authenticator apps often emit it)

    Returns:
        Decoded bytes

    Raises:
        CodecError: On a character outside the alphabet
    """
    if casefold:
        text = text.upper()
    return codec.decode(text, get_alphabet(hex))


def encode_hex(data: BinaryLike, padding: bool = True) -> str:
    """Shorthand for encode(data, hex=True)."""
    return encode(data, hex=True, padding=padding)


def decode_hex(text: str) -> bytes:
    """Shorthand for decode(text, hex=True)."""
    return decode(text, hex=True)
