"""
Base64 encoding (RFC 4648 sections 4 and 5).

Encoding uses the standard alphabet unless url_safe is requested.
Decoding picks the alphabet from the input: text containing '-' or '_'
is decoded as url-safe, anything else as standard.
"""

from ..binary import BinaryLike, to_bytes
from . import codec
from .alphabets import Alphabet


def get_alphabet(url_safe: bool = False) -> Alphabet:
    """Return the standard or url-safe Base64 alphabet."""
    return Alphabet.BASE64_URL_SAFE if url_safe else Alphabet.BASE64_STANDARD


def detect_alphabet(text: str) -> Alphabet:
    """Pick the url-safe alphabet if the text uses '-' or '_'."""
    return get_alphabet('-' in text or '_' in text)


def encode(data: BinaryLike, url_safe: bool = False, padding: bool = True) -> str:
    """
    Encode data as Base64.

    Args:
        data: str (UTF-8) or bytes-like input
        url_safe: Use '-' and '_' instead of '+' and '/'
        padding: Append '=' to a multiple of 4 characters

    Returns:
        Base64 text
    """
    return codec.encode(to_bytes(data), get_alphabet(url_safe), padding)


def decode(text: str) -> bytes:
    """
    Decode Base64 text, padded or not, in either alphabet.

    Raises:
        CodecError: On a character outside the detected alphabet
    """
    return codec.decode(text, detect_alphabet(text))


def decode_text(text: str, encoding: str = 'utf-8') -> str:
    """Decode Base64 text and interpret the bytes as a string."""
    return decode(text).decode(encoding)


def urlsafe_encode(data: BinaryLike) -> str:
    """Url-safe Base64 without padding (the form used for cookie signatures)."""
    return encode(data, url_safe=True, padding=False)
