"""Base16 (hex) encoding."""

from ..binary import BinaryLike, to_bytes
from ..errors import CodecError


_HEX_DIGITS = "0123456789abcdef"


def encode(data: BinaryLike, uppercase: bool = False) -> str:
    """Encode data as two hex digits per byte."""
    digits = _HEX_DIGITS.upper() if uppercase else _HEX_DIGITS
    return ''.join(digits[byte >> 4] + digits[byte & 0x0F] for byte in to_bytes(data))


def decode(text: str) -> bytes:
    """
    Decode hex text (either case).

    Raises:
        CodecError: On odd length or a non-hex character
    """
    if len(text) % 2 != 0:
        raise CodecError("Hex string must have an even length")

    result = bytearray()
    for i in range(0, len(text), 2):
        high = _HEX_DIGITS.find(text[i].lower())
        low = _HEX_DIGITS.find(text[i + 1].lower())
        if high < 0:
            raise CodecError(f"Invalid character: {text[i]!r}")
        if low < 0:
            raise CodecError(f"Invalid character: {text[i + 1]!r}")
        result.append((high << 4) | low)
    return bytes(result)
