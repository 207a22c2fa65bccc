"""
Generic bit-packing codec.

Converts between bytes and text for any alphabet whose symbols carry a fixed
number of bits (6 for Base64, 5 for Base32). Groups do not have to line up
with byte boundaries.

Encoding:
    - Shift each byte into an accumulator (+8 bits)
    - While at least group_bits are buffered, emit the top group as a symbol
    - Left-align any leftover bits (zero fill) into one final symbol
    - Optionally pad with '=' to a whole block

Decoding reverses this. A pad character ends the current block and drops
the partial byte still in the buffer.
"""

from typing import List

from ..errors import CodecError
from .alphabets import Alphabet, PAD_CHARACTER


def encode(data: bytes, alphabet: Alphabet, padding: bool = True) -> str:
    """
    Encode bytes with the given alphabet.

    Args:
        data: Raw bytes
        alphabet: Target alphabet (selects symbols and group width)
        padding: Append '=' until the output is a whole number of blocks

    Returns:
        Encoded text ('' for empty input, never padded)
    """
    symbols = alphabet.symbols
    group_bits = alphabet.group_bits
    mask = (1 << group_bits) - 1

    result: List[str] = []
    buffer = 0
    bits = 0

    for byte in data:
        buffer = (buffer << 8) | byte
        bits += 8
        while bits >= group_bits:
            bits -= group_bits
            result.append(symbols[(buffer >> bits) & mask])
        # Keep only the bits not yet emitted
        buffer &= (1 << bits) - 1

    if bits > 0:
        result.append(symbols[(buffer << (group_bits - bits)) & mask])

    if padding and result:
        block = alphabet.block_size
        pad_count = (block - len(result) % block) % block
        result.append(PAD_CHARACTER * pad_count)

    return ''.join(result)


def decode(text: str, alphabet: Alphabet) -> bytes:
    """
    Decode text produced with the given alphabet.

    Padding is optional. Trailing bits that do not fill a whole byte are
    discarded.

    Args:
        text: Encoded text
        alphabet: Alphabet the text was encoded with

    Returns:
        Decoded bytes

    Raises:
        CodecError: If a character is neither in the alphabet nor a pad
    """
    table = alphabet.decode_table
    group_bits = alphabet.group_bits

    result = bytearray()
    buffer = 0
    bits = 0

    for char in text:
        if char == PAD_CHARACTER:
            # Pad closes the block: the partial byte in the buffer is not data
            buffer = 0
            bits = 0
            continue

        value = table.get(char)
        if value is None:
            raise CodecError(f"Invalid character: {char!r}")

        buffer = (buffer << group_bits) | value
        bits += group_bits

        if bits >= 8:
            bits -= 8
            result.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1

    return bytes(result)
