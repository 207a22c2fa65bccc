"""
Alphabets for the binary-to-text codecs.

Each alphabet knows its symbols, its group width (bits per symbol) and its
block size (symbols per padded block). The reverse lookup table (symbol to
index) is built the first time it is needed and then shared by every caller.
It is a read-only mapping and is never modified.
"""

import functools
from enum import Enum
from types import MappingProxyType
from typing import Mapping


PAD_CHARACTER = '='

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"
_DIGITS = "0123456789"


class Alphabet(Enum):
    """Supported alphabets as (symbols, group_bits)."""

    BASE64_STANDARD = (_UPPER + _LOWER + _DIGITS + "+/", 6)
    BASE64_URL_SAFE = (_UPPER + _LOWER + _DIGITS + "-_", 6)
    BASE32_STANDARD = (_UPPER + "234567", 5)
    BASE32_HEX = (_DIGITS + "ABCDEFGHIJKLMNOPQRSTUV", 5)

    def __init__(self, symbols: str, group_bits: int):
        self.symbols = symbols
        self.group_bits = group_bits

    @property
    def block_size(self) -> int:
        """Number of symbols in one padded block (4 for Base64, 8 for Base32)."""
        # lcm(8, group_bits) / group_bits
        return 4 if self.group_bits == 6 else 8

    @property
    def decode_table(self) -> Mapping[str, int]:
        return _decode_table(self)


@functools.lru_cache(maxsize=None)
def _decode_table(alphabet: Alphabet) -> Mapping[str, int]:
    table = {symbol: index for index, symbol in enumerate(alphabet.symbols)}
    return MappingProxyType(table)
