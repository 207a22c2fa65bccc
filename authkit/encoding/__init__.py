# Encoding Module
"""
Binary-to-text codecs:
- Base64 (standard and url-safe, auto-detected on decode) - base64.py
- Base32 (standard and extended hex) - base32.py
- Hex - hex.py

All of them share the bit-packing engine in codec.py and the alphabet
tables in alphabets.py.
"""

from . import base32, base64, hex
from .alphabets import Alphabet, PAD_CHARACTER
from .codec import decode, encode

__all__ = [
    'Alphabet',
    'PAD_CHARACTER',
    'encode',
    'decode',
    'base64',
    'base32',
    'hex',
]
