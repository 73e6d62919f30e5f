"""
Loading Module.

Index parsing, content byte loading and the encoding policy.
"""

from .byte_loader import ByteLoader
from .decoding import decode_text
from .index import guess_encoding, load_index, parse_index

__all__ = [
    "ByteLoader",
    "decode_text",
    "guess_encoding",
    "load_index",
    "parse_index",
]
