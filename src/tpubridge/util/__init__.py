"""
Utility helpers shared by the protocol layer and the reference simulator.
"""

from .hexio import (
    format_hex_byte,
    format_hex_word,
    parse_hex_byte,
    parse_hex_word,
    to_signed,
    to_unsigned,
)

__all__ = [
    "format_hex_byte",
    "format_hex_word",
    "parse_hex_byte",
    "parse_hex_word",
    "to_signed",
    "to_unsigned",
]
