"""
Hexadecimal text helpers for the simulator file protocol.

The simulator side reads its inputs with ``$readmemh``-style one-word-per-line
hex text and writes its outputs the same way. Bytes are written as two hex
digits of their unsigned reinterpretation; result words are 32-bit two's
complement.
"""

import re

# Prefix accepted by C's "%x": whitespace and an optional sign and 0x before
# the hex digits.
_HEX_WORD = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)")


def to_unsigned(value: int, bits: int = 8) -> int:
    """Reinterpret a signed value as an unsigned ``bits``-wide integer."""
    return int(value) & ((1 << bits) - 1)


def to_signed(value: int, bits: int = 32) -> int:
    """
    Sign extend the low ``bits`` of value.

    Example:
        >>> to_signed(0xFFFFFFFF)
        -1
        >>> to_signed(0x80, bits=8)
        -128
    """
    value = int(value) & ((1 << bits) - 1)
    if value & (1 << (bits - 1)):
        value -= 1 << bits
    return value


def format_hex_byte(value: int) -> str:
    """Two lowercase hex digits of the byte's unsigned reinterpretation."""
    return f"{to_unsigned(value, 8):02x}"


def format_hex_word(value: int, bits: int = 32) -> str:
    """Zero-padded hex of a ``bits``-wide two's complement word."""
    digits = (bits + 3) // 4
    return f"{to_unsigned(value, bits):0{digits}x}"


def parse_hex_word(text: str, bits: int = 32) -> int | None:
    """
    Parse a hex word the way ``sscanf(line, "%x", ...)`` does.

    Trailing characters after the digits are ignored. The parsed value is
    reduced to ``bits`` and returned as a signed integer. Returns None when
    the text does not start with a hex number.

    Example:
        >>> parse_hex_word("0000002a\\n")
        42
        >>> parse_hex_word("fffffffe")
        -2
        >>> parse_hex_word("xyz") is None
        True
    """
    match = _HEX_WORD.match(text)
    if match is None:
        return None
    sign, digits = match.groups()
    value = int(digits, 16)
    if sign == "-":
        value = -value
    return to_signed(value, bits)


def parse_hex_byte(text: str) -> int:
    """
    Parse one two-digit hex byte line into a signed int8 value.

    Raises:
        ValueError: if the line is not a hex byte.
    """
    token = text.strip()
    if not token or len(token) > 2:
        raise ValueError(f"not a hex byte: {text!r}")
    return to_signed(int(token, 16), 8)
