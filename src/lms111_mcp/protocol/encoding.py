"""Numeric field encodings used by the CoLa-A command set.

Numbers on the wire come in two flavours and the base is decided per
field, not per telegram:

- signed decimal with an explicit sign, e.g. ``+2500`` or ``-450000``
- unsigned hexadecimal without a sign, e.g. ``9C4``
"""

from __future__ import annotations

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
MAX_HEX_DIGITS = 8  # 32-bit unsigned


def _check_int(value) -> None:
    # bool is an int subclass but never a valid numeric field
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Numeric fields must be integers, got {value!r}")


def format_signed(value: int) -> str:
    """Render an integer as signed decimal, with ``+`` for non-negative values."""
    _check_int(value)
    if value >= 0:
        return f"+{value}"
    return str(value)


def format_hex(value: int, width: int = 2) -> str:
    """Render a non-negative integer as zero-padded upper-case hex."""
    _check_int(value)
    if value < 0:
        raise ValueError(f"Hex fields are unsigned, got {value}")
    return f"{value:0{width}X}"


def parse_hex(token: str) -> int:
    """Decode an unsigned hex field of up to 32 bits.

    Raises:
        ValueError: If the token is empty, too long, or contains a
            non-hex character. ``int(token, 16)`` alone would also accept
            signs, ``0x`` prefixes and underscores.
    """
    if not token or len(token) > MAX_HEX_DIGITS:
        raise ValueError(f"Invalid hex field {token!r}")
    value = 0
    for char in token:
        if char not in HEX_DIGITS:
            raise ValueError(f"Invalid hex field {token!r}")
        value = (value << 4) | int(char, 16)
    return value


def parse_decimal(token: str) -> int:
    """Decode a decimal field, with or without an explicit sign."""
    body = token[1:] if token[:1] in ("+", "-") else token
    if not body.isdigit() or not body.isascii():
        raise ValueError(f"Invalid decimal field {token!r}")
    return int(token)
