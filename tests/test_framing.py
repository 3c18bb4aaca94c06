"""Tests for message framing and numeric field encodings."""

import pytest

from lms111_mcp.protocol.encoding import (
    format_hex,
    format_signed,
    parse_decimal,
    parse_hex,
)
from lms111_mcp.protocol.framing import ETX, PAD, STX, build_frame


def test_build_frame_layout():
    """Frame is STX, body, ETX, then one pad byte."""
    frame = build_frame(b"sRN LMPscancfg")
    assert frame[0] == STX
    assert frame[1:-2] == b"sRN LMPscancfg"
    assert frame[-2] == ETX
    assert frame[-1] == PAD


def test_build_frame_exact_bytes():
    assert build_frame(b"sMN LMCstartmeas") == b"\x02sMN LMCstartmeas\x03\x00"


def test_build_frame_rejects_control_bytes():
    """Bodies must not contain the framing control bytes."""
    with pytest.raises(ValueError):
        build_frame(b"sRN \x03LMPscancfg")
    with pytest.raises(ValueError):
        build_frame(b"sRN \x00")


def test_format_signed_non_negative():
    """Non-negative values always carry an explicit plus sign."""
    assert format_signed(0) == "+0"
    assert format_signed(2500) == "+2500"
    assert format_signed(2250000) == "+2250000"


def test_format_signed_negative():
    assert format_signed(-450000) == "-450000"
    assert format_signed(-1) == "-1"


def test_format_hex():
    assert format_hex(3) == "03"
    assert format_hex(255) == "FF"
    assert format_hex(2500, width=4) == "09C4"
    with pytest.raises(ValueError):
        format_hex(-1)


def test_parse_hex_values():
    assert parse_hex("01F4") == 500
    assert parse_hex("D05") == 3333
    assert parse_hex("9c4") == 2500
    assert parse_hex("FFFFFFFF") == 0xFFFFFFFF


@pytest.mark.parametrize("token", ["", "G1", "0x1F", "+1F", "1_0", "123456789", "-1"])
def test_parse_hex_rejects(token):
    """Only 1-8 plain hex digits are accepted."""
    with pytest.raises(ValueError):
        parse_hex(token)


def test_parse_decimal():
    assert parse_decimal("0") == 0
    assert parse_decimal("+12") == 12
    assert parse_decimal("-7") == -7
    with pytest.raises(ValueError):
        parse_decimal("A")
    with pytest.raises(ValueError):
        parse_decimal("+")


@pytest.mark.parametrize("value", [2500.5, 1.0, True, False, "1", None])
def test_numeric_fields_require_int(value):
    """Floats, bools and strings are not valid numeric fields."""
    with pytest.raises(ValueError):
        format_signed(value)
    with pytest.raises(ValueError):
        format_hex(value)
