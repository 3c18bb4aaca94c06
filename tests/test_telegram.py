"""Tests for the scan telegram decoder."""

import pytest

from lms111_mcp.errors import DecodeError, MalformedTelegramError
from lms111_mcp.models.scan import Channel, DeviceStatus, ScanTelegram
from lms111_mcp.protocol.telegram import TokenCursor, decode, decode_split

HEADER = "sRA LMDscandata 1 1 89A27F 0 {status} 343 347 27477BA9 2747813B 0 0 7 0 0 1388 168 0 1"
CHANNEL_HEAD = "3F800000 00000000 FFF92230"


def _telegram(*channels, status="0"):
    parts = [HEADER.format(status=status)]
    for keyword, step, values, count in channels:
        parts.append(keyword)
        parts.append(CHANNEL_HEAD)
        parts.append(step)
        parts.append(count if count is not None else format(len(values), "X"))
        parts.extend(values)
    parts.append("0 0 0 0 0 0")
    return " ".join(parts)


def test_decode_end_to_end_dist1():
    """Status 0, step width 3F, three range values."""
    raw = _telegram(("DIST1", "3F", ["0064", "00C8", "0096"], "0003"))
    scan = decode(raw)
    assert scan.device_status is DeviceStatus.OK
    assert scan.angular_step_width == 63
    assert scan.range1 == (100, 200, 150)
    assert scan.remission1 is None
    assert scan.raw == raw


def test_decode_dist1_and_rssi1():
    """Arrays have the declared length and match their hex sources."""
    dists = ["01F4", "0", "FFFF", "1A2B", "64"]
    rssi = ["FE", "F0", "E0", "0", "1"]
    scan = decode(_telegram(("DIST1", "D05", dists, None), ("RSSI1", "D05", rssi, None)))
    assert scan.range1 == tuple(int(v, 16) for v in dists)
    assert scan.remission1 == tuple(int(v, 16) for v in rssi)
    assert scan.range1[0] == 500
    assert len(scan) == 5
    assert scan.angular_step_width == 3333
    assert set(scan.channels) == {Channel.RANGE1, Channel.REMISSION1}


def test_decode_all_four_channels():
    values = ["1", "2"]
    raw = _telegram(
        ("DIST1", "1388", values, None),
        ("DIST2", "1388", values, None),
        ("RSSI1", "1388", values, None),
        ("RSSI2", "1388", values, None),
    )
    scan = decode(raw)
    assert scan.range2 == (1, 2)
    assert scan.remission2 == (1, 2)
    assert scan.angular_step_width == 5000


def test_decode_without_channels():
    """No channel keyword still decodes, with nothing populated."""
    scan = decode(HEADER.format(status="0"))
    assert scan.device_status is DeviceStatus.OK
    assert scan.channels == {}
    assert scan.range1 is None
    assert not scan.has_range
    assert scan.angular_step_width is None
    assert len(scan) == 0


@pytest.mark.parametrize(
    "token, status",
    [("0", DeviceStatus.OK), ("1", DeviceStatus.ERROR),
     ("2", DeviceStatus.CONTAMINATION_WARNING), ("4", DeviceStatus.CONTAMINATION_ERROR)],
)
def test_decode_device_status(token, status):
    assert decode(HEADER.format(status=token)).device_status is status


def test_decode_unknown_status():
    with pytest.raises(MalformedTelegramError):
        decode(HEADER.format(status="3"))


def test_decode_count_exceeds_remaining():
    """A count larger than the remaining fields is a truncated telegram."""
    raw = HEADER.format(status="0") + " DIST1 " + CHANNEL_HEAD + " D05 5 64 C8 96"
    with pytest.raises(MalformedTelegramError) as excinfo:
        decode(raw)
    assert excinfo.value.raw == raw


def test_decode_non_hex_value():
    raw = _telegram(("DIST1", "D05", ["64", "ZZ", "96"], None))
    with pytest.raises(MalformedTelegramError):
        decode(raw)


def test_decode_missing_count_field():
    raw = HEADER.format(status="0") + " DIST1 " + CHANNEL_HEAD + " D05"
    with pytest.raises(MalformedTelegramError):
        decode(raw)


def test_decode_short_header():
    with pytest.raises(MalformedTelegramError):
        decode("sRA LMDscandata 1 1")


def test_decode_unequal_channels():
    """Channels in one telegram must have the same sample count."""
    raw = _telegram(("DIST1", "D05", ["1", "2", "3"], None), ("RSSI1", "D05", ["1", "2"], None))
    with pytest.raises(MalformedTelegramError):
        decode(raw)


def test_decode_error_is_value_error():
    with pytest.raises(ValueError):
        decode("")
    assert issubclass(MalformedTelegramError, DecodeError)


def test_token_cursor():
    cursor = TokenCursor(["A", "DIST1", "3", "1", "2", "3"])
    assert cursor.seek("DIST1")
    assert cursor.position == 1
    cursor.skip(1)
    count = cursor.next_hex()
    assert cursor.take_hex(count) == (1, 2, 3)
    assert cursor.remaining == 0
    assert not cursor.seek("RSSI1")
    with pytest.raises(MalformedTelegramError):
        cursor.next_token()


def test_decode_split():
    scan = decode_split("0000000 64 C8 96", "0000000 FE F0 E0", 90)
    assert scan.range1 == (100, 200, 150)
    assert scan.remission1 == (254, 240, 224)
    assert scan.device_status is None
    assert scan.angular_step_width == 900000


def test_decode_split_half_degree():
    values = " ".join(["1F4"] * 540)
    scan = decode_split("0 " + values, "0 " + values, 0.5)
    assert len(scan) == 540
    assert scan.angular_step_width == 5000


def test_decode_split_count_mismatch():
    with pytest.raises(MalformedTelegramError):
        decode_split("0000000 64 C8", "0000000 FE F0 E0", 90)
    with pytest.raises(MalformedTelegramError):
        decode_split("0000000 64 C8 96", "", 90)


def test_scan_from_arrays_requires_equal_length():
    with pytest.raises(ValueError):
        ScanTelegram.from_arrays([1, 2], [1])
    scan = ScanTelegram.from_arrays([1, 2], [3, 4])
    assert scan.to_dict()["samples"] == 2
    assert "Range: 1 2" in str(scan)


def test_scan_is_immutable():
    scan = ScanTelegram.from_arrays([1], [2])
    with pytest.raises(AttributeError):
        scan.range1 = (5,)
