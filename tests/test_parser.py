"""Tests for response parsing."""

import logging

import pytest

from lms111_mcp.errors import DeviceErrorResponse, UnexpectedResponseError
from lms111_mcp.protocol.commands import Command
from lms111_mcp.protocol.parser import (
    describe_laser_config_error,
    expect_keyword,
    parse_access_mode,
    parse_contamination,
    parse_response,
    parse_scan_config,
    parse_scan_output_ack,
    parse_set_scan_config,
    parse_start_measuring,
    parse_status,
    parse_stop_measuring,
)


def test_parse_response_tokens():
    response = parse_response("sRA LMPscancfg 9C4 1 9C4 FFF92230 225510")
    assert response.method == "sRA"
    assert response.keyword == "LMPscancfg"
    assert response.hex_field(2) == 2500


def test_parse_response_device_error():
    """sFA replies are device-level errors."""
    with pytest.raises(DeviceErrorResponse) as excinfo:
        parse_response("sFA 5")
    assert excinfo.value.code == 5


def test_missing_field_raises():
    response = parse_response("sAN LMCstartmeas")
    with pytest.raises(UnexpectedResponseError):
        response.decimal_field(2)


def test_expect_keyword():
    response = parse_response("sAN LMCstopmeas 0")
    assert expect_keyword(response, Command.STOP_MEASURING) is response
    with pytest.raises(UnexpectedResponseError):
        expect_keyword(response, Command.START_MEASURING)


def test_access_mode_exact_match():
    assert parse_access_mode("sAN SetAccessMode 1")
    assert not parse_access_mode("sAN SetAccessMode 0")
    assert not parse_access_mode("sAN SetAccessMode 1 extra")


def test_start_measuring_decimal_zero_only():
    assert parse_start_measuring(parse_response("sAN LMCstartmeas 0"))
    assert not parse_start_measuring(parse_response("sAN LMCstartmeas 1"))
    assert not parse_start_measuring(parse_response("sAN LMCstartmeas 10"))
    with pytest.raises(UnexpectedResponseError):
        parse_start_measuring(parse_response("sAN LMCstartmeas A"))


@pytest.mark.parametrize(
    "code, ok",
    [("0", True), ("1", False), ("2", True), ("A", True), ("10", True), ("01", False)],
)
def test_stop_measuring_hex_not_one(code, ok):
    """Stop fails only when the hex error field equals 1."""
    assert parse_stop_measuring(parse_response(f"sAN LMCstopmeas {code}")) is ok


def test_scan_config_legal_values():
    config = parse_scan_config(parse_response("sRA LMPscancfg 1388 1 9C4 FFF92230 225510"))
    assert config.scan_frequency == 5000
    assert config.angular_resolution == 2500
    assert config.is_valid


def test_scan_config_unusual_values(caplog):
    """Values outside {2500, 5000} are flagged and logged, not raised."""
    with caplog.at_level(logging.WARNING):
        config = parse_scan_config(parse_response("sRA LMPscancfg 7D0 1 1388 FFF92230 225510"))
    assert config.scan_frequency == 2000
    assert not config.is_valid
    assert [u.name for u in config.unusual] == ["scan_frequency"]
    assert "Unusual scan frequency" in caplog.text


def test_set_scan_config_code_is_hex():
    assert parse_set_scan_config(parse_response("sAN mLMPsetscancfg 0 1388 1 9C4")) == 0
    assert parse_set_scan_config(parse_response("sAN mLMPsetscancfg A 1388 1 9C4")) == 10


@pytest.mark.parametrize(
    "code, message",
    [
        (0, None),
        (1, "invalid frequency"),
        (2, "invalid angular resolution"),
        (3, "invalid frequency and angular resolution"),
        (4, "invalid scan area"),
        (5, "other error"),
        (0x1F, "other error"),
    ],
)
def test_describe_laser_config_error(code, message):
    assert describe_laser_config_error(code) == message


def test_scan_output_ack():
    assert parse_scan_output_ack("sWA LMDscandatacfg")
    assert not parse_scan_output_ack("sWA LMDscandatacfg 1")
    assert not parse_scan_output_ack("sFA 2")


def test_parse_status():
    status = parse_status(parse_response("sRA STlms 7 0 8 16:05:26 A 10.01.2012 0 0 0"))
    assert status.operating_status == 7
    assert status.temperature_good
    assert status.is_scannable
    assert status.time_text == "16:05:26"


def test_parse_contamination():
    assert parse_contamination(parse_response("sRA LCMstate 2")) == 2


def test_parse_status_missing_fields():
    with pytest.raises(UnexpectedResponseError):
        parse_status(parse_response("sRA STlms"))
    with pytest.raises(UnexpectedResponseError):
        parse_status(parse_response("sRA STlms 7 X"))
