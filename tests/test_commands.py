"""Tests for command builders."""

import pytest

from lms111_mcp.protocol.commands import (
    CLIENT_LEVEL,
    CLIENT_PASSWORD,
    START_ANGLE,
    STOP_ANGLE,
    Command,
    build_command,
    build_configure_scan_output,
    build_default_scan_output,
    build_request_scan,
    build_set_access_mode,
    build_set_scan_config,
    build_start_measuring,
    build_stop_measuring,
    scan_output_params,
)


def test_command_keywords():
    """Keywords are what the device echoes back."""
    assert Command.SET_ACCESS_MODE.keyword == "SetAccessMode"
    assert Command.REQUEST_SCAN.keyword == "LMDscandata"
    assert Command.SET_SCAN_CONFIG.keyword == "mLMPsetscancfg"


def test_fixed_scan_area():
    assert START_ANGLE == -450000
    assert STOP_ANGLE == 2250000


def test_build_set_access_mode_default():
    """Client login uses level 3 and the fixed client password."""
    assert CLIENT_LEVEL == 3
    assert build_set_access_mode() == f"sMN SetAccessMode 3 {CLIENT_PASSWORD}".encode()


def test_build_simple_commands():
    assert build_start_measuring() == b"sMN LMCstartmeas"
    assert build_stop_measuring() == b"sMN LMCstopmeas"
    assert build_request_scan() == b"sRN LMDscandata"


def test_build_set_scan_config():
    """Numeric parameters are signed decimal with explicit sign."""
    assert (
        build_set_scan_config(5000, 2500)
        == b"sMN mLMPsetscancfg +5000 +1 +2500 -450000 +2250000"
    )


def test_default_scan_output_matches_documented_string():
    assert (
        build_default_scan_output()
        == b"sWN LMDscandatacfg 03 00 1 1 0 00 00 0 0 0 0 +1"
    )


def test_configure_scan_output_flags():
    payload = build_configure_scan_output(
        output_channel=1,
        remission=False,
        resolution=False,
        encoder=1,
        position=True,
        device_name=True,
        comment=False,
        time=True,
        output_interval=5,
    )
    assert payload == b"sWN LMDscandatacfg 01 00 0 0 0 01 00 1 1 0 1 +5"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"output_channel": 0},
        {"output_channel": 4},
        {"encoder": 256},
        {"output_interval": 0},
    ],
)
def test_scan_output_bounds(kwargs):
    """Out-of-range selectors should raise."""
    with pytest.raises(ValueError):
        scan_output_params(**kwargs)


def test_build_command_rejects_bad_tokens():
    """Tokens with spaces, control bytes or nothing in them are refused."""
    with pytest.raises(ValueError):
        build_command(Command.QUERY_STATUS, "a b")
    with pytest.raises(ValueError):
        build_command(Command.QUERY_STATUS, "")
    with pytest.raises(ValueError):
        build_command(Command.QUERY_STATUS, "\x03")


@pytest.mark.parametrize(
    "scan_freq, angular_res",
    [(2500.5, 2500), (5000, True), ("5000", 2500)],
)
def test_set_scan_config_rejects_non_integers(scan_freq, angular_res):
    with pytest.raises(ValueError):
        build_set_scan_config(scan_freq, angular_res)


def test_scan_output_rejects_non_integers():
    with pytest.raises(ValueError):
        scan_output_params(output_interval=1.5)
    with pytest.raises(ValueError):
        scan_output_params(encoder=False)
