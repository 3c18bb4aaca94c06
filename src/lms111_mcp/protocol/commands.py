"""Command keywords and high-level command builders.

Every command is a space-delimited ASCII line: a method token (``sRN``
read, ``sWN`` write, ``sMN`` method call), a keyword, then parameters.
The device echoes the keyword in its reply with the answer method
(``sRA``, ``sWA``, ``sAN``).
"""

from __future__ import annotations

from enum import Enum

from .encoding import format_hex, format_signed

CLIENT_LEVEL = 3
CLIENT_PASSWORD = "F4724744"
# Maintenance level; defined by the protocol, never used by this driver.
ROOT_LEVEL = 2
ROOT_PASSWORD = "B21ACE26"

# Scan area in 1/10,000 degree
START_ANGLE = -450000
STOP_ANGLE = 2250000


class Command(str, Enum):
    """Command method + keyword prefixes."""

    SET_ACCESS_MODE = "sMN SetAccessMode"
    START_MEASURING = "sMN LMCstartmeas"
    STOP_MEASURING = "sMN LMCstopmeas"
    CONFIGURE_SCAN_OUTPUT = "sWN LMDscandatacfg"
    QUERY_STATUS = "sRN STlms"
    QUERY_SCAN_CONFIG = "sRN LMPscancfg"
    SET_SCAN_CONFIG = "sMN mLMPsetscancfg"
    REQUEST_SCAN = "sRN LMDscandata"
    QUERY_CONTAMINATION = "sRN LCMstate"

    @property
    def keyword(self) -> str:
        return self.value.split(" ", 1)[1]


def _check_token(token: str) -> None:
    if not token:
        raise ValueError("Parameter tokens must not be empty")
    if not token.isascii() or not token.isprintable() or " " in token:
        raise ValueError(f"Invalid parameter token {token!r}")


def build_command(command: Command, *params: str) -> bytes:
    """Build a command body with the given parameter tokens.

    The body is framed by the transport when it is sent.
    """
    for token in params:
        _check_token(token)
    line = " ".join((command.value, *params))
    return line.encode("ascii")


def build_set_access_mode(
    level: int = CLIENT_LEVEL, password: str = CLIENT_PASSWORD
) -> bytes:
    """Build SetAccessMode.

    Args:
        level: User level (3 = authorized client).
        password: Hashed password token for the level.
    """
    return build_command(Command.SET_ACCESS_MODE, str(level), password)


def build_start_measuring() -> bytes:
    return build_command(Command.START_MEASURING)


def build_stop_measuring() -> bytes:
    return build_command(Command.STOP_MEASURING)


def build_query_status() -> bytes:
    return build_command(Command.QUERY_STATUS)


def build_query_scan_config() -> bytes:
    return build_command(Command.QUERY_SCAN_CONFIG)


def build_request_scan() -> bytes:
    return build_command(Command.REQUEST_SCAN)


def build_query_contamination() -> bytes:
    return build_command(Command.QUERY_CONTAMINATION)


def build_set_scan_config(scan_freq: int, angular_res: int) -> bytes:
    """Build mLMPsetscancfg for the fixed -45..225 degree scan area.

    Args:
        scan_freq: Scan frequency in 1/100 Hz (2500 or 5000).
        angular_res: Angular resolution in 1/10,000 degree (2500 or 5000).
    """
    return build_command(
        Command.SET_SCAN_CONFIG,
        format_signed(scan_freq),
        "+1",  # number of sectors
        format_signed(angular_res),
        format_signed(START_ANGLE),
        format_signed(STOP_ANGLE),
    )


def scan_output_params(
    output_channel: int = 3,
    remission: bool = True,
    resolution: bool = True,
    encoder: int = 0,
    position: bool = False,
    device_name: bool = False,
    comment: bool = False,
    time: bool = False,
    output_interval: int = 1,
) -> list[str]:
    """Parameter tokens for LMDscandatacfg.

    Layout::

        channel 00 remission resolution unit encoder 00
        position device_name comment time output_interval

    With the defaults this yields the configuration the driver installs
    on every successful login.
    """
    if not 1 <= output_channel <= 3:
        raise ValueError(f"Output channel must be 1-3, got {output_channel}")
    if not 0 <= encoder <= 0xFF:
        raise ValueError(f"Encoder must be 0-255, got {encoder}")
    if output_interval < 1:
        raise ValueError(f"Output interval must be >= 1, got {output_interval}")

    def flag(value: bool) -> str:
        return "1" if value else "0"

    return [
        format_hex(output_channel),
        "00",
        flag(remission),
        flag(resolution),
        "0",  # unit of remission
        format_hex(encoder),
        "00",
        flag(position),
        flag(device_name),
        flag(comment),
        flag(time),
        format_signed(output_interval),
    ]


def build_configure_scan_output(**kwargs) -> bytes:
    """Build LMDscandatacfg. Keyword arguments as for :func:`scan_output_params`."""
    return build_command(Command.CONFIGURE_SCAN_OUTPUT, *scan_output_params(**kwargs))


def build_default_scan_output() -> bytes:
    """Build the default LMDscandatacfg: channel 3, remission on, 1 scan interval."""
    return build_configure_scan_output()
