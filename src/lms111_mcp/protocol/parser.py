"""Response parsing for device replies.

Each command has its own success rule and its own numeric base for the
error field. They are deliberately kept as separate functions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..errors import DeviceErrorResponse, UnexpectedResponseError
from ..models.scan_config import ScanConfig
from ..models.status import IDX_OPERATING_STATUS, IDX_TEMPERATURE, StatusFields
from .commands import Command
from .encoding import HEX_DIGITS, MAX_HEX_DIGITS, parse_decimal, parse_hex

logger = logging.getLogger(__name__)

ACCESS_GRANTED = "sAN SetAccessMode 1"
SCAN_OUTPUT_ACK = "sWA LMDscandatacfg"
ERROR_METHOD = "sFA"

LASER_CONFIG_ERRORS = {
    1: "invalid frequency",
    2: "invalid angular resolution",
    3: "invalid frequency and angular resolution",
    4: "invalid scan area",
}


@dataclass
class Response:
    """A reply split into tokens."""

    method: str
    keyword: str
    tokens: list[str] = field(default_factory=list)
    raw: str = ""

    def hex_field(self, index: int) -> int:
        return self._field(index, parse_hex, "hex")

    def decimal_field(self, index: int) -> int:
        return self._field(index, parse_decimal, "decimal")

    def _field(self, index: int, convert, kind: str) -> int:
        if index >= len(self.tokens):
            raise UnexpectedResponseError(
                f"Reply to {self.keyword or '?'} has no field {index}",
                response=self.raw,
            )
        try:
            return convert(self.tokens[index])
        except ValueError as e:
            raise UnexpectedResponseError(
                f"Field {index} of {self.keyword or '?'} reply is not {kind}: "
                f"{self.tokens[index]!r}",
                response=self.raw,
            ) from e


def parse_response(text: str) -> Response:
    """Split a reply into tokens.

    Raises:
        DeviceErrorResponse: If the device answered with an ``sFA`` error.
    """
    tokens = text.strip().split(" ")
    method = tokens[0]
    keyword = tokens[1] if len(tokens) > 1 else ""
    response = Response(method=method, keyword=keyword, tokens=tokens, raw=text)
    if method == ERROR_METHOD:
        code = None
        if keyword and len(keyword) <= MAX_HEX_DIGITS and set(keyword) <= HEX_DIGITS:
            code = parse_hex(keyword)
        raise DeviceErrorResponse(
            f"Device reported protocol error {keyword or '(none)'}",
            code=code,
            response=text,
        )
    return response


def expect_keyword(response: Response, command: Command) -> Response:
    """Check the reply echoes the command's keyword."""
    if response.keyword != command.keyword:
        raise UnexpectedResponseError(
            f"Expected reply to {command.keyword}, got {response.raw.strip()!r}",
            response=response.raw,
        )
    return response


def parse_access_mode(text: str) -> bool:
    """SetAccessMode succeeds only on the exact affirmative reply."""
    return text.strip() == ACCESS_GRANTED


def parse_start_measuring(response: Response) -> bool:
    """LMCstartmeas: error field is decimal, success iff 0."""
    return response.decimal_field(2) == 0


def parse_stop_measuring(response: Response) -> bool:
    """LMCstopmeas: error field is hex, failure iff 1."""
    return response.hex_field(2) != 1


def parse_scan_config(response: Response) -> ScanConfig:
    """LMPscancfg: frequency at field 2, resolution at field 4, both hex.

    Values outside the documented set are logged and flagged on the
    returned config.
    """
    config = ScanConfig.checked(
        scan_frequency=response.hex_field(2),
        angular_resolution=response.hex_field(4),
    )
    for unusual in config.unusual:
        logger.warning("Unusual %s: %d", unusual.name.replace("_", " "), unusual.value)
    return config


def parse_set_scan_config(response: Response) -> int:
    """mLMPsetscancfg: returns the hex error code (0 = success)."""
    return response.hex_field(2)


def describe_laser_config_error(code: int) -> str | None:
    """Message for a mLMPsetscancfg error code, ``None`` for success."""
    if code == 0:
        return None
    return LASER_CONFIG_ERRORS.get(code, "other error")


def parse_scan_output_ack(text: str) -> bool:
    """LMDscandatacfg succeeds only on the exact acknowledgement."""
    return text.strip() == SCAN_OUTPUT_ACK


def parse_status(response: Response) -> StatusFields:
    """STlms: operating status and temperature flag must be hex."""
    response.hex_field(IDX_OPERATING_STATUS)
    response.hex_field(IDX_TEMPERATURE)
    return StatusFields(tokens=list(response.tokens))


def parse_contamination(response: Response) -> int:
    """LCMstate: contamination level at field 2, hex."""
    return response.hex_field(2)
