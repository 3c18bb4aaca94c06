"""Scan telegram (LMDscandata) decoder.

Telegram layout, space-delimited (only the fields the decoder reads are
named)::

    sRA LMDscandata <version> <device no> <serial> <status> <status> ...
        DIST1 <scale> <offset> <start angle> <step width> <count> <v0> ... <vN-1>
        RSSI1 <scale> <offset> <start angle> <step width> <count> <v0> ... <vN-1>
        ...

All numeric fields are unsigned hex. The device status sits at a fixed
token offset because the header before it never changes shape.
"""

from __future__ import annotations

from typing import Sequence

from ..errors import MalformedTelegramError
from ..models.scan import Channel, DeviceStatus, ScanTelegram
from .encoding import parse_hex

IDX_DEVICE_STATUS = 6
# Offsets from a channel keyword
OFF_STEP_WIDTH = 4
OFF_COUNT = 5

SCAN_SPAN_DEGREES = 270


class TokenCursor:
    """Read-forward cursor over telegram tokens."""

    def __init__(self, tokens: Sequence[str], raw: str = "") -> None:
        self._tokens = tokens
        self._raw = raw
        self.position = 0

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def remaining(self) -> int:
        return len(self._tokens) - self.position

    def seek(self, keyword: str) -> bool:
        """Move to the first token equal to ``keyword``; False if absent."""
        try:
            self.position = self._tokens.index(keyword)
        except ValueError:
            return False
        return True

    def jump(self, index: int) -> None:
        self.position = index

    def skip(self, count: int) -> None:
        self.position += count

    def next_token(self) -> str:
        if self.position >= len(self._tokens):
            raise MalformedTelegramError(
                f"Telegram ends before field {self.position}", raw=self._raw
            )
        token = self._tokens[self.position]
        self.position += 1
        return token

    def next_hex(self) -> int:
        token = self.next_token()
        try:
            return parse_hex(token)
        except ValueError as e:
            raise MalformedTelegramError(
                f"Field {self.position - 1} is not hex: {token!r}", raw=self._raw
            ) from e

    def take_hex(self, count: int) -> tuple[int, ...]:
        if count > self.remaining:
            raise MalformedTelegramError(
                f"Expected {count} values, only {self.remaining} fields left",
                raw=self._raw,
            )
        return tuple(self.next_hex() for _ in range(count))


def _read_channel(cursor: TokenCursor) -> tuple[int, tuple[int, ...]]:
    """Read step width and values; the cursor sits on the channel keyword."""
    start = cursor.position
    cursor.jump(start + OFF_STEP_WIDTH)
    step_width = cursor.next_hex()
    cursor.jump(start + OFF_COUNT)
    count = cursor.next_hex()
    return step_width, cursor.take_hex(count)


def decode(raw: str) -> ScanTelegram:
    """Decode an LMDscandata reply into a :class:`ScanTelegram`.

    A telegram without any channel keyword decodes to a telegram with no
    channels.

    Raises:
        MalformedTelegramError: On missing, non-hex or truncated fields,
            an unknown device status, or channels of unequal length.
    """
    cursor = TokenCursor(raw.strip().split(" "), raw=raw)

    cursor.jump(IDX_DEVICE_STATUS)
    status_code = cursor.next_hex()
    try:
        device_status = DeviceStatus(status_code)
    except ValueError as e:
        raise MalformedTelegramError(
            f"Unknown device status {status_code:#x}", raw=raw
        ) from e

    step_width = None
    channels = {}
    for channel in Channel:
        if not cursor.seek(channel.value):
            continue
        # All channels share one step width; the last one read wins.
        step_width, channels[channel.attribute] = _read_channel(cursor)

    try:
        return ScanTelegram(
            device_status=device_status,
            angular_step_width=step_width,
            raw=raw,
            **channels,
        )
    except ValueError as e:
        raise MalformedTelegramError(str(e), raw=raw) from e


def _split_values(text: str, expected: int, name: str) -> tuple[int, ...]:
    tokens = text.split()
    if not tokens:
        raise MalformedTelegramError(f"No {name} values", raw=text)
    cursor = TokenCursor(tokens, raw=text)
    cursor.skip(1)  # leading placeholder field
    if cursor.remaining != expected:
        raise MalformedTelegramError(
            f"Expected {expected} {name} values, got {cursor.remaining}", raw=text
        )
    return cursor.take_hex(expected)


def decode_split(
    distances: str, remissions: str, angular_frequency: float
) -> ScanTelegram:
    """Decode distance and remission strings recorded separately.

    Each string is a space-delimited list of hex values preceded by one
    placeholder field that is ignored.

    Args:
        distances: Distance values, e.g. ``"0000000 64 C8 96"``.
        remissions: Remission values in the same layout.
        angular_frequency: Angular resolution in degrees (0.25 or 0.5).
            The expected sample count is ``270 / angular_frequency``.
    """
    if angular_frequency <= 0:
        raise ValueError(f"Angular frequency must be positive, got {angular_frequency}")
    expected = int(SCAN_SPAN_DEGREES / angular_frequency)
    return ScanTelegram.from_arrays(
        range1=_split_values(distances, expected, "distance"),
        remission1=_split_values(remissions, expected, "remission"),
        angular_step_width=round(angular_frequency * 10000),
    )
