"""CoLa-A message framing.

Frame layout (host to device)::

    +------+--------------------------+------+------+
    | STX  |  ASCII command body      | ETX  | NUL  |
    | 0x02 |  variable length         | 0x03 | 0x00 |
    +------+--------------------------+------+------+

Device replies use the same STX/ETX envelope without the trailing pad.
Idle periods on the stream may be filled with zero bytes.
"""

from __future__ import annotations

STX = 0x02
ETX = 0x03
PAD = 0x00

CONTROL_BYTES = frozenset((STX, ETX, PAD))


def build_frame(payload: bytes) -> bytes:
    """Wrap a command body in STX/ETX and append the pad byte.

    Args:
        payload: ASCII command body, e.g. ``b"sRN LMDscandata"``.

    Returns:
        The bytes to write to the socket.

    Raises:
        ValueError: If the payload contains a framing control byte.
    """
    if any(b in CONTROL_BYTES for b in payload):
        raise ValueError(f"Payload contains a framing control byte: {payload!r}")
    return bytes([STX]) + payload + bytes([ETX, PAD])
