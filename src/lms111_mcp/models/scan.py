"""Scan telegram model: one decoded scan cycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Sequence


class DeviceStatus(IntEnum):
    """Device status reported in the scan telegram header."""

    OK = 0x00
    ERROR = 0x01
    CONTAMINATION_WARNING = 0x02
    CONTAMINATION_ERROR = 0x04


class Channel(str, Enum):
    """Channel keywords as they appear in the telegram."""

    RANGE1 = "DIST1"
    RANGE2 = "DIST2"
    REMISSION1 = "RSSI1"
    REMISSION2 = "RSSI2"

    @property
    def attribute(self) -> str:
        return _CHANNEL_ATTRIBUTES[self]


_CHANNEL_ATTRIBUTES = {
    Channel.RANGE1: "range1",
    Channel.RANGE2: "range2",
    Channel.REMISSION1: "remission1",
    Channel.REMISSION2: "remission2",
}


@dataclass(frozen=True)
class ScanTelegram:
    """Decoded scan telegram.

    Ranges are in millimetres, remission values are raw signal strength.
    Absent channels are ``None``. All present channels have the same
    number of samples.
    """

    device_status: DeviceStatus | None
    angular_step_width: int | None  # 1/10,000 degree
    range1: tuple[int, ...] | None = None
    range2: tuple[int, ...] | None = None
    remission1: tuple[int, ...] | None = None
    remission2: tuple[int, ...] | None = None
    raw: str = field(default="", repr=False, compare=False)

    def __post_init__(self) -> None:
        sizes = {ch.value: len(v) for ch, v in self.channels.items()}
        if len(set(sizes.values())) > 1:
            raise ValueError(f"Channels must have equal length, got {sizes}")

    @classmethod
    def from_arrays(
        cls,
        range1: Sequence[int],
        remission1: Sequence[int],
        angular_step_width: int | None = None,
        device_status: DeviceStatus | None = None,
    ) -> ScanTelegram:
        """Build a telegram from already decoded range and remission arrays."""
        if len(range1) != len(remission1):
            raise ValueError(
                f"Range and remission length differ: {len(range1)} != {len(remission1)}"
            )
        return cls(
            device_status=device_status,
            angular_step_width=angular_step_width,
            range1=tuple(range1),
            remission1=tuple(remission1),
        )

    @property
    def channels(self) -> dict[Channel, tuple[int, ...]]:
        """Present channels, keyed by telegram keyword."""
        present = {}
        for channel in Channel:
            values = getattr(self, channel.attribute)
            if values is not None:
                present[channel] = values
        return present

    @property
    def has_range(self) -> bool:
        return self.range1 is not None or self.range2 is not None

    def __len__(self) -> int:
        for values in self.channels.values():
            return len(values)
        return 0

    def to_dict(self) -> dict:
        return {
            "device_status": self.device_status.name if self.device_status is not None else None,
            "angular_step_width": self.angular_step_width,
            "samples": len(self),
            **{channel.attribute: list(values) for channel, values in self.channels.items()},
        }

    def __str__(self) -> str:
        status = self.device_status.name if self.device_status is not None else "unknown"
        lines = [
            f"Device Status: {status}",
            f"Angle Step Width: {self.angular_step_width}",
        ]
        if self.range1 is not None:
            lines.append("Range: " + " ".join(str(v) for v in self.range1))
        if self.remission1 is not None:
            lines.append("Remission: " + " ".join(str(v) for v in self.remission1))
        return "\n".join(lines)
