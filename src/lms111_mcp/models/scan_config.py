"""Scan frequency / angular resolution model."""

from __future__ import annotations

from dataclasses import dataclass

# 25 Hz / 50 Hz in 1/100 Hz, 0.25 / 0.5 degree in 1/10,000 degree
LEGAL_VALUES = frozenset((2500, 5000))


@dataclass(frozen=True)
class UnusualValue:
    """A configuration value outside the documented set."""

    name: str
    value: int


@dataclass(frozen=True)
class ScanConfig:
    """Scan configuration as reported by LMPscancfg."""

    scan_frequency: int  # 1/100 Hz
    angular_resolution: int  # 1/10,000 degree
    unusual: tuple[UnusualValue, ...] = ()

    @classmethod
    def checked(cls, scan_frequency: int, angular_resolution: int) -> ScanConfig:
        """Build a config, flagging values outside :data:`LEGAL_VALUES`."""
        unusual = tuple(
            UnusualValue(name, value)
            for name, value in (
                ("scan_frequency", scan_frequency),
                ("angular_resolution", angular_resolution),
            )
            if value not in LEGAL_VALUES
        )
        return cls(scan_frequency, angular_resolution, unusual)

    @property
    def is_valid(self) -> bool:
        return not self.unusual

    def to_dict(self) -> dict:
        return {
            "scan_frequency": self.scan_frequency,
            "angular_resolution": self.angular_resolution,
            "valid": self.is_valid,
            "unusual": [u.name for u in self.unusual],
        }
