"""Data models for scan telegrams, device status, and scan configuration."""

from .scan import Channel, DeviceStatus, ScanTelegram
from .scan_config import ScanConfig, UnusualValue
from .status import StatusFields
