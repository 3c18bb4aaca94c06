"""Device status (STlms) model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..protocol.encoding import parse_hex

# Operating status code meaning "ready to measure"
STATUS_READY = 7

IDX_OPERATING_STATUS = 2
IDX_TEMPERATURE = 3
IDX_TIME = 5
IDX_DATE = 7


@dataclass
class StatusFields:
    """Tokens of an STlms reply with typed accessors.

    Typical reply::

        sRA STlms 7 0 8 16:05:26 A 10.01.2012 0 0 0
    """

    tokens: list[str] = field(default_factory=list)

    def _token(self, index: int) -> str | None:
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    @property
    def operating_status(self) -> int:
        """Operating status code (hex). 7 means ready to scan."""
        token = self._token(IDX_OPERATING_STATUS)
        if token is None:
            raise ValueError("Status reply has no operating status field")
        return parse_hex(token)

    @property
    def temperature_good(self) -> bool:
        """True when the unit reports its temperature as nominal."""
        token = self._token(IDX_TEMPERATURE)
        if token is None:
            raise ValueError("Status reply has no temperature field")
        return parse_hex(token) == 0

    @property
    def is_scannable(self) -> bool:
        return self.operating_status == STATUS_READY

    @property
    def time_text(self) -> str | None:
        return self._token(IDX_TIME)

    @property
    def date_text(self) -> str | None:
        return self._token(IDX_DATE)

    def unit_datetime(self) -> datetime | None:
        """Device clock as a ``datetime``, for display only.

        Dates are accepted as either ``DD.MM.YYYY`` or ``YYYY.MM.DD``.
        Returns ``None`` when the fields are missing or unparseable.
        """
        if self.time_text is None or self.date_text is None:
            return None
        try:
            hour, minute, second = (int(p) for p in self.time_text.split(":"))
            parts = [int(p) for p in self.date_text.split(".")]
            if len(parts) != 3:
                return None
            if len(self.date_text.split(".")[0]) == 4:
                year, month, day = parts
            else:
                day, month, year = parts
            return datetime(year, month, day, hour, minute, second)
        except ValueError:
            return None

    def to_dict(self) -> dict:
        unit_time = self.unit_datetime()
        return {
            "operating_status": self.operating_status,
            "temperature_good": self.temperature_good,
            "scannable": self.is_scannable,
            "unit_time": unit_time.isoformat() if unit_time else None,
            "raw": " ".join(self.tokens),
        }
