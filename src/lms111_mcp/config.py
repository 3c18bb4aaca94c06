"""Runtime settings for the driver and the MCP server.

Defaults can be overridden through environment variables:

- ``LMS111_HOST``: scanner address (default ``192.168.0.1``)
- ``LMS111_PORT``: TCP port (default ``2111``)
- ``LMS111_TIMEOUT``: read timeout in seconds, ``none`` to block forever
- ``LMS111_CONNECT_TIMEOUT``: seconds allowed for opening the connection
- ``LMS111_LOG_LEVEL``: logging level name (default ``INFO``)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from .transport.tcp_connection import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_READ_TIMEOUT,
)

DEFAULT_HOST = "192.168.0.1"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float | None = DEFAULT_READ_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT


def _parse_timeout(value: str, name: str) -> float | None:
    if value.strip().lower() in ("none", "off", ""):
        return None
    timeout = float(value)
    if timeout <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return timeout


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment.

    Raises:
        ValueError: If a variable holds an invalid value.
    """
    env = os.environ if environ is None else environ

    port = int(env.get("LMS111_PORT", DEFAULT_PORT))
    if not 0 < port < 65536:
        raise ValueError(f"LMS111_PORT must be 1-65535, got {port}")

    log_level = env.get("LMS111_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Unknown LMS111_LOG_LEVEL {log_level!r}")

    timeout = DEFAULT_READ_TIMEOUT
    if "LMS111_TIMEOUT" in env:
        timeout = _parse_timeout(env["LMS111_TIMEOUT"], "LMS111_TIMEOUT")

    connect_timeout = DEFAULT_CONNECT_TIMEOUT
    if "LMS111_CONNECT_TIMEOUT" in env:
        connect_timeout = _parse_timeout(
            env["LMS111_CONNECT_TIMEOUT"], "LMS111_CONNECT_TIMEOUT"
        )

    return Settings(
        host=env.get("LMS111_HOST", DEFAULT_HOST),
        port=port,
        timeout=timeout,
        log_level=log_level,
        connect_timeout=connect_timeout,
    )
