"""MCP server entry point for the SICK LMS111.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import Settings, load_settings
from .errors import AccessDeniedError, DecodeError, LMS111Error
from .models.scan_config import LEGAL_VALUES
from .protocol.commands import START_ANGLE, STOP_ANGLE
from .session import LMS111Session

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "lms111",
    instructions="MCP server for the SICK LMS111 laser scanner",
)

# Global connection state
_session: LMS111Session | None = None
_settings: Settings = Settings()


def _get_session() -> LMS111Session:
    """Get the active session, raising if not connected."""
    if _session is None or not _session.connected:
        raise RuntimeError(
            "Not connected to scanner. Use the 'connect' tool first."
        )
    return _session


def _error(e: LMS111Error) -> dict[str, Any]:
    result: dict[str, Any] = {"error": str(e), "kind": type(e).__name__}
    code = getattr(e, "code", None)
    if code is not None:
        result["code"] = code
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(
    host: str | None = None,
    port: int | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """Connect to the LMS111 and log in as authorized client.

    If a previous login was refused, calling this again retries the login
    on the open connection.

    Args:
        host: Scanner address (defaults to LMS111_HOST).
        port: Scanner TCP port (defaults to LMS111_PORT, normally 2111).
        timeout: Read timeout in seconds (defaults to LMS111_TIMEOUT).
    """
    global _session
    if _session is not None and _session.connected:
        if not _session.authorized:
            return _authorize(_session)
        return {
            "connected": True,
            "message": "Already connected",
            "host": _session.host,
            "authorized": _session.authorized,
        }

    _session = LMS111Session(
        host or _settings.host,
        port or _settings.port,
        timeout if timeout is not None else _settings.timeout,
        connect_timeout=_settings.connect_timeout,
    )
    try:
        _session.connect()
    except AccessDeniedError as e:
        return {
            "connected": True,
            "authorized": False,
            "error": str(e),
        }
    except LMS111Error as e:
        _session = None
        return _error(e)

    return {
        "connected": True,
        "authorized": True,
        "host": _session.host,
        "port": _session.port,
    }


def _authorize(session: LMS111Session) -> dict[str, Any]:
    """Retry the login on an open connection."""
    global _session
    try:
        session.authorize()
        session.configure_default_scan_output()
    except AccessDeniedError as e:
        return {"connected": True, "authorized": False, "error": str(e)}
    except LMS111Error as e:
        if not session.connected:
            _session = None
        return _error(e)
    return {
        "connected": True,
        "authorized": True,
        "host": session.host,
        "port": session.port,
    }


@mcp.tool()
def disconnect() -> dict[str, Any]:
    """Close the connection to the scanner."""
    global _session
    if _session is None:
        return {"disconnected": True}
    session, _session = _session, None
    try:
        session.disconnect()
    except OSError as e:
        logger.warning("Error closing connection: %s", e)
        return {"disconnected": True, "error": str(e)}
    return {"disconnected": True}


@mcp.tool()
def get_device_status() -> dict[str, Any]:
    """Read operating status, temperature flag, and device clock (STlms)."""
    session = _get_session()
    try:
        status = session.query_status()
        return status.to_dict()
    except (LMS111Error, ValueError) as e:
        return {"error": str(e)}


@mcp.tool()
def get_contamination_level() -> dict[str, Any]:
    """Read the front window contamination level (LCMstate)."""
    session = _get_session()
    try:
        return {"contamination_level": session.get_contamination_level()}
    except LMS111Error as e:
        return _error(e)


# ─── MEASUREMENT TOOLS ────────────────────────────────────────────────

@mcp.tool()
def start_measuring() -> dict[str, Any]:
    """Start the laser and begin measuring."""
    session = _get_session()
    try:
        session.start_measuring()
    except LMS111Error as e:
        return _error(e)
    return {"measuring": True}


@mcp.tool()
def stop_measuring() -> dict[str, Any]:
    """Stop measuring."""
    session = _get_session()
    try:
        session.stop_measuring()
    except LMS111Error as e:
        return _error(e)
    return {"measuring": False}


@mcp.tool()
def get_scan(include_values: bool = True, max_points: int | None = None) -> dict[str, Any]:
    """Request one scan and return its decoded channels.

    Args:
        include_values: Return the sample arrays, not only the summary.
        max_points: Truncate each returned array to this many samples.
    """
    session = _get_session()
    try:
        scan = session.get_scan()
    except DecodeError as e:
        result = _error(e)
        result["raw"] = (e.raw or "")[:200]
        return result
    except LMS111Error as e:
        return _error(e)

    result = scan.to_dict()
    result["channels"] = [channel.value for channel in scan.channels]
    for channel in scan.channels:
        key = channel.attribute
        if not include_values:
            result.pop(key)
        elif max_points is not None:
            result[key] = result[key][:max_points]
    if scan.range1:
        result["min_range"] = min(scan.range1)
        result["max_range"] = max(scan.range1)
    return result


# ─── CONFIGURATION TOOLS ──────────────────────────────────────────────

@mcp.tool()
def get_scan_config() -> dict[str, Any]:
    """Read scan frequency (1/100 Hz) and angular resolution (1/10,000 deg)."""
    session = _get_session()
    try:
        return session.get_scan_config().to_dict()
    except LMS111Error as e:
        return _error(e)


@mcp.tool()
def configure_laser(scan_frequency: int, angular_resolution: int) -> dict[str, Any]:
    """Set scan frequency and angular resolution.

    Args:
        scan_frequency: 2500 (25 Hz) or 5000 (50 Hz).
        angular_resolution: 2500 (0.25 deg) or 5000 (0.5 deg).
    """
    session = _get_session()
    try:
        session.configure_laser(scan_frequency, angular_resolution)
    except ValueError as e:
        return {"error": str(e)}
    except LMS111Error as e:
        return _error(e)
    return {
        "configured": True,
        "scan_frequency": scan_frequency,
        "angular_resolution": angular_resolution,
    }


@mcp.tool()
def configure_scan_output(
    output_channel: int = 3,
    remission: bool = True,
    resolution: bool = True,
    encoder: int = 0,
    position: bool = False,
    device_name: bool = False,
    comment: bool = False,
    time: bool = False,
    output_interval: int = 1,
) -> dict[str, Any]:
    """Select the content of scan telegrams (LMDscandatacfg).

    Args:
        output_channel: Echo channels to output (1-3).
        remission: Include remission (RSSI) channels.
        resolution: 16-bit remission resolution.
        encoder: Encoder selector.
        position: Include position data.
        device_name: Include the device name.
        comment: Include the comment field.
        time: Include the time stamp.
        output_interval: Output every n-th scan.
    """
    session = _get_session()
    try:
        session.configure_scan_output(
            output_channel, remission, resolution, encoder,
            position, device_name, comment, time, output_interval,
        )
    except ValueError as e:
        return {"error": str(e)}
    except LMS111Error as e:
        return _error(e)
    return {"configured": True}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("lms111://protocol/scan-area")
def resource_scan_area() -> str:
    """Fixed scan area in 1/10,000 degree."""
    return json.dumps({"start_angle": START_ANGLE, "stop_angle": STOP_ANGLE})


@mcp.resource("lms111://protocol/scan-config-values")
def resource_scan_config_values() -> str:
    """Documented scan frequency / angular resolution values."""
    return json.dumps({
        "scan_frequency": sorted(LEGAL_VALUES),
        "angular_resolution": sorted(LEGAL_VALUES),
        "units": {"scan_frequency": "1/100 Hz", "angular_resolution": "1/10000 deg"},
    })


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def diagnose_device() -> str:
    """Guide the AI through a health check of the scanner."""
    return """Check the health of the connected LMS111.
Steps:
- Use get_device_status; operating status 7 means ready to scan
- Check temperature_good and the device clock
- Use get_contamination_level to check the front window
- Use get_scan_config and flag unusual frequency/resolution values
- Take one scan with get_scan (include_values=false) and report the
  device status and sample count

Summarize any problems and suggest fixes."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    global _settings
    _settings = load_settings()
    logging.basicConfig(level=_settings.log_level)
    logger.info("Default scanner endpoint %s:%s", _settings.host, _settings.port)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
