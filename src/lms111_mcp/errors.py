"""Exception hierarchy for the LMS111 driver.

Three families, each with its own recovery story:

- ``TransportError``: the socket is gone or unusable. Reconnect.
- ``CommandError``: the device answered, but not with success. The
  session stays usable; retrying is up to the caller.
- ``DecodeError``: a scan telegram could not be parsed. The telegram is
  discarded, the session stays usable.
"""

from __future__ import annotations


class LMS111Error(Exception):
    """Base class for all driver errors."""


class TransportError(LMS111Error):
    """The transport cannot carry the request."""


class NotConnectedError(TransportError):
    """No open connection to the device."""


class LinkIOError(TransportError):
    """Read or write on the socket failed; the connection is presumed broken."""


class ReadTimeoutError(LinkIOError):
    """The device did not answer within the configured read timeout."""


class CommandError(LMS111Error):
    """The device rejected a command or answered unexpectedly."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        response: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.response = response


class AccessDeniedError(CommandError):
    """SetAccessMode was not affirmed."""


class AuthorizationRequiredError(CommandError):
    """The command needs the authorized-client access level."""


class LaserConfigurationError(CommandError):
    """mLMPsetscancfg returned a non-zero error code."""


class DeviceErrorResponse(CommandError):
    """The device answered with an ``sFA`` error telegram."""


class UnexpectedResponseError(CommandError):
    """A reply is missing fields or carries unparseable values."""


class DecodeError(LMS111Error, ValueError):
    """A scan telegram could not be decoded."""

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class MalformedTelegramError(DecodeError):
    """Missing, non-hex, or truncated fields in a scan telegram."""
