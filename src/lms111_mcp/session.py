"""Session driver for the LMS111.

A session owns one TCP connection and walks it through the access-level
state machine::

    DISCONNECTED --connect--> CONNECTED --authorize--> AUTHORIZED_CLIENT

Every command/response exchange holds the session lock: the protocol has
no request ids, so replies are matched to requests purely by order.
"""

from __future__ import annotations

import logging
import threading
from enum import IntEnum
from typing import Callable

from .config import DEFAULT_HOST
from .errors import (
    AccessDeniedError,
    AuthorizationRequiredError,
    CommandError,
    DecodeError,
    LaserConfigurationError,
    LinkIOError,
    NotConnectedError,
)
from .models.scan import ScanTelegram
from .models.scan_config import ScanConfig
from .models.status import StatusFields
from .protocol import commands
from .protocol.commands import Command
from .protocol.parser import (
    ERROR_METHOD,
    describe_laser_config_error,
    expect_keyword,
    parse_access_mode,
    parse_contamination,
    parse_response,
    parse_scan_config,
    parse_scan_output_ack,
    parse_set_scan_config,
    parse_start_measuring,
    parse_status,
    parse_stop_measuring,
)
from .protocol.telegram import decode
from .transport.tcp_connection import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_READ_TIMEOUT,
    TCPConnection,
)

logger = logging.getLogger(__name__)

START_ANGLE = commands.START_ANGLE
STOP_ANGLE = commands.STOP_ANGLE


class SessionState(IntEnum):
    DISCONNECTED = 0
    CONNECTED = 1
    AUTHORIZED_CLIENT = 2


class LMS111Session:
    """Command driver for one LMS111.

    Usage::

        with LMS111Session("192.168.0.1") as lms:
            lms.connect()
            lms.start_measuring()
            scan = lms.get_scan()

    Args:
        host: Scanner address.
        port: Scanner TCP port.
        timeout: Read timeout in seconds, ``None`` to block forever.
        connection_factory: Builds the transport; called with
            ``(host, port, timeout, connect_timeout)``. Defaults to
            :class:`TCPConnection`.
        connect_timeout: Seconds allowed for opening the socket.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout: float | None = DEFAULT_READ_TIMEOUT,
        connection_factory: Callable[..., TCPConnection] | None = None,
        connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._connection_factory = connection_factory or TCPConnection
        self._connection: TCPConnection | None = None
        self._state = SessionState.DISCONNECTED
        self._lock = threading.Lock()

    def __enter__(self) -> LMS111Session:
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"LMS111Session({self.host}:{self.port}, {self._state.name})"

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state >= SessionState.CONNECTED

    @property
    def authorized(self) -> bool:
        return self._state == SessionState.AUTHORIZED_CLIENT

    # ─── LIFECYCLE ───────────────────────────────────────────────────

    def connect(self) -> None:
        """Open the connection and log in as authorized client.

        On a successful login the default scan output configuration is
        installed; its reply is read and discarded.

        Raises:
            LinkIOError: If the socket cannot be opened.
            AccessDeniedError: If the login is refused. The connection
                stays open at ``CONNECTED`` so :meth:`authorize` can be
                retried.
        """
        if self.connected:
            logger.warning("LMS111 at %s:%s is already connected", self.host, self.port)
            return

        connection = self._connection_factory(
            self.host, self.port, self.timeout, self.connect_timeout
        )
        connection.open()
        self._connection = connection
        self._state = SessionState.CONNECTED

        self.authorize()
        self.configure_default_scan_output()

    def authorize(
        self,
        level: int = commands.CLIENT_LEVEL,
        password: str = commands.CLIENT_PASSWORD,
    ) -> None:
        """Send SetAccessMode.

        Raises:
            AccessDeniedError: If the device does not affirm the login.
        """
        reply = self._exchange(
            commands.build_set_access_mode(level, password), SessionState.CONNECTED
        )
        if not parse_access_mode(reply):
            logger.error("Connected, but could not change user level: %r", reply)
            raise AccessDeniedError(
                f"Access level {level} refused", response=reply
            )
        self._state = SessionState.AUTHORIZED_CLIENT
        logger.info("Access level %d granted", level)

    def disconnect(self) -> bool:
        """Close the connection.

        Safe to call in any state; the state is reset to ``DISCONNECTED``
        even if closing fails.

        Returns:
            False if the session was already disconnected.
        """
        connection = self._connection
        self._connection = None
        try:
            if connection is None:
                logger.info("LMS111 at %s:%s is already disconnected", self.host, self.port)
                return False
            return connection.close()
        finally:
            self._state = SessionState.DISCONNECTED

    # ─── EXCHANGE ────────────────────────────────────────────────────

    def _exchange(self, payload: bytes, required: SessionState) -> str:
        with self._lock:
            if self._connection is None or not self.connected:
                raise NotConnectedError("LMS111 is not connected")
            if self._state < required:
                raise AuthorizationRequiredError(
                    f"{payload.decode('ascii').split(' ')[1]} requires "
                    f"{required.name}, session is {self._state.name}"
                )
            try:
                return self._connection.send_and_receive(payload)
            except LinkIOError:
                logger.error("I/O failure talking to %s:%s, disconnecting", self.host, self.port)
                try:
                    self.disconnect()
                except OSError as close_error:
                    logger.warning("Error releasing connection: %s", close_error)
                raise

    def _command(self, payload: bytes, command: Command, required: SessionState):
        reply = self._exchange(payload, required)
        return expect_keyword(parse_response(reply), command)

    # ─── MEASUREMENT ─────────────────────────────────────────────────

    def start_measuring(self) -> None:
        """Start the laser and motor.

        Raises:
            CommandError: If the decimal error field is not 0.
        """
        response = self._command(
            commands.build_start_measuring(),
            Command.START_MEASURING,
            SessionState.AUTHORIZED_CLIENT,
        )
        if not parse_start_measuring(response):
            raise CommandError(
                "Could not start measuring",
                code=response.decimal_field(2),
                response=response.raw,
            )

    def stop_measuring(self) -> None:
        """Stop measuring.

        Raises:
            CommandError: If the hex error field equals 1.
        """
        response = self._command(
            commands.build_stop_measuring(),
            Command.STOP_MEASURING,
            SessionState.AUTHORIZED_CLIENT,
        )
        if not parse_stop_measuring(response):
            raise CommandError(
                "Could not stop measuring",
                code=response.hex_field(2),
                response=response.raw,
            )

    def get_raw_scan(self) -> str:
        """Request one scan and return the telegram text undecoded."""
        return self._exchange(commands.build_request_scan(), SessionState.CONNECTED)

    def get_scan(self) -> ScanTelegram:
        """Request and decode one scan.

        Raises:
            DecodeError: If the telegram is malformed. ``raw`` on the
                exception holds the telegram text. The session stays usable.
        """
        raw = self.get_raw_scan()
        if raw.strip().startswith(ERROR_METHOD):
            parse_response(raw)  # raises DeviceErrorResponse
        try:
            return decode(raw)
        except DecodeError as e:
            logger.warning("Discarding malformed scan telegram: %s", e)
            raise

    # ─── STATUS ──────────────────────────────────────────────────────

    def query_status(self) -> StatusFields:
        response = self._command(
            commands.build_query_status(), Command.QUERY_STATUS, SessionState.CONNECTED
        )
        return parse_status(response)

    def get_status_code(self) -> int:
        return self.query_status().operating_status

    def is_temperature_good(self) -> bool:
        return self.query_status().temperature_good

    def is_scannable(self) -> bool:
        """True when the unit reports it is ready to measure."""
        return self.query_status().is_scannable

    def get_contamination_level(self) -> int:
        response = self._command(
            commands.build_query_contamination(),
            Command.QUERY_CONTAMINATION,
            SessionState.CONNECTED,
        )
        return parse_contamination(response)

    # ─── CONFIGURATION ───────────────────────────────────────────────

    def get_scan_config(self) -> ScanConfig:
        """Read scan frequency and angular resolution.

        Values outside {2500, 5000} are logged and flagged in
        ``ScanConfig.unusual`` rather than raised.
        """
        response = self._command(
            commands.build_query_scan_config(),
            Command.QUERY_SCAN_CONFIG,
            SessionState.CONNECTED,
        )
        return parse_scan_config(response)

    def configure_laser(self, scan_freq: int, angular_res: int) -> None:
        """Set scan frequency and angular resolution.

        Args:
            scan_freq: Scan frequency in 1/100 Hz.
            angular_res: Angular resolution in 1/10,000 degree.

        Raises:
            LaserConfigurationError: With the device's error code and
                reason if the configuration is rejected.
        """
        response = self._command(
            commands.build_set_scan_config(scan_freq, angular_res),
            Command.SET_SCAN_CONFIG,
            SessionState.AUTHORIZED_CLIENT,
        )
        code = parse_set_scan_config(response)
        reason = describe_laser_config_error(code)
        if reason is not None:
            logger.warning("Scan configuration rejected: %s (code %d)", reason, code)
            raise LaserConfigurationError(reason, code=code, response=response.raw)

    def configure_scan_output(
        self,
        output_channel: int,
        remission: bool,
        resolution: bool,
        encoder: int,
        position: bool,
        device_name: bool,
        comment: bool,
        time: bool,
        output_interval: int,
    ) -> None:
        """Select what each scan telegram carries.

        Raises:
            CommandError: If the device does not acknowledge.
        """
        payload = commands.build_configure_scan_output(
            output_channel=output_channel,
            remission=remission,
            resolution=resolution,
            encoder=encoder,
            position=position,
            device_name=device_name,
            comment=comment,
            time=time,
            output_interval=output_interval,
        )
        reply = self._exchange(payload, SessionState.AUTHORIZED_CLIENT)
        if not parse_scan_output_ack(reply):
            raise CommandError("Scan output configuration not acknowledged", response=reply)

    def configure_default_scan_output(self) -> bool:
        """Install the default scan output configuration.

        Returns:
            True if the device acknowledged.
        """
        reply = self._exchange(
            commands.build_default_scan_output(), SessionState.AUTHORIZED_CLIENT
        )
        return parse_scan_output_ack(reply)


def connect(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    timeout: float | None = DEFAULT_READ_TIMEOUT,
    connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT,
) -> LMS111Session:
    """Create a session and connect it.

    If the login is refused, :class:`AccessDeniedError` is raised with the
    session still open; it is reachable through the exception's
    ``session`` attribute.
    """
    session = LMS111Session(host, port, timeout, connect_timeout=connect_timeout)
    try:
        session.connect()
    except AccessDeniedError as e:
        e.session = session
        raise
    return session
