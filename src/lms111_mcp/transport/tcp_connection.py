"""TCP connection to the LMS111.

The device speaks CoLa-A over a plain TCP stream (default port 2111).
One :class:`TCPConnection` owns the socket and the buffered reader and
writer created over it.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass

from ..errors import LinkIOError, NotConnectedError, ReadTimeoutError
from ..protocol.framing import ETX, PAD, build_frame

logger = logging.getLogger(__name__)

DEFAULT_PORT = 2111
DEFAULT_READ_TIMEOUT = 5.0
DEFAULT_CONNECT_TIMEOUT = 5.0


@dataclass
class Endpoint:
    """Where the device lives."""

    host: str
    port: int = DEFAULT_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class TCPConnection:
    """Manages the TCP connection to the scanner.

    Usage::

        conn = TCPConnection("192.168.0.1")
        conn.open()
        conn.send(b"sRN LMPscancfg")
        reply = conn.receive()
        conn.close()

    ``timeout`` bounds every read in seconds; ``None`` blocks forever.
    ``connect_timeout`` bounds establishing the connection.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float | None = DEFAULT_READ_TIMEOUT,
        connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self._endpoint = Endpoint(host, port)
        self._timeout = timeout
        self._connect_timeout = connect_timeout
        self._socket: socket.socket | None = None
        self._reader = None
        self._writer = None

    @property
    def connected(self) -> bool:
        return self._socket is not None

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def open(self) -> Endpoint:
        """Open the socket and its streams.

        Raises:
            LinkIOError: If the connection cannot be established.
        """
        if self.connected:
            return self._endpoint

        try:
            sock = socket.create_connection(
                (self._endpoint.host, self._endpoint.port), timeout=self._connect_timeout
            )
        except OSError as e:
            raise LinkIOError(
                f"Could not connect to LMS111 at {self._endpoint}: {e}"
            ) from e

        sock.settimeout(self._timeout)
        self._socket = sock
        self._reader = sock.makefile("rb")
        self._writer = sock.makefile("wb")
        logger.info("Connected to %s", self._endpoint)
        return self._endpoint

    def close(self) -> bool:
        """Release reader, writer and socket.

        All three are released even if one of them fails to close. Errors
        closing the reader are logged and dropped; errors from the writer
        or socket propagate once everything is released.

        Returns:
            False if the connection was already closed.
        """
        if not self.connected:
            logger.debug("Already disconnected from %s", self._endpoint)
            return False

        reader, writer, sock = self._reader, self._writer, self._socket
        self._reader = self._writer = self._socket = None
        try:
            if reader is not None:
                try:
                    reader.close()
                except OSError as e:
                    logger.warning("Error closing input stream: %s", e)
            try:
                if writer is not None:
                    writer.close()
            finally:
                sock.close()
        finally:
            logger.info("Disconnected from %s", self._endpoint)
        return True

    def send(self, payload: bytes) -> None:
        """Write one framed command and flush.

        Raises:
            NotConnectedError: If not connected.
            LinkIOError: If the write fails.
        """
        if not self.connected:
            raise NotConnectedError("Not connected to LMS111")

        frame = build_frame(payload)
        logger.debug("TX %r", payload)
        try:
            self._writer.write(frame)
            self._writer.flush()
        except OSError as e:
            raise LinkIOError(f"Write to {self._endpoint} failed: {e}") from e

    def receive(self) -> str:
        """Read one reply and return its body as text.

        Zero fill before the frame is skipped. The first non-zero byte is
        the frame start and is dropped; the body runs to ETX or to the end
        of the stream.

        Raises:
            NotConnectedError: If not connected.
            ReadTimeoutError: If no byte arrives within the read timeout.
            LinkIOError: If the read fails or the peer closed before
                sending a frame.
        """
        if not self.connected:
            raise NotConnectedError("Not connected to LMS111")

        try:
            byte = self._reader.read(1)
            while byte == bytes([PAD]):
                byte = self._reader.read(1)
            if not byte:
                raise LinkIOError(f"Connection closed by {self._endpoint}")

            body = bytearray()
            while True:
                byte = self._reader.read(1)
                if not byte or byte[0] == ETX:
                    break
                body += byte
        except socket.timeout as e:
            raise ReadTimeoutError(
                f"No reply from {self._endpoint} within {self._timeout}s"
            ) from e
        except OSError as e:
            raise LinkIOError(f"Read from {self._endpoint} failed: {e}") from e

        text = body.decode("ascii", errors="replace")
        logger.debug("RX %r", text[:120])
        return text

    def send_and_receive(self, payload: bytes) -> str:
        """Send a command and read its reply."""
        self.send(payload)
        return self.receive()
