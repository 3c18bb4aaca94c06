"""Transport layer: the TCP stream to the scanner."""

from .tcp_connection import TCPConnection
