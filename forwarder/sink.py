"""
Outbound TCP connection to the Wavefront proxy.
"""
import logging
import socket
import threading
from typing import Optional, Tuple

from . import config

logger = logging.getLogger(__name__)


class SinkConnectionError(ConnectionError):
    """Raised when the proxy cannot be reached at startup."""


class SinkWriteError(OSError):
    """Raised when a line could not be written to the proxy."""


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a host:port address.

    Args:
        address (str): Address such as "wavefront:2878" or "[::1]:2878"

    Returns:
        tuple: (host, port)

    Raises:
        ValueError: If the address has no valid port
    """
    host, sep, port = address.rpartition(':')
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid proxy address: {address!r}, expected host:port")
    return host.strip('[]'), int(port)


class ConnectionSink:
    """
    Owns one long-lived connection and writes lines to it.

    Writes are serialized so that lines from concurrent flushes never interleave.
    There is no reconnection: once the connection breaks every write fails until
    a new sink is created.
    """

    def __init__(self, sock: socket.socket, address: str = ''):
        self.address = address
        self._sock: Optional[socket.socket] = sock
        self._lock = threading.Lock()

    @classmethod
    def connect(cls, address: str, timeout: float = config.CONNECT_TIMEOUT) -> 'ConnectionSink':
        """
        Dial the proxy, giving up after timeout seconds.

        Args:
            address (str): host:port of the proxy
            timeout (float): Connection timeout in seconds

        Returns:
            ConnectionSink: A connected sink

        Raises:
            SinkConnectionError: If the connection could not be established
        """
        try:
            sock = socket.create_connection(parse_address(address), timeout=timeout)
        except (OSError, ValueError) as e:
            logger.error("Failed to connect to %s: %s", address, str(e))
            raise SinkConnectionError(f"Unable to connect to {address}: {e}") from e

        # The timeout only bounds the dial.
        sock.settimeout(None)
        logger.info("Connected to %s", address)
        return cls(sock, address)

    @property
    def closed(self) -> bool:
        return self._sock is None

    def write(self, line: str) -> None:
        """
        Send one formatted line.

        Args:
            line (str): Newline terminated line

        Raises:
            SinkWriteError: If the sink is closed or the send fails
        """
        data = line.encode('utf-8')
        with self._lock:
            if self._sock is None:
                raise SinkWriteError(f"Connection to {self.address} is closed")
            try:
                self._sock.sendall(data)
            except OSError as e:
                raise SinkWriteError(f"Failed to write to {self.address}: {e}") from e

    def close(self) -> None:
        """Close the connection. Closing twice is a no-op."""
        with self._lock:
            if self._sock is None:
                return
            sock, self._sock = self._sock, None
        try:
            sock.close()
        finally:
            logger.info("Connection to %s closed", self.address)
