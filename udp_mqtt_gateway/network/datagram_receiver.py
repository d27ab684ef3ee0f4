"""Datagram receiver for the inbound UDP port."""

import logging
import socket
from dataclasses import dataclass
from typing import Optional, Tuple

from udp_mqtt_gateway.errors import DatagramReceiveError, SocketBindError

logger = logging.getLogger(__name__)

UDP_BUFFER_SIZE = 2048
DEFAULT_POLL_INTERVAL = 1.0  # seconds


@dataclass(frozen=True)
class Datagram:
    """One UDP packet, truncated to the receive buffer size."""

    payload: bytes
    sender: Tuple[str, int]


class DatagramReceiver:
    """Receives datagrams on 0.0.0.0:<port>, one at a time.

    ``receive`` blocks for at most ``poll_interval`` seconds so the caller
    can check for shutdown between datagrams.
    """

    def __init__(
        self,
        port: int,
        host: str = "0.0.0.0",
        buffer_size: int = UDP_BUFFER_SIZE,
        poll_interval: Optional[float] = DEFAULT_POLL_INTERVAL,
    ):
        self.host = host
        self.port = port
        self.buffer_size = buffer_size
        self.poll_interval = poll_interval
        self.socket: Optional[socket.socket] = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def address(self) -> Tuple[str, int]:
        """The bound address, useful when bound to port 0."""
        return self.socket.getsockname()

    def open(self):
        """Create the IPv4 UDP socket and bind it."""
        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as e:
            raise SocketBindError(self.port, f"could not create IPv4 UDP socket: {e}") from e

        try:
            self.socket.bind((self.host, self.port))
        except OSError as e:
            self.close()
            raise SocketBindError(self.port, str(e)) from e

        self.socket.settimeout(self.poll_interval)
        logger.info("[UDP] Listening on %s:%d", self.host, self.port)

    def close(self):
        """Close the socket."""
        if self.socket:
            self.socket.close()
            self.socket = None

    def receive(self) -> Optional[Datagram]:
        """Wait for the next datagram, or return None when the poll interval elapsed."""
        if self.socket is None:
            raise DatagramReceiveError("UDP socket is not open")
        try:
            data, addr = self.socket.recvfrom(self.buffer_size)
        except socket.timeout:
            return None
        except OSError as e:
            raise DatagramReceiveError(f"Socket error while receiving: {e}") from e
        return Datagram(payload=data, sender=addr)
