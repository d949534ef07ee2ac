# mc_rcon/transport.py
from __future__ import annotations

import contextlib
import logging
import socket
from typing import Optional

from .errors import NetworkError

TIMEOUT = 5.0  # seconds, for dialing and for every single read/write

log = logging.getLogger(__name__)


class Transport:
    """A TCP stream where connect, each write and each read are bounded by `timeout`."""

    def __init__(self, sock: socket.socket, timeout: float = TIMEOUT):
        self.sock: Optional[socket.socket] = sock
        self.timeout = timeout

    @classmethod
    def connect(cls, host: str, port: int, timeout: float = TIMEOUT) -> "Transport":
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise NetworkError(f"cannot connect to {host}:{port}: {e}") from e
        log.debug("connected to %s:%s", host, port)
        return cls(sock, timeout)

    def _socket(self) -> socket.socket:
        if self.sock is None:
            raise NetworkError("connection is closed")
        return self.sock

    def write(self, data: bytes) -> None:
        s = self._socket()
        try:
            s.settimeout(self.timeout)
            s.sendall(data)
        except OSError as e:
            raise NetworkError(f"write failed: {e}") from e

    def read(self, max_bytes: int) -> bytes:
        """Read up to `max_bytes`. An empty result means the peer closed the stream."""
        s = self._socket()
        try:
            s.settimeout(self.timeout)
            return s.recv(max_bytes)
        except OSError as e:
            raise NetworkError(f"read failed: {e}") from e

    def close(self) -> None:
        if self.sock is not None:
            with contextlib.suppress(OSError):
                self.sock.close()
            self.sock = None
