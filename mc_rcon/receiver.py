# mc_rcon/receiver.py
from __future__ import annotations

import logging
import struct
from typing import Protocol

from .errors import ProtocolError
from .packet import MAX_RECV_SIZE

log = logging.getLogger(__name__)


class Readable(Protocol):
    def read(self, max_bytes: int) -> bytes: ...


class FrameReceiver(Protocol):
    def receive(self, transport: Readable) -> bytes: ...


class ShortReadReceiver:
    """
    Collects one reply by reading until a read comes back short.

    The protocol has no end-of-frame marker for single-packet replies, so a
    read smaller than the buffer is taken as the last fragment. If a reply
    happens to fill the buffer exactly, the next read waits for the
    transport's deadline. Fragmentation is rare enough that this is accepted.
    """

    def __init__(self, buffer_size: int = MAX_RECV_SIZE):
        self.buffer_size = buffer_size

    def receive(self, transport: Readable) -> bytes:
        received = bytearray()
        while True:
            chunk = transport.read(self.buffer_size)
            if not chunk:
                break
            received += chunk
            if len(chunk) < self.buffer_size:
                break
        log.debug("received %d bytes", len(received))
        return bytes(received)


class LengthPrefixedReceiver:
    """Reads the size field first, then exactly that many bytes."""

    def receive(self, transport: Readable) -> bytes:
        head = self._read_exact(transport, 4, allow_eof=True)
        if not head:
            return b""
        (size,) = struct.unpack("<i", head)
        if size < 0 or size > MAX_RECV_SIZE - 4:
            raise ProtocolError(f"invalid packet size {size}")
        body = self._read_exact(transport, size)
        log.debug("received %d bytes", 4 + len(body))
        return head + body

    @staticmethod
    def _read_exact(transport: Readable, n: int, allow_eof: bool = False) -> bytes:
        data = b""
        while len(data) < n:
            chunk = transport.read(n - len(data))
            if not chunk:
                if allow_eof and not data:
                    return b""
                raise ProtocolError("connection closed mid-packet")
            data += chunk
        return data
