# tests/conftest.py
from __future__ import annotations

import pytest

from mc_rcon.packet import PacketType, parse, serialize
from mc_rcon.session import RconSession

PASSWORD = "changeme123"
REQUEST_ID = 4242


class FakeTransport:
    """
    In-memory stand-in for Transport. Reads come from a queue of chunks (an
    Exception in the queue is raised instead); an optional handler turns each
    written packet into more chunks, like a server would.
    """

    def __init__(self, chunks=(), handler=None):
        self.chunks = list(chunks)
        self.handler = handler
        self.ops = []
        self.closed = False

    def write(self, data: bytes) -> None:
        self.ops.append(("write", data))
        if self.handler is not None:
            self.chunks.extend(self.handler(parse(data)))

    def read(self, max_bytes: int) -> bytes:
        self.ops.append(("read", max_bytes))
        if not self.chunks:
            return b""
        chunk = self.chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk
        if len(chunk) > max_bytes:
            self.chunks.insert(0, chunk[max_bytes:])
            chunk = chunk[:max_bytes]
        return chunk

    def close(self) -> None:
        self.closed = True

    @property
    def written(self):
        return [parse(data) for op, data in self.ops if op == "write"]


def minecraft_server(packet):
    """Accepts PASSWORD, answers every command with 'ran <command>'."""
    if packet.packet_type == PacketType.LOGIN:
        if packet.payload.decode() == PASSWORD:
            return [serialize(packet.request_id, PacketType.COMMAND, b"")]
        return [serialize(-1, PacketType.COMMAND, b"")]
    return [serialize(packet.request_id, PacketType.RESPONSE, b"ran " + packet.payload)]


@pytest.fixture
def transport():
    return FakeTransport(handler=minecraft_server)


@pytest.fixture
def connect_to(transport):
    calls = []

    def connector(host, port, timeout):
        calls.append((host, port, timeout))
        return transport

    connector.calls = calls
    return connector


@pytest.fixture
def session(connect_to):
    s = RconSession("localhost", 25575, REQUEST_ID, connector=connect_to)
    s.connect()
    s.authenticate(PASSWORD)
    return s
