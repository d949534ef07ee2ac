# mc_rcon/packet.py
from __future__ import annotations

import struct
from enum import IntEnum
from typing import NamedTuple, Union

from .errors import ProtocolError

HEADER_SIZE = 12          # size + request id + type
PADDING = b"\x00\x00"
MAX_PAYLOAD = 4096
MAX_RECV_SIZE = HEADER_SIZE + MAX_PAYLOAD + len(PADDING)  # 4110

# request id + type + padding, the smallest size a frame can declare
MIN_SIZE = 4 + 4 + len(PADDING)


class PacketType(IntEnum):
    RESPONSE = 0
    COMMAND = 2   # also the server's type for a successful login
    LOGIN = 3


class Packet(NamedTuple):
    request_id: int
    packet_type: int
    payload: bytes

    @property
    def text(self) -> str:
        return self.payload.decode("utf-8", "replace")


def serialize(request_id: int, packet_type: int, payload: Union[str, bytes]) -> bytes:
    """
    Encode one frame:

        <i size> <i request_id> <i type> payload \\x00\\x00

    size counts everything after itself. Integers are little-endian, unlike
    the rest of the Minecraft protocol.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    data = struct.pack("<ii", request_id, packet_type) + payload + PADDING
    return struct.pack("<i", len(data)) + data


def parse(data: bytes) -> Packet:
    """Decode one frame from the start of `data`; trailing bytes are ignored."""
    if len(data) < HEADER_SIZE:
        raise ProtocolError(f"short packet: {len(data)} bytes, need at least {HEADER_SIZE}")
    size, request_id, packet_type = struct.unpack_from("<iii", data)
    if size < MIN_SIZE:
        raise ProtocolError(f"invalid packet size {size}")
    # size excludes its own 4 bytes, so the payload ends at size + 4 - 2
    end = size + 2
    if len(data) < end:
        raise ProtocolError(f"truncated packet: got {len(data)} bytes, size field says {size + 4}")
    return Packet(request_id, packet_type, bytes(data[HEADER_SIZE:end]))


def login_packet(password: str, request_id: int) -> bytes:
    return serialize(request_id, PacketType.LOGIN, password)


def command_packet(command: str, request_id: int) -> bytes:
    return serialize(request_id, PacketType.COMMAND, command)
