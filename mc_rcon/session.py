# mc_rcon/session.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from .errors import AuthError, NetworkError, ProtocolError, RconError
from .packet import PacketType, command_packet, login_packet, parse
from .receiver import FrameReceiver, ShortReadReceiver
from .transport import TIMEOUT, Transport

log = logging.getLogger(__name__)

AUTH_REJECTED = -1


class State(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class RconSession:
    """
    One RCON connection: connect, authenticate, then execute commands one at a
    time. Each request is written and its reply read before the next request
    goes out; nothing is pipelined.

    `request_id` is fixed for the lifetime of the session and used for every
    command. A NetworkError at any point closes the session.
    """

    def __init__(
        self,
        host: str,
        port: int,
        request_id: int,
        timeout: float = TIMEOUT,
        receiver: Optional[FrameReceiver] = None,
        connector: Callable[..., Transport] = Transport.connect,
    ):
        self.host = host
        self.port = port
        self.request_id = request_id
        self.timeout = timeout
        self.receiver = receiver or ShortReadReceiver()
        self.connector = connector
        self.transport: Optional[Transport] = None
        self.state = State.DISCONNECTED

    def __enter__(self) -> "RconSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _set_state(self, state: State) -> None:
        log.debug("session %s -> %s", self.state.value, state.value)
        self.state = state

    def connect(self) -> None:
        if self.state is not State.DISCONNECTED:
            raise RconError(f"cannot connect a {self.state.value} session")
        self.transport = self.connector(self.host, self.port, self.timeout)
        self._set_state(State.CONNECTED)

    def _exchange(self, packet: bytes) -> bytes:
        if self.transport is None:
            raise RconError("not connected")
        try:
            self.transport.write(packet)
            return self.receiver.receive(self.transport)
        except NetworkError:
            self.close()
            raise

    def authenticate(self, password: str, request_id: Optional[int] = None) -> None:
        if self.state is not State.CONNECTED:
            raise RconError(f"cannot log in from a {self.state.value} session")
        if request_id is None:
            request_id = self.request_id

        raw = self._exchange(login_packet(password, request_id))
        if not raw:
            raise ProtocolError("no response received")
        reply = parse(raw)

        if reply.request_id == request_id and reply.packet_type == PacketType.COMMAND:
            self._set_state(State.AUTHENTICATED)
            return
        if reply.request_id == AUTH_REJECTED:
            raise AuthError("incorrect password")
        raise ProtocolError("login failed")

    def execute(self, command: str) -> str:
        """Send one command and return the reply text, format markers included."""
        if self.state is not State.AUTHENTICATED:
            raise RconError("not logged in")
        raw = self._exchange(command_packet(command.strip(), self.request_id))
        if not raw:
            raise ProtocolError("no response received")
        return parse(raw).text

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()
            self.transport = None
        if self.state is not State.CLOSED:
            self._set_state(State.CLOSED)
