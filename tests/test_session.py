import pytest

from conftest import PASSWORD, REQUEST_ID, FakeTransport
from mc_rcon.errors import AuthError, NetworkError, ProtocolError, RconError
from mc_rcon.packet import PacketType, serialize
from mc_rcon.session import RconSession, State


def make_session(transport, request_id=REQUEST_ID):
    return RconSession("mc.example.org", 25575, request_id, connector=lambda host, port, timeout: transport)


def test_connect_uses_host_port_and_timeout(connect_to):
    s = RconSession("mc.example.org", 25580, 1, timeout=2.5, connector=connect_to)
    assert s.state is State.DISCONNECTED
    s.connect()
    assert s.state is State.CONNECTED
    assert connect_to.calls == [("mc.example.org", 25580, 2.5)]


def test_connect_failure_leaves_session_disconnected():
    def refuse(host, port, timeout):
        raise NetworkError("cannot connect to mc.example.org:25575: refused")

    s = RconSession("mc.example.org", 25575, 1, connector=refuse)
    with pytest.raises(NetworkError):
        s.connect()
    assert s.state is State.DISCONNECTED


def test_login(session, transport):
    assert session.state is State.AUTHENTICATED
    (login,) = transport.written
    assert login.packet_type == PacketType.LOGIN
    assert login.request_id == REQUEST_ID
    assert login.payload == PASSWORD.encode()


def test_login_with_explicit_request_id(transport):
    s = make_session(transport)
    s.connect()
    s.authenticate(PASSWORD, request_id=77)
    assert transport.written[0].request_id == 77
    assert s.state is State.AUTHENTICATED


def test_wrong_password(transport):
    s = make_session(transport)
    s.connect()
    with pytest.raises(AuthError, match="incorrect password"):
        s.authenticate("letmein")
    assert s.state is State.CONNECTED


@pytest.mark.parametrize(
    "reply",
    [
        serialize(REQUEST_ID + 1, PacketType.COMMAND, b""),
        serialize(REQUEST_ID, PacketType.RESPONSE, b""),
    ],
)
def test_unexpected_login_reply(reply):
    s = make_session(FakeTransport([reply]))
    s.connect()
    with pytest.raises(ProtocolError, match="login failed"):
        s.authenticate(PASSWORD)


def test_no_login_reply():
    s = make_session(FakeTransport([]))
    s.connect()
    with pytest.raises(ProtocolError, match="no response"):
        s.authenticate(PASSWORD)


def test_execute_strips_and_returns_text(session, transport):
    assert session.execute("  list \n") == "ran list"
    cmd = transport.written[-1]
    assert cmd.packet_type == PacketType.COMMAND
    assert cmd.request_id == REQUEST_ID
    assert cmd.payload == b"list"


def test_reply_text_is_passed_through_unaltered(transport):
    reply = "§6There are §c0§6 of a max of §c20§6 players online:\n"
    transport.chunks = [serialize(REQUEST_ID, PacketType.COMMAND, b""), serialize(REQUEST_ID, 0, reply)]
    transport.handler = None
    s = make_session(transport)
    s.connect()
    s.authenticate(PASSWORD)
    assert s.execute("list") == reply


def test_strict_turn_taking(session, transport):
    transport.ops.clear()
    assert session.execute("time set day") == "ran time set day"
    assert session.execute("time set night") == "ran time set night"
    assert [op for op, _ in transport.ops] == ["write", "read", "write", "read"]
    assert [p.payload for p in transport.written] == [b"time set day", b"time set night"]


def test_execute_requires_login(transport):
    s = make_session(transport)
    s.connect()
    with pytest.raises(RconError, match="not logged in"):
        s.execute("list")
    assert transport.written == []


def test_peer_closed_during_command(session, transport):
    transport.handler = None
    with pytest.raises(ProtocolError, match="no response received"):
        session.execute("stop")


def test_network_error_closes_session(session, transport):
    transport.handler = lambda packet: [NetworkError("read failed: timed out")]
    with pytest.raises(NetworkError):
        session.execute("list")
    assert transport.closed
    assert session.state is State.CLOSED
    with pytest.raises(RconError):
        session.execute("list")


def test_close_is_idempotent(session, transport):
    session.close()
    session.close()
    assert transport.closed
    assert session.state is State.CLOSED


def test_context_manager(transport):
    with make_session(transport) as s:
        assert s.state is State.CONNECTED
        s.authenticate(PASSWORD)
        assert s.execute("seed") == "ran seed"
    assert transport.closed
    assert s.state is State.CLOSED


def test_cannot_reconnect_closed_session(session):
    session.close()
    with pytest.raises(RconError):
        session.connect()
