# mc_rcon/errors.py
from __future__ import annotations


class RconError(Exception):
    """Base class for everything the RCON client raises."""


class NetworkError(RconError):
    """Dial, read or write failed or timed out. The session is unusable afterwards."""


class AuthError(RconError):
    pass


class ProtocolError(RconError):
    """The server sent something that is not a valid reply (empty, truncated, mismatched)."""
