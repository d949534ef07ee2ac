# mc_rcon/driver.py
from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from .errors import RconError
from .session import RconSession

log = logging.getLogger(__name__)

LineSource = Callable[[], Union[str, Awaitable[str]]]
Sink = Callable[[str], None]


async def _read_line(read_line: LineSource) -> str:
    if inspect.iscoroutinefunction(read_line):
        return await read_line()
    # blocking sources (input, file readline) go to a worker thread
    line = await asyncio.to_thread(read_line)
    # a lambda or wrapper around a coroutine function hands back an awaitable
    if inspect.isawaitable(line):
        line = await line
    return line


async def _command_loop(
    session: RconSession, read_line: LineSource, write: Sink, cancelled: asyncio.Event
) -> Optional[Exception]:
    while not cancelled.is_set():
        try:
            line = await _read_line(read_line)
        except (EOFError, KeyboardInterrupt):
            return None
        except OSError as e:
            return e
        # nothing more goes to the server once an interrupt arrived
        if cancelled.is_set():
            break
        try:
            out = await asyncio.to_thread(session.execute, line)
        except (RconError, OSError) as e:
            return e
        try:
            write(out)
        except Exception as e:
            return e
    return None


async def run(
    session: RconSession,
    read_line: LineSource,
    write: Sink,
    cancelled: asyncio.Event,
) -> Optional[Exception]:
    """
    Interactive loop: read a line, execute it, write the reply, until the
    source ends, a command fails, or `cancelled` is set, whichever happens
    first. Returns None for a graceful stop, otherwise the error that ended
    the loop. The session is left open for the caller to close.

    `read_line` may be a coroutine function, a callable returning an
    awaitable, or a blocking callable; it raises EOFError at end of input.
    An exception from `write` also ends the loop and is returned.
    """
    commands = asyncio.create_task(_command_loop(session, read_line, write, cancelled))
    interrupt = asyncio.create_task(cancelled.wait())

    try:
        done, _ = await asyncio.wait({commands, interrupt}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for t in (commands, interrupt):
            t.cancel()
        for t in (commands, interrupt):
            with contextlib.suppress(asyncio.CancelledError):
                await t

    if commands in done:
        outcome = commands.result()
        log.debug("command loop finished: %r", outcome)
        return outcome
    log.debug("interrupted")
    return None


async def run_once(session: RconSession, command: str, write: Sink) -> None:
    write(await asyncio.to_thread(session.execute, command))
