#!/usr/bin/env python3
from __future__ import annotations
import argparse, asyncio, contextlib, functools, logging, os, signal, sys
from typing import Optional

from prompt_toolkit import PromptSession, prompt

from mc_rcon.colors import print_reply
from mc_rcon.driver import run, run_once
from mc_rcon.errors import RconError
from mc_rcon.receiver import LengthPrefixedReceiver, ShortReadReceiver
from mc_rcon.session import RconSession
from mc_rcon.util import DEFAULT_PORT, Settings, new_request_id, resolve_settings

# --- helpers -----------------------------------------------------------------

def error(msg) -> None:
    print(f"[rcon error] {msg}", file=sys.stderr, flush=True)

def ask_password() -> Optional[str]:
    try:
        return prompt("Password: ", is_password=True)
    except (EOFError, KeyboardInterrupt):
        return None

def _watch_signals(cancelled: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # not available on Windows event loops; Ctrl-C still ends the prompt there
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, cancelled.set)

# --- interactive / one-shot --------------------------------------------------

async def interactive(session: RconSession, colored: bool, input=None, output=None) -> Optional[Exception]:
    cancelled = asyncio.Event()
    _watch_signals(cancelled)
    ps: PromptSession = PromptSession("> ", input=input, output=output)
    # prompt_toolkit would otherwise swap out our SIGINT handler on every prompt;
    # Ctrl-C while typing still raises KeyboardInterrupt through its key binding
    read_line = functools.partial(ps.prompt_async, handle_sigint=False)
    return await run(session, read_line, lambda text: print_reply(text, colored), cancelled)

async def one_shot(session: RconSession, command: str, colored: bool) -> None:
    await run_once(session, command, lambda text: print_reply(text, colored))

def open_session(settings: Settings) -> RconSession:
    receiver = LengthPrefixedReceiver() if settings.strict_framing else ShortReadReceiver()
    return RconSession(settings.host, settings.port, new_request_id(), receiver=receiver)

def do_rcon(args) -> int:
    try:
        settings = resolve_settings(args, os.environ)
    except ValueError as e:
        error(e)
        return 1
    session = open_session(settings)
    try:
        session.connect()
    except RconError as e:
        error(e)
        return 1

    try:
        # ask only once the server is known to be reachable
        password = settings.password if settings.password is not None else ask_password()
        if password is None:
            error("no password given")
            return 1
        session.authenticate(password)
        if args.command:
            asyncio.run(one_shot(session, args.command, settings.colored))
            return 0

        print("Successfully logged in")
        outcome = asyncio.run(interactive(session, settings.colored))
        if outcome is not None:
            error(outcome)
            return 1
        print("\nShutting down...")
        return 0
    except RconError as e:
        error(e)
        return 1
    finally:
        session.close()

# --- argparse ----------------------------------------------------------------

def build_parser():
    p = argparse.ArgumentParser(prog="mcrcon.py", description="Interactive Minecraft RCON console.")
    p.add_argument("host")
    p.add_argument("command", nargs="?", help="Run a single command and exit")
    p.add_argument("--port", type=int, help=f"RCON port (default: $RCON_PORT, rcon.port or {DEFAULT_PORT})")
    p.add_argument("--no-color", action="store_true", help="Disable color output")
    p.add_argument("--properties", metavar="FILE", help="Read rcon.port / rcon.password from a server.properties")
    p.add_argument("--strict-framing", action="store_true",
                   help="Read replies by their size field instead of stopping at a short read")
    p.add_argument("--debug", action="store_true", help="Log connection and packet details to stderr")
    p.set_defaults(func=do_rcon)
    return p

def main(argv=None):
    argv = argv if argv is not None else sys.argv[1:]
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    return args.func(args)

if __name__ == "__main__":
    raise SystemExit(main())
