# mc_rcon/util.py
from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_PORT = 25575


@dataclass
class Settings:
    host: str
    port: int
    password: Optional[str]
    colored: bool = True
    strict_framing: bool = False


def read_properties(path: Path) -> dict:
    props = {}
    if path.exists():
        for line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                k, v = line.split("=", 1)
                props[k.strip()] = v.strip()
    return props


def resolve_settings(args, environ: Mapping[str, str]) -> Settings:
    """
    Flags win over the environment (RCON_PORT, RCON_PASSWORD), which wins over
    server.properties (rcon.port, rcon.password). Password may stay None;
    the CLI prompts for it then. A port that is not a number raises ValueError.
    """
    props = read_properties(Path(args.properties)) if args.properties else {}

    port = args.port if args.port is not None else (
        environ.get("RCON_PORT") or props.get("rcon.port") or DEFAULT_PORT
    )
    try:
        port = int(port)
    except ValueError:
        raise ValueError(f"invalid RCON port: {port!r}") from None
    password = environ.get("RCON_PASSWORD") or props.get("rcon.password") or None
    return Settings(
        host=args.host,
        port=port,
        password=password,
        colored=not args.no_color,
        strict_framing=args.strict_framing,
    )


def new_request_id() -> int:
    """Random non-negative int32; -1 is what the server sends back on a bad password."""
    return random.randint(0, 2**31 - 1)
