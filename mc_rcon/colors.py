# mc_rcon/colors.py
from __future__ import annotations

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText

MARKER = "§"  # section sign, followed by one code character

# Minecraft color codes -> prompt_toolkit ANSI colors. Formatting codes
# (k-o) and reset (r) fall through to no style.
COLOR_STYLES = {
    "0": "ansiblack",
    "1": "ansiblue",
    "2": "ansigreen",
    "3": "ansicyan",
    "4": "ansired",
    "5": "ansimagenta",
    "6": "ansiyellow",
    "7": "ansigray",
    "8": "ansibrightblack",
    "9": "ansibrightblue",
    "a": "ansibrightgreen",
    "b": "ansibrightcyan",
    "c": "ansibrightred",
    "d": "ansibrightmagenta",
    "e": "ansibrightyellow",
    "f": "ansiwhite",
}


def render(text: str, colored: bool = True) -> FormattedText:
    """Turn a reply with `§x` markers into styled fragments; each marker styles only its own segment.

    Codes are matched case-insensitively, so `§A` renders like `§a`.
    """
    text = text.strip("\n")
    if MARKER not in text:
        return FormattedText([("", text)])

    parts = text.split(MARKER)
    fragments = []
    if parts[0]:
        fragments.append(("", parts[0]))
    for part in parts[1:]:
        if not part:
            continue
        style = COLOR_STYLES.get(part[0].lower(), "") if colored else ""
        if part[1:]:
            fragments.append((style, part[1:]))
    return FormattedText(fragments)


def print_reply(text: str, colored: bool = True) -> None:
    print_formatted_text(render(text, colored))
