"""Cross-platform single-keypress reader for the terminal frontend.

Handles arrow keys, WASD, Enter/Space and the puzzle's action keys
without requiring Enter.  Works on macOS / Linux (tty+termios) and
Windows (msvcrt).
"""

from __future__ import annotations

import os
import sys
from typing import Callable

# -- shared key mapping --------------------------------------------------------

_KEY_MAP: dict[str, str] = {
    "w": "up",
    "s": "down",
    "a": "left",
    "d": "right",
    "q": "quit",
    "\x03": "quit",  # Ctrl-C
    "r": "restart",
    "h": "hint",
    "u": "undo",
    "z": "undo",
    "l": "scores",
    "m": "mode",
    "t": "time",
    "\r": "enter",
    "\n": "enter",
    " ": "space",
}

_ARROW_MAP: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
}


def _resolve(ch: str) -> str:
    """Map a raw character to its action string."""
    action = _KEY_MAP.get(ch) or _KEY_MAP.get(ch.lower())
    if action:
        return action
    return ch if ch.isprintable() else ""


def _decode_escape(read: Callable[[], str | None]) -> str:
    """Finish an ``ESC`` sequence; *read* returns None when nothing follows."""
    ch2 = read()
    if ch2 != "[":
        return "quit"  # bare Escape
    ch3 = read()
    return _ARROW_MAP.get(ch3 or "", "")


# -- public API ----------------------------------------------------------------


def get_key_timeout(timeout: float) -> str | None:
    """Read a single keypress, waiting at most *timeout* seconds.

    Returns a normalised action string:
        "up", "down", "left", "right"  — focus movement
        "enter", "space"               — select the focused tile
        "hint", "undo", "restart"      — puzzle actions
        "quit"                         — q / Ctrl-C / Escape
        "mode", "time", "scores"       — menu toggles
        "<char>"                       — unmapped printable char
        ""                             — unrecognised key
    or ``None`` if no key was pressed in time.
    """
    if os.name == "nt":
        return _get_key_windows(timeout)
    return _get_key_unix(timeout)


def _get_key_windows(timeout: float) -> str | None:
    import msvcrt  # type: ignore[import-not-found]
    import time as _time

    end = _time.monotonic() + timeout
    while not msvcrt.kbhit():
        if _time.monotonic() >= end:
            return None
        _time.sleep(0.01)

    ch = msvcrt.getwch()
    if ch in ("\x00", "\xe0"):
        # Windows arrow keys arrive as a two-char scan code.
        return {"H": "up", "P": "down", "K": "left", "M": "right"}.get(
            msvcrt.getwch(), ""
        )
    return _resolve(ch)


def _get_key_unix(timeout: float) -> str | None:
    import select
    import termios
    import tty

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)

    def read(wait: float) -> str | None:
        ready, _, _ = select.select([fd], [], [], wait)
        if not ready:
            return None
        # os.read (unbuffered) so select() still sees the rest of a
        # multi-byte escape sequence.
        return os.read(fd, 1).decode("utf-8", errors="ignore")

    try:
        tty.setraw(fd)
        ch = read(timeout)
        if ch is None:
            return None
        if ch == "\x1b":
            return _decode_escape(lambda: read(0.05))
        return _resolve(ch)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)
