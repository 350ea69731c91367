"""Classic-mode score formula and time formatting."""

from __future__ import annotations

import math


def compute_score(size: int, moves: int, elapsed_ms: float) -> int:
    """Return the score for a solved classic puzzle.

    Bigger grids start from a larger base (``size**4 * 100``); every 50 ms
    and every move eat into it.  Never negative.
    """
    base = size**4 * 100
    time_penalty = math.floor(elapsed_ms / 50)
    move_penalty = moves * size * 10
    return max(0, math.floor(base - time_penalty - move_penalty))


def format_duration(ms: float) -> str:
    """``MM:SS.cc`` as shown on the leaderboard."""
    total_seconds, rest = divmod(int(ms), 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}.{rest // 10:02d}"


def format_clock(ms: float) -> str:
    """``MM:SS`` rounded up, for the challenge countdown."""
    total_seconds = max(0, math.ceil(ms / 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def describe_duration(ms: float) -> str:
    """Human wording, e.g. ``"1 minute and 5 seconds"``."""
    minutes, seconds = divmod(int(ms // 1000), 60)
    parts: list[str] = []
    if minutes > 0:
        parts.append(f"{minutes} minute{'s' if minutes > 1 else ''}")
    if seconds > 0 or minutes == 0:
        parts.append(f"{seconds} second{'' if seconds == 1 else 's'}")
    return " and ".join(parts)
