"""Enumerations shared by the engine and the frontends."""

from __future__ import annotations

from enum import StrEnum


class GamePhase(StrEnum):
    IDLE = "idle"
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    WON = "won"
    TIMES_UP = "times-up"
    STAGE_CLEARED = "stage-cleared"
    ERROR = "error"


class GameMode(StrEnum):
    CLASSIC = "classic"
    TIMED = "timed"


class Direction(StrEnum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class Key(StrEnum):
    """Keyboard actions understood by the puzzle grid."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    SPACE = "space"

    @property
    def direction(self) -> Direction | None:
        try:
            return Direction(self.value)
        except ValueError:
            return None
