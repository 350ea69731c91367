"""Short-lived cosmetic events for the renderer (glows, shakes, ...)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EffectKind(StrEnum):
    GLOW = "glow"
    HINT_SHAKE = "hint-shake"
    HINT_TOOLTIP = "hint-tooltip"
    UNDO_PRESS = "undo-press"


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    start: float
    duration: float
    index: int | None = None

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return min(max((now - self.start) / self.duration, 0.0), 1.0)

    def alive(self, now: float) -> bool:
        return now - self.start < self.duration


class EffectLog:
    """Expiring-event list; the engine never reads it back."""

    def __init__(self) -> None:
        self._effects: list[Effect] = []

    def emit(
        self,
        kind: EffectKind,
        now: float,
        duration: float,
        index: int | None = None,
    ) -> Effect:
        effect = Effect(kind, now, duration, index)
        self._effects.append(effect)
        return effect

    def active(self, now: float) -> list[Effect]:
        self._effects = [e for e in self._effects if e.alive(now)]
        return list(self._effects)

    def is_active(self, kind: EffectKind, now: float) -> bool:
        return any(e.kind is kind for e in self.active(now))

    def clear(self) -> None:
        self._effects.clear()
