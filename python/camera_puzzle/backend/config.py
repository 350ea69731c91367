"""Engine configuration — every timing constant lives here."""

from __future__ import annotations

from dataclasses import dataclass, field

# Side length of the square capture / drawing surface, divisible by 3, 4, 5.
PUZZLE_DIMENSION = 600

SUPPORTED_SIZES: tuple[int, ...] = (3, 4, 5)
CHALLENGE_DURATIONS: tuple[int, ...] = (1, 3, 5)


@dataclass(frozen=True)
class EngineConfig:
    """Tunable knobs of the puzzle engine (all durations in ms)."""

    puzzle_dimension: int = PUZZLE_DIMENSION
    supported_sizes: tuple[int, ...] = SUPPORTED_SIZES

    # -- countdown ------------------------------------------------------------
    countdown_from: int = 3
    countdown_tick_ms: float = 1000.0
    go_flourish_ms: float = 1000.0

    # -- swaps and shuffle ----------------------------------------------------
    swap_ms: float = 200.0
    shuffle_swap_ms: float = 50.0
    shuffle_delay_ms: float = 60.0
    shuffle_factor: float = 1.5

    # -- timed challenge ------------------------------------------------------
    challenge_tick_ms: float = 1000.0
    stage_cleared_ms: float = 1500.0
    default_duration_minutes: int = 3

    # -- hints and cosmetic feedback ------------------------------------------
    hints_by_size: dict[int, int] = field(
        default_factory=lambda: {3: 5, 4: 4, 5: 3}
    )
    hint_window_ms: float = 2500.0
    hint_shake_ms: float = 500.0
    hint_tooltip_ms: float = 2000.0
    undo_press_ms: float = 200.0
    glow_ms: float = 700.0

    # -- leaderboard ----------------------------------------------------------
    leaderboard_size: int = 5

    def hints_for(self, size: int) -> int:
        return self.hints_by_size.get(size, min(self.hints_by_size.values()))
