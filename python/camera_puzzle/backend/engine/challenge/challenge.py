"""Bookkeeping for a timed challenge across several puzzles."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TimedChallengeStats:
    """Immutable summary taken when the clock runs out."""

    puzzles_cleared: int
    total_moves: int
    difficulty: int
    duration_minutes: int

    @property
    def average_seconds_per_puzzle(self) -> float | None:
        if self.puzzles_cleared <= 0:
            return None
        return self.duration_minutes * 60 / self.puzzles_cleared


@dataclass
class TimedSession:
    duration_minutes: int
    difficulty: int
    puzzles_cleared: int = 0
    total_moves: int = 0
    remaining_ms: float = field(init=False)

    def __post_init__(self) -> None:
        if self.duration_minutes <= 0:
            raise ValueError(
                f"Challenge duration must be positive, got {self.duration_minutes}."
            )
        self.remaining_ms = self.duration_minutes * 60_000

    @property
    def expired(self) -> bool:
        return self.remaining_ms <= 0

    def tick(self, elapsed_ms: float = 1000.0) -> bool:
        """Count down; returns True once the session has run out."""
        self.remaining_ms -= elapsed_ms
        return self.expired

    def record_clear(self, moves: int) -> None:
        self.puzzles_cleared += 1
        self.total_moves += moves

    def finish(self) -> TimedChallengeStats:
        return TimedChallengeStats(
            puzzles_cleared=self.puzzles_cleared,
            total_moves=self.total_moves,
            difficulty=self.difficulty,
            duration_minutes=self.duration_minutes,
        )
