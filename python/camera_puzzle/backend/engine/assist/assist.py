"""Hint budget and move history for undo."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Move:
    a: int
    b: int


class MoveHistory:
    """Append-only during play; popped on undo; cleared per puzzle."""

    def __init__(self) -> None:
        self._moves: list[Move] = []

    def __len__(self) -> int:
        return len(self._moves)

    def push(self, move: Move) -> None:
        self._moves.append(move)

    def pop(self) -> Move | None:
        return self._moves.pop() if self._moves else None

    def clear(self) -> None:
        self._moves.clear()

    @property
    def moves(self) -> list[Move]:
        return list(self._moves)


class HintBudget:
    """Ghost-preview allowance for one puzzle; never replenished."""

    def __init__(self, remaining: int) -> None:
        self.remaining = remaining

    def use(self) -> bool:
        """Spend one hint.  Returns False when the budget is exhausted."""
        if self.remaining <= 0:
            return False
        self.remaining -= 1
        return True
