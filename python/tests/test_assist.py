"""Move history and hint budget tests."""

from __future__ import annotations

from camera_puzzle.backend.engine.assist import HintBudget, Move, MoveHistory


def test_history_is_lifo() -> None:
    history = MoveHistory()
    history.push(Move(0, 1))
    history.push(Move(3, 4))
    assert len(history) == 2
    assert history.pop() == Move(3, 4)
    assert history.pop() == Move(0, 1)
    assert history.pop() is None


def test_history_clear() -> None:
    history = MoveHistory()
    history.push(Move(1, 2))
    history.clear()
    assert history.moves == []


def test_hint_budget_never_goes_negative() -> None:
    budget = HintBudget(2)
    assert budget.use()
    assert budget.use()
    assert not budget.use()
    assert budget.remaining == 0
