"""Scheduler tests."""

from __future__ import annotations

import pytest

from camera_puzzle.backend.engine.scheduler import Scheduler
from conftest import ManualClock


def test_timers_fire_in_due_order(clock: ManualClock) -> None:
    sched = Scheduler(clock)
    fired: list[str] = []
    sched.call_later(300, lambda: fired.append("c"))
    sched.call_later(100, lambda: fired.append("a"))
    sched.call_later(200, lambda: fired.append("b"))
    clock.advance(250)
    assert sched.run_due() == 2
    assert fired == ["a", "b"]
    clock.advance(50)
    sched.run_due()
    assert fired == ["a", "b", "c"]


def test_repeating_timer_catches_up(clock: ManualClock) -> None:
    sched = Scheduler(clock)
    ticks: list[float] = []
    sched.call_every(1000, lambda: ticks.append(sched.now))
    start = clock.now
    clock.advance(3500)
    sched.run_due()
    assert ticks == [start + 1000, start + 2000, start + 3000]


def test_cancelled_handle_never_fires(clock: ManualClock) -> None:
    sched = Scheduler(clock)
    fired: list[int] = []
    handle = sched.call_later(100, lambda: fired.append(1))
    handle.cancel()
    clock.advance(500)
    sched.run_due()
    assert fired == []
    assert sched.pending == 0


def test_cancel_all_from_inside_callback(clock: ManualClock) -> None:
    sched = Scheduler(clock)
    fired: list[str] = []

    def stop() -> None:
        fired.append("stop")
        sched.cancel_all()

    sched.call_every(100, lambda: fired.append("tick"))
    sched.call_later(150, stop)
    sched.call_later(400, lambda: fired.append("late"))
    clock.advance(1000)
    sched.run_due()
    assert fired == ["tick", "stop"]
    assert sched.pending == 0


def test_chained_timers_are_relative_to_due_time(clock: ManualClock) -> None:
    sched = Scheduler(clock)
    seen: list[float] = []
    start = clock.now
    sched.call_later(100, lambda: sched.call_later(100, lambda: seen.append(sched.now)))
    clock.advance(1000)
    sched.run_due()
    assert seen == [start + 200]


def test_non_positive_interval_rejected(clock: ManualClock) -> None:
    with pytest.raises(ValueError):
        Scheduler(clock).call_every(0, lambda: None)
