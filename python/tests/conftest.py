"""Shared fixtures: a hand-cranked clock and fake collaborators."""

from __future__ import annotations

import random

import pytest

from camera_puzzle.backend.config import EngineConfig
from camera_puzzle.backend.engine.capture import CaptureError, CaptureFailure
from camera_puzzle.backend.engine.feedback import VictoryFeedback
from camera_puzzle.backend.engine.gameplay import GameEngine
from camera_puzzle.backend.models.leaderboard import LeaderboardManager, MemoryStorage


class ManualClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 10_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


class FakeStream:
    def __init__(self) -> None:
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeVideoSource:
    def __init__(self, failure: CaptureFailure | None = None) -> None:
        self.failure = failure
        self.streams: list[FakeStream] = []
        self.requested: list[tuple[int, int]] = []

    def acquire(self, width: int, height: int) -> FakeStream:
        self.requested.append((width, height))
        if self.failure is not None:
            raise CaptureError(self.failure, "fake device refused")
        stream = FakeStream()
        self.streams.append(stream)
        return stream


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def video() -> FakeVideoSource:
    return FakeVideoSource()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def engine(
    clock: ManualClock, video: FakeVideoSource, storage: MemoryStorage
) -> GameEngine:
    return GameEngine(
        video=video,
        leaderboard=LeaderboardManager(storage),
        feedback=VictoryFeedback(),
        config=EngineConfig(),
        clock=clock,
        rng=random.Random(1234),
    )


def run_countdown(engine: GameEngine, clock: ManualClock) -> None:
    """Advance past the countdown and the shuffle animation."""
    cfg = engine.config
    clock.advance(cfg.countdown_tick_ms * cfg.countdown_from + cfg.go_flourish_ms)
    engine.update()
    clock.advance(cfg.shuffle_delay_ms * 40)
    engine.update()


def tap(engine: GameEngine, index: int) -> bool:
    """Click the centre of grid cell *index* on a 600×600 surface."""
    size = engine.session.size
    cell = 600 / size
    row, col = divmod(index, size)
    return engine.handle_click(col * cell + cell / 2, row * cell + cell / 2, 600, 600)
