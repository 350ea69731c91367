"""Game state machine tests, driven by a manual clock."""

from __future__ import annotations

import pytest

from camera_puzzle.backend.config import EngineConfig
from camera_puzzle.backend.engine.capture import CAPTURE_MESSAGES, CaptureFailure
from camera_puzzle.backend.engine.effects import EffectKind
from camera_puzzle.backend.engine.gameplay import GameEngine
from camera_puzzle.backend.models.grid import Grid
from camera_puzzle.backend.models.leaderboard import MemoryStorage, Score
from camera_puzzle.backend.models.phase import GameMode, GamePhase, Key
from conftest import FakeVideoSource, ManualClock, run_countdown, tap


def _play(engine: GameEngine, clock: ManualClock, mode=GameMode.CLASSIC, size=3, minutes=None):
    assert engine.start_custom(mode, size, minutes)
    run_countdown(engine, clock)
    assert engine.phase is GamePhase.PLAYING
    assert engine.can_interact


def _finish_swap(engine: GameEngine, clock: ManualClock) -> None:
    clock.advance(engine.config.swap_ms)
    engine.update()


def _swap(engine: GameEngine, clock: ManualClock, a: int, b: int) -> None:
    assert tap(engine, a)
    assert tap(engine, b)
    _finish_swap(engine, clock)


# -- start and countdown ------------------------------------------------------


def test_countdown_sequence(engine: GameEngine, clock: ManualClock, video: FakeVideoSource) -> None:
    assert engine.start_quick_play()
    assert video.requested == [(600, 600)]
    assert engine.phase is GamePhase.COUNTDOWN
    assert engine.session.countdown == 3
    seen = []
    for _ in range(4):
        clock.advance(1000)
        engine.update()
        seen.append(engine.session.countdown)
    assert seen == [2, 1, "Go!", None]
    assert engine.phase is GamePhase.PLAYING
    assert engine.session.shuffling


def test_input_ignored_during_countdown(engine: GameEngine, clock: ManualClock) -> None:
    engine.start_quick_play()
    assert not engine.can_interact
    assert not tap(engine, 0)
    assert not engine.handle_key(Key.RIGHT)
    assert not engine.request_hint()
    assert not engine.undo()


def test_start_ignored_unless_idle(engine: GameEngine) -> None:
    assert engine.start_quick_play()
    assert not engine.start_custom(GameMode.TIMED, 4)
    assert engine.session.mode is GameMode.CLASSIC


def test_unsupported_size_rejected(engine: GameEngine) -> None:
    with pytest.raises(ValueError):
        engine.start_custom(GameMode.CLASSIC, 6)
    assert engine.phase is GamePhase.IDLE


@pytest.mark.parametrize("minutes", [0, -1])
def test_non_positive_duration_rejected(
    engine: GameEngine, video: FakeVideoSource, minutes: int
) -> None:
    with pytest.raises(ValueError):
        engine.start_custom(GameMode.TIMED, 3, minutes)
    assert engine.phase is GamePhase.IDLE
    assert engine.session is None
    assert video.requested == []


def test_duration_defaults_when_omitted(engine: GameEngine) -> None:
    assert engine.start_custom(GameMode.TIMED, 3)
    assert engine.session.duration_minutes == engine.config.default_duration_minutes
    assert engine.session.timed.remaining_ms == 3 * 60 * 1000


def test_from_storage_uses_configured_leaderboard_size(clock: ManualClock) -> None:
    config = EngineConfig(leaderboard_size=2)
    engine = GameEngine.from_storage(
        FakeVideoSource(), MemoryStorage(), config=config, clock=clock
    )
    assert engine.config is config
    board = engine.leaderboard
    for value in (10, 30, 20):
        board.add_score(3, Score(score=value, moves=1, time=1000.0, date=0))
    assert [e.score for e in board.get_scores(3)] == [30, 20]


@pytest.mark.parametrize("reason", list(CaptureFailure))
def test_capture_failure_enters_error(clock: ManualClock, storage, reason: CaptureFailure) -> None:
    from camera_puzzle.backend.models.leaderboard import LeaderboardManager

    engine = GameEngine(FakeVideoSource(reason), LeaderboardManager(storage), clock=clock)
    assert not engine.start_quick_play()
    assert engine.phase is GamePhase.ERROR
    assert engine.error == CAPTURE_MESSAGES[reason]
    clock.advance(10_000)
    engine.update()
    assert engine.phase is GamePhase.ERROR
    engine.reset()
    assert engine.phase is GamePhase.IDLE
    assert engine.error is None


def test_late_capture_failure_cancels_everything(
    engine: GameEngine, clock: ManualClock, video: FakeVideoSource
) -> None:
    _play(engine, clock)
    engine.capture_failed(CaptureFailure.DEVICE_BUSY, "unplugged")
    assert engine.phase is GamePhase.ERROR
    assert video.streams[0].stopped
    assert engine.session.scheduler.pending == 0
    assert not engine.transitions.busy


# -- shuffle ------------------------------------------------------------------


@pytest.mark.parametrize("size", [3, 4, 5])
def test_puzzle_starts_shuffled(engine: GameEngine, clock: ManualClock, size: int) -> None:
    _play(engine, clock, size=size)
    grid = engine.session.grid
    assert sorted(grid.tiles) == list(range(size * size))
    assert not grid.is_solved()
    assert engine.session.hints.remaining == {3: 5, 4: 4, 5: 3}[size]
    assert engine.session.input.focused == 0
    assert engine.session.moves == 0


def test_shuffle_animation_never_changes_grid(engine: GameEngine, clock: ManualClock) -> None:
    engine.start_quick_play()
    clock.advance(4000)
    engine.update()
    committed = engine.session.grid.tiles[:]
    assert engine.session.shuffling
    saw_transition = False
    while engine.session.shuffling:
        assert not engine.can_interact
        assert not tap(engine, 0)
        saw_transition = saw_transition or engine.transitions.busy
        clock.advance(10)
        engine.update()
        assert engine.session.grid.tiles == committed
    assert saw_transition
    assert not engine.transitions.busy
    assert engine.can_interact


# -- swapping -----------------------------------------------------------------


def test_swap_commits_only_after_transition(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    before = engine.session.grid.tiles[:]
    assert tap(engine, 0)
    assert engine.session.input.selected == 0
    assert tap(engine, 4)
    assert engine.session.input.selected is None
    assert engine.session.moves == 1
    assert engine.transitions.busy
    assert engine.session.grid.tiles == before
    assert not tap(engine, 1)  # blocked while animating
    clock.advance(100)
    engine.update()
    assert engine.session.grid.tiles == before
    _finish_swap(engine, clock)
    expected = before[:]
    expected[0], expected[4] = expected[4], expected[0]
    assert engine.session.grid.tiles == expected
    assert not engine.transitions.busy


def test_same_tile_twice_is_not_a_move(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    tap(engine, 3)
    tap(engine, 3)
    assert engine.session.moves == 0
    assert not engine.transitions.busy


def test_click_outside_surface_ignored(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    assert not engine.handle_click(700, 10, 600, 600)
    assert engine.session.input.selected is None


def test_keyboard_selects_and_swaps(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    before = engine.session.grid.tiles[:]
    assert engine.handle_key(Key.ENTER)  # select 0
    engine.handle_key(Key.RIGHT)
    engine.handle_key(Key.RIGHT)
    engine.handle_key(Key.RIGHT)  # clamped at 2
    assert engine.session.input.focused == 2
    assert engine.handle_key(Key.SPACE)
    _finish_swap(engine, clock)
    assert engine.session.grid.tiles[0] == before[2]
    assert engine.session.grid.tiles[2] == before[0]


def test_correct_placement_emits_glow(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    s = engine.session
    s.grid = Grid.from_flat(3, [1, 0, 2, 3, 4, 5, 6, 8, 7])
    _swap(engine, clock, 0, 1)
    glows = [e.index for e in engine.effects.active(clock.now) if e.kind is EffectKind.GLOW]
    assert sorted(glows) == [0, 1]


# -- classic win --------------------------------------------------------------


def test_classic_end_to_end(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    s = engine.session
    s.grid = Grid.from_flat(3, [1, 0, 2, 3, 4, 5, 6, 8, 7])
    started = s.started_at
    _swap(engine, clock, 0, 1)
    assert engine.phase is GamePhase.PLAYING
    clock.advance(5000)
    _swap(engine, clock, 7, 8)
    assert engine.phase is GamePhase.WON
    elapsed = clock.now - started
    assert s.score is not None
    assert s.score.moves == 2
    assert s.score.time == pytest.approx(elapsed)
    assert s.score.score == 8100 - int(elapsed // 50) - 2 * 30
    bucket = engine.leaderboard.get_scores(3)
    assert len(bucket) == 1 and bucket[0] == s.score
    assert s.leaderboard_rank == 1
    assert engine.render_state().elapsed_ms == pytest.approx(elapsed)
    assert not engine.can_interact
    assert engine.session.scheduler.pending == 0


def test_win_persists_through_storage(engine: GameEngine, clock: ManualClock, storage) -> None:
    from camera_puzzle.backend.models.leaderboard import LEADERBOARD_KEY

    _play(engine, clock)
    engine.session.grid = Grid.from_flat(3, [1, 0, 2, 3, 4, 5, 6, 7, 8])
    _swap(engine, clock, 0, 1)
    assert engine.phase is GamePhase.WON
    assert '"3"' in storage.get(LEADERBOARD_KEY)


def test_play_again_keeps_settings(engine: GameEngine, clock: ManualClock, video: FakeVideoSource) -> None:
    _play(engine, clock, size=4)
    engine.session.grid = Grid.from_flat(4, [1, 0] + list(range(2, 16)))
    _swap(engine, clock, 0, 1)
    assert engine.phase is GamePhase.WON
    old_generation = engine.generation
    assert engine.play_again()
    assert video.streams[0].stopped
    assert engine.phase is GamePhase.COUNTDOWN
    assert engine.session.size == 4
    assert engine.generation > old_generation


# -- hint & undo --------------------------------------------------------------


def test_hint_budget_and_window(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    s = engine.session
    assert engine.request_hint()
    assert s.ghost_hint and s.hints.remaining == 4
    clock.advance(2000)
    engine.update()
    assert engine.request_hint()  # restarts the window rather than stacking
    clock.advance(1000)
    engine.update()
    assert s.ghost_hint
    clock.advance(1500)
    engine.update()
    assert not s.ghost_hint
    assert s.hints.remaining == 3


def test_hint_at_zero_only_pulses(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    s = engine.session
    s.hints.remaining = 0
    assert not engine.request_hint()
    assert s.hints.remaining == 0
    assert not s.ghost_hint
    assert engine.effects.is_active(EffectKind.HINT_SHAKE, clock.now)
    assert engine.effects.is_active(EffectKind.HINT_TOOLTIP, clock.now)


def test_hint_ignored_while_shuffling(engine: GameEngine, clock: ManualClock) -> None:
    engine.start_quick_play()
    clock.advance(4000)
    engine.update()
    assert engine.session.shuffling
    assert not engine.request_hint()
    assert engine.session.hints.remaining == 5
    assert not engine.session.ghost_hint


def test_undo_restores_exact_grid(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    s = engine.session
    before = s.grid.tiles[:]
    _swap(engine, clock, 2, 6)
    assert s.grid.tiles != before
    assert engine.undo()
    assert s.grid.tiles == before
    assert s.moves == 0
    assert not engine.undo()
    assert s.moves == 0
    assert s.grid.tiles == before


def test_undo_blocked_while_animating(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    _swap(engine, clock, 0, 1)
    tap(engine, 2)
    tap(engine, 3)
    assert not engine.undo()
    assert len(engine.session.history) == 2


def test_restart_puzzle_resets_counters(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock)
    _swap(engine, clock, 0, 1)
    engine.request_hint()
    assert engine.restart_puzzle()
    s = engine.session
    assert s.moves == 0 and len(s.history) == 0
    assert s.hints.remaining == 5
    assert not s.ghost_hint
    assert s.shuffling


# -- timed challenge ----------------------------------------------------------


def test_timed_stage_cleared_then_next_puzzle(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock, mode=GameMode.TIMED, size=3, minutes=3)
    s = engine.session
    s.grid = Grid.from_flat(3, [1, 0, 2, 3, 4, 5, 6, 7, 8])
    _swap(engine, clock, 0, 1)
    assert engine.phase is GamePhase.STAGE_CLEARED
    assert s.timed.puzzles_cleared == 1
    assert s.timed.total_moves == 1
    assert engine.leaderboard.get_scores(3) == []
    assert not engine.can_interact
    clock.advance(1500)
    engine.update()
    assert engine.phase is GamePhase.PLAYING
    assert s.moves == 0
    assert not s.grid.is_solved()
    assert s.timed.puzzles_cleared == 1


def test_timed_times_up(engine: GameEngine, clock: ManualClock, video: FakeVideoSource) -> None:
    _play(engine, clock, mode=GameMode.TIMED, size=4, minutes=3)
    s = engine.session
    # run_countdown already let some of the first second pass
    for _ in range(180):
        clock.advance(1000)
        engine.update()
        if engine.phase is GamePhase.TIMES_UP:
            break
    assert engine.phase is GamePhase.TIMES_UP
    assert s.timed.remaining_ms <= 0
    assert s.stats is not None
    assert (s.stats.puzzles_cleared, s.stats.difficulty, s.stats.duration_minutes) == (0, 4, 3)
    assert s.stats.average_seconds_per_puzzle is None
    assert video.streams[0].stopped
    assert s.scheduler.pending == 0
    assert not tap(engine, 0)


def test_times_up_after_exactly_180_ticks(engine: GameEngine, clock: ManualClock) -> None:
    engine.start_custom(GameMode.TIMED, 3, 3)
    clock.advance(4000)
    engine.update()
    for tick in range(1, 181):
        clock.advance(1000)
        engine.update()
        if tick < 180:
            assert engine.phase is GamePhase.PLAYING
    assert engine.phase is GamePhase.TIMES_UP


def test_times_up_during_stage_cleared(engine: GameEngine, clock: ManualClock) -> None:
    _play(engine, clock, mode=GameMode.TIMED, size=3, minutes=1)
    s = engine.session
    s.timed.remaining_ms = 1000
    s.grid = Grid.from_flat(3, [1, 0, 2, 3, 4, 5, 6, 7, 8])
    assert tap(engine, 0) and tap(engine, 1)
    engine.update(s.scheduler.now + engine.config.swap_ms)
    assert engine.phase is GamePhase.STAGE_CLEARED
    clock.advance(3000)
    engine.update()
    assert engine.phase is GamePhase.TIMES_UP
    assert s.stats.puzzles_cleared == 1


# -- reset --------------------------------------------------------------------


@pytest.mark.parametrize("advance", [0, 1500, 4100, 6000])
def test_reset_cancels_all_timers(
    engine: GameEngine, clock: ManualClock, video: FakeVideoSource, advance: float
) -> None:
    engine.start_custom(GameMode.TIMED, 5, 1)
    clock.advance(advance)
    engine.update()
    if engine.phase is GamePhase.PLAYING:
        engine.request_hint()
    session = engine.session
    engine.reset()
    assert engine.phase is GamePhase.IDLE
    assert engine.session is None
    assert session.scheduler.pending == 0
    assert video.streams[0].stopped
    assert not engine.transitions.busy
    clock.advance(120_000)
    engine.update()
    assert engine.phase is GamePhase.IDLE


def test_render_state_snapshot(engine: GameEngine, clock: ManualClock) -> None:
    idle = engine.render_state()
    assert idle.phase is GamePhase.IDLE and idle.tiles == ()
    _play(engine, clock, size=4)
    tap(engine, 0)
    state = engine.render_state()
    assert state.size == 4 and len(state.tiles) == 16 and len(state.positions) == 16
    assert state.selected == 0
    assert state.hints_remaining == 4
    assert state.remaining_ms is None
