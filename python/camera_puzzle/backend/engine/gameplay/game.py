"""Game phase state machine — owns the session and gates every action."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field

from camera_puzzle.backend.config import EngineConfig
from camera_puzzle.backend.engine.assist import HintBudget, Move, MoveHistory
from camera_puzzle.backend.engine.capture import (
    CAPTURE_MESSAGES,
    CaptureError,
    CaptureFailure,
    VideoSource,
    VideoStream,
)
from camera_puzzle.backend.engine.challenge import TimedChallengeStats, TimedSession
from camera_puzzle.backend.engine.effects import Effect, EffectKind, EffectLog
from camera_puzzle.backend.engine.feedback import TextGenerator, VictoryFeedback
from camera_puzzle.backend.engine.gamegenerator import GameGenerator
from camera_puzzle.backend.engine.inputmapper import InputMapper
from camera_puzzle.backend.engine.scheduler import (
    Clock,
    Scheduler,
    TimerHandle,
    monotonic_ms,
)
from camera_puzzle.backend.engine.scoring import compute_score
from camera_puzzle.backend.engine.transition import Transition, TransitionEngine
from camera_puzzle.backend.models.grid import Grid
from camera_puzzle.backend.models.leaderboard import LeaderboardManager, Score, Storage
from camera_puzzle.backend.models.phase import GameMode, GamePhase, Key

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Everything that lives from a start request until reset."""

    mode: GameMode
    size: int
    duration_minutes: int
    generation: int
    scheduler: Scheduler
    stream: VideoStream | None = None
    grid: Grid | None = None
    input: InputMapper | None = None
    history: MoveHistory = field(default_factory=MoveHistory)
    hints: HintBudget = field(default_factory=lambda: HintBudget(0))
    moves: int = 0
    started_at: float = 0.0
    shuffling: bool = False
    ghost_hint: bool = False
    countdown: int | str | None = None
    timed: TimedSession | None = None
    score: Score | None = None
    leaderboard_rank: int | None = None
    stats: TimedChallengeStats | None = None

    # named timer handles, cancelled by reference
    countdown_timers: list[TimerHandle] = field(default_factory=list)
    shuffle_timers: list[TimerHandle] = field(default_factory=list)
    hint_timer: TimerHandle | None = None
    challenge_timer: TimerHandle | None = None
    stage_timer: TimerHandle | None = None

    def cancel_puzzle_timers(self) -> None:
        for handle in self.shuffle_timers:
            handle.cancel()
        self.shuffle_timers = []
        if self.hint_timer is not None:
            self.hint_timer.cancel()
            self.hint_timer = None
        self.shuffling = False
        self.ghost_hint = False

    def cancel_all_timers(self) -> None:
        self.scheduler.cancel_all()
        self.countdown_timers = []
        self.shuffle_timers = []
        self.hint_timer = None
        self.challenge_timer = None
        self.stage_timer = None
        self.shuffling = False
        self.ghost_hint = False


@dataclass(frozen=True)
class RenderState:
    """Per-frame snapshot handed to a renderer."""

    phase: GamePhase
    mode: GameMode | None
    size: int
    tiles: tuple[int, ...]
    positions: tuple[tuple[float, float], ...]
    transition: Transition | None
    selected: int | None
    focused: int | None
    ghost_hint: bool
    shuffling: bool
    countdown: int | str | None
    moves: int
    elapsed_ms: float
    hints_remaining: int
    remaining_ms: float | None
    puzzles_cleared: int
    effects: tuple[Effect, ...]
    error: str | None


class GameEngine:
    """Drives one player through idle → countdown → playing → result."""

    def __init__(
        self,
        video: VideoSource,
        leaderboard: LeaderboardManager,
        feedback: VictoryFeedback | None = None,
        config: EngineConfig | None = None,
        clock: Clock = monotonic_ms,
        rng: random.Random | None = None,
    ) -> None:
        self.video = video
        self.leaderboard = leaderboard
        self.feedback = feedback or VictoryFeedback()
        self.config = config or EngineConfig()
        self.clock = clock
        self.rng = rng or random.Random()
        self.transitions = TransitionEngine()
        self.effects = EffectLog()
        self.session: GameSession | None = None
        self.error: str | None = None
        self._phase = GamePhase.IDLE
        self._generation = 0

    @classmethod
    def from_storage(
        cls,
        video: VideoSource,
        storage: Storage,
        generator: TextGenerator | None = None,
        config: EngineConfig | None = None,
        **kwargs,
    ) -> GameEngine:
        """Wire the leaderboard and feedback a frontend needs from *config*."""
        config = config or EngineConfig()
        return cls(
            video=video,
            leaderboard=LeaderboardManager(storage, config.leaderboard_size),
            feedback=VictoryFeedback(generator),
            config=config,
            **kwargs,
        )

    # -- phase ----------------------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def generation(self) -> int:
        return self._generation

    def _set_phase(self, phase: GamePhase) -> None:
        if phase is not self._phase:
            logger.info("Phase %s -> %s", self._phase, phase)
        self._phase = phase

    def _now(self) -> float:
        if self.session is not None:
            return self.session.scheduler.now
        return self.clock()

    @property
    def can_interact(self) -> bool:
        s = self.session
        return (
            self._phase is GamePhase.PLAYING
            and s is not None
            and not s.shuffling
            and not self.transitions.busy
        )

    # -- start / reset --------------------------------------------------------

    def start_quick_play(self) -> bool:
        return self.start_custom(GameMode.CLASSIC, 3)

    def start_custom(
        self,
        mode: GameMode,
        size: int,
        duration_minutes: int | None = None,
    ) -> bool:
        """Acquire the camera and begin the countdown.

        Returns False if a game is already under way or the camera could
        not be opened (the engine is then in the ``error`` phase).
        """
        if size not in self.config.supported_sizes:
            raise ValueError(
                f"Unsupported grid size {size}; "
                f"expected one of {self.config.supported_sizes}."
            )
        if duration_minutes is None:
            duration_minutes = self.config.default_duration_minutes
        if duration_minutes <= 0:
            raise ValueError(f"Challenge duration must be positive, got {duration_minutes}.")
        if self._phase is not GamePhase.IDLE:
            logger.debug("Ignoring start request in phase %s", self._phase)
            return False

        self._generation += 1
        self.feedback.reset(self._generation)
        self.session = GameSession(
            mode=mode,
            size=size,
            duration_minutes=duration_minutes,
            generation=self._generation,
            scheduler=Scheduler(self.clock),
        )
        if mode is GameMode.TIMED:
            self.session.timed = TimedSession(self.session.duration_minutes, size)

        dim = self.config.puzzle_dimension
        try:
            self.session.stream = self.video.acquire(dim, dim)
        except CaptureError as e:
            logger.warning("Camera unavailable (%s): %s", e.reason, e.detail)
            self._fail(e.message)
            return False

        self._start_countdown()
        return True

    def reset(self) -> None:
        """Tear the session down and return to ``idle`` from any phase."""
        self._teardown()
        self._generation += 1
        self.feedback.reset(self._generation)
        self.effects.clear()
        self.session = None
        self.error = None
        self._set_phase(GamePhase.IDLE)

    def play_again(self) -> bool:
        """Restart with the same settings from a result screen."""
        s = self.session
        if s is None or self._phase not in (GamePhase.WON, GamePhase.TIMES_UP):
            return False
        mode, size, minutes = s.mode, s.size, s.duration_minutes
        self.reset()
        return self.start_custom(mode, size, minutes)

    def capture_failed(self, reason: CaptureFailure, detail: str = "") -> None:
        """The video source dropped out after it was acquired."""
        logger.warning("Capture failed (%s): %s", reason, detail)
        self._fail(CAPTURE_MESSAGES[reason])

    def _fail(self, message: str) -> None:
        self._teardown()
        self.error = message
        self._set_phase(GamePhase.ERROR)

    def _teardown(self) -> None:
        self.transitions.cancel()
        s = self.session
        if s is None:
            return
        s.cancel_all_timers()
        if s.stream is not None:
            s.stream.stop()
            s.stream = None

    # -- countdown ------------------------------------------------------------

    def _start_countdown(self) -> None:
        s = self.session
        assert s is not None
        cfg = self.config
        self._set_phase(GamePhase.COUNTDOWN)
        s.countdown = cfg.countdown_from

        def show(value: int | str) -> None:
            s.countdown = value

        tick = cfg.countdown_tick_ms
        for step in range(1, cfg.countdown_from):
            s.countdown_timers.append(
                s.scheduler.call_later(
                    tick * step,
                    lambda v=cfg.countdown_from - step: show(v),
                    name="countdown",
                )
            )
        go_at = tick * cfg.countdown_from
        s.countdown_timers.append(
            s.scheduler.call_later(go_at, lambda: show("Go!"), name="countdown")
        )
        s.countdown_timers.append(
            s.scheduler.call_later(
                go_at + cfg.go_flourish_ms, self._enter_playing, name="countdown"
            )
        )

    def _enter_playing(self) -> None:
        s = self.session
        assert s is not None
        s.countdown_timers = []
        s.countdown = None
        self._set_phase(GamePhase.PLAYING)
        self._initialize_puzzle()
        if s.mode is GameMode.TIMED:
            s.challenge_timer = s.scheduler.call_every(
                self.config.challenge_tick_ms, self._challenge_tick, name="challenge"
            )

    # -- puzzle lifecycle -----------------------------------------------------

    def _initialize_puzzle(self) -> None:
        s = self.session
        assert s is not None
        s.cancel_puzzle_timers()
        self.transitions.cancel()

        s.grid = Grid.identity(s.size)
        GameGenerator.shuffle(s.grid, self.rng)
        s.input = InputMapper(s.size)
        s.history.clear()
        s.hints = HintBudget(self.config.hints_for(s.size))
        s.moves = 0
        if s.mode is GameMode.CLASSIC:
            s.started_at = s.scheduler.now
        self._play_shuffle_script()

    def restart_puzzle(self) -> bool:
        """Throw away the current puzzle and deal a new one."""
        if self._phase is not GamePhase.PLAYING:
            return False
        self._initialize_puzzle()
        return True

    def _play_shuffle_script(self) -> None:
        s = self.session
        assert s is not None
        cfg = self.config
        script = GameGenerator.animation_script(s.size, self.rng, cfg.shuffle_factor)
        s.shuffling = True
        for i, move in enumerate(script):
            s.shuffle_timers.append(
                s.scheduler.call_later(
                    cfg.shuffle_delay_ms * i,
                    lambda m=move: self._shuffle_step(m),
                    name="shuffle",
                )
            )
        s.shuffle_timers.append(
            s.scheduler.call_later(
                cfg.shuffle_delay_ms * len(script), self._finish_shuffle, name="shuffle"
            )
        )

    def _shuffle_step(self, move: Move) -> None:
        now = self._now()
        self._advance_transition(now)
        self.transitions.begin_swap(
            move.a, move.b, self.config.shuffle_swap_ms, now, cosmetic=True
        )

    def _finish_shuffle(self) -> None:
        s = self.session
        assert s is not None
        self._advance_transition(self._now())
        self.transitions.cancel()
        s.shuffle_timers = []
        s.shuffling = False

    # -- per-frame update -----------------------------------------------------

    def update(self, now: float | None = None) -> None:
        """Advance timers and the running transition to *now*."""
        s = self.session
        if s is None:
            return
        if now is None:
            now = self.clock()
        s.scheduler.run_due(now)
        with s.scheduler.at(now):
            self._advance_transition(now)

    def _advance_transition(self, now: float) -> None:
        s = self.session
        done = self.transitions.update(now)
        if done is None or s is None or s.grid is None:
            return
        if not done.cosmetic:
            s.grid.swap(done.a, done.b)
            for index in (done.a, done.b):
                if s.grid.is_tile_correct(index):
                    self.effects.emit(
                        EffectKind.GLOW, now, self.config.glow_ms, index
                    )
        if not s.shuffling:
            self._check_win(now)

    def _check_win(self, now: float) -> None:
        s = self.session
        if (
            s is None
            or s.grid is None
            or self._phase is not GamePhase.PLAYING
            or not s.grid.is_solved()
        ):
            return
        if s.mode is GameMode.CLASSIC:
            self._win_classic(now)
        else:
            self._clear_stage()

    def _win_classic(self, now: float) -> None:
        s = self.session
        assert s is not None
        elapsed = now - s.started_at
        value = compute_score(s.size, s.moves, elapsed)
        s.score = Score(
            score=value,
            moves=s.moves,
            time=elapsed,
            date=int(time.time() * 1000),
        )
        s.leaderboard_rank = self.leaderboard.add_score(s.size, s.score)
        s.cancel_all_timers()
        self._set_phase(GamePhase.WON)
        self.feedback.celebrate_classic(
            s.generation, s.size, value, s.moves, elapsed
        )

    def _clear_stage(self) -> None:
        s = self.session
        assert s is not None and s.timed is not None
        s.timed.record_clear(s.moves)
        s.cancel_puzzle_timers()
        self._set_phase(GamePhase.STAGE_CLEARED)
        s.stage_timer = s.scheduler.call_later(
            self.config.stage_cleared_ms, self._next_stage, name="stage"
        )

    def _next_stage(self) -> None:
        s = self.session
        assert s is not None
        s.stage_timer = None
        self._set_phase(GamePhase.PLAYING)
        self._initialize_puzzle()

    def _challenge_tick(self) -> None:
        s = self.session
        assert s is not None and s.timed is not None
        if s.timed.tick(self.config.challenge_tick_ms):
            self._end_challenge()

    def _end_challenge(self) -> None:
        s = self.session
        assert s is not None and s.timed is not None
        s.stats = s.timed.finish()
        self._teardown()
        self._set_phase(GamePhase.TIMES_UP)
        self.feedback.celebrate_timed(s.generation, s.stats)

    # -- input ----------------------------------------------------------------

    def handle_click(self, x: float, y: float, width: float, height: float) -> bool:
        """Pointer press at pixel ``(x, y)`` on a ``width × height`` surface."""
        if not self.can_interact:
            return False
        assert self.session is not None and self.session.input is not None
        index = self.session.input.index_at(x, y, width, height)
        if index is None:
            return False
        return self._interact(index)

    def handle_key(self, key: Key) -> bool:
        if not self.can_interact:
            return False
        s = self.session
        assert s is not None and s.input is not None
        direction = key.direction
        if direction is not None:
            s.input.move_focus(direction)
            return True
        return self._interact(s.input.focused or 0)

    def handle_pointer_move(
        self, x: float, y: float, width: float, height: float
    ) -> None:
        s = self.session
        if s is None or s.input is None:
            return
        if self._phase is not GamePhase.PLAYING:
            s.input.leave()
            return
        s.input.hover(x, y, width, height)

    def handle_pointer_leave(self) -> None:
        if self.session is not None and self.session.input is not None:
            self.session.input.leave()

    def _interact(self, index: int) -> bool:
        s = self.session
        assert s is not None and s.input is not None
        move = s.input.interact(index)
        if move is None:
            return True
        s.history.push(move)
        s.moves += 1
        self.transitions.begin_swap(move.a, move.b, self.config.swap_ms, self._now())
        return True

    # -- hint & undo ----------------------------------------------------------

    def request_hint(self) -> bool:
        """Show the solved image for a moment, if any hints are left."""
        if not self.can_interact:
            return False
        s = self.session
        assert s is not None
        now = self._now()
        if not s.hints.use():
            self.effects.emit(EffectKind.HINT_SHAKE, now, self.config.hint_shake_ms)
            self.effects.emit(
                EffectKind.HINT_TOOLTIP, now, self.config.hint_tooltip_ms
            )
            return False
        if s.hint_timer is not None:
            s.hint_timer.cancel()
        s.ghost_hint = True
        s.hint_timer = s.scheduler.call_later(
            self.config.hint_window_ms, self._hide_hint, name="hint"
        )
        return True

    def _hide_hint(self) -> None:
        s = self.session
        assert s is not None
        s.ghost_hint = False
        s.hint_timer = None

    def undo(self) -> bool:
        """Revert the most recent swap instantly (no animation)."""
        if not self.can_interact:
            return False
        s = self.session
        assert s is not None and s.grid is not None
        move = s.history.pop()
        if move is None:
            return False
        s.moves = max(0, s.moves - 1)
        s.grid.swap(move.a, move.b)
        self.effects.emit(EffectKind.UNDO_PRESS, self._now(), self.config.undo_press_ms)
        return True

    # -- render snapshot ------------------------------------------------------

    def elapsed_ms(self, now: float | None = None) -> float:
        s = self.session
        if s is None or s.mode is not GameMode.CLASSIC or s.grid is None:
            return 0.0
        if s.score is not None:
            return s.score.time
        if self._phase is not GamePhase.PLAYING:
            return 0.0
        return (self.clock() if now is None else now) - s.started_at

    def render_state(self, now: float | None = None) -> RenderState:
        if now is None:
            now = self.clock()
        s = self.session
        size = s.size if s is not None else 3
        grid = s.grid if s is not None else None
        tiles = tuple(grid.tiles) if grid is not None else ()
        return RenderState(
            phase=self._phase,
            mode=s.mode if s is not None else None,
            size=size,
            tiles=tiles,
            positions=tuple(self.transitions.positions(size, now)) if tiles else (),
            transition=self.transitions.active,
            selected=s.input.selected if s is not None and s.input else None,
            focused=s.input.focused if s is not None and s.input else None,
            ghost_hint=s.ghost_hint if s is not None else False,
            shuffling=s.shuffling if s is not None else False,
            countdown=s.countdown if s is not None else None,
            moves=s.moves if s is not None else 0,
            elapsed_ms=self.elapsed_ms(now),
            hints_remaining=s.hints.remaining if s is not None else 0,
            remaining_ms=(
                s.timed.remaining_ms if s is not None and s.timed else None
            ),
            puzzles_cleared=(
                s.timed.puzzles_cleared if s is not None and s.timed else 0
            ),
            effects=tuple(self.effects.active(now)),
            error=self.error,
        )
