"""Pygame GUI frontend — the live-camera puzzle.

Includes main menu, custom settings, countdown, gameplay, result screens
and the leaderboard.  Tiles are cut from the live camera frame every
frame, so the picture keeps moving while the player rearranges it.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import math
from datetime import datetime
from pathlib import Path

import pygame
import pygame.camera

from camera_puzzle.backend.config import CHALLENGE_DURATIONS, SUPPORTED_SIZES
from camera_puzzle.backend.engine.capture import CaptureError, CaptureFailure, classify
from camera_puzzle.backend.engine.effects import EffectKind
from camera_puzzle.backend.engine.feedback import TextGenerator
from camera_puzzle.backend.engine.gameplay import GameEngine, RenderState
from camera_puzzle.backend.engine.scoring import (
    describe_duration,
    format_clock,
    format_duration,
)
from camera_puzzle.backend.models.leaderboard import JsonFileStorage
from camera_puzzle.backend.models.phase import GameMode, GamePhase, Key

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Catppuccin Mocha palette
# ---------------------------------------------------------------------------
COL_BASE = (30, 30, 46)
COL_MANTLE = (24, 24, 37)
COL_SURFACE0 = (49, 50, 68)
COL_SURFACE1 = (69, 71, 90)
COL_OVERLAY0 = (108, 112, 134)
COL_TEXT = (205, 214, 244)
COL_SUBTEXT = (166, 173, 200)
COL_BLUE = (137, 180, 250)
COL_LAVENDER = (180, 190, 254)
COL_GREEN = (166, 227, 161)
COL_PINK = (245, 194, 231)
COL_YELLOW = (249, 226, 175)
COL_RED = (243, 139, 168)

# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------
WIN_W, WIN_H = 560, 760
MARGIN = 40
BOARD_PX = WIN_W - 2 * MARGIN
BOARD_Y = 86
FPS = 60


# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------
class CameraStream:
    """A started ``pygame.camera.Camera`` cropped to a square frame."""

    def __init__(self, camera: pygame.camera.Camera) -> None:
        self._camera = camera
        self._last: pygame.Surface | None = None

    def frame(self) -> pygame.Surface | None:
        """Latest mirrored square frame (the previous one if none is ready)."""
        if self._camera.query_image() or self._last is None:
            raw = self._camera.get_image()
            side = min(raw.get_width(), raw.get_height())
            crop = raw.subsurface(
                pygame.Rect(
                    (raw.get_width() - side) // 2,
                    (raw.get_height() - side) // 2,
                    side,
                    side,
                )
            )
            self._last = pygame.transform.flip(crop, True, False)
        return self._last

    def stop(self) -> None:
        self._camera.stop()
        logger.debug("Camera stopped")


class PygameCameraSource:
    def __init__(self, device: str | None = None) -> None:
        self._device = device
        pygame.camera.init()

    def acquire(self, width: int, height: int) -> CameraStream:
        cameras = pygame.camera.list_cameras()
        if not cameras:
            raise CaptureError(CaptureFailure.NOT_FOUND, "no cameras listed")
        name = self._device or cameras[0]
        try:
            camera = pygame.camera.Camera(name, (width, height))
            camera.start()
        except (pygame.error, SystemError, OSError) as e:
            raise CaptureError(classify(str(e)), str(e)) from e
        logger.info("Camera %s started at %dx%d", name, width, height)
        return CameraStream(camera)


# ---------------------------------------------------------------------------
# Screen enum
# ---------------------------------------------------------------------------
class _Screen(enum.Enum):
    MENU = "menu"
    CUSTOM = "custom"
    GAME = "game"
    SCORES = "scores"


# ---------------------------------------------------------------------------
# Simple clickable button
# ---------------------------------------------------------------------------
class _Btn:
    __slots__ = ("rect", "text", "font", "bg", "hover", "fg", "radius", "_hot")

    def __init__(
        self,
        rect: tuple[int, int, int, int],
        text: str,
        font: pygame.font.Font,
        *,
        bg: tuple = COL_SURFACE0,
        hover: tuple = COL_SURFACE1,
        fg: tuple = COL_TEXT,
        radius: int = 8,
    ) -> None:
        self.rect = pygame.Rect(rect)
        self.text = text
        self.font = font
        self.bg = bg
        self.hover = hover
        self.fg = fg
        self.radius = radius
        self._hot = False

    def draw(self, surf: pygame.Surface, dx: int = 0, pressed: bool = False) -> None:
        c = self.hover if self._hot or pressed else self.bg
        rect = self.rect.move(dx, 2 if pressed else 0)
        pygame.draw.rect(surf, c, rect, border_radius=self.radius)
        lbl = self.font.render(self.text, True, self.fg)
        surf.blit(
            lbl,
            (
                rect.centerx - lbl.get_width() // 2,
                rect.centery - lbl.get_height() // 2,
            ),
        )

    def motion(self, pos: tuple[int, int]) -> None:
        self._hot = self.rect.collidepoint(pos)

    def hit(self, pos: tuple[int, int]) -> bool:
        return self.rect.collidepoint(pos)


# ---------------------------------------------------------------------------
# Centring helpers
# ---------------------------------------------------------------------------
def _cx(w: int) -> int:
    return (WIN_W - w) // 2


def _blit_center(surf: pygame.Surface, rendered: pygame.Surface, y: int) -> None:
    surf.blit(rendered, (_cx(rendered.get_width()), y))


_BOARD_RECT = pygame.Rect(_cx(BOARD_PX), BOARD_Y, BOARD_PX, BOARD_PX)


# ---------------------------------------------------------------------------
# Main application
# ---------------------------------------------------------------------------
class PygameApp:
    def __init__(
        self,
        default_size: int,
        data_dir: Path,
        generator: TextGenerator | None = None,
        mode: GameMode = GameMode.CLASSIC,
        minutes: int = 3,
    ) -> None:
        pygame.init()
        self._surf = pygame.display.set_mode((WIN_W, WIN_H))
        pygame.display.set_caption("Camera Puzzle")
        self._clock = pygame.time.Clock()

        self._engine = GameEngine.from_storage(
            PygameCameraSource(), JsonFileStorage(data_dir), generator
        )
        self._sel_size = default_size if default_size in SUPPORTED_SIZES else 3
        self._sel_mode = mode
        self._sel_minutes = minutes if minutes in CHALLENGE_DURATIONS else 3

        # Fonts
        self._f_huge = pygame.font.SysFont("Helvetica", 120, bold=True)
        self._f_big = pygame.font.SysFont("Helvetica", 38, bold=True)
        self._f_title = pygame.font.SysFont("Helvetica", 22, bold=True)
        self._f_body = pygame.font.SysFont("Helvetica", 16)
        self._f_btn = pygame.font.SysFont("Helvetica", 17, bold=True)
        self._f_btn_sm = pygame.font.SysFont("Helvetica", 14, bold=True)
        self._f_small = pygame.font.SysFont("Helvetica", 13)

        self._screen = _Screen.MENU

        self._build_menu_btns()
        self._build_custom_btns()
        self._build_game_btns()
        self._score_back = _Btn(
            (_cx(180), WIN_H - 64, 180, 46), "B A C K", self._f_btn_sm
        )

    # ── buttons ─────────────────────────────────────────────────────────────

    def _build_menu_btns(self) -> None:
        bw = 240
        self._quick_btn = _Btn(
            (_cx(bw), 280, bw, 52),
            "QUICK PLAY",
            self._f_btn,
            bg=COL_BLUE,
            hover=COL_LAVENDER,
            fg=COL_BASE,
        )
        self._custom_btn = _Btn(
            (_cx(bw), 348, bw, 44), "CUSTOM GAME", self._f_btn_sm
        )
        self._scores_btn = _Btn(
            (_cx(bw), 408, bw, 44), "LEADERBOARD", self._f_btn_sm
        )
        self._quit_btn = _Btn(
            (_cx(bw), 468, bw, 44),
            "Q U I T",
            self._f_btn_sm,
            bg=COL_RED,
            hover=(255, 170, 185),
            fg=COL_BASE,
        )
        self._menu_all = [
            self._quick_btn,
            self._custom_btn,
            self._scores_btn,
            self._quit_btn,
        ]

    def _row(self, labels: list[str], y: int, bw: int = 120) -> list[_Btn]:
        gap = 10
        sx = _cx(len(labels) * bw + (len(labels) - 1) * gap)
        return [
            _Btn((sx + i * (bw + gap), y, bw, 44), label, self._f_btn_sm)
            for i, label in enumerate(labels)
        ]

    def _build_custom_btns(self) -> None:
        self._mode_btns = dict(
            zip((GameMode.CLASSIC, GameMode.TIMED), self._row(["CLASSIC", "TIMED"], 190))
        )
        self._size_btns = dict(
            zip(SUPPORTED_SIZES, self._row([f"{s}×{s}" for s in SUPPORTED_SIZES], 290))
        )
        self._minute_btns = dict(
            zip(
                CHALLENGE_DURATIONS,
                self._row([f"{m} MIN" for m in CHALLENGE_DURATIONS], 390),
            )
        )
        bw = 220
        self._start_btn = _Btn(
            (_cx(bw), 490, bw, 50),
            "S T A R T",
            self._f_btn,
            bg=COL_GREEN,
            hover=(190, 240, 190),
            fg=COL_BASE,
        )
        self._custom_back = _Btn((_cx(bw), 556, bw, 44), "B A C K", self._f_btn_sm)

    def _custom_all(self) -> list[_Btn]:
        btns = [*self._mode_btns.values(), *self._size_btns.values()]
        if self._sel_mode is GameMode.TIMED:
            btns.extend(self._minute_btns.values())
        return [*btns, self._start_btn, self._custom_back]

    def _build_game_btns(self) -> None:
        """In-game action buttons (placed below the board)."""
        bw, gap = 110, 10
        y = BOARD_Y + BOARD_PX + 48
        sx = _cx(4 * bw + 3 * gap)
        self._hint_btn = _Btn(
            (sx, y, bw, 36), "HINT (H)", self._f_btn_sm,
            bg=COL_YELLOW, hover=(255, 240, 200), fg=COL_BASE,
        )
        self._undo_btn = _Btn(
            (sx + bw + gap, y, bw, 36), "UNDO (U)", self._f_btn_sm,
            bg=COL_PINK, hover=(245, 210, 227), fg=COL_BASE,
        )
        self._restart_btn = _Btn(
            (sx + 2 * (bw + gap), y, bw, 36), "NEW (R)", self._f_btn_sm
        )
        self._menu_btn = _Btn(
            (sx + 3 * (bw + gap), y, bw, 36), "MENU (M)", self._f_btn_sm
        )
        self._game_btns = [
            self._hint_btn,
            self._undo_btn,
            self._restart_btn,
            self._menu_btn,
        ]

        bw = 220
        self._again_btn = _Btn(
            (_cx(bw), WIN_H - 130, bw, 50),
            "PLAY AGAIN",
            self._f_btn,
            bg=COL_GREEN,
            hover=(190, 240, 190),
            fg=COL_BASE,
        )
        self._result_menu = _Btn(
            (_cx(bw), WIN_H - 68, bw, 46), "M E N U", self._f_btn_sm
        )
        self._retry_btn = _Btn(
            (_cx(bw), 420, bw, 50),
            "TRY AGAIN",
            self._f_btn,
            bg=COL_BLUE,
            hover=COL_LAVENDER,
            fg=COL_BASE,
        )

    # ── drawing ─────────────────────────────────────────────────────────────

    def _draw_menu(self) -> None:
        self._surf.fill(COL_BASE)
        _blit_center(
            self._surf, self._f_big.render("CAMERA  PUZZLE", True, COL_TEXT), 110
        )
        _blit_center(
            self._surf,
            self._f_body.render(
                "Unscramble the live picture from your camera", True, COL_SUBTEXT
            ),
            170,
        )
        for btn in self._menu_all:
            btn.draw(self._surf)

    def _draw_custom(self) -> None:
        self._surf.fill(COL_BASE)
        _blit_center(
            self._surf, self._f_big.render("CUSTOM GAME", True, COL_TEXT), 60
        )
        sections: list[tuple[str, int, dict, object]] = [
            ("Mode", 160, self._mode_btns, self._sel_mode),
            ("Grid size", 260, self._size_btns, self._sel_size),
        ]
        if self._sel_mode is GameMode.TIMED:
            sections.append(("Time limit", 360, self._minute_btns, self._sel_minutes))
        for title, y, btns, selected in sections:
            _blit_center(self._surf, self._f_body.render(title, True, COL_SUBTEXT), y)
            for value, btn in btns.items():
                on = value == selected
                btn.bg = COL_GREEN if on else COL_SURFACE0
                btn.fg = COL_BASE if on else COL_TEXT
                btn.draw(self._surf)
        self._start_btn.draw(self._surf)
        self._custom_back.draw(self._surf)

    def _draw_header(self, state: RenderState) -> None:
        sz = state.size
        if state.mode is GameMode.TIMED:
            title = f"Timed Challenge  {sz}×{sz}"
            stats = (
                f"Time left: {format_clock(state.remaining_ms or 0)}    "
                f"Cleared: {state.puzzles_cleared}    Moves: {state.moves}"
            )
        else:
            title = f"Camera Puzzle  {sz}×{sz}"
            stats = (
                f"Moves: {state.moves}    "
                f"Time: {format_duration(state.elapsed_ms)}"
            )
        _blit_center(self._surf, self._f_title.render(title, True, COL_TEXT), 14)
        _blit_center(self._surf, self._f_body.render(stats, True, COL_PINK), 46)

    def _draw_board(self, state: RenderState, frame: pygame.Surface | None) -> None:
        sz = state.size
        tpx = BOARD_PX / sz
        pygame.draw.rect(
            self._surf, COL_MANTLE, _BOARD_RECT.inflate(8, 8), border_radius=10
        )
        if frame is not None:
            frame = pygame.transform.smoothscale(frame, (BOARD_PX, BOARD_PX))

        moving = set()
        if state.transition is not None:
            moving = {state.transition.a, state.transition.b}
        # moving tiles last so they slide over their neighbours
        order = sorted(range(len(state.tiles)), key=lambda i: i in moving)
        for i in order:
            tile = state.tiles[i]
            col, row = state.positions[i]
            dest = pygame.Rect(
                round(_BOARD_RECT.x + col * tpx),
                round(_BOARD_RECT.y + row * tpx),
                math.ceil(tpx),
                math.ceil(tpx),
            )
            if frame is not None:
                src = pygame.Rect(
                    round((tile % sz) * tpx), round((tile // sz) * tpx), dest.w, dest.h
                ).clip(frame.get_rect())
                self._surf.blit(frame, dest.topleft, src)
            else:
                pygame.draw.rect(self._surf, COL_BLUE, dest.inflate(-4, -4), border_radius=6)
                lbl = self._f_title.render(str(tile + 1), True, COL_BASE)
                self._surf.blit(
                    lbl,
                    (
                        dest.centerx - lbl.get_width() // 2,
                        dest.centery - lbl.get_height() // 2,
                    ),
                )
            pygame.draw.rect(self._surf, COL_MANTLE, dest, width=1)
            if i in moving:
                continue
            if i == state.selected:
                pygame.draw.rect(self._surf, COL_BLUE, dest, width=4)
            elif i == state.focused:
                pygame.draw.rect(self._surf, COL_YELLOW, dest, width=3)

        for effect in state.effects:
            if effect.kind is not EffectKind.GLOW or effect.index is None:
                continue
            rect = pygame.Rect(
                round(_BOARD_RECT.x + (effect.index % sz) * tpx),
                round(_BOARD_RECT.y + (effect.index // sz) * tpx),
                math.ceil(tpx),
                math.ceil(tpx),
            )
            glow = pygame.Surface(rect.size, pygame.SRCALPHA)
            alpha = int(160 * (1 - effect.progress(self._engine.clock())))
            pygame.draw.rect(glow, (*COL_GREEN, alpha), glow.get_rect(), width=6)
            self._surf.blit(glow, rect.topleft)

        if state.ghost_hint and frame is not None:
            ghost = frame.copy()
            ghost.set_alpha(170)
            self._surf.blit(ghost, _BOARD_RECT.topleft)

    def _draw_game(self, state: RenderState, frame: pygame.Surface | None) -> None:
        self._surf.fill(COL_BASE)
        self._draw_header(state)
        if state.tiles:
            self._draw_board(state, frame)
        elif frame is not None:
            self._surf.blit(
                pygame.transform.smoothscale(frame, (BOARD_PX, BOARD_PX)),
                _BOARD_RECT.topleft,
            )

        if state.phase is GamePhase.COUNTDOWN and state.countdown is not None:
            lbl = self._f_huge.render(str(state.countdown), True, COL_YELLOW)
            self._surf.blit(
                lbl,
                (
                    _BOARD_RECT.centerx - lbl.get_width() // 2,
                    _BOARD_RECT.centery - lbl.get_height() // 2,
                ),
            )
            return
        if state.phase is GamePhase.STAGE_CLEARED:
            lbl = self._f_big.render("Stage cleared!", True, COL_GREEN)
            self._surf.blit(
                lbl,
                (_cx(lbl.get_width()), _BOARD_RECT.centery - lbl.get_height() // 2),
            )
            return

        now = self._engine.clock()
        dx = 0
        pressed = tooltip = False
        for effect in state.effects:
            if effect.kind is EffectKind.HINT_SHAKE:
                dx = int(6 * math.sin(effect.progress(now) * math.pi * 6))
            elif effect.kind is EffectKind.UNDO_PRESS:
                pressed = True
            elif effect.kind is EffectKind.HINT_TOOLTIP:
                tooltip = True

        self._hint_btn.text = f"HINT ({state.hints_remaining})"
        self._hint_btn.draw(self._surf, dx)
        self._undo_btn.draw(self._surf, pressed=pressed)
        self._restart_btn.draw(self._surf)
        self._menu_btn.draw(self._surf)

        status_y = BOARD_Y + BOARD_PX + 16
        if tooltip:
            _blit_center(
                self._surf, self._f_small.render("No hints left!", True, COL_RED), status_y
            )
        elif state.shuffling:
            _blit_center(
                self._surf, self._f_small.render("Shuffling…", True, COL_SUBTEXT), status_y
            )
        _blit_center(
            self._surf,
            self._f_small.render(
                "Click two tiles to swap     Arrows + Enter     Esc  menu",
                True,
                COL_OVERLAY0,
            ),
            WIN_H - 40,
        )

    def _draw_feedback(self, y: int) -> int:
        for msg in self._engine.feedback.messages:
            _blit_center(self._surf, self._f_body.render(msg, True, COL_LAVENDER), y)
            y += 28
        return y

    def _draw_won(self, state: RenderState, frame: pygame.Surface | None) -> None:
        self._surf.fill(COL_BASE)
        session = self._engine.session
        assert session is not None and session.score is not None
        score = session.score
        _blit_center(
            self._surf,
            self._f_big.render("★  S O L V E D  ★", True, COL_GREEN),
            40,
        )
        if frame is not None:
            thumb = pygame.transform.smoothscale(frame, (220, 220))
            self._surf.blit(thumb, (_cx(220), 100))
        info = [
            (f"Score:  {score.score}", COL_YELLOW),
            (f"Moves:  {score.moves}", COL_SUBTEXT),
            (f"Time:   {describe_duration(score.time)}", COL_SUBTEXT),
        ]
        if session.leaderboard_rank:
            info.append((f"New high score!  #{session.leaderboard_rank}", COL_GREEN))
        y = 340
        for txt, col in info:
            _blit_center(self._surf, self._f_title.render(txt, True, col), y)
            y += 36
        self._draw_feedback(y + 10)
        self._again_btn.draw(self._surf)
        self._result_menu.draw(self._surf)

    def _draw_times_up(self, state: RenderState) -> None:
        self._surf.fill(COL_BASE)
        session = self._engine.session
        assert session is not None and session.stats is not None
        stats = session.stats
        avg = stats.average_seconds_per_puzzle
        _blit_center(
            self._surf, self._f_big.render("TIME'S  UP!", True, COL_RED), 80
        )
        info = [
            (f"Puzzles cleared:  {stats.puzzles_cleared}", COL_YELLOW),
            (f"Total moves:  {stats.total_moves}", COL_SUBTEXT),
            (
                f"Avg per puzzle:  {f'{avg:.1f}s' if avg is not None else 'N/A'}",
                COL_SUBTEXT,
            ),
            (f"Grid:  {stats.difficulty}×{stats.difficulty}", COL_SUBTEXT),
        ]
        y = 180
        for txt, col in info:
            _blit_center(self._surf, self._f_title.render(txt, True, col), y)
            y += 40
        self._draw_feedback(y + 20)
        self._again_btn.draw(self._surf)
        self._result_menu.draw(self._surf)

    def _draw_error(self, state: RenderState) -> None:
        self._surf.fill(COL_BASE)
        _blit_center(
            self._surf, self._f_big.render("CAMERA  ERROR", True, COL_RED), 160
        )
        _blit_center(
            self._surf, self._f_body.render(state.error or "", True, COL_TEXT), 260
        )
        self._retry_btn.draw(self._surf)
        self._result_menu.draw(self._surf)

    def _draw_scores(self) -> None:
        self._surf.fill(COL_BASE)
        _blit_center(
            self._surf, self._f_big.render("LEADERBOARD", True, COL_TEXT), 24
        )
        board = self._engine.leaderboard
        sizes = board.get_all_sizes()
        y = 90
        if not sizes:
            _blit_center(
                self._surf,
                self._f_body.render("No scores yet.", True, COL_OVERLAY0),
                y + 30,
            )
        for sz in sizes:
            _blit_center(
                self._surf,
                self._f_btn_sm.render(f"—  {sz}×{sz}  —", True, COL_BLUE),
                y,
            )
            y += 28
            for i, e in enumerate(board.get_scores(sz), 1):
                when = datetime.fromtimestamp(e.date / 1000).strftime("%Y-%m-%d")
                row = (
                    f"{i}.  {e.score} pts   {e.moves} moves   "
                    f"{format_duration(e.time)}   ({when})"
                )
                self._surf.blit(self._f_small.render(row, True, COL_SUBTEXT), (60, y))
                y += 22
            y += 14
        self._score_back.draw(self._surf)

    # ── event handling ──────────────────────────────────────────────────────

    def _ev_menu(self, ev: pygame.event.Event) -> bool:
        if ev.type == pygame.MOUSEMOTION:
            for b in self._menu_all:
                b.motion(ev.pos)
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            if self._quick_btn.hit(ev.pos):
                self._start(quick=True)
            elif self._custom_btn.hit(ev.pos):
                self._screen = _Screen.CUSTOM
            elif self._scores_btn.hit(ev.pos):
                self._screen = _Screen.SCORES
            elif self._quit_btn.hit(ev.pos):
                return False
        elif ev.type == pygame.KEYDOWN:
            if ev.key == pygame.K_RETURN:
                self._start(quick=True)
            elif ev.key == pygame.K_c:
                self._screen = _Screen.CUSTOM
            elif ev.key == pygame.K_l:
                self._screen = _Screen.SCORES
            elif ev.key in (pygame.K_q, pygame.K_ESCAPE):
                return False
        return True

    def _ev_custom(self, ev: pygame.event.Event) -> bool:
        if ev.type == pygame.MOUSEMOTION:
            for b in self._custom_all():
                b.motion(ev.pos)
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            for mode, b in self._mode_btns.items():
                if b.hit(ev.pos):
                    self._sel_mode = mode
            for s, b in self._size_btns.items():
                if b.hit(ev.pos):
                    self._sel_size = s
            if self._sel_mode is GameMode.TIMED:
                for m, b in self._minute_btns.items():
                    if b.hit(ev.pos):
                        self._sel_minutes = m
            if self._start_btn.hit(ev.pos):
                self._start()
            elif self._custom_back.hit(ev.pos):
                self._screen = _Screen.MENU
        elif ev.type == pygame.KEYDOWN:
            if ev.key == pygame.K_RETURN:
                self._start()
            elif ev.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._screen = _Screen.MENU
        return True

    def _ev_scores(self, ev: pygame.event.Event) -> bool:
        if ev.type == pygame.MOUSEMOTION:
            self._score_back.motion(ev.pos)
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            if self._score_back.hit(ev.pos):
                self._screen = _Screen.MENU
        elif ev.type == pygame.KEYDOWN:
            if ev.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE, pygame.K_m):
                self._screen = _Screen.MENU
        return True

    _KEYS = {
        pygame.K_UP: Key.UP,
        pygame.K_w: Key.UP,
        pygame.K_DOWN: Key.DOWN,
        pygame.K_s: Key.DOWN,
        pygame.K_LEFT: Key.LEFT,
        pygame.K_a: Key.LEFT,
        pygame.K_RIGHT: Key.RIGHT,
        pygame.K_d: Key.RIGHT,
        pygame.K_RETURN: Key.ENTER,
        pygame.K_SPACE: Key.SPACE,
    }

    def _ev_game(self, ev: pygame.event.Event) -> bool:
        engine = self._engine
        phase = engine.phase
        if phase in (GamePhase.WON, GamePhase.TIMES_UP, GamePhase.ERROR):
            return self._ev_result(ev)

        if ev.type == pygame.MOUSEMOTION:
            for btn in self._game_btns:
                btn.motion(ev.pos)
            if _BOARD_RECT.collidepoint(ev.pos):
                engine.handle_pointer_move(
                    ev.pos[0] - _BOARD_RECT.x, ev.pos[1] - _BOARD_RECT.y, BOARD_PX, BOARD_PX
                )
            else:
                engine.handle_pointer_leave()
        elif ev.type == pygame.WINDOWLEAVE:
            engine.handle_pointer_leave()
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            if self._hint_btn.hit(ev.pos):
                engine.request_hint()
            elif self._undo_btn.hit(ev.pos):
                engine.undo()
            elif self._restart_btn.hit(ev.pos):
                engine.restart_puzzle()
            elif self._menu_btn.hit(ev.pos):
                self._to_menu()
            elif _BOARD_RECT.collidepoint(ev.pos):
                engine.handle_click(
                    ev.pos[0] - _BOARD_RECT.x, ev.pos[1] - _BOARD_RECT.y, BOARD_PX, BOARD_PX
                )
        elif ev.type == pygame.KEYDOWN:
            if ev.key in self._KEYS:
                engine.handle_key(self._KEYS[ev.key])
            elif ev.key == pygame.K_h:
                engine.request_hint()
            elif ev.key in (pygame.K_u, pygame.K_z):
                engine.undo()
            elif ev.key == pygame.K_r:
                engine.restart_puzzle()
            elif ev.key in (pygame.K_m, pygame.K_ESCAPE):
                self._to_menu()
        return True

    def _ev_result(self, ev: pygame.event.Event) -> bool:
        engine = self._engine
        again = self._retry_btn if engine.phase is GamePhase.ERROR else self._again_btn
        if ev.type == pygame.MOUSEMOTION:
            again.motion(ev.pos)
            self._result_menu.motion(ev.pos)
        elif ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1:
            if again.hit(ev.pos):
                self._again()
            elif self._result_menu.hit(ev.pos):
                self._to_menu()
        elif ev.type == pygame.KEYDOWN:
            if ev.key in (pygame.K_r, pygame.K_RETURN):
                self._again()
            elif ev.key in (pygame.K_m, pygame.K_ESCAPE):
                self._to_menu()
        return True

    # ── game state ──────────────────────────────────────────────────────────

    def _start(self, quick: bool = False) -> None:
        engine = self._engine
        if quick:
            engine.start_quick_play()
        else:
            engine.start_custom(self._sel_mode, self._sel_size, self._sel_minutes)
        self._screen = _Screen.GAME

    def _again(self) -> None:
        engine = self._engine
        if engine.phase is GamePhase.ERROR:
            engine.reset()
            self._start(quick=True)
        else:
            engine.play_again()

    def _to_menu(self) -> None:
        self._engine.reset()
        self._screen = _Screen.MENU

    def _frame(self) -> pygame.Surface | None:
        session = self._engine.session
        stream = session.stream if session is not None else None
        if not isinstance(stream, CameraStream):
            return None
        try:
            return stream.frame()
        except (pygame.error, SystemError, OSError) as e:
            self._engine.capture_failed(classify(str(e)), str(e))
            return None

    def _draw_engine(self) -> None:
        state = self._engine.render_state()
        frame = self._frame()
        if state.phase is GamePhase.WON:
            self._draw_won(state, frame)
        elif state.phase is GamePhase.TIMES_UP:
            self._draw_times_up(state)
        elif state.phase is GamePhase.ERROR:
            self._draw_error(state)
        else:
            self._draw_game(state, frame)

    # ── main loop ───────────────────────────────────────────────────────────

    async def run_loop(self) -> None:
        _dispatch = {
            _Screen.MENU: self._ev_menu,
            _Screen.CUSTOM: self._ev_custom,
            _Screen.GAME: self._ev_game,
            _Screen.SCORES: self._ev_scores,
        }
        _draw = {
            _Screen.MENU: self._draw_menu,
            _Screen.CUSTOM: self._draw_custom,
            _Screen.GAME: self._draw_engine,
            _Screen.SCORES: self._draw_scores,
        }

        running = True
        while running:
            for ev in pygame.event.get():
                if ev.type == pygame.QUIT:
                    running = False
                    break
                handler = _dispatch.get(self._screen)
                if handler and not handler(ev):
                    running = False
                    break

            self._engine.update()
            drawer = _draw.get(self._screen)
            if drawer:
                drawer()
            pygame.display.flip()
            self._clock.tick(FPS)
            # yield so the victory-message request can run
            await asyncio.sleep(0)

        self._engine.reset()
        pygame.quit()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------
def run(
    size: int = 3,
    data_dir: Path = Path("data"),
    mode: GameMode = GameMode.CLASSIC,
    minutes: int = 3,
    generator: TextGenerator | None = None,
) -> None:
    """Launch the Pygame GUI (opens directly to the menu)."""
    app = PygameApp(size, data_dir, generator, mode, minutes)
    asyncio.run(app.run_loop())
