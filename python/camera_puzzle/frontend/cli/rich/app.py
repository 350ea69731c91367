"""Rich terminal frontend — the puzzle without a camera.

The terminal cannot show video, so tiles are drawn as numbered cells and
the "video source" is a static pattern that always opens.  The engine,
timers and leaderboard are exactly the ones the desktop frontend uses.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

import rich.box
from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from camera_puzzle.backend.config import CHALLENGE_DURATIONS, SUPPORTED_SIZES, EngineConfig
from camera_puzzle.backend.engine.effects import EffectKind
from camera_puzzle.backend.engine.feedback import TextGenerator
from camera_puzzle.backend.engine.gameplay import GameEngine, RenderState
from camera_puzzle.backend.engine.scoring import format_clock, format_duration
from camera_puzzle.backend.models.leaderboard import JsonFileStorage, LeaderboardManager
from camera_puzzle.backend.models.phase import GameMode, GamePhase, Key
from camera_puzzle.frontend.cli.input_handler import get_key_timeout

logger = logging.getLogger(__name__)

console = Console()

_FRAME_S = 0.05

_KEYS: dict[str, Key] = {
    "up": Key.UP,
    "down": Key.DOWN,
    "left": Key.LEFT,
    "right": Key.RIGHT,
    "enter": Key.ENTER,
    "space": Key.SPACE,
}


class PatternStream:
    def stop(self) -> None:
        logger.debug("Pattern stream stopped")


class PatternSource:
    """Stand-in video source for terminals: always available."""

    def acquire(self, width: int, height: int) -> PatternStream:
        logger.debug("Pattern source opened at %dx%d", width, height)
        return PatternStream()


def _fmt(ms: float) -> str:
    m, s = divmod(int(ms // 1000), 60)
    return f"{m:02d}:{s:02d}"


# -- board rendering ----------------------------------------------------------


def _render_grid(state: RenderState) -> Table:
    """Return a Rich Table with one cell per grid position."""
    size = state.size
    width = len(str(size * size))
    moving = set()
    if state.transition is not None:
        moving = {state.transition.a, state.transition.b}

    table = Table(
        show_header=False,
        show_edge=True,
        show_lines=True,
        box=rich.box.HEAVY,
        border_style="bright_blue",
        padding=(0, 1),
    )
    for _ in range(size):
        table.add_column(width=width + 2, justify="center")

    for r in range(size):
        cells: list[str] = []
        for c in range(size):
            i = r * size + c
            tile = i if state.ghost_hint else state.tiles[i]
            label = f"{tile + 1:>{width}}"
            if i in moving:
                cells.append(f"[dim]{'·' * width}[/dim]")
            elif state.ghost_hint:
                cells.append(f"[dim italic]{label}[/dim italic]")
            elif i == state.selected:
                cells.append(f"[bold black on cyan]{label}[/bold black on cyan]")
            elif i == state.focused:
                cells.append(f"[bold black on yellow]{label}[/bold black on yellow]")
            elif tile == i:
                cells.append(f"[bold green]{label}[/bold green]")
            else:
                cells.append(f"[bold white]{label}[/bold white]")
        table.add_row(*cells)
    return table


def _stats_line(state: RenderState) -> Text:
    stats = Text()
    stats.append("  Moves: ", style="dim")
    stats.append(str(state.moves), style="bold yellow")
    if state.mode is GameMode.TIMED and state.remaining_ms is not None:
        stats.append("    Left: ", style="dim")
        stats.append(format_clock(state.remaining_ms), style="bold yellow")
        stats.append("    Cleared: ", style="dim")
        stats.append(str(state.puzzles_cleared), style="bold yellow")
    else:
        stats.append("    Time: ", style="dim")
        stats.append(_fmt(state.elapsed_ms), style="bold yellow")
    stats.append("    Hints: ", style="dim")
    stats.append(str(state.hints_remaining), style="bold yellow")
    return stats


def _controls() -> Text:
    controls = Text()
    for key, label in (
        ("↑↓←→", "focus"),
        ("Enter", "select"),
        ("H", "hint"),
        ("U", "undo"),
        ("R", "new puzzle"),
        ("Q", "quit"),
    ):
        controls.append(f"  {key}", style="bold cyan")
        controls.append(f" {label} ", style="dim")
    return controls


# -- screens ------------------------------------------------------------------


def _draw_menu(size: int, mode: GameMode, minutes: int) -> None:
    console.clear()

    sizes = Text()
    for s in SUPPORTED_SIZES:
        style = "bold green on #313244" if s == size else "dim"
        sizes.append(f" {s}×{s} ", style=style)
        sizes.append("  ")

    settings = Text()
    settings.append("  M", style="bold cyan")
    settings.append(f"  mode: {mode.value}    ")
    if mode is GameMode.TIMED:
        settings.append("T", style="bold cyan")
        settings.append(f"  time: {minutes} min")

    opts = Text()
    opts.append("  Enter", style="bold cyan")
    opts.append("  Play    ")
    opts.append("L", style="dim bold")
    opts.append("  Leaderboard    ", style="dim")
    opts.append("Q", style="dim bold")
    opts.append("  Quit", style="dim")

    body = Group(
        Text(""),
        Align.center(sizes),
        Align.center(Text("  ← →  change size", style="dim")),
        Text(""),
        Align.center(settings),
        Text(""),
        Align.center(opts),
        Text(""),
    )
    console.print()
    console.print(
        Align.center(
            Panel(
                body,
                title="[bold]C A M E R A   P U Z Z L E[/bold]",
                border_style="bright_blue",
                padding=(1, 4),
            )
        )
    )


def _draw_game(engine: GameEngine, state: RenderState) -> None:
    console.clear()
    size = state.size
    parts: list = []
    title = f"[bold cyan]Camera Puzzle  {size}×{size}[/bold cyan]"

    if state.phase is GamePhase.COUNTDOWN:
        parts.append(Align.center(Text(f"\n  {state.countdown}\n", style="bold yellow")))
    elif state.tiles:
        parts.append(Align.center(_render_grid(state)))
        parts.append(Align.center(_stats_line(state)))

    if state.phase is GamePhase.PLAYING:
        if state.shuffling:
            parts.append(Align.center(Text("Shuffling…", style="italic dim")))
        for effect in state.effects:
            if effect.kind is EffectKind.HINT_TOOLTIP:
                parts.append(Align.center(Text("No hints left!", style="bold red")))
        parts.append(Align.center(_controls()))
    elif state.phase is GamePhase.STAGE_CLEARED:
        parts.append(Align.center(Text("\n  Stage cleared!\n", style="bold green")))
    elif state.phase is GamePhase.WON:
        session = engine.session
        assert session is not None and session.score is not None
        won = Text()
        won.append("\n  ★ ", style="bold yellow")
        won.append(f"Score {session.score.score}", style="bold green")
        if session.leaderboard_rank:
            won.append(f"  (#{session.leaderboard_rank})", style="green")
        won.append(" ★\n", style="bold yellow")
        parts.append(Align.center(won))
        parts.append(
            Align.center(
                Text(
                    f"{session.score.moves} moves in "
                    f"{format_duration(session.score.time)}",
                    style="yellow",
                )
            )
        )
        parts.append(Align.center(Text(engine.feedback.messages[0], style="italic")))
        parts.append(Align.center(Text("\n  R play again   Q menu\n", style="dim")))
        title = f"[bold green]Solved  {size}×{size}[/bold green]"
    elif state.phase is GamePhase.TIMES_UP:
        session = engine.session
        assert session is not None and session.stats is not None
        stats = session.stats
        avg = stats.average_seconds_per_puzzle
        summary = Text()
        summary.append(f"\n  Cleared: {stats.puzzles_cleared}", style="bold yellow")
        summary.append(f"    Moves: {stats.total_moves}", style="bold yellow")
        summary.append(
            f"    Avg: {f'{avg:.1f}s' if avg is not None else 'N/A'}\n",
            style="bold yellow",
        )
        parts.append(Align.center(summary))
        parts.append(Align.center(Text(engine.feedback.messages[0], style="italic")))
        parts.append(Align.center(Text("\n  R play again   Q menu\n", style="dim")))
        title = "[bold red]Time's up![/bold red]"

    console.print()
    console.print(
        Align.center(
            Panel(Group(*parts), title=title, border_style="bright_blue", padding=(1, 2))
        )
    )


def _draw_leaderboard(manager: LeaderboardManager) -> None:
    """Full-screen leaderboard view (also used by ``--scores``)."""
    parts: list[Align] = []
    for size in SUPPORTED_SIZES:
        table = Table(
            title=f"{size}×{size}",
            title_style="bold cyan",
            box=rich.box.ROUNDED,
            border_style="dim",
        )
        table.add_column("#", justify="right", style="dim", width=3)
        table.add_column("Score", justify="right", style="bold yellow")
        table.add_column("Moves", justify="right", style="yellow")
        table.add_column("Time", justify="right", style="yellow")
        table.add_column("Date", style="dim")
        entries = manager.get_scores(size)
        for i, e in enumerate(entries, 1):
            table.add_row(
                str(i),
                str(e.score),
                str(e.moves),
                format_duration(e.time),
                datetime.fromtimestamp(e.date / 1000).strftime("%Y-%m-%d %H:%M"),
            )
        if not entries:
            table.add_row("", "[dim]no scores yet[/dim]", "", "", "")
        parts.append(Align.center(table))

    console.print()
    console.print(
        Align.center(
            Panel(
                Group(*parts),
                title="[bold]L E A D E R B O A R D[/bold]",
                border_style="bright_blue",
                padding=(1, 2),
            )
        )
    )


def print_leaderboard(data_dir: Path) -> None:
    capacity = EngineConfig().leaderboard_size
    _draw_leaderboard(LeaderboardManager(JsonFileStorage(data_dir), capacity))


# -- loops --------------------------------------------------------------------


def _signature(engine: GameEngine, state: RenderState) -> tuple:
    """Everything visible; the screen is only repainted when it changes."""
    return (
        state.phase,
        state.tiles,
        state.transition,
        state.selected,
        state.focused,
        state.ghost_hint,
        state.shuffling,
        state.countdown,
        state.moves,
        int(state.elapsed_ms // 1000),
        state.remaining_ms,
        state.hints_remaining,
        tuple(e.kind for e in state.effects),
        tuple(engine.feedback.messages),
    )


async def _play(engine: GameEngine, mode: GameMode, size: int, minutes: int) -> None:
    engine.start_custom(mode, size, minutes)
    drawn: tuple | None = None

    while True:
        engine.update()
        state = engine.render_state()
        if state.phase is GamePhase.ERROR:
            console.print(f"[red]{state.error}[/red]")
            engine.reset()
            return
        sig = _signature(engine, state)
        if sig != drawn:
            _draw_game(engine, state)
            drawn = sig

        # read off the loop so the victory-message request keeps running
        key = await asyncio.to_thread(get_key_timeout, _FRAME_S)
        if key is None:
            continue
        if key == "quit":
            engine.reset()
            return
        if state.phase in (GamePhase.WON, GamePhase.TIMES_UP):
            if key in ("restart", "enter"):
                engine.play_again()
            continue
        if key in _KEYS:
            engine.handle_key(_KEYS[key])
        elif key == "hint":
            engine.request_hint()
        elif key == "undo":
            engine.undo()
        elif key == "restart":
            engine.restart_puzzle()


async def _menu_loop(engine: GameEngine, size: int, mode: GameMode, minutes: int) -> None:
    while True:
        _draw_menu(size, mode, minutes)
        key = None
        while key is None:
            key = await asyncio.to_thread(get_key_timeout, 0.5)

        if key == "quit":
            console.clear()
            console.print(Align.center(Text("\nGoodbye!\n", style="bold cyan")))
            return
        if key in ("left", "right"):
            step = -1 if key == "left" else 1
            i = SUPPORTED_SIZES.index(size) + step
            size = SUPPORTED_SIZES[max(0, min(len(SUPPORTED_SIZES) - 1, i))]
        elif key == "mode":
            mode = GameMode.TIMED if mode is GameMode.CLASSIC else GameMode.CLASSIC
        elif key == "time":
            i = CHALLENGE_DURATIONS.index(minutes) if minutes in CHALLENGE_DURATIONS else 0
            minutes = CHALLENGE_DURATIONS[(i + 1) % len(CHALLENGE_DURATIONS)]
        elif key in ("enter", "space"):
            await _play(engine, mode, size, minutes)
        elif key == "scores":
            console.clear()
            _draw_leaderboard(engine.leaderboard)
            console.print(Align.center(Text("\n  Press any key to go back.\n", style="dim")))
            while await asyncio.to_thread(get_key_timeout, 0.5) is None:
                pass


# -- public entry point -------------------------------------------------------


def run(
    size: int = 3,
    data_dir: Path = Path("data"),
    mode: GameMode = GameMode.CLASSIC,
    minutes: int = 3,
    generator: TextGenerator | None = None,
) -> None:
    """Launch the Rich CLI with interactive menu."""
    engine = GameEngine.from_storage(PatternSource(), JsonFileStorage(data_dir), generator)
    asyncio.run(_menu_loop(engine, size, mode, minutes))
