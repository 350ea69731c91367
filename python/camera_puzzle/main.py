#!/usr/bin/env python3
"""Camera Puzzle.

Usage::

    camera-puzzle                        # interactive menu
    camera-puzzle -f pygame              # camera GUI (has its own menu)
    camera-puzzle -f rich -s 4 -m timed  # Rich terminal, 4×4 timed challenge
    camera-puzzle --scores               # view the leaderboard
"""

import importlib
import logging
from enum import StrEnum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from camera_puzzle.backend.models.phase import GameMode

DATA_DIR = Path.home() / ".camera-puzzle"

console = Console()


# -- frontend registry -------------------------------------------------------


class Frontend(StrEnum):
    rich = "rich"
    pygame = "pygame"


_RUNNERS = {
    Frontend.rich: "camera_puzzle.frontend.cli.rich.app",
    Frontend.pygame: "camera_puzzle.frontend.gui.pygame.app",
}


# -- helpers ------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )
    # the HTTP stack is chatty at DEBUG
    for name in ("httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _print_leaderboard(data_dir: Path) -> None:
    from camera_puzzle.frontend.cli.rich.app import print_leaderboard

    print_leaderboard(data_dir)


def _launch(frontend: Frontend, **kwargs) -> None:
    from camera_puzzle.backend.engine.feedback.remote import OpenAITextGenerator

    model = kwargs.pop("model")
    mod = importlib.import_module(_RUNNERS[frontend])
    mod.run(generator=OpenAITextGenerator.from_env(model), **kwargs)


def _menu_loop(**kwargs) -> None:
    while True:
        console.print()
        console.print("  [bold bright_blue]====================================[/]")
        console.print("  [bold]       C A M E R A   P U Z Z L E    [/]")
        console.print("  [bold bright_blue]====================================[/]")
        console.print()
        console.print("  1.  Play  (Camera GUI)")
        console.print("  2.  Play  (Rich Terminal)")
        console.print("  3.  View Leaderboard")
        console.print("  0.  Quit")
        console.print()

        choice = console.input("  Select: ").strip()

        if choice == "0":
            console.print("\n  Goodbye!\n")
            return
        if choice == "1":
            _launch(Frontend.pygame, **kwargs)
        elif choice == "2":
            _launch(Frontend.rich, **kwargs)
        elif choice == "3":
            _print_leaderboard(kwargs["data_dir"])
        else:
            console.print("  [red]Unknown option.[/red]")


# -- CLI entry point ----------------------------------------------------------

app = typer.Typer(add_completion=False)


@app.command()
def main(
    frontend: Optional[Frontend] = typer.Option(
        None, "-f", "--frontend",
        help="Frontend to launch. Omit for interactive menu.",
    ),
    size: int = typer.Option(
        3, "-s", "--size",
        min=3, max=5,
        help="Grid size (3-5).",
    ),
    mode: GameMode = typer.Option(
        GameMode.CLASSIC, "-m", "--mode",
        help="Classic puzzle or timed challenge.",
    ),
    minutes: int = typer.Option(
        3, "--minutes",
        min=1,
        help="Timed challenge length in minutes.",
    ),
    data_dir: Path = typer.Option(
        DATA_DIR, "--data-dir",
        file_okay=False,
        help="Where the leaderboard is stored.",
    ),
    scores: bool = typer.Option(
        False, "--scores",
        help="Show the leaderboard and exit.",
    ),
    model: Optional[str] = typer.Option(
        None, "--model",
        help="Model for victory messages (default: $CAMERA_PUZZLE_MODEL).",
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose",
        help="Log at DEBUG level.",
    ),
) -> None:
    """Camera Puzzle: unscramble the live picture from your webcam."""
    configure_logging(verbose)

    if scores:
        _print_leaderboard(data_dir)
        return

    options = dict(size=size, data_dir=data_dir, mode=mode, minutes=minutes, model=model)
    if frontend is None:
        _menu_loop(**options)
        return

    _launch(frontend, **options)


if __name__ == "__main__":
    app()
