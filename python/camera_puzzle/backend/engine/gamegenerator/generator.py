"""Generates scrambled grids and the cosmetic shuffle animation."""

from __future__ import annotations

import math
import random

from camera_puzzle.backend.engine.assist import Move
from camera_puzzle.backend.models.grid import Grid


class GameGenerator:
    """Creates unsolved puzzles from the identity grid."""

    @staticmethod
    def shuffle(grid: Grid, rng: random.Random | None = None) -> None:
        """Scramble *grid* in-place with a Fisher–Yates shuffle.

        Any transposition is a legal move, so every permutation is
        reachable and no parity fix-up is needed.
        """
        rng = rng or random.Random()
        tiles = grid.tiles[:]
        for i in range(len(tiles) - 1, 0, -1):
            j = rng.randint(0, i)
            tiles[i], tiles[j] = tiles[j], tiles[i]

        # Ensure the grid is not already solved
        if tiles == sorted(tiles):
            tiles[0], tiles[1] = tiles[1], tiles[0]

        grid.tiles = tiles

    @staticmethod
    def generate(size: int, rng: random.Random | None = None) -> Grid:
        """Return a random, unsolved grid of the given size."""
        grid = Grid.identity(size)
        GameGenerator.shuffle(grid, rng)
        return grid

    @staticmethod
    def animation_script(
        size: int, rng: random.Random | None = None, factor: float = 1.5
    ) -> list[Move]:
        """Return random index pairs to play as the visual shuffle.

        The pairs are independent of the committed permutation; they only
        make the board look busy while the real scramble is hidden.
        """
        rng = rng or random.Random()
        count = size * size
        return [
            Move(rng.randrange(count), rng.randrange(count))
            for _ in range(math.ceil(count * factor))
        ]
