"""Shuffle generator tests."""

from __future__ import annotations

import math
import random

import pytest

from camera_puzzle.backend.engine.gamegenerator import GameGenerator
from camera_puzzle.backend.models.grid import Grid


@pytest.mark.parametrize("size", [3, 4, 5])
@pytest.mark.parametrize("seed", range(20))
def test_shuffle_gives_unsolved_permutation(size: int, seed: int) -> None:
    grid = Grid.identity(size)
    GameGenerator.shuffle(grid, random.Random(seed))
    assert sorted(grid.tiles) == list(range(size * size))
    assert not grid.is_solved()


class _IdentityRng(random.Random):
    """Makes Fisher–Yates leave every tile where it is."""

    def randint(self, a: int, b: int) -> int:
        return b


def test_identity_result_is_forced_unsolved() -> None:
    grid = Grid.identity(3)
    GameGenerator.shuffle(grid, _IdentityRng())
    assert grid.tiles == [1, 0, 2, 3, 4, 5, 6, 7, 8]


def test_generate_returns_fresh_grid() -> None:
    grid = GameGenerator.generate(4, random.Random(7))
    assert grid.size == 4
    assert not grid.is_solved()


@pytest.mark.parametrize("size,expected", [(3, 14), (4, 24), (5, 38)])
def test_animation_script_length(size: int, expected: int) -> None:
    script = GameGenerator.animation_script(size, random.Random(0))
    assert len(script) == expected == math.ceil(size * size * 1.5)
    assert all(0 <= m.a < size * size and 0 <= m.b < size * size for m in script)
