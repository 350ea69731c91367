"""Grid model for the tile-swap puzzle."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Grid:
    """Represents the scrambled view.

    ``tiles[i]`` is the identity index of the image tile shown at grid
    position ``i`` (row-major).  The list is always a permutation of
    ``range(size * size)``; the puzzle is solved when ``tiles[i] == i``
    everywhere.
    """

    size: int
    tiles: list[int]

    # -- construction helpers -------------------------------------------------

    @classmethod
    def identity(cls, size: int) -> Grid:
        """Return the solved grid of the given size."""
        if size < 2:
            raise ValueError(f"Grid size must be at least 2, got {size}.")
        return cls(size=size, tiles=list(range(size * size)))

    @classmethod
    def from_flat(cls, size: int, flat: list[int]) -> Grid:
        """Create a grid from a flat row-major tile list.

        Example::

            Grid.from_flat(3, [1, 0, 2, 3, 4, 5, 6, 7, 8])
        """
        if len(flat) != size * size:
            raise ValueError(
                f"Expected {size * size} tiles for a {size}×{size} grid, "
                f"got {len(flat)}."
            )
        if sorted(flat) != list(range(size * size)):
            raise ValueError(f"Tiles are not a permutation: {flat!r}")
        return cls(size=size, tiles=list(flat))

    # -- queries --------------------------------------------------------------

    @property
    def tile_count(self) -> int:
        return self.size * self.size

    def row_col(self, index: int) -> tuple[int, int]:
        return divmod(index, self.size)

    def is_solved(self) -> bool:
        """Check if every tile sits at its own position."""
        return all(tile == i for i, tile in enumerate(self.tiles))

    def is_tile_correct(self, index: int) -> bool:
        return self.tiles[index] == index

    # -- mutation -------------------------------------------------------------

    def swap(self, a: int, b: int) -> None:
        """Exchange the tiles at positions *a* and *b*.

        The tile list is replaced wholesale so a reader holding the old
        list never observes a half-applied swap.
        """
        count = self.tile_count
        if not (0 <= a < count and 0 <= b < count):
            raise ValueError(f"Swap ({a}, {b}) is outside a {count}-tile grid.")
        tiles = self.tiles[:]
        tiles[a], tiles[b] = tiles[b], tiles[a]
        self.tiles = tiles

    def copy(self) -> Grid:
        return Grid(size=self.size, tiles=self.tiles[:])
