"""Translates pointer and keyboard input into grid indices."""

from __future__ import annotations

from camera_puzzle.backend.engine.assist import Move
from camera_puzzle.backend.models.phase import Direction


class InputMapper:
    """Tracks the selection and keyboard/hover focus for one puzzle."""

    def __init__(self, size: int) -> None:
        self.size = size
        self.selected: int | None = None
        self.focused: int | None = 0

    def reset(self) -> None:
        self.selected = None
        self.focused = 0

    # -- pointer --------------------------------------------------------------

    def index_at(
        self, x: float, y: float, width: float, height: float
    ) -> int | None:
        """Return the grid index under pixel ``(x, y)``, or None if outside."""
        if width <= 0 or height <= 0:
            return None
        if not (0 <= x < width and 0 <= y < height):
            return None
        col = int(x // (width / self.size))
        row = int(y // (height / self.size))
        return row * self.size + col

    def hover(self, x: float, y: float, width: float, height: float) -> None:
        self.focused = self.index_at(x, y, width, height)

    def leave(self) -> None:
        self.focused = None

    # -- keyboard -------------------------------------------------------------

    def move_focus(self, direction: Direction) -> int:
        """Move focus one cell, clamped at the grid edges."""
        row, col = divmod(self.focused or 0, self.size)
        last = self.size - 1
        if direction is Direction.UP:
            row = max(0, row - 1)
        elif direction is Direction.DOWN:
            row = min(last, row + 1)
        elif direction is Direction.LEFT:
            col = max(0, col - 1)
        elif direction is Direction.RIGHT:
            col = min(last, col + 1)
        self.focused = row * self.size + col
        return self.focused

    # -- selection ------------------------------------------------------------

    def interact(self, index: int) -> Move | None:
        """Apply the two-tap selection protocol to *index*.

        The first tap selects; a second tap on another tile returns the
        move to perform; a second tap on the same tile just deselects.
        """
        selected = self.selected
        if selected is None:
            self.selected = index
            return None
        self.selected = None
        if selected == index:
            return None
        return Move(selected, index)
