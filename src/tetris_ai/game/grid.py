from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

from .pieces import Position


EMPTY = 0


class GameGrid:
    """Fixed-size board of color tags.

    The grid uses 0 for empty cells and `BlockColor` values for filled cells.
    Row 0 is the top row. Rows above the board (negative) are treated as open
    space so pieces may overhang the top edge while spawning.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def is_inside(self, row: int, column: int) -> bool:
        return 0 <= row < self.height and 0 <= column < self.width

    def can_place(self, cells: Iterable[Position]) -> bool:
        for row, column in cells:
            if column < 0 or column >= self.width or row >= self.height:
                return False
            if row >= 0 and self.grid[row, column] != EMPTY:
                return False
        return True

    def place(self, cells: Iterable[Position], value: int) -> int:
        """Write `value` into every in-bounds cell; returns cells written."""
        written = 0
        for row, column in cells:
            if self.is_inside(row, column):
                self.grid[row, column] = value
                written += 1
        return written

    def full_rows(self) -> List[int]:
        # bottom-to-top so the highest index comes first
        full = np.where(np.all(self.grid != EMPTY, axis=1))[0]
        return [int(r) for r in full[::-1]]

    def remove_rows(self, rows: Sequence[int]) -> int:
        """Delete `rows`, shift the rest down and pad with empty rows on top."""
        unique = sorted({int(r) for r in rows if 0 <= int(r) < self.height}, reverse=True)
        if not unique:
            return 0
        kept = np.delete(self.grid, unique, axis=0)
        padding = np.zeros((len(unique), self.width), dtype=self.grid.dtype)
        self.grid = np.vstack((padding, kept))
        return len(unique)

    def column_heights(self) -> np.ndarray:
        filled = self.grid != EMPTY
        top = np.argmax(filled, axis=0)
        heights = self.height - top
        heights[~filled.any(axis=0)] = 0
        return heights

    def count_holes(self) -> int:
        # every empty cell between the column top and the floor
        return int(self.column_heights().sum() - np.count_nonzero(self.grid))

    def copy(self) -> "GameGrid":
        new_grid = GameGrid(self.width, self.height)
        new_grid.grid = self.grid.copy()
        return new_grid

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameGrid):
            return NotImplemented
        return self.grid.shape == other.grid.shape and bool(np.array_equal(self.grid, other.grid))

    def __repr__(self) -> str:
        return f"GameGrid(width={self.width}, height={self.height})"
