from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple, Tuple

import numpy as np

from .shapes import Shape


Coordinate = Tuple[int, int]


class ClearedCell(NamedTuple):
    x: int
    y: int
    occupant: int


@dataclass
class ClearResult:
    cells: List[ClearedCell] = field(default_factory=list)
    rows: List[int] = field(default_factory=list)
    columns: List[int] = field(default_factory=list)

    @property
    def lines(self) -> int:
        return len(self.rows) + len(self.columns)


class Board:
    """Square occupancy grid with placement and line clearing rules.

    The grid uses 0 for empty cells and positive integers for occupants.
    The session writes family codes, so occupants map back to colours.
    Clearing never shifts the remaining cells.
    """

    def __init__(self, size: int = 10) -> None:
        self.size = int(size)
        self.grid = np.zeros((self.size, self.size), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def is_empty(self, x: int, y: int) -> bool:
        return self.is_inside(x, y) and self.grid[y, x] == 0

    def is_valid_placement(self, origin_x: int, origin_y: int, shape: Shape) -> bool:
        """Check that every occupied cell of `shape` lands on an empty cell"""
        h, w = shape.shape
        for i in range(h):
            for j in range(w):
                if not shape[i, j]:
                    continue
                x, y = origin_x + j, origin_y + i
                if not self.is_inside(x, y) or self.grid[y, x] != 0:
                    return False
        return True

    def commit(self, origin_x: int, origin_y: int, shape: Shape, occupant: int) -> None:
        """
        Write `occupant` into every occupied cell of `shape`.
        Assumes the placement was already validated.
        """
        h, w = shape.shape
        for i in range(h):
            for j in range(w):
                if shape[i, j]:
                    self.grid[origin_y + i, origin_x + j] = occupant

    def full_rows(self) -> List[int]:
        return [int(r) for r in np.flatnonzero(np.all(self.grid != 0, axis=1))]

    def full_columns(self) -> List[int]:
        return [int(c) for c in np.flatnonzero(np.all(self.grid != 0, axis=0))]

    def clear_completed_lines(self) -> ClearResult:
        """
        Clear every full row and column found in the current grid.
        Rows and columns are detected on the same snapshot, so a cell shared
        by a full row and a full column counts toward both lines. Each
        cleared cell is reported once, with the occupant it held.
        """
        rows = self.full_rows()
        columns = self.full_columns()
        if not rows and not columns:
            return ClearResult()

        mask = np.zeros_like(self.grid, dtype=bool)
        mask[rows, :] = True
        mask[:, columns] = True
        cells = [ClearedCell(int(x), int(y), int(self.grid[y, x]))
                 for y, x in zip(*np.nonzero(mask))]
        self.grid[mask] = 0
        return ClearResult(cells=cells, rows=rows, columns=columns)

    def valid_placements(self, shape: Shape) -> List[Coordinate]:
        """All valid (x, y) origins for a shape, row by row"""
        h, w = shape.shape
        positions: List[Coordinate] = []
        for y in range(self.size - h + 1):
            for x in range(self.size - w + 1):
                if self.is_valid_placement(x, y, shape):
                    positions.append((x, y))
        return positions

    def can_fit(self, shape: Shape) -> bool:
        h, w = shape.shape
        for y in range(self.size - h + 1):
            for x in range(self.size - w + 1):
                if self.is_valid_placement(x, y, shape):
                    return True
        return False

    def filled_ratio(self) -> float:
        return float(np.count_nonzero(self.grid)) / float(self.size * self.size)

    def snapshot(self) -> np.ndarray:
        view = self.grid.copy()
        view.flags.writeable = False
        return view

    def copy(self) -> "Board":
        new_board = Board(self.size)
        new_board.grid = self.grid.copy()
        return new_board
