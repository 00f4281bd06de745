"""Grid of cells with walls, start/end anchors and per-run search fields."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]

MIN_DIMENSION = 5
MAX_DIMENSION = 255
UNVISITED = -1

START = "start"
END = "end"
ANCHOR_KINDS = (START, END)

DIRECTIONS: Tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def clamp_dimension(value: int) -> int:
    """Clamp a row/column count into the supported range and make it odd."""

    value = max(MIN_DIMENSION, min(int(value), MAX_DIMENSION))
    return value if value % 2 == 1 else value + 1


def manhattan_distance(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass
class Cell:
    row: int
    col: int
    is_wall: bool = False
    is_start: bool = False
    is_end: bool = False
    g: float = math.inf
    h: float = math.inf
    f: float = math.inf
    distance: float = math.inf
    visited_at: int = UNVISITED
    parent: Optional[Coord] = None

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def reset_transient(self) -> None:
        self.g = self.h = self.f = self.distance = math.inf
        self.visited_at = UNVISITED
        self.parent = None

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "col": self.col,
            "is_wall": self.is_wall,
            "is_start": self.is_start,
            "is_end": self.is_end,
            "visited_at": self.visited_at,
            "parent": list(self.parent) if self.parent is not None else None,
        }


class Grid:
    """Rectangular ``rows x cols`` mapping of coordinates to cells.

    Exactly one cell carries ``is_start`` and one ``is_end``; neither may be a
    wall. Edits that would break this are rejected and reported by returning
    ``False`` rather than raising.
    """

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = clamp_dimension(rows)
        self.cols = clamp_dimension(cols)
        self.cells: List[List[Cell]] = [
            [Cell(r, c) for c in range(self.cols)] for r in range(self.rows)
        ]
        self.start: Optional[Coord] = (1, 1)
        self.end: Optional[Coord] = (self.rows - 2, self.cols - 2)
        self.cell(*self.start).is_start = True
        self.cell(*self.end).is_end = True

    # ------------------------------------------------------------------

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def __getitem__(self, coord: Coord) -> Cell:
        return self.cells[coord[0]][coord[1]]

    def __iter__(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    def neighbors(self, cell: Cell) -> List[Cell]:
        """Return the in-bounds, non-wall cells orthogonally adjacent to ``cell``."""

        result: List[Cell] = []
        for dr, dc in DIRECTIONS:
            nr, nc = cell.row + dr, cell.col + dc
            if self.in_bounds(nr, nc) and not self.cells[nr][nc].is_wall:
                result.append(self.cells[nr][nc])
        return result

    # ------------------------------------------------------------------

    def toggle_wall(self, row: int, col: int) -> bool:
        if not self.in_bounds(row, col):
            logger.debug("Ignoring wall toggle outside the grid at (%d, %d)", row, col)
            return False
        target = self.cells[row][col]
        if target.is_start or target.is_end:
            logger.debug("Ignoring wall toggle on anchor at (%d, %d)", row, col)
            return False
        target.is_wall = not target.is_wall
        return True

    def set_anchor(self, row: int, col: int, kind: str) -> bool:
        """Move the start or end anchor to ``(row, col)``.

        The target becomes passable. Moving an anchor onto the other anchor is
        rejected.
        """

        if kind not in ANCHOR_KINDS:
            raise ValueError(f"Unknown anchor kind: {kind!r}")
        if not self.in_bounds(row, col):
            logger.debug("Ignoring %s move outside the grid at (%d, %d)", kind, row, col)
            return False
        target = self.cells[row][col]
        if (kind == START and target.is_end) or (kind == END and target.is_start):
            logger.debug("Ignoring %s move onto the other anchor at (%d, %d)", kind, row, col)
            return False

        previous = self.start if kind == START else self.end
        if previous is not None:
            old = self[previous]
            if kind == START:
                old.is_start = False
            else:
                old.is_end = False
        if kind == START:
            target.is_start = True
            self.start = (row, col)
        else:
            target.is_end = True
            self.end = (row, col)
        target.is_wall = False
        return True

    def reset_transient(self) -> None:
        """Clear every per-run search field, leaving walls and anchors alone."""

        for cell in self:
            cell.reset_transient()

    def reset_anchors(self) -> None:
        """Forget both anchors; used when building a grid from raw wall data."""

        for cell in self:
            cell.is_start = cell.is_end = False
        self.start = self.end = None

    # ------------------------------------------------------------------

    def wall_mask(self) -> np.ndarray:
        """Boolean ``(rows, cols)`` array, ``True`` where a cell is a wall."""

        return np.array([[cell.is_wall for cell in row] for row in self.cells], dtype=bool)

    def apply_wall_mask(self, mask: np.ndarray) -> None:
        if mask.shape != self.shape:
            raise ValueError(f"Wall mask shape {mask.shape} does not match grid {self.shape}")
        for r in range(self.rows):
            for c in range(self.cols):
                cell = self.cells[r][c]
                cell.is_wall = bool(mask[r, c]) and not (cell.is_start or cell.is_end)

    def copy(self) -> "Grid":
        """Copy the layout (walls and anchors) into a fresh grid with clean transient state."""

        clone = Grid(self.rows, self.cols)
        clone.reset_anchors()
        clone.apply_wall_mask(self.wall_mask())
        if self.start is not None:
            clone.set_anchor(*self.start, START)
        if self.end is not None:
            clone.set_anchor(*self.end, END)
        return clone

    def to_dict(self) -> dict:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "start": list(self.start) if self.start is not None else None,
            "end": list(self.end) if self.end is not None else None,
            "walls": self.wall_mask().astype(int).tolist(),
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "Grid":
        grid = cls(int(payload["rows"]), int(payload["cols"]))
        grid.reset_anchors()
        grid.apply_wall_mask(np.asarray(payload["walls"], dtype=bool))
        if payload.get("start") is not None:
            grid.set_anchor(*map(int, payload["start"]), START)
        if payload.get("end") is not None:
            grid.set_anchor(*map(int, payload["end"]), END)
        return grid

    def __repr__(self) -> str:
        return f"Grid(rows={self.rows}, cols={self.cols}, start={self.start}, end={self.end})"


def init_grid(rows: int, cols: int) -> Grid:
    """Build an open grid with start at ``(1, 1)`` and end at ``(rows-2, cols-2)``."""

    return Grid(rows, cols)


def toggle_wall(grid: Grid, row: int, col: int) -> bool:
    return grid.toggle_wall(row, col)


def set_anchor(grid: Grid, row: int, col: int, kind: str) -> bool:
    return grid.set_anchor(row, col, kind)


__all__ = [
    "ANCHOR_KINDS",
    "Cell",
    "Coord",
    "END",
    "Grid",
    "MAX_DIMENSION",
    "MIN_DIMENSION",
    "START",
    "UNVISITED",
    "clamp_dimension",
    "init_grid",
    "manhattan_distance",
    "set_anchor",
    "toggle_wall",
]
