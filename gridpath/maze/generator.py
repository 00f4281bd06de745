"""Randomized perfect-maze carvers working on the odd-coordinate lattice."""

from __future__ import annotations

import argparse
import logging
import random
import uuid
from abc import abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..base import AbstractMazeStrategy, build_registry, resolve_strategy, write_results
from ..grid import END, START, Cell, Coord, Grid, init_grid

logger = logging.getLogger(__name__)

LATTICE_STEPS: Tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass
class MazeResult:
    strategy: str
    grid: Optional[Grid] = None
    sequence: List[Coord] = field(default_factory=list)
    seed: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy,
            "seed": self.seed,
            "grid": self.grid.to_dict() if self.grid is not None else None,
            "sequence": [list(coord) for coord in self.sequence],
        }


def lattice_cells(rows: int, cols: int) -> List[Coord]:
    """Odd-coordinate room centres, spaced two apart inside the border."""

    return [(r, c) for r in range(1, rows - 1, 2) for c in range(1, cols - 1, 2)]


def on_lattice(rows: int, cols: int, row: int, col: int) -> bool:
    return 1 <= row <= rows - 2 and 1 <= col <= cols - 2 and row % 2 == 1 and col % 2 == 1


def replay_carves(shape: Tuple[int, int], sequence: Iterable[Coord]) -> np.ndarray:
    """Apply carve operations in order to an all-wall mask and return it."""

    walls = np.ones(shape, dtype=bool)
    for row, col in sequence:
        walls[row, col] = False
    return walls


def grid_from_walls(walls: np.ndarray, start: Coord, end: Coord) -> Grid:
    rows, cols = walls.shape
    grid = Grid(rows, cols)
    grid.reset_anchors()
    grid.apply_wall_mask(walls)
    grid.set_anchor(*start, START)
    grid.set_anchor(*end, END)
    return grid


class AbstractMazeCarver(AbstractMazeStrategy[MazeResult]):
    """Carves a spanning tree over the lattice, then opens both anchors.

    The anchors are opened and appended to the carve sequence even when they
    sit off the lattice, which can add a connection outside the tree.
    """

    def __init__(self, *, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        super().__init__(seed=seed, rng=rng)
        self.seed = seed

    def empty_result(self) -> MazeResult:
        return MazeResult(self.name, seed=self.seed)

    def run(self, grid: Grid, start: Cell, end: Cell) -> MazeResult:
        walls = np.ones(grid.shape, dtype=bool)
        sequence: List[Coord] = []
        self.carve(walls, sequence)
        for coord in (start.coord, end.coord):
            self._open(walls, sequence, coord)
        logger.debug("%s carved %d cell(s) on a %dx%d grid", self.name, len(sequence), grid.rows, grid.cols)
        return MazeResult(
            self.name,
            grid=grid_from_walls(walls, start.coord, end.coord),
            sequence=sequence,
            seed=self.seed,
        )

    @abstractmethod
    def carve(self, walls: np.ndarray, sequence: List[Coord]) -> None:
        """Open lattice and connecting cells in ``walls``, recording each in ``sequence``."""

    @staticmethod
    def _open(walls: np.ndarray, sequence: List[Coord], coord: Coord) -> None:
        walls[coord] = False
        sequence.append(coord)


class BacktrackerMaze(AbstractMazeCarver):
    name = "backtracker"
    description = "Randomized depth-first backtracker; long winding corridors"

    def carve(self, walls: np.ndarray, sequence: List[Coord]) -> None:
        rows, cols = walls.shape
        visited = np.zeros_like(walls)
        visited[1, 1] = True
        self._open(walls, sequence, (1, 1))
        stack: List[Coord] = [(1, 1)]

        while stack:
            r, c = stack[-1]
            options = [
                (r + 2 * dr, c + 2 * dc)
                for dr, dc in LATTICE_STEPS
                if on_lattice(rows, cols, r + 2 * dr, c + 2 * dc) and not visited[r + 2 * dr, c + 2 * dc]
            ]
            if not options:
                stack.pop()
                continue
            nr, nc = self._rng.choice(options)
            self._open(walls, sequence, ((r + nr) // 2, (c + nc) // 2))
            self._open(walls, sequence, (nr, nc))
            visited[nr, nc] = True
            stack.append((nr, nc))


class PrimMaze(AbstractMazeCarver):
    name = "prim"
    description = "Randomized Prim's algorithm; evenly branching passages"

    def carve(self, walls: np.ndarray, sequence: List[Coord]) -> None:
        rows, cols = walls.shape
        frontier: List[Tuple[Coord, Coord]] = []
        self._open(walls, sequence, (1, 1))
        self._extend_frontier(frontier, rows, cols, (1, 1))

        while frontier:
            wall, origin = frontier.pop(self._rng.randrange(len(frontier)))
            far = (2 * wall[0] - origin[0], 2 * wall[1] - origin[1])
            if walls[far]:
                self._open(walls, sequence, wall)
                self._open(walls, sequence, far)
                self._extend_frontier(frontier, rows, cols, far)

    @staticmethod
    def _extend_frontier(frontier: List[Tuple[Coord, Coord]], rows: int, cols: int, origin: Coord) -> None:
        r, c = origin
        for dr, dc in LATTICE_STEPS:
            if on_lattice(rows, cols, r + 2 * dr, c + 2 * dc):
                frontier.append(((r + dr, c + dc), origin))


class KruskalMaze(AbstractMazeCarver):
    """Randomized Kruskal over the lattice with a plain disjoint-set forest.

    ``find`` chases parents without path compression or union by rank, so a
    lookup is linear in the height of the set's tree.
    """

    name = "kruskal"
    description = "Randomized Kruskal's algorithm; many short dead ends"

    def carve(self, walls: np.ndarray, sequence: List[Coord]) -> None:
        rows, cols = walls.shape
        sets: Dict[Coord, Coord] = {}
        for coord in lattice_cells(rows, cols):
            sets[coord] = coord
            self._open(walls, sequence, coord)

        candidates: List[Coord] = []
        for r, c in lattice_cells(rows, cols):
            if r + 2 <= rows - 2:
                candidates.append((r + 1, c))
            if c + 2 <= cols - 2:
                candidates.append((r, c + 1))

        while candidates:
            wr, wc = candidates.pop(self._rng.randrange(len(candidates)))
            if wr % 2 == 0:
                first, second = (wr - 1, wc), (wr + 1, wc)
            else:
                first, second = (wr, wc - 1), (wr, wc + 1)
            root_first = self.find(sets, first)
            root_second = self.find(sets, second)
            if root_first != root_second:
                self._open(walls, sequence, (wr, wc))
                sets[root_second] = root_first

    @staticmethod
    def find(sets: Dict[Coord, Coord], coord: Coord) -> Coord:
        while sets[coord] != coord:
            coord = sets[coord]
        return coord


MAZE_STRATEGIES = build_registry(BacktrackerMaze, PrimMaze, KruskalMaze)


def run_maze(
    grid: Grid,
    strategy: str = "backtracker",
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> MazeResult:
    """Carve a maze with the grid's dimensions and anchors.

    ``grid`` itself is not modified; the carved layout is returned on the
    result together with the ordered carve sequence.
    """

    return resolve_strategy(MAZE_STRATEGIES, strategy)(seed=seed, rng=rng)(grid)


__all__ = [
    "AbstractMazeCarver",
    "BacktrackerMaze",
    "KruskalMaze",
    "MAZE_STRATEGIES",
    "MazeResult",
    "PrimMaze",
    "grid_from_walls",
    "lattice_cells",
    "on_lattice",
    "replay_carves",
    "run_maze",
]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate mazes and save their carve sequences")
    parser.add_argument("count", type=int, nargs="?", default=1, help="Number of mazes to generate")
    parser.add_argument("--output-dir", type=Path, default=Path("data/mazes"), help="Where to save assets")
    parser.add_argument("--strategy", choices=sorted(MAZE_STRATEGIES), default="backtracker")
    parser.add_argument("--rows", type=int, default=21)
    parser.add_argument("--cols", type=int, default=51)
    parser.add_argument("--cell-size", type=int, default=25)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--list", action="store_true", help="List available strategies and exit")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    from ..render import GridRenderer

    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    if args.list:
        for name, strategy in sorted(MAZE_STRATEGIES.items()):
            print(f"{name:12s} {strategy.description}")
        return

    rng = random.Random(args.seed)
    renderer = GridRenderer(cell_size=args.cell_size)
    image_dir = args.output_dir / "images"
    image_dir.mkdir(parents=True, exist_ok=True)

    records = []
    for _ in range(args.count):
        maze_id = str(uuid.uuid4())
        # Each maze gets its own seed so any record can be regenerated alone.
        maze_seed = rng.randrange(2**32)
        result = run_maze(init_grid(args.rows, args.cols), args.strategy, seed=maze_seed)
        image_path = image_dir / f"{maze_id}_maze.png"
        renderer.render(result.grid).save(image_path)
        record = result.to_dict()
        record["id"] = maze_id
        record["image_path"] = image_path.relative_to(args.output_dir).as_posix()
        records.append(record)

    metadata_path = write_results(records, args.output_dir / "mazes.json")
    logger.info("Generated %d maze(s) into %s", len(records), metadata_path)


if __name__ == "__main__":
    main()
