"""Shortest-path and traversal strategies over a 4-connected grid."""

from __future__ import annotations

import argparse
import heapq
import itertools
import json
import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Deque, List, Optional, Set, Tuple

from ..base import AbstractGridStrategy, build_registry, resolve_strategy
from ..grid import UNVISITED, Cell, Coord, Grid, init_grid, manhattan_distance

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    strategy: str
    path: List[Cell] = field(default_factory=list)
    visited: List[Cell] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.path)

    @property
    def path_coords(self) -> List[Coord]:
        return [cell.coord for cell in self.path]

    @property
    def visited_coords(self) -> List[Coord]:
        return [cell.coord for cell in self.visited]

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy,
            "found": self.found,
            "path_length": len(self.path),
            "visited_count": len(self.visited),
            "path": [list(coord) for coord in self.path_coords],
            "visited": [list(coord) for coord in self.visited_coords],
        }


def reconstruct_path(grid: Grid, goal: Cell) -> List[Cell]:
    """Follow parent links from ``goal`` back to the start; return start-to-goal order."""

    path: List[Cell] = []
    seen: Set[Coord] = set()
    current: Optional[Cell] = goal
    while current is not None:
        if current.coord in seen:
            raise RuntimeError(f"Parent links form a cycle at {current.coord}")
        seen.add(current.coord)
        path.append(current)
        current = grid[current.parent] if current.parent is not None else None
    path.reverse()
    return path


class AbstractSearchStrategy(AbstractGridStrategy[SearchResult]):
    """Search strategies share uniform edge cost 1 and orthogonal moves."""

    def __call__(self, grid: Grid) -> SearchResult:
        grid.reset_transient()
        result = super().__call__(grid)
        logger.debug(
            "%s expanded %d cell(s), path length %d",
            self.name,
            len(result.visited),
            len(result.path),
        )
        return result

    def empty_result(self) -> SearchResult:
        return SearchResult(self.name)

    def _finish(self, grid: Grid, goal: Optional[Cell], visited: List[Cell]) -> SearchResult:
        path = reconstruct_path(grid, goal) if goal is not None else []
        return SearchResult(self.name, path, visited)


class AStarSearch(AbstractSearchStrategy):
    """Informed search ordered by ``f = g + h`` with a Manhattan heuristic.

    Ties on ``f`` are broken by insertion order into the heap, which is not
    the same as a linear scan of the open set; callers should not rely on a
    particular order among equal-cost cells.
    """

    name = "astar"
    description = "A* search guided by Manhattan distance to the goal"

    def run(self, grid: Grid, start: Cell, end: Cell) -> SearchResult:
        goal = end.coord
        counter = itertools.count()
        start.g = 0
        start.h = manhattan_distance(start.coord, goal)
        start.f = start.g + start.h
        frontier: List[Tuple[float, int, Coord]] = [(start.f, next(counter), start.coord)]
        open_set: Set[Coord] = {start.coord}
        closed: Set[Coord] = set()
        visited: List[Cell] = []

        while frontier:
            f, _, coord = heapq.heappop(frontier)
            current = grid[coord]
            if coord in closed or f != current.f:
                continue
            open_set.discard(coord)
            closed.add(coord)
            current.visited_at = len(visited)
            visited.append(current)
            if coord == goal:
                return self._finish(grid, current, visited)

            for neighbor in grid.neighbors(current):
                if neighbor.coord in closed:
                    continue
                tentative_g = current.g + 1
                if neighbor.coord in open_set and tentative_g >= neighbor.g:
                    continue
                neighbor.parent = coord
                neighbor.g = tentative_g
                neighbor.h = manhattan_distance(neighbor.coord, goal)
                neighbor.f = neighbor.g + neighbor.h
                open_set.add(neighbor.coord)
                heapq.heappush(frontier, (neighbor.f, next(counter), neighbor.coord))

        return self._finish(grid, None, visited)


class DijkstraSearch(AbstractSearchStrategy):
    name = "dijkstra"
    description = "Dijkstra's algorithm; finalizes cells in order of distance from the start"

    def run(self, grid: Grid, start: Cell, end: Cell) -> SearchResult:
        counter = itertools.count()
        start.distance = 0
        frontier: List[Tuple[float, int, Coord]] = [(0, next(counter), start.coord)]
        visited: List[Cell] = []

        while frontier:
            distance, _, coord = heapq.heappop(frontier)
            current = grid[coord]
            # Finalized cells and superseded heap entries are skipped.
            if current.visited_at != UNVISITED or distance > current.distance:
                continue
            current.visited_at = len(visited)
            visited.append(current)
            if coord == end.coord:
                return self._finish(grid, current, visited)

            for neighbor in grid.neighbors(current):
                candidate = current.distance + 1
                if candidate < neighbor.distance:
                    neighbor.distance = candidate
                    neighbor.parent = coord
                    heapq.heappush(frontier, (candidate, next(counter), neighbor.coord))

        return self._finish(grid, None, visited)


class BreadthFirstSearch(AbstractSearchStrategy):
    """FIFO traversal; ``visited_at`` is stamped when a cell is enqueued."""

    name = "bfs"
    description = "Breadth-first search; shortest path on an unweighted grid"

    def run(self, grid: Grid, start: Cell, end: Cell) -> SearchResult:
        discovered = 0
        start.visited_at = discovered
        discovered += 1
        queue: Deque[Cell] = deque([start])
        visited: List[Cell] = []

        while queue:
            current = queue.popleft()
            visited.append(current)
            if current.coord == end.coord:
                return self._finish(grid, current, visited)
            for neighbor in grid.neighbors(current):
                if neighbor.visited_at == UNVISITED:
                    neighbor.visited_at = discovered
                    discovered += 1
                    neighbor.parent = current.coord
                    queue.append(neighbor)

        return self._finish(grid, None, visited)


class DepthFirstSearch(AbstractSearchStrategy):
    """LIFO traversal; ``visited_at`` is stamped when a cell is popped.

    Neighbours may sit on the stack more than once; the pop-time check on
    ``visited_at`` keeps each cell from being expanded twice.
    """

    name = "dfs"
    description = "Depth-first search; finds a path, usually not the shortest"

    def run(self, grid: Grid, start: Cell, end: Cell) -> SearchResult:
        stack: List[Tuple[Coord, Optional[Coord]]] = [(start.coord, None)]
        visited: List[Cell] = []

        while stack:
            coord, parent = stack.pop()
            current = grid[coord]
            if current.visited_at != UNVISITED:
                continue
            current.visited_at = len(visited)
            current.parent = parent
            visited.append(current)
            if coord == end.coord:
                return self._finish(grid, current, visited)
            for neighbor in grid.neighbors(current):
                if neighbor.visited_at == UNVISITED:
                    stack.append((neighbor.coord, coord))

        return self._finish(grid, None, visited)


SEARCH_STRATEGIES = build_registry(AStarSearch, DijkstraSearch, BreadthFirstSearch, DepthFirstSearch)


def run_search(grid: Grid, strategy: str = "astar") -> SearchResult:
    """Run the named search between the grid's anchors.

    Transient fields on every cell are reset first, so repeated runs on the
    same grid are independent.
    """

    return resolve_strategy(SEARCH_STRATEGIES, strategy)()(grid)


__all__ = [
    "AStarSearch",
    "AbstractSearchStrategy",
    "BreadthFirstSearch",
    "DepthFirstSearch",
    "DijkstraSearch",
    "SEARCH_STRATEGIES",
    "SearchResult",
    "reconstruct_path",
    "run_search",
]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    from ..maze import MAZE_STRATEGIES

    parser = argparse.ArgumentParser(description="Run a grid search and report the discovered path")
    parser.add_argument("--strategy", choices=sorted(SEARCH_STRATEGIES), default="astar")
    parser.add_argument("--maze", choices=sorted(MAZE_STRATEGIES), default=None, help="Carve a maze before searching")
    parser.add_argument("--rows", type=int, default=21)
    parser.add_argument("--cols", type=int, default=51)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--cell-size", type=int, default=25)
    parser.add_argument("--image", type=Path, default=None, help="Optional PNG snapshot of the finished search")
    parser.add_argument("--full", action="store_true", help="Include path and visited coordinates in the output")
    parser.add_argument("--list", action="store_true", help="List available strategies and exit")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    from ..maze import run_maze
    from ..render import GridRenderer

    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    if args.list:
        for name, strategy in sorted(SEARCH_STRATEGIES.items()):
            print(f"{name:10s} {strategy.description}")
        return

    grid = init_grid(args.rows, args.cols)
    if args.maze is not None:
        grid = run_maze(grid, args.maze, seed=args.seed).grid
    result = run_search(grid, args.strategy)

    payload = result.to_dict()
    if not args.full:
        payload.pop("path")
        payload.pop("visited")
    print(json.dumps(payload, indent=2))

    if args.image is not None:
        image = GridRenderer(cell_size=args.cell_size).render(grid, visited=result.visited, path=result.path)
        args.image.parent.mkdir(parents=True, exist_ok=True)
        image.save(args.image)
        logger.info("Saved snapshot to %s", args.image)


if __name__ == "__main__":
    main()
