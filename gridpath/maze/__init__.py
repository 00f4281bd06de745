"""Maze generation package."""

__all__ = [
    "BacktrackerMaze",
    "KruskalMaze",
    "MAZE_STRATEGIES",
    "MazeResult",
    "PrimMaze",
    "lattice_cells",
    "replay_carves",
    "run_maze",
]

from .generator import (
    BacktrackerMaze,
    KruskalMaze,
    MAZE_STRATEGIES,
    MazeResult,
    PrimMaze,
    lattice_cells,
    replay_carves,
    run_maze,
)
