"""Stateful grid session for an interactive front end.

The session owns the one shared mutable grid and a playback scheduler. While a
playback is outstanding every edit and every new run is rejected.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional

import numpy as np

from .base import resolve_strategy
from .config import EngineConfig
from .grid import Grid, clamp_dimension, init_grid
from .maze import MAZE_STRATEGIES, MazeResult, run_maze
from .playback import CELL_CARVED, EventCallback, PlaybackHandle, PlaybackScheduler
from .search import SEARCH_STRATEGIES, SearchResult, run_search

logger = logging.getLogger(__name__)


class GridSession:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self.grid: Grid = init_grid(self.config.rows, self.config.cols)
        self.scheduler = PlaybackScheduler(self.config.search_interval_ms, self.config.maze_interval_ms)
        self._rng = random.Random(self.config.seed)
        self.last_search: Optional[SearchResult] = None
        self.last_maze: Optional[MazeResult] = None

    @property
    def busy(self) -> bool:
        return self.scheduler.busy

    def _reject_if_busy(self, action: str) -> bool:
        if self.busy:
            logger.debug("Rejected %s: playback in progress", action)
            return True
        return False

    # ------------------------------------------------------------------
    # Editing

    def toggle_wall(self, row: int, col: int) -> bool:
        if self._reject_if_busy("wall toggle"):
            return False
        changed = self.grid.toggle_wall(row, col)
        if changed:
            self._forget_search()
        return changed

    def set_anchor(self, row: int, col: int, kind: str) -> bool:
        if self._reject_if_busy(f"{kind} move"):
            return False
        changed = self.grid.set_anchor(row, col, kind)
        if changed:
            self._forget_search()
        return changed

    def clear_path(self) -> bool:
        """Drop the last search's marks, keeping walls and anchors."""

        if self._reject_if_busy("clear"):
            return False
        self._forget_search()
        return True

    def reset(self) -> bool:
        """Replace the grid with a fresh open one of the configured size."""

        if self._reject_if_busy("reset"):
            return False
        self.grid = init_grid(self.config.rows, self.config.cols)
        self.scheduler.reset()
        self.last_search = None
        self.last_maze = None
        return True

    def resize(self, rows: int, cols: int) -> bool:
        if self._reject_if_busy("resize"):
            return False
        self.config.rows = clamp_dimension(rows)
        self.config.cols = clamp_dimension(cols)
        return self.reset()

    def set_search_strategy(self, name: str) -> bool:
        resolve_strategy(SEARCH_STRATEGIES, name)
        if self._reject_if_busy("search strategy change"):
            return False
        self.config.search_strategy = name
        self._forget_search()
        return True

    def set_maze_strategy(self, name: str) -> bool:
        resolve_strategy(MAZE_STRATEGIES, name)
        if self._reject_if_busy("maze strategy change"):
            return False
        self.config.maze_strategy = name
        return True

    # ------------------------------------------------------------------
    # Runs

    def run_search(self, on_event: Optional[EventCallback] = None) -> Optional[PlaybackHandle]:
        """Search between the anchors and schedule the discovery playback."""

        if self._reject_if_busy("search"):
            return None
        result = run_search(self.grid, self.config.search_strategy)
        self.last_search = result
        return self.scheduler.schedule(result, self.config.search_interval_ms, on_event)

    def run_maze(self, on_event: Optional[EventCallback] = None) -> Optional[PlaybackHandle]:
        """Carve a maze and schedule its replay.

        The session grid is walled up at once and each carve event reopens a
        cell, so the grid matches the carved maze when the terminal event
        arrives.
        """

        if self._reject_if_busy("maze generation"):
            return None
        result = run_maze(self.grid, self.config.maze_strategy, rng=self._rng)
        if result.grid is None:
            return None
        self.last_maze = result
        self.last_search = None

        grid = result.grid.copy()
        grid.apply_wall_mask(np.ones(grid.shape, dtype=bool))
        self.grid = grid

        def carve(kind: str, payload: Any, terminal: bool) -> None:
            if kind == CELL_CARVED:
                grid[payload].is_wall = False
            if on_event is not None:
                on_event(kind, payload, terminal)

        return self.scheduler.schedule(result, self.config.maze_interval_ms, carve)

    def _forget_search(self) -> None:
        self.grid.reset_transient()
        self.last_search = None


__all__ = ["GridSession"]
