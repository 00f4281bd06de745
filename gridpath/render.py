"""Pillow snapshots and animated replays of grids, searches and mazes."""

from __future__ import annotations

import colorsys
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from .base import PathLike
from .grid import Cell, Coord, Grid
from .playback import CELL_CARVED, CELL_DISCOVERED, SEARCH_COMPLETE, PlaybackEvent

logger = logging.getLogger(__name__)

WALL_COLOR = (0, 0, 0)
OPEN_COLOR = (255, 255, 255)
START_COLOR = (0, 128, 0)
END_COLOR = (220, 30, 30)
PATH_COLOR = (255, 215, 0)

FINAL_FRAME_MS = 1000

CellLike = Union[Cell, Coord]


def visited_color(index: int, last_index: int) -> Tuple[int, int, int]:
    """Blue for the first discovery, shading through to yellow for the last."""

    ratio = index / last_index if last_index > 0 else 0.0
    hue = (240 - ratio * 180) / 360
    r, g, b = colorsys.hls_to_rgb(hue, 0.5, 1.0)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def _coord(item: CellLike) -> Coord:
    return item.coord if isinstance(item, Cell) else (int(item[0]), int(item[1]))


class GridRenderer:
    def __init__(self, cell_size: int = 25) -> None:
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.cell_size = cell_size

    def render(
        self,
        grid: Grid,
        *,
        visited: Optional[Sequence[CellLike]] = None,
        path: Optional[Sequence[CellLike]] = None,
        walls: Optional[np.ndarray] = None,
    ) -> Image.Image:
        mask = grid.wall_mask() if walls is None else walls
        canvas = np.empty((grid.rows, grid.cols, 3), dtype=np.uint8)
        canvas[:] = OPEN_COLOR
        canvas[mask] = WALL_COLOR

        if visited:
            last_index = len(visited) - 1
            for index, item in enumerate(visited):
                canvas[_coord(item)] = visited_color(index, last_index)
        for item in path or ():
            canvas[_coord(item)] = PATH_COLOR
        if grid.start is not None:
            canvas[grid.start] = START_COLOR
        if grid.end is not None:
            canvas[grid.end] = END_COLOR

        size = (grid.cols * self.cell_size, grid.rows * self.cell_size)
        return Image.fromarray(canvas, "RGB").resize(size, Image.Resampling.NEAREST)

    def render_playback(
        self,
        grid: Grid,
        events: Iterable[PlaybackEvent],
        output_path: PathLike,
        *,
        stride: int = 1,
    ) -> Path:
        """Write an animated GIF with one frame per ``stride`` events.

        Carve events start from an all-wall layout; discovery events are laid
        over the grid's own walls. Frame durations follow the event offsets.
        """

        if stride < 1:
            raise ValueError("stride must be at least 1")
        events = list(events)
        carving = any(event.kind == CELL_CARVED for event in events)
        walls = np.ones(grid.shape, dtype=bool) if carving else grid.wall_mask()
        discovered: List[Coord] = []
        path: Optional[List[Coord]] = None

        frames: List[Image.Image] = []
        offsets: List[float] = []
        for position, event in enumerate(events):
            if event.kind == CELL_CARVED:
                walls[event.payload] = False
            elif event.kind == CELL_DISCOVERED:
                discovered.append(event.payload)
            elif event.kind == SEARCH_COMPLETE:
                path = event.payload
            if not event.terminal and position % stride != stride - 1:
                continue
            frames.append(self.render(grid, visited=discovered, path=path, walls=walls))
            offsets.append(event.offset_ms)

        if not frames:
            raise ValueError("No playback events to render")
        durations = [max(1, int(round(b - a))) for a, b in zip(offsets, offsets[1:])]
        durations.append(FINAL_FRAME_MS)

        target = Path(output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        frames[0].save(target, save_all=True, append_images=frames[1:], duration=durations, loop=0)
        logger.debug("Wrote %d frame(s) to %s", len(frames), target)
        return target


__all__ = ["GridRenderer", "visited_color"]
