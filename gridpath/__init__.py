"""Grid pathfinding and maze generation engine with stepwise playback."""

__all__ = [
    "Cell",
    "EngineConfig",
    "Grid",
    "GridRenderer",
    "GridSession",
    "MAZE_STRATEGIES",
    "MazeResult",
    "PlaybackEvent",
    "PlaybackHandle",
    "PlaybackScheduler",
    "SEARCH_STRATEGIES",
    "SearchResult",
    "init_grid",
    "reconstruct_path",
    "run_maze",
    "run_search",
    "schedule_playback",
    "set_anchor",
    "toggle_wall",
]

from .grid import Cell, Grid, init_grid, set_anchor, toggle_wall
from .search import SEARCH_STRATEGIES, SearchResult, reconstruct_path, run_search
from .maze import MAZE_STRATEGIES, MazeResult, run_maze
from .playback import PlaybackEvent, PlaybackHandle, PlaybackScheduler, schedule_playback
from .config import EngineConfig
from .session import GridSession
from .render import GridRenderer
