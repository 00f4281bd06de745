"""Engine configuration."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .base import PathLike
from .grid import clamp_dimension
from .maze import MAZE_STRATEGIES
from .playback import DEFAULT_MAZE_INTERVAL_MS, DEFAULT_SEARCH_INTERVAL_MS
from .search import SEARCH_STRATEGIES


@dataclass
class EngineConfig:
    """Recognised options for a grid session.

    ``cell_size`` only matters to renderers; the engine never reads it.
    """

    rows: int = 21
    cols: int = 51
    cell_size: int = 25
    search_strategy: str = "astar"
    maze_strategy: str = "backtracker"
    search_interval_ms: float = DEFAULT_SEARCH_INTERVAL_MS
    maze_interval_ms: float = DEFAULT_MAZE_INTERVAL_MS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.rows = clamp_dimension(self.rows)
        self.cols = clamp_dimension(self.cols)
        if self.cell_size <= 0:
            raise ValueError("cell_size must be positive")
        if self.search_strategy not in SEARCH_STRATEGIES:
            raise ValueError(f"Unknown search strategy: {self.search_strategy!r}")
        if self.maze_strategy not in MAZE_STRATEGIES:
            raise ValueError(f"Unknown maze strategy: {self.maze_strategy!r}")
        if self.search_interval_ms < 0 or self.maze_interval_ms < 0:
            raise ValueError("Playback intervals must be non-negative")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(payload) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(payload))

    @classmethod
    def from_json(cls, path: PathLike) -> "EngineConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        raw = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("Config file must contain a JSON object")
        return cls.from_dict(raw)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["EngineConfig"]
