"""Abstract interfaces shared by the search and maze strategies."""

from __future__ import annotations

import json
import logging
import random
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from .grid import Cell, Grid

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
ResultT = TypeVar("ResultT")
StrategyT = TypeVar("StrategyT", bound="AbstractGridStrategy")


class AbstractGridStrategy(ABC, Generic[ResultT]):
    """Base class for algorithms that run over a grid between its two anchors."""

    name: str = ""
    description: str = ""

    @abstractmethod
    def run(self, grid: Grid, start: Cell, end: Cell) -> ResultT:
        """Run the algorithm to completion and return its result."""

    @abstractmethod
    def empty_result(self) -> ResultT:
        """Result returned when the strategy declines to run."""

    def __call__(self, grid: Grid) -> ResultT:
        if grid.start is None or grid.end is None:
            logger.debug("%s declined: grid has no start or end anchor", self.name)
            return self.empty_result()
        return self.run(grid, grid[grid.start], grid[grid.end])

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class AbstractMazeStrategy(AbstractGridStrategy[ResultT]):
    """Base class for maze carvers; randomness comes from an injectable generator."""

    def __init__(self, *, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random(seed)

    @property
    def rng(self) -> random.Random:
        return self._rng


def build_registry(*strategies: Type[StrategyT]) -> Dict[str, Type[StrategyT]]:
    registry: Dict[str, Type[StrategyT]] = {}
    for strategy in strategies:
        if not strategy.name:
            raise ValueError(f"{strategy.__name__} does not declare a name")
        registry[strategy.name] = strategy
    return registry


def resolve_strategy(registry: Mapping[str, Type[StrategyT]], name: str) -> Type[StrategyT]:
    try:
        return registry[name]
    except KeyError as exc:
        known = ", ".join(sorted(registry))
        raise KeyError(f"Unknown strategy '{name}' (expected one of: {known})") from exc


def result_to_dict(result: Any) -> Dict[str, Any]:
    """Dictionary serialization hook for result objects."""

    if isinstance(result, Mapping):
        return dict(result)
    if hasattr(result, "to_dict"):
        return getattr(result, "to_dict")()
    raise TypeError("Result must implement to_dict() to be written as JSON.")


def write_results(
    results: Iterable[Any],
    path: PathLike,
    *,
    append: bool = True,
) -> Path:
    """Serialize results to a JSON list, appending to an existing file if requested."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    existing: List[Dict[str, Any]] = []
    if append and target.exists():
        existing = load_results(target)
    payload = [result_to_dict(result) for result in results]
    target.write_text(json.dumps(existing + payload, indent=2), encoding="utf-8")
    logger.debug("Wrote %d result(s) to %s", len(payload), target)
    return target


def load_results(path: PathLike) -> List[Dict[str, Any]]:
    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(f"Results file not found: {target}")
    raw = json.loads(target.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError("Results file must contain a list of records")
    return raw


__all__ = [
    "AbstractGridStrategy",
    "AbstractMazeStrategy",
    "PathLike",
    "build_registry",
    "load_results",
    "resolve_strategy",
    "result_to_dict",
    "write_results",
]
