"""Timed, ordered replay of search and maze results.

A result is turned into a finite sequence of :class:`PlaybackEvent` objects,
each stamped with a fixed offset (``index * interval_ms``) from the moment
playback begins. Nothing here owns a timer: the caller drives a
:class:`PlaybackHandle` with its own clock through :meth:`PlaybackHandle.advance`.

The :class:`PlaybackScheduler` allows one outstanding playback at a time and
keeps a generation counter. Resetting the scheduler or cancelling a handle
makes every not-yet-delivered event of that handle inert.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Union

from .maze.generator import MazeResult
from .search.engine import SearchResult

logger = logging.getLogger(__name__)

CELL_DISCOVERED = "cell_discovered"
SEARCH_COMPLETE = "search_complete"
CELL_CARVED = "cell_carved"
MAZE_COMPLETE = "maze_complete"

DEFAULT_SEARCH_INTERVAL_MS = 25.0
DEFAULT_MAZE_INTERVAL_MS = 10.0
MIN_SLEEP_MS = 1.0

PlayableResult = Union[SearchResult, MazeResult]
EventCallback = Callable[[str, Any, bool], None]


@dataclass(frozen=True)
class PlaybackEvent:
    kind: str
    index: int
    offset_ms: float
    payload: Any
    terminal: bool = False


def default_interval(result: PlayableResult) -> float:
    if isinstance(result, MazeResult):
        return DEFAULT_MAZE_INTERVAL_MS
    return DEFAULT_SEARCH_INTERVAL_MS


def iter_events(result: PlayableResult, interval_ms: Optional[float] = None) -> Iterator[PlaybackEvent]:
    """Lazily yield the disclosure events for ``result`` in delivery order.

    Search results produce one ``cell_discovered`` event per visited cell and
    a terminal ``search_complete`` event carrying the path coordinates. Maze
    results produce one ``cell_carved`` event per carve and a terminal
    ``maze_complete`` event carrying the carved grid.
    """

    interval = default_interval(result) if interval_ms is None else float(interval_ms)
    if interval < 0:
        raise ValueError("interval_ms must be non-negative")

    if isinstance(result, SearchResult):
        steps: List[Any] = result.visited_coords
        step_kind, final_kind = CELL_DISCOVERED, SEARCH_COMPLETE
        final_payload: Any = result.path_coords
    elif isinstance(result, MazeResult):
        steps = list(result.sequence)
        step_kind, final_kind = CELL_CARVED, MAZE_COMPLETE
        final_payload = result.grid
    else:
        raise TypeError(f"Cannot play back {type(result).__name__}")

    for index, payload in enumerate(steps):
        yield PlaybackEvent(step_kind, index, index * interval, payload)
    yield PlaybackEvent(final_kind, len(steps), len(steps) * interval, final_payload, terminal=True)


class PlaybackHandle:
    """One scheduled playback; delivers events to ``on_event`` as time advances."""

    def __init__(
        self,
        scheduler: "PlaybackScheduler",
        generation: int,
        result: PlayableResult,
        interval_ms: float,
        on_event: Optional[EventCallback] = None,
    ) -> None:
        self.scheduler = scheduler
        self.generation = generation
        self.result = result
        self.interval_ms = interval_ms
        self.on_event = on_event
        self.cancelled = False
        self.finished = False
        self.delivered = 0
        self._pending = iter_events(result, interval_ms)
        self._next: Optional[PlaybackEvent] = None

    def events(self) -> Iterator[PlaybackEvent]:
        """A fresh iterator over the full event sequence, independent of delivery state."""

        return iter_events(self.result, self.interval_ms)

    @property
    def stale(self) -> bool:
        return self.generation != self.scheduler.generation

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished or self.stale)

    @property
    def next_offset_ms(self) -> Optional[float]:
        event = self._peek() if self.active else None
        return event.offset_ms if event is not None else None

    @property
    def duration_ms(self) -> float:
        if isinstance(self.result, SearchResult):
            return len(self.result.visited) * self.interval_ms
        return len(self.result.sequence) * self.interval_ms

    def cancel(self) -> None:
        """Stop delivering events and release the scheduler."""

        if self.cancelled or self.finished:
            return
        self.cancelled = True
        self.scheduler._release(self)
        logger.debug("Playback generation %d cancelled after %d event(s)", self.generation, self.delivered)

    def advance(self, elapsed_ms: float) -> List[PlaybackEvent]:
        """Deliver, in order, every pending event due at ``elapsed_ms`` since playback began."""

        delivered: List[PlaybackEvent] = []
        while self.active:
            event = self._peek()
            if event is None or event.offset_ms > elapsed_ms:
                break
            self._next = None
            self._deliver(event)
            delivered.append(event)
        return delivered

    def drain(self) -> List[PlaybackEvent]:
        return self.advance(math.inf)

    def run_realtime(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Block until the playback finishes, pacing events against ``clock`` (seconds)."""

        began = clock()
        while self.active:
            elapsed = (clock() - began) * 1000.0
            self.advance(elapsed)
            due = self.next_offset_ms
            if due is None:
                break
            sleep(max(due - elapsed, MIN_SLEEP_MS) / 1000.0)

    # ------------------------------------------------------------------

    def _peek(self) -> Optional[PlaybackEvent]:
        if self._next is None:
            self._next = next(self._pending, None)
        return self._next

    def _deliver(self, event: PlaybackEvent) -> None:
        self.delivered += 1
        if event.terminal:
            self.finished = True
            self.scheduler._release(self)
        if self.on_event is not None:
            self.on_event(event.kind, event.payload, event.terminal)

    def __repr__(self) -> str:
        return (
            f"PlaybackHandle(generation={self.generation}, delivered={self.delivered}, "
            f"finished={self.finished}, cancelled={self.cancelled})"
        )


class PlaybackScheduler:
    """Hands out playback handles, one at a time."""

    def __init__(
        self,
        search_interval_ms: float = DEFAULT_SEARCH_INTERVAL_MS,
        maze_interval_ms: float = DEFAULT_MAZE_INTERVAL_MS,
    ) -> None:
        self.search_interval_ms = search_interval_ms
        self.maze_interval_ms = maze_interval_ms
        self.generation = 0
        self._active: Optional[PlaybackHandle] = None

    @property
    def busy(self) -> bool:
        return self._active is not None

    @property
    def active_handle(self) -> Optional[PlaybackHandle]:
        return self._active

    def schedule(
        self,
        result: PlayableResult,
        interval_ms: Optional[float] = None,
        on_event: Optional[EventCallback] = None,
    ) -> Optional[PlaybackHandle]:
        """Start a playback of ``result``; returns ``None`` while another is outstanding."""

        if self.busy:
            logger.debug("Playback refused: generation %d still running", self.generation)
            return None
        if interval_ms is None:
            interval_ms = self.maze_interval_ms if isinstance(result, MazeResult) else self.search_interval_ms
        if interval_ms < 0:
            raise ValueError("interval_ms must be non-negative")
        self.generation += 1
        handle = PlaybackHandle(self, self.generation, result, interval_ms, on_event)
        self._active = handle
        return handle

    def reset(self) -> None:
        """Invalidate any in-flight playback and clear the busy flag."""

        self.generation += 1
        self._active = None

    def _release(self, handle: PlaybackHandle) -> None:
        if self._active is handle:
            self._active = None


DEFAULT_SCHEDULER = PlaybackScheduler()


def schedule_playback(
    result: PlayableResult,
    interval_ms: Optional[float] = None,
    on_event: Optional[EventCallback] = None,
    *,
    scheduler: Optional[PlaybackScheduler] = None,
) -> Optional[PlaybackHandle]:
    """Schedule ``result`` on ``scheduler``, or on the shared module scheduler.

    Returns ``None`` while that scheduler still has a playback outstanding.
    """

    return (scheduler if scheduler is not None else DEFAULT_SCHEDULER).schedule(result, interval_ms, on_event)


__all__ = [
    "CELL_CARVED",
    "CELL_DISCOVERED",
    "DEFAULT_MAZE_INTERVAL_MS",
    "DEFAULT_SCHEDULER",
    "DEFAULT_SEARCH_INTERVAL_MS",
    "MAZE_COMPLETE",
    "PlaybackEvent",
    "PlaybackHandle",
    "PlaybackScheduler",
    "SEARCH_COMPLETE",
    "iter_events",
    "schedule_playback",
]
