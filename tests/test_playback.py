import unittest
from typing import Any, List, Tuple

from gridpath.grid import init_grid
from gridpath.maze import run_maze
from gridpath.playback import (
    CELL_CARVED,
    CELL_DISCOVERED,
    DEFAULT_SCHEDULER,
    MAZE_COMPLETE,
    SEARCH_COMPLETE,
    PlaybackScheduler,
    iter_events,
    schedule_playback,
)
from gridpath.search import run_search


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class Recorder:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any, bool]] = []

    def __call__(self, kind: str, payload: Any, terminal: bool) -> None:
        self.calls.append((kind, payload, terminal))


class EventSequenceTests(unittest.TestCase):
    def test_search_events_follow_visited_order(self) -> None:
        result = run_search(init_grid(5, 5), "astar")
        events = list(iter_events(result))
        self.assertEqual(len(events), len(result.visited) + 1)
        for index, event in enumerate(events[:-1]):
            self.assertEqual(event.kind, CELL_DISCOVERED)
            self.assertEqual(event.index, index)
            self.assertEqual(event.offset_ms, index * 25)
            self.assertEqual(event.payload, result.visited[index].coord)
            self.assertFalse(event.terminal)
        final = events[-1]
        self.assertEqual(final.kind, SEARCH_COMPLETE)
        self.assertTrue(final.terminal)
        self.assertEqual(final.payload, result.path_coords)
        self.assertEqual(final.offset_ms, len(result.visited) * 25)

    def test_maze_events_use_their_own_interval(self) -> None:
        result = run_maze(init_grid(7, 7), "kruskal", seed=0)
        events = list(iter_events(result))
        self.assertEqual([e.payload for e in events[:-1]], result.sequence)
        self.assertTrue(all(e.kind == CELL_CARVED for e in events[:-1]))
        self.assertEqual(events[1].offset_ms, 10)
        self.assertEqual(events[-1].kind, MAZE_COMPLETE)
        self.assertIs(events[-1].payload, result.grid)

    def test_explicit_interval_and_empty_result(self) -> None:
        grid = init_grid(5, 5)
        grid.reset_anchors()
        events = list(iter_events(run_search(grid, "bfs"), interval_ms=40))
        self.assertEqual(len(events), 1)
        self.assertTrue(events[0].terminal)
        self.assertEqual(events[0].payload, [])
        self.assertEqual(events[0].offset_ms, 0)

    def test_negative_interval_is_rejected(self) -> None:
        result = run_search(init_grid(5, 5), "bfs")
        with self.assertRaises(ValueError):
            list(iter_events(result, interval_ms=-1))
        with self.assertRaises(ValueError):
            PlaybackScheduler().schedule(result, interval_ms=-5)

    def test_unknown_result_type_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            list(iter_events({"path": []}))


class SchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduler = PlaybackScheduler()
        self.result = run_search(init_grid(5, 5), "bfs")
        self.recorder = Recorder()

    def test_events_are_delivered_as_time_advances(self) -> None:
        handle = self.scheduler.schedule(self.result, on_event=self.recorder)
        self.assertTrue(self.scheduler.busy)

        self.assertEqual(len(handle.advance(0)), 1)
        self.assertEqual(len(handle.advance(24)), 0)
        self.assertEqual(len(handle.advance(25)), 1)
        self.assertEqual(handle.next_offset_ms, 50)

        handle.drain()
        self.assertTrue(handle.finished)
        self.assertFalse(self.scheduler.busy)
        kinds = [call[0] for call in self.recorder.calls]
        self.assertEqual(kinds[-1], SEARCH_COMPLETE)
        self.assertEqual(kinds.count(CELL_DISCOVERED), len(self.result.visited))
        self.assertEqual([call[1] for call in self.recorder.calls[:-1]], self.result.visited_coords)
        self.assertEqual([call[2] for call in self.recorder.calls], [False] * len(self.result.visited) + [True])
        self.assertIsNone(handle.next_offset_ms)

    def test_busy_scheduler_refuses_new_runs(self) -> None:
        handle = self.scheduler.schedule(self.result)
        self.assertIsNone(self.scheduler.schedule(self.result))
        handle.drain()
        self.assertIsNotNone(self.scheduler.schedule(self.result))

    def test_cancel_releases_and_silences(self) -> None:
        handle = self.scheduler.schedule(self.result, on_event=self.recorder)
        handle.advance(0)
        handle.cancel()
        self.assertFalse(self.scheduler.busy)
        self.assertEqual(handle.drain(), [])
        self.assertEqual(len(self.recorder.calls), 1)

    def test_reset_invalidates_in_flight_playback(self) -> None:
        old = self.scheduler.schedule(self.result, on_event=self.recorder)
        old.advance(25)
        self.scheduler.reset()
        self.assertTrue(old.stale)
        self.assertFalse(self.scheduler.busy)

        fresh = self.scheduler.schedule(self.result, on_event=Recorder())
        self.assertEqual(old.drain(), [])
        self.assertEqual(len(self.recorder.calls), 2)
        self.assertTrue(fresh.active)
        self.assertGreater(fresh.generation, old.generation)

    def test_event_sequence_is_restartable(self) -> None:
        handle = self.scheduler.schedule(self.result)
        before = list(handle.events())
        handle.advance(100)
        self.assertEqual(list(handle.events()), before)
        self.assertEqual(len(before), len(self.result.visited) + 1)

    def test_realtime_run_with_injected_clock(self) -> None:
        clock = FakeClock()
        handle = self.scheduler.schedule(self.result, interval_ms=20, on_event=self.recorder)
        handle.run_realtime(clock=clock, sleep=clock.sleep)
        self.assertTrue(handle.finished)
        self.assertEqual(len(self.recorder.calls), len(self.result.visited) + 1)
        self.assertGreaterEqual(clock.now * 1000, handle.duration_ms - 1e-6)

    def test_scheduler_intervals_apply_per_result_type(self) -> None:
        scheduler = PlaybackScheduler(search_interval_ms=5, maze_interval_ms=2)
        handle = scheduler.schedule(self.result)
        self.assertEqual(handle.interval_ms, 5)
        handle.drain()
        handle = scheduler.schedule(run_maze(init_grid(5, 5), "prim", seed=0))
        self.assertEqual(handle.interval_ms, 2)

    def test_schedule_playback_helper(self) -> None:
        shared = schedule_playback(self.result, scheduler=self.scheduler)
        self.assertIsNotNone(shared)
        self.assertIsNone(schedule_playback(self.result, scheduler=self.scheduler))


class DefaultSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        DEFAULT_SCHEDULER.reset()
        self.addCleanup(DEFAULT_SCHEDULER.reset)
        self.result = run_search(init_grid(5, 5), "bfs")

    def test_second_playback_waits_for_the_first(self) -> None:
        recorder = Recorder()
        first = schedule_playback(self.result, 25, recorder)
        first.advance(0)
        self.assertIsNone(schedule_playback(self.result, 25))
        self.assertTrue(DEFAULT_SCHEDULER.busy)

        first.drain()
        self.assertTrue(first.finished)
        self.assertEqual(len(recorder.calls), len(self.result.visited) + 1)
        second = schedule_playback(self.result, 25)
        self.assertIsNotNone(second)
        self.assertIs(DEFAULT_SCHEDULER.active_handle, second)

    def test_cancel_frees_the_default_scheduler(self) -> None:
        first = schedule_playback(self.result, 0)
        first.cancel()
        self.assertIsNotNone(schedule_playback(self.result, 0))

    def test_zero_interval_delivers_everything_at_once(self) -> None:
        recorder = Recorder()
        handle = schedule_playback(self.result, 0, recorder)
        handle.advance(0)
        self.assertTrue(handle.finished)
        self.assertFalse(DEFAULT_SCHEDULER.busy)
        self.assertEqual(len(recorder.calls), len(self.result.visited) + 1)


if __name__ == "__main__":
    unittest.main()
