import random
import unittest
from collections import deque
from typing import Set, Tuple

import numpy as np

from gridpath.grid import END, init_grid
from gridpath.maze import MAZE_STRATEGIES, KruskalMaze, lattice_cells, replay_carves, run_maze

SHAPES = ((5, 5), (7, 9), (11, 5), (21, 31))


def open_component(walls: np.ndarray, origin: Tuple[int, int]) -> Set[Tuple[int, int]]:
    rows, cols = walls.shape
    seen = {origin}
    queue = deque([origin])
    while queue:
        r, c = queue.popleft()
        for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            nr, nc = r + dr, c + dc
            if 0 <= nr < rows and 0 <= nc < cols and not walls[nr, nc] and (nr, nc) not in seen:
                seen.add((nr, nc))
                queue.append((nr, nc))
    return seen


class MazeStructureTests(unittest.TestCase):
    def test_replayed_sequence_reproduces_grid(self) -> None:
        for name in MAZE_STRATEGIES:
            for rows, cols in SHAPES:
                with self.subTest(strategy=name, shape=(rows, cols)):
                    result = run_maze(init_grid(rows, cols), name, seed=1)
                    replayed = replay_carves((rows, cols), result.sequence)
                    np.testing.assert_array_equal(replayed, result.grid.wall_mask())

    def test_every_lattice_cell_is_connected(self) -> None:
        for name in MAZE_STRATEGIES:
            for rows, cols in SHAPES:
                with self.subTest(strategy=name, shape=(rows, cols)):
                    result = run_maze(init_grid(rows, cols), name, seed=3)
                    walls = result.grid.wall_mask()
                    component = open_component(walls, (1, 1))
                    for coord in lattice_cells(rows, cols):
                        self.assertIn(coord, component)
                    self.assertFalse(walls[result.grid.start])
                    self.assertFalse(walls[result.grid.end])

    def test_lattice_carves_form_a_spanning_tree(self) -> None:
        for name in MAZE_STRATEGIES:
            for rows, cols in SHAPES:
                with self.subTest(strategy=name, shape=(rows, cols)):
                    result = run_maze(init_grid(rows, cols), name, seed=5)
                    tree = result.sequence[:-2]
                    lattice = len(lattice_cells(rows, cols))
                    # Every lattice cell plus one connecting wall per tree edge.
                    self.assertEqual(len(tree), 2 * lattice - 1)
                    self.assertEqual(len(set(tree)), len(tree))
                    for r, c in tree:
                        self.assertFalse(r % 2 == 0 and c % 2 == 0)
                        self.assertTrue(0 < r < rows - 1 and 0 < c < cols - 1)

    def test_border_stays_walled(self) -> None:
        for name in MAZE_STRATEGIES:
            with self.subTest(strategy=name):
                walls = run_maze(init_grid(11, 15), name, seed=8).grid.wall_mask()
                self.assertTrue(walls[0, :].all())
                self.assertTrue(walls[-1, :].all())
                self.assertTrue(walls[:, 0].all())
                self.assertTrue(walls[:, -1].all())

    def test_anchors_are_appended_last(self) -> None:
        grid = init_grid(9, 9)
        grid.set_anchor(4, 4, END)
        for name in MAZE_STRATEGIES:
            with self.subTest(strategy=name):
                result = run_maze(grid, name, seed=2)
                self.assertEqual(result.sequence[-2:], [(1, 1), (4, 4)])
                self.assertFalse(result.grid.cell(4, 4).is_wall)
                self.assertTrue(result.grid.cell(4, 4).is_end)
                self.assertEqual(result.grid.end, (4, 4))


class MazeDeterminismTests(unittest.TestCase):
    def test_same_seed_same_sequence(self) -> None:
        for name in MAZE_STRATEGIES:
            with self.subTest(strategy=name):
                first = run_maze(init_grid(21, 21), name, seed=42)
                second = run_maze(init_grid(21, 21), name, seed=42)
                self.assertEqual(first.sequence, second.sequence)
                self.assertEqual(first.seed, 42)

    def test_different_seeds_differ(self) -> None:
        for name in MAZE_STRATEGIES:
            with self.subTest(strategy=name):
                first = run_maze(init_grid(21, 21), name, seed=1)
                second = run_maze(init_grid(21, 21), name, seed=2)
                self.assertNotEqual(first.sequence, second.sequence)

    def test_injected_generator_matches_seed(self) -> None:
        for name in MAZE_STRATEGIES:
            with self.subTest(strategy=name):
                seeded = run_maze(init_grid(15, 15), name, seed=9)
                injected = run_maze(init_grid(15, 15), name, rng=random.Random(9))
                self.assertEqual(seeded.sequence, injected.sequence)


class MazeContractTests(unittest.TestCase):
    def test_input_grid_is_untouched(self) -> None:
        grid = init_grid(9, 9)
        grid.toggle_wall(2, 3)
        before = grid.to_dict()
        run_maze(grid, "prim", seed=0)
        self.assertEqual(grid.to_dict(), before)

    def test_missing_anchor_declines(self) -> None:
        grid = init_grid(9, 9)
        grid.reset_anchors()
        result = run_maze(grid, "kruskal", seed=0)
        self.assertIsNone(result.grid)
        self.assertEqual(result.sequence, [])

    def test_unknown_strategy_raises(self) -> None:
        with self.assertRaises(KeyError):
            run_maze(init_grid(9, 9), "wilson")

    def test_kruskal_find_chases_parents(self) -> None:
        sets = {(1, 1): (1, 1), (1, 3): (1, 1), (1, 5): (1, 3), (3, 1): (3, 1)}
        self.assertEqual(KruskalMaze.find(sets, (1, 5)), (1, 1))
        self.assertEqual(KruskalMaze.find(sets, (3, 1)), (3, 1))
        # No path compression.
        self.assertEqual(sets[(1, 5)], (1, 3))

    def test_to_dict_is_json_ready(self) -> None:
        payload = run_maze(init_grid(5, 5), "backtracker", seed=0).to_dict()
        self.assertEqual(payload["strategy"], "backtracker")
        self.assertEqual(payload["grid"]["rows"], 5)
        self.assertTrue(all(isinstance(item, list) for item in payload["sequence"]))


if __name__ == "__main__":
    unittest.main()
