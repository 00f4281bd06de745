#!/usr/bin/env python3
"""Run every search strategy over mazes from every generator and rank them by work done."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from statistics import mean
from typing import Dict, List, Optional, Tuple

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gridpath import MAZE_STRATEGIES, SEARCH_STRATEGIES, init_grid, run_maze, run_search
from gridpath.base import write_results


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--rows", type=int, default=21)
    parser.add_argument("--cols", type=int, default=51)
    parser.add_argument("--seeds", type=int, default=10, help="Number of seeds (0..N-1) per maze strategy")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional JSON file for the per-run records",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)

    records: List[dict] = []
    for maze_name in sorted(MAZE_STRATEGIES):
        for seed in range(args.seeds):
            maze = run_maze(init_grid(args.rows, args.cols), maze_name, seed=seed)
            for search_name in sorted(SEARCH_STRATEGIES):
                result = run_search(maze.grid, search_name)
                records.append(
                    {
                        "maze": maze_name,
                        "seed": seed,
                        "search": search_name,
                        "found": result.found,
                        "path_length": len(result.path),
                        "visited_count": len(result.visited),
                    }
                )

    summary: Dict[Tuple[str, str], List[dict]] = {}
    for record in records:
        summary.setdefault((record["maze"], record["search"]), []).append(record)

    rows = []
    for (maze_name, search_name), runs in summary.items():
        rows.append(
            (
                maze_name,
                search_name,
                mean(run["visited_count"] for run in runs),
                mean(run["path_length"] for run in runs),
            )
        )
    rows.sort(key=lambda item: (item[0], item[2], item[1]))

    print(f"{'maze':12s} {'search':10s} {'visited':>9s} {'path':>7s}")
    for maze_name, search_name, visited, path_length in rows:
        print(f"{maze_name:12s} {search_name:10s} {visited:9.1f} {path_length:7.1f}")

    if args.output is not None:
        write_results(records, args.output, append=False)
        print(f"Wrote {len(records)} runs to {args.output}")


if __name__ == "__main__":
    main()
