"""Grid search strategies and their shared result type."""

__all__ = [
    "AStarSearch",
    "AbstractSearchStrategy",
    "BreadthFirstSearch",
    "DepthFirstSearch",
    "DijkstraSearch",
    "SEARCH_STRATEGIES",
    "SearchResult",
    "reconstruct_path",
    "run_search",
]

from .engine import (
    AStarSearch,
    AbstractSearchStrategy,
    BreadthFirstSearch,
    DepthFirstSearch,
    DijkstraSearch,
    SEARCH_STRATEGIES,
    SearchResult,
    reconstruct_path,
    run_search,
)
