"""
Rooming Solver - local search for partitioning participants into rooms.

This package contains:
- solve: Single search run driven by a caller-owned random source
- solve_parallel: Independent seeded trials merged into one result
- SolutionTracker: Best score plus structurally distinct tied assignments
- SearchLogger: Per-solve progress and feasibility warnings
- Strategies: iterated local search (full or incremental hill climbing),
  simulated annealing, and annealing polished by hill climbing
"""

from .engine import run_search, solve, solve_with_settings
from .errors import HardConflictError, NoFeasibleAssignmentError, RoomingError
from .logging import SearchLogger
from .parallel import derive_seeds, solve_parallel
from .tracker import SolutionTracker, partition_key

__all__ = [
    "HardConflictError",
    "NoFeasibleAssignmentError",
    "RoomingError",
    "SearchLogger",
    "SolutionTracker",
    "derive_seeds",
    "partition_key",
    "run_search",
    "solve",
    "solve_parallel",
    "solve_with_settings",
]
