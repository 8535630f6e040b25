"""
Rooming - assign participants to capacity-limited rooms.

This package contains:
- models: Problem, parameter and result models
- solver: Placement, scoring and local search strategies
- config: Environment-driven solver settings
- tuning: Command-line harness for comparing search parameters
"""

from rooming.models import (
    AnnealingParams,
    Constraint,
    ConstraintKind,
    HybridParams,
    LocalSearchParams,
    RoomGroup,
    RoomingProblem,
    Solution,
    SolveResult,
    SolveStatus,
)
from rooming.solver import HardConflictError, NoFeasibleAssignmentError, solve, solve_parallel

__all__ = [
    "AnnealingParams",
    "Constraint",
    "ConstraintKind",
    "HardConflictError",
    "HybridParams",
    "LocalSearchParams",
    "NoFeasibleAssignmentError",
    "RoomGroup",
    "RoomingProblem",
    "Solution",
    "SolveResult",
    "SolveStatus",
    "solve",
    "solve_parallel",
]
