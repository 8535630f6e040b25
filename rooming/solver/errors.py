"""Solver error classes."""

from __future__ import annotations


class RoomingError(Exception):
    """Base exception for solver errors."""

    pass


class HardConflictError(RoomingError):
    """Raised when a must_not pair lies inside one must-connected unit.

    Resolve the conflicting constraints before solving.
    """

    def __init__(self, conflicts: list[tuple[int, int]]):
        self.conflicts = list(conflicts)
        pairs = ", ".join(f"{a}-{b}" for a, b in self.conflicts)
        super().__init__(f"hard conflicts exist, resolve before solving: {pairs}")


class PlacementError(RoomingError):
    """Raised when backtracking cannot pack every unit into the rooms.

    Internal: the engine falls back to a round-robin start instead of failing.
    """

    pass


class NoFeasibleAssignmentError(RoomingError):
    """Raised when search never reached an assignment satisfying all hard constraints."""

    pass
