"""
Search context shared by placement, scoring and every search strategy.

Built once per solve call; everything in it is immutable for that call except
the SearchLogger.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from rooming.models import RoomingProblem

from .constraint_index import ConstraintIndex
from .feasibility import is_feasible
from .grouping import PlacementUnits, build_placement_units
from .logging import SearchLogger
from .scoring import full_score
from .tracker import SolutionTracker

logger = logging.getLogger(__name__)


@dataclass
class SearchContext:
    """Problem data plus the derived indices search code needs."""

    problem: RoomingProblem
    index: ConstraintIndex
    units: PlacementUnits
    capacities: tuple[int, ...]
    search_logger: SearchLogger = field(default_factory=SearchLogger)

    @classmethod
    def build(cls, problem: RoomingProblem, search_logger: SearchLogger | None = None) -> SearchContext:
        index = ConstraintIndex.build(problem.n, problem.constraints)
        return cls(
            problem=problem,
            index=index,
            units=build_placement_units(problem.n, index),
            capacities=tuple(problem.room_capacities),
            search_logger=search_logger or SearchLogger(debug_mode=logger.isEnabledFor(logging.DEBUG)),
        )

    @property
    def n(self) -> int:
        return self.problem.n

    @property
    def num_rooms(self) -> int:
        return len(self.capacities)

    @property
    def prefer_not_multiplier(self) -> int:
        return self.problem.prefer_not_multiplier

    @property
    def no_prefer_cost(self) -> int:
        return self.problem.no_prefer_cost

    def score(self, assignment: Sequence[int]) -> int:
        return full_score(assignment, self.index, self.prefer_not_multiplier, self.no_prefer_cost)

    def is_feasible(self, assignment: Sequence[int]) -> bool:
        return is_feasible(assignment, self.capacities, self.index)

    def move_unit(self, assignment: list[int], unit: int, room: int) -> None:
        for m in self.units.members(unit):
            assignment[m] = room

    def record(self, tracker: SolutionTracker, assignment: Sequence[int], score: int, phase: str) -> bool:
        """Offer an assignment to the tracker if it can matter and is feasible.

        Infeasible assignments (e.g. an unimproved round-robin start) are
        dropped here and never reach the tracked best set.
        """
        if not tracker.accepts(score):
            return False
        if not self.is_feasible(assignment):
            self.search_logger.count("infeasible_discarded")
            return False
        improved = tracker.offer(assignment, score)
        if improved:
            self.search_logger.log_improvement(phase, score)
        return improved
