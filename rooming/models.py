"""
Models for the rooming solver.

A problem is expressed purely in participant indices (0..n-1). Callers map
their own identities (students, campers, ...) onto these indices and back.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ConstraintKind(str, Enum):
    """Effective kind of a pairwise constraint."""

    MUST = "must"
    PREFER = "prefer"
    PREFER_NOT = "prefer_not"
    MUST_NOT = "must_not"

    @property
    def is_hard(self) -> bool:
        return self in (ConstraintKind.MUST, ConstraintKind.MUST_NOT)


class Constraint(BaseModel):
    """Ordered pair constraint between participant `a` and participant `b`.

    Direction only matters for PREFER: the bonus and the no-preference
    penalty are attributed to `a`.
    """

    model_config = ConfigDict(frozen=True)

    a: int = Field(ge=0)
    b: int = Field(ge=0)
    kind: ConstraintKind


class RoomGroup(BaseModel):
    """`count` rooms sharing the same `size`."""

    size: int = Field(ge=1)
    count: int = Field(ge=0)


class RoomingProblem(BaseModel):
    """All data needed for a solve call."""

    n: int = Field(ge=0)
    room_capacities: list[int] = Field(default_factory=list)
    prefer_not_multiplier: int = 1
    no_prefer_cost: int = 0
    constraints: list[Constraint] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_indices(self) -> RoomingProblem:
        if self.n > 0 and not self.room_capacities:
            raise ValueError("at least one room is required when n > 0")
        for capacity in self.room_capacities:
            if capacity < 1:
                raise ValueError(f"room capacity must be positive, got {capacity}")
        for c in self.constraints:
            if c.a >= self.n or c.b >= self.n:
                raise ValueError(f"constraint ({c.a}, {c.b}, {c.kind.value}) references a participant >= n={self.n}")
        return self

    @classmethod
    def uniform(
        cls,
        n: int,
        room_size: int,
        prefer_not_multiplier: int = 1,
        no_prefer_cost: int = 0,
        constraints: list[Constraint] | None = None,
    ) -> RoomingProblem:
        """Build a problem with ceil(n / room_size) rooms of identical capacity."""
        if room_size < 1:
            raise ValueError(f"room_size must be positive, got {room_size}")
        num_rooms = math.ceil(n / room_size)
        return cls(
            n=n,
            room_capacities=[room_size] * num_rooms,
            prefer_not_multiplier=prefer_not_multiplier,
            no_prefer_cost=no_prefer_cost,
            constraints=constraints or [],
        )

    @classmethod
    def from_room_groups(
        cls,
        n: int,
        room_groups: list[RoomGroup] | list[dict[str, int]],
        prefer_not_multiplier: int = 1,
        no_prefer_cost: int = 0,
        constraints: list[Constraint] | None = None,
    ) -> RoomingProblem:
        """Build a problem from `[{size, count}, ...]` room groups."""
        capacities: list[int] = []
        for group in room_groups:
            rg = group if isinstance(group, RoomGroup) else RoomGroup.model_validate(group)
            capacities.extend([rg.size] * rg.count)
        return cls(
            n=n,
            room_capacities=capacities,
            prefer_not_multiplier=prefer_not_multiplier,
            no_prefer_cost=no_prefer_cost,
            constraints=constraints or [],
        )

    @property
    def num_rooms(self) -> int:
        return len(self.room_capacities)

    @property
    def total_capacity(self) -> int:
        return sum(self.room_capacities)


# =============================================================================
# Search parameters
# =============================================================================


class LocalSearchParams(BaseModel):
    """Randomized restarts followed by perturbation (iterated local search)."""

    strategy: Literal["hill_climb", "fast_hill_climb"] = "fast_hill_climb"
    num_random: int = Field(default=50, ge=0)
    num_perturb: int = Field(default=750, ge=0)
    perturb_min: int = Field(default=3, ge=0)
    perturb_max: int = Field(default=8, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> LocalSearchParams:
        if self.perturb_max <= self.perturb_min:
            raise ValueError(f"perturb_max ({self.perturb_max}) must exceed perturb_min ({self.perturb_min})")
        return self


class _AnnealingBase(BaseModel):
    restarts: int = Field(ge=0)
    steps: int = Field(ge=1)
    temp_high: float = Field(gt=0)
    temp_low: float = Field(gt=0)

    @model_validator(mode="after")
    def _check_temperatures(self) -> Any:
        if self.temp_high <= self.temp_low:
            raise ValueError(f"temp_high ({self.temp_high}) must exceed temp_low ({self.temp_low})")
        return self


class AnnealingParams(_AnnealingBase):
    """Independent simulated annealing restarts."""

    strategy: Literal["annealing"] = "annealing"
    restarts: int = Field(default=20, ge=0)
    steps: int = Field(default=10000, ge=1)
    temp_high: float = Field(default=5.0, gt=0)
    temp_low: float = Field(default=0.01, gt=0)


class HybridParams(_AnnealingBase):
    """Annealing restarts whose end states are polished by hill climbing."""

    strategy: Literal["hybrid"] = "hybrid"
    restarts: int = Field(default=50, ge=0)
    steps: int = Field(default=5000, ge=1)
    temp_high: float = Field(default=10.0, gt=0)
    temp_low: float = Field(default=0.1, gt=0)


SolverParams = Annotated[
    LocalSearchParams | AnnealingParams | HybridParams,
    Field(discriminator="strategy"),
]


# =============================================================================
# Results
# =============================================================================


class SolveStatus(str, Enum):
    SOLVED = "solved"
    INFEASIBLE = "infeasible"  # must_not pair inside a must-connected unit
    EMPTY = "empty"  # n == 0
    UNPLACED = "unplaced"  # search never reached a feasible assignment


class Solution(BaseModel):
    """A best-scoring assignment: participant index -> room index."""

    assignment: list[int]
    score: int

    @property
    def partition_key(self) -> str:
        from rooming.solver.tracker import partition_key

        return partition_key(self.assignment)

    def rooms(self) -> list[list[int]]:
        """Occupied rooms as sorted member lists, ordered by first member."""
        by_room: dict[int, list[int]] = {}
        for participant, room in enumerate(self.assignment):
            by_room.setdefault(room, []).append(participant)
        return sorted((sorted(members) for members in by_room.values()), key=lambda m: m[0])


class SolveResult(BaseModel):
    """Outcome of a solve call."""

    status: SolveStatus
    solutions: list[Solution] = Field(default_factory=list)
    score: int | None = None
    conflicts: list[tuple[int, int]] = Field(default_factory=list)
    stats: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_infeasible(self) -> bool:
        return self.status == SolveStatus.INFEASIBLE

    @property
    def best(self) -> Solution | None:
        return self.solutions[0] if self.solutions else None

    def raise_for_status(self) -> None:
        """Raise if the result carries no usable solution for a non-empty problem."""
        from rooming.solver.errors import HardConflictError, NoFeasibleAssignmentError

        if self.status == SolveStatus.INFEASIBLE:
            raise HardConflictError(self.conflicts)
        if self.status == SolveStatus.UNPLACED:
            raise NoFeasibleAssignmentError("search never reached an assignment satisfying all hard constraints")
