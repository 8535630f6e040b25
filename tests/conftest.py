"""
Root test configuration and fixtures for the rooming project.

This conftest.py provides common fixtures for all test categories:
- unit/: Fast, isolated unit tests

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from rooming.config import get_settings  # noqa: E402
from rooming.models import Constraint, ConstraintKind, RoomingProblem  # noqa: E402


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are lru_cached; start and end every test with a fresh load."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rng():
    """Seeded random source for deterministic tests."""
    return random.Random(42)


@pytest.fixture
def four_person_problem():
    """2 rooms of 2, Prefer(0,1), PreferNot(2,3); optimum is {0,1} + {2,3} at score 0."""
    return RoomingProblem(
        n=4,
        room_capacities=[2, 2],
        prefer_not_multiplier=1,
        no_prefer_cost=5,
        constraints=[
            Constraint(a=0, b=1, kind=ConstraintKind.PREFER),
            Constraint(a=2, b=3, kind=ConstraintKind.PREFER_NOT),
        ],
    )


@pytest.fixture
def chain_conflict_problem():
    """A-B must, B-C must, A-C must_not: infeasible whatever the rooms."""
    return RoomingProblem(
        n=3,
        room_capacities=[3, 3],
        constraints=[
            Constraint(a=0, b=1, kind=ConstraintKind.MUST),
            Constraint(a=1, b=2, kind=ConstraintKind.MUST),
            Constraint(a=0, b=2, kind=ConstraintKind.MUST_NOT),
        ],
    )


def make_random_problem(
    seed: int,
    n: int = 14,
    room_capacities: list[int] | None = None,
    num_constraints: int = 24,
    prefer_not_multiplier: int = 3,
    no_prefer_cost: int = 2,
    hard: bool = True,
) -> RoomingProblem:
    """Random instance with soft constraints and a few non-conflicting hard ones."""
    gen = random.Random(seed)
    capacities = room_capacities or [4, 4, 3, 3, 2]
    constraints = []
    kinds = [ConstraintKind.PREFER, ConstraintKind.PREFER, ConstraintKind.PREFER_NOT]
    for _ in range(num_constraints):
        a, b = gen.sample(range(n), 2)
        constraints.append(Constraint(a=a, b=b, kind=gen.choice(kinds)))
    if hard:
        # Disjoint index ranges keep must and must_not from conflicting
        constraints.append(Constraint(a=0, b=1, kind=ConstraintKind.MUST))
        constraints.append(Constraint(a=2, b=3, kind=ConstraintKind.MUST_NOT))
        constraints.append(Constraint(a=4, b=5, kind=ConstraintKind.MUST_NOT))
    return RoomingProblem(
        n=n,
        room_capacities=capacities,
        prefer_not_multiplier=prefer_not_multiplier,
        no_prefer_cost=no_prefer_cost,
        constraints=constraints,
    )


@pytest.fixture
def random_problem_factory():
    """Factory for reproducible random instances."""
    return make_random_problem
