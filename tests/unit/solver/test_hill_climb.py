"""Tests for steepest-ascent hill climbing (full and incremental)."""

from __future__ import annotations

import random

import pytest

from rooming.models import Constraint, ConstraintKind, RoomingProblem
from rooming.solver.context import SearchContext
from rooming.solver.feasibility import room_counts
from rooming.solver.hill_climb import Move, candidate_moves, fast_hill_climb, hill_climb
from rooming.solver.placement import backtracking_placement, join_units, round_robin_placement


class TestCandidateMoves:
    def test_relocations_then_swaps_per_unit(self):
        problem = RoomingProblem(n=3, room_capacities=[2, 2])
        ctx = SearchContext.build(problem)
        assignment = [0, 0, 1]
        moves = list(candidate_moves(ctx, assignment, room_counts(assignment, 2)))
        assert moves == [
            Move(0, room=1),
            Move(0, partner=2),
            Move(1, room=1),
            Move(1, partner=2),
        ]

    def test_full_rooms_are_skipped(self):
        problem = RoomingProblem(n=4, room_capacities=[2, 2])
        ctx = SearchContext.build(problem)
        assignment = [0, 0, 1, 1]
        moves = list(candidate_moves(ctx, assignment, room_counts(assignment, 2)))
        assert all(move.is_swap for move in moves)
        assert len(moves) == 4


class TestHillClimb:
    @pytest.mark.parametrize("climb", [hill_climb, fast_hill_climb])
    def test_reaches_four_person_optimum(self, four_person_problem, climb):
        ctx = SearchContext.build(four_person_problem)
        assignment = [0, 1, 0, 1]
        score = climb(ctx, assignment)
        assert score == 0
        assert ctx.score(assignment) == 0
        assert assignment[0] == assignment[1]

    @pytest.mark.parametrize("climb", [hill_climb, fast_hill_climb])
    def test_never_breaks_hard_constraints(self, climb):
        # Moving 1 next to 0 would score, but they must not share
        problem = RoomingProblem(
            n=4,
            room_capacities=[2, 2],
            constraints=[
                Constraint(a=0, b=1, kind=ConstraintKind.PREFER),
                Constraint(a=0, b=1, kind=ConstraintKind.MUST_NOT),
            ],
        )
        ctx = SearchContext.build(problem)
        assignment = [0, 1, 0, 1]
        assert climb(ctx, assignment) == 0
        assert assignment[0] != assignment[1]
        assert ctx.is_feasible(assignment)

    @pytest.mark.parametrize("seed", [11, 12, 13, 14])
    def test_full_and_fast_follow_the_same_trajectory(self, random_problem_factory, seed):
        ctx = SearchContext.build(random_problem_factory(seed=seed))
        start = backtracking_placement(ctx)
        slow, fast = list(start), list(start)

        slow_score = hill_climb(ctx, slow)
        fast_score = fast_hill_climb(ctx, fast)

        assert slow_score == fast_score == ctx.score(fast)
        assert slow == fast
        assert ctx.is_feasible(fast)

    def test_result_is_a_local_optimum(self, random_problem_factory):
        ctx = SearchContext.build(random_problem_factory(seed=21))
        assignment = backtracking_placement(ctx)
        score = fast_hill_climb(ctx, assignment)
        # A second climb from a local optimum finds nothing
        again = list(assignment)
        assert fast_hill_climb(ctx, again) == score
        assert again == assignment


class TestClimbFromInfeasibleStart:
    """Both flavours accept only moves that leave the whole assignment feasible."""

    @pytest.mark.parametrize("climb", [hill_climb, fast_hill_climb])
    def test_ignores_improving_move_that_keeps_must_not_broken(self, climb):
        # Start shares 0 and 1; moving 2 next to 3 scores best but leaves them together
        problem = RoomingProblem(
            n=4,
            room_capacities=[3, 3],
            prefer_not_multiplier=1,
            no_prefer_cost=2,
            constraints=[
                Constraint(a=0, b=1, kind=ConstraintKind.MUST_NOT),
                Constraint(a=2, b=3, kind=ConstraintKind.PREFER),
                Constraint(a=3, b=1, kind=ConstraintKind.PREFER_NOT),
                Constraint(a=3, b=0, kind=ConstraintKind.PREFER_NOT),
            ],
        )
        ctx = SearchContext.build(problem)
        assignment = [0, 0, 0, 1]
        assert climb(ctx, assignment) == 0
        assert assignment == [1, 0, 0, 0]
        assert ctx.is_feasible(assignment)

    @pytest.mark.parametrize("seed", [31, 32, 33, 34, 35, 36])
    def test_full_and_fast_agree_from_random_joined_start(self, random_problem_factory, seed):
        ctx = SearchContext.build(random_problem_factory(seed=seed))
        gen = random.Random(seed)
        start = join_units(ctx, [gen.randrange(ctx.num_rooms) for _ in range(ctx.n)])
        slow, fast = list(start), list(start)

        slow_score = hill_climb(ctx, slow)
        fast_score = fast_hill_climb(ctx, fast)

        assert slow == fast
        assert slow_score == fast_score == ctx.score(fast)

    def test_full_and_fast_agree_from_round_robin_start(self, random_problem_factory):
        ctx = SearchContext.build(random_problem_factory(seed=8, room_capacities=[3, 3, 3, 3, 2]))
        start = join_units(ctx, round_robin_placement(ctx.n, ctx.num_rooms))
        slow, fast = list(start), list(start)

        assert hill_climb(ctx, slow) == fast_hill_climb(ctx, fast) == ctx.score(fast)
        assert slow == fast
