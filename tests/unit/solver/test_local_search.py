"""Tests for perturbation and iterated local search."""

from __future__ import annotations

import random

from rooming.models import LocalSearchParams, RoomingProblem
from rooming.solver.context import SearchContext
from rooming.solver.hill_climb import fast_hill_climb, hill_climb
from rooming.solver.local_search import iterated_local_search, perturb
from rooming.solver.placement import backtracking_placement


class TestPerturb:
    def test_source_is_not_modified(self, random_problem_factory):
        ctx = SearchContext.build(random_problem_factory(seed=2))
        source = backtracking_placement(ctx)
        snapshot = list(source)
        perturb(ctx, source, 5, random.Random(3))
        assert source == snapshot

    def test_result_stays_feasible(self, random_problem_factory):
        ctx = SearchContext.build(random_problem_factory(seed=2))
        source = backtracking_placement(ctx)
        gen = random.Random(4)
        for _ in range(50):
            assert ctx.is_feasible(perturb(ctx, source, gen.randrange(1, 9), gen))

    def test_moves_at_most_count_units(self, random_problem_factory):
        ctx = SearchContext.build(random_problem_factory(seed=2))
        source = backtracking_placement(ctx)
        result = perturb(ctx, source, 2, random.Random(5))
        moved = {ctx.units.unit_of[p] for p in range(ctx.n) if result[p] != source[p]}
        assert len(moved) <= 2

    def test_count_zero_is_identity(self, four_person_problem):
        ctx = SearchContext.build(four_person_problem)
        assert perturb(ctx, [0, 0, 1, 1], 0, random.Random(1)) == [0, 0, 1, 1]


class TestIteratedLocalSearch:
    def test_four_person_optimum(self, four_person_problem):
        ctx = SearchContext.build(four_person_problem)
        params = LocalSearchParams(num_random=5, num_perturb=20)
        tracker = iterated_local_search(ctx, params, random.Random(42), [0, 1, 0, 1], fast_hill_climb)
        assert tracker.best_score == 0
        assert tracker.keys == frozenset({"0,1;2,3;"})

    def test_no_restarts_returns_climbed_start(self, four_person_problem):
        ctx = SearchContext.build(four_person_problem)
        params = LocalSearchParams(num_random=0, num_perturb=0)
        tracker = iterated_local_search(ctx, params, random.Random(1), [0, 1, 0, 1], hill_climb)
        assert tracker.best_score == 0
        assert len(tracker) == 1

    def test_full_and_fast_climbs_agree_for_same_seed(self, random_problem_factory):
        ctx = SearchContext.build(random_problem_factory(seed=6))
        start = backtracking_placement(ctx)
        params = LocalSearchParams(num_random=5, num_perturb=30)
        slow = iterated_local_search(ctx, params, random.Random(7), start, hill_climb)
        fast = iterated_local_search(ctx, params, random.Random(7), start, fast_hill_climb)
        assert slow.best_score == fast.best_score
        assert slow.solutions == fast.solutions

    def test_infeasible_start_is_never_recorded(self):
        # Round-robin style start with both members of a must_not pair in room 0
        problem = RoomingProblem.model_validate(
            {
                "n": 4,
                "room_capacities": [2, 2],
                "constraints": [{"a": 0, "b": 2, "kind": "must_not"}],
            }
        )
        ctx = SearchContext.build(problem)
        params = LocalSearchParams(num_random=3, num_perturb=5)
        tracker = iterated_local_search(ctx, params, random.Random(1), [0, 1, 0, 1], fast_hill_climb)
        assert tracker
        for assignment in tracker.solutions:
            assert assignment[0] != assignment[2]
        assert ctx.search_logger.phase_counts["infeasible_discarded"] >= 1

    def test_perturbation_skipped_without_feasible_solution(self):
        # 0, 1 and 2 are mutually exclusive but there are only two rooms
        problem = RoomingProblem.model_validate(
            {
                "n": 3,
                "room_capacities": [2, 2],
                "constraints": [
                    {"a": 0, "b": 1, "kind": "must_not"},
                    {"a": 1, "b": 2, "kind": "must_not"},
                    {"a": 0, "b": 2, "kind": "must_not"},
                ],
            }
        )
        ctx = SearchContext.build(problem)
        params = LocalSearchParams(num_random=2, num_perturb=5)
        tracker = iterated_local_search(ctx, params, random.Random(1), [0, 1, 0], fast_hill_climb)
        assert not tracker
        assert ctx.search_logger.phase_counts["random_placement_failed"] == 2
        assert "perturbation" not in ctx.search_logger.phase_counts
        assert any("skipping perturbation" in w for w in ctx.search_logger.feasibility_warnings)
