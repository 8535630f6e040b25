#!/usr/bin/env python3
"""Rooming Tune - compare search parameters on a saved instance.

Loads a trip, its students and their resolved constraints from a directory of
JSON files, runs repeated seeded solves for every parameter combination and
prints how stable the best score and best solutions are across runs.

Expected files in --dir:
    1            {"prefer_not_multiple": 3, "no_prefer_cost": 2, "room_groups": [{"size": 4, "count": 5}]}
    students     [{"id": 17, "name": "..."}, ...]
    constraints  {"overalls": [{"student_a_id": 17, "student_b_id": 21, "kind": "prefer"}, ...]}

Usage:
    rooming-tune --dir tmp --runs 20 --random 50,100 --perturb 750,1500
    uv run python -m rooming.tuning --dir tmp --strategy annealing
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rooming.config import STRATEGIES
from rooming.logging_config import configure_logging, get_logger
from rooming.models import (
    AnnealingParams,
    Constraint,
    ConstraintKind,
    HybridParams,
    LocalSearchParams,
    RoomingProblem,
)
from rooming.solver import solve
from rooming.solver.tracker import partition_key

logger = get_logger(__name__)

SEED_STRIDE = 31337


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Compare rooming search parameters on a saved instance")

    parser.add_argument("--dir", type=str, default="tmp", help="Directory with trip/students/constraints JSON files")

    parser.add_argument("--runs", type=int, default=20, help="Number of solver runs per parameter set")

    parser.add_argument("--random", type=str, default="100", help="Comma-separated random placement counts")

    parser.add_argument("--perturb", type=str, default="1500", help="Comma-separated perturbation counts")

    parser.add_argument("--pmin", type=int, default=3, help="Minimum units moved per perturbation")

    parser.add_argument("--pmax", type=int, default=8, help="Exclusive upper bound on units moved")

    parser.add_argument("--strategy", choices=STRATEGIES, default="fast_hill_climb", help="Search strategy")

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser.parse_args(args)


def parse_int_list(value: str) -> list[int]:
    """Parse "100, 200,x" into [100, 200]; entries that are not integers are skipped."""
    result = []
    for part in value.split(","):
        try:
            result.append(int(part.strip()))
        except ValueError:
            continue
    return result


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_instance(directory: str | Path) -> RoomingProblem:
    """Load a saved trip into a RoomingProblem.

    Students are indexed in file order. Constraints that reference an unknown
    student or carry an unknown kind are skipped.

    Raises:
        FileNotFoundError: if one of the three files is missing
        ValueError: if the trip defines no rooms
    """
    directory = Path(directory)
    trip = _read_json(directory / "1")
    students = _read_json(directory / "students") or []
    overalls = (_read_json(directory / "constraints") or {}).get("overalls") or []

    index = {student["id"]: i for i, student in enumerate(students)}

    constraints = []
    for overall in overalls:
        a = index.get(overall.get("student_a_id"))
        b = index.get(overall.get("student_b_id"))
        if a is None or b is None:
            continue
        try:
            kind = ConstraintKind(overall.get("kind"))
        except ValueError:
            logger.warning(f"Skipping constraint with unknown kind: {overall.get('kind')!r}")
            continue
        constraints.append(Constraint(a=a, b=b, kind=kind))

    room_groups = trip.get("room_groups") or []
    if not any(group.get("count", 0) > 0 for group in room_groups):
        raise ValueError("no room_groups in trip data")

    return RoomingProblem.from_room_groups(
        n=len(students),
        room_groups=room_groups,
        prefer_not_multiplier=trip.get("prefer_not_multiple", 1),
        no_prefer_cost=trip.get("no_prefer_cost", 0),
        constraints=constraints,
    )


@dataclass
class RunStats:
    """Aggregated outcome of repeated runs of one parameter set."""

    runs: int
    avg_seconds: float = 0.0
    score_counts: dict[int, int] = field(default_factory=dict)
    solution_counts: dict[str, int] = field(default_factory=dict)
    avg_solutions: float = 0.0

    @property
    def unique_solutions(self) -> int:
        return len(self.solution_counts)

    @property
    def stable_solutions(self) -> int:
        """Solutions found in every single run."""
        return sum(1 for count in self.solution_counts.values() if count == self.runs)

    def top_frequencies(self, limit: int = 5) -> list[int]:
        return sorted(self.solution_counts.values(), reverse=True)[:limit]


def summarize_runs(results: list[tuple[int, list[list[int]], float]], runs: int) -> RunStats:
    """Aggregate (score, solutions, seconds) tuples; averages divide by `runs`.

    Runs that found nothing are absent from `results` but still count in the
    averages, so they show up as a lower share in the score distribution.
    """
    stats = RunStats(runs=runs)
    if runs <= 0:
        return stats

    scores: Counter[int] = Counter()
    solutions: Counter[str] = Counter()
    total_seconds = 0.0
    total_solutions = 0
    for score, assignments, seconds in results:
        total_seconds += seconds
        scores[score] += 1
        total_solutions += len(assignments)
        for assignment in assignments:
            solutions[partition_key(assignment)] += 1

    stats.avg_seconds = total_seconds / runs
    stats.score_counts = dict(scores)
    stats.solution_counts = dict(solutions)
    stats.avg_solutions = total_solutions / runs
    return stats


def format_stats(label: str, stats: RunStats) -> str:
    lines = [f"--- {label} ---", f"  avg time: {stats.avg_seconds * 1000:.1f}ms", "  score distribution:"]
    for score in sorted(stats.score_counts, reverse=True):
        count = stats.score_counts[score]
        lines.append(f"    score {score}: {count}/{stats.runs} runs ({count / stats.runs * 100:.0f}%)")
    lines.append(f"  unique solutions seen: {stats.unique_solutions}")
    lines.append(f"  avg solutions per run: {stats.avg_solutions:.1f}")
    lines.append(f"  solutions found in all runs: {stats.stable_solutions}")
    top = stats.top_frequencies()
    if top:
        lines.append(f"  top {len(top)} solution frequencies: " + ", ".join(f"{c}/{stats.runs}" for c in top))
    return "\n".join(lines) + "\n"


def build_param_sets(args: argparse.Namespace) -> list[tuple[str, Any]]:
    """Labelled parameter sets to compare."""
    if args.strategy == "annealing":
        return [("annealing (defaults)", AnnealingParams())]
    if args.strategy == "hybrid":
        return [("hybrid (defaults)", HybridParams())]

    param_sets = []
    for num_random in parse_int_list(args.random):
        for num_perturb in parse_int_list(args.perturb):
            params = LocalSearchParams(
                strategy=args.strategy,
                num_random=num_random,
                num_perturb=num_perturb,
                perturb_min=args.pmin,
                perturb_max=args.pmax,
            )
            label = f"random={num_random} perturb={num_perturb} pmin={args.pmin} pmax={args.pmax}"
            param_sets.append((label, params))
    return param_sets


def run_param_set(problem: RoomingProblem, params: Any, runs: int) -> RunStats:
    """Solve `runs` times with seeds 0, 31337, 62674, ... and aggregate."""
    results = []
    for run in range(runs):
        rng = random.Random(run * SEED_STRIDE)
        started = time.perf_counter()
        result = solve(problem, params, rng)
        elapsed = time.perf_counter() - started
        if result.solutions and result.score is not None:
            results.append((result.score, [s.assignment for s in result.solutions], elapsed))
    return summarize_runs(results, runs)


def main() -> None:
    """Main entry point."""
    args = parse_args()

    log_level = logging.DEBUG if args.debug else logging.WARNING
    configure_logging("tune", log_level)

    try:
        problem = load_instance(args.dir)
        param_sets = build_param_sets(args)
    except (OSError, ValueError) as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    print(f"Students: {problem.n}, Room sizes: {problem.room_capacities}, Constraints: {len(problem.constraints)}")
    print(f"Prefer Not multiple: {problem.prefer_not_multiplier}, No Prefer cost: {problem.no_prefer_cost}")
    print(f"Runs per config: {args.runs}\n")

    for label, params in param_sets:
        stats = run_param_set(problem, params, args.runs)
        print(format_stats(label, stats))


if __name__ == "__main__":
    main()
