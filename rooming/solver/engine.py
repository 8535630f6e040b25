"""
Solve entry point.

solve() is a pure function of (problem, params, random source): it reduces
must-together constraints to units, rejects hard conflicts up front, builds a
starting placement and hands over to the configured search strategy.
"""

from __future__ import annotations

import logging
import random
import time
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from rooming.models import (
    AnnealingParams,
    HybridParams,
    LocalSearchParams,
    RoomingProblem,
    Solution,
    SolverParams,
    SolveResult,
    SolveStatus,
)

from .annealing import hybrid, simulated_annealing
from .context import SearchContext
from .feasibility import find_violations
from .grouping import find_hard_conflicts
from .hill_climb import fast_hill_climb, hill_climb
from .local_search import iterated_local_search
from .placement import initial_assignment
from .tracker import SolutionTracker

if TYPE_CHECKING:
    from rooming.config import SolverSettings

logger = logging.getLogger(__name__)

ParamsType = LocalSearchParams | AnnealingParams | HybridParams

_params_adapter: TypeAdapter[ParamsType] = TypeAdapter(SolverParams)


def coerce_params(params: ParamsType | dict[str, Any] | None) -> ParamsType:
    """Accept a params model, a plain dict (discriminated by 'strategy') or None."""
    if params is None:
        return LocalSearchParams()
    if isinstance(params, dict):
        return _params_adapter.validate_python(params)
    return params


def run_search(ctx: SearchContext, params: ParamsType, rng: random.Random) -> SolutionTracker:
    """Run the configured strategy from the deterministic initial placement."""
    start, used_fallback = initial_assignment(ctx)
    if used_fallback:
        violations = find_violations(start, ctx.capacities, ctx.index)
        if violations:
            ctx.search_logger.log_feasibility_warning(
                f"Round-robin start will not be recorded: {'; '.join(violations)}"
            )

    if isinstance(params, LocalSearchParams):
        climb = hill_climb if params.strategy == "hill_climb" else fast_hill_climb
        return iterated_local_search(ctx, params, rng, start, climb)
    if isinstance(params, AnnealingParams):
        return simulated_annealing(ctx, params, rng, start)
    if isinstance(params, HybridParams):
        return hybrid(ctx, params, rng, start)
    raise TypeError(f"Unsupported params type: {type(params).__name__}")


def empty_result(params: ParamsType) -> SolveResult:
    return SolveResult(status=SolveStatus.EMPTY, stats={"strategy": params.strategy})


def infeasible_result(conflicts: list[tuple[int, int]], params: ParamsType) -> SolveResult:
    logger.warning(f"Hard conflicts detected, not solving: {conflicts}")
    return SolveResult(
        status=SolveStatus.INFEASIBLE,
        conflicts=conflicts,
        stats={"strategy": params.strategy},
        warnings=[f"must_not pair {a}-{b} is joined by must constraints" for a, b in conflicts],
    )


def build_result(
    tracker: SolutionTracker,
    params: ParamsType,
    stats: dict[str, Any],
    warnings: list[str],
) -> SolveResult:
    """Turn a tracker into a SolveResult."""
    if not tracker or tracker.best_score is None:
        return SolveResult(
            status=SolveStatus.UNPLACED, stats={**stats, "strategy": params.strategy}, warnings=warnings
        )

    score = tracker.best_score
    return SolveResult(
        status=SolveStatus.SOLVED,
        solutions=[Solution(assignment=list(a), score=score) for a in tracker.solutions],
        score=score,
        stats={**stats, "strategy": params.strategy, "num_solutions": len(tracker)},
        warnings=warnings,
    )


def solve(
    problem: RoomingProblem,
    params: ParamsType | dict[str, Any] | None = None,
    rng: random.Random | None = None,
) -> SolveResult:
    """Solve a rooming problem.

    Args:
        problem: participants, room capacities, weights and constraints
        params: strategy parameters (LocalSearchParams, AnnealingParams, HybridParams)
        rng: caller-owned random source; identical seeds reproduce identical results

    Returns:
        SolveResult with every best-scoring, structurally distinct assignment,
        or status "infeasible" when must / must_not constraints contradict
    """
    params = coerce_params(params)
    if rng is None:
        rng = random.Random()

    if problem.n == 0:
        return empty_result(params)

    ctx = SearchContext.build(problem)
    conflicts = find_hard_conflicts(ctx.units, ctx.index)
    if conflicts:
        return infeasible_result(conflicts, params)

    logger.info(
        f"Solving {problem.n} participants into {ctx.num_rooms} rooms "
        f"({len(ctx.units)} units, {len(problem.constraints)} constraints) with {params.strategy}"
    )
    started = time.perf_counter()
    tracker = run_search(ctx, params, rng)
    elapsed = time.perf_counter() - started

    result = build_result(
        tracker,
        params,
        stats={
            "elapsed_seconds": round(elapsed, 4),
            "num_units": len(ctx.units),
            "num_rooms": ctx.num_rooms,
            "log": ctx.search_logger.get_summary(),
        },
        warnings=list(ctx.search_logger.feasibility_warnings),
    )
    logger.info(f"Search finished in {elapsed:.2f}s: status={result.status.value} score={result.score}")
    return result


def solve_with_settings(problem: RoomingProblem, settings: SolverSettings | None = None) -> SolveResult:
    """Solve using environment-driven settings (strategy, seed, trials)."""
    from rooming.config import get_settings

    from .parallel import solve_parallel

    settings = settings or get_settings()
    params = settings.build_params()
    if settings.trials > 1:
        return solve_parallel(problem, params, settings.seed, trials=settings.trials, max_workers=settings.max_workers)
    return solve(problem, params, random.Random(settings.seed))
