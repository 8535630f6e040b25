"""
Independent search trials merged into one result.

Each trial owns its own random source derived from the caller's seed, so a
given (seed, trials) pair always produces the same merged result no matter
how many workers run it or in which order they finish.
"""

from __future__ import annotations

import logging
import random
import time
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from functools import partial
from typing import Any

from rooming.models import RoomingProblem, SolveResult

from .context import SearchContext
from .engine import ParamsType, build_result, coerce_params, empty_result, infeasible_result, run_search
from .grouping import find_hard_conflicts
from .tracker import SolutionTracker

logger = logging.getLogger(__name__)


def derive_seeds(seed: int, trials: int) -> list[int]:
    """Per-trial seeds drawn from a master random source."""
    master = random.Random(seed)
    return [master.getrandbits(63) for _ in range(trials)]


def _run_trial(problem: RoomingProblem, params: ParamsType, seed: int) -> tuple[SolutionTracker, dict[str, Any]]:
    # Module-level so process pools can pickle it
    ctx = SearchContext.build(problem)
    tracker = run_search(ctx, params, random.Random(seed))
    return tracker, ctx.search_logger.get_summary()


def solve_parallel(
    problem: RoomingProblem,
    params: ParamsType | dict[str, Any] | None = None,
    seed: int = 42,
    trials: int = 4,
    max_workers: int | None = None,
    use_processes: bool = False,
) -> SolveResult:
    """Run `trials` independent searches and merge their trackers.

    Args:
        problem: the rooming problem
        params: strategy parameters shared by every trial
        seed: master seed; per-trial seeds come from derive_seeds()
        trials: number of independent trials
        max_workers: pool size; 1 runs the trials sequentially in this thread
        use_processes: use a process pool instead of threads

    Returns:
        A SolveResult whose solutions are the union of every trial's best ties
    """
    if trials < 1:
        raise ValueError(f"trials must be >= 1, got {trials}")
    params = coerce_params(params)

    if problem.n == 0:
        return empty_result(params)

    probe = SearchContext.build(problem)
    conflicts = find_hard_conflicts(probe.units, probe.index)
    if conflicts:
        return infeasible_result(conflicts, params)

    seeds = derive_seeds(seed, trials)
    run = partial(_run_trial, problem, params)
    started = time.perf_counter()

    if max_workers == 1:
        outcomes = [run(s) for s in seeds]
    else:
        executor: Executor
        if use_processes:
            executor = ProcessPoolExecutor(max_workers=max_workers)
        else:
            executor = ThreadPoolExecutor(max_workers=max_workers)
        with executor:
            # map() yields in submission order, which keeps the merge deterministic
            outcomes = list(executor.map(run, seeds))

    elapsed = time.perf_counter() - started
    merged = SolutionTracker()
    warnings: list[str] = []
    for trial, (tracker, summary) in enumerate(outcomes):
        logger.debug(f"Trial {trial}: best={tracker.best_score} ({len(tracker)} tied)")
        merged.merge(tracker)
        warnings.extend(summary["feasibility_warnings"])

    logger.info(f"{trials} trials finished in {elapsed:.2f}s: best={merged.best_score} ({len(merged)} tied)")
    return build_result(
        merged,
        params,
        stats={
            "elapsed_seconds": round(elapsed, 4),
            "num_units": len(probe.units),
            "num_rooms": probe.num_rooms,
            "trials": trials,
            "seeds": seeds,
            "trial_best_scores": [tracker.best_score for tracker, _ in outcomes],
        },
        warnings=list(dict.fromkeys(warnings)),
    )
