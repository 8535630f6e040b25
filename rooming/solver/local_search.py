"""
Iterated local search: randomized restarts followed by perturbation trials.

Every trial ends in a hill climb whose local optimum is offered to the
tracker. Perturbation trials start from a randomly chosen current best
solution, so the loop keeps intensifying around the best partitions found.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from rooming.models import LocalSearchParams

from .feasibility import room_counts, unit_fits_room
from .placement import random_placement
from .tracker import SolutionTracker

if TYPE_CHECKING:
    from .context import SearchContext

logger = logging.getLogger(__name__)

ClimbFn = Callable[["SearchContext", list[int]], int]


def perturb(ctx: SearchContext, source: Sequence[int], count: int, rng: random.Random) -> list[int]:
    """Copy `source` and relocate up to `count` distinct random units.

    Each unit goes to the first room (random order) that has capacity and no
    MUST_NOT partner; a unit with no such room stays where it is.
    """
    assignment = list(source)
    counts = room_counts(assignment, ctx.num_rooms)
    units = list(range(len(ctx.units)))
    rng.shuffle(units)
    rooms = list(range(ctx.num_rooms))

    for unit in units[: min(count, len(units))]:
        size = ctx.units.size(unit)
        old_room = assignment[ctx.units.members(unit)[0]]
        rng.shuffle(rooms)
        for room in rooms:
            if room == old_room or counts[room] + size > ctx.capacities[room]:
                continue
            if not unit_fits_room(ctx, assignment, unit, room):
                continue
            ctx.move_unit(assignment, unit, room)
            counts[old_room] -= size
            counts[room] += size
            break
    return assignment


def iterated_local_search(
    ctx: SearchContext,
    params: LocalSearchParams,
    rng: random.Random,
    start: Sequence[int],
    climb: ClimbFn,
    tracker: SolutionTracker | None = None,
) -> SolutionTracker:
    """Climb from `start`, then from random placements, then from perturbed bests."""
    tracker = tracker if tracker is not None else SolutionTracker()
    search_logger = ctx.search_logger

    assignment = list(start)
    ctx.record(tracker, assignment, ctx.score(assignment), "initial")
    ctx.record(tracker, assignment, climb(ctx, assignment), "initial_climb")

    for _ in range(params.num_random):
        placed = random_placement(ctx, rng)
        if placed is None:
            search_logger.count("random_placement_failed")
            continue
        search_logger.count("random_restart")
        ctx.record(tracker, placed, climb(ctx, placed), "random_restart")

    search_logger.log_progress(
        f"{params.num_random} random restarts done, best={tracker.best_score} ({len(tracker)} tied)"
    )

    for trial in range(params.num_perturb):
        if not tracker:
            search_logger.log_feasibility_warning(
                "No feasible assignment to perturb; skipping perturbation trials"
            )
            break
        source = tracker.solutions[rng.randrange(len(tracker.solutions))]
        count = params.perturb_min + rng.randrange(params.perturb_max - params.perturb_min)
        candidate = perturb(ctx, source, count, rng)
        search_logger.count("perturbation")
        if ctx.record(tracker, candidate, climb(ctx, candidate), "perturbation"):
            logger.debug(f"Perturbation trial {trial} improved best score to {tracker.best_score}")

    return tracker
