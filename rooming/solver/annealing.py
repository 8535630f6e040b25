"""
Simulated annealing over placement units, plain and hybrid.

Temperature follows a geometric schedule from temp_high down to temp_low.
Each step proposes a swap with another unit (probability 1/3) or a relocation
to a different random room; infeasible proposals are dropped and consume only
the step. Downhill moves are accepted with probability exp(delta / T).
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from rooming.models import AnnealingParams, HybridParams

from .feasibility import swap_is_feasible, unit_fits_room
from .hill_climb import Move, hill_climb
from .placement import random_placement
from .scoring import ScoreEngine
from .tracker import SolutionTracker

if TYPE_CHECKING:
    from .context import SearchContext

logger = logging.getLogger(__name__)


def temperature(step: int, steps: int, temp_high: float, temp_low: float) -> float:
    """T(step) = temp_high * (temp_low / temp_high) ** (step / (steps - 1))."""
    if steps <= 1:
        return temp_high
    return temp_high * (temp_low / temp_high) ** (step / (steps - 1))


def propose(ctx: SearchContext, engine: ScoreEngine, rng: random.Random) -> Move | None:
    """Draw a random move; None if it breaks capacity or a MUST_NOT constraint."""
    n_units = len(ctx.units)
    unit = rng.randrange(n_units)
    old_room = engine.room_of(unit)

    if rng.randrange(3) == 0 and n_units > 1:
        partner = rng.randrange(n_units - 1)
        if partner >= unit:
            partner += 1
        if engine.room_of(partner) == old_room:
            return None
        if not engine.swap_fits(unit, partner):
            return None
        if not swap_is_feasible(ctx, engine.assignment, unit, partner):
            return None
        return Move(unit, partner=partner)

    if ctx.num_rooms < 2:
        return None
    room = rng.randrange(ctx.num_rooms - 1)
    if room >= old_room:
        room += 1
    if not engine.fits(unit, room) or not unit_fits_room(ctx, engine.assignment, unit, room):
        return None
    return Move(unit, room=room)


def anneal(
    ctx: SearchContext,
    engine: ScoreEngine,
    params: AnnealingParams | HybridParams,
    rng: random.Random,
    on_accept: Callable[[ScoreEngine], None] | None = None,
) -> None:
    """Run one annealing trajectory in place on `engine.assignment`."""
    accepted = 0
    for step in range(params.steps):
        t = temperature(step, params.steps, params.temp_high, params.temp_low)
        move = propose(ctx, engine, rng)
        if move is None:
            continue

        if move.partner is None:
            assert move.room is not None
            delta = engine.move_delta(move.unit, move.room)
        else:
            delta = engine.swap_delta(move.unit, move.partner)

        # Rejected proposals were never applied, so nothing to revert
        if delta >= 0 or rng.random() < math.exp(delta / t):
            if move.partner is None:
                assert move.room is not None
                engine.apply_move(move.unit, move.room)
            else:
                engine.apply_swap(move.unit, move.partner)
            accepted += 1
            if on_accept is not None:
                on_accept(engine)

    ctx.search_logger.count("annealing_accepted", accepted)


def simulated_annealing(
    ctx: SearchContext,
    params: AnnealingParams,
    rng: random.Random,
    start: Sequence[int],
    tracker: SolutionTracker | None = None,
) -> SolutionTracker:
    """Independent restarts; every accepted improving or tied state is recorded."""
    tracker = tracker if tracker is not None else SolutionTracker()
    assignment = list(start)
    ctx.record(tracker, assignment, ctx.score(assignment), "initial")

    def record(engine: ScoreEngine) -> None:
        ctx.record(tracker, engine.assignment, engine.score, "annealing")

    for restart in range(params.restarts):
        if restart > 0:
            placed = random_placement(ctx, rng)
            if placed is None:
                ctx.search_logger.count("random_placement_failed")
                continue
            assignment = placed
        engine = ScoreEngine(ctx, assignment)
        anneal(ctx, engine, params, rng, on_accept=record)
        ctx.search_logger.log_progress(
            f"Annealing restart {restart} ended at {engine.score}, best={tracker.best_score}"
        )

    return tracker


def hybrid(
    ctx: SearchContext,
    params: HybridParams,
    rng: random.Random,
    start: Sequence[int],
    tracker: SolutionTracker | None = None,
) -> SolutionTracker:
    """Annealing restarts whose end states are polished by a full hill climb."""
    tracker = tracker if tracker is not None else SolutionTracker()
    assignment = list(start)
    ctx.record(tracker, assignment, ctx.score(assignment), "initial")
    ctx.record(tracker, assignment, hill_climb(ctx, assignment), "initial_climb")

    for restart in range(params.restarts):
        if restart == 0:
            assignment = list(tracker.solutions[0]) if tracker else list(start)
        else:
            placed = random_placement(ctx, rng)
            if placed is None:
                ctx.search_logger.count("random_placement_failed")
                continue
            assignment = placed

        engine = ScoreEngine(ctx, assignment)
        anneal(ctx, engine, params, rng)
        polished = hill_climb(ctx, assignment)
        if ctx.record(tracker, assignment, polished, "hybrid"):
            logger.debug(f"Hybrid restart {restart} improved best score to {polished}")

    return tracker
