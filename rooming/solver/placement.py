"""
Initial placement of units into rooms.

Greedy backtracking bin-packing for the deterministic start, a naive
round-robin fallback, and a randomized greedy placement used by restarts.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from .errors import PlacementError
from .feasibility import unit_fits_room

if TYPE_CHECKING:
    from .context import SearchContext

logger = logging.getLogger(__name__)

UNPLACED = -1

# Upper bound on unit placements tried by backtracking before giving up
DEFAULT_MAX_PLACEMENTS = 200_000


def backtracking_placement(ctx: SearchContext, max_placements: int = DEFAULT_MAX_PLACEMENTS) -> list[int]:
    """Pack units (largest first) into rooms (in room order).

    A room is skipped when it lacks capacity or already holds a MUST_NOT
    partner placed at an earlier depth. Empty rooms of a capacity already
    tried at the same depth are skipped too: they lead to the same subtree.

    Raises:
        PlacementError: if no complete packing exists or the budget runs out
    """
    order = ctx.units.by_size
    capacities = ctx.capacities
    num_rooms = ctx.num_rooms

    assignment = [UNPLACED] * ctx.n
    remaining = list(capacities)
    chosen = [UNPLACED] * len(order)
    next_room = [0] * len(order)
    placements = 0

    depth = 0
    while 0 <= depth < len(order):
        unit = order[depth]
        size = ctx.units.size(unit)

        if chosen[depth] != UNPLACED:
            ctx.move_unit(assignment, unit, UNPLACED)
            remaining[chosen[depth]] += size
            chosen[depth] = UNPLACED

        found = UNPLACED
        tried_empty: set[int] = set()
        for room in range(num_rooms):
            is_empty = remaining[room] == capacities[room]
            if room < next_room[depth]:
                if is_empty:
                    tried_empty.add(capacities[room])
                continue
            if remaining[room] < size:
                continue
            if is_empty and capacities[room] in tried_empty:
                continue
            if not unit_fits_room(ctx, assignment, unit, room):
                continue
            found = room
            break

        if found == UNPLACED:
            next_room[depth] = 0
            depth -= 1
            continue

        placements += 1
        if placements > max_placements:
            raise PlacementError(f"backtracking gave up after {max_placements} placements")

        ctx.move_unit(assignment, unit, found)
        remaining[found] -= size
        chosen[depth] = found
        next_room[depth] = found + 1
        depth += 1

    if depth < 0:
        raise PlacementError("no packing of units into rooms satisfies capacity and must_not constraints")
    return assignment


def round_robin_placement(n: int, num_rooms: int) -> list[int]:
    """Participant i -> room i mod num_rooms. Does not check hard constraints."""
    return [i % num_rooms for i in range(n)]


def join_units(ctx: SearchContext, assignment: list[int]) -> list[int]:
    """Move every unit into the room of its root member, in place.

    Round robin ignores MUST edges; search code relies on whole units.
    """
    for unit in range(len(ctx.units)):
        ctx.move_unit(assignment, unit, assignment[ctx.units.members(unit)[0]])
    return assignment


def initial_assignment(ctx: SearchContext) -> tuple[list[int], bool]:
    """Deterministic starting point.

    The round-robin fallback has its units re-joined, so only MUST_NOT and
    capacity can still be violated.

    Returns:
        (assignment, used_fallback)
    """
    try:
        return backtracking_placement(ctx), False
    except PlacementError as e:
        ctx.search_logger.log_feasibility_warning(f"Initial placement failed ({e}); starting from round-robin")
        return join_units(ctx, round_robin_placement(ctx.n, ctx.num_rooms)), True


def random_placement(ctx: SearchContext, rng: random.Random) -> list[int] | None:
    """Randomized greedy placement.

    Units are visited in random order; each goes into the first room (in a
    random order) with enough capacity and no MUST_NOT partner. Returns None
    if some unit fits nowhere.
    """
    assignment = [UNPLACED] * ctx.n
    remaining = list(ctx.capacities)
    rooms = list(range(ctx.num_rooms))
    order = list(ctx.units.by_size)
    rng.shuffle(order)

    for unit in order:
        size = ctx.units.size(unit)
        rng.shuffle(rooms)
        for room in rooms:
            if remaining[room] < size:
                continue
            if not unit_fits_room(ctx, assignment, unit, room):
                continue
            ctx.move_unit(assignment, unit, room)
            remaining[room] -= size
            break
        else:
            return None
    return assignment
