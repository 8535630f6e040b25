"""
Feasibility checks.

An assignment is feasible iff every MUST pair shares a room, no MUST_NOT pair
shares a room and no room holds more participants than its capacity. Every
search move is gated by either the full predicate or one of the move-scoped
checks below. Moves relocate whole units, so they never split a MUST pair.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from .constraint_index import ConstraintIndex

if TYPE_CHECKING:
    from .context import SearchContext


def room_counts(assignment: Sequence[int], num_rooms: int) -> list[int]:
    """Occupant count per room."""
    counts = [0] * num_rooms
    for room in assignment:
        counts[room] += 1
    return counts


def is_feasible(assignment: Sequence[int], capacities: Sequence[int], index: ConstraintIndex) -> bool:
    """Full feasibility predicate."""
    for a, b in index.must_pairs:
        if assignment[a] != assignment[b]:
            return False
    for a, b in index.must_not_pairs:
        if assignment[a] == assignment[b]:
            return False
    counts = [0] * len(capacities)
    for room in assignment:
        if room < 0 or room >= len(capacities):
            return False
        counts[room] += 1
    return all(count <= capacity for count, capacity in zip(counts, capacities, strict=True))


def find_violations(assignment: Sequence[int], capacities: Sequence[int], index: ConstraintIndex) -> list[str]:
    """Describe every hard-constraint and capacity violation of an assignment."""
    problems: list[str] = []
    for a, b in index.must_pairs:
        if assignment[a] != assignment[b]:
            problems.append(f"must pair {a}-{b} is split across rooms {assignment[a]} and {assignment[b]}")
    for a, b in index.must_not_pairs:
        if assignment[a] == assignment[b]:
            problems.append(f"must_not pair {a}-{b} shares room {assignment[a]}")
    for room, count in enumerate(room_counts(assignment, len(capacities))):
        if count > capacities[room]:
            problems.append(f"room {room} holds {count} participants (capacity {capacities[room]})")
    return problems


def unit_fits_room(ctx: SearchContext, assignment: Sequence[int], unit: int, room: int) -> bool:
    """True if no MUST_NOT partner outside `unit` currently occupies `room`.

    Capacity is checked separately by the caller.
    """
    unit_of = ctx.units.unit_of
    partners = ctx.index.must_not_partners
    for m in ctx.units.members(unit):
        for partner in partners[m]:
            if unit_of[partner] != unit and assignment[partner] == room:
                return False
    return True


def swap_is_feasible(ctx: SearchContext, assignment: Sequence[int], u: int, v: int) -> bool:
    """MUST_NOT check for exchanging the rooms of units `u` and `v`."""
    ru = assignment[ctx.units.members(u)[0]]
    rv = assignment[ctx.units.members(v)[0]]
    unit_of = ctx.units.unit_of
    partners = ctx.index.must_not_partners

    for moving, origin, target, other in ((u, ru, rv, v), (v, rv, ru, u)):
        for m in ctx.units.members(moving):
            for partner in partners[m]:
                partner_unit = unit_of[partner]
                if partner_unit == moving:
                    continue
                # Members of the other unit end up in our origin room
                room_after = origin if partner_unit == other else assignment[partner]
                if room_after == target:
                    return False
    return True


def swap_fits(counts: Sequence[int], capacities: Sequence[int], ru: int, su: int, rv: int, sv: int) -> bool:
    """Capacity check for exchanging a unit of size `su` in room `ru` with one of size `sv` in `rv`."""
    return counts[ru] - su + sv <= capacities[ru] and counts[rv] - sv + su <= capacities[rv]
