"""Scoring Engine - full and incremental evaluation of the objective.

The objective mirrors the rooming preferences:
1. +1 for every PREFER constraint whose endpoints share a room
2. -prefer_not_multiplier for every PREFER_NOT constraint whose endpoints share a room
3. -no_prefer_cost once for every participant who issued PREFER constraints
   but got none of them honoured

MUST / MUST_NOT never contribute; they only decide feasibility.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from rooming.models import ConstraintKind

from .constraint_index import ConstraintIndex
from .feasibility import room_counts, swap_fits

if TYPE_CHECKING:
    from .context import SearchContext

PREFER = ConstraintKind.PREFER
PREFER_NOT = ConstraintKind.PREFER_NOT


def full_score(
    assignment: Sequence[int],
    index: ConstraintIndex,
    prefer_not_multiplier: int,
    no_prefer_cost: int,
) -> int:
    """Score an assignment from scratch."""
    score = 0
    satisfied = [False] * index.n
    for a, b, kind in index.pairs:
        if assignment[a] != assignment[b]:
            continue
        if kind == PREFER:
            score += 1
            satisfied[a] = True
        elif kind == PREFER_NOT:
            score -= prefer_not_multiplier

    for participant, has_prefer in enumerate(index.has_prefer):
        if has_prefer and not satisfied[participant]:
            score -= no_prefer_cost
    return score


class ScoreEngine:
    """Incrementally maintained score for one mutable assignment.

    Keeps per-room occupancy and, for every participant, how many of their
    PREFER constraints are currently satisfied. Moving a unit only touches the
    constraints crossing the unit boundary, so evaluating a move costs
    O(unit size x constraint degree) instead of O(total constraints).

    The assignment list is shared and mutated in place by apply_move().
    """

    def __init__(self, ctx: SearchContext, assignment: list[int]) -> None:
        self.ctx = ctx
        self.assignment = assignment
        self.rebuild()

    def rebuild(self) -> None:
        """Recompute every cached quantity from the current assignment.

        Raises:
            ValueError: if some unit is split across rooms
        """
        ctx = self.ctx
        for members in ctx.units.units:
            room = self.assignment[members[0]]
            if any(self.assignment[m] != room for m in members[1:]):
                raise ValueError(f"unit {list(members)} is split across rooms; join units before scoring moves")
        self.counts = room_counts(self.assignment, ctx.num_rooms)
        self.prefer_satisfied = [0] * ctx.n
        for a, b, kind in ctx.index.pairs:
            if kind == PREFER and self.assignment[a] == self.assignment[b]:
                self.prefer_satisfied[a] += 1
        self.score = full_score(self.assignment, ctx.index, ctx.prefer_not_multiplier, ctx.no_prefer_cost)

    def room_of(self, unit: int) -> int:
        return self.assignment[self.ctx.units.members(unit)[0]]

    def fits(self, unit: int, room: int) -> bool:
        """Capacity check for relocating `unit` into `room`."""
        return self.counts[room] + self.ctx.units.size(unit) <= self.ctx.capacities[room]

    def swap_fits(self, u: int, v: int) -> bool:
        """Capacity check for exchanging the rooms of `u` and `v`."""
        units = self.ctx.units
        return swap_fits(
            self.counts, self.ctx.capacities, self.room_of(u), units.size(u), self.room_of(v), units.size(v)
        )

    def _boundary_flips(self, unit: int, old_room: int, new_room: int) -> Iterator[tuple[int, ConstraintKind, bool]]:
        """Yield (a, kind, was_same) for boundary constraints whose same-room status flips."""
        assignment = self.assignment
        unit_of = self.ctx.units.unit_of
        pairs = self.ctx.index.pairs
        by_participant = self.ctx.index.by_participant
        for m in self.ctx.units.members(unit):
            for ci in by_participant[m]:
                a, b, kind = pairs[ci]
                other = b if a == m else a
                if unit_of[other] == unit:
                    continue
                other_room = assignment[other]
                was_same = other_room == old_room
                if was_same == (other_room == new_room):
                    continue
                yield a, kind, was_same

    def move_delta(self, unit: int, new_room: int) -> int:
        """Score change of relocating `unit` to `new_room` (nothing is applied)."""
        ctx = self.ctx
        old_room = self.room_of(unit)
        delta = 0
        prefer_changes: dict[int, int] = {}
        for a, kind, was_same in self._boundary_flips(unit, old_room, new_room):
            if kind == PREFER:
                step = -1 if was_same else 1
                delta += step
                prefer_changes[a] = prefer_changes.get(a, 0) + step
            elif kind == PREFER_NOT:
                delta += ctx.prefer_not_multiplier if was_same else -ctx.prefer_not_multiplier

        for participant, change in prefer_changes.items():
            was_satisfied = self.prefer_satisfied[participant] > 0
            will_be_satisfied = self.prefer_satisfied[participant] + change > 0
            if was_satisfied and not will_be_satisfied:
                delta -= ctx.no_prefer_cost
            elif will_be_satisfied and not was_satisfied:
                delta += ctx.no_prefer_cost
        return delta

    def apply_move(self, unit: int, new_room: int) -> int:
        """Relocate `unit` and update every cached quantity. Returns the delta."""
        old_room = self.room_of(unit)
        if old_room == new_room:
            return 0
        delta = self.move_delta(unit, new_room)
        for a, kind, was_same in list(self._boundary_flips(unit, old_room, new_room)):
            if kind == PREFER:
                self.prefer_satisfied[a] += -1 if was_same else 1

        members = self.ctx.units.members(unit)
        for m in members:
            self.assignment[m] = new_room
        self.counts[old_room] -= len(members)
        self.counts[new_room] += len(members)
        self.score += delta
        return delta

    def swap_delta(self, u: int, v: int) -> int:
        """Score change of exchanging the rooms of `u` and `v` (state is restored)."""
        ru, rv = self.room_of(u), self.room_of(v)
        first = self.move_delta(u, rv)
        self.apply_move(u, rv)
        second = self.move_delta(v, ru)
        self.apply_move(u, ru)
        return first + second

    def apply_swap(self, u: int, v: int) -> int:
        ru, rv = self.room_of(u), self.room_of(v)
        return self.apply_move(u, rv) + self.apply_move(v, ru)

    def full_score(self) -> int:
        """Recompute the score from scratch (consistency checks)."""
        ctx = self.ctx
        return full_score(self.assignment, ctx.index, ctx.prefer_not_multiplier, ctx.no_prefer_cost)
