"""
Steepest-ascent hill climbing over placement units.

Each round enumerates every relocation of a unit to another room and every
swap of two units in different rooms, then commits the single best strictly
improving move. Stops at a local optimum.

Two flavours share the enumeration order and the tie rule (first best wins):
- hill_climb: full rescoring and the full feasibility predicate per candidate
- fast_hill_climb: incremental ScoreEngine deltas and move-scoped feasibility,
  falling back to the full predicate while the current assignment is infeasible
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .feasibility import room_counts, swap_fits, swap_is_feasible, unit_fits_room
from .scoring import ScoreEngine

if TYPE_CHECKING:
    from .context import SearchContext


@dataclass(frozen=True)
class Move:
    """Relocate `unit` to `room`, or swap it with unit `partner`."""

    unit: int
    room: int | None = None
    partner: int | None = None

    @property
    def is_swap(self) -> bool:
        return self.partner is not None


def candidate_moves(ctx: SearchContext, assignment: Sequence[int], counts: Sequence[int]) -> Iterator[Move]:
    """Capacity-feasible relocations and swaps, in enumeration order.

    Consumers may mutate the assignment while evaluating a move as long as
    they restore it before pulling the next one.
    """
    units = ctx.units
    capacities = ctx.capacities
    for u in range(len(units)):
        size_u = units.size(u)
        ru = assignment[units.members(u)[0]]
        for room in range(ctx.num_rooms):
            if room == ru or counts[room] + size_u > capacities[room]:
                continue
            yield Move(u, room=room)
        for v in range(u + 1, len(units)):
            rv = assignment[units.members(v)[0]]
            if rv == ru:
                continue
            if not swap_fits(counts, capacities, ru, size_u, rv, units.size(v)):
                continue
            yield Move(u, partner=v)


def _apply_to(ctx: SearchContext, assignment: list[int], move: Move) -> tuple[int, int | None]:
    """Apply a move in place and return what is needed to undo it."""
    ru = assignment[ctx.units.members(move.unit)[0]]
    if move.partner is None:
        assert move.room is not None
        ctx.move_unit(assignment, move.unit, move.room)
        return ru, None
    rv = assignment[ctx.units.members(move.partner)[0]]
    ctx.move_unit(assignment, move.unit, rv)
    ctx.move_unit(assignment, move.partner, ru)
    return ru, rv


def _undo(ctx: SearchContext, assignment: list[int], move: Move, undo: tuple[int, int | None]) -> None:
    ru, rv = undo
    ctx.move_unit(assignment, move.unit, ru)
    if move.partner is not None and rv is not None:
        ctx.move_unit(assignment, move.partner, rv)


def hill_climb(ctx: SearchContext, assignment: list[int]) -> int:
    """Full-rescoring steepest ascent. Mutates `assignment`; returns its score."""
    current = ctx.score(assignment)
    counts = room_counts(assignment, ctx.num_rooms)

    while True:
        best_delta = 0
        best_move: Move | None = None
        for move in candidate_moves(ctx, assignment, counts):
            undo = _apply_to(ctx, assignment, move)
            if ctx.is_feasible(assignment):
                delta = ctx.score(assignment) - current
                if delta > best_delta:
                    best_delta = delta
                    best_move = move
            _undo(ctx, assignment, move, undo)

        if best_move is None:
            return current

        _apply_to(ctx, assignment, best_move)
        counts = room_counts(assignment, ctx.num_rooms)
        current += best_delta


def _strict_delta(ctx: SearchContext, engine: ScoreEngine, move: Move) -> int | None:
    """Delta of `move` if the whole assignment is feasible afterwards, else None.

    The engine state is restored before returning.
    """
    ru = engine.room_of(move.unit)
    if move.partner is None:
        assert move.room is not None
        delta = engine.apply_move(move.unit, move.room)
        feasible = ctx.is_feasible(engine.assignment)
        engine.apply_move(move.unit, ru)
    else:
        rv = engine.room_of(move.partner)
        delta = engine.apply_move(move.unit, rv) + engine.apply_move(move.partner, ru)
        feasible = ctx.is_feasible(engine.assignment)
        engine.apply_move(move.partner, rv)
        engine.apply_move(move.unit, ru)
    return delta if feasible else None


def fast_hill_climb(ctx: SearchContext, assignment: list[int]) -> int:
    """Incremental steepest ascent. Mutates `assignment`; returns its score.

    Move-scoped feasibility only holds while the current assignment is
    feasible. From an infeasible start every candidate is checked against the
    whole assignment, so both flavours accept exactly the same moves.
    """
    engine = ScoreEngine(ctx, assignment)

    while True:
        best_delta = 0
        best_move: Move | None = None
        strict = not ctx.is_feasible(assignment)
        for move in candidate_moves(ctx, assignment, engine.counts):
            if strict:
                delta = _strict_delta(ctx, engine, move)
                if delta is None:
                    continue
            elif move.partner is None:
                assert move.room is not None
                if not unit_fits_room(ctx, assignment, move.unit, move.room):
                    continue
                delta = engine.move_delta(move.unit, move.room)
            else:
                if not swap_is_feasible(ctx, assignment, move.unit, move.partner):
                    continue
                delta = engine.swap_delta(move.unit, move.partner)
            if delta > best_delta:
                best_delta = delta
                best_move = move

        if best_move is None:
            return engine.score

        if best_move.partner is None:
            assert best_move.room is not None
            engine.apply_move(best_move.unit, best_move.room)
        else:
            engine.apply_swap(best_move.unit, best_move.partner)
