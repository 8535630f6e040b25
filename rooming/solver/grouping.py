"""
Placement units - must-together reduction.

Participants joined by a chain of MUST constraints always share a room, so the
search moves these connected components (units) rather than individuals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .constraint_index import ConstraintIndex
from .union_find import UnionFind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementUnits:
    """Immutable must-connected components for one solve call.

    Attributes:
        units: member tuples (sorted), ordered by canonical root (smallest member)
        unit_of: participant -> index into `units`
        root_of: participant -> canonical root index
        by_size: unit indices by descending size, ties broken by root
    """

    units: tuple[tuple[int, ...], ...]
    unit_of: tuple[int, ...]
    root_of: tuple[int, ...]
    by_size: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.units)

    def size(self, unit: int) -> int:
        return len(self.units[unit])

    @property
    def sizes(self) -> tuple[int, ...]:
        return tuple(len(members) for members in self.units)

    def members(self, unit: int) -> tuple[int, ...]:
        return self.units[unit]

    def groups(self) -> dict[int, list[int]]:
        """Root -> ordered member list."""
        return {members[0]: list(members) for members in self.units}


def build_placement_units(n: int, index: ConstraintIndex) -> PlacementUnits:
    """Collapse MUST edges into placement units."""
    uf = UnionFind(n)
    for a, b in index.must_pairs:
        uf.union(a, b)

    root_of = tuple(uf.find(p) for p in range(n))
    members_by_root: dict[int, list[int]] = {}
    for p, root in enumerate(root_of):
        members_by_root.setdefault(root, []).append(p)

    units = tuple(tuple(members_by_root[root]) for root in sorted(members_by_root))
    unit_of = [0] * n
    for ui, members in enumerate(units):
        for m in members:
            unit_of[m] = ui

    by_size = tuple(sorted(range(len(units)), key=lambda ui: (-len(units[ui]), units[ui][0])))

    if units:
        logger.debug(f"Built {len(units)} placement units from {n} participants (largest: {len(units[by_size[0]])})")

    return PlacementUnits(units=units, unit_of=tuple(unit_of), root_of=root_of, by_size=by_size)


def find_hard_conflicts(units: PlacementUnits, index: ConstraintIndex) -> list[tuple[int, int]]:
    """MUST_NOT pairs whose endpoints are forced into the same unit.

    Independent of room capacities: any hit makes the instance infeasible.
    """
    return [(a, b) for a, b in index.must_not_pairs if units.root_of[a] == units.root_of[b]]
