"""Tests for constraint indexing, placement units and hard-conflict detection."""

from __future__ import annotations

from rooming.models import Constraint, ConstraintKind
from rooming.solver.constraint_index import ConstraintIndex
from rooming.solver.grouping import build_placement_units, find_hard_conflicts

MUST = ConstraintKind.MUST
MUST_NOT = ConstraintKind.MUST_NOT
PREFER = ConstraintKind.PREFER
PREFER_NOT = ConstraintKind.PREFER_NOT


def _index(n, triples):
    return ConstraintIndex.build(n, [Constraint(a=a, b=b, kind=k) for a, b, k in triples])


class TestConstraintIndex:
    """Tests for ConstraintIndex.build."""

    def test_by_participant_lists_both_endpoints(self):
        index = _index(3, [(0, 1, PREFER), (1, 2, PREFER_NOT)])
        assert index.by_participant == ((0,), (0, 1), (1,))

    def test_self_pair_is_listed_once(self):
        index = _index(2, [(1, 1, PREFER)])
        assert index.by_participant[1] == (0,)

    def test_has_prefer_only_for_issuer(self):
        index = _index(3, [(2, 0, PREFER)])
        assert index.has_prefer == (False, False, True)
        assert index.preferrers() == [2]

    def test_hard_pairs_are_normalized_and_deduplicated(self):
        index = _index(4, [(3, 1, MUST_NOT), (1, 3, MUST_NOT), (2, 0, MUST)])
        assert index.must_not_pairs == ((1, 3),)
        assert index.must_pairs == ((0, 2),)
        assert index.must_not_partners == ((), (3,), (), (1,))


class TestPlacementUnits:
    """Tests for build_placement_units."""

    def test_no_must_constraints_gives_singletons(self):
        units = build_placement_units(3, _index(3, [(0, 1, PREFER)]))
        assert units.units == ((0,), (1,), (2,))
        assert units.root_of == (0, 1, 2)
        assert len(units) == 3

    def test_must_chain_collapses_to_one_unit(self):
        units = build_placement_units(5, _index(5, [(4, 2, MUST), (2, 0, MUST)]))
        assert units.units == ((0, 2, 4), (1,), (3,))
        assert units.root_of == (0, 1, 0, 3, 0)
        assert units.unit_of == (0, 1, 0, 2, 0)
        assert units.groups() == {0: [0, 2, 4], 1: [1], 3: [3]}

    def test_by_size_orders_largest_first_then_by_root(self):
        units = build_placement_units(6, _index(6, [(3, 4, MUST), (1, 5, MUST)]))
        # Units: (0,), (1,5), (2,), (3,4)
        assert [units.members(u) for u in units.by_size] == [(1, 5), (3, 4), (0,), (2,)]
        assert units.size(1) == 2
        assert units.sizes == (1, 2, 1, 2)

    def test_empty_instance(self):
        units = build_placement_units(0, _index(0, []))
        assert len(units) == 0
        assert units.by_size == ()


class TestHardConflicts:
    """Tests for find_hard_conflicts."""

    def test_chain_conflict_detected(self):
        index = _index(3, [(0, 1, MUST), (1, 2, MUST), (0, 2, MUST_NOT)])
        units = build_placement_units(3, index)
        assert find_hard_conflicts(units, index) == [(0, 2)]

    def test_must_not_across_units_is_fine(self):
        index = _index(4, [(0, 1, MUST), (2, 3, MUST), (1, 2, MUST_NOT)])
        units = build_placement_units(4, index)
        assert find_hard_conflicts(units, index) == []

    def test_self_must_not_is_a_conflict(self):
        index = _index(2, [(1, 1, MUST_NOT)])
        units = build_placement_units(2, index)
        assert find_hard_conflicts(units, index) == [(1, 1)]
