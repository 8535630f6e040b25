"""
Derived constraint indices.

Built once per solve call from the immutable constraint list so that scoring
and feasibility checks can look up a participant's constraints directly.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rooming.models import Constraint, ConstraintKind


@dataclass(frozen=True)
class ConstraintIndex:
    """Per-participant views over the constraint list.

    Attributes:
        pairs: (a, b, kind) triples in input order
        by_participant: participant -> indices into `pairs` touching it
        has_prefer: participant issues at least one PREFER constraint
        must_pairs: normalized (low, high) MUST pairs
        must_not_pairs: normalized (low, high) MUST_NOT pairs, sorted
        must_not_partners: participant -> MUST_NOT partners
    """

    n: int
    pairs: tuple[tuple[int, int, ConstraintKind], ...]
    by_participant: tuple[tuple[int, ...], ...]
    has_prefer: tuple[bool, ...]
    must_pairs: tuple[tuple[int, int], ...]
    must_not_pairs: tuple[tuple[int, int], ...]
    must_not_partners: tuple[tuple[int, ...], ...]

    @classmethod
    def build(cls, n: int, constraints: Sequence[Constraint]) -> ConstraintIndex:
        pairs = tuple((c.a, c.b, c.kind) for c in constraints)

        by_participant: list[list[int]] = [[] for _ in range(n)]
        has_prefer = [False] * n
        must: set[tuple[int, int]] = set()
        must_not: set[tuple[int, int]] = set()

        for ci, (a, b, kind) in enumerate(pairs):
            by_participant[a].append(ci)
            if b != a:
                by_participant[b].append(ci)
            key = (a, b) if a <= b else (b, a)
            if kind == ConstraintKind.PREFER:
                has_prefer[a] = True
            elif kind == ConstraintKind.MUST:
                must.add(key)
            elif kind == ConstraintKind.MUST_NOT:
                must_not.add(key)

        partners: list[list[int]] = [[] for _ in range(n)]
        for a, b in sorted(must_not):
            partners[a].append(b)
            if b != a:
                partners[b].append(a)

        return cls(
            n=n,
            pairs=pairs,
            by_participant=tuple(tuple(ci) for ci in by_participant),
            has_prefer=tuple(has_prefer),
            must_pairs=tuple(sorted(must)),
            must_not_pairs=tuple(sorted(must_not)),
            must_not_partners=tuple(tuple(p) for p in partners),
        )

    def preferrers(self) -> list[int]:
        """Participants that issue at least one PREFER constraint."""
        return [p for p, flag in enumerate(self.has_prefer) if flag]
