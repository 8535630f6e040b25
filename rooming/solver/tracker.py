"""
Solution Tracker - best score plus every structurally distinct tied assignment.

Room labels are irrelevant: two assignments that put the same participants
together are the same solution, whatever room numbers they use.
"""

from __future__ import annotations

from collections.abc import Sequence


def partition_key(assignment: Sequence[int]) -> str:
    """Canonical, room-label-independent encoding of an assignment.

    Members of each room are sorted, rooms are ordered by their smallest
    member, and each room is written as "m1,m2,...;".
    """
    by_room: dict[int, list[int]] = {}
    for participant, room in enumerate(assignment):
        by_room.setdefault(room, []).append(participant)
    # Participants are visited in increasing order, so member lists are sorted
    groups = sorted(by_room.values(), key=lambda members: members[0])
    return "".join(",".join(map(str, members)) + ";" for members in groups)


class SolutionTracker:
    """Best score seen so far and the deduplicated assignments that reach it.

    Single transition rule (see offer): a higher score resets the set, an
    equal score adds the assignment if its partition is unseen.
    """

    def __init__(self) -> None:
        self.best_score: int | None = None
        self.solutions: list[list[int]] = []
        self._seen: set[str] = set()

    def __len__(self) -> int:
        return len(self.solutions)

    def __bool__(self) -> bool:
        return bool(self.solutions)

    @property
    def keys(self) -> frozenset[str]:
        return frozenset(self._seen)

    def accepts(self, score: int) -> bool:
        """True if an assignment with this score could change the tracker."""
        return self.best_score is None or score >= self.best_score

    def offer(self, assignment: Sequence[int], score: int) -> bool:
        """Record an assignment; returns True if the best score improved."""
        improved = False
        if self.best_score is None or score > self.best_score:
            self.best_score = score
            self.solutions = []
            self._seen = set()
            improved = True
        if score == self.best_score:
            key = partition_key(assignment)
            if key not in self._seen:
                self._seen.add(key)
                self.solutions.append(list(assignment))
        return improved

    def merge(self, other: SolutionTracker) -> SolutionTracker:
        """Fold another tracker into this one (keep higher score, union ties)."""
        if other.best_score is None:
            return self
        for assignment in other.solutions:
            self.offer(assignment, other.best_score)
        return self
