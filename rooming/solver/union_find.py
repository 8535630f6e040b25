"""Disjoint-set forest used to collapse must-together constraints."""

from __future__ import annotations


class UnionFind:
    """Union-find over 0..n-1 with path compression.

    Only find() and union() are public; the parent array stays private.
    """

    def __init__(self, n: int) -> None:
        self._parent = list(range(n))

    def find(self, x: int) -> int:
        root = x
        while self._parent[root] != root:
            root = self._parent[root]
        # Path compression
        while self._parent[x] != root:
            self._parent[x], x = root, self._parent[x]
        return root

    def union(self, x: int, y: int) -> bool:
        """Merge the sets containing x and y. Returns False if already merged."""
        rx, ry = self.find(x), self.find(y)
        if rx == ry:
            return False
        # Keep the smaller index as root so roots are canonical
        if rx < ry:
            self._parent[ry] = rx
        else:
            self._parent[rx] = ry
        return True
