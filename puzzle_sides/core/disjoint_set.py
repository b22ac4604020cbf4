"""Disjoint-set union over integer ids 0..n-1."""

from typing import List


class DisjointSetUnion:
    """Union by rank with path compression."""

    def __init__(self, size: int):
        self.parent: List[int] = list(range(size))
        self.rank: List[int] = [0] * size

    def __len__(self) -> int:
        return len(self.parent)

    def find(self, x: int) -> int:
        parent = self.parent
        root = x
        while parent[root] != root:
            root = parent[root]
        # Path compression
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    def unite(self, a: int, b: int) -> int:
        """Merge the sets of ``a`` and ``b`` and return the new root.

        On equal rank the root of ``a`` wins, so roots only depend on the
        order of the calls.
        """
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return ra
        if self.rank[ra] < self.rank[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        if self.rank[ra] == self.rank[rb]:
            self.rank[ra] += 1
        return ra
