"""
Disjoint-set (union-find) structure used to group connected zones.
"""

from typing import Dict, List

from geozones.zonemerge.errors import UnionFindIndexError


class UnionFind:
    """
    Union-find over the elements 0 to size - 1.

    find uses path compression and union uses union by rank, so a sequence
    of operations runs in near-constant amortized time per operation.
    """

    def __init__(self, size: int):
        if size < 0:
            raise ValueError(f"UnionFind size must be >= 0, got {size}")
        self.size = size
        self.parent = list(range(size))
        self.rank = [0] * size

    def __len__(self) -> int:
        return self.size

    def find(self, x: int) -> int:
        """Return the root of x's set, pointing every visited node at it."""
        self._validate_index(x)

        root = x
        while self.parent[root] != root:
            root = self.parent[root]

        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]

        return root

    def union(self, x: int, y: int):
        """Merge the sets containing x and y."""
        self._validate_index(x)
        self._validate_index(y)

        root_x = self.find(x)
        root_y = self.find(y)
        if root_x == root_y:
            return

        if self.rank[root_x] < self.rank[root_y]:
            self.parent[root_x] = root_y
        elif self.rank[root_x] > self.rank[root_y]:
            self.parent[root_y] = root_x
        else:
            self.parent[root_y] = root_x
            self.rank[root_x] += 1

    def connected(self, x: int, y: int) -> bool:
        self._validate_index(x)
        self._validate_index(y)
        return self.find(x) == self.find(y)

    def groups(self) -> List[List[int]]:
        """
        All sets, each as an ascending list of elements.

        Sets are ordered by their smallest element, which makes the output
        independent of which element ended up as a root.
        """
        by_root: Dict[int, List[int]] = {}
        for element in range(self.size):
            by_root.setdefault(self.find(element), []).append(element)
        return list(by_root.values())

    def _validate_index(self, index: int):
        if isinstance(index, bool) or not isinstance(index, int):
            raise UnionFindIndexError(f"Index {index!r} is not an integer")
        if index < 0 or index >= self.size:
            raise UnionFindIndexError(
                f"Index {index} out of bounds [0, {self.size - 1}]"
            )
