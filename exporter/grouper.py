"""Union-find grouping of canvas nodes into logical resources.

Several canvas nodes can describe one cloud resource (an EC2 instance node
and its EBS volume node both hang off the same EC2 parent). Nodes are unioned
when they share a non-empty display name or a non-empty parent id, and the
resulting equivalence classes are returned in placement order.

Name equality is applied even when the nodes have different parents, so two
unrelated resources with the same label end up in one group. This is kept for
compatibility with the designer's existing exports.
"""

import logging
from typing import Dict, List, Sequence

from exporter.snapshot import PlacedNode

logger = logging.getLogger(__name__)


class DisjointSet:
    """Disjoint-set forest over integer indices with path compression and
    union by rank."""

    def __init__(self, size: int):
        self.parent = list(range(size))
        self.rank = [0] * size

    def find(self, index: int) -> int:
        root = index
        while self.parent[root] != root:
            root = self.parent[root]
        # Path compression
        while self.parent[index] != root:
            self.parent[index], index = root, self.parent[index]
        return root

    def union(self, a: int, b: int) -> int:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return root_a
        if self.rank[root_a] < self.rank[root_b]:
            root_a, root_b = root_b, root_a
        self.parent[root_b] = root_a
        if self.rank[root_a] == self.rank[root_b]:
            self.rank[root_a] += 1
        return root_a


def _union_by_key(dsu: DisjointSet, keys: Sequence[str]) -> None:
    """Union every index with the first index that carried the same key."""
    first_seen: Dict[str, int] = {}
    for index, key in enumerate(keys):
        if not key:
            continue
        if key in first_seen:
            dsu.union(first_seen[key], index)
        else:
            first_seen[key] = index


def group_nodes(nodes: Sequence[PlacedNode]) -> List[List[PlacedNode]]:
    """Partition nodes into resource groups.

    Args:
        nodes: Nodes of one resource family, in placement order

    Returns:
        List of groups. Groups are ordered by their first member and members
        keep placement order, so downstream merging is deterministic.
    """
    dsu = DisjointSet(len(nodes))
    _union_by_key(dsu, [(n.display_name or "").strip() for n in nodes])
    _union_by_key(dsu, [n.parent_node_id or "" for n in nodes])

    groups: Dict[int, List[PlacedNode]] = {}
    for index, node in enumerate(nodes):
        groups.setdefault(dsu.find(index), []).append(node)
    result = list(groups.values())
    logger.debug(f"Grouped {len(nodes)} nodes into {len(result)} resource groups")
    return result
