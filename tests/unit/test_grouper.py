"""Unit tests for exporter/grouper.py"""

import sys
import unittest
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from exporter.grouper import DisjointSet, group_nodes
from exporter.snapshot import PlacedNode


def _node(node_id, name="", parent=None, **properties):
    return PlacedNode(
        id=node_id,
        kind="ec2-instance",
        display_name=name,
        parent_node_id=parent,
        properties=properties,
    )


def _ids(groups):
    return [[n.id for n in group] for group in groups]


class TestDisjointSet(unittest.TestCase):
    """Test the integer-indexed union-find."""

    def test_initially_singletons(self):
        dsu = DisjointSet(3)
        self.assertEqual([dsu.find(i) for i in range(3)], [0, 1, 2])

    def test_union_is_transitive(self):
        dsu = DisjointSet(4)
        dsu.union(0, 1)
        dsu.union(1, 2)
        self.assertEqual(dsu.find(0), dsu.find(2))
        self.assertNotEqual(dsu.find(0), dsu.find(3))

    def test_union_same_set_is_noop(self):
        dsu = DisjointSet(2)
        root = dsu.union(0, 1)
        self.assertEqual(dsu.union(1, 0), root)

    def test_path_compression_flattens(self):
        dsu = DisjointSet(5)
        for i in range(4):
            dsu.union(i, i + 1)
        root = dsu.find(4)
        for i in range(5):
            dsu.find(i)
            self.assertEqual(dsu.parent[i], root)


class TestGroupNodes(unittest.TestCase):
    """Test grouping of canvas nodes into resource groups."""

    def test_empty(self):
        self.assertEqual(group_nodes([]), [])

    def test_unrelated_nodes_stay_apart(self):
        groups = group_nodes([_node("a", "one"), _node("b", "two")])
        self.assertEqual(_ids(groups), [["a"], ["b"]])

    def test_shared_parent_joins_group(self):
        """Two instances under one parent form one group even with different names."""
        nodes = [
            _node("a", "alpha", parent="p1"),
            _node("b", "beta", parent="p1"),
        ]
        self.assertEqual(_ids(group_nodes(nodes)), [["a", "b"]])

    def test_shared_name_joins_group(self):
        nodes = [_node("a", "web"), _node("b", "other"), _node("c", "web")]
        self.assertEqual(_ids(group_nodes(nodes)), [["a", "c"], ["b"]])

    def test_name_is_trimmed_before_comparison(self):
        nodes = [_node("a", "web "), _node("b", " web")]
        self.assertEqual(_ids(group_nodes(nodes)), [["a", "b"]])

    def test_same_name_across_parents_merges(self):
        nodes = [
            _node("a", "web", parent="p1"),
            _node("b", "web", parent="p2"),
        ]
        self.assertEqual(_ids(group_nodes(nodes)), [["a", "b"]])

    def test_transitive_name_and_parent(self):
        """a~b by name and b~c by parent puts all three together."""
        nodes = [
            _node("a", "web"),
            _node("b", "web", parent="p1"),
            _node("c", "db", parent="p1"),
            _node("d", "cache"),
        ]
        self.assertEqual(_ids(group_nodes(nodes)), [["a", "b", "c"], ["d"]])

    def test_empty_names_do_not_group(self):
        nodes = [_node("a", ""), _node("b", "  ")]
        self.assertEqual(_ids(group_nodes(nodes)), [["a"], ["b"]])

    def test_partition_covers_every_node_once(self):
        nodes = [
            _node("a", "x", parent="p1"),
            _node("b", "y"),
            _node("c", "z", parent="p1"),
            _node("d", "y", parent="p2"),
            _node("e", "q", parent="p2"),
            _node("f"),
        ]
        flat = [n.id for group in group_nodes(nodes) for n in group]
        self.assertEqual(sorted(flat), ["a", "b", "c", "d", "e", "f"])
        self.assertEqual(len(flat), len(set(flat)))

    def test_groups_ordered_by_first_member(self):
        nodes = [
            _node("a", "first"),
            _node("b", "second", parent="p1"),
            _node("c", "first"),
            _node("d", "third", parent="p1"),
        ]
        self.assertEqual(_ids(group_nodes(nodes)), [["a", "c"], ["b", "d"]])


if __name__ == "__main__":
    unittest.main()
