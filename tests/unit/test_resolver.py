"""Unit tests for exporter/resolver.py"""

import sys
import unittest
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from exporter.resolver import ReferenceResolver
from exporter.snapshot import GraphSnapshot
from tests.fixtures.snapshot_samples import connection, node, snapshot_dict


def _resolver(nodes, connections=None):
    return ReferenceResolver(GraphSnapshot.from_dict(snapshot_dict(nodes, connections)))


class TestConnectedNodes(unittest.TestCase):
    """Test symmetric connection walking."""

    def test_symmetric(self):
        resolver = _resolver(
            [node("a", "ec2-instance"), node("b", "vpc-subnet")],
            [connection("c1", "a", "b")],
        )
        self.assertEqual([n.id for n in resolver.connected_nodes("a")], ["b"])
        self.assertEqual([n.id for n in resolver.connected_nodes("b")], ["a"])

    def test_dangling_connection_skipped(self):
        resolver = _resolver(
            [node("a", "ec2-instance")], [connection("c1", "a", "missing")]
        )
        self.assertEqual(resolver.connected_nodes("a"), [])

    def test_self_loop_and_duplicates_ignored(self):
        resolver = _resolver(
            [node("a", "ec2-instance"), node("b", "vpc-subnet")],
            [
                connection("c1", "a", "a"),
                connection("c2", "a", "b"),
                connection("c3", "b", "a"),
            ],
        )
        self.assertEqual([n.id for n in resolver.connected_nodes("a")], ["b"])

    def test_connected_of_kind(self):
        resolver = _resolver(
            [node("a", "ec2-instance"), node("b", "s3-bucket"), node("c", "vpc-subnet")],
            [connection("c1", "a", "b"), connection("c2", "c", "a")],
        )
        self.assertEqual(resolver.connected_of_kind(["a"], ["vpc-subnet"]).id, "c")
        self.assertIsNone(resolver.connected_of_kind(["a"], ["vpc"]))


class TestResolveSubnet(unittest.TestCase):
    """Instance subnet resolution through connections."""

    def test_prefers_subnet_id(self):
        resolver = _resolver(
            [
                node("i", "ec2-instance"),
                node("s", "vpc-subnet", properties={
                    "subnetId": "subnet-123", "subnetName": "public", "subnetCidr": "10.0.1.0/24",
                }),
            ],
            [connection("c1", "i", "s")],
        )
        self.assertEqual(resolver.resolve_subnet("i"), "subnet-123")

    def test_falls_back_to_name_then_cidr(self):
        resolver = _resolver(
            [
                node("i", "ec2-instance"),
                node("s", "vpc-subnet", properties={"subnetName": " ", "subnetCidr": "10.0.1.0/24"}),
            ],
            [connection("c1", "s", "i")],
        )
        self.assertEqual(resolver.resolve_subnet("i"), "10.0.1.0/24")

    def test_no_connection_gives_empty(self):
        resolver = _resolver(
            [node("i", "ec2-instance"), node("s", "vpc-subnet", properties={"subnetId": "x"})]
        )
        self.assertEqual(resolver.resolve_subnet("i"), "")

    def test_subnet_without_identity_gives_empty(self):
        resolver = _resolver(
            [node("i", "ec2-instance"), node("s", "vpc-subnet")],
            [connection("c1", "i", "s")],
        )
        self.assertEqual(resolver.resolve_subnet("i"), "")

    def test_group_subnet_uses_first_resolving_member(self):
        resolver = _resolver(
            [
                node("i1", "ec2-instance"),
                node("i2", "ec2-instance"),
                node("s", "vpc-subnet", properties={"subnetName": "private-b"}),
            ],
            [connection("c1", "i2", "s")],
        )
        snapshot = resolver.snapshot
        group = [snapshot.get("i1"), snapshot.get("i2")]
        self.assertEqual(resolver.resolve_group_subnet(group), "private-b")


if __name__ == "__main__":
    unittest.main()
