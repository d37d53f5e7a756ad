"""Connection-based reference discovery.

Parent/child nesting only captures ownership. Other relationships (the subnet
an instance lives in, the bucket a CDN distribution serves) are expressed by
drawing a connection between the two nodes. The resolver walks those
connections in either direction and never raises: anything it cannot resolve
comes back empty.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from exporter.config import cloud_config_aws as aws_config
from exporter.snapshot import GraphSnapshot, PlacedNode
from exporter.utils import is_blank

logger = logging.getLogger(__name__)

# Subnet identity in preference order
SUBNET_IDENTITY_KEYS = ["subnetId", "subnetName", "subnetCidr"]


class ReferenceResolver:
    def __init__(self, snapshot: GraphSnapshot):
        self.snapshot = snapshot

    def connected_nodes(self, node_id: str) -> List[PlacedNode]:
        """Nodes at the other end of every connection touching ``node_id``.

        Connections pointing at nodes missing from the snapshot are skipped.
        """
        result = []
        for connection in self.snapshot.connections:
            other_id = connection.other_end(node_id)
            if other_id is None or other_id == node_id:
                continue
            other = self.snapshot.get(other_id)
            if other is None:
                logger.debug(
                    f"Connection {connection.id} points at missing node {other_id}"
                )
                continue
            if other not in result:
                result.append(other)
        return result

    def connected_of_kind(
        self, node_ids: Iterable[str], kinds: Sequence[str]
    ) -> Optional[PlacedNode]:
        """First node of one of ``kinds`` connected to any of ``node_ids``."""
        for node_id in node_ids:
            for other in self.connected_nodes(node_id):
                if other.kind in kinds:
                    return other
        return None

    def resolve_subnet(self, node_id: str) -> str:
        """Subnet identifier for the subnet connected to ``node_id``.

        Prefers the subnet's explicit id, then its name, then its CIDR.
        Returns an empty string when no subnet is connected.
        """
        subnet = self.connected_of_kind([node_id], [aws_config.VPC_SUBNET])
        if subnet is None:
            return ""
        for key in SUBNET_IDENTITY_KEYS:
            value = subnet.properties.get(key)
            if not is_blank(value):
                return str(value).strip()
        return ""

    def resolve_group_subnet(self, nodes: Iterable[PlacedNode]) -> str:
        for node in nodes:
            subnet = self.resolve_subnet(node.id)
            if subnet:
                return subnet
        return ""
