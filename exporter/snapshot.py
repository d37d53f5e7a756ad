"""Canvas snapshot model for canvasform.

The designer hands the compiler a materialized copy of its state: placed
nodes, connections and the security-group catalog. This module normalizes
that JSON into immutable typed records and offers the lookups the rest of the
compiler needs (by id, by kind, by parent).
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from exporter.exceptions import SnapshotError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedNode:
    """A single entity on the canvas.

    ``kind`` is the sub-service id when present, otherwise the icon id, and
    finally the service id, matching how the designer identifies nodes.
    """

    id: str
    kind: str
    display_name: str = ""
    parent_node_id: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict, compare=False)
    service_id: Optional[str] = None
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0
    icon_svg: str = ""
    icon_image: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlacedNode":
        icon = data.get("icon") if isinstance(data.get("icon"), dict) else {}
        properties = data.get("properties")
        kind = (
            data.get("kind")
            or data.get("subServiceId")
            or icon.get("id")
            or data.get("serviceId")
            or ""
        )
        return cls(
            id=str(data.get("id", "")),
            kind=str(kind),
            display_name=str(data.get("displayName") or icon.get("name") or ""),
            parent_node_id=data.get("parentNodeId") or None,
            properties=dict(properties) if isinstance(properties, dict) else {},
            service_id=data.get("serviceId"),
            x=data.get("x", 0) or 0,
            y=data.get("y", 0) or 0,
            width=data.get("width", icon.get("width", 0)) or 0,
            height=data.get("height", icon.get("height", 0)) or 0,
            icon_svg=icon.get("svg") or "",
            icon_image=icon.get("image") or "",
        )


@dataclass(frozen=True)
class Connection:
    """An undirected edge between two placed nodes."""

    id: str
    from_node_id: str
    to_node_id: str
    label: str = ""
    color: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        return cls(
            id=str(data.get("id", "")),
            from_node_id=str(data.get("fromNodeId", "")),
            to_node_id=str(data.get("toNodeId", "")),
            label=data.get("label") or "",
            color=data.get("color") or "",
        )

    def other_end(self, node_id: str) -> Optional[str]:
        """Return the opposite endpoint if ``node_id`` is on this edge."""
        if self.from_node_id == node_id:
            return self.to_node_id
        if self.to_node_id == node_id:
            return self.from_node_id
        return None


@dataclass(frozen=True)
class SecurityGroupDefinition:
    """A named security group from the designer's catalog."""

    id: str
    name: str
    description: str = ""
    vpc_id: str = ""
    ingress: Tuple[Dict[str, Any], ...] = ()
    egress: Tuple[Dict[str, Any], ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecurityGroupDefinition":
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            description=data.get("description") or "",
            vpc_id=data.get("vpcId") or "",
            ingress=tuple(r for r in data.get("ingress") or [] if isinstance(r, dict)),
            egress=tuple(r for r in data.get("egress") or [] if isinstance(r, dict)),
        )


class GraphSnapshot:
    """Immutable view over nodes, connections and the security-group catalog."""

    def __init__(
        self,
        nodes: Iterable[PlacedNode] = (),
        connections: Iterable[Connection] = (),
        security_groups: Iterable[SecurityGroupDefinition] = (),
    ):
        self.nodes: Tuple[PlacedNode, ...] = tuple(nodes)
        self.connections: Tuple[Connection, ...] = tuple(connections)
        self.security_groups: Tuple[SecurityGroupDefinition, ...] = tuple(
            security_groups
        )
        self._by_id = {}
        for node in self.nodes:
            # First placement wins if the designer ever hands over duplicates
            self._by_id.setdefault(node.id, node)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphSnapshot":
        """Build a snapshot from the designer's export document.

        Accepts ``nodes`` or ``placedNodes`` for the node list and
        ``securityGroups`` or ``securityGroupCatalog`` for the catalog.

        Raises:
            SnapshotError: If the document or one of its lists has the wrong type
        """
        if not isinstance(data, dict):
            raise SnapshotError(
                "Snapshot must be a JSON object", {"type": type(data).__name__}
            )
        raw_nodes = _list_field(data, "nodes", "placedNodes")
        raw_connections = _list_field(data, "connections")
        raw_groups = _list_field(data, "securityGroups", "securityGroupCatalog")
        nodes = [PlacedNode.from_dict(n) for n in raw_nodes if isinstance(n, dict)]
        connections = [
            Connection.from_dict(c) for c in raw_connections if isinstance(c, dict)
        ]
        groups = [
            SecurityGroupDefinition.from_dict(g)
            for g in raw_groups
            if isinstance(g, dict)
        ]
        logger.debug(
            f"Snapshot loaded: {len(nodes)} nodes, {len(connections)} connections, "
            f"{len(groups)} catalog security groups"
        )
        return cls(nodes, connections, groups)

    @classmethod
    def from_json(cls, text: str) -> "GraphSnapshot":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: str) -> "GraphSnapshot":
        try:
            with open(path, "r") as file:
                text = file.read()
        except OSError as e:
            raise SnapshotError(f"Could not read snapshot: {e}", {"path": path}) from e
        return cls.from_json(text)

    def get(self, node_id: Optional[str]) -> Optional[PlacedNode]:
        if not node_id:
            return None
        return self._by_id.get(node_id)

    def parent_of(self, node: PlacedNode) -> Optional[PlacedNode]:
        return self.get(node.parent_node_id)

    def by_kind(self, *kinds: str) -> List[PlacedNode]:
        """Nodes whose kind is one of ``kinds``, in placement order."""
        return [n for n in self.nodes if n.kind in kinds]

    def children_of(self, parent_id: Optional[str], *kinds: str) -> List[PlacedNode]:
        if not parent_id:
            return []
        return [
            n
            for n in self.nodes
            if n.parent_node_id == parent_id and (not kinds or n.kind in kinds)
        ]

    def security_group_named(self, name: str) -> Optional[SecurityGroupDefinition]:
        for group in self.security_groups:
            if group.name == name:
                return group
        return None


def _list_field(data: Dict[str, Any], *keys: str) -> List[Any]:
    for key in keys:
        if key in data and data[key] is not None:
            value = data[key]
            if not isinstance(value, list):
                raise SnapshotError(f"Snapshot field '{key}' must be a list")
            return value
    return []
