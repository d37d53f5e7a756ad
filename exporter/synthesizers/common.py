"""Shared helpers for the resource synthesizers."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from exporter.config_loader import ExportSettings
from exporter.merger import merge_properties
from exporter.resolver import ReferenceResolver
from exporter.snapshot import GraphSnapshot, PlacedNode
from exporter.utils import first_value, is_blank, sanitize_name
from exporter.values import ResourceDescriptor

logger = logging.getLogger(__name__)


@dataclass
class SynthesisContext:
    """Read-only state shared by every synthesizer during one compile.

    Attributes:
        snapshot: The full canvas snapshot, for cross-family lookups
        resolver: Connection walker over the same snapshot
        settings: Export settings (default tags etc.)
        groups: Resource groups per family name, computed before synthesis
    """

    snapshot: GraphSnapshot
    resolver: ReferenceResolver
    settings: ExportSettings
    groups: Dict[str, List[List[PlacedNode]]] = field(default_factory=dict)
    # Catalog security groups referenced by instances, keyed by catalog name
    catalog_groups: Dict[str, ResourceDescriptor] = field(default_factory=dict)

    def group_containing(self, family: str, node_id: str) -> Optional[List[PlacedNode]]:
        for group in self.groups.get(family, []):
            if any(node.id == node_id for node in group):
                return group
        return None

    def tags(self, name: str) -> Dict[str, Any]:
        tags: Dict[str, Any] = {"Name": name}
        for key, value in self.settings.default_tags.items():
            tags.setdefault(key, value)
        return tags


def text(value: Any) -> str:
    """Representative value as stripped text, or ``""``."""
    value = first_value(value)
    if is_blank(value):
        return ""
    return str(value).strip()


def identity(
    snapshot: GraphSnapshot,
    group: Sequence[PlacedNode],
    key: str,
    merged: Optional[Dict[str, Any]] = None,
    use_display_name: bool = False,
) -> str:
    """Resolve a group's human name.

    Order: the first parent carrying ``key``, then the group's own ``key``
    property, then (optionally) the first display name. Returns ``""`` when
    nothing is set so callers can apply their fallback constant.
    """
    for node in group:
        parent = snapshot.parent_of(node)
        if parent is not None:
            name = text(parent.properties.get(key))
            if name:
                return name
    if merged is None:
        merged = merge_properties(group)
    name = text(merged.get(key))
    if name:
        return name
    if use_display_name:
        for node in group:
            if node.display_name.strip():
                return node.display_name.strip()
    return ""


def resource_name(label: str, fallback: str) -> str:
    name = sanitize_name(label)
    return name or sanitize_name(fallback)


def flag(value: Any) -> Optional[bool]:
    """Interpret a merged property as a boolean, or None when unset.

    Accepts real booleans and the strings ``true``/``false``.
    """
    value = first_value(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


def parent_ids(group: Iterable[PlacedNode]) -> List[str]:
    ids: List[str] = []
    for node in group:
        if node.parent_node_id and node.parent_node_id not in ids:
            ids.append(node.parent_node_id)
    return ids
