"""Export compiler for canvasform.

Drives the pipeline from a canvas snapshot to Terraform text:

    snapshot -> per-family grouping -> synthesizers -> HCL rendering

Families are processed in the order declared by the provider configuration
(compute, security groups, Elastic IPs, storage, networks, CDN, then
functions and databases) so the output order is stable. The compiler is pure:
it performs no I/O and never raises for malformed canvas data.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from exporter import hcl
from exporter.config_loader import ExportSettings, load_config
from exporter.grouper import group_nodes
from exporter.resolver import ReferenceResolver
from exporter.snapshot import GraphSnapshot, PlacedNode
from exporter.synthesizers import SynthesisContext, get_synthesizer
from exporter.synthesizers.network import derived_vpc_roots, is_vpc_root
from exporter.utils import is_blank
from exporter.values import ResourceDescriptor

logger = logging.getLogger(__name__)


def family_nodes(snapshot: GraphSnapshot, family: Dict[str, Any]) -> List[PlacedNode]:
    """Nodes taking part in a family's grouping, in placement order."""
    if family["family"] == "network":
        roots = [n for n in snapshot.by_kind(*family["kinds"]) if is_vpc_root(n)]
        return roots or derived_vpc_roots(snapshot)
    return snapshot.by_kind(*family["kinds"])


def build_groups(
    snapshot: GraphSnapshot, families: List[Dict[str, Any]]
) -> Dict[str, List[List[PlacedNode]]]:
    """Group each family's nodes, keeping only groups with a primary node."""
    result: Dict[str, List[List[PlacedNode]]] = {}
    for family in families:
        groups = group_nodes(family_nodes(snapshot, family))
        kept = [g for g in groups if any(n.kind == family["primary"] for n in g)]
        if len(kept) != len(groups):
            logger.debug(
                f"Family {family['family']}: dropped {len(groups) - len(kept)} "
                f"groups without a {family['primary']} node"
            )
        result[family["family"]] = kept
    return result


def has_exportable_nodes(
    snapshot: GraphSnapshot, settings: Optional[ExportSettings] = None
) -> bool:
    """True if at least one family would produce a resource."""
    settings = settings or ExportSettings.defaults()
    config = load_config(settings.provider)
    groups = build_groups(snapshot, config.AWS_RESOURCE_FAMILIES)
    return any(groups.values())


def resolve_region(snapshot: GraphSnapshot, settings: ExportSettings) -> str:
    """First ``region`` property found on any node, else the configured default."""
    for node in snapshot.nodes:
        region = node.properties.get("region")
        if isinstance(region, str) and not is_blank(region):
            return region.strip()
    if settings.default_region:
        return settings.default_region
    return load_config(settings.provider).DEFAULT_REGION


class _DescriptorList:
    """Ordered descriptors, unique by ``(type, name)``."""

    def __init__(self):
        self.items: List[ResourceDescriptor] = []
        self._index: Dict[Tuple[str, str], ResourceDescriptor] = {}

    def add(self, descriptor: ResourceDescriptor) -> None:
        key = (descriptor.type, descriptor.name)
        existing = self._index.get(key)
        if existing is None:
            self._index[key] = descriptor
            self.items.append(descriptor)
        elif existing.properties != descriptor.properties:
            logger.warning(
                f"Two canvas resources map to {descriptor.address}; keeping the first"
            )


def compile_resources(
    snapshot: GraphSnapshot, settings: Optional[ExportSettings] = None
) -> List[ResourceDescriptor]:
    """Synthesize every resource descriptor for a snapshot.

    Returns an empty list when nothing on the canvas is exportable.
    """
    settings = settings or ExportSettings.defaults()
    config = load_config(settings.provider)
    families = config.AWS_RESOURCE_FAMILIES
    ctx = SynthesisContext(
        snapshot=snapshot,
        resolver=ReferenceResolver(snapshot),
        settings=settings,
        groups=build_groups(snapshot, families),
    )
    descriptors = _DescriptorList()
    for family in families:
        name = family["family"]
        synthesize = get_synthesizer(name)
        for group in ctx.groups[name]:
            for descriptor in synthesize(group, ctx):
                descriptors.add(descriptor)
        if name == "security_group":
            # Catalog groups requested by instances sit with the canvas groups
            for descriptor in ctx.catalog_groups.values():
                descriptors.add(descriptor)
    logger.info(f"Compiled {len(descriptors.items)} resources from {len(snapshot.nodes)} nodes")
    return descriptors.items


def export_terraform(
    snapshot: GraphSnapshot, settings: Optional[ExportSettings] = None
) -> str:
    """Render the full Terraform document: provider preamble plus resources."""
    settings = settings or ExportSettings.defaults()
    config = load_config(settings.provider)
    preamble = hcl.render_provider(
        config.PROVIDER_BLOCK, resolve_region(snapshot, settings)
    )
    blocks = [hcl.render_resource(d) for d in compile_resources(snapshot, settings)]
    return hcl.render_document(preamble, blocks)


def export_json(
    snapshot: GraphSnapshot, settings: Optional[ExportSettings] = None
) -> str:
    """Render ``{"resources": [{type, name, properties, hcl}]}`` as JSON text."""
    resources = [
        {
            "type": d.type,
            "name": d.name,
            "properties": hcl.json_body(d.properties, hcl.block_keys_for(d.type)),
            "hcl": hcl.render_resource(d),
        }
        for d in compile_resources(snapshot, settings)
    ]
    return json.dumps({"resources": resources}, indent=2)
