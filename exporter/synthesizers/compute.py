"""Compute-side synthesizers: EC2 instances, security groups, Elastic IPs and
Lambda functions."""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from exporter.config import cloud_config_aws as aws_config
from exporter.merger import merge_properties
from exporter.snapshot import PlacedNode, SecurityGroupDefinition
from exporter.synthesizers.common import (
    SynthesisContext,
    flag,
    identity,
    parent_ids,
    resource_name,
    text,
)
from exporter.utils import first_value, parse_number, split_csv
from exporter.values import Reference, ResourceDescriptor

logger = logging.getLogger(__name__)

FALLBACK_NAMES = aws_config.AWS_FALLBACK_NAMES
WELL_KNOWN_PORTS = aws_config.AWS_WELL_KNOWN_PORTS

_PORT_PATTERN = re.compile(r"\b(\d{1,5})\b")


def parse_ingress_rules(rules_text: Any) -> List[Dict[str, Any]]:
    """Extract TCP ingress rules from free-text such as ``"SSH: 22, HTTP: 80"``.

    Every port number found becomes one rule open to ``0.0.0.0/0``. Ports
    22, 80 and 443 are labelled SSH, HTTP and HTTPS, others ``Port N``.
    Repeated ports and numbers outside 1-65535 are ignored.
    """
    if isinstance(rules_text, list):
        rules_text = ", ".join(str(item) for item in rules_text if item is not None)
    if not rules_text:
        return []
    rules: List[Dict[str, Any]] = []
    seen = set()
    for match in _PORT_PATTERN.finditer(str(rules_text)):
        port = int(match.group(1))
        if port < 1 or port > 65535 or port in seen:
            continue
        seen.add(port)
        rules.append(
            {
                "description": WELL_KNOWN_PORTS.get(port, f"Port {port}"),
                "protocol": "tcp",
                "fromPort": port,
                "toPort": port,
                "cidr": aws_config.DEFAULT_INGRESS_CIDR,
            }
        )
    return rules


def _rule_block(rule: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a ``{protocol, fromPort, toPort, cidr}`` rule as an ingress/egress block."""
    cidr = rule.get("cidr") or rule.get("cidrBlock")
    cidr_blocks = rule.get("cidrBlocks") or ([cidr] if cidr else [])
    return {
        "description": rule.get("description") or None,
        "protocol": str(rule.get("protocol", "tcp")),
        "fromPort": parse_number(rule.get("fromPort", 0)),
        "toPort": parse_number(rule.get("toPort", 0)),
        "cidrBlocks": list(cidr_blocks),
    }


# --- Security groups -------------------------------------------------------


def security_group_label(group: Sequence[PlacedNode], ctx: SynthesisContext) -> str:
    return (
        identity(ctx.snapshot, group, "groupName", use_display_name=True)
        or FALLBACK_NAMES["security_group"]
    )


def security_group_name(group: Sequence[PlacedNode], ctx: SynthesisContext) -> str:
    return resource_name(
        security_group_label(group, ctx), FALLBACK_NAMES["security_group"]
    )


def synthesize_security_group(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> List[ResourceDescriptor]:
    merged = merge_properties(group)
    label = security_group_label(group, ctx)
    rules = parse_ingress_rules(merged.get("inboundRules"))
    properties = {
        "name": label,
        "description": text(merged.get("description")),
        "ingress": [_rule_block(rule) for rule in rules],
        # No egress rules: all outbound traffic is denied
        "egress": [],
        "tags": ctx.tags(label),
    }
    return [
        ResourceDescriptor(
            "aws_security_group",
            resource_name(label, FALLBACK_NAMES["security_group"]),
            properties,
        )
    ]


def security_group_from_catalog(
    definition: SecurityGroupDefinition, ctx: SynthesisContext
) -> ResourceDescriptor:
    """Synthesize a catalog security group that an instance refers to by name."""
    label = definition.name or FALLBACK_NAMES["security_group"]
    properties = {
        "name": label,
        "description": definition.description,
        "vpcId": definition.vpc_id,
        "ingress": [_rule_block(rule) for rule in definition.ingress],
        "egress": [_rule_block(rule) for rule in definition.egress],
        "tags": ctx.tags(label),
    }
    return ResourceDescriptor(
        "aws_security_group",
        resource_name(label, FALLBACK_NAMES["security_group"]),
        properties,
    )


# --- Elastic IPs -----------------------------------------------------------


def elastic_ip_name(group: Sequence[PlacedNode], ctx: SynthesisContext) -> str:
    label = identity(ctx.snapshot, group, "name", use_display_name=True)
    return resource_name(label, FALLBACK_NAMES["elastic_ip"])


def eip_association(eip_name: str, instance_name: str) -> ResourceDescriptor:
    return ResourceDescriptor(
        "aws_eip_association",
        f"{eip_name}_association",
        {
            "instanceId": Reference.to("aws_instance", instance_name, "id"),
            "allocationId": Reference.to("aws_eip", eip_name, "id"),
        },
    )


def _related_nodes(
    group: Sequence[PlacedNode], ctx: SynthesisContext, kind: str
) -> List[PlacedNode]:
    """Nodes of ``kind`` sharing a parent with, or connected to, the group."""
    related: List[PlacedNode] = []
    for parent_id in parent_ids(group):
        for node in ctx.snapshot.children_of(parent_id, kind):
            if node not in related:
                related.append(node)
    for member in group:
        for node in ctx.resolver.connected_nodes(member.id):
            if node.kind == kind and node not in related:
                related.append(node)
    return related


def synthesize_elastic_ip(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> List[ResourceDescriptor]:
    merged = merge_properties(group)
    name = elastic_ip_name(group, ctx)
    label = identity(ctx.snapshot, group, "name", merged, use_display_name=True)
    domain = "standard" if text(merged.get("domain")).lower() == "standard" else "vpc"
    descriptors = [
        ResourceDescriptor(
            "aws_eip",
            name,
            {"domain": domain, "tags": ctx.tags(label or name)},
        )
    ]
    for instance in _related_nodes(group, ctx, aws_config.EC2_INSTANCE):
        instance_group = ctx.group_containing("compute", instance.id)
        if instance_group is None:
            continue
        descriptors.append(eip_association(name, instance_name(instance_group, ctx)))
        break
    else:
        logger.debug(f"Elastic IP {name} is not attached to any instance")
    return descriptors


# --- EC2 instances ---------------------------------------------------------


def instance_label(group: Sequence[PlacedNode], ctx: SynthesisContext) -> str:
    return (
        identity(ctx.snapshot, group, "name", use_display_name=True)
        or FALLBACK_NAMES["compute"]
    )


def instance_name(group: Sequence[PlacedNode], ctx: SynthesisContext) -> str:
    return resource_name(instance_label(group, ctx), FALLBACK_NAMES["compute"])


def _root_block_device(merged: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    device = {
        "volumeType": text(merged.get("volumeType")),
        "volumeSize": parse_number(first_value(merged.get("size"))),
        "encrypted": flag(merged.get("encrypted")),
    }
    device = {k: v for k, v in device.items() if v is not None and v != ""}
    return device or None


def _security_group_refs(
    group: Sequence[PlacedNode], merged: Dict[str, Any], ctx: SynthesisContext
) -> List[Reference]:
    refs: List[Reference] = []

    def add(name: str) -> None:
        ref = Reference.to("aws_security_group", name, "id")
        if ref not in refs:
            refs.append(ref)

    for sg_node in _related_nodes(group, ctx, aws_config.SECURITY_GROUP):
        sg_group = ctx.group_containing("security_group", sg_node.id)
        if sg_group is not None:
            add(security_group_name(sg_group, ctx))

    node_groups = {
        security_group_label(g, ctx): security_group_name(g, ctx)
        for g in ctx.groups.get("security_group", [])
    }
    for requested in split_csv(merged.get("securityGroups")):
        if requested in node_groups:
            add(node_groups[requested])
            continue
        definition = ctx.snapshot.security_group_named(requested)
        if definition is None:
            logger.debug(f"Security group '{requested}' not found on canvas or in catalog")
            continue
        descriptor = ctx.catalog_groups.get(requested)
        if descriptor is None:
            descriptor = security_group_from_catalog(definition, ctx)
            ctx.catalog_groups[requested] = descriptor
        add(descriptor.name)
    return refs


def synthesize_instance(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> List[ResourceDescriptor]:
    merged = merge_properties(group)
    label = identity(ctx.snapshot, group, "name", merged, use_display_name=True)
    label = label or FALLBACK_NAMES["compute"]
    name = resource_name(label, FALLBACK_NAMES["compute"])
    security_groups = _security_group_refs(group, merged, ctx)
    properties = {
        "ami": text(merged.get("ami")) or aws_config.DEFAULT_AMI,
        "instanceType": text(merged.get("instanceType"))
        or aws_config.DEFAULT_INSTANCE_TYPE,
        "keyName": text(merged.get("keyPair")) or text(merged.get("keyName")),
        "subnetId": ctx.resolver.resolve_group_subnet(group),
        "vpcSecurityGroupIds": security_groups or None,
        "tags": ctx.tags(label),
        "rootBlockDevice": _root_block_device(merged),
    }
    descriptors = [ResourceDescriptor("aws_instance", name, properties)]
    for eip_node in _related_nodes(group, ctx, aws_config.ELASTIC_IP):
        eip_group = ctx.group_containing("elastic_ip", eip_node.id)
        if eip_group is not None:
            descriptors.append(eip_association(elastic_ip_name(eip_group, ctx), name))
    return descriptors


# --- Lambda functions ------------------------------------------------------


def synthesize_lambda_function(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> List[ResourceDescriptor]:
    merged = merge_properties(group)
    label = identity(
        ctx.snapshot, group, "functionName", merged, use_display_name=True
    )
    label = label or FALLBACK_NAMES["function"]
    name = resource_name(label, FALLBACK_NAMES["function"])
    runtime = identity(ctx.snapshot, group, "runtime", merged)
    role = text(merged.get("role")) or identity(ctx.snapshot, group, "role", merged)
    properties = {
        "functionName": label,
        "role": role or aws_config.DEFAULT_LAMBDA_ROLE,
        "handler": text(merged.get("handler")) or aws_config.DEFAULT_LAMBDA_HANDLER,
        "runtime": runtime or aws_config.DEFAULT_LAMBDA_RUNTIME,
        "filename": f"lambda_code/{name}.zip",
        "memorySize": parse_number(first_value(merged.get("memory"))),
        "timeout": parse_number(first_value(merged.get("timeout"))),
        "tags": ctx.tags(label),
    }
    return [ResourceDescriptor("aws_lambda_function", name, properties)]
