"""Network synthesizers: VPCs and CloudFront distributions."""

import logging
import re
from typing import Dict, List, Sequence

from exporter.config import cloud_config_aws as aws_config
from exporter.merger import merge_properties
from exporter.snapshot import GraphSnapshot, PlacedNode
from exporter.synthesizers.common import (
    SynthesisContext,
    identity,
    resource_name,
    text,
)
from exporter.synthesizers.storage import bucket_name_for_node
from exporter.values import ResourceDescriptor

logger = logging.getLogger(__name__)

FALLBACK_NAMES = aws_config.AWS_FALLBACK_NAMES

_S3_DOMAIN = re.compile(r"^([a-z0-9\-_.]+)\.s3\.amazonaws\.com$", re.IGNORECASE)
_NON_DOMAIN_CHARS = re.compile(r"[^a-z0-9\-]", re.IGNORECASE)


def is_vpc_root(node: PlacedNode) -> bool:
    return node.kind == aws_config.VPC and not node.parent_node_id


def derived_vpc_roots(snapshot: GraphSnapshot) -> List[PlacedNode]:
    """VPC nodes reached through the parents of subnets, gateways and route
    tables, in the order their children were placed."""
    parents: Dict[str, PlacedNode] = {}
    for node in snapshot.by_kind(*aws_config.VPC_CHILD_KINDS):
        parent = snapshot.parent_of(node)
        if parent is not None and parent.kind == aws_config.VPC:
            parents.setdefault(parent.id, parent)
    return list(parents.values())


def synthesize_vpc(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> List[ResourceDescriptor]:
    merged = merge_properties(group)
    label = text(merged.get("vpcName")) or FALLBACK_NAMES["network"]
    properties = {
        "cidrBlock": text(merged.get("cidrBlock")) or aws_config.DEFAULT_VPC_CIDR,
        "enableDnsHostnames": True,
        "tags": ctx.tags(label),
    }
    return [
        ResourceDescriptor(
            "aws_vpc", resource_name(label, FALLBACK_NAMES["network"]), properties
        )
    ]


def bucket_from_domain(domain: str) -> str:
    """Recover a bucket name from an S3 website/REST domain.

    Examples:
        >>> bucket_from_domain("assets.s3.amazonaws.com")
        'assets'
        >>> bucket_from_domain("example.com")
        'example-com'
    """
    match = _S3_DOMAIN.match(domain)
    if match:
        return match.group(1)
    return _NON_DOMAIN_CHARS.sub("-", domain)


def _connected_bucket_name(group: Sequence[PlacedNode], ctx: SynthesisContext) -> str:
    bucket = ctx.resolver.connected_of_kind(
        [n.id for n in group], [aws_config.S3_BUCKET]
    )
    if bucket is None:
        return ""
    return (
        bucket_name_for_node(bucket, ctx)
        or bucket.display_name.strip()
        or "my_app_storage_bucket"
    )


def synthesize_distribution(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> List[ResourceDescriptor]:
    merged = merge_properties(group)
    label = (
        identity(ctx.snapshot, group, "distributionName", merged)
        or FALLBACK_NAMES["cdn"]
    )
    connected_bucket = _connected_bucket_name(group, ctx)
    if connected_bucket:
        origin_domain = f"{connected_bucket}{aws_config.S3_DOMAIN_SUFFIX}"
    else:
        origin_domain = (
            text(merged.get("originDomain")) or aws_config.DEFAULT_ORIGIN_DOMAIN
        )
    bucket_for_id = connected_bucket or bucket_from_domain(origin_domain)
    origin_id = "S3-" + bucket_for_id.replace("_", "-")

    properties = {
        "enabled": True,
        "isIpv6Enabled": True,
        "priceClass": text(merged.get("priceClass")),
        "origin": {"domainName": origin_domain, "originId": origin_id},
        "defaultCacheBehavior": {
            "targetOriginId": origin_id,
            "viewerProtocolPolicy": "redirect-to-https",
            "allowedMethods": ["GET", "HEAD", "OPTIONS"],
            "cachedMethods": ["GET", "HEAD"],
            "forwardedValues": {"queryString": False, "cookies": {"forward": "none"}},
        },
        "restrictions": {"geoRestriction": {"restrictionType": "none"}},
        "viewerCertificate": {"cloudfrontDefaultCertificate": True},
        "tags": ctx.tags(label),
    }
    return [
        ResourceDescriptor(
            "aws_cloudfront_distribution",
            resource_name(label, FALLBACK_NAMES["cdn"]),
            properties,
        )
    ]
