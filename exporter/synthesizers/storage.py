"""S3 bucket synthesizer.

Current AWS provider versions model most bucket settings as separate
resources. A single bucket on the canvas therefore becomes the base
``aws_s3_bucket`` plus one auxiliary resource per configured setting, each
pointing back at the bucket through a reference.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

from exporter.config import cloud_config_aws as aws_config
from exporter.merger import merge_properties
from exporter.snapshot import PlacedNode
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

FALLBACK_BUCKET = aws_config.AWS_FALLBACK_NAMES["storage"]

CORS_FIELDS = [
    "corsAllowedOrigins",
    "corsAllowedMethods",
    "corsAllowedHeaders",
    "corsExposeHeaders",
    "corsMaxAgeSeconds",
]


def bucket_label(group: Sequence[PlacedNode], ctx: SynthesisContext) -> str:
    return identity(ctx.snapshot, group, "bucketName") or FALLBACK_BUCKET


def bucket_name_for_node(node: PlacedNode, ctx: SynthesisContext) -> str:
    """Bucket name for a single bucket node, used by the CDN synthesizer."""
    group = ctx.group_containing("storage", node.id) or [node]
    return identity(ctx.snapshot, group, "bucketName")


def _finite_number(value: Any) -> Optional[Any]:
    value = parse_number(first_value(value))
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def _days(value: Any) -> Optional[int]:
    number = _finite_number(value)
    return None if number is None else int(number)


def _lifecycle_node(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> Optional[PlacedNode]:
    for parent_id in parent_ids(group):
        siblings = ctx.snapshot.children_of(parent_id, aws_config.S3_LIFECYCLE)
        if siblings:
            return siblings[0]
    return ctx.resolver.connected_of_kind(
        [n.id for n in group], [aws_config.S3_LIFECYCLE]
    )


def _lifecycle(
    name: str, bucket: Reference, group: Sequence[PlacedNode], ctx: SynthesisContext
) -> Optional[ResourceDescriptor]:
    node = _lifecycle_node(group, ctx)
    if node is None:
        return None
    transition = _days(node.properties.get("transitionDays"))
    expiration = _days(node.properties.get("expirationDays"))
    if transition is None and expiration is None:
        return None
    rule: Dict[str, Any] = {"id": f"{name}-lifecycle", "status": "Enabled", "filter": {}}
    if transition is not None:
        rule["transition"] = {
            "days": transition,
            "storageClass": aws_config.LIFECYCLE_TRANSITION_STORAGE_CLASS,
        }
    if expiration is not None:
        rule["expiration"] = {"days": expiration}
    return ResourceDescriptor(
        "aws_s3_bucket_lifecycle_configuration",
        f"{name}_lifecycle",
        {"bucket": bucket, "rule": rule},
    )


def _cors(name: str, bucket: Reference, merged: Dict[str, Any]):
    max_age = _finite_number(merged.get("corsMaxAgeSeconds"))
    if max_age is not None and max_age <= 0:
        max_age = None
    rule = {
        "allowedOrigins": split_csv(merged.get("corsAllowedOrigins")),
        "allowedMethods": split_csv(merged.get("corsAllowedMethods")),
        "allowedHeaders": split_csv(merged.get("corsAllowedHeaders")),
        "exposeHeaders": split_csv(merged.get("corsExposeHeaders")),
        "maxAgeSeconds": max_age,
    }
    rule = {k: v for k, v in rule.items() if v not in (None, [])}
    if not rule:
        return None
    if "allowedMethods" not in rule:
        rule["allowedMethods"] = ["GET"]
    if "allowedOrigins" not in rule:
        rule["allowedOrigins"] = ["*"]
    return ResourceDescriptor(
        "aws_s3_bucket_cors_configuration",
        f"{name}_cors",
        {"bucket": bucket, "corsRule": rule},
    )


def synthesize_bucket(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> List[ResourceDescriptor]:
    merged = merge_properties(group)
    label = bucket_label(group, ctx)
    name = resource_name(label, FALLBACK_BUCKET)
    bucket_ref = Reference.to("aws_s3_bucket", name, "id")

    base = ResourceDescriptor(
        "aws_s3_bucket",
        name,
        {
            "bucket": label,
            "forceDestroy": bool(flag(merged.get("forceDestroy"))),
            "objectLockEnabled": True if flag(merged.get("objectLockEnabled")) else None,
            "tags": ctx.tags(label),
        },
    )
    descriptors = [base]

    block_public = flag(merged.get("publicAccess"))
    if block_public is not None:
        descriptors.append(
            ResourceDescriptor(
                "aws_s3_bucket_public_access_block",
                f"{name}_public_access",
                {
                    "bucket": bucket_ref,
                    "blockPublicAcls": block_public,
                    "blockPublicPolicy": block_public,
                    "ignorePublicAcls": block_public,
                    "restrictPublicBuckets": block_public,
                },
            )
        )

    acl = text(merged.get("acl"))
    if acl:
        ownership = ResourceDescriptor(
            "aws_s3_bucket_ownership_controls",
            f"{name}_ownership",
            {
                "bucket": bucket_ref,
                "rule": {"objectOwnership": aws_config.DEFAULT_OBJECT_OWNERSHIP},
            },
        )
        descriptors.append(ownership)
        descriptors.append(
            ResourceDescriptor(
                "aws_s3_bucket_acl",
                f"{name}_acl",
                {
                    "bucket": bucket_ref,
                    "acl": acl,
                    "dependsOn": [Reference.resource(ownership.type, ownership.name)],
                },
            )
        )

    versioning = flag(merged.get("versioning"))
    if versioning is not None:
        descriptors.append(
            ResourceDescriptor(
                "aws_s3_bucket_versioning",
                f"{name}_versioning",
                {
                    "bucket": bucket_ref,
                    "versioningConfiguration": {
                        "status": "Enabled" if versioning else "Suspended"
                    },
                },
            )
        )

    if flag(merged.get("acceleration")):
        descriptors.append(
            ResourceDescriptor(
                "aws_s3_bucket_accelerate_configuration",
                f"{name}_acceleration",
                {"bucket": bucket_ref, "status": "Enabled"},
            )
        )

    algorithm = text(merged.get("sseAlgorithm"))
    kms_key = text(merged.get("kmsKeyId"))
    if algorithm or kms_key:
        rule: Dict[str, Any] = {
            "applyServerSideEncryptionByDefault": {
                "sseAlgorithm": algorithm or "aws:kms",
                "kmsMasterKeyId": kms_key,
            }
        }
        if flag(merged.get("bucketKeyEnabled")) is not None:
            rule["bucketKeyEnabled"] = flag(merged.get("bucketKeyEnabled"))
        descriptors.append(
            ResourceDescriptor(
                "aws_s3_bucket_server_side_encryption_configuration",
                f"{name}_encryption",
                {"bucket": bucket_ref, "rule": rule},
            )
        )

    logging_target = text(merged.get("loggingBucket"))
    if logging_target:
        descriptors.append(
            ResourceDescriptor(
                "aws_s3_bucket_logging",
                f"{name}_logging",
                {
                    "bucket": bucket_ref,
                    "targetBucket": logging_target,
                    "targetPrefix": text(merged.get("loggingPrefix")) or "log/",
                },
            )
        )

    if any(text(merged.get(key)) for key in CORS_FIELDS):
        cors = _cors(name, bucket_ref, merged)
        if cors is not None:
            descriptors.append(cors)

    index_document = text(merged.get("websiteIndexDocument"))
    error_document = text(merged.get("websiteErrorDocument"))
    if index_document or error_document:
        website: Dict[str, Any] = {"bucket": bucket_ref}
        website["indexDocument"] = {"suffix": index_document or "index.html"}
        if error_document:
            website["errorDocument"] = {"key": error_document}
        descriptors.append(
            ResourceDescriptor(
                "aws_s3_bucket_website_configuration", f"{name}_website", website
            )
        )

    lifecycle = _lifecycle(name, bucket_ref, group, ctx)
    if lifecycle is not None:
        descriptors.append(lifecycle)

    logger.debug(f"Bucket {name}: {len(descriptors) - 1} auxiliary resources")
    return descriptors
