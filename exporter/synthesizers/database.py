"""RDS database instance synthesizer."""

from typing import List, Sequence

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
from exporter.utils import first_value, parse_number
from exporter.values import ResourceDescriptor

FALLBACK_DATABASE = aws_config.AWS_FALLBACK_NAMES["database"]


def _subnet_group_name(group: Sequence[PlacedNode], ctx: SynthesisContext) -> str:
    for parent_id in parent_ids(group):
        for node in ctx.snapshot.children_of(parent_id, aws_config.RDS_SUBNET_GROUP):
            name = text(node.properties.get("subnetGroupName"))
            if name:
                return name
    return ""


def synthesize_db_instance(
    group: Sequence[PlacedNode], ctx: SynthesisContext
) -> List[ResourceDescriptor]:
    merged = merge_properties(group)
    identifier = (
        identity(ctx.snapshot, group, "dbInstanceIdentifier", merged, use_display_name=True)
        or FALLBACK_DATABASE
    )
    storage = parse_number(first_value(merged.get("allocatedStorage")))
    if storage is None or storage == "":
        storage = aws_config.DEFAULT_DB_STORAGE
    properties = {
        "identifier": identifier,
        "engine": text(merged.get("engine")) or aws_config.DEFAULT_DB_ENGINE,
        "engineVersion": text(merged.get("engineVersion")),
        "instanceClass": text(merged.get("instanceClass"))
        or aws_config.DEFAULT_DB_INSTANCE_CLASS,
        "allocatedStorage": storage,
        "dbName": aws_config.DEFAULT_DB_NAME,
        "username": aws_config.DEFAULT_DB_USERNAME,
        "password": aws_config.DEFAULT_DB_PASSWORD,
        "dbSubnetGroupName": _subnet_group_name(group, ctx),
        "publiclyAccessible": flag(merged.get("publiclyAccessible")),
        "skipFinalSnapshot": True,
        "tags": ctx.tags(identifier),
    }
    return [
        ResourceDescriptor(
            "aws_db_instance", resource_name(identifier, FALLBACK_DATABASE), properties
        )
    ]
