"""Unit tests for exporter/synthesizers/network.py and database.py"""

import sys
import unittest
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from exporter.compiler import compile_resources
from exporter.hcl import render_resource
from exporter.snapshot import GraphSnapshot
from exporter.synthesizers.database import synthesize_db_instance
from exporter.synthesizers.network import (
    bucket_from_domain,
    synthesize_distribution,
    synthesize_vpc,
)
from tests.fixtures.snapshot_samples import (
    build_context,
    cdn_snapshot,
    ec2_stack_snapshot,
    node,
    snapshot_dict,
)


class TestVpcSynthesizer(unittest.TestCase):
    def test_root_vpc(self):
        ctx = build_context(ec2_stack_snapshot())
        self.assertEqual(len(ctx.groups["network"]), 1)
        [descriptor] = synthesize_vpc(ctx.groups["network"][0], ctx)
        self.assertEqual(descriptor.address, "aws_vpc.main_vpc")
        self.assertEqual(descriptor.properties["cidrBlock"], "10.1.0.0/16")
        self.assertIs(descriptor.properties["enableDnsHostnames"], True)
        self.assertEqual(descriptor.properties["tags"]["Name"], "Main VPC")

    def test_defaults(self):
        ctx = build_context(snapshot_dict([node("v", "vpc", root=True)]))
        [descriptor] = synthesize_vpc(ctx.groups["network"][0], ctx)
        self.assertEqual(descriptor.address, "aws_vpc.vpc")
        self.assertEqual(descriptor.properties["cidrBlock"], "10.0.0.0/16")

    def test_nested_vpc_derived_from_subnet_parent(self):
        """A VPC node with a parent is only exported through its children."""
        data = snapshot_dict(
            [
                node("region", "region", root=True),
                node("v", "vpc", parent="region", properties={"vpcName": "inner"}),
                node("s", "vpc-subnet", parent="v"),
            ]
        )
        descriptors = compile_resources(GraphSnapshot.from_dict(data))
        self.assertEqual([d.address for d in descriptors], ["aws_vpc.inner"])

    def test_subnet_alone_exports_nothing(self):
        data = snapshot_dict([node("s", "vpc-subnet")])
        self.assertEqual(compile_resources(GraphSnapshot.from_dict(data)), [])


class TestDistributionSynthesizer(unittest.TestCase):
    def test_origin_from_connected_bucket(self):
        ctx = build_context(cdn_snapshot())
        [descriptor] = synthesize_distribution(ctx.groups["cdn"][0], ctx)
        self.assertEqual(descriptor.address, "aws_cloudfront_distribution.static_site")
        origin = descriptor.properties["origin"]
        self.assertEqual(origin["domainName"], "site_assets.s3.amazonaws.com")
        self.assertEqual(origin["originId"], "S3-site-assets")
        self.assertEqual(
            descriptor.properties["defaultCacheBehavior"]["targetOriginId"], "S3-site-assets"
        )
        self.assertEqual(descriptor.properties["priceClass"], "PriceClass_100")

    def test_origin_domain_property_without_connection(self):
        ctx = build_context(cdn_snapshot(connect_bucket=False))
        [descriptor] = synthesize_distribution(ctx.groups["cdn"][0], ctx)
        origin = descriptor.properties["origin"]
        self.assertEqual(origin["domainName"], "example.com")
        self.assertEqual(origin["originId"], "S3-example-com")

    def test_default_origin(self):
        ctx = build_context(snapshot_dict([node("d", "cf-distribution")]))
        [descriptor] = synthesize_distribution(ctx.groups["cdn"][0], ctx)
        self.assertEqual(descriptor.name, "my_cdn_distribution")
        self.assertEqual(
            descriptor.properties["origin"],
            {
                "domainName": "my_app_storage_bucket.s3.amazonaws.com",
                "originId": "S3-my-app-storage-bucket",
            },
        )

    def test_rendered_blocks(self):
        ctx = build_context(cdn_snapshot())
        [descriptor] = synthesize_distribution(ctx.groups["cdn"][0], ctx)
        hcl = render_resource(descriptor)
        for block in (
            "  origin {",
            "  default_cache_behavior {",
            "    forwarded_values {",
            "      cookies {",
            "  restrictions {",
            "    geo_restriction {",
            "  viewer_certificate {",
        ):
            self.assertIn(block, hcl)
        self.assertIn("is_ipv6_enabled = true", hcl)

    def test_bucket_from_domain(self):
        self.assertEqual(bucket_from_domain("assets.s3.amazonaws.com"), "assets")
        self.assertEqual(bucket_from_domain("cdn.example.com"), "cdn-example-com")


class TestDatabaseSynthesizer(unittest.TestCase):
    def test_defaults_and_subnet_group(self):
        ctx = build_context(
            snapshot_dict(
                [
                    node("rds", "rds", root=True),
                    node("db", "rds-instance", name="Orders DB", parent="rds",
                         properties={"engine": "postgres", "allocatedStorage": "50"}),
                    node("sng", "rds-subnet-group", parent="rds",
                         properties={"subnetGroupName": "db-private"}),
                ]
            )
        )
        [descriptor] = synthesize_db_instance(ctx.groups["database"][0], ctx)
        self.assertEqual(descriptor.address, "aws_db_instance.orders_db")
        self.assertEqual(descriptor.properties["engine"], "postgres")
        self.assertEqual(descriptor.properties["allocatedStorage"], 50)
        self.assertEqual(descriptor.properties["instanceClass"], "db.t3.micro")
        self.assertEqual(descriptor.properties["dbSubnetGroupName"], "db-private")
        self.assertIs(descriptor.properties["skipFinalSnapshot"], True)


if __name__ == "__main__":
    unittest.main()
