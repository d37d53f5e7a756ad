"""Unit tests for exporter/synthesizers/compute.py"""

import sys
import unittest
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from exporter.compiler import compile_resources
from exporter.config_loader import ExportSettings
from exporter.hcl import render_resource
from exporter.snapshot import GraphSnapshot
from exporter.synthesizers.compute import (
    parse_ingress_rules,
    synthesize_elastic_ip,
    synthesize_instance,
    synthesize_lambda_function,
    synthesize_security_group,
)
from exporter.values import Reference
from tests.fixtures.snapshot_samples import (
    build_context,
    catalog_security_groups,
    connection,
    ec2_stack_snapshot,
    node,
    single_instance_snapshot,
    snapshot_dict,
)


def _by_address(descriptors):
    return {d.address: d for d in descriptors}


class TestParseIngressRules(unittest.TestCase):
    """Test free-text inbound rule parsing."""

    def test_two_ports(self):
        rules = parse_ingress_rules("SSH: 22, HTTP: 80")
        self.assertEqual([r["fromPort"] for r in rules], [22, 80])
        self.assertEqual([r["toPort"] for r in rules], [22, 80])
        for rule in rules:
            self.assertEqual(rule["protocol"], "tcp")
            self.assertEqual(rule["cidr"], "0.0.0.0/0")
        self.assertEqual([r["description"] for r in rules], ["SSH", "HTTP"])

    def test_unknown_port_label(self):
        self.assertEqual(parse_ingress_rules("app 8080")[0]["description"], "Port 8080")

    def test_duplicates_and_out_of_range(self):
        rules = parse_ingress_rules("22, 22, 0, 70000, 443")
        self.assertEqual([r["fromPort"] for r in rules], [22, 443])

    def test_empty(self):
        self.assertEqual(parse_ingress_rules(""), [])
        self.assertEqual(parse_ingress_rules(None), [])

    def test_list_input(self):
        rules = parse_ingress_rules(["SSH: 22", "HTTPS: 443"])
        self.assertEqual([r["fromPort"] for r in rules], [22, 443])


class TestSecurityGroupSynthesizer(unittest.TestCase):
    def test_inbound_text_becomes_ingress_blocks(self):
        ctx = build_context(
            snapshot_dict(
                [node("sg", "security-group", name="Web SG",
                      properties={"inboundRules": "SSH: 22, HTTP: 80"})]
            )
        )
        [descriptor] = synthesize_security_group(ctx.groups["security_group"][0], ctx)
        self.assertEqual(descriptor.type, "aws_security_group")
        self.assertEqual(descriptor.name, "web_sg")
        ingress = descriptor.properties["ingress"]
        self.assertEqual(len(ingress), 2)
        self.assertEqual([r["fromPort"] for r in ingress], [22, 80])
        self.assertTrue(all(r["protocol"] == "tcp" for r in ingress))
        self.assertTrue(all(r["cidrBlocks"] == ["0.0.0.0/0"] for r in ingress))
        self.assertEqual(descriptor.properties["egress"], [])

    def test_group_name_property_wins_over_display_name(self):
        ctx = build_context(
            snapshot_dict(
                [node("sg", "security-group", name="Security Group",
                      properties={"groupName": "app-sg"})]
            )
        )
        [descriptor] = synthesize_security_group(ctx.groups["security_group"][0], ctx)
        self.assertEqual(descriptor.name, "app_sg")
        self.assertEqual(descriptor.properties["name"], "app-sg")


class TestInstanceSynthesizer(unittest.TestCase):
    def test_single_instance(self):
        """A lone instance yields one aws_instance with no security groups."""
        descriptors = compile_resources(GraphSnapshot.from_dict(single_instance_snapshot()))
        self.assertEqual([d.address for d in descriptors], ["aws_instance.web"])
        properties = descriptors[0].properties
        self.assertEqual(properties["ami"], "ami-123")
        self.assertEqual(properties["instanceType"], "t2.micro")
        self.assertIsNone(properties["vpcSecurityGroupIds"])
        self.assertEqual(properties["subnetId"], "")
        self.assertEqual(properties["tags"], {"Name": "web", "Environment": "Production"})

    def test_defaults_when_unset(self):
        ctx = build_context(snapshot_dict([node("i", "ec2-instance")]))
        [descriptor] = synthesize_instance(ctx.groups["compute"][0], ctx)
        self.assertEqual(descriptor.name, "web_server")
        self.assertEqual(descriptor.properties["instanceType"], "t2.micro")
        self.assertTrue(descriptor.properties["ami"].startswith("ami-"))

    def test_nan_size_is_not_rendered_as_number(self):
        ctx = build_context(
            snapshot_dict([node("i", "ec2-instance", name="web", properties={"size": "nan"})])
        )
        [descriptor] = synthesize_instance(ctx.groups["compute"][0], ctx)
        self.assertEqual(descriptor.properties["rootBlockDevice"], {"volumeSize": "nan"})
        hcl = render_resource(descriptor)
        self.assertIn('volume_size = "nan"', hcl)
        self.assertNotIn("NaN", hcl)

    def test_stack_merges_volume_and_links_resources(self):
        ctx = build_context(ec2_stack_snapshot())
        descriptors = _by_address(synthesize_instance(ctx.groups["compute"][0], ctx))
        instance = descriptors["aws_instance.app_server"]
        self.assertEqual(instance.properties["instanceType"], "t3.small")
        self.assertEqual(instance.properties["ami"], "ami-abc")
        self.assertEqual(instance.properties["keyName"], "ops")
        self.assertEqual(instance.properties["subnetId"], "public-a")
        self.assertEqual(
            instance.properties["vpcSecurityGroupIds"],
            [Reference("aws_security_group.app_sg.id")],
        )
        self.assertEqual(
            instance.properties["rootBlockDevice"],
            {"volumeType": "gp3", "volumeSize": 40, "encrypted": True},
        )
        association = descriptors["aws_eip_association.app_server_association"]
        self.assertEqual(
            association.properties["instanceId"], Reference("aws_instance.app_server.id")
        )
        self.assertEqual(
            association.properties["allocationId"], Reference("aws_eip.app_server.id")
        )

    def test_catalog_security_group_by_name(self):
        data = snapshot_dict(
            [node("i", "ec2-instance", name="api",
                  properties={"securityGroups": "web-sg, missing-sg"})],
            security_groups=catalog_security_groups(),
        )
        descriptors = compile_resources(GraphSnapshot.from_dict(data))
        addresses = [d.address for d in descriptors]
        self.assertEqual(addresses, ["aws_instance.api", "aws_security_group.web_sg"])
        instance, group = descriptors
        self.assertEqual(
            instance.properties["vpcSecurityGroupIds"],
            [Reference("aws_security_group.web_sg.id")],
        )
        self.assertEqual(group.properties["vpcId"], "vpc-12345")
        self.assertEqual(group.properties["ingress"][0]["fromPort"], 80)
        self.assertEqual(group.properties["ingress"][0]["cidrBlocks"], ["0.0.0.0/0"])
        self.assertEqual(group.properties["egress"][0]["protocol"], "-1")

    def test_connected_security_group_node(self):
        data = snapshot_dict(
            [
                node("i", "ec2-instance", name="api"),
                node("sg", "security-group", name="api-sg"),
            ],
            [connection("c1", "sg", "i")],
        )
        descriptors = _by_address(compile_resources(GraphSnapshot.from_dict(data)))
        self.assertEqual(
            descriptors["aws_instance.api"].properties["vpcSecurityGroupIds"],
            [Reference("aws_security_group.api_sg.id")],
        )


class TestElasticIpSynthesizer(unittest.TestCase):
    def test_association_shared_with_instance(self):
        ctx = build_context(ec2_stack_snapshot())
        descriptors = synthesize_elastic_ip(ctx.groups["elastic_ip"][0], ctx)
        self.assertEqual(
            [d.address for d in descriptors],
            ["aws_eip.app_server", "aws_eip_association.app_server_association"],
        )
        self.assertEqual(descriptors[0].properties["domain"], "vpc")

    def test_unattached_ip(self):
        ctx = build_context(
            snapshot_dict([node("e", "elastic-ip", name="Public IP",
                                properties={"domain": "standard"})])
        )
        [descriptor] = synthesize_elastic_ip(ctx.groups["elastic_ip"][0], ctx)
        self.assertEqual(descriptor.address, "aws_eip.public_ip")
        self.assertEqual(descriptor.properties["domain"], "standard")

    def test_association_emitted_once(self):
        descriptors = compile_resources(GraphSnapshot.from_dict(ec2_stack_snapshot()))
        addresses = [d.address for d in descriptors]
        self.assertEqual(addresses.count("aws_eip_association.app_server_association"), 1)


class TestLambdaSynthesizer(unittest.TestCase):
    def test_defaults_and_name(self):
        ctx = build_context(
            snapshot_dict([node("f", "lambda-function", name="Resize Images",
                                properties={"runtime": "python3.12", "memory": "256"})])
        )
        [descriptor] = synthesize_lambda_function(ctx.groups["function"][0], ctx)
        self.assertEqual(descriptor.address, "aws_lambda_function.resize_images")
        self.assertEqual(descriptor.properties["runtime"], "python3.12")
        self.assertEqual(descriptor.properties["memorySize"], 256)
        self.assertEqual(descriptor.properties["handler"], "index.handler")
        self.assertEqual(descriptor.properties["filename"], "lambda_code/resize_images.zip")

    def test_default_tags_from_settings(self):
        settings = ExportSettings(default_tags={"Team": "media"})
        ctx = build_context(
            snapshot_dict([node("f", "lambda-function", name="fn")]), settings
        )
        [descriptor] = synthesize_lambda_function(ctx.groups["function"][0], ctx)
        self.assertEqual(descriptor.properties["tags"], {"Name": "fn", "Team": "media"})


if __name__ == "__main__":
    unittest.main()
