"""canvasform export compiler.

Turns a snapshot of an architecture canvas (placed nodes, connections and a
security-group catalog) into Terraform HCL, a JSON resource list, or a
draw.io diagram.
"""

from .compiler import compile_resources, export_json, export_terraform
from .drawio import export_drawio
from .snapshot import Connection, GraphSnapshot, PlacedNode, SecurityGroupDefinition
from .values import Reference, ResourceDescriptor

__all__ = [
    "compile_resources",
    "export_json",
    "export_terraform",
    "export_drawio",
    "Connection",
    "GraphSnapshot",
    "PlacedNode",
    "SecurityGroupDefinition",
    "Reference",
    "ResourceDescriptor",
]
