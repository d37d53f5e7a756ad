"""draw.io (mxGraph) export.

Serializes the raw canvas snapshot, not the synthesized resources: one image
cell per placed node and one edge cell per connection. Connections whose
endpoints are missing from the snapshot are left out.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional
from urllib.parse import quote

import xml.etree.ElementTree as ET

from exporter.config import cloud_config_aws as aws_config
from exporter.snapshot import GraphSnapshot, PlacedNode

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

NODE_STYLE = (
    "shape=image;html=1;verticalAlign=top;verticalLabelPosition=bottom;"
    "labelBackgroundColor=#ffffff;imageAspect=0;aspect=fixed;"
)
EDGE_STYLE = "endArrow=classic;html=1;rounded=0;strokeColor={color};strokeWidth=2;"

GRAPH_MODEL_ATTRS = {
    "dx": "1422",
    "dy": "794",
    "grid": "1",
    "gridSize": "10",
    "guides": "1",
    "tooltips": "1",
    "connect": "1",
    "arrows": "1",
    "fold": "1",
    "page": "1",
    "pageScale": "1",
    "pageWidth": "827",
    "pageHeight": "1169",
    "math": "0",
    "shadow": "0",
}


def _number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def icon_style(node: PlacedNode, icon_origin: str = "") -> str:
    """Style fragment pointing draw.io at the node's icon.

    Inline SVG is embedded as a URL-encoded data URI; image paths are used
    as-is when absolute, otherwise prefixed with ``icon_origin``.
    """
    if node.icon_svg:
        return "image=data:image/svg+xml," + quote(node.icon_svg, safe="")
    if node.icon_image:
        url = node.icon_image
        if not url.startswith("http"):
            url = f"{icon_origin}{url}"
        return f"image={url}"
    return ""


def build_mxfile(
    snapshot: GraphSnapshot, modified: Optional[str] = None, icon_origin: str = ""
) -> ET.Element:
    modified = modified or datetime.now(timezone.utc).isoformat()
    mxfile = ET.Element(
        "mxfile",
        {"host": "app.diagrams.net", "modified": modified, "agent": "canvasform"},
    )
    diagram = ET.SubElement(
        mxfile,
        "diagram",
        {"name": aws_config.DRAWIO_DIAGRAM_NAME, "id": aws_config.DRAWIO_DIAGRAM_ID},
    )
    model = ET.SubElement(diagram, "mxGraphModel", GRAPH_MODEL_ATTRS)
    root = ET.SubElement(model, "root")
    ET.SubElement(root, "mxCell", {"id": "0"})
    ET.SubElement(root, "mxCell", {"id": "1", "parent": "0"})

    cell_ids: Dict[str, str] = {}
    for index, node in enumerate(snapshot.nodes):
        cell_id = f"node-{index + 2}"
        cell_ids.setdefault(node.id, cell_id)
        cell = ET.SubElement(
            root,
            "mxCell",
            {
                "id": cell_id,
                "value": node.display_name,
                "style": NODE_STYLE + icon_style(node, icon_origin),
                "vertex": "1",
                "parent": "1",
            },
        )
        ET.SubElement(
            cell,
            "mxGeometry",
            {
                "x": _number(node.x),
                "y": _number(node.y),
                "width": _number(node.width),
                "height": _number(node.height),
                "as": "geometry",
            },
        )

    offset = len(snapshot.nodes) + 2
    for index, connection in enumerate(snapshot.connections):
        source = cell_ids.get(connection.from_node_id)
        target = cell_ids.get(connection.to_node_id)
        if source is None or target is None:
            logger.debug(f"Skipping dangling connection {connection.id}")
            continue
        color = connection.color or aws_config.DRAWIO_DEFAULT_EDGE_COLOR
        cell = ET.SubElement(
            root,
            "mxCell",
            {
                "id": f"connection-{index + offset}",
                "value": connection.label,
                "style": EDGE_STYLE.format(color=color),
                "edge": "1",
                "parent": "1",
                "source": source,
                "target": target,
            },
        )
        geometry = ET.SubElement(
            cell,
            "mxGeometry",
            {"width": "50", "height": "50", "relative": "1", "as": "geometry"},
        )
        ET.SubElement(geometry, "mxPoint", {"x": "400", "y": "300", "as": "sourcePoint"})
        ET.SubElement(geometry, "mxPoint", {"x": "450", "y": "250", "as": "targetPoint"})
    return mxfile


def export_drawio(
    snapshot: GraphSnapshot, modified: Optional[str] = None, icon_origin: str = ""
) -> str:
    """Render the snapshot as a draw.io XML document."""
    mxfile = build_mxfile(snapshot, modified, icon_origin)
    ET.indent(mxfile, space="  ")
    return XML_DECLARATION + ET.tostring(mxfile, encoding="unicode") + "\n"
