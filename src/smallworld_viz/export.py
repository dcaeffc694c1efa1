"""
draw.io export of a render model.

Writes an mxfile document with one page: an ellipse vertex per node and an
edge cell per render edge, with exit / entry ports taken from the compass
handles. Cells are emitted in z-order, so overlay edges paint above the
background.
"""

from __future__ import annotations

import datetime
import xml.etree.ElementTree as ET
from typing import Optional

from smallworld_viz.compositor import ComposeConfig
from smallworld_viz.models import Handle, RenderEdge, RenderModel
from smallworld_viz.styles import Port


def _port_style(handle: Optional[Handle], prefix: str) -> str:
    if handle is None:
        return ""
    px, py = Port.for_handle(handle.direction)
    return f"{prefix}X={px};{prefix}Y={py};{prefix}Perimeter=0;"


def _edge_element(edge: RenderEdge, node_ids: dict[str, str]) -> ET.Element:
    style = (
        edge.style.to_drawio()
        + _port_style(edge.source_handle, "exit")
        + _port_style(edge.target_handle, "entry")
    )
    attrib = {"id": edge.id, "style": style, "parent": "1", "edge": "1"}
    source = node_ids.get(str(edge.source))
    target = node_ids.get(str(edge.target))
    if source:
        attrib["source"] = source
    if target:
        attrib["target"] = target
    el = ET.Element("mxCell", attrib=attrib)
    ET.SubElement(el, "mxGeometry", attrib={"relative": "1", "as": "geometry"})
    return el


def to_drawio_xml(
    model: RenderModel,
    name: str = "Graph",
    config: ComposeConfig | None = None,
    pretty: bool = True,
    modified: Optional[datetime.datetime] = None,
) -> str:
    """Serialize *model* as a draw.io (mxfile) XML string.

    *modified* is stamped on the file; the current UTC time when omitted.
    """
    cfg = config or ComposeConfig()
    width = cfg.layout.node_width
    height = cfg.layout.node_height
    node_style = cfg.theme.node_style()
    stamp = modified or datetime.datetime.now(datetime.timezone.utc)

    mxfile = ET.Element(
        "mxfile",
        attrib={
            "host": "smallworld-viz",
            "modified": stamp.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
            "agent": "smallworld-viz/0.1",
            "type": "device",
            "compressed": "false",
        },
    )
    diagram = ET.SubElement(mxfile, "diagram", attrib={"name": name, "id": "graph"})
    graph_model = ET.SubElement(diagram, "mxGraphModel", attrib={
        "grid": "0", "page": "0", "arrows": "1", "connect": "1",
    })
    root = ET.SubElement(graph_model, "root")
    ET.SubElement(root, "mxCell", attrib={"id": "0"})
    ET.SubElement(root, "mxCell", attrib={"id": "1", "parent": "0"})

    node_ids: dict[str, str] = {}
    for node in model.nodes:
        cid = f"n-{node.id}"
        node_ids[str(node.id)] = cid
        cell = ET.SubElement(root, "mxCell", attrib={
            "id": cid, "value": str(node.id), "style": node_style,
            "parent": "1", "vertex": "1",
        })
        ET.SubElement(cell, "mxGeometry", attrib={
            "x": f"{node.position.x:g}",
            "y": f"{node.position.y:g}",
            "width": f"{width:g}",
            "height": f"{height:g}",
            "as": "geometry",
        })

    for edge in sorted(model.edges, key=lambda e: e.z_order):
        root.append(_edge_element(edge, node_ids))

    if pretty:
        ET.indent(mxfile, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(
        mxfile, encoding="unicode"
    )
