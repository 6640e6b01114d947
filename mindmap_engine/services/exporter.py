# mindmap_engine/services/exporter.py
"""
Renders a node/edge graph into interchange text.

Flow notation is Mermaid (``graph TD``), graph notation is Graphviz DOT.
The exporter renders whatever it is given; validate first.
"""
import json
import re

from mindmap_engine.models.graph import Node, Edge, LayoutSpec
from mindmap_engine.models.mindmap import ExportFormats

_NON_WORD_RE = re.compile(r"\W")

# (open, close) delimiters around the label in Mermaid.
FLOW_SHAPES = {
    "root": ("((", "))"),
    "main-topic": ("([", "])"),
    "example": ("{", "}"),
    "definition": ("{{", "}}"),
}
FLOW_ARROWS = {
    "hierarchy": "-->",
    "association": "-.->",
    "dependency": "==>",
    "example": "-.->",
    "contrast": "---",
}

GRAPH_SHAPES = {
    "root": "ellipse",
    "main-topic": "box",
    "example": "diamond",
    "definition": "hexagon",
}
GRAPH_EDGE_STYLES = {
    "hierarchy": "solid",
    "association": "dashed",
    "dependency": "bold",
    "example": "dotted",
    "contrast": "dashed",
}


def _flow_id(node_id: str) -> str:
    return "n_" + _NON_WORD_RE.sub("_", node_id)


def _flow_label(text: str) -> str:
    return text.replace('"', "#quot;").replace("\n", " ")


def _graph_label(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def to_flow_notation(nodes: list[Node], edges: list[Edge]) -> str:
    lines = ["graph TD"]
    for node in nodes:
        opening, closing = FLOW_SHAPES.get(node.type, ("[", "]"))
        lines.append(f'    {_flow_id(node.id)}{opening}"{_flow_label(node.label)}"{closing}')
    for edge in edges:
        arrow = FLOW_ARROWS.get(edge.type, "-->")
        if edge.bidirectional and arrow.endswith(">"):
            arrow = f"<{arrow}"
        if edge.label:
            arrow = f'{arrow}|"{_flow_label(edge.label)}"|'
        lines.append(f"    {_flow_id(edge.source)} {arrow} {_flow_id(edge.target)}")
    return "\n".join(lines) + "\n"


def to_graph_notation(nodes: list[Node], edges: list[Edge]) -> str:
    lines = ["digraph MindMap {", "    rankdir=TB;", '    node [fontname="Arial"];']
    for node in nodes:
        shape = GRAPH_SHAPES.get(node.type, "box")
        attributes = f'label="{_graph_label(node.label)}" shape={shape}'
        if node.style is not None:
            attributes += f' style=filled fillcolor="{node.style.background_color}"'
        lines.append(f'    "{_graph_label(node.id)}" [{attributes}];')
    for edge in edges:
        attributes = f"style={GRAPH_EDGE_STYLES.get(edge.type, 'solid')}"
        if edge.label:
            attributes += f' label="{_graph_label(edge.label)}"'
        if edge.bidirectional:
            attributes += " dir=both"
        lines.append(f'    "{_graph_label(edge.source)}" -> "{_graph_label(edge.target)}" [{attributes}];')
    lines.append("}")
    return "\n".join(lines) + "\n"


def to_json(nodes: list[Node], edges: list[Edge], layout: LayoutSpec | None = None) -> str:
    document = {
        "nodes": [node.model_dump(by_alias=True, mode="json") for node in nodes],
        "edges": [edge.model_dump(by_alias=True, mode="json") for edge in edges],
        "layout": layout.model_dump(by_alias=True, mode="json") if layout else None,
    }
    return json.dumps(document, indent=2)


def export_graph(nodes: list[Node], edges: list[Edge], layout: LayoutSpec | None = None) -> ExportFormats:
    return ExportFormats(
        json=to_json(nodes, edges, layout),
        flow_notation=to_flow_notation(nodes, edges),
        graph_notation=to_graph_notation(nodes, edges),
    )
