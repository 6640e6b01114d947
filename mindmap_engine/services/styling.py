# mindmap_engine/services/styling.py
import logging

from mindmap_engine.models.graph import Node, Edge, NodeStyle, EdgeStyle

logger = logging.getLogger(__name__)

# (background, border) per node type for the categorical scheme.
TYPE_COLORS = {
    "root": ("#4A90E2", "#357ABD"),
    "main-topic": ("#7ED321", "#5BA517"),
    "subtopic": ("#F5A623", "#D1890B"),
    "concept": ("#BD10E0", "#9013FE"),
    "example": ("#B8E986", "#8CC152"),
    "definition": ("#FFD93D", "#FFC107"),
}
FALLBACK_COLORS = ("#9B9B9B", "#7B7B7B")
NEUTRAL_COLORS = ("#F5F5F5", "#CCCCCC")

# Five steps from low to high, shared by the importance and difficulty schemes.
GRADIENT = ["#E3F2FD", "#90CAF9", "#42A5F5", "#1E88E5", "#0D47A1"]
GRADIENT_BORDER = "#0D47A1"

SHAPES = {"root": "ellipse", "example": "diamond", "definition": "hexagon"}
FONT_SIZES = {"root": 16, "main-topic": 14, "subtopic": 12}

EDGE_STYLES = {
    "hierarchy": {"stroke_color": "#333333", "stroke_style": "solid", "arrow_type": "arrow"},
    "association": {"stroke_color": "#666666", "stroke_style": "dashed", "arrow_type": "arrow"},
    "example": {"stroke_color": "#8CC152", "stroke_style": "dotted", "arrow_type": "circle"},
    "dependency": {"stroke_color": "#FF6B6B", "stroke_style": "solid", "arrow_type": "diamond"},
    "contrast": {"stroke_color": "#E53935", "stroke_style": "dashed", "arrow_type": "none"},
}
HIERARCHY_STROKE_WIDTH = 2.0


def _gradient_color(value: float) -> str:
    step = int(max(0.0, min(1.0, value)) * (len(GRADIENT) - 1) + 0.5)
    return GRADIENT[step]


def _text_color(background: str) -> str:
    red, green, blue = (int(background[i:i + 2], 16) for i in (1, 3, 5))
    luminance = (0.299 * red + 0.587 * green + 0.114 * blue) / 255
    return "#000000" if luminance > 0.6 else "#FFFFFF"


def node_style(node: Node, color_scheme: str = "categorical") -> NodeStyle:
    if color_scheme == "importance":
        background, border = _gradient_color(node.metadata.importance), GRADIENT_BORDER
    elif color_scheme == "difficulty":
        background, border = _gradient_color(node.metadata.complexity), GRADIENT_BORDER
    elif color_scheme == "default":
        background, border = TYPE_COLORS["root"] if node.type == "root" else NEUTRAL_COLORS
    else:
        background, border = TYPE_COLORS.get(node.type, FALLBACK_COLORS)

    return NodeStyle(
        background_color=background,
        border_color=border,
        text_color=_text_color(background),
        font_size=FONT_SIZES.get(node.type, 11),
        font_weight="bold" if node.type in ("root", "main-topic") else "normal",
        shape=SHAPES.get(node.type, "rectangle"),
    )


def edge_style(edge: Edge) -> EdgeStyle:
    base = EDGE_STYLES.get(edge.type, EDGE_STYLES["association"])
    if edge.type == "hierarchy":
        width = HIERARCHY_STROKE_WIDTH
    else:
        width = max(1.0, min(4.0, edge.strength * 3))
    return EdgeStyle(stroke_width=width, **base)


def apply_styles(nodes: list[Node], edges: list[Edge], color_scheme: str = "categorical") -> tuple[list[Node], list[Edge]]:
    """Styled copies of the nodes and edges."""
    styled_nodes = [node.model_copy(update={"style": node_style(node, color_scheme)}, deep=True) for node in nodes]
    styled_edges = [edge.model_copy(update={"style": edge_style(edge)}, deep=True) for edge in edges]
    logger.debug("Styled %s nodes and %s edges with the %s scheme", len(styled_nodes), len(styled_edges), color_scheme)
    return styled_nodes, styled_edges
