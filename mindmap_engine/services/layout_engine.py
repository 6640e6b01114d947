# mindmap_engine/services/layout_engine.py
"""
Layout strategies for mind maps.

Each strategy is a pure function ``(nodes, edges, spec) -> {node_id: Position}``
registered under its name. ``layout`` looks the strategy up, runs it, and
returns positioned copies of the nodes; the input list is left untouched.
"""
import logging
import math
from collections.abc import Callable
from itertools import groupby

from mindmap_engine.core.exceptions import UnknownLayoutError
from mindmap_engine.models.graph import Node, Edge, LayoutSpec, Dimensions, Spacing, Position, Size

logger = logging.getLogger(__name__)

LayoutFunction = Callable[[list[Node], list[Edge], LayoutSpec], dict[str, Position]]

MIN_CANVAS_WIDTH = 800
MIN_CANVAS_HEIGHT = 600
WIDTH_PER_NODE = 150
HEIGHT_PER_NODE = 100
HORIZONTAL_SPACING = 200
VERTICAL_SPACING = 150
RADIAL_SPACING = 100
TIMELINE_OFFSET = 50

BASE_NODE_WIDTH = 120
MAX_NODE_WIDTH = 300
WIDTH_PER_CHARACTER = 8
BASE_NODE_HEIGHT = 60
EXTRA_HEIGHT = {"root": 20, "main-topic": 10}

_STRATEGIES: dict[str, LayoutFunction] = {}


def register_layout(name: str) -> Callable[[LayoutFunction], LayoutFunction]:
    def decorator(func: LayoutFunction) -> LayoutFunction:
        _STRATEGIES[name] = func
        return func
    return decorator


def available_layouts() -> list[str]:
    return sorted(_STRATEGIES)


def node_size(label: str, node_type: str) -> Size:
    width = max(BASE_NODE_WIDTH, min(MAX_NODE_WIDTH, BASE_NODE_WIDTH + len(label) * WIDTH_PER_CHARACTER))
    return Size(width=width, height=BASE_NODE_HEIGHT + EXTRA_HEIGHT.get(node_type, 0))


def plan_layout(nodes: list[Node], strategy: str = "hierarchical") -> LayoutSpec:
    """Canvas size and spacing for a map of this many nodes."""
    if strategy not in _STRATEGIES:
        raise UnknownLayoutError(strategy)
    total = len(nodes)
    root = next((node for node in nodes if node.type == "root"), None)
    return LayoutSpec(
        type=strategy,
        center_node=root.id if root else None,
        dimensions=Dimensions(
            width=max(MIN_CANVAS_WIDTH, total * WIDTH_PER_NODE),
            height=max(MIN_CANVAS_HEIGHT, total * HEIGHT_PER_NODE),
        ),
        spacing=Spacing(
            horizontal=HORIZONTAL_SPACING,
            vertical=VERTICAL_SPACING,
            radial=RADIAL_SPACING if strategy == "radial" else None,
        ),
        algorithm=f"{strategy}-layout-v1",
    )


def _by_level(nodes: list[Node]) -> dict[int, list[Node]]:
    ordered = sorted(nodes, key=lambda node: node.level)
    return {level: list(group) for level, group in groupby(ordered, key=lambda node: node.level)}


@register_layout("hierarchical")
def hierarchical_layout(nodes: list[Node], edges: list[Edge], spec: LayoutSpec) -> dict[str, Position]:
    width = spec.dimensions.width
    positions: dict[str, Position] = {}
    slots: dict[str, int] = {}

    for level, band in _by_level(nodes).items():
        # Keep siblings together under their parent's slot in the band above.
        band = sorted(band, key=lambda node: slots.get(node.parent_id, -1))
        y = level * spec.spacing.vertical
        start_x = (width - spec.spacing.horizontal * (len(band) - 1)) / 2
        for index, node in enumerate(band):
            slots[node.id] = index
            positions[node.id] = Position(x=start_x + index * spec.spacing.horizontal, y=y)

    for node in nodes:
        if node.type == "root":
            positions[node.id] = Position(x=width / 2, y=0)
    return positions


@register_layout("radial")
def radial_layout(nodes: list[Node], edges: list[Edge], spec: LayoutSpec) -> dict[str, Position]:
    center_x = spec.dimensions.width / 2
    center_y = spec.dimensions.height / 2
    radial = spec.spacing.radial or RADIAL_SPACING
    positions: dict[str, Position] = {}

    for level, ring in _by_level(nodes).items():
        radius = level * radial
        angle_step = 2 * math.pi / len(ring)
        for index, node in enumerate(ring):
            angle = index * angle_step
            positions[node.id] = Position(
                x=center_x + radius * math.cos(angle),
                y=center_y + radius * math.sin(angle),
            )

    for node in nodes:
        if node.type == "root":
            positions[node.id] = Position(x=center_x, y=center_y)
    return positions


@register_layout("network")
def network_layout(nodes: list[Node], edges: list[Edge], spec: LayoutSpec) -> dict[str, Position]:
    # Deterministic grid; there is no force simulation.
    if not nodes:
        return {}
    cols = math.ceil(math.sqrt(len(nodes)))
    rows = math.ceil(len(nodes) / cols)
    cell_width = spec.dimensions.width / cols
    cell_height = spec.dimensions.height / rows

    return {
        node.id: Position(
            x=(index % cols) * cell_width + cell_width / 2,
            y=(index // cols) * cell_height + cell_height / 2,
        )
        for index, node in enumerate(nodes)
    }


@register_layout("timeline")
def timeline_layout(nodes: list[Node], edges: list[Edge], spec: LayoutSpec) -> dict[str, Position]:
    ordered = sorted(nodes, key=lambda node: node.metadata.importance, reverse=True)
    step_x = spec.dimensions.width / (len(ordered) + 1)
    center_y = spec.dimensions.height / 2

    return {
        node.id: Position(
            x=(index + 1) * step_x,
            y=center_y + (-TIMELINE_OFFSET if index % 2 == 0 else TIMELINE_OFFSET),
        )
        for index, node in enumerate(ordered)
    }


def layout(
    nodes: list[Node],
    edges: list[Edge],
    strategy: str = "hierarchical",
    spec: LayoutSpec | None = None,
) -> list[Node]:
    """Return copies of ``nodes`` with position and size set by the named strategy."""
    if strategy not in _STRATEGIES:
        raise UnknownLayoutError(strategy)
    spec = spec or plan_layout(nodes, strategy)
    positions = _STRATEGIES[strategy](nodes, edges, spec)

    positioned = []
    for node in nodes:
        position = positions.get(node.id)
        if position is None:
            logger.warning("Layout '%s' left node '%s' unplaced; centering it.", strategy, node.id)
            position = Position(x=spec.dimensions.width / 2, y=spec.dimensions.height / 2)
        positioned.append(
            node.model_copy(
                update={"position": position, "size": node_size(node.label, node.type)},
                deep=True,
            )
        )

    logger.debug("Applied %s layout to %s nodes", strategy, len(positioned))
    return positioned
