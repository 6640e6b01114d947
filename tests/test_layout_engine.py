import math

import pytest

from mindmap_engine.core.exceptions import UnknownLayoutError
from mindmap_engine.models.graph import Node, LAYOUT_STRATEGIES
from mindmap_engine.services.layout_engine import available_layouts, layout, node_size, plan_layout
from mindmap_engine.services.structure_builder import build


@pytest.fixture
def graph():
    payload = {
        "rootConcept": {"label": "Photosynthesis"},
        "concepts": [
            {"id": "light", "label": "Light reactions", "type": "main-topic", "importance": 0.9},
            {"id": "dark", "label": "Calvin cycle", "type": "main-topic", "importance": 0.8},
            {"id": "atp", "label": "ATP", "parentId": "light", "level": 2, "importance": 0.4},
            {"id": "nadph", "label": "NADPH", "parentId": "light", "level": 2, "importance": 0.3},
            {"id": "rubisco", "label": "RuBisCO", "parentId": "dark", "level": 2, "importance": 0.6},
        ],
    }
    return build(payload)


def test_all_strategies_are_registered():
    assert sorted(LAYOUT_STRATEGIES) == available_layouts()


@pytest.mark.parametrize("strategy", LAYOUT_STRATEGIES)
def test_every_node_gets_a_finite_position(graph, strategy):
    nodes, edges = graph
    positioned = layout(nodes, edges, strategy)

    assert len(positioned) == len(nodes)
    for node in positioned:
        assert node.position is not None
        assert math.isfinite(node.position.x)
        assert math.isfinite(node.position.y)
        assert node.size is not None


def test_layout_does_not_mutate_input(graph):
    nodes, edges = graph
    layout(nodes, edges, "radial")
    assert all(node.position is None for node in nodes)


def test_hierarchical_bands_by_level(graph):
    nodes, edges = graph
    spec = plan_layout(nodes, "hierarchical")
    positioned = {node.id: node for node in layout(nodes, edges, "hierarchical", spec)}

    assert positioned["root"].position.x == spec.dimensions.width / 2
    assert positioned["root"].position.y == 0
    assert positioned["light"].position.y == positioned["dark"].position.y == spec.spacing.vertical
    assert positioned["atp"].position.y == 2 * spec.spacing.vertical
    # children of "light" come before the child of "dark"
    assert positioned["atp"].position.x < positioned["rubisco"].position.x
    assert positioned["nadph"].position.x < positioned["rubisco"].position.x


def test_radial_rings_by_level(graph):
    nodes, edges = graph
    spec = plan_layout(nodes, "radial")
    positioned = {node.id: node for node in layout(nodes, edges, "radial", spec)}
    center_x, center_y = spec.dimensions.width / 2, spec.dimensions.height / 2

    def radius(node_id):
        position = positioned[node_id].position
        return math.hypot(position.x - center_x, position.y - center_y)

    assert radius("root") == pytest.approx(0)
    assert radius("light") == pytest.approx(spec.spacing.radial)
    assert radius("rubisco") == pytest.approx(2 * spec.spacing.radial)


def test_timeline_orders_by_importance(graph):
    nodes, edges = graph
    positioned = sorted(layout(nodes, edges, "timeline"), key=lambda node: node.position.x)
    importances = [node.metadata.importance for node in positioned]
    assert importances == sorted(importances, reverse=True)


def test_network_places_nodes_on_distinct_cells(graph):
    nodes, edges = graph
    positioned = layout(nodes, edges, "network")
    coordinates = {(node.position.x, node.position.y) for node in positioned}
    assert len(coordinates) == len(nodes)


def test_plan_layout_scales_with_node_count():
    few = [Node(id=f"n{i}", label=f"Node {i}") for i in range(3)]
    many = [Node(id=f"n{i}", label=f"Node {i}") for i in range(20)]

    small = plan_layout(few)
    large = plan_layout(many)
    assert (small.dimensions.width, small.dimensions.height) == (800, 600)
    assert large.dimensions.width == 20 * 150
    assert large.dimensions.height == 20 * 100
    assert small.center_node is None


def test_unknown_strategy_raises():
    with pytest.raises(UnknownLayoutError) as exc_info:
        layout([], [], "spiral")
    assert "spiral" in exc_info.value.message


def test_node_size_depends_on_label_and_type():
    assert node_size("AI", "concept").width == 136
    assert node_size("x" * 200, "concept").width == 300
    assert node_size("Root", "root").height == 80
    assert node_size("Topic", "main-topic").height == 70
