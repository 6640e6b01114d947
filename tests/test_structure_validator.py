import pytest

from mindmap_engine.models.graph import Node, Edge, NodeMetadata, Position
from mindmap_engine.services.structure_builder import build
from mindmap_engine.services.structure_validator import (
    validate_node,
    validate_edge,
    validate_structure,
    validate_collection,
    depth_balance,
    find_components,
)


def _root():
    return Node(id="root", label="Machine Learning", type="root", level=0)


def _node(node_id, level=1, node_type="concept", **fields):
    return Node(id=node_id, label=f"Concept {node_id}", type=node_type, level=level, **fields)


def _hierarchy(source, target):
    return Edge(id=f"{source}-{target}", source=source, target=target, type="hierarchy", strength=1.0)


def test_valid_node_passes():
    result = validate_node(_node("a"))
    assert result.is_valid
    assert result.issues == []


def test_node_field_checks():
    node = Node(
        id=" ",
        label="x",
        type="bubble",
        level=12,
        metadata=NodeMetadata(importance=1.5, complexity=-0.1, confidence=1.2, connections=-1),
        examples=[f"e{i}" for i in range(6)],
    )
    result = validate_node(node)

    assert not result.is_valid
    assert "Node must have a valid ID" in result.issues
    assert "Node label is too short" in result.issues
    assert "Invalid node type: bubble" in result.issues
    assert "Node level must be between 0 and 10" in result.issues
    assert "Importance must be between 0 and 1" in result.issues
    assert "Complexity must be between 0 and 1" in result.issues
    assert "Confidence must be between 0 and 1" in result.issues
    assert "Connections count cannot be negative" in result.issues
    assert "Consider limiting examples to 5 or fewer" in result.suggestions


def test_long_label_gets_suggestion():
    result = validate_node(Node(id="a", label="x" * 101))
    assert "Node label is too long (max 100 characters)" in result.issues
    assert "Shorten the label and use description for details" in result.suggestions


def test_missing_label_and_bad_position():
    result = validate_node(Node(id="a", label="   ", position=Position(x=float("nan"), y=0)))
    assert "Node must have a label" in result.issues
    assert "Position coordinates must be finite numbers" in result.issues


def test_level_zero_is_reserved_for_root():
    assert not validate_node(_node("a", level=0)).is_valid
    assert not validate_node(Node(id="root", label="Root", type="root", level=2)).is_valid
    assert validate_node(_root()).is_valid


def test_edge_checks():
    nodes = [_root(), _node("a"), _node("b", level=2)]

    assert validate_edge(_hierarchy("root", "a"), nodes).is_valid

    dangling = validate_edge(Edge(id="e1", source="a", target="ghost"), nodes)
    assert "Target node 'ghost' does not exist" in dangling.issues

    upward = validate_edge(_hierarchy("b", "a"), nodes)
    assert "Hierarchical edges should connect from higher to lower levels" in upward.issues

    loop = validate_edge(Edge(id="e2", source="a", target="a", type="link", strength=2), nodes)
    assert "Edge cannot connect a node to itself" in loop.issues
    assert "Invalid edge type: link" in loop.issues
    assert "Edge strength must be between 0 and 1" in loop.issues

    blank = validate_edge(Edge(id="", source="", target="a"), nodes)
    assert "Edge must have a valid ID" in blank.issues
    assert "Edge must have a source node ID" in blank.issues


def test_connected_tree_has_no_orphans():
    nodes, edges = build({"concepts": [{"id": "a", "label": "Alpha"}, {"id": "b", "label": "Beta", "parentId": "a"}]})
    analysis = validate_structure(nodes, edges).structure_analysis

    assert analysis.has_root
    assert analysis.is_connected
    assert analysis.orphan_count == 0
    assert not analysis.has_orphan_nodes


def test_disconnected_graph_reports_orphans():
    nodes = [_root(), _node("a"), _node("lonely")]
    result = validate_structure(nodes, [_hierarchy("root", "a")])

    assert not result.structure_analysis.is_connected
    assert result.structure_analysis.component_count == 2
    assert "Mind map has disconnected components" in result.issues
    assert "Found 1 orphan nodes" in result.issues


def test_missing_and_multiple_roots():
    no_root = validate_structure([_node("a"), _node("b")], [Edge(id="e", source="a", target="b")])
    assert "Mind map must have exactly one root node" in no_root.issues
    assert not no_root.structure_analysis.has_root

    two_roots = validate_structure(
        [_root(), Node(id="r2", label="Another", type="root", level=0)],
        [Edge(id="e", source="root", target="r2")],
    )
    assert "Mind map has multiple root nodes" in two_roots.issues


def test_flat_map_is_unbalanced():
    nodes = [_root()] + [_node(f"n{i}") for i in range(10)]
    edges = [_hierarchy("root", node.id) for node in nodes[1:]]
    result = validate_structure(nodes, edges)

    assert result.structure_analysis.depth_balance < 0.3
    assert "Mind map structure is unbalanced (too deep or too shallow)" in result.issues


def test_all_nodes_on_one_level_is_unbalanced():
    nodes = [_root()] + [_node(f"n{i}", level=0) for i in range(10)]
    assert depth_balance(nodes) < 0.3


def test_balanced_map_scores_well():
    nodes = [_root(), _node("a"), _node("b", level=2, parent_id="a")]
    edges = [_hierarchy("root", "a"), _hierarchy("a", "b")]
    result = validate_structure(nodes, edges)

    assert result.structure_analysis.depth_balance == pytest.approx(1.0)
    assert result.issues == []
    assert result.is_valid
    assert result.category in ("good", "excellent")


def test_score_is_bounded():
    nodes = [_node(f"n{i}") for i in range(6)]
    result = validate_structure(nodes, [])
    assert 0.0 <= result.score <= 1.0
    assert result.category == "poor"


def test_empty_structure():
    result = validate_structure([], [])
    assert not result.structure_analysis.is_connected
    assert result.structure_analysis.depth_balance == 0
    assert find_components([], []) == []


def test_empty_collection_is_invalid():
    result = validate_collection([], [])
    assert result.is_valid is False
    assert result.overall_score == 0


def test_collection_splits_valid_and_invalid():
    nodes = [_root(), _node("a"), _node("b", level=2), Node(id="bad", label="!", type="concept")]
    edges = [
        _hierarchy("root", "a"),
        _hierarchy("a", "b"),
        Edge(id="e-bad", source="a", target="bad"),
        Edge(id="e-ghost", source="a", target="ghost"),
    ]
    result = validate_collection(nodes, edges)

    assert [node.id for node in result.node_validation.valid_nodes] == ["root", "a", "b"]
    assert [item.node.id for item in result.node_validation.invalid_nodes] == ["bad"]
    assert {edge.id for edge in result.edge_validation.valid_edges} == {"root-a", "a-b"}
    assert len(result.edge_validation.invalid_edges) == 2
    assert "High number of invalid edges - check node relationships" in result.recommendations
    assert result.statistics.total_nodes == 3
    assert result.statistics.node_type_distribution == {"root": 1, "concept": 2}


def test_duplicate_node_ids_are_rejected():
    result = validate_collection([_root(), _node("a"), _node("a")], [_hierarchy("root", "a")])
    assert len(result.node_validation.valid_nodes) == 2
    assert result.node_validation.invalid_nodes[0].issues == ["Duplicate node ID 'a'"]


def test_built_graph_validates():
    nodes, edges = build(
        {
            "rootConcept": {"label": "Cells"},
            "concepts": [
                {"id": "a", "label": "Organelles", "type": "main-topic"},
                {"id": "b", "label": "Membrane", "type": "main-topic"},
                {"id": "c", "label": "Mitochondria", "parentId": "a", "level": 2},
                {"id": "d", "label": "Ribosome", "parentId": "a", "level": 2},
            ],
        }
    )
    result = validate_collection(nodes, edges)

    assert result.node_validation.invalid_nodes == []
    assert result.edge_validation.invalid_edges == []
    assert result.structure_validation.structure_analysis.is_connected
    assert result.is_valid
