import pytest

from mindmap_engine.models.options import MindMapOptions
from mindmap_engine.models.content import TranscriptSegment
from mindmap_engine.services.structure_builder import (
    build,
    build_root,
    find_source_segment,
    normalize_score,
    parse_concept,
    parse_relationship,
)


def _concept(node_id, label=None, **fields):
    return {"id": node_id, "label": label or f"Concept {node_id}", **fields}


def _ids(items):
    return {item.id for item in items}


def test_builds_ml_scenario():
    payload = {
        "rootConcept": {"label": "ML"},
        "concepts": [{"id": "a", "label": "Supervised", "level": 1, "parentId": "root"}],
        "relationships": [],
    }
    nodes, edges = build(payload)

    assert len(nodes) == 2
    assert len(edges) == 1
    edge = edges[0]
    assert (edge.source, edge.target, edge.type) == ("root", "a", "hierarchy")
    root = next(node for node in nodes if node.id == "root")
    assert root.label == "ML"
    assert root.children == ["a"]
    assert root.metadata.connections == 1


def test_exactly_one_root_at_level_zero():
    payload = {
        "concepts": [
            _concept("x", type="root", level=0),
            _concept("y", level=0),
        ],
    }
    nodes, _ = build(payload)

    roots = [node for node in nodes if node.type == "root"]
    assert len(roots) == 1
    assert roots[0].level == 0
    assert all(node.level >= 1 for node in nodes if node.type != "root")
    assert roots[0].label == "Main Topic"


def test_dangling_relationship_is_excluded():
    payload = {
        "rootConcept": {"label": "Topic"},
        "concepts": [_concept("a"), _concept("b")],
        "relationships": [
            {"sourceId": "a", "targetId": "b", "type": "association"},
            {"sourceId": "a", "targetId": "missing", "type": "association"},
        ],
    }
    _, edges = build(payload)

    explicit = [edge for edge in edges if edge.id.startswith("conn-")]
    assert len(explicit) < len(payload["relationships"])
    node_ids = {"root", "a", "b"}
    assert all(edge.source in node_ids and edge.target in node_ids for edge in edges)


def test_hierarchy_edges_point_deeper():
    payload = {
        "concepts": [
            _concept("a", level=1),
            _concept("b", level=2, parentId="a"),
            _concept("c", level=1, parentId="b"),
        ],
        "relationships": [
            {"sourceId": "b", "targetId": "a", "type": "hierarchy"},
            {"sourceId": "a", "targetId": "b", "type": "parent-child"},
        ],
    }
    nodes, edges = build(payload)
    levels = {node.id: node.level for node in nodes}

    for edge in edges:
        if edge.type == "hierarchy":
            assert levels[edge.source] < levels[edge.target]
    assert levels["c"] == 3


def test_unknown_parent_and_cycle_reattach_to_root():
    payload = {
        "concepts": [
            _concept("a", parentId="ghost"),
            _concept("b", parentId="c"),
            _concept("c", parentId="b"),
            _concept("d", parentId="d"),
        ],
    }
    nodes, _ = build(payload)
    parents = {node.id: node.parent_id for node in nodes}

    assert parents["a"] == "root"
    assert parents["d"] == "root"
    assert "root" in (parents["b"], parents["c"])


def test_depth_is_capped_by_max_depth():
    payload = {
        "concepts": [
            _concept("a", level=1),
            _concept("b", level=2, parentId="a"),
            _concept("c", level=3, parentId="b"),
        ],
    }
    nodes, edges = build(payload, MindMapOptions(max_depth=2))
    by_id = {node.id: node for node in nodes}

    assert max(node.level for node in nodes) <= 2
    assert by_id["c"].parent_id == "a"
    assert by_id["c"].level == 2
    assert ("a", "c") in {(edge.source, edge.target) for edge in edges}


def test_max_nodes_includes_root():
    payload = {"concepts": [_concept(str(i)) for i in range(10)]}
    nodes, _ = build(payload, MindMapOptions(max_nodes=4))
    assert len(nodes) == 4


def test_invalid_records_are_skipped():
    payload = {
        "concepts": [
            "not an object",
            {"label": "No id"},
            {"id": "no-label"},
            _concept("root"),
            _concept("a"),
            _concept("a", label="Duplicate"),
        ],
        "relationships": [
            {"sourceId": "a", "targetId": "a"},
            {"sourceId": "a"},
            42,
        ],
    }
    nodes, edges = build(payload)

    assert _ids(nodes) == {"root", "a"}
    assert next(node for node in nodes if node.id == "a").label == "Concept a"
    assert _ids(edges) == {"pc-a"}


def test_garbage_payload_yields_root_only():
    nodes, edges = build(None)
    assert [node.id for node in nodes] == ["root"]
    assert edges == []


def test_duplicate_relationships_collapse():
    payload = {
        "concepts": [_concept("a"), _concept("b")],
        "relationships": [
            {"sourceId": "a", "targetId": "b", "type": "dependency"},
            {"sourceId": "a", "targetId": "b", "type": "prerequisite"},
            {"sourceId": "root", "targetId": "a", "type": "hierarchy"},
        ],
    }
    _, edges = build(payload)

    assert sum(1 for edge in edges if edge.type == "dependency") == 1
    root_to_a = [edge for edge in edges if (edge.source, edge.target) == ("root", "a")]
    assert len(root_to_a) == 1


def test_unknown_edge_type_becomes_association():
    nodes_by_id, _ = build({"concepts": [_concept("a"), _concept("b")]})
    by_id = {node.id: node for node in nodes_by_id}
    edge, reason = parse_relationship(
        {"sourceId": "a", "targetId": "b", "type": "weird", "strength": 7}, 3, by_id
    )
    assert reason is None
    assert edge.id == "conn-3"
    assert edge.type == "association"
    assert edge.strength == 1.0


def test_options_drop_examples_and_definitions():
    options = MindMapOptions(include_examples=False, include_definitions=False)
    node, reason = parse_concept(
        _concept("a", examples=["one"], definition="A thing", type="definition"), options
    )
    assert reason is None
    assert node.examples == []
    assert node.definition == ""
    assert node.type == "definition"


def test_examples_are_truncated_to_five():
    node, _ = parse_concept(_concept("a", examples=[f"e{i}" for i in range(8)]), MindMapOptions())
    assert node.examples == ["e0", "e1", "e2", "e3", "e4"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        (0.7, 0.7),
        (8, 0.8),
        ("5", 0.5),
        (-3, 0.0),
        (42, 1.0),
        (None, 0.5),
        ("high", 0.5),
        (True, 0.5),
    ],
)
def test_normalize_score(raw, expected):
    assert normalize_score(raw) == pytest.approx(expected)


def test_build_is_idempotent():
    payload = {
        "rootConcept": {"label": "Topic"},
        "concepts": [_concept("a"), _concept("b", parentId="a", level=2), _concept("c", parentId="zzz")],
        "relationships": [{"sourceId": "b", "targetId": "c", "type": "contrast"}],
    }
    first_nodes, first_edges = build(payload)
    second_nodes, second_edges = build(payload)

    def node_key(node):
        return (node.id, node.level, node.parent_id, node.type)

    def edge_key(edge):
        return (edge.id, edge.source, edge.target, edge.type)

    assert {node_key(n) for n in first_nodes} == {node_key(n) for n in second_nodes}
    assert {edge_key(e) for e in first_edges} == {edge_key(e) for e in second_edges}


@pytest.mark.parametrize("label", ["R", " R ", "", None])
def test_root_label_too_short_falls_back(label):
    assert build_root({"label": label}).label == "Main Topic"


def test_one_letter_concept_is_rejected_and_children_reattach():
    node, reason = parse_concept(_concept("c", label="C"), MindMapOptions())
    assert node is None
    assert "shorter than 2" in reason

    payload = {
        "rootConcept": {"label": "Pointers"},
        "concepts": [_concept("c", label="C"), _concept("ptr", level=2, parentId="c")],
    }
    nodes, edges = build(payload)

    assert _ids(nodes) == {"root", "ptr"}
    ptr = next(node for node in nodes if node.id == "ptr")
    assert ptr.parent_id == "root"
    assert all(edge.source in _ids(nodes) and edge.target in _ids(nodes) for edge in edges)


def test_key_points_related_concepts_and_confidence():
    node, _ = parse_concept(
        _concept(
            "a",
            keyPoints=["Bias shifts the output", "", 3],
            relatedConcepts=["Weights"],
            confidence=9,
        ),
        MindMapOptions(),
    )
    assert node.key_points == ["Bias shifts the output", "3"]
    assert node.related_concepts == ["Weights"]
    assert node.metadata.confidence == pytest.approx(0.9)

    plain, _ = parse_concept(_concept("b", keyPoints="not a list"), MindMapOptions())
    assert plain.key_points == []
    assert plain.related_concepts == []
    assert plain.metadata.confidence == pytest.approx(0.8)


SEGMENTS = [
    TranscriptSegment(text="Welcome back to the channel everyone", start=0.0, duration=4.0),
    TranscriptSegment(text="Gradient descent walks downhill on the loss surface", start=30.0, duration=5.5),
]


def test_find_source_segment_picks_best_overlap():
    segment = find_source_segment("Gradient descent minimises the loss", SEGMENTS)
    assert segment is not None
    assert (segment.start, segment.end) == (30.0, 35.5)
    assert segment.text == SEGMENTS[1].text


def test_find_source_segment_needs_enough_long_words():
    # "the" and "on" are too short to count.
    assert find_source_segment("on the", SEGMENTS) is None
    assert find_source_segment("Convolution kernels", SEGMENTS) is None
    assert find_source_segment("Gradient descent", []) is None
    assert find_source_segment("Gradient descent", None) is None


def test_build_links_concepts_to_segments():
    payload = {
        "concepts": [
            _concept("gd", label="Gradient descent", description="Walks downhill"),
            _concept("cnn", label="Convolutions"),
        ],
    }
    nodes, _ = build(payload, segments=SEGMENTS)
    by_id = {node.id: node for node in nodes}

    assert by_id["gd"].source_segment.start == 30.0
    assert by_id["cnn"].source_segment is None
    assert by_id["root"].source_segment is None
    assert by_id["gd"].model_dump(by_alias=True)["sourceSegment"]["end"] == 35.5
