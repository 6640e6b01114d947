# mindmap_engine/services/structure_builder.py
"""
Turns the untrusted Concept Source payload into a typed node/edge graph.

Every concept and relationship record passes through a parse function that
returns either a well-formed model or the reason it was rejected. Rejected
records are logged and dropped; nothing here raises on bad input.
"""
import logging
import math
from collections import deque
from typing import Any

from mindmap_engine.models.content import TranscriptSegment
from mindmap_engine.models.graph import (
    Node,
    Edge,
    NodeMetadata,
    SourceSegment,
    NODE_TYPES,
    EDGE_TYPES,
    ROOT_ID,
    MIN_LABEL_LENGTH,
    MAX_LABEL_LENGTH,
)
from mindmap_engine.models.options import MindMapOptions

logger = logging.getLogger(__name__)

DEFAULT_ROOT_LABEL = "Main Topic"
MAX_EXAMPLES = 5
DEFAULT_SCORE = 0.5
DEFAULT_STRENGTH = 0.5
DEFAULT_CONFIDENCE = 0.8
# Share of words a concept must have in common with a transcript segment to link to it.
SEGMENT_MATCH_THRESHOLD = 0.1
MIN_MATCH_WORD_LENGTH = 4

# Relationship names used by older prompts, mapped onto the edge vocabulary.
EDGE_TYPE_ALIASES = {
    "parent-child": "hierarchy",
    "related": "association",
    "prerequisite": "dependency",
    "application": "association",
}


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_score(value: Any, default: float = DEFAULT_SCORE) -> float:
    """
    Map an importance/complexity value onto [0, 1].

    Values above 1 and up to 10 are read as the 1-10 scale some prompts use.
    """
    number = _as_number(value)
    if number is None:
        return default
    if 1 < number <= 10:
        number = number / 10
    return _clamp(number, 0.0, 1.0)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_text_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [text for text in (_as_text(item) for item in value) if text]


def _as_level(value: Any, max_depth: int) -> int:
    number = _as_number(value)
    level = int(number) if number is not None else 1
    return int(_clamp(level, 1, max_depth))


def build_root(root_concept: Any) -> Node:
    root_concept = root_concept if isinstance(root_concept, dict) else {}
    label = _as_text(root_concept.get("label"))[:MAX_LABEL_LENGTH]
    if len(label) < MIN_LABEL_LENGTH:
        if label:
            logger.warning("Root label '%s' is too short; using '%s'.", label, DEFAULT_ROOT_LABEL)
        label = DEFAULT_ROOT_LABEL
    return Node(
        id=ROOT_ID,
        label=label,
        type="root",
        level=0,
        description=_as_text(root_concept.get("description")),
        metadata=NodeMetadata(importance=1.0, complexity=0.5, category="Main Topic", tags=["root"]),
    )


def parse_concept(record: Any, options: MindMapOptions) -> tuple[Node | None, str | None]:
    """Parse one concept record into a node, or return the rejection reason."""
    if not isinstance(record, dict):
        return None, "concept record is not an object"

    node_id = _as_text(record.get("id"))
    label = _as_text(record.get("label"))
    if not node_id:
        return None, "concept record has no id"
    if not label:
        return None, f"concept '{node_id}' has no label"
    if len(label) < MIN_LABEL_LENGTH:
        return None, f"concept '{node_id}' label '{label}' is shorter than {MIN_LABEL_LENGTH} characters"
    if node_id == ROOT_ID:
        return None, f"concept id '{ROOT_ID}' is reserved for the root"

    node_type = _as_text(record.get("type"))
    if node_type not in NODE_TYPES or node_type == "root":
        node_type = "concept"

    examples = _as_text_list(record.get("examples")) if options.include_examples else []
    if len(examples) > MAX_EXAMPLES:
        logger.warning(
            "Concept '%s' has %s examples; keeping the first %s.", node_id, len(examples), MAX_EXAMPLES
        )
        examples = examples[:MAX_EXAMPLES]

    parent_id = _as_text(record.get("parentId")) or ROOT_ID

    node = Node(
        id=node_id,
        label=label[:MAX_LABEL_LENGTH],
        type=node_type,
        level=_as_level(record.get("level"), options.max_depth),
        parent_id=parent_id,
        description=_as_text(record.get("description")),
        examples=examples,
        definition=_as_text(record.get("definition")) if options.include_definitions else "",
        key_points=_as_text_list(record.get("keyPoints")),
        related_concepts=_as_text_list(record.get("relatedConcepts")),
        metadata=NodeMetadata(
            importance=normalize_score(record.get("importance")),
            complexity=normalize_score(record.get("complexity")),
            confidence=normalize_score(record.get("confidence"), DEFAULT_CONFIDENCE),
            category=_as_text(record.get("category")) or "General",
            tags=_as_text_list(record.get("tags")),
        ),
    )
    return node, None


def parse_relationship(
    record: Any, index: int, nodes_by_id: dict[str, Node]
) -> tuple[Edge | None, str | None]:
    """Parse one relationship record into an edge, or return the rejection reason."""
    if not isinstance(record, dict):
        return None, "relationship record is not an object"

    source = _as_text(record.get("sourceId"))
    target = _as_text(record.get("targetId"))
    if not source or not target:
        return None, "relationship is missing sourceId or targetId"
    if source not in nodes_by_id:
        return None, f"source '{source}' does not exist"
    if target not in nodes_by_id:
        return None, f"target '{target}' does not exist"
    if source == target:
        return None, f"relationship on '{source}' is a self-loop"

    edge_type = _as_text(record.get("type")).lower()
    edge_type = EDGE_TYPE_ALIASES.get(edge_type, edge_type)
    if edge_type not in EDGE_TYPES:
        edge_type = "association"

    if edge_type == "hierarchy" and nodes_by_id[source].level >= nodes_by_id[target].level:
        return None, f"hierarchy edge {source} -> {target} does not point to a deeper level"

    strength = _as_number(record.get("strength"))
    edge = Edge(
        id=f"conn-{index}",
        source=source,
        target=target,
        type=edge_type,
        label=_as_text(record.get("label")),
        strength=_clamp(strength, 0.0, 1.0) if strength is not None else DEFAULT_STRENGTH,
        bidirectional=record.get("bidirectional") is True,
    )
    return edge, None


def _resolve_parents(nodes_by_id: dict[str, Node], max_depth: int) -> None:
    # Unknown or self parents go to the root.
    for node in nodes_by_id.values():
        if node.id == ROOT_ID:
            continue
        if node.parent_id not in nodes_by_id or node.parent_id == node.id:
            logger.warning("Concept '%s' has unknown parent '%s'; attaching to root.", node.id, node.parent_id)
            node.parent_id = ROOT_ID

    # Break parent cycles.
    for node in nodes_by_id.values():
        seen = {node.id}
        current = node.parent_id
        while current is not None and current != ROOT_ID:
            if current in seen:
                logger.warning("Concept '%s' is part of a parent cycle; attaching to root.", node.id)
                node.parent_id = ROOT_ID
                break
            seen.add(current)
            current = nodes_by_id[current].parent_id

    # Walk down from the root so every parent's level is final before its children.
    children: dict[str, list[str]] = {node_id: [] for node_id in nodes_by_id}
    for node in nodes_by_id.values():
        if node.parent_id is not None:
            children[node.parent_id].append(node.id)

    queue = deque([ROOT_ID])
    while queue:
        parent = nodes_by_id[queue.popleft()]
        for child_id in children[parent.id]:
            child = nodes_by_id[child_id]
            if child.level <= parent.level:
                anchor = parent
                while anchor.level >= max_depth:
                    anchor = nodes_by_id[anchor.parent_id]
                if anchor is not parent:
                    logger.warning(
                        "Concept '%s' exceeds max depth under '%s'; attaching to '%s'.",
                        child.id, parent.id, anchor.id,
                    )
                child.parent_id = anchor.id
                child.level = anchor.level + 1
            queue.append(child_id)


def recompute_derived(nodes: list[Node], edges: list[Edge]) -> None:
    """Rebuild child lists from parent pointers and connection counts from edges."""
    by_id = {node.id: node for node in nodes}
    for node in nodes:
        node.children = []
    for node in nodes:
        parent = by_id.get(node.parent_id) if node.parent_id else None
        if parent is not None:
            parent.children.append(node.id)

    counts = {node.id: 0 for node in nodes}
    for edge in edges:
        if edge.source in counts:
            counts[edge.source] += 1
        if edge.target in counts and edge.target != edge.source:
            counts[edge.target] += 1
    for node in nodes:
        node.metadata.connections = counts[node.id]


def find_source_segment(text: str, segments: list[TranscriptSegment] | None) -> SourceSegment | None:
    """
    The transcript segment sharing the most words with ``text``.

    Only words of four or more letters count, scored against the longer of the
    two word lists. Returns None unless the best score clears the threshold.
    """
    if not segments:
        return None
    words = text.lower().split()
    best, best_score = None, 0.0
    for segment in segments:
        segment_words = segment.text.lower().split()
        shared = [word for word in words if len(word) >= MIN_MATCH_WORD_LENGTH and word in segment_words]
        score = len(shared) / max(len(words), len(segment_words), 1)
        if score > best_score:
            best, best_score = segment, score

    if best is None or best_score <= SEGMENT_MATCH_THRESHOLD:
        return None
    return SourceSegment(start=best.start, end=best.start + best.duration, text=best.text)


def build(
    payload: Any,
    options: MindMapOptions | None = None,
    segments: list[TranscriptSegment] | None = None,
) -> tuple[list[Node], list[Edge]]:
    """Build the canonical node and edge lists from a Concept Source payload."""
    options = options or MindMapOptions()
    payload = payload if isinstance(payload, dict) else {}

    root = build_root(payload.get("rootConcept"))
    nodes_by_id: dict[str, Node] = {root.id: root}

    concepts = payload.get("concepts")
    for index, record in enumerate(concepts if isinstance(concepts, list) else []):
        node, reason = parse_concept(record, options)
        if node is None:
            logger.warning("Skipping concept #%s: %s", index, reason)
            continue
        if node.id in nodes_by_id:
            logger.warning("Skipping concept #%s: duplicate id '%s'", index, node.id)
            continue
        if len(nodes_by_id) >= options.max_nodes:
            logger.warning("Skipping concept '%s': map already holds %s nodes", node.id, options.max_nodes)
            continue
        node.source_segment = find_source_segment(f"{node.label} {node.description}", segments)
        nodes_by_id[node.id] = node

    _resolve_parents(nodes_by_id, options.max_depth)

    edges: list[Edge] = []
    seen_triples: set[tuple[str, str, str]] = set()
    relationships = payload.get("relationships")
    for index, record in enumerate(relationships if isinstance(relationships, list) else []):
        edge, reason = parse_relationship(record, index, nodes_by_id)
        if edge is None:
            logger.warning("Skipping relationship #%s: %s", index, reason)
            continue
        triple = (edge.source, edge.target, edge.type)
        if triple in seen_triples:
            logger.warning(
                "Skipping relationship #%s: duplicate %s edge %s -> %s", index, edge.type, edge.source, edge.target
            )
            continue
        seen_triples.add(triple)
        edges.append(edge)

    for node in nodes_by_id.values():
        if node.parent_id is None:
            continue
        triple = (node.parent_id, node.id, "hierarchy")
        if triple in seen_triples:
            continue
        seen_triples.add(triple)
        edges.append(
            Edge(id=f"pc-{node.id}", source=node.parent_id, target=node.id, type="hierarchy", strength=1.0)
        )

    nodes = list(nodes_by_id.values())
    recompute_derived(nodes, edges)

    logger.info("Built mind map structure with %s nodes and %s edges", len(nodes), len(edges))
    return nodes, edges
