# mindmap_engine/services/structure_validator.py
"""
Field-level and structural validation for mind maps.

Nothing in this module raises on bad data: every check appends a
human-readable issue (and, where it helps, a suggestion) to a result object.
"""
import logging
import math
from collections import Counter

from mindmap_engine.models.graph import Node, Edge, NODE_TYPES, EDGE_TYPES, MIN_LABEL_LENGTH, MAX_LABEL_LENGTH
from mindmap_engine.models.validation import (
    ItemValidation,
    StructureAnalysis,
    ValidationResult,
    InvalidNode,
    InvalidEdge,
    NodeValidationSummary,
    EdgeValidationSummary,
    CollectionStatistics,
    CollectionValidation,
)

logger = logging.getLogger(__name__)

# Scoring weights and thresholds. These are empirical and meant to be tuned.
BASE_SCORE = 0.5
ROOT_BONUS = 0.2
ROOT_PENALTY = 0.3
CONNECTED_BONUS = 0.15
DISCONNECTED_PENALTY = 0.2
ORPHAN_PENALTY = 0.1
BALANCE_BONUS = 0.1
IMBALANCE_PENALTY = 0.1
BRANCHING_BONUS = 0.05
OVER_BRANCHING_PENALTY = 0.05
EDGE_QUALITY_WEIGHT = 0.1

UNBALANCED_THRESHOLD = 0.3
BALANCED_THRESHOLD = 0.7
MIN_BRANCHING = 1.5
MAX_BRANCHING = 6.0
MIN_MAIN_TOPIC_RATIO = 0.1
MAX_MAIN_TOPIC_RATIO = 0.4
MIN_HIERARCHY_RATIO = 0.3
MAX_ASSOCIATION_RATIO = 0.5
MIN_AVERAGE_STRENGTH = 0.3
MAX_AVERAGE_STRENGTH = 0.8

EXCELLENT_SCORE = 0.85
GOOD_SCORE = 0.7
FAIR_SCORE = 0.5
MIN_VALID_SCORE = 0.4
MAX_STRUCTURAL_ISSUES = 5

NODE_WEIGHT = 0.4
EDGE_WEIGHT = 0.3
STRUCTURE_WEIGHT = 0.3
INVALID_RATIO_LIMIT = 0.2
LOW_OVERALL_SCORE = 0.6
MIN_VALID_OVERALL = 0.5

MAX_LEVEL = 10
MAX_EXAMPLES = 5


def validate_node(node: Node) -> ItemValidation:
    issues: list[str] = []
    suggestions: list[str] = []

    if not node.id or not node.id.strip():
        issues.append("Node must have a valid ID")

    label = (node.label or "").strip()
    if not label:
        issues.append("Node must have a label")
    elif len(label) > MAX_LABEL_LENGTH:
        issues.append(f"Node label is too long (max {MAX_LABEL_LENGTH} characters)")
        suggestions.append("Shorten the label and use description for details")
    elif len(label) < MIN_LABEL_LENGTH:
        issues.append("Node label is too short")
        suggestions.append("Provide a more descriptive label")

    if node.type not in NODE_TYPES:
        issues.append(f"Invalid node type: {node.type}")
        suggestions.append(f"Use one of: {', '.join(NODE_TYPES)}")

    if node.level < 0 or node.level > MAX_LEVEL:
        issues.append(f"Node level must be between 0 and {MAX_LEVEL}")
    elif node.type == "root" and node.level != 0:
        issues.append("Root node must be at level 0")
    elif node.type != "root" and node.level == 0:
        issues.append("Only the root node may be at level 0")
        suggestions.append("Move the node to level 1 or deeper")

    metadata = node.metadata
    if not 0 <= metadata.importance <= 1:
        issues.append("Importance must be between 0 and 1")
    if not 0 <= metadata.complexity <= 1:
        issues.append("Complexity must be between 0 and 1")
    if not 0 <= metadata.confidence <= 1:
        issues.append("Confidence must be between 0 and 1")
    if metadata.connections < 0:
        issues.append("Connections count cannot be negative")

    if node.position is not None:
        if not (math.isfinite(node.position.x) and math.isfinite(node.position.y)):
            issues.append("Position coordinates must be finite numbers")

    if len(node.examples) > MAX_EXAMPLES:
        suggestions.append(f"Consider limiting examples to {MAX_EXAMPLES} or fewer")

    return ItemValidation(is_valid=not issues, issues=issues, suggestions=suggestions)


def validate_edge(edge: Edge, nodes: list[Node]) -> ItemValidation:
    issues: list[str] = []
    suggestions: list[str] = []
    by_id = {node.id: node for node in nodes}

    if not edge.id or not edge.id.strip():
        issues.append("Edge must have a valid ID")
    if not edge.source or not edge.source.strip():
        issues.append("Edge must have a source node ID")
    if not edge.target or not edge.target.strip():
        issues.append("Edge must have a target node ID")

    source = by_id.get(edge.source)
    target = by_id.get(edge.target)
    if source is None:
        issues.append(f"Source node '{edge.source}' does not exist")
    if target is None:
        issues.append(f"Target node '{edge.target}' does not exist")

    if edge.type not in EDGE_TYPES:
        issues.append(f"Invalid edge type: {edge.type}")
        suggestions.append(f"Use one of: {', '.join(EDGE_TYPES)}")

    if not 0 <= edge.strength <= 1:
        issues.append("Edge strength must be between 0 and 1")

    if edge.source == edge.target:
        issues.append("Edge cannot connect a node to itself")

    if edge.type == "hierarchy" and source is not None and target is not None:
        if source.level >= target.level:
            issues.append("Hierarchical edges should connect from higher to lower levels")
            suggestions.append("Ensure parent nodes are at lower levels than child nodes")

    return ItemValidation(is_valid=not issues, issues=issues, suggestions=suggestions)


def find_components(nodes: list[Node], edges: list[Edge]) -> list[list[str]]:
    """Connected components of the undirected view of the graph, by node id."""
    adjacency: dict[str, list[str]] = {node.id: [] for node in nodes}
    for edge in edges:
        if edge.source in adjacency and edge.target in adjacency:
            adjacency[edge.source].append(edge.target)
            adjacency[edge.target].append(edge.source)

    visited: set[str] = set()
    components: list[list[str]] = []
    for node in nodes:
        if node.id in visited:
            continue
        component: list[str] = []
        stack = [node.id]
        visited.add(node.id)
        while stack:
            current = stack.pop()
            component.append(current)
            for neighbour in adjacency[current]:
                if neighbour not in visited:
                    visited.add(neighbour)
                    stack.append(neighbour)
        components.append(component)
    return components


def depth_balance(nodes: list[Node]) -> float:
    """1.0 when every level holds the same number of nodes, falling towards 0."""
    if not nodes:
        return 0.0
    levels = Counter(node.level for node in nodes)
    max_depth = max(levels)
    if max_depth < 0:
        return 0.0
    # A map of several nodes crammed onto one level is flat, not balanced.
    if len(nodes) > 1:
        max_depth = max(max_depth, 1)
    ideal = len(nodes) / (max_depth + 1)
    total = sum(max(0.0, 1 - abs(levels.get(level, 0) - ideal) / ideal) for level in range(max_depth + 1))
    return total / (max_depth + 1)


def branching_factor(nodes: list[Node], edges: list[Edge]) -> float:
    """Mean out-degree over all nodes."""
    if not nodes:
        return 0.0
    out_degree = {node.id: 0 for node in nodes}
    for edge in edges:
        if edge.source in out_degree:
            out_degree[edge.source] += 1
    return sum(out_degree.values()) / len(out_degree)


def _edge_quality(edges: list[Edge], suggestions: list[str]) -> float:
    if not edges:
        return 0.0
    quality = 0.5
    types = Counter(edge.type for edge in edges)

    if types["hierarchy"] < len(edges) * MIN_HIERARCHY_RATIO:
        suggestions.append("Consider adding more hierarchical relationships for better structure")
    else:
        quality += 0.25

    if types["association"] > len(edges) * MAX_ASSOCIATION_RATIO:
        suggestions.append("Too many association edges may clutter the mind map")

    average_strength = sum(edge.strength for edge in edges) / len(edges)
    if average_strength < MIN_AVERAGE_STRENGTH:
        suggestions.append("Consider strengthening relationships between concepts")
    elif average_strength > MAX_AVERAGE_STRENGTH:
        suggestions.append("Some relationships may be over-emphasized")
    else:
        quality += 0.25
    return quality


def _category(score: float) -> str:
    if score >= EXCELLENT_SCORE:
        return "excellent"
    if score >= GOOD_SCORE:
        return "good"
    if score >= FAIR_SCORE:
        return "fair"
    return "poor"


def validate_structure(nodes: list[Node], edges: list[Edge]) -> ValidationResult:
    issues: list[str] = []
    suggestions: list[str] = []
    score = BASE_SCORE

    roots = [node for node in nodes if node.type == "root"]
    has_root = len(roots) == 1
    if has_root:
        score += ROOT_BONUS
    else:
        if not roots:
            issues.append("Mind map must have exactly one root node")
            suggestions.append("Add a root node representing the main topic")
        else:
            issues.append("Mind map has multiple root nodes")
            suggestions.append("Consolidate into a single root node")
        score -= ROOT_PENALTY

    components = find_components(nodes, edges)
    is_connected = len(components) == 1
    orphan_count = sum(1 for component in components if len(component) == 1)
    if is_connected:
        score += CONNECTED_BONUS
    else:
        issues.append("Mind map has disconnected components")
        suggestions.append("Ensure all nodes are connected to the main structure")
        score -= DISCONNECTED_PENALTY

    if orphan_count:
        issues.append(f"Found {orphan_count} orphan nodes")
        suggestions.append("Connect isolated nodes to the main structure")
        score -= ORPHAN_PENALTY

    balance = depth_balance(nodes)
    if balance < UNBALANCED_THRESHOLD:
        issues.append("Mind map structure is unbalanced (too deep or too shallow)")
        suggestions.append("Redistribute nodes across levels for better balance")
        score -= IMBALANCE_PENALTY
    elif balance > BALANCED_THRESHOLD:
        score += BALANCE_BONUS

    branching = branching_factor(nodes, edges)
    if branching < MIN_BRANCHING:
        suggestions.append("Consider adding more connections between related concepts")
    elif branching > MAX_BRANCHING:
        suggestions.append("Some nodes may be over-connected; consider simplifying")
        score -= OVER_BRANCHING_PENALTY
    else:
        score += BRANCHING_BONUS

    if nodes:
        main_topic_ratio = sum(1 for node in nodes if node.type == "main-topic") / len(nodes)
        if main_topic_ratio < MIN_MAIN_TOPIC_RATIO:
            suggestions.append("Add more main topic nodes for better organization")
        elif main_topic_ratio > MAX_MAIN_TOPIC_RATIO:
            suggestions.append("Consider consolidating some main topics")

    score += _edge_quality(edges, suggestions) * EDGE_QUALITY_WEIGHT
    score = max(0.0, min(1.0, score))

    category = _category(score)
    is_valid = score >= MIN_VALID_SCORE and len(issues) < MAX_STRUCTURAL_ISSUES

    logger.debug(
        "Validated structure: nodes=%s edges=%s score=%.3f category=%s issues=%s",
        len(nodes), len(edges), score, category, len(issues),
    )

    return ValidationResult(
        is_valid=is_valid,
        score=score,
        issues=issues,
        suggestions=suggestions,
        category=category,
        structure_analysis=StructureAnalysis(
            has_root=has_root,
            is_connected=is_connected,
            has_orphan_nodes=orphan_count > 0,
            orphan_count=orphan_count,
            component_count=len(components),
            depth_balance=balance,
            branching_factor=branching,
        ),
    )


def collection_statistics(nodes: list[Node], edges: list[Edge]) -> CollectionStatistics:
    return CollectionStatistics(
        total_nodes=len(nodes),
        total_edges=len(edges),
        max_depth=max((node.level for node in nodes), default=0),
        average_connections=(
            sum(node.metadata.connections for node in nodes) / len(nodes) if nodes else 0.0
        ),
        node_type_distribution=dict(Counter(node.type for node in nodes)),
        edge_type_distribution=dict(Counter(edge.type for edge in edges)),
    )


def validate_collection(nodes: list[Node], edges: list[Edge]) -> CollectionValidation:
    """Validate every node and edge, then the structure formed by the valid ones."""
    valid_nodes: list[Node] = []
    invalid_nodes: list[InvalidNode] = []
    seen_ids: set[str] = set()
    for node in nodes:
        result = validate_node(node)
        issues = list(result.issues)
        if node.id in seen_ids:
            issues.append(f"Duplicate node ID '{node.id}'")
        if issues:
            invalid_nodes.append(InvalidNode(node=node, issues=issues))
        else:
            seen_ids.add(node.id)
            valid_nodes.append(node)

    # Edges are checked against valid nodes only, so edges into rejected nodes drop out too.
    valid_edges: list[Edge] = []
    invalid_edges: list[InvalidEdge] = []
    for edge in edges:
        result = validate_edge(edge, valid_nodes)
        if result.is_valid:
            valid_edges.append(edge)
        else:
            invalid_edges.append(InvalidEdge(edge=edge, issues=result.issues))

    structure = validate_structure(valid_nodes, valid_edges)

    if not nodes and not edges:
        overall_score = 0.0
    else:
        node_ratio = len(valid_nodes) / max(1, len(nodes))
        edge_ratio = len(valid_edges) / max(1, len(edges))
        overall_score = node_ratio * NODE_WEIGHT + edge_ratio * EDGE_WEIGHT + structure.score * STRUCTURE_WEIGHT

    recommendations: list[str] = []
    if not nodes:
        recommendations.append("Mind map has no nodes - regenerate from the source content")
    if len(invalid_nodes) > len(nodes) * INVALID_RATIO_LIMIT:
        recommendations.append("High number of invalid nodes - review node generation parameters")
    if len(invalid_edges) > len(edges) * INVALID_RATIO_LIMIT:
        recommendations.append("High number of invalid edges - check node relationships")
    if overall_score < LOW_OVERALL_SCORE:
        recommendations.append("Overall mind map quality is low - consider regenerating")
    if not structure.structure_analysis.has_root:
        recommendations.append("Add a clear root node representing the main topic")
    if not structure.structure_analysis.is_connected:
        recommendations.append("Ensure all concepts are connected to the main structure")

    is_valid = bool(nodes) and overall_score >= MIN_VALID_OVERALL and structure.is_valid

    logger.info(
        "Validated mind map collection: nodes=%s/%s edges=%s/%s overall=%.3f valid=%s",
        len(valid_nodes), len(nodes), len(valid_edges), len(edges), overall_score, is_valid,
    )

    return CollectionValidation(
        is_valid=is_valid,
        overall_score=overall_score,
        node_validation=NodeValidationSummary(valid_nodes=valid_nodes, invalid_nodes=invalid_nodes),
        edge_validation=EdgeValidationSummary(valid_edges=valid_edges, invalid_edges=invalid_edges),
        structure_validation=structure,
        recommendations=recommendations,
        statistics=collection_statistics(valid_nodes, valid_edges),
    )
