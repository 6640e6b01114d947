# mindmap_engine/services/statistics.py
from collections import Counter

from mindmap_engine.models.graph import Node, Edge
from mindmap_engine.models.mindmap import MindMapStatistics, ConceptCluster

# Number of distinct categories at which coverage reads as 100%.
FULL_COVERAGE_CATEGORIES = 8
CLUSTER_COLORS = ["#FFE5E5", "#E5F3FF", "#E5FFE5", "#FFF5E5", "#F0E5FF"]


def calculate_statistics(nodes: list[Node], edges: list[Edge]) -> MindMapStatistics:
    if not nodes:
        return MindMapStatistics(edges_by_type=dict(Counter(edge.type for edge in edges)))

    categories = {node.metadata.category for node in nodes}
    return MindMapStatistics(
        nodes_by_type=dict(Counter(node.type for node in nodes)),
        nodes_by_level=dict(sorted(Counter(node.level for node in nodes).items())),
        edges_by_type=dict(Counter(edge.type for edge in edges)),
        average_connections=sum(node.metadata.connections for node in nodes) / len(nodes),
        average_complexity=sum(node.metadata.complexity for node in nodes) / len(nodes),
        concept_coverage=min(100.0, len(categories) / FULL_COVERAGE_CATEGORIES * 100),
    )


def build_concept_clusters(nodes: list[Node], edges: list[Edge]) -> list[ConceptCluster]:
    """One cluster per level-1 node: the node itself plus its direct neighbours, root excluded."""
    by_id = {node.id: node for node in nodes}
    neighbours: dict[str, list[str]] = {node.id: [] for node in nodes}
    for edge in edges:
        if edge.source in neighbours and edge.target in neighbours:
            neighbours[edge.source].append(edge.target)
            neighbours[edge.target].append(edge.source)

    clusters = []
    for index, anchor in enumerate(node for node in nodes if node.level == 1):
        members = [anchor.id]
        for other in neighbours[anchor.id]:
            if other not in members and by_id[other].type != "root":
                members.append(other)
        clusters.append(
            ConceptCluster(
                id=f"cluster-{anchor.id}",
                name=anchor.label,
                node_ids=members,
                color=CLUSTER_COLORS[index % len(CLUSTER_COLORS)],
            )
        )
    return clusters
