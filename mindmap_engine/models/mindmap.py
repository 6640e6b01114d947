# mindmap_engine/models/mindmap.py
from typing import Literal
from pydantic import ConfigDict, Field
from mindmap_engine.models.graph import CamelModel, Node, Edge, LayoutSpec
from mindmap_engine.models.validation import CollectionValidation

class ConceptCluster(CamelModel):
    id: str
    name: str
    node_ids: list[str]
    color: str

class MindMapMetadata(CamelModel):
    total_nodes: int
    total_edges: int
    max_depth: int
    root_node_id: str
    created_at: str
    version: str = "1.0"
    complexity: Literal["simple", "detailed", "comprehensive"] = "detailed"
    estimated_view_time: int = 0  # minutes
    generated_by: Literal["model", "fallback"] = "model"
    concept_clusters: list[ConceptCluster] = Field(default_factory=list)

class MindMapStatistics(CamelModel):
    nodes_by_type: dict[str, int] = Field(default_factory=dict)
    nodes_by_level: dict[int, int] = Field(default_factory=dict)
    edges_by_type: dict[str, int] = Field(default_factory=dict)
    average_connections: float = 0.0
    average_complexity: float = 0.0
    concept_coverage: float = 0.0  # percent

class ExportFormats(CamelModel):
    json_data: str = Field(alias="json")
    flow_notation: str
    graph_notation: str

class MindMap(CamelModel):
    """A finished mind map. Treated as a value: regenerate instead of mutating."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    nodes: list[Node]
    edges: list[Edge]
    layout: LayoutSpec
    metadata: MindMapMetadata
    statistics: MindMapStatistics
    validation: CollectionValidation
    export_formats: ExportFormats

    def get_node(self, node_id: str) -> Node | None:
        return next((node for node in self.nodes if node.id == node_id), None)
