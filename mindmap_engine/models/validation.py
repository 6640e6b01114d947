# mindmap_engine/models/validation.py
from typing import Literal
from pydantic import Field
from mindmap_engine.models.graph import CamelModel, Node, Edge

QualityCategory = Literal["excellent", "good", "fair", "poor"]

class ItemValidation(CamelModel):
    """Field-level verdict for a single node or edge."""
    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

class StructureAnalysis(CamelModel):
    has_root: bool
    is_connected: bool
    has_orphan_nodes: bool
    orphan_count: int = 0
    component_count: int = 0
    depth_balance: float
    branching_factor: float

class ValidationResult(CamelModel):
    is_valid: bool
    score: float
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    category: QualityCategory
    structure_analysis: StructureAnalysis

class InvalidNode(CamelModel):
    node: Node
    issues: list[str]

class InvalidEdge(CamelModel):
    edge: Edge
    issues: list[str]

class NodeValidationSummary(CamelModel):
    valid_nodes: list[Node] = Field(default_factory=list)
    invalid_nodes: list[InvalidNode] = Field(default_factory=list)

class EdgeValidationSummary(CamelModel):
    valid_edges: list[Edge] = Field(default_factory=list)
    invalid_edges: list[InvalidEdge] = Field(default_factory=list)

class CollectionStatistics(CamelModel):
    total_nodes: int = 0
    total_edges: int = 0
    max_depth: int = 0
    average_connections: float = 0.0
    node_type_distribution: dict[str, int] = Field(default_factory=dict)
    edge_type_distribution: dict[str, int] = Field(default_factory=dict)

class CollectionValidation(CamelModel):
    is_valid: bool
    overall_score: float
    node_validation: NodeValidationSummary
    edge_validation: EdgeValidationSummary
    structure_validation: ValidationResult
    recommendations: list[str] = Field(default_factory=list)
    statistics: CollectionStatistics
