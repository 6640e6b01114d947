# mindmap_engine/models/graph.py
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ROOT_ID = "root"

# Trimmed label length bounds, shared by the builder and the validator.
MIN_LABEL_LENGTH = 2
MAX_LABEL_LENGTH = 100

NODE_TYPES = ("root", "main-topic", "subtopic", "concept", "example", "detail", "definition")
EDGE_TYPES = ("hierarchy", "association", "dependency", "example", "contrast")

LayoutStrategy = Literal["hierarchical", "radial", "network", "timeline"]
LAYOUT_STRATEGIES = ("hierarchical", "radial", "network", "timeline")

class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class Position(CamelModel):
    x: float
    y: float

class Size(CamelModel):
    width: float
    height: float

class NodeMetadata(CamelModel):
    # importance, complexity and confidence share the [0, 1] scale
    importance: float = 0.5
    complexity: float = 0.5
    confidence: float = 0.8
    connections: int = 0
    category: str = "General"
    tags: list[str] = Field(default_factory=list)

class SourceSegment(CamelModel):
    """The transcript passage a concept was matched to, in seconds."""
    start: float
    end: float
    text: str

class NodeStyle(CamelModel):
    background_color: str
    border_color: str
    text_color: str
    font_size: int = 12
    font_weight: Literal["normal", "bold"] = "normal"
    shape: Literal["rectangle", "ellipse", "diamond", "hexagon"] = "rectangle"

class EdgeStyle(CamelModel):
    stroke_color: str
    stroke_width: float = 1.0
    stroke_style: Literal["solid", "dashed", "dotted"] = "solid"
    arrow_type: Literal["none", "arrow", "diamond", "circle"] = "arrow"

class Node(CamelModel):
    id: str
    label: str
    type: str = "concept"
    level: int = 1
    parent_id: str | None = None
    children: list[str] = Field(default_factory=list)
    position: Position | None = None
    size: Size | None = None
    description: str = ""
    examples: list[str] = Field(default_factory=list)
    definition: str = ""
    key_points: list[str] = Field(default_factory=list)
    related_concepts: list[str] = Field(default_factory=list)
    source_segment: SourceSegment | None = None
    metadata: NodeMetadata = Field(default_factory=NodeMetadata)
    style: NodeStyle | None = None

class Edge(CamelModel):
    id: str
    source: str
    target: str
    type: str = "association"
    label: str = ""
    strength: float = 0.5
    bidirectional: bool = False
    style: EdgeStyle | None = None

class Dimensions(CamelModel):
    width: float
    height: float

class Spacing(CamelModel):
    horizontal: float = 200
    vertical: float = 150
    radial: float | None = None

class LayoutSpec(CamelModel):
    type: LayoutStrategy = "hierarchical"
    center_node: str | None = None
    dimensions: Dimensions
    spacing: Spacing = Field(default_factory=Spacing)
    algorithm: str = ""

