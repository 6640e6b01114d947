# mindmap_engine/models/options.py
from typing import Literal
from pydantic import BaseModel, Field
from mindmap_engine.models.graph import LayoutStrategy

ColorScheme = Literal["default", "categorical", "importance", "difficulty"]

class MindMapOptions(BaseModel):
    language: str = "en"
    max_nodes: int = Field(default=50, ge=1)
    max_depth: int = Field(default=4, ge=1, le=10)
    include_examples: bool = True
    include_definitions: bool = True
    organization_style: LayoutStrategy = "hierarchical"
    focus_areas: list[str] = Field(default_factory=list)
    complexity: Literal["simple", "detailed", "comprehensive"] = "detailed"
    color_scheme: ColorScheme = "categorical"
    group_by_concepts: bool = True
