# mindmap_engine/services/mindmap_service.py
import logging
import math
from datetime import datetime, timezone
from typing import Any, Literal
from uuid import uuid4

from mindmap_engine.core.config import settings
from mindmap_engine.core.exceptions import InsufficientContentError
from mindmap_engine.models.content import TranscriptSegment, VideoContent
from mindmap_engine.models.graph import ROOT_ID
from mindmap_engine.models.mindmap import MindMap, MindMapMetadata
from mindmap_engine.models.options import MindMapOptions
from mindmap_engine.services import layout_engine, structure_builder
from mindmap_engine.services.concept_source import ConceptSource, build_fallback_payload
from mindmap_engine.services.exporter import export_graph
from mindmap_engine.services.statistics import calculate_statistics, build_concept_clusters
from mindmap_engine.services.structure_validator import validate_collection
from mindmap_engine.services.styling import apply_styles

logger = logging.getLogger(__name__)

NODES_PER_VIEW_MINUTE = 10


def assemble_mind_map(
    payload: Any,
    title: str,
    options: MindMapOptions | None = None,
    generated_by: Literal["model", "fallback"] = "model",
    segments: list[TranscriptSegment] | None = None,
) -> MindMap:
    """Run a raw concept payload through build, validate, layout, style and export."""
    options = options or MindMapOptions()

    nodes, edges = structure_builder.build(payload, options, segments)
    validation = validate_collection(nodes, edges)

    # Only what passed validation goes into the final map.
    nodes = [node.model_copy(deep=True) for node in validation.node_validation.valid_nodes]
    edges = [edge.model_copy(deep=True) for edge in validation.edge_validation.valid_edges]
    structure_builder.recompute_derived(nodes, edges)

    spec = layout_engine.plan_layout(nodes, options.organization_style)
    nodes = layout_engine.layout(nodes, edges, options.organization_style, spec)
    nodes, edges = apply_styles(nodes, edges, options.color_scheme)

    clusters = build_concept_clusters(nodes, edges) if options.group_by_concepts else []
    metadata = MindMapMetadata(
        total_nodes=len(nodes),
        total_edges=len(edges),
        max_depth=max((node.level for node in nodes), default=0),
        root_node_id=next((node.id for node in nodes if node.type == "root"), ROOT_ID),
        created_at=datetime.now(timezone.utc).isoformat(),
        complexity=options.complexity,
        estimated_view_time=math.ceil(len(nodes) / NODES_PER_VIEW_MINUTE),
        generated_by=generated_by,
        concept_clusters=clusters,
    )

    mind_map = MindMap(
        id=str(uuid4()),
        title=title,
        nodes=nodes,
        edges=edges,
        layout=spec,
        metadata=metadata,
        statistics=calculate_statistics(nodes, edges),
        validation=validation,
        export_formats=export_graph(nodes, edges, spec),
    )

    logger.info(
        "Assembled mind map '%s': nodes=%s edges=%s score=%.3f source=%s",
        title, metadata.total_nodes, metadata.total_edges, validation.overall_score, generated_by,
    )
    return mind_map


class MindMapService:
    def __init__(self, concept_source: ConceptSource | None = None):
        self.concept_source = concept_source

    @staticmethod
    def check_content(content: VideoContent) -> None:
        transcript = content.transcript.strip()
        summary = content.summary.strip()
        if not transcript and not summary:
            raise InsufficientContentError("Transcript and summary are both empty.")
        if len(transcript) + len(summary) < settings.MIN_CONTENT_LENGTH:
            raise InsufficientContentError(
                f"Content is too short to map (minimum {settings.MIN_CONTENT_LENGTH} characters)."
            )

    async def generate_mind_map(self, content: VideoContent, options: MindMapOptions | None = None) -> MindMap:
        options = options or MindMapOptions()
        self.check_content(content)

        payload = None
        if self.concept_source is None:
            logger.warning("No concept source configured; building '%s' from topics and key points.", content.title)
        else:
            try:
                payload = await self.concept_source.extract_concepts(content, options)
            except Exception as e:
                logger.error("Concept source failed for '%s', using fallback structure: %s", content.title, e)

            concepts = payload.get("concepts") if isinstance(payload, dict) else None
            if payload is not None and not (isinstance(concepts, list) and concepts):
                logger.warning("Concept source returned no concepts for '%s'; using fallback structure.", content.title)
                payload = None

        if payload is None:
            return assemble_mind_map(
                build_fallback_payload(content, options), content.title, options, "fallback", content.segments
            )
        return assemble_mind_map(payload, content.title, options, "model", content.segments)
