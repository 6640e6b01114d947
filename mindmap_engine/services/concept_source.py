# mindmap_engine/services/concept_source.py
import asyncio
import logging
from json import JSONDecodeError
from typing import Any, Protocol

import google.genai as genai
from google.genai import types

from mindmap_engine.core.config import settings
from mindmap_engine.core.exceptions import ConceptSourceError
from mindmap_engine.core.prompts import CONCEPT_SYSTEM_PROMPT, CONCEPT_EXTRACTION_PROMPT
from mindmap_engine.models.content import VideoContent
from mindmap_engine.models.options import MindMapOptions
from mindmap_engine.services.ai_response_parser import parse_ai_response_text

logger = logging.getLogger(__name__)

FALLBACK_LABEL_LENGTH = 50
FALLBACK_TOPIC_IMPORTANCE = 8
FALLBACK_TOPIC_COMPLEXITY = 5
FALLBACK_POINT_IMPORTANCE = 6
FALLBACK_POINT_COMPLEXITY = 4


class ConceptSource(Protocol):
    """Anything that can turn video content into a raw concept payload."""

    async def extract_concepts(self, content: VideoContent, options: MindMapOptions) -> dict[str, Any]:
        ...


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1)) or "None"


def build_concept_prompt(content: VideoContent, options: MindMapOptions) -> str:
    focus_context = ""
    if options.focus_areas:
        focus_context = f"\nSpecial focus areas: {', '.join(options.focus_areas)}\n"

    return CONCEPT_EXTRACTION_PROMPT.format(
        title=content.title,
        channel=content.channel_title or "Unknown",
        duration_minutes=round(content.duration / 60),
        description=content.description or "None",
        tags=", ".join(content.tags) or "None",
        summary=content.summary or "None",
        key_points=_numbered(content.key_points),
        topics=_numbered(content.topics),
        focus_context=focus_context,
        transcript=content.transcript[: settings.MAX_TRANSCRIPT_CHARS],
        max_nodes=options.max_nodes,
        max_depth=options.max_depth,
        complexity=options.complexity,
        language=options.language,
        examples_rule="Include concrete examples" if options.include_examples else "Do not include examples",
        definitions_rule="Include definitions for key terms" if options.include_definitions else "Do not include definitions",
    )


def _truncate(text: str, limit: int = FALLBACK_LABEL_LENGTH) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def build_fallback_payload(content: VideoContent, options: MindMapOptions | None = None) -> dict[str, Any]:
    """
    A minimal concept payload made from the topics and key points alone.

    Used when the concept source fails. Every topic hangs off the root and every
    key point off a topic, so the resulting map is always connected.
    """
    topics = [topic.strip() for topic in content.topics if topic and topic.strip()]
    if not topics:
        topics = [tag.strip() for tag in content.tags if tag and tag.strip()] or ["Overview"]
    points = [point.strip() for point in content.key_points if point and point.strip()]

    concepts: list[dict[str, Any]] = [
        {
            "id": f"topic-{index}",
            "label": topic,
            "type": "main-topic",
            "level": 1,
            "parentId": "root",
            "description": f"Key topic: {topic}",
            "importance": FALLBACK_TOPIC_IMPORTANCE,
            "complexity": FALLBACK_TOPIC_COMPLEXITY,
            "category": topic,
            "tags": ["topic"],
        }
        for index, topic in enumerate(topics)
    ]
    for index, point in enumerate(points):
        parent = index % len(topics)
        concepts.append(
            {
                "id": f"point-{index}",
                "label": _truncate(point),
                "type": "concept",
                "level": 2,
                "parentId": f"topic-{parent}",
                "description": point,
                "importance": FALLBACK_POINT_IMPORTANCE,
                "complexity": FALLBACK_POINT_COMPLEXITY,
                "category": topics[parent],
                "tags": ["key-point"],
            }
        )

    return {
        "rootConcept": {"label": content.title, "description": content.description},
        "concepts": concepts,
        "relationships": [],
    }


class GeminiConceptSource:
    def __init__(self, api_key: str, model: str | None = None):
        self.client = genai.Client(api_key=api_key)
        self.model = model or settings.GEMINI_MODEL

    async def extract_concepts(self, content: VideoContent, options: MindMapOptions) -> dict[str, Any]:
        prompt = build_concept_prompt(content, options)
        generation_config = types.GenerateContentConfig(
            system_instruction=CONCEPT_SYSTEM_PROMPT,
            response_mime_type="application/json",
            temperature=settings.CONCEPT_TEMPERATURE,
            max_output_tokens=settings.CONCEPT_MAX_OUTPUT_TOKENS,
        )

        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=prompt,
                config=generation_config,
            )
        except Exception as e:
            logger.error("Concept extraction call to Gemini failed: %s", e)
            raise ConceptSourceError(f"Concept extraction call failed: {e}") from e

        raw_text = self._extract_structured_text(response)
        if not raw_text:
            logger.error("Gemini response did not contain structured JSON output.")
            raise ConceptSourceError("Concept extraction returned no structured output.")

        try:
            payload = parse_ai_response_text(raw_text)
        except JSONDecodeError as e:
            logger.error("Concept extraction response parsing failed: %s", e)
            logger.debug("Raw concept response text: %s", raw_text)
            raise ConceptSourceError("Concept extraction returned invalid JSON.") from e

        logger.info(
            "Extracted %s concepts and %s relationships for '%s'",
            len(payload.get("concepts") or []), len(payload.get("relationships") or []), content.title,
        )
        return payload

    @staticmethod
    def _part_text(part: Any) -> str:
        text = getattr(part, "text", None)
        if text:
            return text
        inline_data = getattr(part, "inline_data", None)
        data = getattr(inline_data, "data", None) if inline_data else None
        if isinstance(data, bytes):
            return data.decode("utf-8")
        return str(data) if data else ""

    @staticmethod
    def _extract_structured_text(response: Any) -> str:
        """
        Pull the JSON text out of an SDK response, skipping thought-signature parts.
        Falls back to ``response.text``.
        """
        if response is None:
            return ""

        try:
            for candidate in getattr(response, "candidates", None) or []:
                content = getattr(candidate, "content", None)
                for part in getattr(content, "parts", None) or []:
                    inline_data = getattr(part, "inline_data", None)
                    mime_type = (
                        getattr(part, "mime_type", None)
                        or (getattr(inline_data, "mime_type", None) if inline_data else None)
                        or ""
                    ).lower()
                    if mime_type.startswith("application/x-thought"):
                        logger.debug("Skipping thought-signature part in candidate.")
                        continue
                    if mime_type.startswith("application/json") or mime_type.startswith("text/"):
                        text = GeminiConceptSource._part_text(part)
                        if text:
                            return text
        except Exception as exc:
            logger.debug("Falling back to response.text due to extraction error: %s", exc)

        return getattr(response, "text", "") or ""
