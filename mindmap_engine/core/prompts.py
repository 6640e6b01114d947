# mindmap_engine/core/prompts.py
# This file is the single source of truth for all AI prompt engineering.

CONCEPT_SYSTEM_PROMPT = (
    "You are an expert knowledge mapper and educational content analyzer. "
    "Always respond with valid JSON containing a well-structured concept map."
)

CONCEPT_EXTRACTION_PROMPT = """
You are an expert knowledge mapper specializing in mind maps for educational videos.
Extract the concepts and the relationships between them from the video content below.

Video Information:
- Title: {title}
- Channel: {channel}
- Duration: {duration_minutes} minutes
- Description: {description}
- Tags: {tags}

Content Summary:
{summary}

Key Points:
{key_points}

Main Topics:
{topics}
{focus_context}
Source Content:
{transcript}

Respond with ONLY a valid JSON object in the following format:
{{
  "rootConcept": {{
    "label": "Main topic or title",
    "description": "Brief description of the root concept"
  }},
  "concepts": [
    {{
      "id": "concept-1",
      "label": "Concept name",
      "type": "main-topic|subtopic|concept|example|definition|detail",
      "level": 1,
      "parentId": "root",
      "description": "Detailed description",
      "examples": ["example 1", "example 2"],
      "definition": "Clear definition if applicable",
      "keyPoints": ["key point 1", "key point 2"],
      "relatedConcepts": ["concept-2"],
      "importance": 0.8,
      "complexity": 0.6,
      "confidence": 0.9,
      "category": "Category name",
      "tags": ["tag1", "tag2"]
    }}
  ],
  "relationships": [
    {{
      "sourceId": "concept-1",
      "targetId": "concept-2",
      "type": "hierarchy|association|dependency|example|contrast",
      "label": "Relationship description",
      "strength": 0.8,
      "bidirectional": false
    }}
  ]
}}

Mind Map Requirements:
- Maximum nodes: {max_nodes}
- Maximum depth: {max_depth}
- Complexity level: {complexity}
- Language: {language}
- {examples_rule}
- {definitions_rule}

Concept Guidelines:
- The root concept is the main topic of the video; use "root" as the parentId of level 1 concepts.
- Include 2-4 main topics at level 1 and 2-6 subtopics for each main topic at level 2.
- Every concept except the root must name an existing parentId one level above it.
- Keep labels short (under 100 characters) and put details in the description.
- Rate importance and complexity between 0 and 1.

Relationship Guidelines:
- hierarchy: direct parent-child structure, always from the shallower concept to the deeper one.
- association: concepts that are connected but not hierarchical.
- dependency: a concept that must be understood first.
- example: a specific instance or application of a concept.
- contrast: concepts that are best understood against each other.
- Rate strength between 0 and 1 and set bidirectional when the relationship runs both ways.
""".strip()

