# mindmap_engine/models/content.py
from pydantic import BaseModel, Field


class TranscriptSegment(BaseModel):
    text: str
    start: float  # seconds
    duration: float = 0


class VideoContent(BaseModel):
    """The processed video material a mind map is generated from."""
    transcript: str = ""
    summary: str = ""
    key_points: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    title: str = "Untitled video"
    description: str = ""
    channel_title: str = ""
    duration: float = 0  # seconds
    tags: list[str] = Field(default_factory=list)
    # Timed transcript pieces; when present, concepts are linked back to them.
    segments: list[TranscriptSegment] = Field(default_factory=list)
