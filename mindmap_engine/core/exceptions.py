# mindmap_engine/core/exceptions.py
class MindMapError(Exception):
    """Base class for errors raised by the mind-map engine."""
    def __init__(self, message="Mind map generation failed."):
        self.message = message
        super().__init__(self.message)

class InsufficientContentError(MindMapError):
    """Raised when the transcript and summary cannot support a mind map."""
    def __init__(self, message="Not enough content to build a mind map."):
        super().__init__(message)

class ConceptSourceError(MindMapError):
    """Raised when the concept extraction call fails or returns unusable data."""
    def __init__(self, message="Concept extraction failed."):
        super().__init__(message)

class UnknownLayoutError(MindMapError):
    """Raised when a layout strategy name is not registered."""
    def __init__(self, strategy: str):
        self.strategy = strategy
        super().__init__(f"Unknown layout strategy '{strategy}'.")
