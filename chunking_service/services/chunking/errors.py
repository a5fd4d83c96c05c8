"""
Chunking error taxonomy. Every error is terminal for the document being processed;
nothing here is retried. Subclasses ValueError so callers that already treat bad
input as ValueError keep working.
"""


class ChunkingError(ValueError):
    """Base class for chunking failures. `field` names the offending field when known."""

    def __init__(self, message: str, field: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.field = field
        self.cause = cause


class ConfigurationError(ChunkingError):
    """Processor definition is invalid: algorithm map, parameters, field map or chunk limit."""


class ShapeError(ChunkingError):
    """A mapped field holds a value that is not a string, list or map where one is required."""


class DepthLimitError(ChunkingError):
    """A mapped field nests deeper than the configured depth limit."""


class QuotaExceededError(ChunkingError):
    """Total chunks produced for one document went over max_chunk_limit."""

    def __init__(self, chunk_count: int, max_chunk_limit: int):
        super().__init__(
            f"The number of chunks [{chunk_count}] exceeds the maximum chunk limit [{max_chunk_limit}]"
        )
        self.chunk_count = chunk_count
        self.max_chunk_limit = max_chunk_limit


class TokenizationError(ChunkingError):
    """The tokenizer failed or produced more tokens than allowed."""
