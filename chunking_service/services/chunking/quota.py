"""Per-document chunk budget."""

from chunking_service.config.chunking.models import DISABLED_MAX_CHUNK_LIMIT
from chunking_service.services.chunking.errors import QuotaExceededError


class ChunkQuota:
    """
    Running chunk count for one document, shared by every field and nested branch.
    Create one per document; never share across calls.
    """

    def __init__(self, max_chunk_limit: int = DISABLED_MAX_CHUNK_LIMIT):
        self.max_chunk_limit = max_chunk_limit
        self.count = 0

    @property
    def enabled(self) -> bool:
        return self.max_chunk_limit != DISABLED_MAX_CHUNK_LIMIT

    def add(self, produced: int) -> int:
        """Add one chunking call's output size. Raises QuotaExceededError on the first overflow."""
        self.count += produced
        if self.enabled and self.count > self.max_chunk_limit:
            raise QuotaExceededError(self.count, self.max_chunk_limit)
        return self.count
