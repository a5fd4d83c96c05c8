"""Per-index max_token_count lookup used to build runtime parameters."""

from typing import Protocol

from chunking_service.config.chunking.models import DEFAULT_MAX_TOKEN_COUNT
from chunking_service.config.settings import get_settings


class MaxTokenCountLookup(Protocol):
    def max_token_count_for(self, index_name: str | None) -> int: ...


class StaticMaxTokenCountLookup:
    """Answers from a fixed table of per-index overrides, falling back to a default."""

    def __init__(self, default: int = DEFAULT_MAX_TOKEN_COUNT, overrides: dict[str, int] | None = None):
        self.default = default
        self.overrides = dict(overrides or {})

    def max_token_count_for(self, index_name: str | None) -> int:
        if index_name is None:
            return self.default
        return self.overrides.get(index_name, self.default)


def lookup_from_settings() -> StaticMaxTokenCountLookup:
    """Lookup built from default_max_token_count and index_max_token_counts settings."""
    s = get_settings()
    return StaticMaxTokenCountLookup(s.default_max_token_count, s.index_max_token_counts)
