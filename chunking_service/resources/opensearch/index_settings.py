"""
Reads index.analyze.max_token_count from OpenSearch and turns it into a
MaxTokenCountLookup for a batch of documents.
"""

from collections.abc import Iterable

from opensearchpy.exceptions import NotFoundError

from chunking_service.config.logging import get_logger
from chunking_service.config.settings import get_settings
from chunking_service.resources.opensearch.client import get_opensearch_client
from chunking_service.services.chunking.settings_lookup import StaticMaxTokenCountLookup

logger = get_logger(__name__)

MAX_TOKEN_COUNT_SETTING = "index.analyze.max_token_count"


async def get_index_max_token_count(index_name: str) -> int | None:
    """Return the index's max_token_count (explicit or default), or None if the index does not exist."""
    client = get_opensearch_client()
    try:
        response = await client.indices.get_settings(
            index=index_name,
            name=MAX_TOKEN_COUNT_SETTING,
            flat_settings=True,
            include_defaults=True,
        )
    except NotFoundError:
        logger.debug("Index not found, using default max_token_count", extra={"index_name": index_name})
        return None
    entry = response.get(index_name, {})
    value = entry.get("settings", {}).get(MAX_TOKEN_COUNT_SETTING)
    if value is None:
        value = entry.get("defaults", {}).get(MAX_TOKEN_COUNT_SETTING)
    return int(value) if value is not None else None


async def build_max_token_count_lookup(index_names: Iterable[str | None]) -> StaticMaxTokenCountLookup:
    """
    Resolve every distinct index once. Indices OpenSearch does not know fall back to
    default_max_token_count. Connection errors propagate to the caller.
    """
    s = get_settings()
    overrides: dict[str, int] = {}
    for name in sorted({n for n in index_names if n}):
        value = await get_index_max_token_count(name)
        if value is not None:
            overrides[name] = value
    return StaticMaxTokenCountLookup(s.default_max_token_count, overrides)
