"""Async OpenSearch health check for /ready."""

from typing import Any

from opensearchpy.exceptions import ConnectionError as OSConnectionError
from opensearchpy.exceptions import ConnectionTimeout as OSConnectionTimeout
from opensearchpy.exceptions import OpenSearchException

from chunking_service.config.logging import get_logger
from chunking_service.resources.opensearch.client import get_opensearch_client

logger = get_logger(__name__)


async def ping_opensearch() -> dict[str, Any]:
    """Ping OpenSearch. Returns dict with 'ok' bool and an 'error' code when it fails."""
    try:
        ok = await get_opensearch_client().ping()
    except OSConnectionTimeout as e:
        logger.warning("OpenSearch ping timeout", extra={"error": type(e).__name__})
        return {"ok": False, "error": "connection_timeout"}
    except (OSConnectionError, OpenSearchException) as e:
        logger.warning("OpenSearch ping failed", extra={"error": type(e).__name__})
        return {"ok": False, "error": "connection_failed"}
    return {"ok": True} if ok else {"ok": False, "error": "ping_failed"}
