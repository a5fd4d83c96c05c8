"""POST /chunk/_simulate: run a chunking processor over the given documents and return them."""

from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool
from opensearchpy.exceptions import OpenSearchException

from chunking_service.config.chunking.static import resolve_pipeline_config
from chunking_service.config.logging import get_logger
from chunking_service.config.settings import get_settings
from chunking_service.controllers.schema.chunk import (
    SimulateDocResult,
    SimulateDocument,
    SimulateError,
    SimulateRequest,
    SimulateResponse,
)
from chunking_service.resources.opensearch.index_settings import build_max_token_count_lookup
from chunking_service.services.chunking.errors import ChunkingError, ConfigurationError
from chunking_service.services.chunking.processor import INDEX_METADATA_FIELD, ChunkingProcessor
from chunking_service.services.chunking.settings_lookup import MaxTokenCountLookup, lookup_from_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/chunk", tags=["chunking"])


async def _resolve_lookup(processor: ChunkingProcessor, docs: list[SimulateDocument]) -> MaxTokenCountLookup | None:
    """Max-token lookup for this request; None when the algorithm does not tokenize."""
    if not processor.requires_max_token_count:
        return None
    if get_settings().max_token_count_source == "opensearch":
        return await build_max_token_count_lookup(d.index for d in docs)
    return lookup_from_settings()


def _process_document(
    processor: ChunkingProcessor, doc: SimulateDocument, lookup: MaxTokenCountLookup | None
) -> SimulateDocResult:
    """Chunk one document. Chunking errors are reported on the result, not raised."""
    document: dict[str, Any] = dict(doc.source)
    document[INDEX_METADATA_FIELD] = doc.index
    try:
        processor.execute(document, lookup)
    except ChunkingError as e:
        return SimulateDocResult(
            index=doc.index,
            id=doc.id,
            error=SimulateError(type=type(e).__name__, reason=str(e), field=e.field),
        )
    document.pop(INDEX_METADATA_FIELD, None)
    return SimulateDocResult(index=doc.index, id=doc.id, source=document)


def _process_documents(
    processor: ChunkingProcessor, docs: list[SimulateDocument], lookup: MaxTokenCountLookup | None
) -> list[SimulateDocResult]:
    """Chunk a batch off the event loop; tokenizing is CPU bound."""
    return [_process_document(processor, doc, lookup) for doc in docs]


@router.post("/_simulate", response_model=SimulateResponse, response_model_exclude_none=True)
async def simulate_chunking(body: SimulateRequest) -> SimulateResponse:
    """
    Build the processor from the inline pipeline or a static.json profile, then chunk
    every document independently. A bad definition fails the request with 400; a bad
    document only fails its own entry.
    """
    try:
        config = resolve_pipeline_config(body.profile, body.pipeline)
        processor = ChunkingProcessor.from_config(config)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        lookup = await _resolve_lookup(processor, body.docs)
    except OpenSearchException as e:
        logger.warning("Index settings lookup failed", extra={"error": type(e).__name__})
        raise HTTPException(status_code=503, detail="Index settings temporarily unavailable") from e

    results = await run_in_threadpool(_process_documents, processor, body.docs, lookup)

    failed = sum(1 for r in results if r.error is not None)
    chunked = len(results) - failed
    status = "success" if chunked else "failed"
    if failed and chunked:
        status = "partial"
    return SimulateResponse(docs=results, documents_chunked=chunked, documents_failed=failed, status=status)
