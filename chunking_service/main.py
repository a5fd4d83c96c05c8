"""FastAPI app entry: config, logging, health, and graceful shutdown."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chunking_service.config.logging import configure_logging, get_logger
from chunking_service.config.settings import get_settings
from chunking_service.controllers.routes.chunk import router as chunk_router
from chunking_service.resources.opensearch.client import close_opensearch_client
from chunking_service.resources.opensearch.health import ping_opensearch

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: logging. Shutdown: close the OpenSearch client if one was opened."""
    settings = get_settings()
    configure_logging()
    logger.info(
        "Application starting",
        extra={
            "app_name": settings.app_name,
            "environment": settings.environment,
            "max_token_count_source": settings.max_token_count_source,
        },
    )
    yield
    logger.info("Application shutting down")
    await close_opensearch_client()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Chunking Service",
    description="Split text fields of nested documents into passages for embedding",
    version="1.0.0",
    lifespan=lifespan,
)
app.include_router(chunk_router)


@app.get("/health")
async def health() -> dict[str, Any]:
    """Liveness: service is up. Does not check dependencies."""
    return {"status": "ok"}


@app.get("/ready")
async def ready() -> JSONResponse:
    """Readiness. OpenSearch is only a dependency when index settings are read from it."""
    if get_settings().max_token_count_source != "opensearch":
        return JSONResponse(content={"status": "ok", "dependencies": {}}, status_code=200)
    opensearch = await ping_opensearch()
    ok = opensearch.get("ok", False)
    body = {"status": "ok" if ok else "degraded", "dependencies": {"opensearch": opensearch}}
    return JSONResponse(content=body, status_code=200 if ok else 503)


@app.exception_handler(Exception)
async def global_exception_handler(_request: Request, exc: Exception):
    """Centralized error handling: connection failures and timeouts get clear, non-leaking messages."""
    exc_name = type(exc).__name__
    # Do not leak stack traces or internal details to the client
    if "Connection" in exc_name or "Timeout" in exc_name:
        logger.warning("Connection or timeout error", extra={"error": exc_name})
        return JSONResponse(
            content={"detail": "A dependency is temporarily unavailable. Please retry later."},
            status_code=503,
        )
    logger.exception("Unhandled error")
    return JSONResponse(
        content={"detail": "An internal error occurred."},
        status_code=500,
    )
