"""Request/response schemas for POST /chunk/_simulate."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chunking_service.config.chunking.models import ProcessorConfig


class SimulateDocument(BaseModel):
    """One input document: metadata plus the source tree to chunk."""

    model_config = ConfigDict(populate_by_name=True)

    index: str | None = Field(default=None, alias="_index", description="Index the document belongs to")
    id: str | None = Field(default=None, alias="_id")
    source: dict[str, Any] = Field(..., alias="_source", description="Document body")


class SimulateRequest(BaseModel):
    """POST /chunk/_simulate body. Inline pipeline wins over profile; neither means the active profile."""

    pipeline: ProcessorConfig | None = Field(default=None, description="Inline chunking processor definition")
    profile: str | None = Field(default=None, description="Profile name from static.json")
    docs: list[SimulateDocument] = Field(..., min_length=1, max_length=1000)


class SimulateError(BaseModel):
    type: str
    reason: str
    field: str | None = None


class SimulateDocResult(BaseModel):
    """Either the chunked document or the error that rejected it."""

    model_config = ConfigDict(populate_by_name=True)

    index: str | None = Field(default=None, alias="_index")
    id: str | None = Field(default=None, alias="_id")
    source: dict[str, Any] | None = Field(default=None, alias="_source")
    error: SimulateError | None = None


class SimulateResponse(BaseModel):
    """Per-document results in input order."""

    docs: list[SimulateDocResult]
    documents_chunked: int = Field(..., ge=0)
    documents_failed: int = Field(default=0, ge=0)
    status: str = Field(..., description="success|partial|failed")
