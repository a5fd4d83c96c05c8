"""Chunking configuration models. Read-only; no business logic."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TOKEN_LIMIT = 384
DEFAULT_OVERLAP_RATE = 0.0
DEFAULT_TOKENIZER = "standard"
DEFAULT_TOKEN_CONCATENATOR = " "
DEFAULT_MAX_TOKEN_COUNT = 10000

# max_chunk_limit sentinel: no limit
DISABLED_MAX_CHUNK_LIMIT = -1


class FixedTokenLengthParameters(BaseModel):
    """Static parameters of the fixed_token_length algorithm, fixed at construction."""

    model_config = ConfigDict(frozen=True)

    token_limit: int = Field(default=DEFAULT_TOKEN_LIMIT, gt=0)
    overlap_rate: float = Field(default=DEFAULT_OVERLAP_RATE, ge=0, le=0.5)
    tokenizer: str = Field(default=DEFAULT_TOKENIZER, min_length=1)
    token_concatenator: str = Field(default=DEFAULT_TOKEN_CONCATENATOR)


class DelimiterParameters(BaseModel):
    """Static parameters of the delimiter algorithm."""

    model_config = ConfigDict(frozen=True)

    delimiter: str = Field(..., min_length=1)


class RuntimeParameters(BaseModel):
    """Values only known while processing a document, e.g. the index's token cutoff."""

    model_config = ConfigDict(frozen=True)

    max_token_count: int = Field(default=DEFAULT_MAX_TOKEN_COUNT, gt=0)


class ProcessorConfig(BaseModel):
    """
    Definition of one chunking processor. `algorithm` must hold exactly one algorithm
    name mapped to its parameters; that and the field map are checked when the
    processor is built, so they stay loosely typed here.
    """

    field_map: dict[str, Any] = Field(..., description="source field -> output field or nested field map")
    algorithm: dict[str, Any] = Field(..., description="{algorithm_name: parameters}")
    max_chunk_limit: int = Field(default=DISABLED_MAX_CHUNK_LIMIT, description="-1 disables the limit")
    tag: str | None = Field(default=None)
    description: str | None = Field(default=None)
