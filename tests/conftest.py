"""
Shared test fixtures.

Provides: sample documents, strategy doubles, processor factories, API client
Dependencies: pytest, fastapi.testclient
"""

from typing import Any

import pytest

from chunking_service.config.chunking.models import RuntimeParameters
from chunking_service.services.chunking.strategies.base import BaseChunkingStrategy

# 24 tokens with the standard tokenizer
SAMPLE_TEXT = (
    "This is an example document to be chunked. The document contains a single paragraph, "
    "two sentences and 24 tokens by standard tokenizer in OpenSearch."
)


class FixedOutputStrategy(BaseChunkingStrategy):
    """Returns `chunks_per_call` numbered chunks per call and records every call."""

    def __init__(self, chunks_per_call: int = 2):
        super().__init__({"chunks_per_call": chunks_per_call})
        self.calls: list[tuple[str, RuntimeParameters | None]] = []

    @property
    def strategy_name(self) -> str:
        return "fixed_output"

    @classmethod
    def validate_parameters(cls, parameters: dict[str, Any]):
        return RuntimeParameters(max_token_count=parameters["chunks_per_call"])

    def chunk(self, text: str, runtime_parameters: RuntimeParameters | None = None) -> list[str]:
        self.calls.append((text, runtime_parameters))
        n = self.parameters.max_token_count
        return [f"{text}#{i}" for i in range(n)]


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_TEXT


@pytest.fixture
def fixed_output_strategy() -> FixedOutputStrategy:
    return FixedOutputStrategy(chunks_per_call=2)


@pytest.fixture
def fixed_token_algorithm() -> dict[str, Any]:
    return {"fixed_token_length": {"token_limit": 10}}


@pytest.fixture
def delimiter_algorithm() -> dict[str, Any]:
    return {"delimiter": {"delimiter": "."}}


@pytest.fixture
def client():
    """FastAPI test client; lifespan not entered so no OpenSearch client is created."""
    from fastapi.testclient import TestClient

    from chunking_service.main import app

    return TestClient(app)
