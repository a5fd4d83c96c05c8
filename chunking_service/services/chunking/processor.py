"""
Chunking processor: a field map, one chunking strategy and a chunk budget, configured
once and applied to many documents. Deterministic for the same document and config.
"""

import copy
from typing import Any

from pydantic import ValidationError

from chunking_service.config.chunking.models import (
    DISABLED_MAX_CHUNK_LIMIT,
    ProcessorConfig,
    RuntimeParameters,
)
from chunking_service.config.logging import get_logger
from chunking_service.config.settings import get_settings
from chunking_service.services.chunking.errors import ChunkingError, ConfigurationError
from chunking_service.services.chunking.quota import ChunkQuota
from chunking_service.services.chunking.settings_lookup import MaxTokenCountLookup, lookup_from_settings
from chunking_service.services.chunking.strategies import create_strategy
from chunking_service.services.chunking.walker import FieldMapWalker

logger = get_logger(__name__)

FIELD_MAP_FIELD = "field_map"
MAX_CHUNK_LIMIT_FIELD = "max_chunk_limit"
INDEX_METADATA_FIELD = "_index"


def validate_field_map(field_map: Any, path: str = FIELD_MAP_FIELD) -> None:
    """Every key is a non-empty string; every value a non-empty output name or a non-empty nested map."""
    if not isinstance(field_map, dict) or not field_map:
        raise ConfigurationError(f"[{path}] must be a non-empty map", field=path)
    for key, target in field_map.items():
        if not isinstance(key, str) or not key:
            raise ConfigurationError(f"[{path}] has an empty or non-string key", field=path)
        if isinstance(target, dict):
            validate_field_map(target, f"{path}.{key}")
        elif not isinstance(target, str) or not target:
            raise ConfigurationError(
                f"[{path}.{key}] must be a non-empty output field name or a nested field map",
                field=key,
            )


def validate_max_chunk_limit(max_chunk_limit: Any) -> int:
    if not isinstance(max_chunk_limit, int) or isinstance(max_chunk_limit, bool):
        raise ConfigurationError(
            f"Parameter [{MAX_CHUNK_LIMIT_FIELD}] cannot be cast to [int]", field=MAX_CHUNK_LIMIT_FIELD
        )
    if max_chunk_limit <= 0 and max_chunk_limit != DISABLED_MAX_CHUNK_LIMIT:
        raise ConfigurationError(
            f"Parameter [{MAX_CHUNK_LIMIT_FIELD}] must be a positive integer", field=MAX_CHUNK_LIMIT_FIELD
        )
    return max_chunk_limit


class ChunkingProcessor:
    """
    Chunks the mapped fields of a document in place.

    The field map and strategy are read-only after construction, so one processor can
    run documents concurrently; each execute() call owns its own ChunkQuota.
    """

    TYPE = "chunking"

    def __init__(
        self,
        field_map: dict[str, Any],
        algorithm: dict[str, Any],
        max_chunk_limit: int = DISABLED_MAX_CHUNK_LIMIT,
        max_depth: int | None = None,
        tag: str | None = None,
        description: str | None = None,
    ):
        validate_field_map(field_map)
        self.field_map = copy.deepcopy(field_map)
        self.strategy = create_strategy(algorithm)
        self.max_chunk_limit = validate_max_chunk_limit(max_chunk_limit)
        self.max_depth = max_depth if max_depth is not None else get_settings().index_mapping_depth_limit
        self.tag = tag
        self.description = description
        self._walker = FieldMapWalker(self.strategy, self.max_depth)
        logger.info(
            "Chunking processor created",
            extra={
                "tag": tag,
                "algorithm": self.strategy.strategy_name,
                "max_chunk_limit": self.max_chunk_limit,
                "max_depth": self.max_depth,
            },
        )

    @classmethod
    def from_config(cls, config: ProcessorConfig | dict[str, Any], max_depth: int | None = None) -> "ChunkingProcessor":
        """Build from a ProcessorConfig or its raw dict form. Raises ConfigurationError."""
        if not isinstance(config, ProcessorConfig):
            try:
                config = ProcessorConfig.model_validate(config)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid chunking processor definition: {e}", cause=e) from e
        return cls(
            field_map=config.field_map,
            algorithm=config.algorithm,
            max_chunk_limit=config.max_chunk_limit,
            max_depth=max_depth,
            tag=config.tag,
            description=config.description,
        )

    @property
    def requires_max_token_count(self) -> bool:
        return self.strategy.requires_max_token_count

    def runtime_parameters_for(
        self, document: dict[str, Any], lookup: MaxTokenCountLookup | None = None
    ) -> RuntimeParameters | None:
        """Runtime parameters for one document; the lookup is only consulted when the strategy needs it."""
        if not self.requires_max_token_count:
            return None
        lookup = lookup or lookup_from_settings()
        index_name = document.get(INDEX_METADATA_FIELD)
        max_token_count = lookup.max_token_count_for(index_name)
        try:
            return RuntimeParameters(max_token_count=max_token_count)
        except ValidationError as e:
            raise ConfigurationError(
                f"max_token_count [{max_token_count}] for index [{index_name}] must be a positive integer",
                cause=e,
            ) from e

    def execute(self, document: dict[str, Any], lookup: MaxTokenCountLookup | None = None) -> dict[str, Any]:
        """
        Chunk the document's mapped fields and return the same (mutated) document.
        Raises a ChunkingError subclass and leaves the document unchanged on failure.
        """
        runtime_parameters = self.runtime_parameters_for(document, lookup)
        quota = ChunkQuota(self.max_chunk_limit)
        try:
            self._walker.process(document, self.field_map, quota, runtime_parameters)
        except ChunkingError as e:
            logger.warning(
                "Document rejected by chunking processor",
                extra={"tag": self.tag, "error": type(e).__name__, "field": e.field},
            )
            raise
        logger.debug(
            "Document chunked",
            extra={"tag": self.tag, "index": document.get(INDEX_METADATA_FIELD), "chunk_count": quota.count},
        )
        return document
