"""
Field-map walker: finds the text a field map points at inside a nested document,
chunks it, and writes each chunk list next to its source field.

Two passes per document. The validation pass checks the shape and depth of every
mapped value before anything is chunked. The processing pass chunks leaf text in
field-map order, charging every chunking call to the document's ChunkQuota, and
stages the writes; they are committed only when the whole document succeeded, so a
failed document is left untouched.
"""

from typing import Any

from chunking_service.config.chunking.models import RuntimeParameters
from chunking_service.services.chunking.errors import DepthLimitError, ShapeError
from chunking_service.services.chunking.quota import ChunkQuota
from chunking_service.services.chunking.strategies.base import BaseChunkingStrategy

# (container, output key, chunks) waiting to be written
PendingWrite = tuple[dict[str, Any], str, list[str]]


class FieldMapWalker:
    """Applies one strategy over documents following a field map. Holds no per-document state."""

    def __init__(self, strategy: BaseChunkingStrategy, max_depth: int):
        self.strategy = strategy
        self.max_depth = max_depth

    def process(
        self,
        document: dict[str, Any],
        field_map: dict[str, Any],
        quota: ChunkQuota,
        runtime_parameters: RuntimeParameters | None = None,
    ) -> None:
        """Validate, chunk and write back. Raises a ChunkingError and leaves document unchanged on failure."""
        self.validate(document, field_map)
        pending: list[PendingWrite] = []
        self._chunk_map(document, field_map, quota, runtime_parameters, pending)
        for container, key, chunks in pending:
            container[key] = chunks

    # validation pass

    def validate(self, document: dict[str, Any], field_map: dict[str, Any]) -> None:
        """Check every mapped top-level field; nested values are checked all the way down."""
        for source_key in field_map:
            value = document.get(source_key)
            if value is None:
                continue
            if isinstance(value, (list, dict)):
                self._validate_nested(source_key, value, 1)
            elif not isinstance(value, str):
                raise ShapeError(
                    f"field [{source_key}] is neither string nor nested type, cannot process it",
                    field=source_key,
                )

    def _validate_nested(self, source_key: str, value: Any, depth: int) -> None:
        if depth > self.max_depth:
            raise DepthLimitError(
                f"map type field [{source_key}] reached max depth limit, cannot process it",
                field=source_key,
            )
        if isinstance(value, list):
            self._validate_list(source_key, value, depth)
        elif isinstance(value, dict):
            for v in value.values():
                if v is not None:
                    self._validate_nested(source_key, v, depth + 1)
        elif not isinstance(value, str):
            raise ShapeError(
                f"map type field [{source_key}] has non-string type, cannot process it",
                field=source_key,
            )

    def _validate_list(self, source_key: str, values: list[Any], depth: int) -> None:
        for v in values:
            if isinstance(v, dict):
                self._validate_nested(source_key, v, depth + 1)
            elif v is None:
                raise ShapeError(f"list type field [{source_key}] has null, cannot process it", field=source_key)
            elif not isinstance(v, str):
                raise ShapeError(
                    f"list type field [{source_key}] has non string value, cannot process it",
                    field=source_key,
                )

    # processing pass

    def _chunk_map(
        self,
        source: dict[str, Any],
        field_map: dict[str, Any],
        quota: ChunkQuota,
        runtime_parameters: RuntimeParameters | None,
        pending: list[PendingWrite],
    ) -> None:
        for source_key, target in field_map.items():
            value = source.get(source_key)
            if isinstance(target, dict):
                if isinstance(value, list):
                    for item in value:
                        if isinstance(item, dict):
                            self._chunk_map(item, target, quota, runtime_parameters, pending)
                elif isinstance(value, dict):
                    self._chunk_map(value, target, quota, runtime_parameters, pending)
                continue
            if value is None:
                continue
            chunks = self._chunk_leaf(source_key, value, quota, runtime_parameters)
            pending.append((source, target, chunks))

    def _chunk_leaf(
        self,
        source_key: str,
        value: Any,
        quota: ChunkQuota,
        runtime_parameters: RuntimeParameters | None,
    ) -> list[str]:
        if isinstance(value, str):
            texts = [value]
        elif isinstance(value, list) and all(isinstance(v, str) for v in value):
            texts = value
        else:
            raise ShapeError(
                f"field [{source_key}] is neither string nor list of strings, cannot chunk it",
                field=source_key,
            )
        result: list[str] = []
        for text in texts:
            chunks = self.strategy.chunk(text, runtime_parameters)
            quota.add(len(chunks))
            result.extend(chunks)
        return result
