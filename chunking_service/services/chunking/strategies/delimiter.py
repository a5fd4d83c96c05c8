"""Delimiter chunking. Splits after every literal occurrence of the delimiter."""

from typing import Any

from chunking_service.config.chunking.models import DelimiterParameters, RuntimeParameters
from chunking_service.services.chunking.errors import ConfigurationError
from chunking_service.services.chunking.strategies.base import BaseChunkingStrategy

DELIMITER_FIELD = "delimiter"


class DelimiterStrategy(BaseChunkingStrategy):
    """
    Each chunk runs up to and including the next delimiter; text after the last
    delimiter becomes a final chunk without one. The delimiter is matched as a plain
    substring, never as a pattern.
    """

    @property
    def strategy_name(self) -> str:
        return "delimiter"

    @classmethod
    def validate_parameters(cls, parameters: dict[str, Any]) -> DelimiterParameters:
        if DELIMITER_FIELD not in parameters:
            raise ConfigurationError(
                f"You must contain field: [{DELIMITER_FIELD}] in your parameter", field=DELIMITER_FIELD
            )
        unknown = sorted(set(parameters) - {DELIMITER_FIELD})
        if unknown:
            raise ConfigurationError(f"delimiter does not support parameters {unknown}", field=unknown[0])
        delimiter = parameters[DELIMITER_FIELD]
        if not isinstance(delimiter, str):
            raise ConfigurationError(
                f"Parameter [{DELIMITER_FIELD}] must be a string, got {delimiter!r}", field=DELIMITER_FIELD
            )
        if not delimiter:
            raise ConfigurationError(f"Parameter [{DELIMITER_FIELD}] should not be empty", field=DELIMITER_FIELD)
        return DelimiterParameters(delimiter=delimiter)

    def chunk(self, text: str, runtime_parameters: RuntimeParameters | None = None) -> list[str]:
        delimiter = self.parameters.delimiter
        chunks: list[str] = []
        position = 0
        while True:
            i = text.find(delimiter, position)
            if i < 0:
                break
            end = i + len(delimiter)
            chunks.append(text[position:end])
            position = end
        if position < len(text):
            chunks.append(text[position:])
        return chunks
