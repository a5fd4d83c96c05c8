"""Fixed-token-length chunking. Sliding window of token_limit tokens with fractional overlap."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from chunking_service.config.chunking.models import FixedTokenLengthParameters, RuntimeParameters
from chunking_service.services.chunking.errors import ConfigurationError
from chunking_service.services.chunking.strategies.base import BaseChunkingStrategy
from chunking_service.services.chunking.tokenizer import tokenize

TOKEN_LIMIT_FIELD = "token_limit"
OVERLAP_RATE_FIELD = "overlap_rate"
TOKENIZER_FIELD = "tokenizer"
TOKEN_CONCATENATOR_FIELD = "token_concatenator"

MAX_OVERLAP_RATE = Decimal("0.5")

_ALLOWED_FIELDS = {TOKEN_LIMIT_FIELD, OVERLAP_RATE_FIELD, TOKENIZER_FIELD, TOKEN_CONCATENATOR_FIELD}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compute_overlap(overlap_rate: float, token_limit: int) -> int:
    """Overlap in tokens: overlap_rate * token_limit rounded half up (0.5 * 5 -> 3), at most token_limit - 1."""
    product = Decimal(str(overlap_rate)) * token_limit
    return min(int(product.quantize(Decimal(1), rounding=ROUND_HALF_UP)), token_limit - 1)


class FixedTokenLengthStrategy(BaseChunkingStrategy):
    """
    Tokenize the text, then emit windows of token_limit tokens joined by
    token_concatenator. Consecutive windows share round(overlap_rate * token_limit)
    tokens; the last window may be shorter.
    """

    requires_max_token_count = True

    @property
    def strategy_name(self) -> str:
        return "fixed_token_length"

    @classmethod
    def validate_parameters(cls, parameters: dict[str, Any]) -> FixedTokenLengthParameters:
        unknown = sorted(set(parameters) - _ALLOWED_FIELDS)
        if unknown:
            raise ConfigurationError(
                f"fixed_token_length does not support parameters {unknown}", field=unknown[0]
            )

        if TOKEN_LIMIT_FIELD in parameters:
            token_limit = parameters[TOKEN_LIMIT_FIELD]
            if not isinstance(token_limit, int) or isinstance(token_limit, bool):
                raise ConfigurationError(
                    f"Parameter [{TOKEN_LIMIT_FIELD}] must be an integer", field=TOKEN_LIMIT_FIELD
                )
            if token_limit <= 0:
                raise ConfigurationError(
                    f"Parameter [{TOKEN_LIMIT_FIELD}] must be positive", field=TOKEN_LIMIT_FIELD
                )

        if OVERLAP_RATE_FIELD in parameters:
            overlap_rate = parameters[OVERLAP_RATE_FIELD]
            if not _is_number(overlap_rate):
                raise ConfigurationError(
                    f"Parameter [{OVERLAP_RATE_FIELD}] must be a number", field=OVERLAP_RATE_FIELD
                )
            if not math.isfinite(overlap_rate) or not 0 <= Decimal(str(overlap_rate)) <= MAX_OVERLAP_RATE:
                raise ConfigurationError(
                    f"Parameter [{OVERLAP_RATE_FIELD}] must be between 0 and {MAX_OVERLAP_RATE}",
                    field=OVERLAP_RATE_FIELD,
                )

        if TOKENIZER_FIELD in parameters:
            tokenizer = parameters[TOKENIZER_FIELD]
            if not isinstance(tokenizer, str):
                raise ConfigurationError(
                    f"Parameter [{TOKENIZER_FIELD}] must be a string", field=TOKENIZER_FIELD
                )
            if not tokenizer:
                raise ConfigurationError(
                    f"Parameter [{TOKENIZER_FIELD}] should not be empty", field=TOKENIZER_FIELD
                )

        if TOKEN_CONCATENATOR_FIELD in parameters and not isinstance(
            parameters[TOKEN_CONCATENATOR_FIELD], str
        ):
            raise ConfigurationError(
                f"Parameter [{TOKEN_CONCATENATOR_FIELD}] must be a string", field=TOKEN_CONCATENATOR_FIELD
            )

        return FixedTokenLengthParameters(**parameters)

    @property
    def overlap(self) -> int:
        return compute_overlap(self.parameters.overlap_rate, self.parameters.token_limit)

    def chunk(self, text: str, runtime_parameters: RuntimeParameters | None = None) -> list[str]:
        runtime = runtime_parameters or RuntimeParameters()
        params = self.parameters
        tokens = tokenize(text, params.tokenizer, runtime.max_token_count)

        size = params.token_limit
        # overlap < size, so every window advances by at least one token
        step = size - self.overlap
        chunks: list[str] = []
        start = 0
        while start < len(tokens):
            if start + size >= len(tokens):
                chunks.append(params.token_concatenator.join(tokens[start:]))
                break
            chunks.append(params.token_concatenator.join(tokens[start : start + size]))
            start += step
        return chunks
