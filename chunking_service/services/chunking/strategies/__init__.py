"""Chunking strategy implementations and the algorithm registry."""

from typing import Any

from chunking_service.services.chunking.errors import ConfigurationError
from chunking_service.services.chunking.strategies.base import BaseChunkingStrategy
from chunking_service.services.chunking.strategies.delimiter import DelimiterStrategy
from chunking_service.services.chunking.strategies.fixed_token_length import FixedTokenLengthStrategy

ALGORITHM_FIELD = "algorithm"

STRATEGY_REGISTRY: dict[str, type[BaseChunkingStrategy]] = {
    "fixed_token_length": FixedTokenLengthStrategy,
    "delimiter": DelimiterStrategy,
}


def supported_strategies() -> list[str]:
    """Registered algorithm names, sorted."""
    return sorted(STRATEGY_REGISTRY)


def get_strategy_class(strategy_name: str) -> type[BaseChunkingStrategy] | None:
    """Return the strategy class for the given algorithm name, or None."""
    return STRATEGY_REGISTRY.get(strategy_name)


def create_strategy(algorithm: Any) -> BaseChunkingStrategy:
    """
    Build the strategy described by an algorithm map {name: parameters}.
    The map must hold exactly one algorithm. Raises ConfigurationError otherwise.
    """
    if not isinstance(algorithm, dict) or len(algorithm) != 1:
        raise ConfigurationError(
            f"Unable to create the processor as [{ALGORITHM_FIELD}] must contain and only contain 1 algorithm",
            field=ALGORITHM_FIELD,
        )
    ((name, parameters),) = algorithm.items()
    cls = get_strategy_class(name)
    if cls is None:
        raise ConfigurationError(
            f"Unable to create the processor as chunker algorithm [{name}] is not supported. "
            f"Supported chunkers types are {supported_strategies()}",
            field=ALGORITHM_FIELD,
        )
    if parameters is None:
        parameters = {}
    if not isinstance(parameters, dict):
        raise ConfigurationError(
            f"Unable to create the processor as [{name}] parameters cannot be cast to [dict]",
            field=name,
        )
    return cls(parameters)
