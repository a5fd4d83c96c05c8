"""Base chunking strategy and contract."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from chunking_service.config.chunking.models import RuntimeParameters


class BaseChunkingStrategy(ABC):
    """
    Abstract chunking strategy. Parameters are validated once in the constructor and
    the instance is read-only afterwards, so one strategy can serve many documents
    (and threads) at once.
    """

    #: True when chunk() needs RuntimeParameters.max_token_count from the index settings
    requires_max_token_count: bool = False

    def __init__(self, parameters: dict[str, Any] | None = None):
        self.parameters = self.validate_parameters(parameters or {})

    @property
    @abstractmethod
    def strategy_name(self) -> str:
        """Algorithm identifier, e.g. 'fixed_token_length', 'delimiter'."""
        ...

    @classmethod
    @abstractmethod
    def validate_parameters(cls, parameters: dict[str, Any]) -> BaseModel:
        """
        Check raw parameters and return the frozen static-parameter model.
        Raises ConfigurationError naming the offending parameter.
        """
        ...

    @abstractmethod
    def chunk(self, text: str, runtime_parameters: RuntimeParameters | None = None) -> list[str]:
        """Split text into chunks, in order. Must be deterministic for the same input."""
        ...
