"""
Generation Backend Interface

Port interface for the text-generation service behind the ask command.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator


class GenerationBackend(ABC):
    """Abstract interface for a streaming text-generation service.

    Implementations should handle:
    - Prefixing the configured system instruction
    - Retrying transient failures while opening the stream
    - Skipping malformed stream records
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Name of the model answering requests; part of the cache key."""
        ...

    @abstractmethod
    def open_stream(self, prompt: str) -> AsyncGenerator[str, None]:
        """Stream the answer to ``prompt`` as text fragments.

        Raises:
            GenerationBackendError: When the backend cannot be reached after
                retries or answers with an error status.
        """
        ...

    @abstractmethod
    async def aclose(self) -> None:
        """Release pooled connections."""
        ...
