"""Base protocol and client adapter for embedding providers."""

import logging
import math
from collections.abc import Sequence
from typing import Protocol

from noteseek.errors import DimensionMismatchError, EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    """Protocol defining the interface for embedding providers.

    This protocol ensures type safety and allows for multiple embedding
    provider implementations while maintaining a consistent interface.
    """

    async def embed(self, text: str) -> Sequence[float]:
        """Generate an embedding for a single text.

        Args:
            text: The text to embed

        Returns:
            Sequence[float]: The embedding vector
        """
        ...


class EmbeddingClient:
    """Uniform async "text -> vector" adapter over an EmbeddingProvider.

    Every failure, whether raised by the provider or detected in its
    response, surfaces as EmbeddingError with the original cause attached.
    No retries are performed here.
    """

    def __init__(self, provider: EmbeddingProvider, dimensions: int) -> None:
        """Initialize the client.

        Args:
            provider: The embedding provider to wrap
            dimensions: Required length of every returned vector
        """
        self.provider = provider
        self.dimensions = dimensions

    async def embed(self, text: str) -> list[float]:
        """Embed a text and validate the provider's response.

        Args:
            text: The text to embed

        Returns:
            list[float]: A vector of exactly `dimensions` floats

        Raises:
            EmbeddingError: If the provider fails, returns something that is
                not a usable numeric vector (including all zeros), or returns
                the wrong dimension
        """
        try:
            raw = await self.provider.embed(text)
        except EmbeddingError:
            raise
        except Exception as e:
            logger.error(f"❌ Embedding provider error: {type(e).__name__}: {e}")
            raise EmbeddingError(f"Embedding provider failed: {e}", cause=e) from e

        return self._validate(raw)

    def _validate(self, raw: object) -> list[float]:
        if raw is None or isinstance(raw, (str, bytes)):
            raise EmbeddingError(f"Malformed embedding response: {type(raw).__name__}")

        try:
            vector = [float(value) for value in raw]  # type: ignore[union-attr]
        except (TypeError, ValueError) as e:
            raise EmbeddingError(f"Malformed embedding response: {e}", cause=e) from e

        if not all(math.isfinite(value) for value in vector):
            raise EmbeddingError("Malformed embedding response: non-finite values")
        if not any(vector):
            raise EmbeddingError("Malformed embedding response: zero vector")

        if len(vector) != self.dimensions:
            mismatch = DimensionMismatchError(self.dimensions, len(vector))
            raise EmbeddingError(
                f"Embedding dimension mismatch: {mismatch}", cause=mismatch
            ) from mismatch

        return vector
