"""Ollama embedding provider implementation."""

import logging

import ollama

from noteseek.constants import get_embedding_model

logger = logging.getLogger(__name__)


class OllamaEmbeddingProvider:
    """Ollama embedding provider.

    This provider uses the Ollama API to generate embeddings from local models.
    """

    def __init__(self, host: str, model: str | None = None) -> None:
        """Initialize the Ollama provider.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The embedding model name. If None, uses EMBEDDING_MODEL env var
                   or the Ollama default ("nomic-embed-text").
        """
        self.host = host
        self.model = model or get_embedding_model("ollama")
        logger.info(f"🤖 Initializing OllamaEmbeddingProvider: host={host}, model={self.model}")
        # Configure the async Ollama client with the specified host
        self.client = ollama.AsyncClient(host=host)

    async def embed(self, text: str) -> list[float]:
        """Generate an embedding for a text using Ollama.

        Args:
            text: The text to embed

        Returns:
            list[float]: The embedding vector
        """
        response = await self.client.embed(model=self.model, input=text)
        logger.debug(f"Embedded {len(text)} characters with {self.model}")
        return response["embeddings"][0]
