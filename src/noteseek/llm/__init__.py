"""Embedding provider abstraction layer for noteseek.

This package provides a uniform async interface over embedding providers:
- OllamaEmbeddingProvider: Local models via Ollama
- GeminiEmbeddingProvider: Google Gemini API
- HashEmbeddingProvider: Deterministic offline vectors

All providers implement the EmbeddingProvider protocol and are wrapped by
EmbeddingClient, which validates dimensions and raises EmbeddingError.

Usage:
    from noteseek.llm import get_embedding_client

    # Create client from environment config
    client = get_embedding_client()

    # Or with explicit config
    client = get_embedding_client({"service": "gemini", "dimensions": 768})
"""

from noteseek.llm.base import EmbeddingClient, EmbeddingProvider
from noteseek.llm.factory import get_embedding_client, get_embedding_provider
from noteseek.llm.gemini import GeminiEmbeddingProvider
from noteseek.llm.hashing import HashEmbeddingProvider
from noteseek.llm.ollama import OllamaEmbeddingProvider

__all__ = [
    "EmbeddingClient",
    "EmbeddingProvider",
    "OllamaEmbeddingProvider",
    "GeminiEmbeddingProvider",
    "HashEmbeddingProvider",
    "get_embedding_client",
    "get_embedding_provider",
]
