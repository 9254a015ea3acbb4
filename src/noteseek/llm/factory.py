"""Factory functions for creating embedding providers and clients."""

import logging
import os

from dotenv import load_dotenv

from noteseek.constants import DEFAULT_OLLAMA_HOST, get_embedding_model, get_embedding_service
from noteseek.llm.base import EmbeddingClient, EmbeddingProvider
from noteseek.llm.gemini import GeminiEmbeddingProvider
from noteseek.llm.hashing import HashEmbeddingProvider
from noteseek.llm.ollama import OllamaEmbeddingProvider
from noteseek.service.database.config import StoreConfig

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_embedding_provider(config: dict | None = None) -> EmbeddingProvider:
    """Factory function to create an embedding provider instance.

    Args:
        config: Optional configuration dictionary. If None, uses environment variables.
                Expected keys:
                - 'service': Service type (default: from EMBEDDING_SERVICE env, or "ollama")
                - 'host': Ollama host URL (default: from OLLAMA_HOST env)
                - 'model': Model name (default: from EMBEDDING_MODEL env)
                - 'dimensions': Vector dimension (default: from EMBEDDING_DIMENSIONS env)

    Returns:
        EmbeddingProvider: An instance implementing the EmbeddingProvider protocol.
    """
    if config is None:
        config = {}

    service_type = config.get("service", get_embedding_service())
    model = config.get("model") or get_embedding_model(service_type)

    if service_type == "ollama":
        host = config.get("host", os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST))
        return OllamaEmbeddingProvider(host=host, model=model)

    if service_type == "gemini":
        dimensions = config.get("dimensions", StoreConfig.get_dimensions())
        return GeminiEmbeddingProvider(model=model, dimensions=dimensions)

    if service_type == "hash":
        dimensions = config.get("dimensions", StoreConfig.get_dimensions())
        return HashEmbeddingProvider(dimensions=dimensions)

    raise ValueError(f"Unsupported embedding service: {service_type}")


def get_embedding_client(config: dict | None = None) -> EmbeddingClient:
    """Create an EmbeddingClient around the configured provider.

    Args:
        config: Same keys as get_embedding_provider

    Returns:
        EmbeddingClient: Adapter enforcing the configured dimension
    """
    config = dict(config or {})
    dimensions = config.setdefault("dimensions", StoreConfig.get_dimensions())
    provider = get_embedding_provider(config)
    logger.debug(f"Embedding client ready: {type(provider).__name__}, dimensions={dimensions}")
    return EmbeddingClient(provider, dimensions)
