"""Application-wide constants and defaults for noteseek.

This module provides a single source of truth for configuration defaults,
magic numbers, and other constants used throughout the application.
"""

import os
from pathlib import Path

# =============================================================================
# Search Settings
# =============================================================================
DEFAULT_TOP_K = 20  # Default number of results for similarity search

# =============================================================================
# Display Settings
# =============================================================================
CONTENT_PREVIEW_LENGTH = 200  # Characters to show in content previews

# =============================================================================
# Storage
# =============================================================================
DEFAULT_DATABASE_PATH = Path.home() / ".noteseek" / "index.db"

# =============================================================================
# Default URLs and Hosts
# =============================================================================
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_MCP_HOST = "0.0.0.0"
DEFAULT_MCP_PORT = 8001

# =============================================================================
# Embedding Model Defaults
# =============================================================================
EMBEDDING_DEFAULTS = {
    "ollama": "nomic-embed-text",
    "gemini": "text-embedding-004",
    "hash": "sha256",
}

# Changing this invalidates every stored embedding (requires a reset)
DEFAULT_EMBEDDING_DIMENSIONS = 768

# Maximum outstanding embedding requests while reindexing one note
DEFAULT_EMBED_CONCURRENCY = 4

# =============================================================================
# Chunking Defaults
# =============================================================================
DEFAULT_CHUNK_POLICY = "paragraph"
WINDOW_CHUNK_SIZE = 500  # Words per window for the "window" policy
WINDOW_OVERLAP = 50  # Words shared by consecutive windows

NOTE_EXTENSIONS = (".md", ".markdown", ".txt")


def get_embedding_service() -> str:
    """Get the configured embedding service name (default: "ollama")."""
    return os.getenv("EMBEDDING_SERVICE", "ollama")


def get_embedding_model(service: str | None = None) -> str:
    """Get the default embedding model for a given embedding service.

    Checks the EMBEDDING_MODEL environment variable first, then falls back
    to service-specific defaults.

    Args:
        service: The embedding service name ("ollama", "gemini" or "hash").
                If None, uses EMBEDDING_SERVICE env var or defaults to "ollama".

    Returns:
        str: The embedding model name to use.
    """
    # Environment variable takes precedence
    env_model = os.getenv("EMBEDDING_MODEL")
    if env_model:
        return env_model

    if service is None:
        service = get_embedding_service()

    return EMBEDDING_DEFAULTS.get(service, EMBEDDING_DEFAULTS["ollama"])


def get_chunk_policy() -> str:
    """Get the chunking policy name from CHUNK_POLICY (default: paragraph)."""
    return os.getenv("CHUNK_POLICY", DEFAULT_CHUNK_POLICY)


def get_embed_concurrency() -> int:
    """Get the per-note embedding concurrency from EMBED_CONCURRENCY."""
    return max(1, int(os.getenv("EMBED_CONCURRENCY", str(DEFAULT_EMBED_CONCURRENCY))))
