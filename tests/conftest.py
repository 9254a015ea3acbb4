"""Pytest configuration and shared fixtures for the test suite."""

import asyncio
from pathlib import Path

import pytest
import requests

from noteseek.llm.base import EmbeddingClient
from noteseek.service.database import DualStore
from noteseek.service.notes import NoteDirectory

DIMENSIONS = 4


# Service availability checks
def ollama_available() -> bool:
    """Check if Ollama server is running and accessible.

    Returns:
        True if Ollama is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:11434/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


class FakeEmbeddingProvider:
    """In-memory embedding provider with scripted vectors, failures and delays."""

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        default: list[float] | None = None,
        failures: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default if default is not None else [1.0, 0.0, 0.0, 0.0]
        self.failures = failures or set()
        self.delays = delays or {}
        self.calls: list[str] = []
        self.on_call = None

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.on_call is not None:
            self.on_call(text)
        if text in self.delays:
            await asyncio.sleep(self.delays[text])
        if text in self.failures:
            raise ConnectionError(f"provider unreachable for {text!r}")
        return self.vectors.get(text, self.default)


# Store fixtures
@pytest.fixture
def db_path(tmp_path) -> Path:
    """Provide a database file path inside the test's temp directory."""
    return tmp_path / "index.db"


@pytest.fixture
def store(db_path):
    """Provide an open DualStore with 4-dimensional embeddings.

    Yields:
        DualStore instance, closed after the test
    """
    dual_store = DualStore(db_path, DIMENSIONS)
    yield dual_store
    dual_store.close()


# Service fixtures with skip markers
@pytest.fixture
def ollama_embedding_config() -> dict:
    """Provide an Ollama embedding config, skip if Ollama not available.

    Raises:
        pytest.skip: If Ollama server is not running
    """
    if not ollama_available():
        pytest.skip("Ollama server not running on localhost:11434")
    return {"service": "ollama", "model": "nomic-embed-text", "dimensions": 768}


# Embedding fixtures
@pytest.fixture
def make_embedder():
    """Factory fixture wrapping a FakeEmbeddingProvider in an EmbeddingClient.

    Returns:
        Function taking FakeEmbeddingProvider kwargs and returning
        (client, provider)
    """

    def _make(dimensions: int = DIMENSIONS, **kwargs) -> tuple[EmbeddingClient, FakeEmbeddingProvider]:
        provider = FakeEmbeddingProvider(**kwargs)
        return EmbeddingClient(provider, dimensions), provider

    return _make


# Note fixtures
@pytest.fixture
def notes_dir(tmp_path) -> Path:
    """Create a small note tree.

    Layout:
        alpha.md        two paragraphs
        sub/gamma.txt   one paragraph
        .hidden/x.md    ignored (hidden)
        report.pdf      ignored (not a note)
    """
    root = tmp_path / "notes"
    (root / "sub").mkdir(parents=True)
    (root / ".hidden").mkdir()
    (root / "alpha.md").write_text("Alpha paragraph.\n\nBeta paragraph.\n", encoding="utf-8")
    (root / "sub" / "gamma.txt").write_text("Gamma note.", encoding="utf-8")
    (root / ".hidden" / "x.md").write_text("hidden", encoding="utf-8")
    (root / "report.pdf").write_bytes(b"%PDF-1.4")
    return root


@pytest.fixture
def note_directory(notes_dir) -> NoteDirectory:
    return NoteDirectory(notes_dir)


@pytest.fixture
def cli_env(monkeypatch, tmp_path) -> Path:
    """Point the CLI at a temp database and the offline hash embedding service.

    Returns:
        Path of the database file the CLI will use
    """
    database = tmp_path / "cli" / "index.db"
    monkeypatch.setenv("NOTESEEK_DB_PATH", str(database))
    monkeypatch.setenv("EMBEDDING_SERVICE", "hash")
    monkeypatch.setenv("EMBEDDING_DIMENSIONS", "16")
    monkeypatch.setenv("CHUNK_POLICY", "paragraph")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("EMBEDDING_MODEL", raising=False)
    return database
