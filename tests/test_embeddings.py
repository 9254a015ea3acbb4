"""Tests for the embedding providers and the EmbeddingClient adapter."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from noteseek.errors import DimensionMismatchError, EmbeddingError
from noteseek.llm import (
    EmbeddingClient,
    GeminiEmbeddingProvider,
    HashEmbeddingProvider,
    OllamaEmbeddingProvider,
    get_embedding_client,
    get_embedding_provider,
)


class TestEmbeddingClient:
    """Tests for EmbeddingClient validation and error wrapping."""

    @pytest.mark.asyncio
    async def test_returns_validated_vector(self, make_embedder):
        client, provider = make_embedder(vectors={"hi": [1, 2, 3, 4]})

        vector = await client.embed("hi")

        assert vector == [1.0, 2.0, 3.0, 4.0]
        assert all(isinstance(v, float) for v in vector)
        assert provider.calls == ["hi"]

    @pytest.mark.asyncio
    async def test_provider_failure_carries_cause(self, make_embedder):
        client, _ = make_embedder(failures={"boom"})

        with pytest.raises(EmbeddingError) as exc_info:
            await client.embed("boom")

        assert isinstance(exc_info.value.cause, ConnectionError)
        assert exc_info.value.__cause__ is exc_info.value.cause

    @pytest.mark.asyncio
    async def test_dimension_mismatch_is_not_truncated(self, make_embedder):
        client, _ = make_embedder(vectors={"long": [0.1] * 6})

        with pytest.raises(EmbeddingError, match="dimension mismatch") as exc_info:
            await client.embed("long")

        cause = exc_info.value.cause
        assert isinstance(cause, DimensionMismatchError)
        assert (cause.expected, cause.actual) == (4, 6)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            None,
            "not a vector",
            [0.1, "x", 0.3, 0.4],
            [0.1, float("nan"), 0.3, 0.4],
            [0.0, 0.0, 0.0, 0.0],
            42,
        ],
    )
    async def test_malformed_response(self, response):
        provider = MagicMock()
        provider.embed = AsyncMock(return_value=response)
        client = EmbeddingClient(provider, 4)

        with pytest.raises(EmbeddingError, match="Malformed"):
            await client.embed("text")

    @pytest.mark.asyncio
    async def test_concurrent_calls_may_complete_out_of_order(self, make_embedder):
        client, _ = make_embedder(
            vectors={"slow": [0, 1, 0, 0], "fast": [0, 0, 1, 0]},
            delays={"slow": 0.05},
        )
        finished = []

        async def run(text):
            await client.embed(text)
            finished.append(text)

        await asyncio.gather(run("slow"), run("fast"))

        assert finished == ["fast", "slow"]


class TestOllamaEmbeddingProvider:
    """Tests for OllamaEmbeddingProvider."""

    @pytest.mark.asyncio
    @patch("noteseek.llm.ollama.ollama.AsyncClient")
    async def test_embed_calls_async_client(self, mock_client_class):
        mock_client = MagicMock()
        mock_client.embed = AsyncMock(return_value={"embeddings": [[0.1, 0.2, 0.3]]})
        mock_client_class.return_value = mock_client

        provider = OllamaEmbeddingProvider(host="http://test:11434", model="test-embed")
        vector = await provider.embed("hello")

        assert vector == [0.1, 0.2, 0.3]
        mock_client_class.assert_called_once_with(host="http://test:11434")
        mock_client.embed.assert_awaited_once_with(model="test-embed", input="hello")

    @patch("noteseek.llm.ollama.ollama.AsyncClient")
    def test_default_model(self, mock_client_class, monkeypatch):
        monkeypatch.delenv("EMBEDDING_MODEL", raising=False)
        provider = OllamaEmbeddingProvider(host="http://test:11434")
        assert provider.model == "nomic-embed-text"


class TestGeminiEmbeddingProvider:
    """Tests for GeminiEmbeddingProvider."""

    @pytest.mark.asyncio
    @patch("noteseek.llm.gemini.genai.Client")
    async def test_embed_uses_async_api(self, mock_client_class):
        mock_embedding = MagicMock()
        mock_embedding.values = [0.5, 0.25]
        mock_response = MagicMock()
        mock_response.embeddings = [mock_embedding]
        mock_client = MagicMock()
        mock_client.aio.models.embed_content = AsyncMock(return_value=mock_response)
        mock_client_class.return_value = mock_client

        provider = GeminiEmbeddingProvider(model="text-embedding-004")
        vector = await provider.embed("hello")

        assert vector == [0.5, 0.25]
        mock_client.aio.models.embed_content.assert_awaited_once_with(
            model="text-embedding-004", contents=["hello"]
        )

    @pytest.mark.asyncio
    @patch("noteseek.llm.gemini.genai.Client")
    async def test_embed_requests_output_dimensionality(self, mock_client_class):
        mock_client = MagicMock()
        mock_client.aio.models.embed_content = AsyncMock(
            return_value=MagicMock(embeddings=[MagicMock(values=[0.0] * 8)])
        )
        mock_client_class.return_value = mock_client

        provider = GeminiEmbeddingProvider(model="text-embedding-004", dimensions=8)
        await provider.embed("hello")

        kwargs = mock_client.aio.models.embed_content.call_args.kwargs
        assert kwargs["config"].output_dimensionality == 8

    @pytest.mark.asyncio
    @patch("noteseek.llm.gemini.genai.Client")
    async def test_embed_error_propagates(self, mock_client_class):
        mock_client = MagicMock()
        mock_client.aio.models.embed_content = AsyncMock(side_effect=RuntimeError("quota"))
        mock_client_class.return_value = mock_client

        client = EmbeddingClient(GeminiEmbeddingProvider(model="m"), 4)

        with pytest.raises(EmbeddingError, match="quota"):
            await client.embed("hello")


class TestHashEmbeddingProvider:
    """Tests for the deterministic offline provider."""

    @pytest.mark.asyncio
    async def test_deterministic_unit_vectors(self):
        provider = HashEmbeddingProvider(dimensions=20)

        first = await provider.embed("same text")
        second = await provider.embed("same text")
        other = await provider.embed("other text")

        assert first == second
        assert first != other
        assert len(first) == 20
        assert sum(v * v for v in first) == pytest.approx(1.0)


class TestGetEmbeddingProvider:
    """Tests for the provider factory."""

    @patch("noteseek.llm.factory.OllamaEmbeddingProvider")
    def test_creates_ollama_provider_with_defaults(self, mock_ollama_class, monkeypatch):
        monkeypatch.delenv("EMBEDDING_SERVICE", raising=False)
        monkeypatch.delenv("EMBEDDING_MODEL", raising=False)
        monkeypatch.delenv("OLLAMA_HOST", raising=False)

        get_embedding_provider()

        mock_ollama_class.assert_called_once_with(
            host="http://localhost:11434", model="nomic-embed-text"
        )

    @patch("noteseek.llm.factory.OllamaEmbeddingProvider")
    def test_creates_ollama_provider_with_custom_config(self, mock_ollama_class):
        get_embedding_provider(
            {"service": "ollama", "host": "http://custom:8080", "model": "mxbai-embed-large"}
        )

        mock_ollama_class.assert_called_once_with(
            host="http://custom:8080", model="mxbai-embed-large"
        )

    @patch("noteseek.llm.factory.GeminiEmbeddingProvider")
    def test_creates_gemini_provider(self, mock_gemini_class, monkeypatch):
        monkeypatch.delenv("EMBEDDING_MODEL", raising=False)

        get_embedding_provider({"service": "gemini", "dimensions": 256})

        mock_gemini_class.assert_called_once_with(model="text-embedding-004", dimensions=256)

    def test_creates_hash_provider(self):
        provider = get_embedding_provider({"service": "hash", "dimensions": 12})

        assert isinstance(provider, HashEmbeddingProvider)
        assert provider.dimensions == 12

    def test_raises_error_for_unsupported_service(self):
        with pytest.raises(ValueError, match="Unsupported embedding service"):
            get_embedding_provider({"service": "unsupported"})

    def test_client_uses_configured_dimensions(self, monkeypatch):
        monkeypatch.setenv("EMBEDDING_DIMENSIONS", "32")

        client = get_embedding_client({"service": "hash"})

        assert client.dimensions == 32
        assert client.provider.dimensions == 32
