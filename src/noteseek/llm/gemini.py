"""Google Gemini embedding provider implementation."""

import logging

from google import genai

from noteseek.constants import get_embedding_model

logger = logging.getLogger(__name__)


class GeminiEmbeddingProvider:
    """Google Gemini embedding provider.

    The API key is automatically retrieved from the GEMINI_API_KEY environment
    variable.
    """

    def __init__(self, model: str | None = None, dimensions: int | None = None) -> None:
        """Initialize the Gemini provider.

        Args:
            model: The embedding model name (e.g., "text-embedding-004")
            dimensions: Requested output dimensionality, passed to the API when set
        """
        self.model = model or get_embedding_model("gemini")
        self.dimensions = dimensions
        logger.info(f"🤖 Initializing GeminiEmbeddingProvider: model={self.model}")
        # The client gets the API key from the GEMINI_API_KEY environment variable
        self.client = genai.Client()

    async def embed(self, text: str) -> list[float]:
        """Generate an embedding for a text using Gemini.

        Args:
            text: The text to embed

        Returns:
            list[float]: The embedding vector
        """
        kwargs = {"model": self.model, "contents": [text]}
        if self.dimensions:
            kwargs["config"] = genai.types.EmbedContentConfig(
                output_dimensionality=self.dimensions
            )

        try:
            response = await self.client.aio.models.embed_content(**kwargs)
        except Exception as e:
            logger.error(f"❌ Gemini embedding error for text: {e}", exc_info=True)
            raise

        return response.embeddings[0].values
