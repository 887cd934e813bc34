"""Base class for embedding providers."""

from abc import ABC, abstractmethod
from typing import List


class Embedder(ABC):
    """
    Base class for embedding providers.

    Implementations:
    - OpenAIEmbedder: OpenAI embeddings API (default)
    - FastEmbedEmbedder: Local embeddings via FastEmbed

    Embeddings from different providers or models are not comparable;
    a corpus must be embedded with the same model used for live chats.
    """

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """
        Embed a single text.

        Args:
            text: Text to embed

        Returns:
            List of floats representing the embedding vector

        Raises:
            UpstreamServiceError: if the provider request fails
        """
        pass

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Embed multiple texts. Override for efficiency.

        Args:
            texts: List of texts to embed

        Returns:
            List of embedding vectors
        """
        return [await self.embed(t) for t in texts]

    async def aclose(self) -> None:
        """Cleanup resources. Override if needed."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
