"""OpenAI embedder - remote embeddings over httpx."""

from typing import List, Optional

import httpx

from ..config import OpenAIConfig
from ..errors import UpstreamServiceError
from ..vector import is_valid_embedding
from .base import Embedder


class OpenAIEmbedder(Embedder):
    """
    Embeddings via the OpenAI /embeddings endpoint.

    Default model text-embedding-3-large returns 3072 dims.

    Usage:
        embedder = OpenAIEmbedder(OpenAIConfig(api_key="sk-..."))
        vector = await embedder.embed("Topics: cooking, travel")
    """

    def __init__(
        self,
        config: Optional[OpenAIConfig] = None,
        model: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize OpenAI embedder.

        Args:
            config: Endpoint and key settings
            model: Overrides config.embedding_model
            client: Pre-built httpx client (owned by the caller)
        """
        self.config = config or OpenAIConfig()
        self.model = model or self.config.embedding_model
        self.url = f"{self.config.base_url.rstrip('/')}/embeddings"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.timeout)

    async def embed(self, text: str) -> List[float]:
        return (await self._request(text))[0]

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts in one request."""
        if not texts:
            return []
        return await self._request(list(texts))

    async def _request(self, input_) -> List[List[float]]:
        headers = {
            "Authorization": f"Bearer {self.config.resolve_api_key()}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._client.post(
                self.url,
                headers=headers,
                json={"model": self.model, "input": input_},
            )
        except httpx.HTTPError as e:
            raise UpstreamServiceError(f"Embedding request failed: {e}", service="embeddings") from e

        if not response.is_success:
            raise UpstreamServiceError(
                f"Embedding API error: {response.status_code}",
                service="embeddings",
                status_code=response.status_code,
            )

        try:
            items = sorted(response.json()["data"], key=lambda d: d.get("index", 0))
            vectors = [item["embedding"] for item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise UpstreamServiceError(
                "Invalid response format from embeddings API", service="embeddings"
            ) from e
        if not vectors:
            raise UpstreamServiceError("Embeddings API returned no vectors", service="embeddings")
        if not all(is_valid_embedding(v) for v in vectors):
            raise UpstreamServiceError(
                "Embeddings API returned a malformed vector", service="embeddings"
            )
        return vectors

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
