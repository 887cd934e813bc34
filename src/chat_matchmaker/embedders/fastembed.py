"""FastEmbed embedder - local embeddings via Qdrant's FastEmbed library."""

import asyncio
from typing import List

from .base import Embedder


class FastEmbedEmbedder(Embedder):
    """
    Local embeddings via FastEmbed (Qdrant).

    Uses ONNX runtime for CPU inference, off the event loop. Downloads
    the model on first use. A corpus embedded with OpenAI cannot be
    matched against FastEmbed vectors; re-run `matchmaker embed` first.

    Install: pip install chat-matchmaker[local]
    """

    def __init__(self, model: str = "BAAI/bge-small-en-v1.5"):
        try:
            from fastembed import TextEmbedding
        except ImportError:
            raise ImportError(
                "FastEmbed not installed. Install with: pip install chat-matchmaker[local]"
            )

        self.model_name = model
        self._model = TextEmbedding(model_name=model)

    async def embed(self, text: str) -> List[float]:
        return (await self.embed_batch([text]))[0]

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        embeddings = await asyncio.to_thread(lambda: list(self._model.embed(texts)))
        return [e.tolist() for e in embeddings]
