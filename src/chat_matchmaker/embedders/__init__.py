"""Embedding providers for chat-matchmaker."""

from .base import Embedder

__all__ = ["Embedder", "create_embedder"]


def get_openai_embedder():
    """Get OpenAIEmbedder (requires httpx)."""
    from .openai import OpenAIEmbedder
    return OpenAIEmbedder


def get_fastembed_embedder():
    """Get FastEmbedEmbedder (requires fastembed)."""
    from .fastembed import FastEmbedEmbedder
    return FastEmbedEmbedder


def create_embedder(config) -> Embedder:
    """Create the embedder named by config.embedder."""
    if config.embedder.type == "fastembed":
        cls = get_fastembed_embedder()
        return cls(model=config.embedder.model) if config.embedder.model else cls()

    cls = get_openai_embedder()
    return cls(config.openai, model=config.embedder.model)
