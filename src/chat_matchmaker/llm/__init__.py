"""Language model clients for chat-matchmaker."""

from .base import LanguageModel

__all__ = ["LanguageModel"]
