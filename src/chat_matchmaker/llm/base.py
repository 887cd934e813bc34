"""Base class for language model providers."""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

from ..summary import build_summary_prompt
from ..types import Completion


class LanguageModel(ABC):
    """
    Base class for chat completion providers.

    Implementations:
    - OpenAIChatModel: OpenAI-compatible /chat/completions endpoint

    Subclasses only implement complete(); summarize() is built on top
    of it with a low temperature and a JSON-only prompt.
    """

    summary_max_tokens: int = 400
    summary_temperature: float = 0.3

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[Dict[str, str]],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system_prompt: Optional[str] = None,
    ) -> Completion:
        """
        Request a chat completion.

        Args:
            messages: Conversation as {role, content} dicts, oldest first
            max_tokens: Completion length cap (provider default if None)
            temperature: Sampling temperature (provider default if None)
            system_prompt: Prepended as a system message

        Returns:
            Completion with the reply text and usage metadata

        Raises:
            UpstreamServiceError: on a failed request or malformed reply
        """
        pass

    async def summarize(self, messages: Sequence[Dict[str, str]]) -> str:
        """
        Ask the model for a JSON summary of a conversation.

        Returns the raw reply text; parsing is left to
        summary.parse_summary().
        """
        prompt = build_summary_prompt(messages)
        completion = await self.complete(
            [{"role": "user", "content": prompt}],
            max_tokens=self.summary_max_tokens,
            temperature=self.summary_temperature,
        )
        return completion.content.strip()

    async def aclose(self) -> None:
        """Cleanup resources. Override if needed."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
