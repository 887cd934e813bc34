"""OpenAI-compatible chat completions over httpx."""

import logging
from typing import Dict, List, Optional, Sequence

import httpx

from ..config import ChatConfig, OpenAIConfig
from ..errors import UpstreamServiceError
from ..types import Completion
from .base import LanguageModel

logger = logging.getLogger(__name__)


class OpenAIChatModel(LanguageModel):
    """
    Chat completions via an OpenAI-compatible API.

    Each request is attempted once; there is no retry or backoff.

    Usage:
        async with OpenAIChatModel(OpenAIConfig(api_key="sk-...")) as llm:
            reply = await llm.complete([{"role": "user", "content": "Hi"}])
    """

    def __init__(
        self,
        config: Optional[OpenAIConfig] = None,
        chat: Optional[ChatConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Endpoint, model and key settings
            chat: Default completion settings
            client: Pre-built httpx client (owned by the caller)
        """
        self.config = config or OpenAIConfig()
        self.chat = chat or ChatConfig()
        self.model = self.config.chat_model
        self.url = f"{self.config.base_url.rstrip('/')}/chat/completions"
        self.summary_max_tokens = self.chat.summary_max_tokens
        self.summary_temperature = self.chat.summary_temperature
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.timeout)

    async def complete(
        self,
        messages: Sequence[Dict[str, str]],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system_prompt: Optional[str] = None,
    ) -> Completion:
        full_messages: List[Dict[str, str]] = []
        if system_prompt:
            full_messages.append({"role": "system", "content": system_prompt})
        full_messages.extend({"role": m["role"], "content": m["content"]} for m in messages)

        payload = {
            "model": self.model,
            "messages": full_messages,
            "max_tokens": max_tokens if max_tokens is not None else self.chat.max_tokens,
            "temperature": temperature if temperature is not None else self.chat.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.config.resolve_api_key()}",
            "Content-Type": "application/json",
        }

        try:
            response = await self._client.post(self.url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamServiceError(f"Chat request failed: {e}", service="chat") from e

        if not response.is_success:
            raise UpstreamServiceError(
                f"OpenAI API error {response.status_code}: {response.text}",
                service="chat",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamServiceError(
                "Invalid response format from OpenAI API", service="chat"
            ) from e
        if not isinstance(content, str):
            raise UpstreamServiceError("Invalid response format from OpenAI API", service="chat")

        usage = data.get("usage") or {}
        logger.debug("Completion: %d chars, usage=%s", len(content), usage)
        return Completion(content=content, usage=usage, model=data.get("model"))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
