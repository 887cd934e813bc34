"""Shared fixtures: in-memory stand-ins for the model and embedding services."""

import asyncio
from pathlib import Path
from typing import List, Optional

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from chat_matchmaker.embedders.base import Embedder
from chat_matchmaker.llm.base import LanguageModel
from chat_matchmaker.types import Completion


SUMMARY_JSON = """{
  "topics": ["baking", "sourdough"],
  "interests": ["bread"],
  "personality_traits": ["curious", "patient"],
  "communication_style": "casual",
  "values": ["craft"],
  "conversation_depth": "medium",
  "question_types": ["practical"],
  "one_sentence_summary": "Learning to bake sourdough"
}"""


class FakeLanguageModel(LanguageModel):
    """Replies with fixed text; can be paused on a gate or made to fail."""

    def __init__(self, reply: str = "Sounds fun!", summary: str = SUMMARY_JSON):
        self.reply = reply
        self.summary = summary
        self.gate: Optional[asyncio.Event] = None
        self.complete_error: Optional[Exception] = None
        self.summarize_error: Optional[Exception] = None
        self.complete_calls: List[dict] = []
        self.summarize_calls: List[list] = []

    async def complete(self, messages, max_tokens=None, temperature=None, system_prompt=None):
        self.complete_calls.append({
            "messages": list(messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system_prompt": system_prompt,
        })
        if self.gate is not None:
            await self.gate.wait()
        if self.complete_error:
            raise self.complete_error
        return Completion(content=self.reply, usage={"total_tokens": 12}, model="fake")

    async def summarize(self, messages):
        self.summarize_calls.append(list(messages))
        if self.summarize_error:
            raise self.summarize_error
        return self.summary


class FakeEmbedder(Embedder):
    """Returns one fixed vector for every text."""

    def __init__(self, vector=None):
        self.vector = vector if vector is not None else [1.0, 0.0, 0.0]
        self.error: Optional[Exception] = None
        self.texts: List[str] = []

    async def embed(self, text):
        self.texts.append(text)
        if self.error:
            raise self.error
        return list(self.vector)


@pytest.fixture
def fake_llm():
    return FakeLanguageModel()


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def corpus_records():
    """Three corpus chats: A and C point the same way, B is orthogonal."""
    return [
        {
            "id": "A",
            "topic": "sourdough",
            "summary": {"topics": ["baking", "bread"], "communication_style": "casual"},
            "embedding": [1.0, 0.0, 0.0],
        },
        {
            "id": "B",
            "topic": "chess",
            "summary": {"topics": ["chess"], "personality_traits": ["analytical"]},
            "embedding": [0.0, 1.0, 0.0],
        },
        {
            "id": "C",
            "topic": "pizza",
            "summary": {"topics": ["baking"], "communication_style": "enthusiastic"},
            "embedding": [0.9, 0.1, 0.0],
        },
    ]
