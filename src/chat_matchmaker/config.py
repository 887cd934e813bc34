"""Configuration loader for chat-matchmaker."""

import json
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful, conversational AI assistant. "
    "Engage naturally with the user about their topic of interest."
)


@dataclass
class OpenAIConfig:
    """Connection settings for the chat and embeddings endpoints."""
    api_key: Optional[str] = None  # falls back to $OPENAI_API_KEY
    base_url: str = "https://api.openai.com/v1"
    chat_model: str = "gpt-5-nano"
    embedding_model: str = "text-embedding-3-large"
    timeout: Optional[float] = None  # None = wait indefinitely

    def resolve_api_key(self) -> str:
        return self.api_key or os.getenv("OPENAI_API_KEY", "")


@dataclass
class MatchingConfig:
    """Ranking settings for MatchEngine."""
    similarity_threshold: float = 0.7
    max_matches: int = 5

    def __post_init__(self):
        validate_threshold(self.similarity_threshold)
        if isinstance(self.max_matches, bool) or not isinstance(self.max_matches, int) \
                or self.max_matches < 1:
            raise ValueError(f"max_matches must be a positive integer, got {self.max_matches!r}")


@dataclass
class ChatConfig:
    """Completion settings for conversation and summarization."""
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_tokens: int = 300
    temperature: float = 0.7
    summary_max_tokens: int = 400
    summary_temperature: float = 0.3


@dataclass
class EmbedderConfig:
    """Which embedding provider to use."""
    type: str = "openai"  # "openai" or "fastembed"
    model: Optional[str] = None

    def __post_init__(self):
        if self.type not in ("openai", "fastembed"):
            raise ValueError(f"Unknown embedder type: {self.type}")


@dataclass
class Config:
    """Main configuration for chat-matchmaker."""
    corpus_path: str = "./chats.json"
    log_path: Optional[str] = None  # JSONL event log directory
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    embedder: EmbedderConfig = field(default_factory=EmbedderConfig)

    def __post_init__(self):
        """Convert dicts to proper config objects."""
        if isinstance(self.openai, dict):
            self.openai = OpenAIConfig(**self.openai)
        if isinstance(self.matching, dict):
            self.matching = MatchingConfig(**self.matching)
        if isinstance(self.chat, dict):
            self.chat = ChatConfig(**self.chat)
        if isinstance(self.embedder, dict):
            self.embedder = EmbedderConfig(**self.embedder)

    @classmethod
    def load(cls, path: str) -> "Config":
        """Load configuration from YAML or JSON file."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        content = path.read_text()

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        else:
            data = json.loads(content)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create config from dictionary."""
        return cls(
            corpus_path=data.get("corpus_path", "./chats.json"),
            log_path=data.get("log_path"),
            openai=OpenAIConfig(**data.get("openai", {})),
            matching=MatchingConfig(**data.get("matching", {})),
            chat=ChatConfig(**data.get("chat", {})),
            embedder=EmbedderConfig(**data.get("embedder", {})),
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary. The API key is never written out."""
        return {
            "corpus_path": self.corpus_path,
            "log_path": self.log_path,
            "openai": {
                "base_url": self.openai.base_url,
                "chat_model": self.openai.chat_model,
                "embedding_model": self.openai.embedding_model,
                "timeout": self.openai.timeout,
            },
            "matching": {
                "similarity_threshold": self.matching.similarity_threshold,
                "max_matches": self.matching.max_matches,
            },
            "chat": {
                "system_prompt": self.chat.system_prompt,
                "max_tokens": self.chat.max_tokens,
                "temperature": self.chat.temperature,
                "summary_max_tokens": self.chat.summary_max_tokens,
                "summary_temperature": self.chat.summary_temperature,
            },
            "embedder": {
                "type": self.embedder.type,
                "model": self.embedder.model,
            },
        }

    def save(self, path: str):
        """Save configuration to file."""
        path = Path(path)
        data = self.to_dict()

        if path.suffix in (".yaml", ".yml"):
            content = yaml.dump(data, default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(data, indent=2)

        path.write_text(content)


def validate_threshold(value) -> float:
    """Return value as a float if it is a similarity threshold in [0, 1]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Threshold must be a number, got {value!r}")
    if math.isnan(value) or not 0 <= value <= 1:
        raise ValueError(f"Threshold must be between 0 and 1, got {value}")
    return float(value)
