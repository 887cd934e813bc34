"""Core data types for chat-matchmaker."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Dict, Any, Optional


CONVERSATION_DEPTHS = ("surface", "medium", "detailed", "unknown")

# Summary keys that hold lists of text
_LIST_FIELDS = ("topics", "interests", "personality_traits", "values", "question_types")
_TEXT_FIELDS = ("communication_style", "one_sentence_summary")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _text_list(value: Any) -> Optional[List[str]]:
    """Normalize a summary list field; None stays None."""
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, (list, tuple, set)):
        return None
    items: List[str] = []
    for v in value:
        if v is None:
            continue
        text = str(v).strip()
        if text and text not in items:
            items.append(text)
    return items


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


class SessionState(str, Enum):
    """Orchestrator execution state."""
    IDLE = "idle"
    SENDING = "sending"


@dataclass(frozen=True)
class Message:
    """One turn of a conversation."""
    role: str  # "user" or "assistant"
    content: str
    timestamp: str = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content, "timestamp": self.timestamp}

    def to_prompt(self) -> Dict[str, str]:
        """Role and content only, as sent to the language model."""
        return {"role": self.role, "content": self.content}


@dataclass
class Summary:
    """
    Structured extraction of a conversation, used for matching.

    Every field is optional. None means the model did not provide it;
    consumers must treat None and empty the same way.
    """
    topics: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    personality_traits: Optional[List[str]] = None
    communication_style: Optional[str] = None
    values: Optional[List[str]] = None
    conversation_depth: str = "unknown"
    question_types: Optional[List[str]] = None
    one_sentence_summary: Optional[str] = None
    parse_error: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Summary":
        """Build a Summary from loosely-shaped JSON, normalizing each field."""
        if not isinstance(data, dict):
            return cls()

        depth = _text(data.get("conversation_depth"))
        depth = depth.lower() if depth else "unknown"
        if depth not in CONVERSATION_DEPTHS:
            depth = "unknown"

        known = set(_LIST_FIELDS) | set(_TEXT_FIELDS) | {"conversation_depth", "parse_error"}
        return cls(
            topics=_text_list(data.get("topics")),
            interests=_text_list(data.get("interests")),
            personality_traits=_text_list(data.get("personality_traits")),
            communication_style=_text(data.get("communication_style")),
            values=_text_list(data.get("values")),
            conversation_depth=depth,
            question_types=_text_list(data.get("question_types")),
            one_sentence_summary=_text(data.get("one_sentence_summary")),
            parse_error=_text(data.get("parse_error")),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name in _LIST_FIELDS + _TEXT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = list(value) if isinstance(value, list) else value
        data["conversation_depth"] = self.conversation_depth
        if self.parse_error:
            data["parse_error"] = self.parse_error
        data.update(self.extra)
        return data


@dataclass
class ConversationSession:
    """The single active conversation."""
    id: str
    messages: List[Message] = field(default_factory=list)
    summary: Optional[Summary] = None
    embedding: Optional[List[float]] = None


@dataclass
class CorpusEntry:
    """A prior conversation available for matching."""
    id: str
    topic: str = ""
    summary: Optional[Summary] = None
    embedding: Optional[Any] = None  # validated by MatchEngine.load
    messages: List[Dict[str, Any]] = field(default_factory=list)
    created_at: Optional[str] = None
    embedding_text: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CorpusEntry":
        """
        Create from a persisted record. Requires an 'id' key.

        A topic that is not a string, or messages that are not a list of
        dicts, are treated as absent.
        """
        known = {"id", "topic", "summary", "embedding", "messages", "createdAt", "embeddingText"}
        summary = data.get("summary")
        topic = data.get("topic")
        messages = data.get("messages")
        if not isinstance(messages, list):
            messages = []
        return cls(
            id=str(data["id"]),
            topic=topic if isinstance(topic, str) else "",
            summary=Summary.from_dict(summary) if summary is not None else None,
            embedding=data.get("embedding"),
            messages=[m for m in messages if isinstance(m, dict)],
            created_at=data.get("createdAt"),
            embedding_text=data.get("embeddingText"),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Persisted record shape (camelCase keys match existing corpora)."""
        data: Dict[str, Any] = {"id": self.id, "topic": self.topic, "messages": self.messages}
        if self.created_at:
            data["createdAt"] = self.created_at
        data.update(self.extra)
        if self.summary is not None:
            data["summary"] = self.summary.to_dict()
        if self.embedding is not None:
            data["embedding"] = self.embedding
        if self.embedding_text:
            data["embeddingText"] = self.embedding_text
        return data


@dataclass
class MatchCandidate:
    """A corpus entry that scored above the match threshold."""
    chat_id: str
    similarity: float
    topic: str
    summary: Optional[Summary]
    match_reason: str


@dataclass
class MatchTestResult:
    """Pairwise comparison of two corpus entries."""
    chat_id_a: str
    chat_id_b: str
    similarity: float
    is_match: bool
    reason: str


@dataclass
class Completion:
    """Language model reply."""
    content: str
    usage: Dict[str, Any] = field(default_factory=dict)
    model: Optional[str] = None


@dataclass
class ChatResponse:
    """Result of a successful send_message()."""
    response: str
    message_count: int
    usage: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MessageEvent:
    """Payload for the message-received hook."""
    user_message: str
    assistant_response: str
    message_count: int


@dataclass
class PipelineResult:
    """Result of one summarize -> embed -> match run."""
    summary: Summary
    matches: List[MatchCandidate]
    embedding_preview: List[float]
