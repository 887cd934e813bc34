"""
Conversation orchestration.

ChatOrchestrator owns the current conversation and runs each exchange
through: completion -> summary -> embedding -> match search.
"""

import hashlib
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

from .config import Config
from .corpus import CorpusStore
from .embedders.base import Embedder
from .errors import ChatNotFoundError, UpstreamServiceError, ValidationError
from .llm.base import LanguageModel
from .logger import EventLogger
from .matcher import MatchEngine
from .summary import create_embedding_text, parse_summary
from .types import (
    ChatResponse,
    ConversationSession,
    MatchCandidate,
    Message,
    MessageEvent,
    PipelineResult,
    SessionState,
)
from .vector import is_valid_embedding

logger = logging.getLogger(__name__)

MatchFoundCallback = Callable[[List[MatchCandidate]], Any]
MessageReceivedCallback = Callable[[MessageEvent], Any]


def generate_chat_id(seed: str) -> str:
    """Derive a short stable id from seed text."""
    return hashlib.sha256(seed.encode()).hexdigest()[:16]


class ChatOrchestrator:
    """
    Drives one conversation at a time through the matching pipeline.

    Only one send_message() may run at a time. A second call made while
    the first is awaiting the model is rejected with ValidationError,
    not queued. On a single event loop the check-and-set of the state
    has no await between them, so it cannot race.

    Callbacks are single-slot: registering a new one replaces the old.
    Each fires once per event and nothing is replayed for callbacks
    registered later.

    Usage:
        orchestrator = ChatOrchestrator(llm, embedder, MatchEngine(config.matching))
        await orchestrator.initialize(CorpusStore(config.corpus_path))
        orchestrator.set_match_found_callback(show_matches)
        reply = await orchestrator.send_message("I've been learning to bake bread")
    """

    def __init__(
        self,
        llm: LanguageModel,
        embedder: Embedder,
        matcher: MatchEngine,
        config: Optional[Config] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self.llm = llm
        self.embedder = embedder
        self.matcher = matcher
        self.config = config or Config()
        self.event_logger = event_logger
        self.state = SessionState.IDLE
        self.current_chat = ConversationSession(id="")
        self._on_match_found: Optional[MatchFoundCallback] = None
        self._on_message_received: Optional[MessageReceivedCallback] = None
        self.start_new_chat()

    @property
    def is_processing(self) -> bool:
        return self.state is SessionState.SENDING

    async def initialize(self, store: CorpusStore) -> bool:
        """
        Load the corpus into the matcher and start a fresh chat.

        Returns:
            False if the corpus could not be read (matching then runs
            against an empty corpus), True otherwise
        """
        try:
            self.matcher.load(store.load())
        except (OSError, ValueError) as e:
            logger.error("Failed to load corpus from %s: %s", store.path, e)
            self.matcher.load([])
            self.start_new_chat()
            return False

        self.start_new_chat()
        return True

    def start_new_chat(self) -> str:
        """Discard the current conversation and start a new one."""
        chat_id = generate_chat_id(f"chat_{time.time_ns()}_{random.random()}")
        self.current_chat = ConversationSession(id=chat_id)
        logger.info("Started new chat: %s", chat_id)
        if self.event_logger:
            self.event_logger.log_session_start(chat_id)
        return chat_id

    def reset(self) -> str:
        return self.start_new_chat()

    async def send_message(self, user_message: str) -> ChatResponse:
        """
        Send a user message and run the matching pipeline.

        Both the user message and the assistant reply stay in the history
        even if summarizing, embedding or matching fails afterwards; that
        failure is raised from here.

        Raises:
            ValidationError: if the message is blank or another send is
                in progress
            UpstreamServiceError: if the completion or any pipeline
                request fails
        """
        if self.state is SessionState.SENDING:
            raise ValidationError("Already processing a message. Please wait.")

        if not user_message or not user_message.strip():
            raise ValidationError("Message cannot be empty")

        self.state = SessionState.SENDING
        try:
            session = self.current_chat
            text = user_message.strip()
            session.messages.append(Message(role="user", content=text))

            completion = await self.llm.complete(
                [m.to_prompt() for m in session.messages],
                max_tokens=self.config.chat.max_tokens,
                temperature=self.config.chat.temperature,
                system_prompt=self.config.chat.system_prompt,
            )
            session.messages.append(Message(role="assistant", content=completion.content))
            message_count = len(session.messages)

            if self.event_logger:
                self.event_logger.log_exchange(session.id, message_count, completion.usage)

            if self._on_message_received:
                self._on_message_received(MessageEvent(
                    user_message=text,
                    assistant_response=completion.content,
                    message_count=message_count,
                ))

            await self.update_summary_and_check_matches(session)

            return ChatResponse(
                response=completion.content,
                message_count=message_count,
                usage=completion.usage,
            )
        except Exception:
            logger.exception("Error sending message")
            raise
        finally:
            self.state = SessionState.IDLE

    async def update_summary_and_check_matches(
        self, session: Optional[ConversationSession] = None
    ) -> PipelineResult:
        """
        Summarize the conversation, embed it, and search for matches.

        Runs against the current chat unless a session is given. The
        session's summary and embedding are replaced together, only after
        both requests have succeeded.
        """
        session = session or self.current_chat
        history = [m.to_prompt() for m in session.messages]

        logger.debug("Generating summary for chat %s", session.id)
        raw = await self.llm.summarize(history)
        summary = parse_summary(raw)

        logger.debug("Generating embedding for chat %s", session.id)
        embedding = await self.embedder.embed(create_embedding_text(summary))
        if not is_valid_embedding(embedding):
            raise UpstreamServiceError(
                "Embedding service returned a malformed vector", service="embeddings"
            )

        session.summary, session.embedding = summary, embedding

        matches = self.matcher.find_matches(embedding, exclude_id=session.id)
        if self.event_logger:
            self.event_logger.log_matches(session.id, matches)

        if matches:
            logger.info("Found %d matches for chat %s", len(matches), session.id)
            if self._on_match_found:
                self._on_match_found(matches)

        return PipelineResult(summary=summary, matches=matches, embedding_preview=embedding[:5])

    def get_current_chat(self) -> Dict[str, Any]:
        """Conversation state for display."""
        return {
            "id": self.current_chat.id,
            "messages": list(self.current_chat.messages),
            "message_count": len(self.current_chat.messages),
            "summary": self.current_chat.summary,
            "has_embedding": self.current_chat.embedding is not None,
        }

    def get_formatted_conversation(self) -> List[Dict[str, str]]:
        return [
            {
                "role": m.role,
                "content": m.content,
                "timestamp": m.timestamp,
                "display_role": "You" if m.role == "user" else "Assistant",
            }
            for m in self.current_chat.messages
        ]

    def set_match_found_callback(self, callback: Optional[MatchFoundCallback]):
        self._on_match_found = callback

    def set_message_received_callback(self, callback: Optional[MessageReceivedCallback]):
        self._on_message_received = callback

    def get_matcher_stats(self) -> Dict[str, Any]:
        return self.matcher.stats()

    def test_with_existing_chat(self, chat_id: str) -> Dict[str, Any]:
        """
        Run matching for a corpus entry as if it were the live chat.

        Raises:
            ChatNotFoundError: if chat_id is not in the corpus
        """
        existing = self.matcher.get_chat_by_id(chat_id)
        if existing is None:
            raise ChatNotFoundError(chat_id)

        return {
            "chat_id": chat_id,
            "topic": existing.topic,
            "summary": existing.summary,
            "matches": self.matcher.find_matches(existing.embedding, exclude_id=chat_id),
        }
