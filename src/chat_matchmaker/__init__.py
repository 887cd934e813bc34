"""
chat-matchmaker: find people who talk about the same things

Each conversation is summarized, the summary is embedded, and the
embedding is compared against a corpus of earlier conversations.

Usage:
    from chat_matchmaker import ChatOrchestrator, MatchEngine, Config, CorpusStore
    from chat_matchmaker.llm.openai import OpenAIChatModel
    from chat_matchmaker.embedders.openai import OpenAIEmbedder

    config = Config.load("./matchmaker.yaml")
    orchestrator = ChatOrchestrator(
        OpenAIChatModel(config.openai, config.chat),
        OpenAIEmbedder(config.openai),
        MatchEngine(config.matching),
        config,
    )
    await orchestrator.initialize(CorpusStore(config.corpus_path))
    reply = await orchestrator.send_message("Any tips for sourdough?")
"""

from .config import Config
from .controller import ChatOrchestrator
from .corpus import CorpusStore
from .errors import MatchmakerError, ValidationError, UpstreamServiceError, ChatNotFoundError
from .matcher import MatchEngine
from .types import Summary, CorpusEntry, MatchCandidate, Message

__version__ = "0.1.0"
__all__ = [
    "ChatOrchestrator",
    "MatchEngine",
    "CorpusStore",
    "Config",
    "Summary",
    "CorpusEntry",
    "MatchCandidate",
    "Message",
    "MatchmakerError",
    "ValidationError",
    "UpstreamServiceError",
    "ChatNotFoundError",
]
