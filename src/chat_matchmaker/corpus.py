"""
Corpus storage and the offline summarize/embed jobs.

The corpus is a JSON array of conversation records. Each record needs
an "id"; "summary" and "embedding" are filled in by summarize_corpus()
and embed_corpus().
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Sequence

from .embedders.base import Embedder
from .errors import UpstreamServiceError
from .llm.base import LanguageModel
from .summary import create_embedding_text, fallback_summary, parse_summary
from .types import CorpusEntry

logger = logging.getLogger(__name__)


class CorpusStore:
    """
    Reads and writes a corpus JSON file.

    Usage:
        store = CorpusStore("./chats.json")
        entries = store.load()
        store.save(entries)
    """

    def __init__(self, path: str = "./chats.json"):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> List[CorpusEntry]:
        """
        Load all records.

        Raises:
            FileNotFoundError: if the file does not exist
            ValueError: if the file is not a JSON array
        """
        data = json.loads(self.path.read_text())
        if not isinstance(data, list):
            raise ValueError(f"Corpus must be a JSON array: {self.path}")

        entries = []
        for i, record in enumerate(data):
            if not isinstance(record, dict) or record.get("id") is None:
                logger.warning("Skipping corpus record %d: no id", i)
                continue
            try:
                entries.append(CorpusEntry.from_dict(record))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping corpus record %d: %s", i, e)
        return entries

    def save(self, entries: Sequence[CorpusEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = [e.to_dict() for e in entries]
        self.path.write_text(json.dumps(data, indent=2))
        logger.info("Saved %d chats to %s", len(data), self.path)


async def summarize_corpus(
    entries: Sequence[CorpusEntry],
    llm: LanguageModel,
    delay: float = 0.0,
) -> Dict[str, int]:
    """
    Summarize every entry that has no summary yet.

    A failed request stores the fallback summary, with the error in
    parse_error, so the entry can still be embedded.

    Args:
        entries: Corpus entries, updated in place
        llm: Model used for summarization
        delay: Seconds to wait between requests

    Returns:
        Report with total, processed, skipped and errors counts
    """
    report = {"total": len(entries), "processed": 0, "skipped": 0, "errors": 0}
    pending = [e for e in entries if e.summary is None]
    report["skipped"] = len(entries) - len(pending)

    for i, entry in enumerate(pending):
        logger.info("Generating summary for chat %s (%d/%d)", entry.id, i + 1, len(pending))
        try:
            raw = await llm.summarize(entry.messages)
            entry.summary = parse_summary(raw, topic=entry.topic or None)
            report["processed"] += 1
        except UpstreamServiceError as e:
            logger.error("Failed to generate summary for %s: %s", entry.id, e)
            entry.summary = fallback_summary(entry.topic or None, reason=str(e))
            report["errors"] += 1

        if delay and i < len(pending) - 1:
            await asyncio.sleep(delay)

    return report


async def embed_corpus(
    entries: Sequence[CorpusEntry],
    embedder: Embedder,
    delay: float = 0.0,
) -> Dict[str, int]:
    """
    Embed every summarized entry that has no embedding yet.

    Entries without a summary are skipped. A failed request leaves the
    entry without an embedding and the job moves on.

    Returns:
        Report with total, processed, skipped and errors counts
    """
    report = {"total": len(entries), "processed": 0, "skipped": 0, "errors": 0}
    pending = []
    for entry in entries:
        if entry.summary is None:
            logger.info("Chat %s has no summary, skipping", entry.id)
            report["skipped"] += 1
        elif entry.embedding:
            report["skipped"] += 1
        else:
            pending.append(entry)

    for i, entry in enumerate(pending):
        logger.info("Generating embedding for chat %s (%d/%d)", entry.id, i + 1, len(pending))
        text = create_embedding_text(entry.summary)
        try:
            entry.embedding = await embedder.embed(text)
            entry.embedding_text = text
            report["processed"] += 1
        except UpstreamServiceError as e:
            logger.error("Failed to generate embedding for %s: %s", entry.id, e)
            report["errors"] += 1

        if delay and i < len(pending) - 1:
            await asyncio.sleep(delay)

    return report
