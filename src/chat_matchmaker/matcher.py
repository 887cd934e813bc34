"""Similarity ranking of prior conversations."""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .config import MatchingConfig, validate_threshold
from .types import CorpusEntry, MatchCandidate, MatchTestResult, Summary
from .vector import cosine_similarity, is_valid_embedding

logger = logging.getLogger(__name__)


class MatchEngine:
    """
    Ranks corpus entries against a query embedding.

    Holds a read-only snapshot of the corpus. load() swaps the whole
    snapshot in a single assignment, so a reload never exposes a
    half-built list to find_matches().

    Usage:
        engine = MatchEngine(MatchingConfig(similarity_threshold=0.7))
        engine.load(CorpusStore("./chats.json").load())
        matches = engine.find_matches(embedding, exclude_id=session.id)
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        config = config or MatchingConfig()
        self.threshold = config.similarity_threshold
        self.max_matches = config.max_matches
        self._entries: Tuple[CorpusEntry, ...] = ()
        self._by_id: Dict[str, CorpusEntry] = {}

    @property
    def entries(self) -> Tuple[CorpusEntry, ...]:
        """Retained entries in ingestion order."""
        return self._entries

    def load(self, corpus: Iterable[Union[CorpusEntry, Dict[str, Any]]]) -> int:
        """
        Replace the corpus snapshot.

        Entries without a usable embedding, and repeats of an id already
        seen, are dropped with a warning.

        Returns:
            Number of entries retained
        """
        retained: List[CorpusEntry] = []
        by_id: Dict[str, CorpusEntry] = {}
        dropped = 0

        for item in corpus:
            entry = item if isinstance(item, CorpusEntry) else CorpusEntry.from_dict(item)
            if not is_valid_embedding(entry.embedding):
                logger.warning("Chat %s has no usable embedding, excluding it", entry.id)
                dropped += 1
                continue
            if entry.id in by_id:
                logger.warning("Duplicate chat id %s, keeping the first occurrence", entry.id)
                dropped += 1
                continue
            by_id[entry.id] = entry
            retained.append(entry)

        self._entries, self._by_id = tuple(retained), by_id
        logger.info("Loaded %d chats with embeddings (%d excluded)", len(retained), dropped)
        return len(retained)

    def find_matches(
        self,
        query_embedding: Any,
        exclude_id: Optional[str] = None,
    ) -> List[MatchCandidate]:
        """
        Find corpus entries similar to a query embedding.

        Args:
            query_embedding: Vector to compare against
            exclude_id: Corpus id to leave out (usually the querying chat)

        Returns:
            Candidates with similarity >= threshold, best first, ties in
            ingestion order, at most max_matches long. Empty when the
            query is not a usable embedding.
        """
        if not is_valid_embedding(query_embedding):
            logger.warning("Invalid embedding provided to find_matches")
            return []

        candidates: List[MatchCandidate] = []
        for entry in self._entries:
            if exclude_id is not None and entry.id == exclude_id:
                continue

            try:
                similarity = cosine_similarity(query_embedding, entry.embedding)
            except ValueError as e:
                logger.warning("Skipping chat %s: %s", entry.id, e)
                continue

            if similarity >= self.threshold:
                candidates.append(MatchCandidate(
                    chat_id=entry.id,
                    similarity=similarity,
                    topic=entry.topic,
                    summary=entry.summary,
                    match_reason=self.generate_match_reason(entry.summary, similarity),
                ))

        # sorted() is stable, so equal scores keep ingestion order
        candidates = sorted(candidates, key=lambda c: c.similarity, reverse=True)
        return candidates[:self.max_matches]

    def generate_match_reason(self, summary: Optional[Summary], similarity: float) -> str:
        """
        Explain a match in one line.

        Picks up to two clauses in priority order: shared topics,
        communication style, personality traits.
        """
        summary = summary or Summary()
        percent = int(math.floor(similarity * 100 + 0.5))
        reasons = []

        if summary.topics:
            reasons.append(f"shared interest in {' and '.join(summary.topics[:2])}")

        if summary.communication_style:
            reasons.append(f"similar {summary.communication_style} communication style")

        if summary.personality_traits:
            reasons.append(f"both {' and '.join(summary.personality_traits[:2])}")

        reason_text = " and ".join(reasons[:2]) if reasons else "similar conversation patterns"
        return f"{percent}% match - {reason_text}"

    def get_chat_by_id(self, chat_id: str) -> Optional[CorpusEntry]:
        return self._by_id.get(chat_id)

    def test_match(self, chat_id_a: str, chat_id_b: str) -> Optional[MatchTestResult]:
        """
        Compare two corpus entries directly.

        Returns:
            MatchTestResult, or None if either id is unknown or the pair
            cannot be compared
        """
        a = self.get_chat_by_id(chat_id_a)
        b = self.get_chat_by_id(chat_id_b)
        if a is None or b is None:
            return None

        try:
            similarity = cosine_similarity(a.embedding, b.embedding)
        except ValueError as e:
            logger.warning("Cannot compare %s and %s: %s", chat_id_a, chat_id_b, e)
            return None

        return MatchTestResult(
            chat_id_a=chat_id_a,
            chat_id_b=chat_id_b,
            similarity=similarity,
            is_match=similarity >= self.threshold,
            reason=self.generate_match_reason(b.summary, similarity),
        )

    def stats(self) -> Dict[str, Any]:
        """Get summary statistics about the loaded corpus."""
        topics: List[str] = []
        styles: List[str] = []

        for entry in self._entries:
            if entry.summary is None:
                continue
            for topic in entry.summary.topics or []:
                if topic not in topics:
                    topics.append(topic)
            style = entry.summary.communication_style
            if style and style not in styles:
                styles.append(style)

        return {
            "total_chats": len(self._entries),
            "unique_topics": len(topics),
            "unique_styles": len(styles),
            "topics": topics,
            "styles": styles,
        }

    def set_threshold(self, value: float) -> None:
        """
        Update the similarity threshold.

        Raises:
            ValueError: if value is outside [0, 1]; the current
                threshold is kept
        """
        self.threshold = validate_threshold(value)
        logger.info("Similarity threshold updated to %s", self.threshold)
