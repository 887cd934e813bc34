#!/usr/bin/env python3
"""
Standalone example of chat-matchmaker ranking.

Uses a hand-made corpus with tiny vectors, so no API key is needed.

Run from this directory:
    python example.py
"""

from pathlib import Path
import sys

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from chat_matchmaker import MatchEngine
from chat_matchmaker.config import MatchingConfig
from chat_matchmaker.summary import create_embedding_text, parse_summary


CORPUS = [
    {
        "id": "bread-01",
        "topic": "sourdough",
        "summary": {"topics": ["baking", "sourdough"], "communication_style": "casual"},
        "embedding": [0.9, 0.1, 0.0],
    },
    {
        "id": "chess-01",
        "topic": "chess openings",
        "summary": {"topics": ["chess"], "personality_traits": ["analytical", "competitive"]},
        "embedding": [0.0, 1.0, 0.1],
    },
    {
        "id": "pizza-01",
        "topic": "pizza dough",
        "summary": {"topics": ["baking", "pizza"], "communication_style": "enthusiastic"},
        "embedding": [0.8, 0.0, 0.3],
    },
    {"id": "broken-01", "topic": "no embedding yet"},
]


def main():
    engine = MatchEngine(MatchingConfig(similarity_threshold=0.6, max_matches=3))

    print("=== chat-matchmaker Example ===\n")

    print("Loading corpus...")
    engine.load(CORPUS)
    stats = engine.stats()
    print(f"  {stats['total_chats']} chats, topics: {', '.join(stats['topics'])}")

    # What a summarizer reply turns into
    summary = parse_summary('{"topics": ["bread"], "communication_style": "curious"}')
    print(f"\nEmbedding text: {create_embedding_text(summary)}")

    print("\nMatches for a baking-flavored query:")
    for m in engine.find_matches([1.0, 0.0, 0.1]):
        print(f"  {m.chat_id:<10} {m.similarity:.3f}  {m.match_reason}")

    print("\nPairwise check:")
    result = engine.test_match("bread-01", "chess-01")
    print(f"  bread-01 vs chess-01: {result.similarity:.3f} (match: {result.is_match})")


if __name__ == "__main__":
    main()
