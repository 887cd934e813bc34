#!/usr/bin/env python3
"""
Command-line interface for chat-matchmaker.

Usage:
    matchmaker init
    matchmaker chat
    matchmaker stats
    matchmaker matches <chat_id>
    matchmaker test-match <chat_id_a> <chat_id_b>
    matchmaker summarize
    matchmaker embed
    matchmaker threshold 0.6
    matchmaker events
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import Config
from .controller import ChatOrchestrator
from .corpus import CorpusStore, embed_corpus, summarize_corpus
from .embedders import create_embedder
from .errors import ChatNotFoundError, MatchmakerError
from .llm.openai import OpenAIChatModel
from .logger import EventLogger
from .matcher import MatchEngine


def load_config(path: str) -> Config:
    """Load config from path, or defaults if the file doesn't exist."""
    if Path(path).exists():
        return Config.load(path)
    return Config()


def load_matcher(config: Config) -> MatchEngine:
    matcher = MatchEngine(config.matching)
    matcher.load(CorpusStore(config.corpus_path).load())
    return matcher


def print_matches(matches):
    if not matches:
        print("No matches found.")
        return
    print(f"🔗 {len(matches)} similar conversation(s):")
    for m in matches:
        print(f"  [{m.chat_id}] {m.topic or '(no topic)'}")
        print(f"    {m.match_reason}")


def cmd_init(args):
    """Write a default config file."""
    config_path = Path(args.config)

    if config_path.exists() and not args.force:
        print(f"Config already exists: {config_path}")
        print("Use --force to overwrite.")
        return

    Config().save(str(config_path))
    print(f"✓ Created config: {config_path}")


def cmd_stats(args):
    """Show corpus statistics."""
    config = load_config(args.config)
    stats = load_matcher(config).stats()
    print(f"Corpus: {config.corpus_path}")
    print(f"Chats: {stats['total_chats']}")
    print(f"Topics: {stats['unique_topics']}")
    print(f"Styles: {stats['unique_styles']}")
    print(f"Threshold: {config.matching.similarity_threshold}")


def cmd_matches(args):
    """Find matches for an existing corpus chat."""
    config = load_config(args.config)
    matcher = load_matcher(config)
    entry = matcher.get_chat_by_id(args.chat_id)
    if entry is None:
        raise ChatNotFoundError(args.chat_id)
    print(f"Chat {entry.id}: {entry.topic}")
    print_matches(matcher.find_matches(entry.embedding, exclude_id=entry.id))


def cmd_test_match(args):
    """Compare two corpus chats."""
    config = load_config(args.config)
    result = load_matcher(config).test_match(args.chat_id_a, args.chat_id_b)
    if result is None:
        print("One or both chats not found (or not comparable).")
        sys.exit(1)
    verdict = "MATCH" if result.is_match else "no match"
    print(f"{result.chat_id_a} ↔ {result.chat_id_b}: {result.similarity:.3f} ({verdict})")
    print(f"  {result.reason}")


def cmd_threshold(args):
    """Update the similarity threshold in the config file."""
    config = load_config(args.config)
    matcher = MatchEngine(config.matching)
    matcher.set_threshold(args.value)
    config.matching.similarity_threshold = matcher.threshold
    config.save(args.config)
    print(f"✓ Threshold set to {matcher.threshold} in {args.config}")


async def _summarize(config: Config, delay: float):
    store = CorpusStore(config.corpus_path)
    entries = store.load()
    async with OpenAIChatModel(config.openai, config.chat) as llm:
        report = await summarize_corpus(entries, llm, delay=delay)
    store.save(entries)
    return report


async def _embed(config: Config, delay: float):
    store = CorpusStore(config.corpus_path)
    entries = store.load()
    async with create_embedder(config) as embedder:
        report = await embed_corpus(entries, embedder, delay=delay)
    store.save(entries)
    return report


def print_report(title: str, report: dict):
    print(f"\n{title} Report:")
    print(f"- Total chats: {report['total']}")
    print(f"- Processed: {report['processed']}")
    print(f"- Skipped: {report['skipped']}")
    print(f"- Errors: {report['errors']}")


def cmd_summarize(args):
    """Summarize corpus chats that have no summary."""
    config = load_config(args.config)
    report = asyncio.run(_summarize(config, args.delay))
    print_report("Summary", report)


def cmd_embed(args):
    """Embed corpus chats that have a summary but no embedding."""
    config = load_config(args.config)
    report = asyncio.run(_embed(config, args.delay))
    print_report("Embedding", report)


def cmd_events(args):
    """Show match statistics from the event log."""
    config = load_config(args.config)
    if not config.log_path:
        print("Event log disabled. Set log_path in the config.")
        return
    stats = EventLogger(config.log_path).get_match_stats(hours=args.hours)
    if not stats:
        print("No match events logged.")
        return
    print(f"Match runs: {stats['match_runs']} ({stats['runs_with_matches']} with matches)")
    for chat_id, count in sorted(stats["matches_by_chat"].items(), key=lambda kv: -kv[1]):
        print(f"  {chat_id}: {count}x")


async def _chat(config: Config):
    event_logger = EventLogger(config.log_path) if config.log_path else None
    async with OpenAIChatModel(config.openai, config.chat) as llm, create_embedder(config) as embedder:
        orchestrator = ChatOrchestrator(
            llm, embedder, MatchEngine(config.matching), config, event_logger
        )
        if not await orchestrator.initialize(CorpusStore(config.corpus_path)):
            print("⚠ Corpus could not be loaded; matching is disabled.")
        orchestrator.set_match_found_callback(print_matches)

        print("Type a message. Commands: /reset, /stats, /quit")
        loop = asyncio.get_running_loop()
        while True:
            line = await loop.run_in_executor(None, input, "You: ")
            command = line.strip().lower()
            if command in ("/quit", "/exit"):
                break
            if command == "/reset":
                orchestrator.reset()
                print("Started a new chat.")
                continue
            if command == "/stats":
                stats = orchestrator.get_matcher_stats()
                print(f"{stats['total_chats']} chats, {stats['unique_topics']} topics")
                continue

            try:
                result = await orchestrator.send_message(line)
            except MatchmakerError as e:
                print(f"✗ {e}")
                continue
            print(f"Assistant: {result.response}\n")


def cmd_chat(args):
    """Chat interactively and show matching conversations."""
    config = load_config(args.config)
    if not config.openai.resolve_api_key():
        print("Please set OPENAI_API_KEY or openai.api_key in the config.")
        sys.exit(1)
    asyncio.run(_chat(config))


def main():
    parser = argparse.ArgumentParser(
        description="Match conversations by semantic similarity",
        prog="matchmaker"
    )
    parser.add_argument(
        "-c", "--config",
        default="matchmaker.yaml",
        help="Path to config file (default: matchmaker.yaml)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init
    p_init = subparsers.add_parser("init", help="Write a default config file")
    p_init.add_argument("-f", "--force", action="store_true", help="Overwrite existing")
    p_init.set_defaults(func=cmd_init)

    # chat
    p_chat = subparsers.add_parser("chat", help="Start an interactive chat")
    p_chat.set_defaults(func=cmd_chat)

    # stats
    p_stats = subparsers.add_parser("stats", help="Show corpus statistics")
    p_stats.set_defaults(func=cmd_stats)

    # matches
    p_matches = subparsers.add_parser("matches", help="Find matches for a corpus chat")
    p_matches.add_argument("chat_id", help="Corpus chat id")
    p_matches.set_defaults(func=cmd_matches)

    # test-match
    p_test = subparsers.add_parser("test-match", help="Compare two corpus chats")
    p_test.add_argument("chat_id_a")
    p_test.add_argument("chat_id_b")
    p_test.set_defaults(func=cmd_test_match)

    # threshold
    p_threshold = subparsers.add_parser("threshold", help="Set the similarity threshold")
    p_threshold.add_argument("value", type=float, help="Value between 0 and 1")
    p_threshold.set_defaults(func=cmd_threshold)

    # summarize
    p_summarize = subparsers.add_parser("summarize", help="Summarize corpus chats")
    p_summarize.add_argument("--delay", type=float, default=1.0, help="Seconds between requests")
    p_summarize.set_defaults(func=cmd_summarize)

    # embed
    p_embed = subparsers.add_parser("embed", help="Embed summarized corpus chats")
    p_embed.add_argument("--delay", type=float, default=0.5, help="Seconds between requests")
    p_embed.set_defaults(func=cmd_embed)

    # events
    p_events = subparsers.add_parser("events", help="Show match statistics from the event log")
    p_events.add_argument("--hours", type=int, default=24, help="Look back this many hours")
    p_events.set_defaults(func=cmd_events)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except FileNotFoundError as e:
        print(f"✗ {e}")
        sys.exit(1)
    except (MatchmakerError, ValueError) as e:
        print(f"✗ {e}")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print("\nAborted.")
        sys.exit(1)


if __name__ == "__main__":
    main()
