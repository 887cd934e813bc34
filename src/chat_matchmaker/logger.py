"""
Event log for conversations and matches.
"""

from pathlib import Path
from typing import Any, Dict, List
import json
from datetime import datetime


class EventLogger:
    """
    Logs conversation activity to JSONL files.

    Files:
    - sessions.jsonl: Chat starts and resets
    - exchanges.jsonl: Completed user/assistant exchanges
    - matches.jsonl: Match results for a session
    """

    def __init__(self, log_path: str = "./logs/matchmaker/"):
        self.log_path = Path(log_path)
        self.log_path.mkdir(parents=True, exist_ok=True)

    def _log(self, file: str, entry: dict):
        """Write a log entry to file."""
        log_file = self.log_path / file
        entry["timestamp"] = datetime.now().isoformat()
        with open(log_file, "a") as f:
            f.write(json.dumps(entry) + "\n")

    def log_session_start(self, session_id: str, reason: str = "start"):
        self._log("sessions.jsonl", {
            "event": "session_start",
            "session_id": session_id,
            "reason": reason,
        })

    def log_exchange(self, session_id: str, message_count: int, usage: Dict[str, Any]):
        self._log("exchanges.jsonl", {
            "event": "exchange",
            "session_id": session_id,
            "message_count": message_count,
            "usage": usage,
        })

    def log_matches(self, session_id: str, matches: List[Any]):
        """Log the match list for a session. Empty lists are recorded too."""
        self._log("matches.jsonl", {
            "event": "matches",
            "session_id": session_id,
            "match_ids": [m.chat_id for m in matches],
            "top_similarity": matches[0].similarity if matches else None,
        })

    def get_match_stats(self, hours: int = 24) -> dict:
        """Get match statistics for the last N hours."""
        log_file = self.log_path / "matches.jsonl"
        if not log_file.exists():
            return {}

        since = datetime.now().timestamp() - (hours * 3600)
        runs = 0
        with_matches = 0
        by_chat: Dict[str, int] = {}

        with open(log_file) as f:
            for line in f:
                entry = json.loads(line)
                ts = datetime.fromisoformat(entry["timestamp"]).timestamp()
                if ts <= since:
                    continue
                runs += 1
                if entry.get("match_ids"):
                    with_matches += 1
                for chat_id in entry.get("match_ids", []):
                    by_chat[chat_id] = by_chat.get(chat_id, 0) + 1

        return {
            "match_runs": runs,
            "runs_with_matches": with_matches,
            "matches_by_chat": by_chat,
        }
