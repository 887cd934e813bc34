"""
Conversation summaries: prompt, parsing, and embedding text.

The summarization boundary is the only place raw model output is
turned into a Summary. Anything that fails to parse degrades to a
fixed fallback rather than an error.
"""

import json
import logging
from typing import Dict, List, Optional, Sequence

from .types import Summary

logger = logging.getLogger(__name__)


SUMMARY_PROMPT = """Analyze this conversation and extract a structured summary for matching similar conversations.

CONVERSATION:
{conversation}

Respond with ONLY a valid JSON object (no other text) containing:
{{
  "topics": ["list of main topics discussed"],
  "interests": ["specific interests or hobbies mentioned"],
  "personality_traits": ["communication style traits like curious, detailed, practical, etc."],
  "communication_style": "brief description of how the person communicates",
  "values": ["any values or priorities that come through"],
  "conversation_depth": "surface/medium/detailed",
  "question_types": ["types of questions asked like practical, theoretical, personal"],
  "one_sentence_summary": "Brief description of what this conversation was about"
}}"""

# (field, label) in embedding-text order
EMBEDDING_FIELDS = (
    ("topics", "Topics"),
    ("interests", "Interests"),
    ("personality_traits", "Traits"),
    ("communication_style", "Style"),
    ("values", "Values"),
    ("one_sentence_summary", "Summary"),
)


def format_conversation(messages: Sequence[Dict[str, str]]) -> str:
    """Render messages as 'User: ...' / 'Assistant: ...' paragraphs."""
    return "\n\n".join(
        f"{'User' if m.get('role') == 'user' else 'Assistant'}: {m.get('content', '')}"
        for m in messages
    )


def build_summary_prompt(messages: Sequence[Dict[str, str]]) -> str:
    return SUMMARY_PROMPT.format(conversation=format_conversation(messages))


def clean_json_response(response: str) -> str:
    """Strip Markdown code fences around a JSON reply."""
    response = response.strip()

    if response.startswith("```json"):
        response = response[7:]
    elif response.startswith("```"):
        response = response[3:]

    if response.endswith("```"):
        response = response[:-3]

    return response.strip()


def fallback_summary(topic: Optional[str] = None, reason: Optional[str] = None) -> Summary:
    """Generic summary used when the model's reply cannot be parsed."""
    return Summary(
        topics=[topic or "general conversation"],
        interests=[],
        personality_traits=["conversational"],
        communication_style="friendly",
        values=[],
        conversation_depth="medium",
        question_types=["general"],
        one_sentence_summary=f"Conversation about {topic}" if topic else "General conversation",
        parse_error=reason,
    )


def parse_summary(text: str, topic: Optional[str] = None) -> Summary:
    """
    Parse a summarization reply into a Summary.

    Args:
        text: Raw model output, expected to be a JSON object
        topic: Conversation topic used by the fallback, if known

    Returns:
        The parsed Summary, or fallback_summary(topic) if the reply is
        not a JSON object
    """
    try:
        data = json.loads(clean_json_response(text or ""))
    except ValueError as e:
        logger.warning("Failed to parse summary JSON, using fallback: %s", e)
        return fallback_summary(topic, reason=str(e))

    if not isinstance(data, dict):
        logger.warning("Summary JSON is a %s, not an object; using fallback", type(data).__name__)
        return fallback_summary(topic, reason="summary is not a JSON object")

    return Summary.from_dict(data)


def create_embedding_text(summary: Summary) -> str:
    """
    Build the text that gets embedded for a summary.

    Fields are rendered as 'Label: a, b' in a fixed order; missing or
    empty fields are left out.
    """
    parts: List[str] = []
    for name, label in EMBEDDING_FIELDS:
        value = getattr(summary, name)
        if not value:
            continue
        if isinstance(value, list):
            value = ", ".join(value)
        parts.append(f"{label}: {value}")
    return ". ".join(parts)
