"""Exception types for chat-matchmaker."""

from typing import Optional


class MatchmakerError(Exception):
    """Base class for all chat-matchmaker errors."""


class ValidationError(MatchmakerError):
    """
    Caller input was rejected.

    Raised for empty messages and for a send while another send is
    still in flight.
    """


class UpstreamServiceError(MatchmakerError):
    """
    A language model or embedding request failed.

    Attributes:
        service: "chat" or "embeddings"
        status_code: HTTP status, or None for transport failures and
            malformed response bodies
    """

    def __init__(self, message: str, service: str = "chat", status_code: Optional[int] = None):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class ChatNotFoundError(MatchmakerError, KeyError):
    """No corpus entry with the requested id."""

    def __init__(self, chat_id: str):
        super().__init__(f"Chat {chat_id} not found")
        self.chat_id = chat_id

    def __str__(self) -> str:
        return self.args[0]
