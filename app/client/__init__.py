"""Python client for the chat API."""

from .api import ApiError, ChatApiClient
from .session import LocalConversation, NotAuthenticated, SessionError, SessionState

__all__ = [
    "ApiError",
    "ChatApiClient",
    "LocalConversation",
    "NotAuthenticated",
    "SessionError",
    "SessionState",
]
