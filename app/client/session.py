"""
Client Session State

Local state of a chat client: the signed token (absent = logged out), the
cached list of conversations, which one is selected, and whether a prompt
is in flight. Server responses are merged in here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

TITLE_LENGTH = 30
PLACEHOLDER_TITLE = "New Chat..."


class SessionError(Exception):
    """Raised when an action is not allowed in the current session state"""


class NotAuthenticated(SessionError):
    def __init__(self):
        super().__init__("Log in or register first")


@dataclass
class LocalConversation:
    """Cached copy of one conversation. conversation_id stays None until the server assigns one."""
    history: List[Dict[str, Any]] = field(default_factory=list)
    conversation_id: Optional[str] = None

    @property
    def title(self) -> str:
        try:
            text = self.history[0]["parts"][0]["text"]
        except (IndexError, KeyError):
            return PLACEHOLDER_TITLE
        return text[:TITLE_LENGTH] or PLACEHOLDER_TITLE


class SessionState:
    def __init__(self):
        self.token: Optional[str] = None
        self.email: Optional[str] = None
        self.conversations: List[LocalConversation] = [LocalConversation()]
        self.selected_index = 0
        self.loading = False

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def require_auth(self) -> str:
        if self.token is None:
            raise NotAuthenticated()
        return self.token

    def sign_in(self, token: str, email: str) -> None:
        self.token = token
        self.email = email

    def sign_out(self) -> None:
        """Drop the token and everything cached under it"""
        self.token = None
        self.email = None
        self.conversations = [LocalConversation()]
        self.selected_index = 0
        self.loading = False

    @property
    def active(self) -> LocalConversation:
        return self.conversations[self.selected_index]

    def select(self, index: int) -> LocalConversation:
        if not 0 <= index < len(self.conversations):
            raise IndexError(f"No conversation at index {index}")
        self.selected_index = index
        return self.active

    def start_new_chat(self) -> LocalConversation:
        """Append an empty placeholder and make it active"""
        self.conversations.append(LocalConversation())
        self.selected_index = len(self.conversations) - 1
        return self.active

    def add_conversation(self, conversation: LocalConversation) -> LocalConversation:
        self.conversations.append(conversation)
        self.selected_index = len(self.conversations) - 1
        return conversation

    def remove_chat(self, index: int) -> None:
        """Remove a cached conversation. At least one placeholder always remains."""
        if not 0 <= index < len(self.conversations):
            raise IndexError(f"No conversation at index {index}")
        del self.conversations[index]
        if not self.conversations:
            self.conversations = [LocalConversation()]
        self.selected_index = min(max(0, index - 1), len(self.conversations) - 1)

    def load_conversations(self, records: List[Dict[str, Any]]) -> None:
        """Replace the cache with the server's list (oldest first) and select the newest"""
        self.conversations = [
            LocalConversation(history=record.get("history") or [], conversation_id=record["id"])
            for record in records
        ] or [LocalConversation()]
        self.selected_index = len(self.conversations) - 1

    def begin_request(self, prompt: str) -> LocalConversation:
        """
        Mark a prompt as in flight and return the conversation it targets.

        Raises:
            NotAuthenticated: If there is no token
            SessionError: If the prompt is blank or another prompt is in flight
        """
        self.require_auth()
        if not prompt.strip():
            raise SessionError("Prompt is empty")
        if self.loading:
            raise SessionError("A prompt is already in flight")
        self.loading = True
        return self.active

    def apply_chat_response(self, target: LocalConversation, response: Dict[str, Any]) -> None:
        """Merge a /chat response into the conversation that sent the prompt"""
        self.loading = False
        conversation_id = response.get("conversationId") or response.get("chatId")
        if target.conversation_id is None and conversation_id:
            target.conversation_id = conversation_id
            logger.debug(f"Bound local conversation to server id {conversation_id}")
        if response.get("reply") is not None:
            target.history = response.get("history") or []

    def fail_request(self) -> None:
        self.loading = False
