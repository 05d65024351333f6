"""
Canonical message shape stored in a conversation's history.

Messages are not a table of their own; they live inside
Conversation.history and are validated through these models on the way in
and out of the store.
"""

from enum import Enum
from typing import List
from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Message sender role"""
    USER = "user"
    MODEL = "model"


class MessagePart(BaseModel):
    text: str


class Message(BaseModel):
    """One turn of a conversation."""
    role: MessageRole
    parts: List[MessagePart] = Field(..., min_length=1)
