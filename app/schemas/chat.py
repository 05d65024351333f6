"""Chat and conversation schemas."""
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from app.models.conversation import Conversation
from app.models.message import Message


class ChatRequest(BaseModel):
    """Frontend sends camelCase; chatId is accepted for older clients."""
    prompt: str = Field(..., min_length=1, max_length=20000)
    conversation_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("conversationId", "chatId", "conversation_id"),
    )


class ChatResponse(BaseModel):
    reply: str
    history: List[Message]
    conversation_id: str = Field(..., alias="conversationId")
    chat_id: str = Field(..., alias="chatId")

    model_config = {"populate_by_name": True}


class ConversationResponse(BaseModel):
    id: str
    owner: str
    history: List[Message]
    created_at: datetime = Field(..., alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationResponse":
        return cls(
            id=str(conversation.id),
            owner=conversation.user_id,
            history=conversation.history,
            created_at=conversation.created_at,
        )
