"""
Conversation Service

Store access for conversations. Every read is scoped to the owning user so
that one user can never see or extend another user's conversation.
"""

from typing import Any, Dict, List, Optional, Union
from uuid import UUID
from datetime import datetime, timezone
from sqlmodel import Session, select
import logging

from app.errors import NotFoundOrForbidden
from app.models.conversation import Conversation

logger = logging.getLogger(__name__)


def _parse_id(conversation_id: Union[str, UUID]) -> Optional[UUID]:
    if isinstance(conversation_id, UUID):
        return conversation_id
    try:
        return UUID(str(conversation_id))
    except ValueError:
        return None


class ConversationService:
    """Service for managing conversations"""

    def __init__(self, db: Session):
        self.db = db

    def create_conversation(self, user_id: str) -> Conversation:
        """Create and persist a new empty conversation"""
        conversation = Conversation(user_id=user_id, history=[])
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)
        logger.info(f"Created conversation {conversation.id} for user {user_id}")
        return conversation

    def get_conversation(self, conversation_id: Union[str, UUID], user_id: str) -> Conversation:
        """
        Get conversation ensuring ownership.

        Raises:
            NotFoundOrForbidden: If the id is malformed, unknown, or owned by another user
        """
        parsed_id = _parse_id(conversation_id)
        if parsed_id is None:
            raise NotFoundOrForbidden()

        statement = select(Conversation).where(
            Conversation.id == parsed_id,
            Conversation.user_id == user_id
        )
        conversation = self.db.exec(statement).first()
        if conversation is None:
            raise NotFoundOrForbidden()
        return conversation

    def load_or_create(
        self,
        user_id: str,
        conversation_id: Optional[Union[str, UUID]] = None
    ) -> Conversation:
        """Fetch the caller's conversation, or start a new one when no id is given"""
        if conversation_id:
            return self.get_conversation(conversation_id, user_id)
        return self.create_conversation(user_id)

    def replace_history(
        self,
        conversation: Conversation,
        history: List[Dict[str, Any]]
    ) -> Conversation:
        """Overwrite the stored history with a normalized one"""
        conversation.history = history
        conversation.updated_at = datetime.now(timezone.utc)
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def get_user_conversations(self, user_id: str) -> List[Conversation]:
        """Get all conversations for a user, oldest first"""
        statement = select(Conversation).where(
            Conversation.user_id == user_id
        ).order_by(Conversation.created_at)

        return list(self.db.exec(statement).all())
