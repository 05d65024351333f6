"""
Chat Orchestrator

One prompt, one complete round trip:
1. Resolve the caller's conversation (or create a new empty one)
2. Snapshot its history as an independent copy
3. Send snapshot + prompt to the model
4. Normalize the model's updated history
5. Replace the stored history and persist
6. Return reply, history and conversation id

Steps 1-3 never modify the stored history, so an upstream failure leaves
the conversation exactly as it was and the client can simply resend. A
reply without any text counts as an upstream failure: storing it would
leave the history ending on an unanswered user turn.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from app.errors import UpstreamError
from app.services.conversation_service import ConversationService
from app.services.history_normalizer import from_external, latest_model_text, to_external
from app.services.model_client import ChatModelClient

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    reply: str
    history: List[Dict[str, Any]]
    conversation_id: str


class ChatOrchestrator:
    """Runs a prompt against the model and keeps the conversation in sync"""

    def __init__(self, db: Session, model_client: ChatModelClient):
        self.conversations = ConversationService(db)
        self.model_client = model_client

    async def handle_prompt(
        self,
        user_id: str,
        prompt: str,
        conversation_id: Optional[str] = None
    ) -> ChatResult:
        conversation = await run_in_threadpool(
            self.conversations.load_or_create, user_id, conversation_id
        )
        logger.info(
            f"Chat request from user {user_id} on conversation {conversation.id}: {prompt[:50]}"
        )

        snapshot = to_external(conversation.history)
        model_reply = await self.model_client.send(snapshot, prompt)

        history = from_external(model_reply.history)
        reply = latest_model_text(history)
        if not reply:
            logger.warning(f"Model sent no text for conversation {conversation.id}")
            raise UpstreamError("Model reply contained no text", code="EMPTY_REPLY")
        await run_in_threadpool(self.conversations.replace_history, conversation, history)

        return ChatResult(
            reply=reply,
            history=history,
            conversation_id=str(conversation.id),
        )
