"""
Chat API Router

Conversation listing, explicit conversation creation and the prompt
round trip. All routes require a valid token; the caller identity comes
from get_current_user and scopes every store access.
"""

from typing import List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from app.db.config import get_session as get_db
from app.middleware.auth import get_current_user, CurrentUser
from app.schemas.chat import ChatRequest, ChatResponse, ConversationResponse
from app.services.chat_orchestrator import ChatOrchestrator
from app.services.conversation_service import ConversationService
from app.services.model_client import ChatModelClient, get_model_client

router = APIRouter(tags=["chat"])


@router.get("/chats", response_model=List[ConversationResponse])
async def list_chats(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All conversations of the caller, oldest first"""
    service = ConversationService(db)
    conversations = await run_in_threadpool(service.get_user_conversations, current_user.user_id)
    return [ConversationResponse.from_conversation(c) for c in conversations]


@router.post("/chats", response_model=ConversationResponse)
async def create_chat(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Start a new empty conversation"""
    service = ConversationService(db)
    conversation = await run_in_threadpool(service.create_conversation, current_user.user_id)
    return ConversationResponse.from_conversation(conversation)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    model_client: ChatModelClient = Depends(get_model_client)
):
    """
    Send a prompt to the model.

    Without conversationId a new conversation is created. The response
    carries the full normalized history and the conversation id to use
    for the next turn.
    """
    orchestrator = ChatOrchestrator(db, model_client)
    result = await orchestrator.handle_prompt(
        user_id=current_user.user_id,
        prompt=request.prompt,
        conversation_id=request.conversation_id
    )
    return ChatResponse(
        reply=result.reply,
        history=result.history,
        conversation_id=result.conversation_id,
        chat_id=result.conversation_id
    )
