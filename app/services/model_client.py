"""
Upstream chat-completion client.

Wraps google-generativeai's chat session: the prior turns are handed over as
history, the new prompt is sent, and the session's updated history (prompt
and reply appended) comes back to the caller.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from dotenv import load_dotenv

from app.errors import UpstreamError, UpstreamTimeout

load_dotenv()

logger = logging.getLogger(__name__)

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
GEMINI_MODEL_NAME = (os.environ.get("GEMINI_MODEL_NAME") or "").strip() or "gemini-2.5-flash"
MODEL_TIMEOUT_SECONDS = float(os.environ.get("MODEL_TIMEOUT_SECONDS", "60"))


@dataclass
class ModelReply:
    """Result of one upstream call"""
    history: List[Any]  # Full upstream history, prior turns + prompt + reply
    text: str


class ChatModelClient(ABC):
    """Capability consumed by the chat orchestrator."""

    model_name: str

    @abstractmethod
    async def send(self, history: List[Dict[str, Any]], prompt: str) -> ModelReply:
        """
        Send prompt with history as context.

        Raises:
            UpstreamError: On any provider failure
            UpstreamTimeout: If no answer arrives in time
        """


class GeminiChatClient(ChatModelClient):
    """Gemini implementation of ChatModelClient"""

    def __init__(
        self,
        api_key: Optional[str] = GEMINI_API_KEY,
        model_name: str = GEMINI_MODEL_NAME,
        timeout_seconds: float = MODEL_TIMEOUT_SECONDS,
    ):
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is not set")
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.model = genai.GenerativeModel(model_name)
        logger.info(f"Gemini client initialized with model: {self.model_name}")

    async def send(self, history: List[Dict[str, Any]], prompt: str) -> ModelReply:
        chat = self.model.start_chat(history=history)
        try:
            response = await asyncio.wait_for(
                chat.send_message_async(prompt),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"Gemini call timed out after {self.timeout_seconds}s")
            raise UpstreamTimeout(self.timeout_seconds)
        except Exception as e:
            logger.error(f"Gemini call failed: {str(e)}", exc_info=True)
            raise UpstreamError(str(e))

        try:
            text = response.text
        except ValueError:
            # Raised when the candidate holds no text part
            text = ""
        return ModelReply(history=list(chat.history), text=text)


# Process-wide client, set once during startup
_model_client: Optional[ChatModelClient] = None


def init_model_client(client: Optional[ChatModelClient] = None) -> ChatModelClient:
    """Create the global model client. Called once before serving."""
    global _model_client
    if _model_client is not None:
        raise RuntimeError("Model client already initialized")
    _model_client = client if client is not None else GeminiChatClient()
    return _model_client


def get_model_client() -> ChatModelClient:
    """Get the global model client instance"""
    if _model_client is None:
        raise RuntimeError("Model client used before startup initialization")
    return _model_client


def reset_model_client() -> None:
    """Forget the global client. Only meant for process shutdown and tests."""
    global _model_client
    _model_client = None
