"""
HTTP client for the chat API.

Every call goes through one httpx.AsyncClient; results are merged into a
SessionState so the caller only has to read state afterwards.
"""

from typing import Any, Dict, Optional
import logging

import httpx

from app.client.session import LocalConversation, SessionState

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"


class ApiError(Exception):
    """Non-2xx answer from the server"""
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class ChatApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        session: Optional[SessionState] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 90.0,
    ):
        self.session = session or SessionState()
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "ChatApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        auth: bool = True,
    ) -> Any:
        headers = {TOKEN_HEADER: self.session.require_auth()} if auth else {}
        response = await self._client.request(method, path, json=json, headers=headers)
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            if not isinstance(body, dict):
                body = {}
            message = body.get("msg") or body.get("error") or response.text
            if response.status_code == 401 and auth:
                # Expired or invalid token: the user has to log in again
                logger.info("Server rejected the token, signing out")
                self.session.sign_out()
            raise ApiError(response.status_code, message)
        return response.json()

    async def register(self, email: str, password: str) -> str:
        data = await self._request(
            "POST", "/register", json={"email": email, "password": password}, auth=False
        )
        self.session.sign_in(data["token"], data["email"])
        return data["email"]

    async def login(self, email: str, password: str) -> str:
        data = await self._request(
            "POST", "/login", json={"email": email, "password": password}, auth=False
        )
        self.session.sign_in(data["token"], data["email"])
        return data["email"]

    def logout(self) -> None:
        self.session.sign_out()

    async def refresh_chats(self) -> None:
        """Reload the caller's conversations from the server"""
        records = await self._request("GET", "/chats")
        self.session.load_conversations(records)

    async def create_chat(self) -> LocalConversation:
        """Ask the server for a new empty conversation and select it"""
        record = await self._request("POST", "/chats")
        return self.session.add_conversation(
            LocalConversation(history=record.get("history") or [], conversation_id=record["id"])
        )

    async def send_prompt(self, prompt: str) -> str:
        """Send prompt on the active conversation and return the model's reply"""
        target = self.session.begin_request(prompt)
        body: Dict[str, Any] = {"prompt": prompt}
        if target.conversation_id:
            body["conversationId"] = target.conversation_id
        try:
            data = await self._request("POST", "/chat", json=body)
        except Exception:
            self.session.fail_request()
            raise
        self.session.apply_chat_response(target, data)
        return data["reply"]
