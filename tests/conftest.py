"""Shared fixtures: in-memory SQLite, a fake model client, and a TestClient."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["GEMINI_API_KEY"] = "test-key"

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from app.db.config import engine
from app.main import app
from app.models.user import User
from app.services import model_client as model_client_module
from app.services.model_client import ChatModelClient, ModelReply


class FakeModelClient(ChatModelClient):
    """
    Stands in for Gemini. Like a real chat session it appends the prompt and
    the reply to the history object it was given, in place.
    """

    model_name = "fake-model"

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.extra_reply_parts: List[Dict[str, Any]] = []
        self.reply_parts: Optional[List[Dict[str, Any]]] = None
        self.reply_role = "model"

    async def send(self, history: List[Dict[str, Any]], prompt: str) -> ModelReply:
        self.calls.append({"history": [dict(m) for m in history], "prompt": prompt})
        history.append({"role": "user", "parts": [{"text": prompt}]})
        if self.error is not None:
            raise self.error
        reply = f"echo: {prompt}"
        history.append({
            "role": self.reply_role,
            "parts": self.reply_parts if self.reply_parts is not None
            else [{"text": reply}] + self.extra_reply_parts,
        })
        return ModelReply(history=history, text=reply)


@pytest.fixture
def fake_model() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture(autouse=True)
def fresh_database():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db_session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(fake_model, monkeypatch):
    monkeypatch.setattr(
        "app.main.init_model_client",
        lambda: model_client_module.init_model_client(fake_model),
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_session):
    def _make_user(email: str) -> User:
        user = User(email=email, password_hash="not-a-real-hash")
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def register_user(client):
    """Register through the API and return headers carrying the new token."""
    def _register_user(email: str, password: str = "pw1") -> Dict[str, str]:
        response = client.post("/register", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"x-auth-token": response.json()["token"]}
    return _register_user
