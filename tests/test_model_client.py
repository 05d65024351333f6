import asyncio

import pytest

from app.errors import UpstreamError, UpstreamTimeout
from app.services import model_client
from app.services.model_client import GeminiChatClient


class FakeChatSession:
    def __init__(self, history, behaviour):
        self.history = list(history)
        self.behaviour = behaviour

    async def send_message_async(self, prompt):
        if self.behaviour == "hang":
            await asyncio.sleep(5)
        if self.behaviour == "fail":
            raise RuntimeError("429 Resource has been exhausted")
        self.history.append({"role": "user", "parts": [{"text": prompt}]})
        self.history.append({"role": "model", "parts": [{"text": "pong"}]})
        return type("Response", (), {"text": "pong"})()


class FakeGenerativeModel:
    def __init__(self, behaviour="ok"):
        self.behaviour = behaviour
        self.histories = []

    def start_chat(self, history):
        self.histories.append(history)
        return FakeChatSession(history, self.behaviour)


def make_client(behaviour="ok", timeout_seconds=1.0):
    client = GeminiChatClient(api_key="test-key", model_name="gemini-test", timeout_seconds=timeout_seconds)
    client.model = FakeGenerativeModel(behaviour)
    return client


def test_missing_api_key_is_fatal():
    with pytest.raises(RuntimeError):
        GeminiChatClient(api_key=None)


@pytest.mark.asyncio
async def test_send_returns_updated_history():
    client = make_client()
    prior = [{"role": "user", "parts": [{"text": "ping"}]}, {"role": "model", "parts": [{"text": "pong"}]}]

    reply = await client.send(prior, "ping again")

    assert reply.text == "pong"
    assert len(reply.history) == 4
    assert reply.history[2] == {"role": "user", "parts": [{"text": "ping again"}]}
    assert client.model.histories == [prior]


@pytest.mark.asyncio
async def test_provider_failure_becomes_upstream_error():
    with pytest.raises(UpstreamError) as exc_info:
        await make_client("fail").send([], "hi")
    assert "Resource has been exhausted" in exc_info.value.message


@pytest.mark.asyncio
async def test_hung_call_times_out():
    with pytest.raises(UpstreamTimeout):
        await make_client("hang", timeout_seconds=0.05).send([], "hi")


def test_global_client_is_initialized_once():
    model_client.reset_model_client()
    with pytest.raises(RuntimeError):
        model_client.get_model_client()

    client = make_client()
    assert model_client.init_model_client(client) is client
    assert model_client.get_model_client() is client
    with pytest.raises(RuntimeError):
        model_client.init_model_client(make_client())

    model_client.reset_model_client()
