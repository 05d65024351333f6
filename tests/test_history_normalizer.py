from types import SimpleNamespace

import pydantic
import pytest

from app.errors import UnexpectedRole
from app.services.history_normalizer import from_external, latest_model_text, to_external


HISTORY = [
    {"role": "user", "parts": [{"text": "hi"}]},
    {"role": "model", "parts": [{"text": "Hello!"}, {"text": " How can I help?"}]},
]


def test_round_trip_keeps_canonical_history():
    assert from_external(to_external(HISTORY)) == HISTORY


def test_to_external_returns_independent_copy():
    stored = [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"text": "Hello!"}]},
    ]
    snapshot = to_external(stored)
    snapshot[0]["parts"][0]["text"] = "changed"
    snapshot[1]["parts"].append({"text": "extra"})
    snapshot.append({"role": "user", "parts": [{"text": "more"}]})

    assert stored == [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"text": "Hello!"}]},
    ]


def test_to_external_rejects_non_canonical_entries():
    with pytest.raises(pydantic.ValidationError):
        to_external([{"role": "assistant", "parts": [{"text": "hi"}]}])
    with pytest.raises(pydantic.ValidationError):
        to_external([{"role": "user", "parts": []}])


def test_from_external_strips_extra_fields_and_non_text_parts():
    external = [
        {"role": "user", "parts": [{"text": "weather?"}], "metadata": {"id": 1}},
        {
            "role": "model",
            "parts": [
                {"function_call": {"name": "get_weather", "args": {}}},
                {"text": "Sunny", "thought": False},
                {"inline_data": {"mime_type": "image/png", "data": b""}},
                {"text": " today"},
            ],
        },
    ]
    assert from_external(external) == [
        {"role": "user", "parts": [{"text": "weather?"}]},
        {"role": "model", "parts": [{"text": "Sunny"}, {"text": " today"}]},
    ]


def test_from_external_reads_attribute_style_content():
    # Content objects report unset text as an empty string
    external = [
        SimpleNamespace(role="user", parts=[SimpleNamespace(text="hi")]),
        SimpleNamespace(
            role="model",
            parts=[SimpleNamespace(text="", function_call="lookup"), SimpleNamespace(text="Hello")],
        ),
    ]
    assert from_external(external) == [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"text": "Hello"}]},
    ]


def test_from_external_drops_turns_without_text():
    external = [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"function_call": {"name": "noop"}}]},
        {"role": "model", "parts": [{"text": "done"}]},
    ]
    assert from_external(external) == [
        {"role": "user", "parts": [{"text": "hi"}]},
        {"role": "model", "parts": [{"text": "done"}]},
    ]


@pytest.mark.parametrize("role", ["assistant", "system", None, "Model"])
def test_from_external_rejects_unknown_roles(role):
    with pytest.raises(UnexpectedRole) as exc_info:
        from_external([{"role": role, "parts": [{"text": "x"}]}])
    assert exc_info.value.code == "UNEXPECTED_ROLE"


def test_latest_model_text():
    assert latest_model_text(HISTORY) == "Hello! How can I help?"
    assert latest_model_text([{"role": "user", "parts": [{"text": "hi"}]}]) == ""
    assert latest_model_text([]) == ""


def test_latest_model_text_ignores_older_model_turns():
    history = HISTORY + [{"role": "user", "parts": [{"text": "and now?"}]}]
    assert latest_model_text(history) == ""
