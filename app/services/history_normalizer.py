"""
History Normalizer

Translates between the stored conversation history and the representation
exchanged with the upstream model.

- to_external: stored history -> fresh list of plain dicts the model client
  can consume. Nothing in the result is shared with the stored record.
- from_external: upstream history (Content objects or dicts, possibly with
  non-text parts such as function calls) -> stored history containing only
  role and text parts.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional
import logging

from app.errors import UnexpectedRole
from app.models.message import Message, MessageRole

logger = logging.getLogger(__name__)

_ROLES = {role.value for role in MessageRole}


def _field(obj: Any, name: str) -> Any:
    """Read a field from either a mapping or an attribute-style object."""
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _text_of(part: Any) -> Optional[str]:
    """Return the text of a part, or None for non-text parts."""
    if isinstance(part, str):
        return part
    if isinstance(part, Mapping):
        text = part.get("text")
        return text if isinstance(text, str) else None
    # Message objects report unset string fields as ""
    text = getattr(part, "text", None)
    return text if isinstance(text, str) and text else None


def _role_of(entry: Any) -> str:
    role = _field(entry, "role")
    if isinstance(role, MessageRole):
        return role.value
    if role not in _ROLES:
        raise UnexpectedRole(role)
    return role


def to_external(stored_history: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Build an independent copy of the stored history for the model call.

    Every entry is validated against the canonical Message shape and
    re-created, so mutating the result never touches the stored record.
    """
    return [
        Message.model_validate(entry).model_dump(mode="json")
        for entry in stored_history
    ]


def from_external(external_history: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Project the upstream history onto the stored shape.

    Keeps the role and the text of each part in order; anything else is
    dropped. A turn left without any text part is skipped entirely.

    Raises:
        UnexpectedRole: If a turn carries a role other than "user" or "model"
    """
    normalized: List[Dict[str, Any]] = []
    for entry in external_history:
        role = _role_of(entry)
        parts = [
            {"text": text}
            for text in (_text_of(part) for part in (_field(entry, "parts") or []))
            if text is not None
        ]
        if not parts:
            logger.debug(f"Dropping {role} turn without text parts")
            continue
        normalized.append({"role": role, "parts": parts})
    return normalized


def latest_model_text(history: List[Dict[str, Any]]) -> str:
    """Text of the newest turn if the model spoke last, otherwise an empty string."""
    if not history or history[-1]["role"] != MessageRole.MODEL.value:
        return ""
    return "".join(part["text"] for part in history[-1]["parts"])
