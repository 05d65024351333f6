"""
Conversation Model

A chat thread owned by exactly one user. The ordered message history is
kept on the row itself as a JSON array of {role, parts: [{text}]} entries
and is replaced in full after every successful model call.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4
from typing import Any, Dict, List, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship, Column
from sqlalchemy import JSON, DateTime

if TYPE_CHECKING:
    from .user import User


class Conversation(SQLModel, table=True):
    """
    Conversation record.

    Relationships:
    - Belongs to one User (user_id is never reassigned)
    """
    __tablename__ = "conversations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    history: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    user: "User" = Relationship(back_populates="conversations")
