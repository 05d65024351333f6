"""User model for SQLModel."""
from sqlmodel import SQLModel, Field, Relationship, Column
from sqlalchemy import DateTime
from datetime import datetime, timezone
from typing import TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from app.models.conversation import Conversation


class User(SQLModel, table=True):
    """User identity record. Created at registration and never mutated afterwards."""

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True,
        index=True
    )
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    conversations: list["Conversation"] = Relationship(back_populates="user")
