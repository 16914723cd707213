from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class ConversationType:
    GLOBAL = 1  # owner and staff
    AGENT_ONLY = 2  # internal notes

    ALL = (GLOBAL, AGENT_ONLY)


class Conversation(SQLModel, table=True):
    """One message channel of a ticket."""

    __tablename__ = "conversations"
    __table_args__ = (UniqueConstraint("ticket_id", "type", name="uq_conversation_ticket_type"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    ticket_id: UUID = Field(foreign_key="tickets.id", index=True)
    type: int = Field(default=ConversationType.GLOBAL)


class Message(SQLModel, table=True):
    """Represents a message posted to a conversation."""

    __tablename__ = "messages"
    __table_args__ = (UniqueConstraint("conversation_id", "seq", name="uq_message_conversation_seq"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    conversation_id: UUID = Field(foreign_key="conversations.id", index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    content: str = Field(max_length=5000)
    sent_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
    # Position within the conversation; orders messages sharing a timestamp
    seq: int = Field(default=1, nullable=False)
