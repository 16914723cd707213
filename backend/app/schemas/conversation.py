from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserSummary


class MessageCreate(BaseModel):
    # conversation is resolved from the ticket, author from current_user
    content: str = Field(max_length=5000)


class MessageRead(BaseModel):
    id: UUID
    conversation_id: UUID
    user_id: str
    content: str
    sent_at: datetime
    author: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ConversationRead(BaseModel):
    id: UUID
    ticket_id: UUID
    type: int

    model_config = ConfigDict(from_attributes=True)


class ConversationThread(BaseModel):
    conversation: ConversationRead
    messages: List[MessageRead] = []


class FullConversation(BaseModel):
    global_thread: Optional[ConversationThread] = Field(default=None, serialization_alias="global")
    agent_notes: Optional[ConversationThread] = None
