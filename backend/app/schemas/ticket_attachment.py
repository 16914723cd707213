from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TicketAttachmentCreate(BaseModel):
    type: str = Field(max_length=100)
    link: str = Field(max_length=1000)


class TicketAttachmentRead(TicketAttachmentCreate):
    id: UUID
    ticket_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
