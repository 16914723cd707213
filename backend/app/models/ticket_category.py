from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class TicketCategory(SQLModel, table=True):
    """Represents a ticket category for classification."""

    __tablename__ = "ticket_categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
