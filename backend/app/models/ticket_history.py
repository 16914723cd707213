from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel


class TicketHistory(SQLModel, table=True):
    """Append-only audit entry for one ticket mutation.

    ``status`` is the ticket status the mutation produced; it is ``None`` for
    mutations that do not move the ticket (priority, category).
    """

    __tablename__ = "ticket_history"

    # Autoincrement id breaks ties between entries written in the same instant
    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: UUID = Field(foreign_key="tickets.id", index=True)
    status: Optional[int] = Field(default=None)
    assigned_user_id: Optional[str] = Field(default=None, foreign_key="users.id", nullable=True)
    changed_by: Optional[str] = Field(default=None, foreign_key="users.id", nullable=True)
    description: Optional[str] = Field(default=None, max_length=2000)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
