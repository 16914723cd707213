from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class TicketAttachment(SQLModel, table=True):
    """Represents a file linked to a ticket; the bytes live in object storage."""

    __tablename__ = "ticket_attachments"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    ticket_id: UUID = Field(foreign_key="tickets.id", index=True)
    type: str = Field(max_length=100)
    link: str = Field(max_length=1000)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
