from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class TicketStatus:
    OPEN = 1
    ASSIGNED = 2
    IN_PROGRESS = 3
    DELIVERED = 4
    RETURNED = 5
    RESOLVED = 6
    CLOSED = 7

    ALL = (OPEN, ASSIGNED, IN_PROGRESS, DELIVERED, RETURNED, RESOLVED, CLOSED)


class TicketPriority:
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    ALL = (LOW, MEDIUM, HIGH)


STATUS_LABELS = {
    TicketStatus.OPEN: "Open",
    TicketStatus.ASSIGNED: "Assigned",
    TicketStatus.IN_PROGRESS: "In Progress",
    TicketStatus.DELIVERED: "Delivered",
    TicketStatus.RETURNED: "Returned",
    TicketStatus.RESOLVED: "Resolved",
    TicketStatus.CLOSED: "Closed",
}

PRIORITY_LABELS = {
    TicketPriority.LOW: "Low",
    TicketPriority.MEDIUM: "Medium",
    TicketPriority.HIGH: "High",
}


def get_status_label(status: Optional[int]) -> str:
    return STATUS_LABELS.get(status, str(status))


def get_priority_label(priority: Optional[int]) -> str:
    return PRIORITY_LABELS.get(priority, str(priority))


class Ticket(SQLModel, table=True):
    """Represents a support ticket."""

    __tablename__ = "tickets"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=255)
    description: str = Field(max_length=5000)
    category_id: int = Field(foreign_key="ticket_categories.id", index=True)
    priority_id: int = Field(default=TicketPriority.MEDIUM, index=True)
    status: int = Field(default=TicketStatus.OPEN, index=True)
    assigned_user_id: Optional[str] = Field(
        default=None, foreign_key="users.id", nullable=True, index=True
    )
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def touch(self):
        """Updates the updated_at timestamp."""
        self.updated_at = datetime.utcnow()
