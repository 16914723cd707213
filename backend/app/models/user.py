from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class UserRole:
    USER = 1
    AGENT = 2
    ADMIN = 3

    ALL = (USER, AGENT, ADMIN)
    STAFF = (AGENT, ADMIN)


ROLE_LABELS = {
    UserRole.USER: "User",
    UserRole.AGENT: "Agent",
    UserRole.ADMIN: "Administrator",
}


class User(SQLModel, table=True):
    """Helpdesk account bound to an identity-provider user id."""

    __tablename__ = "users"

    # Issued by the identity provider, never generated locally
    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    email: str = Field(index=True, max_length=255)
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    role_id: int = Field(default=UserRole.USER, index=True)
    is_active: bool = Field(default=True, index=True)
    job_title: str = Field(default="Employee", max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.is_active and self.role_id == UserRole.ADMIN

    @property
    def is_staff(self) -> bool:
        """Active agent or administrator."""
        return self.is_active and self.role_id in UserRole.STAFF
