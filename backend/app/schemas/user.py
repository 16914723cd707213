from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRead(BaseModel):
    id: str
    name: str
    email: str
    avatar_url: Optional[str] = None
    role_id: int
    is_active: bool
    job_title: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Compact author/owner info embedded in other resources."""

    id: str
    name: str
    email: str
    role_id: int

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    job_title: Optional[str] = Field(None, max_length=255)


class RoleUpdate(BaseModel):
    role_id: int
