from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserSummary


class TicketBase(BaseModel):
    title: str = Field(max_length=255)
    description: str = Field(max_length=5000)
    category_id: int
    priority_id: int


class TicketCreate(TicketBase):
    # user_id is taken from current_user
    pass


class TicketRead(TicketBase):
    id: UUID
    user_id: str
    status: int
    assigned_user_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    # Labels and joined info (populated by the service)
    status_label: Optional[str] = None
    priority_label: Optional[str] = None
    category_name: Optional[str] = None
    owner: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class TicketHistoryRead(BaseModel):
    id: int
    ticket_id: UUID
    status: Optional[int] = None
    status_label: Optional[str] = None
    assigned_user_id: Optional[str] = None
    assigned_user: Optional[UserSummary] = None
    changed_by: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketDetailRead(TicketRead):
    history: List[TicketHistoryRead] = []


class TicketAssign(BaseModel):
    agent_id: str = Field(min_length=1)


class TicketStatusUpdate(BaseModel):
    status: int
    description: Optional[str] = Field(None, max_length=2000)


class TicketPriorityUpdate(BaseModel):
    priority_id: int


class TicketCategoryChange(BaseModel):
    category_id: int


class TicketReturn(BaseModel):
    reason: str = Field(max_length=2000)


class TicketFilters(BaseModel):
    status: Optional[int] = None
    priority_id: Optional[int] = None
    category_id: Optional[int] = None


class TicketStatistics(BaseModel):
    total: int
    by_status: Dict[int, int]
    by_priority: Dict[int, int]
