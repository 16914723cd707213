from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TicketCategoryBase(BaseModel):
    name: str = Field(max_length=100)


class TicketCategoryCreate(TicketCategoryBase):
    pass


class TicketCategoryUpdate(TicketCategoryBase):
    pass


class TicketCategoryRead(TicketCategoryBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
