from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.exceptions import InvalidInput, NotFound
from app.models import Ticket, TicketCategory, User
from app.services.permissions import Action, Resource, authorize

logger = logging.getLogger(__name__)


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Category name is required")
    return name


class CategoryService:
    def __init__(self, session: Session):
        self.session = session

    def list(self) -> List[TicketCategory]:
        statement = select(TicketCategory).order_by(TicketCategory.name)
        return list(self.session.exec(statement).all())

    def get_by_id(self, category_id: int) -> TicketCategory:
        category = self.session.get(TicketCategory, category_id)
        if not category:
            raise NotFound("Category not found")
        return category

    def create(self, actor: User, name: str) -> TicketCategory:
        authorize(actor, Resource.CATEGORY, Action.MANAGE, message="Only administrators can create categories")
        category = TicketCategory(name=_clean_name(name))
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        logger.info(f"Category {category.id} '{category.name}' created by {actor.id}")
        return category

    def update(self, actor: User, category_id: int, name: str) -> TicketCategory:
        authorize(actor, Resource.CATEGORY, Action.MANAGE, message="Only administrators can update categories")
        category = self.get_by_id(category_id)
        category.name = _clean_name(name)
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        return category

    def delete(self, actor: User, category_id: int) -> None:
        authorize(actor, Resource.CATEGORY, Action.MANAGE, message="Only administrators can delete categories")
        category = self.get_by_id(category_id)

        in_use = self.session.exec(
            select(func.count(Ticket.id)).where(Ticket.category_id == category.id)
        ).one()
        if in_use:
            raise InvalidInput(f"Category is used by {in_use} ticket(s)")

        self.session.delete(category)
        self.session.commit()
        logger.info(f"Category {category_id} deleted by {actor.id}")
