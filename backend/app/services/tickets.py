"""Ticket lifecycle: creation, status/priority/category changes, assignment.

Every mutation goes through :meth:`TicketService._commit_change`, which writes
the header change and its history entry in one transaction.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.config import settings
from app.core.exceptions import InvalidInput, NotFound
from app.models import Ticket, TicketCategory, TicketHistory, TicketPriority, TicketStatus, User
from app.models.ticket import get_priority_label, get_status_label
from app.schemas.ticket import TicketCreate, TicketDetailRead, TicketFilters, TicketHistoryRead, TicketRead
from app.schemas.user import UserSummary
from app.services.notifications import NotificationDispatcher
from app.services.permissions import Action, Resource, authorize
from app.services.users import UserService

logger = logging.getLogger(__name__)

STATUS_TRANSITIONS: Dict[int, frozenset] = {
    TicketStatus.OPEN: frozenset({
        TicketStatus.ASSIGNED, TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED, TicketStatus.CLOSED,
    }),
    TicketStatus.ASSIGNED: frozenset({
        TicketStatus.ASSIGNED, TicketStatus.IN_PROGRESS, TicketStatus.DELIVERED,
        TicketStatus.RESOLVED, TicketStatus.CLOSED,
    }),
    TicketStatus.IN_PROGRESS: frozenset({
        TicketStatus.ASSIGNED, TicketStatus.DELIVERED, TicketStatus.RESOLVED, TicketStatus.CLOSED,
    }),
    TicketStatus.DELIVERED: frozenset({
        TicketStatus.IN_PROGRESS, TicketStatus.RETURNED, TicketStatus.RESOLVED, TicketStatus.CLOSED,
    }),
    TicketStatus.RETURNED: frozenset({
        TicketStatus.ASSIGNED, TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED, TicketStatus.CLOSED,
    }),
    TicketStatus.RESOLVED: frozenset({
        TicketStatus.IN_PROGRESS, TicketStatus.RETURNED, TicketStatus.CLOSED,
    }),
    TicketStatus.CLOSED: frozenset({TicketStatus.OPEN}),
}


def check_transition(current: int, new: int, enforce: bool) -> None:
    """Validate ``current -> new``; the table only applies when ``enforce`` is set."""
    if new not in TicketStatus.ALL:
        raise InvalidInput("status must be an integer between 1 and 7")
    if enforce and new not in STATUS_TRANSITIONS.get(current, frozenset()):
        raise InvalidInput(
            f"Cannot move ticket from {get_status_label(current)} to {get_status_label(new)}"
        )


def _require_text(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidInput(f"{field} is required")
    return value


def _validate_priority(priority_id: Optional[int]) -> int:
    if priority_id not in TicketPriority.ALL:
        raise InvalidInput("priority_id must be 1 (Low), 2 (Medium) or 3 (High)")
    return priority_id


class TicketService:
    def __init__(
        self,
        session: Session,
        notifier: NotificationDispatcher,
        users: Optional[UserService] = None,
        enforce_transitions: Optional[bool] = None,
    ):
        self.session = session
        self.notifier = notifier
        self.users = users or UserService(session)
        if enforce_transitions is None:
            enforce_transitions = settings.ENFORCE_STATUS_TRANSITIONS
        self.enforce_transitions = enforce_transitions

    # === LOOKUPS ===

    def _get(self, ticket_id: UUID) -> Ticket:
        ticket = self.session.get(Ticket, ticket_id)
        if not ticket:
            raise NotFound("Ticket not found")
        return ticket

    def _category(self, category_id: Optional[int]) -> TicketCategory:
        if category_id is None:
            raise InvalidInput("category_id is required")
        category = self.session.get(TicketCategory, category_id)
        if not category:
            raise InvalidInput(f"Category {category_id} does not exist")
        return category

    def get_for_view(self, actor: User, ticket_id: UUID) -> Ticket:
        """Load a ticket the actor may see (owner or staff)."""
        ticket = self._get(ticket_id)
        authorize(actor, Resource.TICKET, Action.VIEW, ticket, message="Access to ticket denied")
        return ticket

    def get_by_id(self, actor: User, ticket_id: UUID) -> Tuple[Ticket, List[TicketHistory]]:
        ticket = self.get_for_view(actor, ticket_id)
        return ticket, self._history(ticket.id)

    def get_history(self, actor: User, ticket_id: UUID) -> List[TicketHistory]:
        ticket = self.get_for_view(actor, ticket_id)
        return self._history(ticket.id)

    def _history(self, ticket_id: UUID) -> List[TicketHistory]:
        statement = (
            select(TicketHistory)
            .where(TicketHistory.ticket_id == ticket_id)
            .order_by(TicketHistory.created_at.desc(), TicketHistory.id.desc())
        )
        return list(self.session.exec(statement).all())

    def list_for_user(self, user_id: str) -> List[Ticket]:
        statement = (
            select(Ticket)
            .where(Ticket.user_id == user_id)
            .order_by(Ticket.created_at.desc())
        )
        return list(self.session.exec(statement).all())

    def list_all(self, actor: User, filters: Optional[TicketFilters] = None) -> List[Ticket]:
        authorize(actor, Resource.TICKET, Action.LIST, message="Only agents can list all tickets")
        statement = select(Ticket)
        if filters is not None:
            if filters.status is not None:
                statement = statement.where(Ticket.status == filters.status)
            if filters.priority_id is not None:
                statement = statement.where(Ticket.priority_id == filters.priority_id)
            if filters.category_id is not None:
                statement = statement.where(Ticket.category_id == filters.category_id)
        statement = statement.order_by(Ticket.created_at.desc())
        return list(self.session.exec(statement).all())

    def stats(self, actor: User) -> dict:
        """Counts by status and priority; global for staff, own tickets otherwise."""
        def scoped(statement):
            if actor.is_staff:
                return statement
            return statement.where(Ticket.user_id == actor.id)

        total = self.session.exec(scoped(select(func.count(Ticket.id)))).one()
        by_status = self.session.exec(
            scoped(select(Ticket.status, func.count(Ticket.id))).group_by(Ticket.status)
        ).all()
        by_priority = self.session.exec(
            scoped(select(Ticket.priority_id, func.count(Ticket.id))).group_by(Ticket.priority_id)
        ).all()

        return {
            "total": total,
            "by_status": {status: count for status, count in by_status},
            "by_priority": {priority: count for priority, count in by_priority},
        }

    # === MUTATIONS ===

    def _commit_change(
        self,
        ticket: Ticket,
        actor: User,
        *,
        status: Optional[int],
        description: str,
        assigned_user_id: Optional[str] = None,
    ) -> TicketHistory:
        entry = TicketHistory(
            ticket_id=ticket.id,
            status=status,
            assigned_user_id=assigned_user_id,
            changed_by=actor.id,
            description=description,
        )
        ticket.touch()
        self.session.add(ticket)
        # Header row first so the history foreign key resolves
        self.session.flush()
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(ticket)
        logger.info(f"Ticket {ticket.id}: {description} (by {actor.id})")
        return entry

    def create(self, actor: User, payload: TicketCreate) -> Ticket:
        title = _require_text(payload.title, "title")
        description = _require_text(payload.description, "description")
        priority_id = _validate_priority(payload.priority_id)
        category = self._category(payload.category_id)

        ticket = Ticket(
            user_id=actor.id,
            title=title,
            description=description,
            category_id=category.id,
            priority_id=priority_id,
            status=TicketStatus.OPEN,
        )
        self._commit_change(ticket, actor, status=TicketStatus.OPEN, description="Ticket created")
        self.notifier.ticket_created(actor, ticket)
        return ticket

    def assign(self, actor: User, ticket_id: UUID, agent_id: str) -> Ticket:
        authorize(actor, Resource.TICKET, Action.MANAGE, message="Only agents can assign tickets")
        ticket = self._get(ticket_id)

        agent = self.users.get(agent_id) if agent_id else None
        if agent is None or not agent.is_staff:
            raise InvalidInput("agent_id must belong to an active agent or administrator")
        check_transition(ticket.status, TicketStatus.ASSIGNED, self.enforce_transitions)

        ticket.status = TicketStatus.ASSIGNED
        ticket.assigned_user_id = agent.id
        self._commit_change(
            ticket,
            actor,
            status=TicketStatus.ASSIGNED,
            assigned_user_id=agent.id,
            description=f"Ticket assigned to {agent.name}",
        )
        self.notifier.ticket_assigned(agent, ticket)
        return ticket

    def _change_status(
        self, actor: User, ticket: Ticket, new_status: int, description: Optional[str]
    ) -> Ticket:
        check_transition(ticket.status, new_status, self.enforce_transitions)
        old_status = ticket.status

        ticket.status = new_status
        self._commit_change(
            ticket,
            actor,
            status=new_status,
            assigned_user_id=ticket.assigned_user_id,
            description=(description or "").strip()
            or f"Status changed: {get_status_label(old_status)} -> {get_status_label(new_status)}",
        )

        owner = self.session.get(User, ticket.user_id)
        if owner:
            self.notifier.status_changed(owner, ticket, old_status, new_status)
        return ticket

    def update_status(
        self,
        actor: User,
        ticket_id: UUID,
        new_status: int,
        description: Optional[str] = None,
    ) -> Ticket:
        authorize(actor, Resource.TICKET, Action.MANAGE, message="Only agents can change ticket status")
        if new_status not in TicketStatus.ALL:
            raise InvalidInput("status must be an integer between 1 and 7")
        ticket = self._get(ticket_id)
        return self._change_status(actor, ticket, new_status, description)

    def return_ticket(self, actor: User, ticket_id: UUID, reason: Optional[str]) -> Ticket:
        ticket = self._get(ticket_id)
        authorize(actor, Resource.TICKET, Action.RETURN, ticket, message="Only the ticket owner can return it")
        reason = _require_text(reason, "reason")
        return self._change_status(actor, ticket, TicketStatus.RETURNED, reason)

    def update_priority(self, actor: User, ticket_id: UUID, priority_id: int) -> Ticket:
        authorize(actor, Resource.TICKET, Action.MANAGE, message="Only agents can change ticket priority")
        priority_id = _validate_priority(priority_id)
        ticket = self._get(ticket_id)

        old_priority = ticket.priority_id
        ticket.priority_id = priority_id
        self._commit_change(
            ticket,
            actor,
            status=None,
            description=(
                f"Priority updated: {get_priority_label(old_priority)} -> {get_priority_label(priority_id)}"
            ),
        )
        return ticket

    def update_category(self, actor: User, ticket_id: UUID, category_id: int) -> Ticket:
        authorize(actor, Resource.TICKET, Action.MANAGE, message="Only agents can change ticket category")
        category = self._category(category_id)
        ticket = self._get(ticket_id)

        old_category = self.session.get(TicketCategory, ticket.category_id)
        ticket.category_id = category.id
        self._commit_change(
            ticket,
            actor,
            status=None,
            description=(
                f"Category updated: {old_category.name if old_category else ticket.category_id} "
                f"-> {category.name}"
            ),
        )
        return ticket

    # === SERIALIZATION ===

    def to_read(self, tickets: Iterable[Ticket]) -> List[TicketRead]:
        """Attach labels, category names and owner summaries."""
        tickets = list(tickets)
        category_ids = {t.category_id for t in tickets}
        owner_ids = {t.user_id for t in tickets}

        categories = {}
        if category_ids:
            categories = {
                c.id: c.name
                for c in self.session.exec(
                    select(TicketCategory).where(TicketCategory.id.in_(category_ids))
                ).all()
            }
        owners = {}
        if owner_ids:
            owners = {
                u.id: u for u in self.session.exec(select(User).where(User.id.in_(owner_ids))).all()
            }

        result = []
        for ticket in tickets:
            data = TicketRead.model_validate(ticket)
            data.status_label = get_status_label(ticket.status)
            data.priority_label = get_priority_label(ticket.priority_id)
            data.category_name = categories.get(ticket.category_id)
            owner = owners.get(ticket.user_id)
            if owner:
                data.owner = UserSummary.model_validate(owner)
            result.append(data)
        return result

    def history_to_read(self, entries: Iterable[TicketHistory]) -> List[TicketHistoryRead]:
        entries = list(entries)
        agent_ids = {e.assigned_user_id for e in entries if e.assigned_user_id}
        agents = {}
        if agent_ids:
            agents = {
                u.id: u for u in self.session.exec(select(User).where(User.id.in_(agent_ids))).all()
            }

        result = []
        for entry in entries:
            data = TicketHistoryRead.model_validate(entry)
            if entry.status is not None:
                data.status_label = get_status_label(entry.status)
            agent = agents.get(entry.assigned_user_id)
            if agent:
                data.assigned_user = UserSummary.model_validate(agent)
            result.append(data)
        return result

    def to_detail(self, ticket: Ticket, history: Iterable[TicketHistory]) -> TicketDetailRead:
        base = self.to_read([ticket])[0]
        return TicketDetailRead(**base.model_dump(), history=self.history_to_read(history))
