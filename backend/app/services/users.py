from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.exceptions import InvalidInput, NotFound
from app.core.security import Identity
from app.models import User, UserRole
from app.models.user import ROLE_LABELS
from app.schemas.user import ProfileUpdate
from app.services.permissions import Action, Resource, authorize

logger = logging.getLogger(__name__)


class UserService:
    """Accounts and role checks."""

    def __init__(self, session: Session):
        self.session = session

    def get_or_create(self, identity: Identity) -> User:
        """Return the account for ``identity``, creating a plain User on first sight."""
        user = self.session.get(User, identity.id)
        if user:
            return user

        email = identity.email or ""
        user = User(
            id=identity.id,
            name=identity.full_name or email.split("@")[0] or identity.id,
            email=email,
            avatar_url=identity.avatar_url,
            role_id=UserRole.USER,
            is_active=True,
            job_title="Employee",
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # A concurrent request created the account first
            self.session.rollback()
            existing = self.session.get(User, identity.id)
            if existing is None:
                raise
            return existing
        self.session.refresh(user)
        logger.info(f"Created account {user.id} ({user.email})")
        return user

    def get(self, user_id: str) -> Optional[User]:
        """Raw lookup, inactive accounts included."""
        return self.session.get(User, user_id)

    def _require(self, user_id: str) -> User:
        user = self.get(user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def get_by_id(self, user_id: str) -> User:
        user = self.get(user_id)
        if not user or not user.is_active:
            raise NotFound("User not found")
        return user

    def is_admin(self, user_id: str) -> bool:
        user = self.get(user_id)
        return bool(user and user.is_admin)

    def is_agent_or_admin(self, user_id: str) -> bool:
        user = self.get(user_id)
        return bool(user and user.is_staff)

    def list_all(self, actor: User) -> List[User]:
        authorize(actor, Resource.USER, Action.LIST, message="Only administrators can list users")
        return list(self.session.exec(select(User).order_by(User.created_at.asc())).all())

    def list_staff(self, actor: User) -> List[User]:
        authorize(actor, Resource.USER, Action.LIST_STAFF, message="Only agents can list agents")
        statement = (
            select(User)
            .where(User.role_id.in_(UserRole.STAFF), User.is_active == True)
            .order_by(User.name)
        )
        return list(self.session.exec(statement).all())

    def view(self, actor: User, user_id: str) -> User:
        authorize(actor, Resource.USER, Action.VIEW, user_id, message="You can only view your own account")
        return self.get_by_id(user_id)

    def update_role(self, actor: User, user_id: str, role_id: int) -> User:
        authorize(actor, Resource.USER, Action.MANAGE, message="Only administrators can change roles")
        if role_id not in UserRole.ALL:
            raise InvalidInput("role_id must be 1 (User), 2 (Agent) or 3 (Administrator)")

        user = self._require(user_id)
        old_role = user.role_id
        user.role_id = role_id
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        logger.info(
            f"User {actor.id} changed role of {user.id}: "
            f"{ROLE_LABELS.get(old_role, old_role)} -> {ROLE_LABELS[role_id]}"
        )
        return user

    def _set_active(self, actor: User, user_id: str, active: bool) -> User:
        user = self._require(user_id)
        user.is_active = active
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        logger.info(f"User {actor.id} {'activated' if active else 'deactivated'} account {user.id}")
        return user

    def deactivate(self, actor: User, user_id: str) -> User:
        authorize(actor, Resource.USER, Action.MANAGE, message="Only administrators can deactivate accounts")
        if actor.id == user_id:
            raise InvalidInput("You cannot deactivate your own account")
        return self._set_active(actor, user_id, False)

    def activate(self, actor: User, user_id: str) -> User:
        authorize(actor, Resource.USER, Action.MANAGE, message="Only administrators can activate accounts")
        return self._set_active(actor, user_id, True)

    def update_profile(self, user: User, payload: ProfileUpdate) -> User:
        if payload.name is None and payload.job_title is None:
            raise InvalidInput("Provide at least one of name or job_title")

        if payload.name is not None:
            name = payload.name.strip()
            if not name:
                raise InvalidInput("name cannot be empty")
            user.name = name
        if payload.job_title is not None:
            user.job_title = payload.job_title.strip()

        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user
