from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import Forbidden, Unauthenticated
from app.core.security import Identity, resolve_identity
from app.db import SessionDep
from app.models import User
from app.services.attachments import AttachmentService
from app.services.categories import CategoryService
from app.services.conversations import ConversationService
from app.services.email import EmailTransport, build_transport
from app.services.notifications import NotificationDispatcher
from app.services.storage import ObjectStorage
from app.services.tickets import TicketService
from app.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated("Missing bearer token")
    try:
        return resolve_identity(credentials.credentials)
    except ValueError:
        raise Unauthenticated("Invalid or expired token") from None


def get_current_user(
    session: SessionDep,
    identity: Identity = Depends(get_identity),
) -> User:
    """Resolve the caller's account, creating it on first sight (inactive included)."""
    return UserService(session).get_or_create(identity)


def get_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise Forbidden("Account is deactivated")
    return current_user


# === COLLABORATORS ===


@lru_cache
def get_email_transport() -> EmailTransport:
    return build_transport()


@lru_cache
def get_storage() -> ObjectStorage:
    return ObjectStorage()


def get_notifier(
    background_tasks: BackgroundTasks,
    transport: EmailTransport = Depends(get_email_transport),
) -> NotificationDispatcher:
    return NotificationDispatcher(transport, schedule=background_tasks.add_task)


# === SERVICES ===


def get_user_service(session: SessionDep) -> UserService:
    return UserService(session)


def get_category_service(session: SessionDep) -> CategoryService:
    return CategoryService(session)


def get_ticket_service(
    session: SessionDep,
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> TicketService:
    return TicketService(session, notifier)


def get_conversation_service(
    session: SessionDep,
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> ConversationService:
    return ConversationService(session, notifier)


def get_attachment_service(
    session: SessionDep,
    storage: ObjectStorage = Depends(get_storage),
) -> AttachmentService:
    return AttachmentService(session, storage)
