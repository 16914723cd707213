"""Authorization rules keyed by (resource, action).

Controllers never compare roles or owners themselves; they call
:func:`authorize` (raises ``Forbidden``) or :func:`is_allowed`.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from app.core.exceptions import Forbidden
from app.models import ConversationType, User


class Resource:
    TICKET = "ticket"
    CONVERSATION = "conversation"
    MESSAGE = "message"
    ATTACHMENT = "attachment"
    CATEGORY = "category"
    USER = "user"


class Action:
    VIEW = "view"
    CREATE = "create"
    MANAGE = "manage"
    RETURN = "return"
    POST = "post"
    DELETE = "delete"
    LIST = "list"
    LIST_STAFF = "list_staff"


def _is_owner(actor: User, ticket: Any) -> bool:
    return ticket is not None and ticket.user_id == actor.id


def _is_staff(actor: User, _obj: Any = None) -> bool:
    return actor.is_staff


def _is_admin(actor: User, _obj: Any = None) -> bool:
    return actor.is_admin


def _owner_or_staff(actor: User, ticket: Any) -> bool:
    return actor.is_staff or _is_owner(actor, ticket)


def _conversation_participant(actor: User, target: Tuple[Any, int]) -> bool:
    """``target`` is ``(ticket, conversation_type)``."""
    ticket, conversation_type = target
    if actor.is_staff:
        return True
    return conversation_type == ConversationType.GLOBAL and _is_owner(actor, ticket)


def _message_author_or_admin(actor: User, message: Any) -> bool:
    return actor.is_admin or (message is not None and message.user_id == actor.id)


def _self_or_admin(actor: User, user_id: Any) -> bool:
    return actor.is_admin or actor.id == user_id


RULES: Dict[Tuple[str, str], Callable[[User, Any], bool]] = {
    (Resource.TICKET, Action.VIEW): _owner_or_staff,
    (Resource.TICKET, Action.MANAGE): _is_staff,
    (Resource.TICKET, Action.LIST): _is_staff,
    (Resource.TICKET, Action.RETURN): _is_owner,
    (Resource.CONVERSATION, Action.VIEW): _conversation_participant,
    (Resource.CONVERSATION, Action.POST): _conversation_participant,
    (Resource.MESSAGE, Action.DELETE): _message_author_or_admin,
    (Resource.ATTACHMENT, Action.VIEW): _owner_or_staff,
    (Resource.ATTACHMENT, Action.CREATE): _owner_or_staff,
    (Resource.ATTACHMENT, Action.DELETE): _owner_or_staff,
    (Resource.CATEGORY, Action.MANAGE): _is_admin,
    (Resource.USER, Action.VIEW): _self_or_admin,
    (Resource.USER, Action.LIST): _is_admin,
    (Resource.USER, Action.LIST_STAFF): _is_staff,
    (Resource.USER, Action.MANAGE): _is_admin,
}


def is_allowed(actor: User, resource: str, action: str, target: Any = None) -> bool:
    rule = RULES.get((resource, action))
    if rule is None:
        raise KeyError(f"No authorization rule for {resource}:{action}")
    return bool(rule(actor, target))


def authorize(
    actor: User,
    resource: str,
    action: str,
    target: Any = None,
    message: Optional[str] = None,
) -> None:
    if not is_allowed(actor, resource, action, target):
        raise Forbidden(message or f"Not allowed to {action} this {resource}")
