from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.exceptions import InvalidInput, NotFound
from app.models import Conversation, ConversationType, Message, Ticket, User
from app.schemas.conversation import (
    ConversationRead,
    ConversationThread,
    FullConversation,
    MessageRead,
)
from app.schemas.user import UserSummary
from app.services.notifications import NotificationDispatcher
from app.services.permissions import Action, Resource, authorize

logger = logging.getLogger(__name__)


class ConversationService:
    """Global (owner + staff) and agent-only message channels of a ticket."""

    def __init__(self, session: Session, notifier: Optional[NotificationDispatcher] = None):
        self.session = session
        self.notifier = notifier

    def _find(self, ticket_id: UUID, conversation_type: int) -> Optional[Conversation]:
        return self.session.exec(
            select(Conversation).where(
                Conversation.ticket_id == ticket_id,
                Conversation.type == conversation_type,
            )
        ).first()

    def get_or_create(self, ticket_id: UUID, conversation_type: int) -> Conversation:
        if conversation_type not in ConversationType.ALL:
            raise InvalidInput("Unknown conversation type")

        existing = self._find(ticket_id, conversation_type)
        if existing:
            return existing

        conversation = Conversation(ticket_id=ticket_id, type=conversation_type)
        self.session.add(conversation)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost the race against a concurrent first message
            self.session.rollback()
            existing = self._find(ticket_id, conversation_type)
            if existing is None:
                raise
            return existing
        self.session.refresh(conversation)
        return conversation

    def get_conversation(self, conversation_id: UUID) -> Conversation:
        conversation = self.session.get(Conversation, conversation_id)
        if not conversation:
            raise NotFound("Conversation not found")
        return conversation

    def get_ticket_conversations(self, ticket_id: UUID) -> List[Conversation]:
        return list(
            self.session.exec(
                select(Conversation).where(Conversation.ticket_id == ticket_id)
            ).all()
        )

    def send_message(self, conversation_id: UUID, author_id: str, content: Optional[str]) -> Message:
        content = (content or "").strip()
        if not content:
            raise InvalidInput("Message content is required")

        for attempt in range(2):
            message = Message(
                conversation_id=conversation_id,
                user_id=author_id,
                content=content,
                seq=self._next_seq(conversation_id),
            )
            self.session.add(message)
            try:
                self.session.commit()
            except IntegrityError:
                # A concurrent post took the same position
                self.session.rollback()
                if attempt:
                    raise
                continue
            self.session.refresh(message)
            return message

    def _next_seq(self, conversation_id: UUID) -> int:
        last = self.session.exec(
            select(func.max(Message.seq)).where(Message.conversation_id == conversation_id)
        ).one()
        return (last or 0) + 1

    def get_messages(self, conversation_id: UUID) -> List[MessageRead]:
        statement = (
            select(Message, User)
            .join(User, Message.user_id == User.id)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.sent_at.asc(), Message.seq.asc())
        )
        messages = []
        for message, user in self.session.exec(statement).all():
            data = MessageRead.model_validate(message)
            data.author = UserSummary.model_validate(user)
            messages.append(data)
        return messages

    # === TICKET-LEVEL OPERATIONS ===

    def _notify(self, recipient_id: Optional[str], actor: User, ticket: Ticket, content: str) -> None:
        if self.notifier is None or not recipient_id or recipient_id == actor.id:
            return
        recipient = self.session.get(User, recipient_id)
        if recipient:
            self.notifier.new_message(recipient, ticket, actor, content)

    def user_send_message(self, actor: User, ticket: Ticket, content: Optional[str]) -> Message:
        authorize(
            actor,
            Resource.CONVERSATION,
            Action.POST,
            (ticket, ConversationType.GLOBAL),
            message="You cannot send messages to a ticket that is not yours",
        )
        conversation = self.get_or_create(ticket.id, ConversationType.GLOBAL)
        message = self.send_message(conversation.id, actor.id, content)
        self._notify(ticket.assigned_user_id, actor, ticket, message.content)
        return message

    def agent_reply_to_user(self, actor: User, ticket: Ticket, content: Optional[str]) -> Message:
        authorize(actor, Resource.TICKET, Action.MANAGE, message="Only agents can reply to users")
        conversation = self.get_or_create(ticket.id, ConversationType.GLOBAL)
        message = self.send_message(conversation.id, actor.id, content)
        self._notify(ticket.user_id, actor, ticket, message.content)
        return message

    def agent_add_internal_note(self, actor: User, ticket: Ticket, content: Optional[str]) -> Message:
        authorize(actor, Resource.TICKET, Action.MANAGE, message="Only agents can add internal notes")
        conversation = self.get_or_create(ticket.id, ConversationType.AGENT_ONLY)
        return self.send_message(conversation.id, actor.id, content)

    def get_full_conversation(self, ticket_id: UUID, include_agent_notes: bool = False) -> FullConversation:
        """Global thread always; agent-only thread only when ``include_agent_notes``."""
        result = FullConversation()
        for conversation in self.get_ticket_conversations(ticket_id):
            if conversation.type == ConversationType.AGENT_ONLY and not include_agent_notes:
                continue
            thread = ConversationThread(
                conversation=ConversationRead.model_validate(conversation),
                messages=self.get_messages(conversation.id),
            )
            if conversation.type == ConversationType.GLOBAL:
                result.global_thread = thread
            else:
                result.agent_notes = thread
        return result

    def list_messages(self, actor: User, conversation_id: UUID) -> List[MessageRead]:
        conversation = self.get_conversation(conversation_id)
        ticket = self.session.get(Ticket, conversation.ticket_id)
        authorize(
            actor,
            Resource.CONVERSATION,
            Action.VIEW,
            (ticket, conversation.type),
            message="You are not a participant of this conversation",
        )
        return self.get_messages(conversation.id)

    def delete_message(self, actor: User, message_id: UUID) -> None:
        message = self.session.get(Message, message_id)
        if not message:
            raise NotFound("Message not found")
        authorize(
            actor,
            Resource.MESSAGE,
            Action.DELETE,
            message,
            message="Only the author or an administrator can delete a message",
        )
        self.session.delete(message)
        self.session.commit()
        logger.info(f"Message {message_id} deleted by {actor.id}")
