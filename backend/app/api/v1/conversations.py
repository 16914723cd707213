from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.deps import get_active_user, get_conversation_service, get_ticket_service
from app.models import User
from app.schemas import MessageCreate, MessageRead
from app.services.conversations import ConversationService
from app.services.tickets import TicketService

router = APIRouter()


@router.post(
    "/tickets/{ticket_id}/messages",
    status_code=status.HTTP_201_CREATED,
    summary="Post to the ticket's shared thread",
)
def send_message(
    ticket_id: UUID,
    payload: MessageCreate,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
    conversations: ConversationService = Depends(get_conversation_service),
) -> dict:
    ticket = tickets.get_for_view(current_user, ticket_id)
    message = conversations.user_send_message(current_user, ticket, payload.content)
    return {"success": True, "message": MessageRead.model_validate(message)}


@router.post(
    "/tickets/{ticket_id}/reply",
    status_code=status.HTTP_201_CREATED,
    summary="Agent reply visible to the owner",
)
def reply_to_user(
    ticket_id: UUID,
    payload: MessageCreate,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
    conversations: ConversationService = Depends(get_conversation_service),
) -> dict:
    ticket = tickets.get_for_view(current_user, ticket_id)
    message = conversations.agent_reply_to_user(current_user, ticket, payload.content)
    return {"success": True, "message": MessageRead.model_validate(message)}


@router.post(
    "/tickets/{ticket_id}/notes",
    status_code=status.HTTP_201_CREATED,
    summary="Internal note for agents only",
)
def add_internal_note(
    ticket_id: UUID,
    payload: MessageCreate,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
    conversations: ConversationService = Depends(get_conversation_service),
) -> dict:
    ticket = tickets.get_for_view(current_user, ticket_id)
    message = conversations.agent_add_internal_note(current_user, ticket, payload.content)
    return {"success": True, "message": MessageRead.model_validate(message)}


@router.get("/tickets/{ticket_id}/conversation", summary="Full conversation of a ticket")
def get_ticket_conversation(
    ticket_id: UUID,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
    conversations: ConversationService = Depends(get_conversation_service),
) -> dict:
    """Shared thread for everyone; agent notes only for agents and administrators."""
    ticket = tickets.get_for_view(current_user, ticket_id)
    full = conversations.get_full_conversation(ticket.id, include_agent_notes=current_user.is_staff)
    return {"success": True, "conversation": full.model_dump(mode="json", by_alias=True)}


@router.get("/conversations/{conversation_id}/messages", summary="Messages of one conversation")
def list_conversation_messages(
    conversation_id: UUID,
    current_user: User = Depends(get_active_user),
    conversations: ConversationService = Depends(get_conversation_service),
) -> dict:
    return {"success": True, "messages": conversations.list_messages(current_user, conversation_id)}


@router.delete("/messages/{message_id}", summary="Delete a message")
def delete_message(
    message_id: UUID,
    current_user: User = Depends(get_active_user),
    conversations: ConversationService = Depends(get_conversation_service),
) -> dict:
    conversations.delete_message(current_user, message_id)
    return {"success": True, "message": "Message deleted"}
