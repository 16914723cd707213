from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from app.api.deps import get_active_user, get_attachment_service, get_ticket_service
from app.core.config import settings
from app.core.exceptions import HelpdeskError, InvalidInput
from app.models import User
from app.schemas import (
    TicketAssign,
    TicketAttachmentRead,
    TicketCategoryChange,
    TicketCreate,
    TicketFilters,
    TicketPriorityUpdate,
    TicketReturn,
    TicketStatistics,
    TicketStatusUpdate,
)
from app.services.attachments import AttachmentService, read_upload, validate_upload
from app.services.tickets import TicketService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a ticket")
def create_ticket(
    payload: TicketCreate,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    ticket = tickets.create(current_user, payload)
    return {"success": True, "ticket": tickets.to_read([ticket])[0]}


@router.post("/with-images", status_code=status.HTTP_201_CREATED, summary="Create a ticket with files")
def create_ticket_with_images(
    title: str = Form(..., max_length=255),
    description: str = Form(..., max_length=5000),
    category_id: int = Form(...),
    priority_id: int = Form(...),
    files: List[UploadFile] = File(default=[]),
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
    attachments: AttachmentService = Depends(get_attachment_service),
) -> dict:
    """Create a ticket and attach up to ``MAX_UPLOAD_FILES`` images or PDFs.

    Every file is checked and uploaded before the ticket is written, so a
    storage failure leaves neither a ticket nor stray objects behind.
    """
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise InvalidInput(f"At most {settings.MAX_UPLOAD_FILES} files can be attached")

    uploads = []
    for upload in files:
        content = read_upload(upload.file)
        validate_upload(upload.filename, upload.content_type, len(content))
        uploads.append((upload.filename, upload.content_type.lower(), content))

    payload = TicketCreate(
        title=title,
        description=description,
        category_id=category_id,
        priority_id=priority_id,
    )
    stored = attachments.put_objects(uploads)
    try:
        ticket = tickets.create(current_user, payload)
    except HelpdeskError:
        attachments.discard(stored)
        raise
    registered = attachments.register_all(ticket.id, stored)
    logger.info(f"Ticket {ticket.id} created with {len(registered)} attachment(s)")
    return {
        "success": True,
        "ticket": tickets.to_read([ticket])[0],
        "attachments": [TicketAttachmentRead.model_validate(a) for a in registered],
    }


@router.get("/my-tickets", summary="List own tickets")
def list_my_tickets(
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    return {"success": True, "tickets": tickets.to_read(tickets.list_for_user(current_user.id))}


@router.get("/all", summary="List every ticket")
def list_all_tickets(
    sw_status: Optional[int] = Query(None),
    priority_id: Optional[int] = Query(None),
    category_id: Optional[int] = Query(None),
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    filters = TicketFilters(status=sw_status, priority_id=priority_id, category_id=category_id)
    return {"success": True, "tickets": tickets.to_read(tickets.list_all(current_user, filters))}


@router.get("/stats", summary="Ticket counts by status and priority")
def ticket_stats(
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    return {"success": True, "stats": TicketStatistics(**tickets.stats(current_user))}


@router.get("/{ticket_id}", summary="Fetch a ticket with its history")
def get_ticket(
    ticket_id: UUID,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    ticket, history = tickets.get_by_id(current_user, ticket_id)
    return {"success": True, "ticket": tickets.to_detail(ticket, history)}


@router.get("/{ticket_id}/history", summary="Ticket history, newest first")
def get_ticket_history(
    ticket_id: UUID,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    history = tickets.get_history(current_user, ticket_id)
    return {"success": True, "history": tickets.history_to_read(history)}


@router.put("/{ticket_id}/assign", summary="Assign a ticket to an agent")
def assign_ticket(
    ticket_id: UUID,
    payload: TicketAssign,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    ticket = tickets.assign(current_user, ticket_id, payload.agent_id)
    return {"success": True, "ticket": tickets.to_read([ticket])[0]}


@router.put("/{ticket_id}/status", summary="Change ticket status")
def update_ticket_status(
    ticket_id: UUID,
    payload: TicketStatusUpdate,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    ticket = tickets.update_status(current_user, ticket_id, payload.status, payload.description)
    return {"success": True, "ticket": tickets.to_read([ticket])[0]}


@router.put("/{ticket_id}/priority", summary="Change ticket priority")
def update_ticket_priority(
    ticket_id: UUID,
    payload: TicketPriorityUpdate,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    ticket = tickets.update_priority(current_user, ticket_id, payload.priority_id)
    return {"success": True, "ticket": tickets.to_read([ticket])[0]}


@router.put("/{ticket_id}/category", summary="Move a ticket to another category")
def update_ticket_category(
    ticket_id: UUID,
    payload: TicketCategoryChange,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    ticket = tickets.update_category(current_user, ticket_id, payload.category_id)
    return {"success": True, "ticket": tickets.to_read([ticket])[0]}


@router.put("/{ticket_id}/return", summary="Return a ticket to the agents")
def return_ticket(
    ticket_id: UUID,
    payload: TicketReturn,
    current_user: User = Depends(get_active_user),
    tickets: TicketService = Depends(get_ticket_service),
) -> dict:
    ticket = tickets.return_ticket(current_user, ticket_id, payload.reason)
    return {"success": True, "ticket": tickets.to_read([ticket])[0]}
