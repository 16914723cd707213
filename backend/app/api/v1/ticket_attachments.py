from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status

from app.api.deps import get_active_user, get_attachment_service
from app.models import User
from app.schemas import TicketAttachmentCreate, TicketAttachmentRead
from app.services.attachments import AttachmentService, read_upload

router = APIRouter()


@router.post(
    "/tickets/{ticket_id}/files",
    status_code=status.HTTP_201_CREATED,
    summary="Register an already stored file",
)
def attach_file(
    ticket_id: UUID,
    payload: TicketAttachmentCreate,
    current_user: User = Depends(get_active_user),
    attachments: AttachmentService = Depends(get_attachment_service),
) -> dict:
    attachment = attachments.attach(current_user, ticket_id, payload.type, payload.link)
    return {"success": True, "file": TicketAttachmentRead.model_validate(attachment)}


@router.post(
    "/tickets/{ticket_id}/upload",
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file and attach it",
)
def upload_file(
    ticket_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(get_active_user),
    attachments: AttachmentService = Depends(get_attachment_service),
) -> dict:
    content = read_upload(file.file)
    attachment = attachments.upload(current_user, ticket_id, file.filename, file.content_type, content)
    return {"success": True, "file": TicketAttachmentRead.model_validate(attachment)}


@router.get("/tickets/{ticket_id}/files", summary="List a ticket's files")
def list_files(
    ticket_id: UUID,
    current_user: User = Depends(get_active_user),
    attachments: AttachmentService = Depends(get_attachment_service),
) -> dict:
    files = attachments.list(current_user, ticket_id)
    return {"success": True, "files": [TicketAttachmentRead.model_validate(f) for f in files]}


@router.get("/files/supported-types", summary="Advisory list of accepted MIME types")
def supported_types() -> dict:
    return {"success": True, "types": AttachmentService.supported_types()}


@router.get("/files/{file_id}", summary="Fetch one file record")
def get_file(
    file_id: UUID,
    current_user: User = Depends(get_active_user),
    attachments: AttachmentService = Depends(get_attachment_service),
) -> dict:
    attachment = attachments.get_by_id(current_user, file_id)
    return {"success": True, "file": TicketAttachmentRead.model_validate(attachment)}


@router.delete("/files/{file_id}", summary="Delete a file")
def delete_file(
    file_id: UUID,
    current_user: User = Depends(get_active_user),
    attachments: AttachmentService = Depends(get_attachment_service),
) -> dict:
    attachments.delete(current_user, file_id)
    return {"success": True, "message": "File deleted"}
