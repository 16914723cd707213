from __future__ import annotations

import logging
from typing import BinaryIO, List, Optional, Tuple
from uuid import UUID

from sqlmodel import Session, select

from app.core.config import settings
from app.core.exceptions import InvalidInput, NotFound, StorageError
from app.models import Ticket, TicketAttachment, User
from app.services.permissions import Action, Resource, authorize
from app.services.storage import ObjectStorage

logger = logging.getLogger(__name__)

# Advisory list returned to clients
SUPPORTED_TYPES = [
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "text/csv",
]

# Enforced on binary uploads
UPLOAD_ALLOWED_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
)


def read_upload(stream: BinaryIO) -> bytes:
    """Return at most ``MAX_UPLOAD_SIZE + 1`` bytes of ``stream``."""
    return stream.read(settings.MAX_UPLOAD_SIZE + 1)


def validate_upload(filename: Optional[str], content_type: Optional[str], size: int) -> None:
    if not filename:
        raise InvalidInput("File name is required")
    if size <= 0:
        raise InvalidInput(f"File {filename} is empty")
    if size > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise InvalidInput(f"File {filename} exceeds the {limit_mb} MB limit")
    if (content_type or "").lower() not in UPLOAD_ALLOWED_TYPES:
        raise InvalidInput(
            f"File type {content_type} is not allowed. Allowed types: JPEG, PNG, GIF, WEBP, PDF"
        )


class AttachmentService:
    def __init__(self, session: Session, storage: Optional[ObjectStorage] = None):
        self.session = session
        self.storage = storage

    def _ticket(self, ticket_id: UUID) -> Ticket:
        ticket = self.session.get(Ticket, ticket_id)
        if not ticket:
            raise NotFound("Ticket not found")
        return ticket

    def _require_storage(self) -> ObjectStorage:
        if self.storage is None:
            raise StorageError("Object storage is not configured")
        return self.storage

    @staticmethod
    def supported_types() -> List[str]:
        return list(SUPPORTED_TYPES)

    def attach(self, actor: User, ticket_id: UUID, file_type: Optional[str], link: Optional[str]) -> TicketAttachment:
        file_type = (file_type or "").strip()
        link = (link or "").strip()
        if not file_type or not link:
            raise InvalidInput("type and link are required")

        ticket = self._ticket(ticket_id)
        authorize(
            actor,
            Resource.ATTACHMENT,
            Action.CREATE,
            ticket,
            message="You cannot attach files to this ticket",
        )
        return self._register(ticket.id, file_type, link)

    def _register(self, ticket_id: UUID, file_type: str, link: str) -> TicketAttachment:
        attachment = TicketAttachment(ticket_id=ticket_id, type=file_type, link=link)
        self.session.add(attachment)
        self.session.commit()
        self.session.refresh(attachment)
        logger.info(f"Attachment {attachment.id} registered on ticket {ticket_id}")
        return attachment

    def put_objects(self, files: List[Tuple[str, str, bytes]]) -> List[Tuple[str, str]]:
        """Upload validated ``(filename, content_type, content)`` triples, all or nothing.

        Returns ``(content_type, url)`` pairs. When one upload fails, objects
        already stored in this batch are removed before the error propagates.
        """
        if not files:
            return []
        storage = self._require_storage()
        stored: List[Tuple[str, str]] = []
        for filename, content_type, content in files:
            try:
                url = storage.upload(content, filename, content_type)
            except StorageError:
                self.discard(stored)
                raise
            stored.append((content_type, url))
        return stored

    def discard(self, stored: List[Tuple[str, str]]) -> None:
        for _, url in stored:
            try:
                self.storage.delete(url)
            except StorageError as exc:
                logger.warning(f"Orphaned object {url} left after failed batch: {exc}")

    def register_all(self, ticket_id: UUID, stored: List[Tuple[str, str]]) -> List[TicketAttachment]:
        return [self._register(ticket_id, content_type, url) for content_type, url in stored]

    def store(self, ticket_id: UUID, filename: str, content_type: str, content: bytes) -> TicketAttachment:
        """Upload already-validated bytes and register them; no permission check."""
        url = self._require_storage().upload(content, filename, content_type)
        return self._register(ticket_id, content_type, url)

    def upload(
        self,
        actor: User,
        ticket_id: UUID,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
    ) -> TicketAttachment:
        ticket = self._ticket(ticket_id)
        authorize(
            actor,
            Resource.ATTACHMENT,
            Action.CREATE,
            ticket,
            message="You cannot attach files to this ticket",
        )
        validate_upload(filename, content_type, len(content))
        return self.store(ticket.id, filename, content_type.lower(), content)

    def list(self, actor: User, ticket_id: UUID) -> List[TicketAttachment]:
        ticket = self._ticket(ticket_id)
        authorize(actor, Resource.ATTACHMENT, Action.VIEW, ticket, message="You cannot view files of this ticket")
        statement = (
            select(TicketAttachment)
            .where(TicketAttachment.ticket_id == ticket.id)
            .order_by(TicketAttachment.created_at.asc())
        )
        return list(self.session.exec(statement).all())

    def _get(self, file_id: UUID) -> TicketAttachment:
        attachment = self.session.get(TicketAttachment, file_id)
        if not attachment:
            raise NotFound("File not found")
        return attachment

    def get_by_id(self, actor: User, file_id: UUID) -> TicketAttachment:
        attachment = self._get(file_id)
        ticket = self.session.get(Ticket, attachment.ticket_id)
        authorize(actor, Resource.ATTACHMENT, Action.VIEW, ticket, message="You cannot view this file")
        return attachment

    def delete(self, actor: User, file_id: UUID) -> None:
        attachment = self._get(file_id)
        ticket = self.session.get(Ticket, attachment.ticket_id)
        authorize(actor, Resource.ATTACHMENT, Action.DELETE, ticket, message="You cannot delete this file")

        link = attachment.link
        self.session.delete(attachment)
        self.session.commit()
        logger.info(f"Attachment {file_id} deleted by {actor.id}")

        if self.storage is not None:
            try:
                self.storage.delete(link)
            except StorageError as exc:
                logger.warning(f"Stored object for attachment {file_id} was not removed: {exc}")
