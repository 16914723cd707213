"""Ticket email notifications.

Every notification goes through :meth:`NotificationDispatcher.send`, which renders
a named template and hands the result to the configured :class:`EmailTransport`.
Delivery failures are logged and swallowed: the ticket operation that triggered
the email has already been committed and must still report success.
"""

from __future__ import annotations

import logging
from html import escape
from typing import Any, Callable, Dict, Optional, Tuple

from app.core.exceptions import DeliveryError
from app.models import Ticket, User
from app.models.ticket import get_priority_label, get_status_label
from app.services.email import EmailTransport

logger = logging.getLogger(__name__)

Scheduler = Callable[..., None]


def _layout(heading: str, color: str, intro: str, rows: Dict[str, Any], footer: str) -> str:
    details = "".join(
        f"<p><strong>{escape(label)}:</strong> {escape(str(value))}</p>"
        for label, value in rows.items()
    )
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: {color};">{escape(heading)}</h2>
      <p>{escape(intro)}</p>
      <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">
        {details}
      </div>
      <p>{escape(footer)}</p>
      <p style="color: #666; font-size: 12px;">This is an automated message, please do not reply.</p>
    </div>
    """


def render_ticket_created(data: Dict[str, Any]) -> Tuple[str, str]:
    subject = f"Ticket created: {data['title']}"
    html = _layout(
        "Ticket created",
        "#4CAF50",
        "Your ticket has been registered.",
        {
            "ID": data["id"],
            "Title": data["title"],
            "Priority": data["priority"],
            "Status": data.get("status", get_status_label(1)),
        },
        "You will be notified about every update to your ticket.",
    )
    return subject, html


def render_ticket_assigned(data: Dict[str, Any]) -> Tuple[str, str]:
    subject = f"New ticket assigned: {data['title']}"
    html = _layout(
        "New ticket assigned",
        "#2196F3",
        "A ticket has been assigned to you.",
        {
            "ID": data["id"],
            "Title": data["title"],
            "Description": data["description"],
            "Priority": data["priority"],
        },
        "Please review the ticket and start working on it.",
    )
    return subject, html


def render_status_changed(data: Dict[str, Any]) -> Tuple[str, str]:
    subject = f"Ticket update: {data['title']}"
    html = _layout(
        "Ticket status updated",
        "#FF9800",
        "The status of your ticket has changed.",
        {
            "ID": data["id"],
            "Title": data["title"],
            "Previous status": data["old_status"],
            "New status": data["new_status"],
        },
        "You can review the details from your ticket dashboard.",
    )
    return subject, html


def render_new_message(data: Dict[str, Any]) -> Tuple[str, str]:
    subject = f"New message on ticket: {data['title']}"
    html = _layout(
        "New message",
        "#9C27B0",
        f"{data['sender']} sent a message on a ticket.",
        {"Ticket": data["title"], "Message": data["content"]},
        "Reply from your ticket dashboard.",
    )
    return subject, html


TEMPLATES: Dict[str, Callable[[Dict[str, Any]], Tuple[str, str]]] = {
    "ticket_created": render_ticket_created,
    "ticket_assigned": render_ticket_assigned,
    "status_changed": render_status_changed,
    "new_message": render_new_message,
}


class NotificationDispatcher:
    """Renders notification templates and delivers them fire-and-forget.

    ``schedule`` defers delivery (FastAPI ``BackgroundTasks.add_task`` inside a
    request); without it delivery runs inline.
    """

    def __init__(self, transport: EmailTransport, schedule: Optional[Scheduler] = None):
        self.transport = transport
        self.schedule = schedule

    def send(self, to: Optional[str], template: str, data: Dict[str, Any]) -> None:
        if not to:
            logger.warning(f"Skipping '{template}' notification: recipient has no email")
            return
        subject, html = TEMPLATES[template](data)
        if self.schedule is not None:
            self.schedule(self._deliver, to, template, subject, html)
        else:
            self._deliver(to, template, subject, html)

    def _deliver(self, to: str, template: str, subject: str, html: str) -> None:
        try:
            self.transport.deliver(to, subject, html)
        except DeliveryError as exc:
            logger.error(f"[Notification] '{template}' to {to} failed: {exc}")
            return
        logger.info(f"[Notification] '{template}' sent to {to}")

    def ticket_created(self, owner: User, ticket: Ticket) -> None:
        self.send(
            owner.email,
            "ticket_created",
            {
                "id": str(ticket.id),
                "title": ticket.title,
                "priority": get_priority_label(ticket.priority_id),
                "status": get_status_label(ticket.status),
            },
        )

    def ticket_assigned(self, agent: User, ticket: Ticket) -> None:
        self.send(
            agent.email,
            "ticket_assigned",
            {
                "id": str(ticket.id),
                "title": ticket.title,
                "description": ticket.description,
                "priority": get_priority_label(ticket.priority_id),
            },
        )

    def status_changed(self, owner: User, ticket: Ticket, old_status: int, new_status: int) -> None:
        self.send(
            owner.email,
            "status_changed",
            {
                "id": str(ticket.id),
                "title": ticket.title,
                "old_status": get_status_label(old_status),
                "new_status": get_status_label(new_status),
            },
        )

    def new_message(self, recipient: User, ticket: Ticket, sender: User, content: str) -> None:
        self.send(
            recipient.email,
            "new_message",
            {"title": ticket.title, "sender": sender.name, "content": content},
        )
