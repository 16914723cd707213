from .conversation import Conversation, ConversationType, Message
from .ticket import Ticket, TicketPriority, TicketStatus
from .ticket_attachment import TicketAttachment
from .ticket_category import TicketCategory
from .ticket_history import TicketHistory
from .user import User, UserRole

__all__ = [
    "Conversation",
    "ConversationType",
    "Message",
    "Ticket",
    "TicketAttachment",
    "TicketCategory",
    "TicketHistory",
    "TicketPriority",
    "TicketStatus",
    "User",
    "UserRole",
]
