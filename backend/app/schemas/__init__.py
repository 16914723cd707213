from .conversation import (
    ConversationRead,
    ConversationThread,
    FullConversation,
    MessageCreate,
    MessageRead,
)
from .ticket import (
    TicketAssign,
    TicketCategoryChange,
    TicketCreate,
    TicketDetailRead,
    TicketFilters,
    TicketHistoryRead,
    TicketPriorityUpdate,
    TicketRead,
    TicketReturn,
    TicketStatistics,
    TicketStatusUpdate,
)
from .ticket_attachment import TicketAttachmentCreate, TicketAttachmentRead
from .ticket_category import (
    TicketCategoryCreate,
    TicketCategoryRead,
    TicketCategoryUpdate,
)
from .user import ProfileUpdate, RoleUpdate, UserRead, UserSummary

__all__ = [
    "ConversationRead",
    "ConversationThread",
    "FullConversation",
    "MessageCreate",
    "MessageRead",
    "ProfileUpdate",
    "RoleUpdate",
    "TicketAssign",
    "TicketAttachmentCreate",
    "TicketAttachmentRead",
    "TicketCategoryChange",
    "TicketCategoryCreate",
    "TicketCategoryRead",
    "TicketCategoryUpdate",
    "TicketCreate",
    "TicketDetailRead",
    "TicketFilters",
    "TicketHistoryRead",
    "TicketPriorityUpdate",
    "TicketRead",
    "TicketReturn",
    "TicketStatistics",
    "TicketStatusUpdate",
    "UserRead",
    "UserSummary",
]
