from fastapi import APIRouter

from app.api.v1 import auth, conversations, health, ticket_attachments, ticket_categories, tickets, users


api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
api_router.include_router(ticket_categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(conversations.router, prefix="", tags=["conversations"])
api_router.include_router(ticket_attachments.router, prefix="", tags=["files"])
