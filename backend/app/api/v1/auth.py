from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.models import User
from app.schemas import UserRead

router = APIRouter()


@router.get("/me", summary="Resolve the caller's account")
def read_me(current_user: User = Depends(get_current_user)) -> dict:
    """Return the caller's account, creating it on the first authenticated call.

    Deactivated accounts are still returned so clients can show why access
    is refused elsewhere.
    """
    return {"success": True, "user": UserRead.model_validate(current_user)}
