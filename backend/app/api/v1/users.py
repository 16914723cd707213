from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_active_user, get_current_user, get_user_service
from app.models import User
from app.schemas import ProfileUpdate, RoleUpdate, UserRead, UserSummary
from app.services.users import UserService

router = APIRouter()


@router.put("/profile", summary="Update own profile")
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> dict:
    user = users.update_profile(current_user, payload)
    return {"success": True, "user": UserRead.model_validate(user)}


@router.get("", summary="List all accounts")
def list_users(
    current_user: User = Depends(get_active_user),
    users: UserService = Depends(get_user_service),
) -> dict:
    accounts = users.list_all(current_user)
    return {"success": True, "users": [UserRead.model_validate(u) for u in accounts]}


# Declared before /{user_id} so the literal path wins
@router.get("/agentes", summary="List agents and administrators")
def list_agents(
    current_user: User = Depends(get_active_user),
    users: UserService = Depends(get_user_service),
) -> dict:
    agents = users.list_staff(current_user)
    return {"success": True, "agents": [UserSummary.model_validate(a) for a in agents]}


@router.get("/{user_id}", summary="Fetch one account")
def get_user(
    user_id: str,
    current_user: User = Depends(get_active_user),
    users: UserService = Depends(get_user_service),
) -> dict:
    user = users.view(current_user, user_id)
    return {"success": True, "user": UserRead.model_validate(user)}


@router.put("/{user_id}/role", summary="Change an account's role")
def update_role(
    user_id: str,
    payload: RoleUpdate,
    current_user: User = Depends(get_active_user),
    users: UserService = Depends(get_user_service),
) -> dict:
    user = users.update_role(current_user, user_id, payload.role_id)
    return {"success": True, "user": UserRead.model_validate(user)}


@router.put("/{user_id}/deactivate", summary="Deactivate an account")
def deactivate_user(
    user_id: str,
    current_user: User = Depends(get_active_user),
    users: UserService = Depends(get_user_service),
) -> dict:
    user = users.deactivate(current_user, user_id)
    return {"success": True, "user": UserRead.model_validate(user)}


@router.put("/{user_id}/activate", summary="Reactivate an account")
def activate_user(
    user_id: str,
    current_user: User = Depends(get_active_user),
    users: UserService = Depends(get_user_service),
) -> dict:
    user = users.activate(current_user, user_id)
    return {"success": True, "user": UserRead.model_validate(user)}
