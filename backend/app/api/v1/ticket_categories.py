from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.api.deps import get_active_user, get_category_service
from app.models import User
from app.schemas import TicketCategoryCreate, TicketCategoryRead, TicketCategoryUpdate
from app.services.categories import CategoryService

router = APIRouter()


@router.get("", summary="List categories")
def list_categories(
    current_user: User = Depends(get_active_user),
    categories: CategoryService = Depends(get_category_service),
) -> dict:
    return {
        "success": True,
        "categories": [TicketCategoryRead.model_validate(c) for c in categories.list()],
    }


@router.get("/{category_id}", summary="Fetch one category")
def get_category(
    category_id: int,
    current_user: User = Depends(get_active_user),
    categories: CategoryService = Depends(get_category_service),
) -> dict:
    category = categories.get_by_id(category_id)
    return {"success": True, "category": TicketCategoryRead.model_validate(category)}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a category")
def create_category(
    payload: TicketCategoryCreate,
    current_user: User = Depends(get_active_user),
    categories: CategoryService = Depends(get_category_service),
) -> dict:
    category = categories.create(current_user, payload.name)
    return {"success": True, "category": TicketCategoryRead.model_validate(category)}


@router.put("/{category_id}", summary="Rename a category")
def update_category(
    category_id: int,
    payload: TicketCategoryUpdate,
    current_user: User = Depends(get_active_user),
    categories: CategoryService = Depends(get_category_service),
) -> dict:
    category = categories.update(current_user, category_id, payload.name)
    return {"success": True, "category": TicketCategoryRead.model_validate(category)}


@router.delete("/{category_id}", summary="Delete an unused category")
def delete_category(
    category_id: int,
    current_user: User = Depends(get_active_user),
    categories: CategoryService = Depends(get_category_service),
) -> dict:
    categories.delete(current_user, category_id)
    return {"success": True, "message": "Category deleted"}
