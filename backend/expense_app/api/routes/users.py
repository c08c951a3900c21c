"""
User listing routes.
"""
from fastapi import APIRouter, Depends, Response
from typing import List
from expense_app.api.dependencies import get_store
from expense_app.core.utils import mark_data_source
from expense_app.schemas.user import UserResponse
from expense_app.services.expense_store import ExpenseStore

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    response: Response,
    store: ExpenseStore = Depends(get_store)
):
    """Get all active users with their role names."""
    users = store.list_users()
    mark_data_source(response, users)
    return users.items
