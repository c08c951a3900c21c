"""
Expense category routes.
"""
from fastapi import APIRouter, Depends, Response
from typing import List
from expense_app.api.dependencies import get_store
from expense_app.core.utils import mark_data_source
from expense_app.schemas.expense import CategoryResponse
from expense_app.services.expense_store import ExpenseStore

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    response: Response,
    store: ExpenseStore = Depends(get_store)
):
    """Get all active expense categories."""
    categories = store.list_categories()
    mark_data_source(response, categories)
    return categories.items
