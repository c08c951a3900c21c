"""
Expense status routes.
"""
from fastapi import APIRouter, Depends, Response
from typing import List
from expense_app.api.dependencies import get_store
from expense_app.core.utils import mark_data_source
from expense_app.schemas.expense import StatusResponse
from expense_app.services.expense_store import ExpenseStore

router = APIRouter(prefix="/statuses", tags=["statuses"])


@router.get("", response_model=List[StatusResponse])
async def list_statuses(
    response: Response,
    store: ExpenseStore = Depends(get_store)
):
    """Get all expense statuses."""
    statuses = store.list_statuses()
    mark_data_source(response, statuses)
    return statuses.items
