"""
Expense management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from typing import List, Optional

from expense_app.api.dependencies import get_store, get_workflow
from expense_app.core.utils import format_error, format_message, mark_data_source
from expense_app.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseResponse, MessageResponse
from expense_app.services.expense_store import ExpenseStore, FAILED_ID
from expense_app.services.workflow_service import ExpenseWorkflow, WorkflowResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


def store_failure(message: str, store: ExpenseStore) -> HTTPException:
    """Turn the store's last failure into an HTTP error."""
    failure = store.last_failure
    if failure and failure.kind == "not_found":
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=format_message(failure.message)
        )
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=format_error(message, store.get_last_error())
    )


def workflow_response(result: WorkflowResult) -> dict:
    """Return the success body of a workflow call or raise the matching HTTP error."""
    if result.ok:
        return format_message(result.message)

    if result.kind == "not_found":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=format_message(result.message)
        )
    if result.kind == "invalid_transition":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=format_error(result.message, result.error)
        )
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=format_error(result.message, result.error)
    )


@router.get("", response_model=List[ExpenseResponse])
async def list_expenses(
    response: Response,
    user_id: Optional[int] = Query(None, alias="userId"),
    status_id: Optional[int] = Query(None, alias="statusId"),
    store: ExpenseStore = Depends(get_store)
):
    """Get all expenses, optionally filtered by user and/or status."""
    expenses = store.list_expenses(user_id=user_id, status_id=status_id)
    mark_data_source(response, expenses)
    return expenses.items


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int,
    store: ExpenseStore = Depends(get_store)
):
    """Get a specific expense by ID."""
    expense = store.get_expense(expense_id)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=format_message(f"Expense with ID {expense_id} not found")
        )
    return expense


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    request: Request,
    response: Response,
    store: ExpenseStore = Depends(get_store),
    workflow: ExpenseWorkflow = Depends(get_workflow)
):
    """Create a new expense."""
    problem = workflow.check_new_expense(expense_data)
    if problem:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=format_error("Failed to create expense", problem)
        )

    expense_id = store.create_expense(expense_data)
    if expense_id == FAILED_ID:
        raise store_failure("Failed to create expense", store)

    response.headers["Location"] = str(request.url_for("get_expense", expense_id=expense_id))

    # Re-read to pick up created_at and the joined display names
    created = store.get_expense(expense_id)
    if created is None:
        logger.warning("Expense %s created but could not be read back", expense_id)
        created = ExpenseResponse(expense_id=expense_id, **expense_data.model_dump())
    return created


@router.put("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    store: ExpenseStore = Depends(get_store)
):
    """Update an existing expense. The body must carry the complete expense."""
    if expense_id != expense_data.expense_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=format_message("Expense ID mismatch")
        )

    if not store.update_expense(expense_data):
        raise store_failure("Failed to update expense", store)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    store: ExpenseStore = Depends(get_store)
):
    """Delete an expense."""
    if not store.delete_expense(expense_id):
        raise store_failure("Failed to delete expense", store)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{expense_id}/submit", response_model=MessageResponse)
async def submit_expense(
    expense_id: int,
    workflow: ExpenseWorkflow = Depends(get_workflow)
):
    """Submit an expense for approval."""
    return workflow_response(workflow.submit(expense_id))


@router.post("/{expense_id}/approve", response_model=MessageResponse)
async def approve_expense(
    expense_id: int,
    reviewer_id: int = Query(..., alias="reviewerId"),
    workflow: ExpenseWorkflow = Depends(get_workflow)
):
    """Approve an expense."""
    return workflow_response(workflow.approve(expense_id, reviewer_id))


@router.post("/{expense_id}/reject", response_model=MessageResponse)
async def reject_expense(
    expense_id: int,
    reviewer_id: int = Query(..., alias="reviewerId"),
    workflow: ExpenseWorkflow = Depends(get_workflow)
):
    """Reject an expense."""
    return workflow_response(workflow.reject(expense_id, reviewer_id))
