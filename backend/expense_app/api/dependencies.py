"""
Request-scoped service dependencies.
"""
from fastapi import Depends
from sqlalchemy.orm import Session
from expense_app.core.config import settings
from expense_app.db.session import get_db
from expense_app.services.expense_store import ExpenseStore
from expense_app.services.workflow_service import ExpenseWorkflow


def get_store(db: Session = Depends(get_db)) -> ExpenseStore:
    """One store per request, so its last-error slot is never shared."""
    return ExpenseStore(db)


def get_workflow(store: ExpenseStore = Depends(get_store)) -> ExpenseWorkflow:
    """Workflow bound to the request's store."""
    return ExpenseWorkflow(store, strict=settings.STRICT_TRANSITIONS)
