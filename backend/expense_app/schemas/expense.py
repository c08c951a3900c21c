"""
Pydantic schemas for Expense, category and status entities.
"""
from pydantic import BaseModel, Field, StrictInt, field_validator
from typing import Optional
from datetime import date, datetime
from expense_app.core.config import settings
from expense_app.models.expense import ExpenseStatusCode


class ExpenseBase(BaseModel):
    """Fields a client supplies for an expense."""
    user_id: int
    category_id: int
    status_id: int = ExpenseStatusCode.DRAFT.value
    amount_minor: StrictInt  # Smallest currency unit; floats are rejected
    currency: str = Field(default_factory=lambda: settings.DEFAULT_CURRENCY, min_length=3, max_length=3)
    expense_date: date
    description: Optional[str] = None
    receipt_file: Optional[str] = None
    submitted_at: Optional[datetime] = None

    @field_validator("currency")
    @classmethod
    def normalise_currency(cls, v: str) -> str:
        return v.upper()


class ExpenseCreate(ExpenseBase):
    """Schema for expense creation. expense_id and created_at are store-assigned."""
    pass


class ExpenseUpdate(ExpenseBase):
    """
    Schema for a full-row expense update.

    Every mutable field is overwritten, so callers must send the whole entity
    back, including audit fields they do not intend to change.
    """
    expense_id: int
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None


class ExpenseResponse(BaseModel):
    """
    Expense as stored, joined with display names for submitter, category,
    status and reviewer.

    Fields carry none of the input rules of ExpenseBase; stored rows are
    reported as they are.
    """
    expense_id: int
    user_id: int
    category_id: int
    status_id: int
    amount_minor: int
    currency: str
    expense_date: date
    description: Optional[str] = None
    receipt_file: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    user_name: Optional[str] = None
    category_name: Optional[str] = None
    status_name: Optional[str] = None
    reviewer_name: Optional[str] = None

    class Config:
        from_attributes = True


class CategoryResponse(BaseModel):
    """Schema for expense category response."""
    category_id: int
    category_name: str
    is_active: bool

    class Config:
        from_attributes = True


class StatusResponse(BaseModel):
    """Schema for expense status response."""
    status_id: int
    status_name: str

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """Plain message returned by workflow endpoints."""
    message: str
