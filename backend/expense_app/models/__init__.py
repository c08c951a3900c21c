"""Models package - Import all models for SQLAlchemy registration."""
from expense_app.models.user import User, Role
from expense_app.models.expense import Expense, ExpenseCategory, ExpenseStatus, ExpenseStatusCode

__all__ = [
    "User",
    "Role",
    "Expense",
    "ExpenseCategory",
    "ExpenseStatus",
    "ExpenseStatusCode",
]
