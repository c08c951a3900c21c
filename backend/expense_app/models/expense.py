"""
Expense, category and status models.
"""
from sqlalchemy import Column, String, Date, DateTime, Boolean, ForeignKey, Integer, BigInteger, Text
from expense_app.db.base import Base, BaseModel
import enum


class ExpenseStatusCode(enum.IntEnum):
    """Fixed status identifiers stored in ExpenseStatus."""
    DRAFT = 1
    SUBMITTED = 2
    APPROVED = 3
    REJECTED = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


class ExpenseCategory(Base):
    """Expense category. Inactive categories stay referenced by old expenses."""
    __tablename__ = "ExpenseCategories"

    category_id = Column("CategoryId", Integer, primary_key=True, autoincrement=True)
    category_name = Column("CategoryName", String(100), nullable=False)
    is_active = Column("IsActive", Boolean, default=True, nullable=False)


class ExpenseStatus(Base):
    """Reference data for expense statuses."""
    __tablename__ = "ExpenseStatus"

    status_id = Column("StatusId", Integer, primary_key=True, autoincrement=False)
    status_name = Column("StatusName", String(50), nullable=False)


class Expense(BaseModel):
    """Expense model representing a single spending request."""
    __tablename__ = "Expenses"

    expense_id = Column("ExpenseId", Integer, primary_key=True, autoincrement=True)
    user_id = Column("UserId", Integer, ForeignKey("Users.UserId"), nullable=False, index=True)
    category_id = Column("CategoryId", Integer, ForeignKey("ExpenseCategories.CategoryId"), nullable=False)
    status_id = Column("StatusId", Integer, ForeignKey("ExpenseStatus.StatusId"), nullable=False, index=True)
    amount_minor = Column("AmountMinor", BigInteger, nullable=False)  # Pence/cents, never a float
    currency = Column("Currency", String(3), nullable=False, default="GBP")
    expense_date = Column("ExpenseDate", Date, nullable=False)
    description = Column("Description", Text, nullable=True)
    receipt_file = Column("ReceiptFile", String(500), nullable=True)
    submitted_at = Column("SubmittedAt", DateTime, nullable=True)
    reviewed_by = Column("ReviewedBy", Integer, ForeignKey("Users.UserId"), nullable=True)
    reviewed_at = Column("ReviewedAt", DateTime, nullable=True)
