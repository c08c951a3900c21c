"""
Expense store: CRUD and query access to expenses and their reference data.

The store wraps one request-scoped SQLAlchemy session and is the only code that
talks to the database. Storage faults never escape it:

- listings fall back to a fixed set of sample records and come back as a
  ``Listing`` with ``degraded=True`` so callers can tell real data from filler
- single reads return ``None``
- writes return ``FAILED_ID`` / ``False``

In every failure case the cause is recorded and available through
``get_last_error()`` until the next successful operation on the same store.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Generic, Iterator, List, Optional, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from expense_app.core.utils import utcnow
from expense_app.models.expense import Expense, ExpenseCategory, ExpenseStatus, ExpenseStatusCode
from expense_app.models.user import User, Role
from expense_app.schemas.expense import (
    ExpenseBase, ExpenseUpdate, ExpenseResponse, CategoryResponse, StatusResponse
)
from expense_app.schemas.user import UserResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

FAILED_ID = -1
SAMPLE_TAG = "(SAMPLE DATA)"

# Columns rewritten by update_expense; user_id and created_at are never touched
MUTABLE_FIELDS = (
    "category_id",
    "status_id",
    "amount_minor",
    "currency",
    "expense_date",
    "description",
    "receipt_file",
    "submitted_at",
    "reviewed_by",
    "reviewed_at",
)


@dataclass
class StoreError:
    """Structured cause of the last failed store operation."""
    kind: str  # "storage" or "not_found"
    message: str


@dataclass
class Listing(Generic[T]):
    """Result of a listing query, tagged with whether it is live or sample data."""
    items: List[T]
    degraded: bool = False
    cause: Optional[str] = None

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index):
        return self.items[index]


class ExpenseStore:
    """Data access for expenses, categories, statuses and users."""

    def __init__(self, db: Session):
        self.db = db
        self._last_failure: Optional[StoreError] = None

    # ------------------------------------------------------------------
    # Error slot
    # ------------------------------------------------------------------

    def get_last_error(self) -> Optional[str]:
        """Message of the most recent failed operation, or None after a success."""
        return self._last_failure.message if self._last_failure else None

    @property
    def last_failure(self) -> Optional[StoreError]:
        return self._last_failure

    def rollback(self) -> None:
        """End the current transaction, releasing any row lock taken by get_expense."""
        self.db.rollback()

    def _succeeded(self) -> None:
        self._last_failure = None

    def _storage_fault(self, message: str, exc: SQLAlchemyError) -> None:
        self.db.rollback()
        self._last_failure = StoreError("storage", f"{message}: {exc}")
        logger.error(message, exc_info=True)

    def _not_found(self, expense_id: int) -> None:
        self._last_failure = StoreError("not_found", f"Expense with ID {expense_id} not found")

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def _expense_query(self):
        reviewer = aliased(User)
        return (
            self.db.query(
                Expense,
                User.user_name,
                ExpenseCategory.category_name,
                ExpenseStatus.status_name,
                reviewer.user_name.label("reviewer_name"),
            )
            .join(User, Expense.user_id == User.user_id)
            .join(ExpenseCategory, Expense.category_id == ExpenseCategory.category_id)
            .join(ExpenseStatus, Expense.status_id == ExpenseStatus.status_id)
            .outerjoin(reviewer, Expense.reviewed_by == reviewer.user_id)
        )

    @staticmethod
    def _to_record(row) -> ExpenseResponse:
        expense, user_name, category_name, status_name, reviewer_name = row
        return ExpenseResponse.model_validate(expense).model_copy(update={
            "user_name": user_name,
            "category_name": category_name,
            "status_name": status_name,
            "reviewer_name": reviewer_name,
        })

    def list_expenses(
        self,
        user_id: Optional[int] = None,
        status_id: Optional[int] = None
    ) -> Listing[ExpenseResponse]:
        """List expenses newest first, optionally filtered by submitter and/or status."""
        try:
            query = self._expense_query()
            if user_id is not None:
                query = query.filter(Expense.user_id == user_id)
            if status_id is not None:
                query = query.filter(Expense.status_id == status_id)
            rows = query.order_by(Expense.created_at.desc(), Expense.expense_id.desc()).all()

            self._succeeded()
            return Listing([self._to_record(row) for row in rows])
        except SQLAlchemyError as e:
            self._storage_fault("Error retrieving expenses", e)
            logger.warning("Serving sample expenses while storage is unavailable")
            return Listing(sample_expenses(), degraded=True, cause=self.get_last_error())

    def get_expense(self, expense_id: int, for_update: bool = False) -> Optional[ExpenseResponse]:
        """
        Get one expense with its joined display names.

        Returns None both when the expense is absent and on a storage fault;
        get_last_error() tells the two apart. ``for_update`` locks the row for
        the rest of the session transaction on backends that support it.
        """
        try:
            query = self._expense_query().filter(Expense.expense_id == expense_id)
            if for_update:
                query = query.with_for_update(of=Expense)
            row = query.first()

            self._succeeded()
            return self._to_record(row) if row else None
        except SQLAlchemyError as e:
            self._storage_fault(f"Error retrieving expense {expense_id}", e)
            return None

    def create_expense(self, expense: ExpenseBase) -> int:
        """Insert an expense and return its new id, or FAILED_ID on failure."""
        try:
            row = Expense(
                user_id=expense.user_id,
                category_id=expense.category_id,
                status_id=expense.status_id,
                amount_minor=expense.amount_minor,
                currency=expense.currency,
                expense_date=expense.expense_date,
                description=expense.description,
                receipt_file=expense.receipt_file,
                submitted_at=expense.submitted_at,
                created_at=utcnow(),
            )
            self.db.add(row)
            self.db.flush()
            expense_id = row.expense_id
            self.db.commit()

            self._succeeded()
            logger.info("Created expense %s for user %s", expense_id, expense.user_id)
            return expense_id
        except SQLAlchemyError as e:
            self._storage_fault("Error creating expense", e)
            return FAILED_ID

    def update_expense(self, expense: Union[ExpenseUpdate, ExpenseResponse]) -> bool:
        """Overwrite every mutable column of an existing expense."""
        try:
            row = self.db.get(Expense, expense.expense_id)
            if row is None:
                self._not_found(expense.expense_id)
                return False

            for field in MUTABLE_FIELDS:
                setattr(row, field, getattr(expense, field))
            self.db.commit()

            self._succeeded()
            return True
        except SQLAlchemyError as e:
            self._storage_fault(f"Error updating expense {expense.expense_id}", e)
            return False

    def delete_expense(self, expense_id: int) -> bool:
        """Hard-delete an expense."""
        try:
            row = self.db.get(Expense, expense_id)
            if row is None:
                self._not_found(expense_id)
                return False

            self.db.delete(row)
            self.db.commit()

            self._succeeded()
            logger.info("Deleted expense %s", expense_id)
            return True
        except SQLAlchemyError as e:
            self._storage_fault(f"Error deleting expense {expense_id}", e)
            return False

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    def list_categories(self) -> Listing[CategoryResponse]:
        """List active categories."""
        try:
            categories = self.db.query(ExpenseCategory).filter(
                ExpenseCategory.is_active.is_(True)
            ).order_by(ExpenseCategory.category_id).all()

            self._succeeded()
            return Listing([CategoryResponse.model_validate(c) for c in categories])
        except SQLAlchemyError as e:
            self._storage_fault("Error retrieving categories", e)
            return Listing(sample_categories(), degraded=True, cause=self.get_last_error())

    def list_statuses(self) -> Listing[StatusResponse]:
        """List all statuses."""
        try:
            statuses = self.db.query(ExpenseStatus).order_by(ExpenseStatus.status_id).all()

            self._succeeded()
            return Listing([StatusResponse.model_validate(s) for s in statuses])
        except SQLAlchemyError as e:
            self._storage_fault("Error retrieving statuses", e)
            return Listing(sample_statuses(), degraded=True, cause=self.get_last_error())

    def list_users(self) -> Listing[UserResponse]:
        """List active users joined with their role name."""
        try:
            rows = self.db.query(User, Role.role_name).join(
                Role, User.role_id == Role.role_id
            ).filter(
                User.is_active.is_(True)
            ).order_by(User.user_id).all()

            self._succeeded()
            return Listing([
                UserResponse.model_validate(user).model_copy(update={"role_name": role_name})
                for user, role_name in rows
            ])
        except SQLAlchemyError as e:
            self._storage_fault("Error retrieving users", e)
            return Listing(sample_users(), degraded=True, cause=self.get_last_error())


# ----------------------------------------------------------------------
# Sample data served in degraded mode
# ----------------------------------------------------------------------

def sample_expenses() -> List[ExpenseResponse]:
    today = date.today()
    now = utcnow()
    return [
        ExpenseResponse(
            expense_id=1,
            user_id=1,
            category_id=1,
            status_id=ExpenseStatusCode.SUBMITTED.value,
            amount_minor=2540,
            currency="GBP",
            expense_date=today - timedelta(days=5),
            description=f"Taxi from airport {SAMPLE_TAG}",
            user_name="Alice Example",
            category_name="Travel",
            status_name="Submitted",
            created_at=now - timedelta(days=5),
        ),
        ExpenseResponse(
            expense_id=2,
            user_id=1,
            category_id=2,
            status_id=ExpenseStatusCode.APPROVED.value,
            amount_minor=1425,
            currency="GBP",
            expense_date=today - timedelta(days=10),
            description=f"Client lunch {SAMPLE_TAG}",
            reviewed_by=2,
            user_name="Alice Example",
            category_name="Meals",
            status_name="Approved",
            reviewer_name="Bob Manager",
            created_at=now - timedelta(days=10),
        ),
    ]


def sample_categories() -> List[CategoryResponse]:
    names = ["Travel", "Meals", "Supplies", "Accommodation", "Other"]
    return [
        CategoryResponse(category_id=i, category_name=name, is_active=True)
        for i, name in enumerate(names, start=1)
    ]


def sample_statuses() -> List[StatusResponse]:
    return [
        StatusResponse(status_id=code.value, status_name=code.label)
        for code in ExpenseStatusCode
    ]


def sample_users() -> List[UserResponse]:
    now = utcnow()
    return [
        UserResponse(
            user_id=1,
            user_name="Alice Example",
            email="alice@example.co.uk",
            role_id=1,
            role_name="Employee",
            is_active=True,
            created_at=now - timedelta(days=182),
        ),
        UserResponse(
            user_id=2,
            user_name="Bob Manager",
            email="bob.manager@example.co.uk",
            role_id=2,
            role_name="Manager",
            is_active=True,
            created_at=now - timedelta(days=365),
        ),
    ]
