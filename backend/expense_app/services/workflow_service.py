"""
Expense workflow: submit, approve and reject.

Each transition reads the full expense through the store, stamps the status
and audit fields on an in-memory copy and writes the whole row back with
``update_expense``. The read takes a row lock and shares the session
transaction with the write, so concurrent reviews of one expense serialise on
backends that support row locks.

By default no transition looks at the current status: submit can move an
Approved expense back to Submitted, and repeating a transition re-stamps its
timestamp. This mirrors how the application has always behaved. With
``strict=True`` only the forward path Draft -> Submitted -> Approved/Rejected
is accepted and anything else yields an ``invalid_transition`` result.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from expense_app.core.utils import utcnow
from expense_app.models.expense import ExpenseStatusCode
from expense_app.schemas.expense import ExpenseBase
from expense_app.services.expense_store import ExpenseStore

logger = logging.getLogger(__name__)


class WorkflowAction(str, enum.Enum):
    """Workflow action enumeration."""
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"


# Target status for each action
ACTION_TARGETS: Dict[WorkflowAction, ExpenseStatusCode] = {
    WorkflowAction.SUBMIT: ExpenseStatusCode.SUBMITTED,
    WorkflowAction.APPROVE: ExpenseStatusCode.APPROVED,
    WorkflowAction.REJECT: ExpenseStatusCode.REJECTED,
}

# Forward-only transitions accepted in strict mode
ALLOWED_TRANSITIONS: Dict[Tuple[ExpenseStatusCode, WorkflowAction], ExpenseStatusCode] = {
    (ExpenseStatusCode.DRAFT, WorkflowAction.SUBMIT): ExpenseStatusCode.SUBMITTED,
    (ExpenseStatusCode.SUBMITTED, WorkflowAction.APPROVE): ExpenseStatusCode.APPROVED,
    (ExpenseStatusCode.SUBMITTED, WorkflowAction.REJECT): ExpenseStatusCode.REJECTED,
}

PAST_TENSE = {
    WorkflowAction.SUBMIT: "submitted",
    WorkflowAction.APPROVE: "approved",
    WorkflowAction.REJECT: "rejected",
}


class InvalidTransition(ValueError):
    """Raised when an action is not allowed from the expense's current status."""

    def __init__(self, current: int, action: WorkflowAction):
        self.current = current
        self.action = action
        try:
            current_label = ExpenseStatusCode(current).label
        except ValueError:
            current_label = f"status {current}"
        super().__init__(f"Cannot {action.value} an expense that is {current_label}")


def next_status(current: int, action: WorkflowAction) -> ExpenseStatusCode:
    """Strict transition function: (current status, action) -> new status."""
    try:
        return ALLOWED_TRANSITIONS[(ExpenseStatusCode(current), action)]
    except (KeyError, ValueError):
        raise InvalidTransition(current, action) from None


@dataclass
class WorkflowResult:
    """Outcome of a single workflow call."""
    ok: bool
    message: str
    kind: Optional[str] = None  # "not_found", "storage" or "invalid_transition"
    error: Optional[str] = None


class ExpenseWorkflow:
    """Lifecycle transitions built on an ExpenseStore."""

    def __init__(self, store: ExpenseStore, strict: bool = False):
        self.store = store
        self.strict = strict

    def submit(self, expense_id: int) -> WorkflowResult:
        """Move an expense to Submitted and stamp submitted_at."""
        return self._apply(expense_id, WorkflowAction.SUBMIT)

    def approve(self, expense_id: int, reviewer_id: int) -> WorkflowResult:
        """Move an expense to Approved and stamp the reviewer fields."""
        return self._apply(expense_id, WorkflowAction.APPROVE, reviewer_id)

    def reject(self, expense_id: int, reviewer_id: int) -> WorkflowResult:
        """Move an expense to Rejected and stamp the reviewer fields."""
        return self._apply(expense_id, WorkflowAction.REJECT, reviewer_id)

    def check_new_expense(self, expense: ExpenseBase) -> Optional[str]:
        """Return a validation message if a new expense may not be created as given."""
        if self.strict and expense.status_id != ExpenseStatusCode.DRAFT:
            return "New expenses must be created in Draft status"
        return None

    def _apply(
        self,
        expense_id: int,
        action: WorkflowAction,
        reviewer_id: Optional[int] = None
    ) -> WorkflowResult:
        expense = self.store.get_expense(expense_id, for_update=True)
        if expense is None:
            error = self.store.get_last_error()
            if error:
                return WorkflowResult(
                    ok=False,
                    message=f"Failed to {action.value} expense",
                    kind="storage",
                    error=error,
                )
            return WorkflowResult(
                ok=False,
                message=f"Expense with ID {expense_id} not found",
                kind="not_found",
            )

        if self.strict:
            try:
                target = next_status(expense.status_id, action)
            except InvalidTransition as e:
                self.store.rollback()
                logger.info("Refused %s on expense %s: %s", action.value, expense_id, e)
                return WorkflowResult(
                    ok=False,
                    message=f"Failed to {action.value} expense",
                    kind="invalid_transition",
                    error=str(e),
                )
        else:
            target = ACTION_TARGETS[action]

        changes = {"status_id": target.value}
        if action == WorkflowAction.SUBMIT:
            changes["submitted_at"] = utcnow()
        else:
            changes["reviewed_by"] = reviewer_id
            changes["reviewed_at"] = utcnow()

        if not self.store.update_expense(expense.model_copy(update=changes)):
            last = self.store.last_failure
            return WorkflowResult(
                ok=False,
                message=f"Failed to {action.value} expense",
                kind=last.kind if last else "storage",
                error=self.store.get_last_error(),
            )

        logger.info("Expense %s %s", expense_id, PAST_TENSE[action])
        return WorkflowResult(ok=True, message=f"Expense {PAST_TENSE[action]} successfully")
