"""
Tests for the expense store.
"""
from sqlalchemy import BigInteger

from expense_app.core.utils import utcnow
from expense_app.models import Expense, ExpenseCategory, ExpenseStatusCode, User
from expense_app.schemas.expense import ExpenseCreate, ExpenseUpdate
from expense_app.services.expense_store import FAILED_ID, SAMPLE_TAG

ALICE_ID = 1
BOB_ID = 2
TRAVEL_ID = 1
MEALS_ID = 2


def test_create_then_get_round_trips(store, make_expense):
    """A created expense reads back unchanged apart from store-assigned fields."""
    expense = make_expense(receipt_file="receipts/2024/taxi.pdf")
    before = utcnow()

    expense_id = store.create_expense(expense)

    assert expense_id > 0
    assert store.get_last_error() is None
    record = store.get_expense(expense_id)
    assert record.model_dump(include=set(ExpenseCreate.model_fields)) == expense.model_dump()
    assert record.expense_id == expense_id
    assert record.created_at >= before


def test_get_expense_joins_display_names(store, make_expense):
    """Reads carry submitter, category and status names; reviewer is empty until reviewed."""
    expense_id = store.create_expense(make_expense(category_id=MEALS_ID))

    record = store.get_expense(expense_id)

    assert record.user_name == "Alice Example"
    assert record.category_name == "Meals"
    assert record.status_name == "Draft"
    assert record.reviewer_name is None


def test_get_missing_expense_returns_none_without_error(store):
    """An absent id is not a storage fault."""
    assert store.get_expense(9999) is None
    assert store.get_last_error() is None


def test_create_with_unknown_user_fails_with_sentinel(store, make_expense):
    """Foreign key violations come back as the sentinel plus a recorded error."""
    expense_id = store.create_expense(make_expense(user_id=999))

    assert expense_id == FAILED_ID
    assert store.get_last_error().startswith("Error creating expense")
    assert store.last_failure.kind == "storage"


def test_error_is_cleared_by_next_success(store, make_expense):
    """The last-error slot only reflects the most recent operation."""
    store.create_expense(make_expense(category_id=999))
    assert store.get_last_error() is not None

    store.list_statuses()

    assert store.get_last_error() is None


def test_list_expenses_newest_first(store, make_expense):
    """Listing is ordered by creation time, most recent first."""
    first = store.create_expense(make_expense(description="first"))
    second = store.create_expense(make_expense(description="second"))
    third = store.create_expense(make_expense(description="third"))

    expenses = store.list_expenses()

    assert not expenses.degraded
    assert [e.expense_id for e in expenses] == [third, second, first]


def test_list_expenses_filters_combine(store, make_expense):
    """User and status filters are optional and combine with AND."""
    alice_draft = store.create_expense(make_expense())
    alice_submitted = store.create_expense(make_expense(status_id=ExpenseStatusCode.SUBMITTED.value))
    bob_submitted = store.create_expense(
        make_expense(user_id=BOB_ID, status_id=ExpenseStatusCode.SUBMITTED.value)
    )

    submitted = store.list_expenses(status_id=ExpenseStatusCode.SUBMITTED.value)
    alice = store.list_expenses(user_id=ALICE_ID)
    alice_submitted_only = store.list_expenses(
        user_id=ALICE_ID, status_id=ExpenseStatusCode.SUBMITTED.value
    )

    assert {e.expense_id for e in submitted} == {alice_submitted, bob_submitted}
    assert all(e.status_name == "Submitted" for e in submitted)
    assert {e.expense_id for e in alice} == {alice_draft, alice_submitted}
    assert [e.expense_id for e in alice_submitted_only] == [alice_submitted]
    assert len(store.list_expenses()) == 3


def test_update_overwrites_mutable_fields(store, make_expense):
    """Update rewrites the whole row but never the owner or created_at."""
    expense_id = store.create_expense(make_expense())
    original = store.get_expense(expense_id)
    changed = ExpenseUpdate(**{
        **original.model_dump(include=set(ExpenseUpdate.model_fields)),
        "user_id": BOB_ID,
        "category_id": MEALS_ID,
        "amount_minor": 999,
        "currency": "eur",
        "description": None,
    })

    assert store.update_expense(changed) is True

    record = store.get_expense(expense_id)
    assert record.category_name == "Meals"
    assert record.amount_minor == 999
    assert record.currency == "EUR"
    assert record.description is None
    assert record.user_id == ALICE_ID
    assert record.created_at == original.created_at


def test_update_missing_expense_reports_not_found(store, make_expense):
    """Updating an id with no row is reported instead of silently succeeding."""
    ghost = ExpenseUpdate(expense_id=4242, **make_expense().model_dump())

    assert store.update_expense(ghost) is False
    assert store.last_failure.kind == "not_found"
    assert "4242" in store.get_last_error()


def test_delete_expense(store, make_expense):
    """Delete is a hard delete."""
    expense_id = store.create_expense(make_expense())

    assert store.delete_expense(expense_id) is True
    assert store.get_expense(expense_id) is None
    assert store.delete_expense(expense_id) is False
    assert store.last_failure.kind == "not_found"


def test_list_categories_excludes_inactive(store, db_session):
    """Inactive categories are not offered."""
    db_session.add(ExpenseCategory(category_name="Entertainment", is_active=False))
    db_session.commit()

    categories = store.list_categories()

    names = [c.category_name for c in categories]
    assert names == ["Travel", "Meals", "Supplies", "Accommodation", "Other"]
    assert "Entertainment" not in names


def test_list_statuses(store):
    """All four statuses are listed in id order."""
    statuses = store.list_statuses()

    assert [(s.status_id, s.status_name) for s in statuses] == [
        (1, "Draft"), (2, "Submitted"), (3, "Approved"), (4, "Rejected")
    ]


def test_list_users_active_only_with_roles(store, db_session):
    """Users are listed with role names; inactive users are skipped."""
    db_session.add(User(user_name="Carol Leaver", email="carol@example.co.uk", role_id=1, is_active=False))
    db_session.commit()

    users = store.list_users()

    assert [(u.user_name, u.role_name) for u in users] == [
        ("Alice Example", "Employee"),
        ("Bob Manager", "Manager"),
    ]
    assert users[0].manager_id == BOB_ID


def test_list_users_reports_internal_email_addresses(store, db_session):
    """Stored addresses on reserved domains are listed as they are."""
    db_session.add(User(user_name="Ops Robot", email="ops@corp.local", role_id=1))
    db_session.commit()

    users = store.list_users()

    assert users.degraded is False
    assert "ops@corp.local" in [u.email for u in users]
    assert store.get_last_error() is None


def test_stored_rows_outside_input_rules_still_read(store, db_session):
    """Reads report stored rows even when they would fail create validation."""
    row = Expense(
        user_id=ALICE_ID,
        category_id=TRAVEL_ID,
        status_id=ExpenseStatusCode.DRAFT.value,
        amount_minor=3_000_000_000,
        currency="euro",
        expense_date=utcnow().date(),
    )
    db_session.add(row)
    db_session.commit()

    expense = store.get_expense(row.expense_id)
    listing = store.list_expenses()

    assert expense.currency == "euro"
    assert expense.amount_minor == 3_000_000_000
    assert listing.degraded is False
    assert [e.expense_id for e in listing] == [row.expense_id]


def test_amount_column_holds_64_bit_values():
    assert isinstance(Expense.__table__.c.AmountMinor.type, BigInteger)


def test_list_expenses_degrades_to_sample_data(broken_store):
    """A storage fault yields tagged sample data and a recorded error, not an exception."""
    expenses = broken_store.list_expenses()

    assert expenses.degraded is True
    assert len(expenses) > 0
    assert all(SAMPLE_TAG in e.description for e in expenses)
    assert broken_store.get_last_error()
    assert expenses.cause == broken_store.get_last_error()


def test_reference_listings_degrade(broken_store):
    """Categories, statuses and users also fall back to samples."""
    for listing in (broken_store.list_categories(), broken_store.list_statuses(), broken_store.list_users()):
        assert listing.degraded is True
        assert len(listing) > 0
        assert broken_store.get_last_error()


def test_single_read_and_writes_do_not_degrade(broken_store, make_expense):
    """Single reads return nothing and writes return their failure values."""
    assert broken_store.get_expense(1) is None
    assert broken_store.get_last_error().startswith("Error retrieving expense")

    assert broken_store.create_expense(make_expense()) == FAILED_ID
    assert broken_store.update_expense(ExpenseUpdate(expense_id=1, **make_expense().model_dump())) is False
    assert broken_store.delete_expense(1) is False
    assert broken_store.last_failure.kind == "storage"
