"""
Shared test fixtures and configuration.
"""
import os

# Point the application at SQLite before anything imports the settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from expense_app.db.base import Base
from expense_app.db.init_db import seed_reference_data
from expense_app.db.session import build_engine, get_db
from expense_app.main import app
from expense_app.models import ExpenseStatusCode
from expense_app.schemas.expense import ExpenseCreate
from expense_app.services.expense_store import ExpenseStore

ALICE_ID = 1
BOB_ID = 2
TRAVEL_ID = 1
MEALS_ID = 2


@pytest.fixture
def engine():
    """In-memory SQLite engine with the schema created."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Session on a database seeded with statuses, roles, categories and two users."""
    db = session_factory()
    seed_reference_data(db)
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(db_session):
    return ExpenseStore(db_session)


@pytest.fixture
def broken_store():
    """Store whose database can never be opened."""
    engine = build_engine("sqlite:////nonexistent-directory/expenses.db")
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield ExpenseStore(db)
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(db_session, session_factory):
    """TestClient whose requests each get their own session on the test database."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_expense():
    """Build an ExpenseCreate with sensible defaults."""
    def _make(**overrides) -> ExpenseCreate:
        data = {
            "user_id": ALICE_ID,
            "category_id": TRAVEL_ID,
            "status_id": ExpenseStatusCode.DRAFT.value,
            "amount_minor": 2540,
            "currency": "GBP",
            "expense_date": date.today() - timedelta(days=5),
            "description": "Taxi from airport",
        }
        data.update(overrides)
        return ExpenseCreate(**data)
    return _make


@pytest.fixture
def expense_payload():
    """JSON body for creating an expense through the API."""
    return {
        "user_id": ALICE_ID,
        "category_id": TRAVEL_ID,
        "status_id": ExpenseStatusCode.DRAFT.value,
        "amount_minor": 2540,
        "currency": "GBP",
        "expense_date": (date.today() - timedelta(days=5)).isoformat(),
        "description": "Taxi from airport",
    }
