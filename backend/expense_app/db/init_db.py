"""
Database initialization script.

Creates all tables and seeds the reference data the workflow depends on:
statuses, roles, categories and two sample users.
"""
from sqlalchemy.orm import Session
from expense_app.db.session import SessionLocal, init_db
from expense_app.models import User, Role, ExpenseCategory, ExpenseStatus, ExpenseStatusCode

ROLES = [(1, "Employee"), (2, "Manager")]
CATEGORIES = ["Travel", "Meals", "Supplies", "Accommodation", "Other"]
USERS = [
    # (name, email, role_id, manager email)
    ("Alice Example", "alice@example.co.uk", 1, "bob.manager@example.co.uk"),
    ("Bob Manager", "bob.manager@example.co.uk", 2, None),
]


def seed_reference_data(db: Session, with_users: bool = True) -> None:
    """Insert any missing statuses, roles, categories and sample users."""
    for code in ExpenseStatusCode:
        if not db.get(ExpenseStatus, code.value):
            db.add(ExpenseStatus(status_id=code.value, status_name=code.label))

    for role_id, role_name in ROLES:
        if not db.get(Role, role_id):
            db.add(Role(role_id=role_id, role_name=role_name))

    for name in CATEGORIES:
        exists = db.query(ExpenseCategory).filter(ExpenseCategory.category_name == name).first()
        if not exists:
            db.add(ExpenseCategory(category_name=name, is_active=True))
    db.flush()

    if with_users:
        for user_name, email, role_id, _ in USERS:
            if not db.query(User).filter(User.email == email).first():
                db.add(User(user_name=user_name, email=email, role_id=role_id, is_active=True))
                db.flush()

        # Managers are linked once everyone exists
        for _, email, _, manager_email in USERS:
            if manager_email:
                user = db.query(User).filter(User.email == email).first()
                manager = db.query(User).filter(User.email == manager_email).first()
                if user.manager_id is None:
                    user.manager_id = manager.user_id

    db.commit()


if __name__ == "__main__":
    print("Initializing database...")
    init_db()
    db = SessionLocal()
    try:
        seed_reference_data(db)
    finally:
        db.close()
    print("Database initialized successfully!")
