"""
Declarative base classes shared by all models.
"""
from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base
from expense_app.core.utils import utcnow

Base = declarative_base()


class BaseModel(Base):
    """Abstract base for tables carrying a store-assigned CreatedAt column."""
    __abstract__ = True

    created_at = Column("CreatedAt", DateTime, nullable=False, default=utcnow)
