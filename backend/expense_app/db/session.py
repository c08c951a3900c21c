"""
Database session management.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from expense_app.core.config import settings
from expense_app.db.base import Base


def build_engine(database_url: str, echo: bool = False, **engine_kwargs) -> Engine:
    """Create an engine, enabling foreign key checks on SQLite."""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            **engine_kwargs
        )
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=3600,
        **engine_kwargs
    )


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite leaves FK enforcement off unless asked per connection."""
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None):
    """Initialize database tables."""
    # Import models so SQLAlchemy registers them on Base.metadata
    import expense_app.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
