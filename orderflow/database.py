"""
Database connection and session management for the relational artifact store.
Uses the SQLAlchemy 2.0 synchronous pattern; the engine core never suspends.
"""

from typing import Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from orderflow.config import get_settings


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create an engine, enabling foreign keys on SQLite connections."""
    settings = get_settings()
    url = database_url or settings.database_url
    is_sqlite = url.startswith("sqlite")

    if is_sqlite:
        engine = create_engine(
            url,
            echo=settings.debug if echo is None else echo,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            """Enable foreign keys on every new SQLite connection."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    else:
        engine = create_engine(
            url,
            echo=settings.debug if echo is None else echo,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
        )
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory bound to engine."""
    return sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


def init_db(engine: Engine) -> None:
    """Create the order tables."""
    # Import Base from kernel models to ensure all models are registered
    from orderflow.kernel.models import Base

    Base.metadata.create_all(engine)


def close_db(engine: Engine) -> None:
    """Close database connections."""
    engine.dispose()
