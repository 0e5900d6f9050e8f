"""Database engine and session management."""

import logging
from collections.abc import Generator

import sqlite_vec
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from smart_notes.config import settings
from smart_notes.utils.exceptions import PersistenceError

logger = logging.getLogger(__name__)

_is_sqlite = settings.database_url.startswith("sqlite")

connect_args = {"check_same_thread": False} if _is_sqlite else {}
engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args=connect_args,
)


def load_sqlite_vec(dbapi_conn, _connection_record):
    """Load sqlite-vec extension when connection is created."""
    try:
        dbapi_conn.enable_load_extension(True)
        sqlite_vec.load(dbapi_conn)
        dbapi_conn.enable_load_extension(False)
    except AttributeError:
        # Interpreter built without loadable extension support
        logger.warning("SQLite extension loading unavailable; vector SQL disabled")


if _is_sqlite:
    event.listen(engine, "connect", load_sqlite_vec)


def create_db_and_tables():
    """Create all database tables."""
    # Import models so they register with the metadata
    import smart_notes.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """Get a database session."""
    with Session(engine) as session:
        yield session


def commit(session: Session) -> None:
    """
    Commit the session, converting database failures to PersistenceError.

    Raises:
        PersistenceError: If the commit fails (the session is rolled back)
    """
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f"Database commit failed: {e}")
        raise PersistenceError() from e
