"""Database engine setup for the SQLite event store.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Allows concurrent readers while writing.
      The dashboard and the tool server can run as separate processes over
      the same database file, so one reading while the other writes must
      not block.

    - **Foreign Keys**: Disabled by default in SQLite for backwards
      compatibility. Enabled on every connection so any future child table
      keeps referential integrity.

    - **check_same_thread=False**: FastAPI may hand a connection created in
      one thread to another, which SQLite rejects by default.
"""
from pathlib import Path

from sqlalchemy import event as sa_event
from sqlalchemy.engine import Engine, make_url
from sqlmodel import SQLModel, create_engine


def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine for ``database_url``.

    For a file-backed SQLite URL the parent directory is created first, so
    the store works on first use without any setup step.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},
        echo=echo,  # Log SQL statements when DEBUG=true
        **kwargs,
    )
    sa_event.listen(engine, "connect", set_sqlite_pragma)
    return engine


def create_db_and_tables(engine: Engine) -> None:
    """Create all database tables."""
    # Registers the table models on SQLModel.metadata
    import eventdesk.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
