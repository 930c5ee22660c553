"""
Base Classes
------------

Foundational ORM classes for the MissNote database.

Classes:
    - Base: Declarative base for all SQLAlchemy models

Also registers a connection hook that switches on SQLite foreign key
enforcement, required for photo rows to cascade with their mistake.
"""
# --- Annotations ---
from __future__ import annotations

# --- Third party ---
from sqlalchemy import Engine, event
from sqlalchemy.orm import DeclarativeBase


# --- Base ORM class ---
class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base for SQLAlchemy models and provides
    access to the metadata object for table creation and migrations.
    """

    pass


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Enable foreign key enforcement on every new SQLite connection."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
