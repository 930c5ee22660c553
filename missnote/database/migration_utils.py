#!/usr/bin/env python3
"""
migration_utils.py
------------------
Helpers for idempotent Alembic revisions.

Databases written by earlier versions of the application were created
without Alembic, so an upgrade may start from base against tables that
already carry some or all of the later columns. Every revision checks
the live schema before altering it.
"""
from typing import Set

import sqlalchemy as sa
from alembic import op


def table_names() -> Set[str]:
    """Tables present in the database being migrated."""
    return set(sa.inspect(op.get_bind()).get_table_names())


def column_names(table: str) -> Set[str]:
    """Columns present on ``table``."""
    return {col["name"] for col in sa.inspect(op.get_bind()).get_columns(table)}


def index_names(table: str) -> Set[str]:
    """Indexes present on ``table``."""
    return {idx["name"] for idx in sa.inspect(op.get_bind()).get_indexes(table)}


def add_column_if_missing(table: str, column: sa.Column) -> bool:
    """
    Add ``column`` to ``table`` unless a column of that name exists.

    Returns:
        True if the column was added
    """
    if column.name in column_names(table):
        return False
    op.add_column(table, column)
    return True


def create_index_if_missing(name: str, table: str, columns: list) -> bool:
    """Create an index unless one with this name exists."""
    if name in index_names(table):
        return False
    op.create_index(name, table, columns)
    return True
