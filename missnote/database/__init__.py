#!/usr/bin/env python3
"""
MissNote Database Package
-------------------------
Persistence core for the MissNote mistake log.

This package provides the database layer of the application, with
specialized modules for:
- Schema creation and migration
- Entity management (mistakes, photos, subjects)
- Filtered and sorted search
- Backup export and restore
"""

from .manager import MissNoteDB, PhotoDeletion
from missnote.core.exceptions import (
    BackupError,
    DatabaseError,
    DuplicateError,
    ExportError,
    InUseError,
    InvalidBackupFormat,
    NotFoundError,
    PartialRestoreIO,
    RestoreError,
    SchemaError,
    SharingUnavailable,
    ValidationError,
)
from .export_manager import ExportManager, SaveToDirectory, ShareTarget
from .restore_manager import RestoreManager, RestoreOutcome
from .query_engine import QueryEngine, SearchCriteria, SearchResult
from .schema_manager import SchemaManager
from .decorators import (
    log_database_operation,
    handle_db_errors,
    validate_metadata,
)

__all__ = [
    # Main manager
    "MissNoteDB",
    "PhotoDeletion",
    # Exceptions
    "DatabaseError",
    "SchemaError",
    "NotFoundError",
    "ExportError",
    "BackupError",
    "InvalidBackupFormat",
    "SharingUnavailable",
    "RestoreError",
    "PartialRestoreIO",
    "ValidationError",
    "DuplicateError",
    "InUseError",
    # Core modules
    "SchemaManager",
    "QueryEngine",
    "SearchCriteria",
    "SearchResult",
    "ExportManager",
    "SaveToDirectory",
    "ShareTarget",
    "RestoreManager",
    "RestoreOutcome",
    # Decorators
    "log_database_operation",
    "handle_db_errors",
    "validate_metadata",
]
