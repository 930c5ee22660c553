#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the MissNote project.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in the persistence layer.

Exception Hierarchy:
    Exception (built-in)
    └── MissNoteError - Base for every project error
        ├── DatabaseError - Base for all database-related errors
        │   ├── SchemaError - Schema creation/migration failures (fatal)
        │   ├── NotFoundError - Referenced row does not exist
        │   ├── ExportError - Backup archive could not be built
        │   └── BackupError - Backup/restore failures
        │       ├── InvalidBackupFormat - Archive is not a valid backup
        │       ├── SharingUnavailable - No share target to hand archive to
        │       ├── RestoreError - Database restore rolled back
        │       └── PartialRestoreIO - Data restored, photo files not
        ├── TemporalFileError - Staging directory failures
        └── ValidationError - Data validation failures
            ├── DuplicateError - Name already taken
            └── InUseError - Entity still referenced

Usage:
    from missnote.core.exceptions import DatabaseError, ValidationError

    try:
        db.subjects.add("数学")
    except DuplicateError as e:
        click.echo(f"Already exists: {e}")
    except DatabaseError as e:
        logger.log_error(e)
"""


class MissNoteError(Exception):
    """
    Base exception for every MissNote error.

    Catch this at the outermost layer (CLI commands) to report any
    failure raised by the persistence core.
    """

    pass


class DatabaseError(MissNoteError):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or other database problems.

    Examples:
        >>> raise DatabaseError("Connection to database failed")
        >>> raise DatabaseError("Data integrity violation: FOREIGN KEY constraint failed")

    See Also:
        SchemaError, BackupError, ExportError
    """

    pass


class SchemaError(DatabaseError):
    """
    Exception for schema creation and migration failures.

    Startup cannot continue after this error: there is no partially
    migrated state that the rest of the system may use.

    Examples:
        >>> raise SchemaError("Database upgrade failed: no such table: mistakes")
    """

    pass


class NotFoundError(DatabaseError):
    """
    Exception for operations addressing a row that does not exist.

    Examples:
        >>> raise NotFoundError("No Mistake found with id: 42")
        >>> raise NotFoundError("Subject '地学' does not exist")
    """

    pass


class ExportError(DatabaseError):
    """
    Exception for backup archive generation failures.

    Raised when the dataset cannot be serialized or a photo file cannot
    be read while the archive is assembled. Nothing is handed to the
    share target when this is raised.

    Examples:
        >>> raise ExportError("Failed to read photo: 1700000000000_ab12.jpg")
    """

    pass


class BackupError(DatabaseError):
    """
    Base exception for backup and restore failures.

    Examples:
        >>> raise BackupError("Backup file not found: miss-log-backup.zip")
    """

    pass


class InvalidBackupFormat(BackupError):
    """
    Exception for archives that are not MissNote backups.

    Raised before anything is modified when the archive cannot be opened,
    lacks its data document, or declares an unsupported format version.

    Examples:
        >>> raise InvalidBackupFormat("data.json not found in archive")
        >>> raise InvalidBackupFormat("Unsupported backup version: 2")
    """

    pass


class SharingUnavailable(BackupError):
    """
    Exception raised when no share target can receive an exported archive.

    Examples:
        >>> raise SharingUnavailable("Sharing is not available on this device")
    """

    pass


class RestoreError(BackupError):
    """
    Exception for a database restore that was rolled back.

    The pre-restore dataset is intact when this is raised.

    Examples:
        >>> raise RestoreError("Restore failed, no changes applied: UNIQUE constraint failed")
    """

    pass


class PartialRestoreIO(BackupError):
    """
    Exception for photo file failures after a committed data restore.

    The database already holds the restored dataset; some photo files or
    photo paths may be missing or stale.

    Examples:
        >>> raise PartialRestoreIO("Could not write photo 1700000000000_ab12.jpg")
    """

    pass


class TemporalFileError(MissNoteError):
    """
    Exception for temporary staging file failures.

    Examples:
        >>> raise TemporalFileError("Failed to create temporary directory: disk full")
    """

    pass


class ValidationError(MissNoteError):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks, such as missing
    required fields, blank text, or values out of range.

    Examples:
        >>> raise ValidationError("Required field 'title' missing or empty")
        >>> raise ValidationError("Importance must be 1, 2 or 3, got: 5")
    """

    pass


class DuplicateError(ValidationError):
    """
    Exception raised when a name is already taken by an active subject.

    Examples:
        >>> raise DuplicateError("Subject '数学' already exists")
    """

    pass


class InUseError(ValidationError):
    """
    Exception raised when deleting a subject still used by mistakes.

    Attributes:
        usage_count: Number of mistakes referencing the subject

    Examples:
        >>> raise InUseError("Subject '英語' is used by 3 mistakes", usage_count=3)
    """

    def __init__(self, message: str, usage_count: int = 0) -> None:
        super().__init__(message)
        self.usage_count = usage_count
