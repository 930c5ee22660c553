#!/usr/bin/env python3
"""
mistake_manager.py
--------------------
Manages Mistake entities.

Key Features:
    - Insert with trimmed, non-empty title and body
    - Partial updates that refresh ``updated_at``
    - Delete cascading to attached photos
    - Subject and importance fall back to their defaults when blank

Usage:
    mistake_mgr = MistakeManager(session, logger)

    mistake_id = mistake_mgr.insert({
        "title": "Sign error",
        "body": "Dropped the minus when expanding (a - b)^2",
        "subject": "数学",
        "importance": 3,
    })

    mistake_mgr.update(mistake_id, {"importance": 2})
    mistake_mgr.delete(mistake_id)
"""
from typing import Any, Dict, List, Optional

from missnote.core.exceptions import NotFoundError, ValidationError
from missnote.core.validators import DataValidator, now_timestamp
from missnote.database.configs.defaults import DEFAULT_IMPORTANCE, DEFAULT_SUBJECT
from missnote.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from missnote.database.models import Mistake
from .base_manager import BaseManager


class MistakeManager(BaseManager):
    """
    Manages Mistake table operations.

    Title and body are stored trimmed and may never be empty. Every
    successful update stamps ``updated_at`` with the current time.
    """

    _OPTIONAL_FIELDS = [
        ("importance", DataValidator.normalize_importance),
        ("occurred_at", DataValidator.normalize_timestamp),
    ]

    # -------------------------------------------------------------------------
    # Core CRUD Operations
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("mistake_exists")
    def exists(self, mistake_id: int) -> bool:
        """Check if a mistake with this ID exists."""
        return self._get_by_id(Mistake, mistake_id) is not None

    @handle_db_errors
    @log_database_operation("get_mistake")
    def get_by_id(self, mistake_id: int) -> Optional[Mistake]:
        """
        Retrieve a mistake by ID.

        Args:
            mistake_id: The mistake ID

        Returns:
            Mistake object if found, None otherwise
        """
        return self._get_by_id(Mistake, mistake_id)

    @handle_db_errors
    @log_database_operation("get_all_mistakes")
    def get_all(self) -> List[Mistake]:
        """Retrieve every mistake ordered by ID."""
        return self._get_all(Mistake)

    @handle_db_errors
    def count(self, **filters: Any) -> int:
        """Count mistakes, optionally filtered by column equality."""
        return self._count(Mistake, **filters)

    @handle_db_errors
    @log_database_operation("create_mistake")
    @validate_metadata(["title", "body"])
    def create(self, metadata: Dict[str, Any]) -> Mistake:
        """
        Create a new mistake.

        Args:
            metadata: Dictionary with keys:
                Required:
                - title: Short description
                - body: Full notes
                Optional:
                - subject: Subject name (default subject when blank)
                - importance: 1, 2 or 3 (default 2)
                - occurred_at: datetime, date or ISO string (default now)

        Returns:
            Created Mistake object

        Raises:
            ValidationError: If title/body is empty after trimming, or
                importance/occurred_at is invalid
        """
        now = now_timestamp()
        importance = DataValidator.normalize_importance(metadata.get("importance"))
        mistake = Mistake(
            title=DataValidator.normalize_string(metadata["title"]),
            body=DataValidator.normalize_string(metadata["body"]),
            subject=DataValidator.normalize_string(metadata.get("subject"))
            or DEFAULT_SUBJECT,
            importance=importance if importance is not None else DEFAULT_IMPORTANCE,
            occurred_at=DataValidator.normalize_timestamp(metadata.get("occurred_at"))
            or now,
            created_at=now,
            updated_at=now,
        )

        def _do_create() -> Mistake:
            self.session.add(mistake)
            self.session.flush()
            return mistake

        self._execute_with_retry(_do_create)

        if self.logger:
            self.logger.log_debug(
                f"Created mistake: {mistake.title}", {"mistake_id": mistake.id}
            )

        return mistake

    def insert(self, metadata: Dict[str, Any]) -> int:
        """Create a mistake and return its new ID."""
        return self.create(metadata).id

    @handle_db_errors
    @log_database_operation("update_mistake")
    def update(self, mistake_id: int, metadata: Dict[str, Any]) -> Mistake:
        """
        Update a mistake's editable fields.

        Only keys present in ``metadata`` are touched. ``updated_at`` is
        refreshed on every call.

        Args:
            mistake_id: ID of the mistake to update
            metadata: Any of title, body, subject, importance, occurred_at
                (a blank subject becomes the default subject)

        Returns:
            Updated Mistake object

        Raises:
            NotFoundError: If no mistake has this ID
            ValidationError: If title/body is given but empty after trimming
        """
        mistake = self._get_by_id(Mistake, mistake_id)
        if mistake is None:
            raise NotFoundError(f"No Mistake found with id: {mistake_id}")

        for field in ("title", "body"):
            if field in metadata:
                value = DataValidator.normalize_string(metadata[field])
                if value is None:
                    raise ValidationError(f"Required field '{field}' missing or empty")
                setattr(mistake, field, value)

        if "subject" in metadata:
            mistake.subject = (
                DataValidator.normalize_string(metadata["subject"]) or DEFAULT_SUBJECT
            )

        self._update_scalar_fields(mistake, metadata, self._OPTIONAL_FIELDS)
        mistake.updated_at = now_timestamp()
        self.session.flush()

        return mistake

    @handle_db_errors
    @log_database_operation("delete_mistake")
    def delete(self, mistake_id: int) -> bool:
        """
        Delete a mistake together with its photo rows.

        Photo files on disk are left alone.

        Args:
            mistake_id: ID of the mistake to delete

        Returns:
            True if a mistake was deleted, False if none had this ID
        """
        mistake = self._get_by_id(Mistake, mistake_id)
        if mistake is None:
            return False

        photo_count = len(mistake.photos)
        self.session.delete(mistake)
        self.session.flush()

        if self.logger:
            self.logger.log_debug(
                "Deleted mistake",
                {"mistake_id": mistake_id, "photos_deleted": photo_count},
            )

        return True
