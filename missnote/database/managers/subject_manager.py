#!/usr/bin/env python3
"""
subject_manager.py
--------------------
Manages the curated Subject list.

Mistakes refer to subjects by name. This manager keeps both sides in
step: renaming a subject rewrites every mistake carrying the old name,
and a subject still used by any mistake cannot be deleted. Deletion is
soft (``is_active = False``); adding a name that was deleted earlier
brings the old row back.

Key Features:
    - Ordered listing of active names
    - Duplicate detection on add and rename
    - Rename propagation to mistakes
    - In-use protection on delete
    - Insert-if-absent seeding of the default list

Usage:
    subject_mgr = SubjectManager(session, logger)

    subject_mgr.add("生物")
    subject_mgr.rename("英語", "English")
    subject_mgr.soft_delete("生物")
    names = subject_mgr.list_names()
"""
from typing import Iterable, List, Optional

from sqlalchemy import func

from missnote.core.exceptions import (
    DuplicateError,
    InUseError,
    NotFoundError,
    ValidationError,
)
from missnote.core.validators import DataValidator
from missnote.database.decorators import handle_db_errors, log_database_operation
from missnote.database.models import Mistake, Subject
from .base_manager import BaseManager


class SubjectManager(BaseManager):
    """
    Manages subjects table operations.

    Active subjects are listed by ``(sort_order, id)``. New subjects are
    appended after the current maximum ``sort_order``.
    """

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("list_subjects")
    def list_names(self) -> List[str]:
        """Return the names of active subjects in display order."""
        return [subject.name for subject in self.get_all()]

    @handle_db_errors
    def get_all(self, include_inactive: bool = False) -> List[Subject]:
        """
        Retrieve subjects in display order.

        Args:
            include_inactive: Also return deleted subjects

        Returns:
            Subjects ordered by sort_order, then id
        """
        return self._get_all(
            Subject,
            order_by=["sort_order", "id"],
            include_inactive=include_inactive,
        )

    @handle_db_errors
    def get(self, name: str, include_inactive: bool = False) -> Optional[Subject]:
        """Retrieve a subject by (trimmed) name."""
        normalized = DataValidator.normalize_string(name)
        if not normalized:
            return None
        return self._get_by_field(Subject, "name", normalized, include_inactive)

    @handle_db_errors
    def exists(self, name: str) -> bool:
        """Check whether an active subject has this name."""
        return self.get(name) is not None

    @handle_db_errors
    def usage_count(self, name: str) -> int:
        """Number of mistakes whose subject is ``name``."""
        return self._count(Mistake, subject=name)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    @handle_db_errors
    @log_database_operation("add_subject")
    def add(self, name: str) -> Subject:
        """
        Add a subject at the end of the list.

        Args:
            name: Subject name (trimmed)

        Returns:
            The new (or reactivated) Subject

        Raises:
            ValidationError: If the name is empty after trimming
            DuplicateError: If an active subject already has this name
        """
        normalized = self._require_name(name)

        existing = self._get_by_field(Subject, "name", normalized)
        if existing is not None and existing.is_active:
            raise DuplicateError(f"Subject '{normalized}' already exists")

        sort_order = self._next_sort_order()
        if existing is not None:
            existing.is_active = True
            existing.sort_order = sort_order
            subject = existing
        else:
            subject = Subject(name=normalized, sort_order=sort_order, is_active=True)
            self.session.add(subject)
        self.session.flush()

        if self.logger:
            self.logger.log_debug(
                f"Added subject: {normalized}",
                {"subject_id": subject.id, "sort_order": sort_order},
            )

        return subject

    @handle_db_errors
    @log_database_operation("rename_subject")
    def rename(self, old_name: str, new_name: str) -> int:
        """
        Rename a subject and every mistake that uses it.

        Args:
            old_name: Current name of an active subject
            new_name: Replacement name

        Returns:
            Number of mistakes rewritten (0 when the names are equal)

        Raises:
            ValidationError: If either name is empty after trimming
            NotFoundError: If no active subject has ``old_name``
            DuplicateError: If ``new_name`` is already taken
        """
        old = self._require_name(old_name)
        new = self._require_name(new_name)
        if old == new:
            return 0

        subject = self._get_by_field(Subject, "name", old, include_inactive=False)
        if subject is None:
            raise NotFoundError(f"Subject '{old}' does not exist")

        clash = self._get_by_field(Subject, "name", new)
        if clash is not None:
            state = "already exists" if clash.is_active else "exists as a deleted subject"
            raise DuplicateError(f"Subject '{new}' {state}")

        subject.name = new
        updated = (
            self.session.query(Mistake)
            .filter(Mistake.subject == old)
            .update({Mistake.subject: new}, synchronize_session="fetch")
        )
        self.session.flush()

        if self.logger:
            self.logger.log_debug(
                f"Renamed subject: {old} -> {new}", {"mistakes_updated": updated}
            )

        return updated

    @handle_db_errors
    @log_database_operation("delete_subject")
    def soft_delete(self, name: str) -> Subject:
        """
        Hide a subject that no mistake uses.

        Args:
            name: Name of an active subject

        Returns:
            The deactivated Subject

        Raises:
            NotFoundError: If no active subject has this name
            InUseError: If any mistake still has this subject
        """
        normalized = self._require_name(name)
        subject = self._get_by_field(Subject, "name", normalized, include_inactive=False)
        if subject is None:
            raise NotFoundError(f"Subject '{normalized}' does not exist")

        in_use = self.usage_count(normalized)
        if in_use:
            raise InUseError(
                f"Subject '{normalized}' is used by {in_use} mistakes",
                usage_count=in_use,
            )

        subject.is_active = False
        self.session.flush()
        return subject

    @handle_db_errors
    @log_database_operation("seed_subjects")
    def seed(self, names: Iterable[str]) -> int:
        """
        Insert any of ``names`` not present yet, active or not.

        Existing rows are never modified. Seeded subjects take their
        position in ``names`` as ``sort_order``.

        Returns:
            Number of subjects inserted
        """
        inserted = 0
        for position, name in enumerate(names):
            if self._exists(Subject, "name", name):
                continue
            self.session.add(Subject(name=name, sort_order=position, is_active=True))
            inserted += 1
        self.session.flush()
        return inserted

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_name(name: str) -> str:
        normalized = DataValidator.normalize_string(name)
        if not normalized:
            raise ValidationError("Subject name cannot be empty")
        return normalized

    def _next_sort_order(self) -> int:
        current = self.session.query(func.max(Subject.sort_order)).scalar()
        return (current or 0) + 1
