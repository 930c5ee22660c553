#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common CRUD operations and utilities.
All entity managers inherit from this class.

Key Features:
    - Abstract base class with common CRUD scaffolding
    - Retry logic for database lock handling
    - Lookup helpers honoring the ``is_active`` soft-delete flag
    - Scalar field updates driven by normalizer tables

Usage:
    class SubjectManager(BaseManager):
        def add(self, name: str) -> Subject:
            ...
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Dict, List, Optional, Protocol, Type, TypeVar

# --- Third party imports ---
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Mapped, Session

# --- Local imports ---
from missnote.core.exceptions import DatabaseError
from missnote.core.logging_manager import MissNoteLogger, safe_logger


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


T = TypeVar("T", bound=HasId)


class BaseManager(ABC):
    """
    Abstract base manager providing common CRUD operations and utilities.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[MissNoteLogger] = None):
        """
        Initialize the base manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        self.session = session
        self.logger = logger

    # -------------------------------------------------------------------------
    # Core Helper Methods
    # -------------------------------------------------------------------------

    def _execute_with_retry(
        self,
        operation: Callable,
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute database operation with retry on lock.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of retry attempts
            retry_delay: Base delay between retries (exponential backoff)

        Returns:
            Result of the operation

        Raises:
            OperationalError: If all retries exhausted
            DatabaseError: If retry loop completes without success
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise DatabaseError("Retry loop completed without success")

    # -------------------------------------------------------------------------
    # Generic CRUD Helpers
    # -------------------------------------------------------------------------

    def _get_by_id(self, model_class: Type[T], entity_id: int) -> Optional[T]:
        """
        Get entity by primary key.

        Args:
            model_class: ORM model class
            entity_id: The entity ID

        Returns:
            Entity if found, None otherwise
        """
        return self.session.get(model_class, entity_id)

    def _get_by_field(
        self,
        model_class: Type[T],
        field_name: str,
        value: Any,
        include_inactive: bool = True,
    ) -> Optional[T]:
        """
        Get entity by a specific field value.

        Args:
            model_class: ORM model class
            field_name: Field name to filter by
            value: Value to look up
            include_inactive: Include soft-deleted entities

        Returns:
            Entity if found, None otherwise
        """
        if value is None:
            return None

        query = self.session.query(model_class).filter_by(**{field_name: value})

        if not include_inactive and hasattr(model_class, "is_active"):
            query = query.filter(model_class.is_active.is_(True))

        return query.first()

    def _exists(
        self,
        model_class: Type[T],
        field_name: str,
        value: Any,
        include_inactive: bool = True,
    ) -> bool:
        """Check whether an entity with ``field_name == value`` exists."""
        return (
            self._get_by_field(model_class, field_name, value, include_inactive)
            is not None
        )

    def _get_all(
        self,
        model_class: Type[T],
        order_by: Optional[List[str]] = None,
        include_inactive: bool = True,
        **filters: Any,
    ) -> List[T]:
        """
        Get all entities of a type with optional filtering and ordering.

        Args:
            model_class: ORM model class
            order_by: Field names to order by, in priority order
            include_inactive: Include soft-deleted entities
            **filters: Additional equality filters

        Returns:
            List of entities
        """
        query = self.session.query(model_class)

        if filters:
            query = query.filter_by(**filters)

        if not include_inactive and hasattr(model_class, "is_active"):
            query = query.filter(model_class.is_active.is_(True))

        for field_name in order_by or ["id"]:
            query = query.order_by(getattr(model_class, field_name))

        return query.all()

    def _count(self, model_class: Type[T], **filters: Any) -> int:
        """Count entities matching the equality filters."""
        query = self.session.query(model_class)
        if filters:
            query = query.filter_by(**filters)
        return query.count()

    # -------------------------------------------------------------------------
    # Scalar Field Update Helpers
    # -------------------------------------------------------------------------

    def _update_scalar_fields(
        self,
        entity: Any,
        metadata: Dict[str, Any],
        field_configs: List[tuple],
    ) -> List[str]:
        """
        Update multiple scalar fields from metadata using normalizers.

        Args:
            entity: Entity to update
            metadata: Dictionary containing field values
            field_configs: List of tuples:
                - (field_name, normalizer) for required fields
                - (field_name, normalizer, allow_none) for optional fields

        Returns:
            Names of the fields that were assigned

        Example:
            self._update_scalar_fields(mistake, metadata, [
                ("title", DataValidator.normalize_string),
                ("importance", DataValidator.normalize_importance),
            ])
        """
        updated = []
        for config in field_configs:
            field_name = config[0]
            normalizer = config[1]
            allow_none = config[2] if len(config) > 2 else False

            if field_name not in metadata:
                continue

            value = normalizer(metadata[field_name])
            if value is not None or allow_none:
                setattr(entity, field_name, value)
                updated.append(field_name)
        return updated
