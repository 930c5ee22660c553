#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for all MissNote operations.

Timestamps are stored as ISO-8601 text in UTC with millisecond precision
(``2024-01-15T09:30:00.000Z``), so that range predicates on the database
compare lexically in chronological order.
"""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError


def format_timestamp(value: datetime) -> str:
    """Render a datetime in the stored timestamp format (UTC, milliseconds)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def now_timestamp() -> str:
    """Current time in the stored timestamp format."""
    return format_timestamp(datetime.now(timezone.utc))


class DataValidator:
    """Centralized data validation for database operations."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-blank.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If validation fails
        """
        for field in required_fields:
            value = data.get(field)
            if isinstance(value, str):
                value = value.strip()
            if value is None or value == "":
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Normalize string value.

        Args:
            value: Value to normalize

        Returns:
            Trimmed string, or None when blank
        """
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """
        Convert value to integer safely.

        Args:
            value: Value to convert

        Returns:
            Integer value or None

        Raises:
            ValidationError: If value cannot be read as an integer
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str) and not value.strip():
            return None
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Cannot convert '{value}' to integer") from e

    @staticmethod
    def normalize_bool(value: Any) -> Optional[bool]:
        """
        Convert various inputs to boolean.

        Args:
            value: Value to convert

        Returns:
            Boolean value or None

        Raises:
            ValidationError: If conversion fails
        """
        if isinstance(value, bool):
            return value
        elif isinstance(value, (int, float)):
            if value == 0:
                return False
            elif value == 1:
                return True
            else:
                raise ValidationError(f"Cannot convert numeric '{value}' to boolean")
        elif isinstance(value, str):
            if value.lower() in ("true", "1", "yes", "on"):
                return True
            elif value.lower() in ("false", "0", "no", "off"):
                return False
            else:
                raise ValidationError(f"Cannot convert '{value}' to boolean")
        return None

    @staticmethod
    def normalize_importance(value: Any) -> Optional[int]:
        """
        Validate an importance level.

        Args:
            value: 1, 2, 3 (or an Importance member, or its string form)

        Returns:
            The importance as int, or None when not given

        Raises:
            ValidationError: If the value is outside 1..3
        """
        level = DataValidator.normalize_int(value)
        if level is None:
            return None
        if level not in (1, 2, 3):
            raise ValidationError(f"Importance must be 1, 2 or 3, got: {value}")
        return level

    @staticmethod
    def normalize_timestamp(value: Any) -> Optional[str]:
        """
        Normalize a datetime, date or ISO-8601 string to stored timestamp text.

        Naive values are taken as UTC. Dates become midnight UTC.

        Args:
            value: datetime, date, or ISO-8601 string

        Returns:
            Timestamp string or None

        Raises:
            ValidationError: If a string cannot be parsed
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            return format_timestamp(value)
        if isinstance(value, date):
            return format_timestamp(datetime.combine(value, time(), timezone.utc))
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError as e:
                raise ValidationError(f"Invalid timestamp: '{value}'") from e
            return format_timestamp(parsed)
        raise ValidationError(f"Cannot convert {type(value).__name__} to timestamp")
