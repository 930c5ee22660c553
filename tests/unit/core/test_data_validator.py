"""
test_data_validator.py
----------------------
Unit tests for DataValidator and the timestamp helpers.
"""
import re
from datetime import date, datetime, timedelta, timezone

import pytest

from missnote.core.exceptions import ValidationError
from missnote.core.validators import DataValidator, format_timestamp, now_timestamp

STORED_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


class TestTimestamps:
    """Tests for format_timestamp and now_timestamp."""

    def test_naive_datetime_taken_as_utc(self):
        """Naive datetimes are formatted as UTC."""
        assert format_timestamp(datetime(2024, 1, 15, 9, 30, 0, 123456)) == (
            "2024-01-15T09:30:00.123Z"
        )

    def test_aware_datetime_converted_to_utc(self):
        """Aware datetimes are shifted to UTC."""
        tokyo = timezone(timedelta(hours=9))
        value = datetime(2024, 1, 15, 9, 0, tzinfo=tokyo)
        assert format_timestamp(value) == "2024-01-15T00:00:00.000Z"

    def test_now_timestamp_format(self):
        """now_timestamp uses the stored format."""
        assert STORED_FORMAT.match(now_timestamp())


class TestNormalizeTimestamp:
    """Tests for DataValidator.normalize_timestamp."""

    def test_none_and_blank(self):
        """None and blank strings mean 'not given'."""
        assert DataValidator.normalize_timestamp(None) is None
        assert DataValidator.normalize_timestamp("   ") is None

    def test_date_becomes_midnight_utc(self):
        """Dates become midnight UTC."""
        assert DataValidator.normalize_timestamp(date(2024, 3, 1)) == (
            "2024-03-01T00:00:00.000Z"
        )

    def test_iso_string_with_z(self):
        """ISO strings ending in Z are accepted."""
        assert DataValidator.normalize_timestamp("2024-03-01T10:20:30.456Z") == (
            "2024-03-01T10:20:30.456Z"
        )

    def test_iso_string_with_offset(self):
        """Offsets are converted to UTC."""
        assert DataValidator.normalize_timestamp("2024-03-01T09:00:00+09:00") == (
            "2024-03-01T00:00:00.000Z"
        )

    def test_date_only_string(self):
        """Date-only strings become midnight UTC."""
        assert DataValidator.normalize_timestamp("2024-03-01") == "2024-03-01T00:00:00.000Z"

    def test_invalid_string_raises(self):
        """Unparsable strings raise ValidationError."""
        with pytest.raises(ValidationError, match="Invalid timestamp"):
            DataValidator.normalize_timestamp("yesterday-ish")

    def test_unsupported_type_raises(self):
        """Other types raise ValidationError."""
        with pytest.raises(ValidationError):
            DataValidator.normalize_timestamp(12345)


class TestNormalizeImportance:
    """Tests for DataValidator.normalize_importance."""

    @pytest.mark.parametrize("value,expected", [(1, 1), ("2", 2), (3, 3), (None, None)])
    def test_valid_levels(self, value, expected):
        """1..3 (or their string form) are accepted."""
        assert DataValidator.normalize_importance(value) == expected

    @pytest.mark.parametrize("value", [0, 4, -1])
    def test_out_of_range_raises(self, value):
        """Values outside 1..3 raise ValidationError."""
        with pytest.raises(ValidationError, match="Importance must be"):
            DataValidator.normalize_importance(value)

    def test_non_numeric_raises(self):
        """Non-numeric strings raise ValidationError."""
        with pytest.raises(ValidationError):
            DataValidator.normalize_importance("high")


class TestStringAndRequiredFields:
    """Tests for normalize_string and validate_required_fields."""

    def test_normalize_string_trims(self):
        """Strings are trimmed and blank becomes None."""
        assert DataValidator.normalize_string("  数学  ") == "数学"
        assert DataValidator.normalize_string("   ") is None
        assert DataValidator.normalize_string(None) is None

    def test_required_fields_present(self):
        """Present, non-blank fields pass."""
        DataValidator.validate_required_fields({"title": "t", "body": "b"}, ["title", "body"])

    @pytest.mark.parametrize("data", [{"body": "b"}, {"title": "   ", "body": "b"}])
    def test_required_fields_missing_or_blank(self, data):
        """Missing or whitespace-only fields raise ValidationError."""
        with pytest.raises(ValidationError, match="title"):
            DataValidator.validate_required_fields(data, ["title", "body"])

    def test_normalize_bool(self):
        """Common boolean spellings convert."""
        assert DataValidator.normalize_bool("yes") is True
        assert DataValidator.normalize_bool(0) is False
        with pytest.raises(ValidationError):
            DataValidator.normalize_bool("maybe")
