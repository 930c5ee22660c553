#!/usr/bin/env python3
"""
test_query_engine.py
--------------------
Unit tests for QueryEngine search, per-day counts and review windows.
"""
# --- Standard library imports ---
from datetime import datetime, timezone

# --- Third party imports ---
import pytest

# --- Local imports ---
from missnote.core.exceptions import ValidationError
from missnote.database.query_engine import SearchCriteria, review_ranges


@pytest.fixture
def add_mistake(mistake_manager):
    """Factory inserting a mistake and returning its ID."""

    def _add(title="t", body="b", **fields):
        return mistake_manager.insert({"title": title, "body": body, **fields})

    return _add


@pytest.fixture
def sort_fixture(add_mistake):
    """Four mistakes with distinct subject, importance and date combinations."""
    return {
        "a": add_mistake("a", subject="数学", importance=1, occurred_at="2024-01-03T00:00:00Z"),
        "b": add_mistake("b", subject="英語", importance=3, occurred_at="2024-01-01T00:00:00Z"),
        "c": add_mistake("c", subject="化学", importance=3, occurred_at="2024-01-02T00:00:00Z"),
        "d": add_mistake("d", subject="数学", importance=2, occurred_at="2024-01-02T00:00:00Z"),
    }


def _titles(results):
    return [r.mistake.title for r in results]


class TestSearchFilters:
    """Tests for search criteria."""

    def test_no_criteria_returns_everything(self, query_engine, add_mistake):
        """An empty search lists every mistake."""
        add_mistake("one")
        add_mistake("two")
        assert len(query_engine.search()) == 2

    def test_text_matches_title_or_body(self, query_engine, add_mistake):
        """q matches a substring of title or body, ASCII case-insensitively."""
        add_mistake("Sign ERROR", "algebra")
        add_mistake("Units", "forgot to convert the error bars")
        add_mistake("Spelling", "receive")

        results = query_engine.search({"q": "error"})

        assert sorted(_titles(results)) == ["Sign ERROR", "Units"]

    def test_text_wildcards_are_literal(self, query_engine, add_mistake):
        """% and _ in q match themselves only."""
        add_mistake("100% sure", "b")
        add_mistake("1000 sure", "b")
        add_mistake("snake_case", "b")
        add_mistake("snakeXcase", "b")

        assert _titles(query_engine.search({"q": "0%"})) == ["100% sure"]
        assert _titles(query_engine.search({"q": "e_c"})) == ["snake_case"]

    def test_subject_filter_and_all(self, query_engine, sort_fixture):
        """subject narrows to exact matches; ALL means any."""
        assert sorted(_titles(query_engine.search({"subject": "数学"}))) == ["a", "d"]
        assert len(query_engine.search({"subject": "ALL"})) == 4

    def test_importance_filter_and_any(self, query_engine, sort_fixture):
        """importance narrows to exact matches; 0 means any."""
        assert sorted(_titles(query_engine.search({"importance": 3}))) == ["b", "c"]
        assert len(query_engine.search({"importance": 0})) == 4

    def test_date_range_is_half_open(self, query_engine, sort_fixture):
        """from is inclusive and to is exclusive."""
        results = query_engine.search({"from": "2024-01-02", "to": "2024-01-03"})
        assert sorted(_titles(results)) == ["c", "d"]

    def test_filters_combine(self, query_engine, sort_fixture):
        """All given criteria must hold."""
        results = query_engine.search(
            {"subject": "数学", "importance": 2, "from": "2024-01-01"}
        )
        assert _titles(results) == ["d"]

    def test_unknown_sort_raises(self, query_engine):
        """An unknown sort mode raises ValidationError."""
        with pytest.raises(ValidationError, match="Unknown sort mode"):
            query_engine.search({"sort": "random"})


class TestSearchOrdering:
    """Tests for the four sort modes."""

    @pytest.mark.parametrize(
        "sort,expected",
        [
            ("date", ["a", "d", "c", "b"]),
            ("importance", ["c", "b", "d", "a"]),
            ("subject", ["c", "a", "d", "b"]),
            ("review", ["b", "c", "d", "a"]),
        ],
    )
    def test_sort_modes(self, query_engine, sort_fixture, sort, expected):
        """Each sort mode orders with its own tie-breakers."""
        assert _titles(query_engine.search({"sort": sort})) == expected

    def test_default_sort_is_date(self, query_engine, sort_fixture):
        """Without a sort, newest comes first."""
        assert _titles(query_engine.search(SearchCriteria())) == ["a", "d", "c", "b"]


class TestFirstPhoto:
    """Tests for the preview photo on results."""

    def test_first_photo_is_earliest(self, query_engine, add_mistake, photo_manager):
        """Each result carries its earliest photo and appears once."""
        with_photos = add_mistake("with photos")
        add_mistake("without photos")
        photo_manager.insert_batch(with_photos, ["/p/first.jpg", "/p/second.jpg"])
        photo_manager.insert_batch(with_photos, ["/p/third.jpg"])

        results = {r.mistake.title: r.first_photo_uri for r in query_engine.search()}

        assert results == {"with photos": "/p/first.jpg", "without photos": None}


class TestCountByDay:
    """Tests for count_by_day."""

    def test_counts_per_day(self, query_engine, add_mistake):
        """Mistakes are counted per UTC day, honoring the range."""
        add_mistake(occurred_at="2024-01-01T01:00:00Z")
        add_mistake(occurred_at="2024-01-01T23:00:00Z")
        add_mistake(occurred_at="2024-01-02T12:00:00Z")

        assert query_engine.count_by_day() == {"2024-01-01": 2, "2024-01-02": 1}
        assert query_engine.count_by_day(from_="2024-01-02") == {"2024-01-02": 1}


class TestReview:
    """Tests for review windows."""

    NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

    def test_review_ranges(self):
        """Windows are offsets from the start of today."""
        ranges = review_ranges(self.NOW)

        assert ranges["yesterday"] == (
            datetime(2024, 6, 14, tzinfo=timezone.utc),
            datetime(2024, 6, 15, tzinfo=timezone.utc),
        )
        assert ranges["week_ago"][0] == datetime(2024, 6, 7, tzinfo=timezone.utc)
        assert ranges["month_ago"][1] == datetime(2024, 5, 18, tzinfo=timezone.utc)

    def test_review_groups_mistakes(self, query_engine, add_mistake):
        """Mistakes fall into the window their date belongs to."""
        add_mistake("yesterday", occurred_at="2024-06-14T10:00:00Z")
        add_mistake("today", occurred_at="2024-06-15T01:00:00Z")
        add_mistake("week", occurred_at="2024-06-08T09:00:00Z")
        add_mistake("week edge", occurred_at="2024-06-10T00:00:00Z")
        add_mistake("month", occurred_at="2024-05-13T00:00:00Z")
        add_mistake("month low", importance=1, occurred_at="2024-05-14T00:00:00Z")

        windows = query_engine.review(self.NOW)

        assert _titles(windows["yesterday"]) == ["yesterday"]
        assert _titles(windows["week_ago"]) == ["week"]
        assert _titles(windows["month_ago"]) == ["month", "month low"]
